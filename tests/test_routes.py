import io
import uuid
import httpx
from PIL import Image

from photobook.main import app


def make_png_bytes():
    img = Image.new("RGB", (10, 10), color="blue")
    buf = io.BytesIO()
    img.save(buf, format="PNG")
    return buf.getvalue()


def make_jpeg_bytes():
    img = Image.new("RGB", (10, 10), color="green")
    buf = io.BytesIO()
    img.save(buf, format="JPEG")
    return buf.getvalue()


def upload(client, filename, data, content_type):
    return client.post("/photos", files={"file": (filename, data, content_type)})


def bucket_keys():
    s3 = app.state.s3
    resp = s3.client.list_objects_v2(Bucket=s3.bucket)
    return [obj["Key"] for obj in resp.get("Contents", [])]


# ------------------------------
# /photos [POST]
# ------------------------------

def test_upload_photo_success(test_client):
    resp = upload(test_client, "Holiday.PNG", make_png_bytes(), "image/png")

    assert resp.status_code == 201
    body = resp.json()
    assert body["original_filename"] == "Holiday.PNG"
    assert body["storage_key"] == f"{body['id']}.png"
    assert body["description"] == "a red square"
    assert body["uploaded_at"]
    assert resp.headers["Location"].endswith(f"/photos/{body['id']}")
    assert bucket_keys() == [body["storage_key"]]


def test_upload_survives_analysis_failure(test_client, vision_stub):
    vision_stub.error = httpx.ConnectError("analyzer unreachable")

    resp = upload(test_client, "a.png", make_png_bytes(), "image/png")

    assert resp.status_code == 201
    assert resp.json()["description"] is None


def test_upload_without_captions(test_client, vision_stub):
    vision_stub.captions = []
    resp = upload(test_client, "a.png", make_png_bytes(), "image/png")
    assert resp.status_code == 201
    assert resp.json()["description"] is None


def test_upload_invalid_file_type(test_client):
    resp = upload(test_client, "f.txt", b"notimg", "text/plain")

    assert resp.status_code == 400
    assert test_client.get("/photos").json() == []
    assert bucket_keys() == []


def test_upload_mismatched_extension(test_client):
    resp = upload(test_client, "f.txt", make_png_bytes(), "image/png")
    assert resp.status_code == 400


def test_upload_not_multipart(test_client):
    resp = test_client.post("/photos", json={"file": "a.png"})
    assert resp.status_code == 400


def test_upload_without_file(test_client):
    resp = test_client.post(
        "/photos",
        content=b"--xyz\r\nContent-Disposition: form-data; name=\"other\"\r\n\r\nvalue\r\n--xyz--\r\n",
        headers={"Content-Type": "multipart/form-data; boundary=xyz"},
    )
    assert resp.status_code == 400


def test_upload_file_field_without_filename(test_client):
    resp = test_client.post("/photos", files={"file": (None, "not a file")})

    assert resp.status_code == 400
    assert resp.json() == {"detail": "No file was uploaded"}
    assert test_client.get("/photos").json() == []
    assert bucket_keys() == []


def test_upload_storage_failure_leaves_no_record(test_client, mocker):
    from botocore.exceptions import EndpointConnectionError
    mocker.patch.object(
        app.state.s3.client, "upload_fileobj",
        side_effect=EndpointConnectionError(endpoint_url="http://s3"),
    )

    resp = upload(test_client, "a.png", make_png_bytes(), "image/png")

    assert resp.status_code == 502
    assert test_client.get("/photos").json() == []


def test_same_name_uploads_do_not_collide(test_client):
    first = upload(test_client, "photo.JPG", make_jpeg_bytes(), "image/jpeg").json()
    second = upload(test_client, "photo.jpg", make_jpeg_bytes(), "image/jpeg").json()

    assert first["id"] != second["id"]
    assert first["storage_key"] != second["storage_key"]
    assert sorted(bucket_keys()) == sorted([first["storage_key"], second["storage_key"]])


# ------------------------------
# /photos/{id} [GET + DELETE]
# ------------------------------

def test_round_trip(test_client):
    data = make_jpeg_bytes()
    photo_id = upload(test_client, "cat.jpeg", data, "image/jpeg").json()["id"]

    resp = test_client.get(f"/photos/{photo_id}")

    assert resp.status_code == 200
    assert resp.content == data
    assert resp.headers["content-type"] == "image/jpeg"


def test_get_and_delete_photo(test_client):
    photo = upload(test_client, "g.png", make_png_bytes(), "image/png").json()

    delete = test_client.delete(f"/photos/{photo['id']}")
    assert delete.status_code == 204

    assert test_client.get(f"/photos/{photo['id']}").status_code == 404
    assert test_client.delete(f"/photos/{photo['id']}").status_code == 404
    assert bucket_keys() == []


def test_get_photo_with_missing_blob(test_client):
    photo = upload(test_client, "g.png", make_png_bytes(), "image/png").json()
    app.state.s3.client.delete_object(Bucket=app.state.s3.bucket, Key=photo["storage_key"])

    resp = test_client.get(f"/photos/{photo['id']}")

    assert resp.status_code == 404


def test_delete_photo_with_missing_blob(test_client):
    photo = upload(test_client, "g.png", make_png_bytes(), "image/png").json()
    app.state.s3.client.delete_object(Bucket=app.state.s3.bucket, Key=photo["storage_key"])

    assert test_client.delete(f"/photos/{photo['id']}").status_code == 204
    assert test_client.get("/photos").json() == []


def test_get_nonexistent_photo(test_client):
    assert test_client.get(f"/photos/{uuid.uuid4()}").status_code == 404
    assert test_client.get("/photos/nope").status_code == 404


def test_delete_nonexistent_photo(test_client):
    upload(test_client, "keep.png", make_png_bytes(), "image/png")

    assert test_client.delete(f"/photos/{uuid.uuid4()}").status_code == 404
    assert test_client.delete("/photos/nope").status_code == 404
    assert len(test_client.get("/photos").json()) == 1
    assert len(bucket_keys()) == 1


# ------------------------------
# /photos [GET list]
# ------------------------------

def test_list_photos_ordered_by_filename(test_client):
    upload(test_client, "b.jpg", make_jpeg_bytes(), "image/jpeg")
    upload(test_client, "a.png", make_png_bytes(), "image/png")
    upload(test_client, "c.gif", b"GIF89a", "image/gif")

    resp = test_client.get("/photos")

    assert resp.status_code == 200
    assert [p["original_filename"] for p in resp.json()] == ["a.png", "b.jpg", "c.gif"]


def test_list_photos_empty(test_client):
    resp = test_client.get("/photos")
    assert resp.status_code == 200
    assert resp.json() == []


# ------------------------------
# misc
# ------------------------------

def test_health(test_client):
    resp = test_client.get("/")
    assert resp.status_code == 200


def test_metrics_endpoint(test_client):
    upload(test_client, "a.png", make_png_bytes(), "image/png")
    resp = test_client.get("/metrics")
    assert resp.status_code == 200
    assert "photobook_operations_total" in resp.text
