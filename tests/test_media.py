import pytest

from photobook.photos import media


@pytest.mark.parametrize("filename, content_type", [
    ("a.jpg", "image/jpeg"),
    ("a.JPEG", "image/jpg"),
    ("a.png", "image/x-png"),
    ("a.gif", "IMAGE/GIF"),
    ("holiday.photo.png", "image/png"),
])
def test_is_image_accepts(filename, content_type):
    assert media.is_image(filename, content_type)


@pytest.mark.parametrize("filename, content_type", [
    ("notes.txt", "text/plain"),
    ("a.txt", "image/png"),         # extension is not an image one
    ("a.png", "text/plain"),        # declared type is not an image one
    ("a.webp", "image/webp"),
    ("png", "image/png"),           # no extension at all
    ("", "image/png"),
    ("a.png", None),
])
def test_is_image_rejects(filename, content_type):
    assert not media.is_image(filename, content_type)


def test_mime_type_comes_from_extension():
    assert media.mime_type_for("Beach.JPG") == "image/jpeg"
    assert media.mime_type_for("x.jpeg") == "image/jpeg"
    assert media.mime_type_for("x.png") == "image/png"
    assert media.mime_type_for("x.gif") == "image/gif"


def test_mime_type_defaults_for_unknown_extension():
    assert media.mime_type_for("archive.zip") == "application/octet-stream"
    assert media.mime_type_for("README") == "application/octet-stream"
