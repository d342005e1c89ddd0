from fastapi import APIRouter, Depends, UploadFile, File, Request, Response
from fastapi.responses import StreamingResponse
from starlette.background import BackgroundTask
from starlette.datastructures import UploadFile as StarletteUploadFile
from typing import List, Optional, Union
import logging

from photobook.storage.dynamodb import DynamoDBService
from photobook.dependencies.dependencies import get_photo_service, get_dynamodb_service
from photobook.monitoring.instrumented import InstrumentedPhotoService
from photobook.photos.listing import list_photos
from photobook.photos.models import Photo
from photobook.exceptions import InvalidInputException

log = logging.getLogger(__name__)

router = APIRouter(
    prefix="/photos",
    tags=["photos"]
)

# Read size for streamed photo content
CHUNK_SIZE = 64 * 1024

@router.get("", response_model=List[Photo])
def get_photos(db: DynamoDBService = Depends(get_dynamodb_service)):
    """Lists all photos ordered by original file name."""
    photos = list_photos(db)
    log.info("Loaded %d photos", len(photos))
    return photos

@router.get(
    "/{photo_id}",
    name="get_photo",
    responses={200: {"content": {"image/*": {}}}, 404: {"description": "Photo or its content not found"}},
)
def get_photo(photo_id: str, service: InstrumentedPhotoService = Depends(get_photo_service)):
    """Streams the photo content with the content type of its original file name."""
    stream, mime_type = service.fetch_content(photo_id)
    return StreamingResponse(
        stream.iter_chunks(CHUNK_SIZE),
        media_type=mime_type,
        background=BackgroundTask(stream.close),
    )

@router.post("", response_model=Photo, status_code=201)
def upload_photo(
    request: Request,
    response: Response,
    file: Optional[Union[UploadFile, str]] = File(None),
    service: InstrumentedPhotoService = Depends(get_photo_service),
):
    """Uploads a photo, captions it and records its metadata."""
    content_type = request.headers.get("content-type", "")
    if not content_type.lower().startswith("multipart/form-data"):
        raise InvalidInputException("Request must be multipart/form-data")
    # a "file" part sent as a plain form value arrives as str
    if not isinstance(file, StarletteUploadFile) or not file.filename:
        raise InvalidInputException("No file was uploaded")

    photo = service.create(file.filename, file.content_type, file.file)

    response.headers["Location"] = str(request.url_for("get_photo", photo_id=photo.id))
    # Add security header
    response.headers["X-Content-Type-Options"] = "nosniff"
    return photo

@router.delete("/{photo_id}", status_code=204)
def delete_photo(photo_id: str, service: InstrumentedPhotoService = Depends(get_photo_service)):
    """Deletes a photo's content and then its metadata."""
    service.delete(photo_id)
    return Response(status_code=204)
