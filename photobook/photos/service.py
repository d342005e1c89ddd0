from typing import Tuple
import logging
import uuid
from botocore.exceptions import BotoCoreError, ClientError

from photobook.storage.dynamodb import DynamoDBService
from photobook.storage.s3 import S3Service
from photobook.analysis.vision import VisionService
from photobook.photos.models import Photo, DESCRIPTION_MAX_LENGTH, ORIGINAL_FILENAME_MAX_LENGTH, new_photo_id
from photobook.photos.media import is_image, file_extension, mime_type_for
from photobook.exceptions import (
    InvalidInputException,
    PhotoNotFoundException,
    ConflictingStateException,
    AlreadyExistsException,
    BlobStoreException,
    MetadataStoreException,
)

log = logging.getLogger(__name__)

def storage_key_for(photo_id: str, filename: str) -> str:
    """Blob name for a photo: its id plus the original extension, lower-cased."""
    return f"{photo_id}{file_extension(filename)}".lower()

def normalize_photo_id(photo_id: str) -> str:
    """Canonical form of a photo id. Anything that is not a UUID cannot exist."""
    try:
        return str(uuid.UUID(str(photo_id)))
    except ValueError:
        raise PhotoNotFoundException(photo_id)

class PhotoService:
    """
        Create, fetch and delete for a single photo.

        The blob store and the metadata store are kept consistent by ordering
        alone: on create the blob is written before the record, on delete the
        blob is removed before the record. A record is therefore never visible
        without its blob unless a delete failed half way.
    """

    def __init__(self, db: DynamoDBService, s3: S3Service, vision: VisionService):
        self.db = db
        self.s3 = s3
        self.vision = vision

    def create(self, filename: str, content_type: str, fileobj) -> Photo:
        """Validates, captions, stores the binary and then records the metadata."""
        if not is_image(filename, content_type):
            raise InvalidInputException(
                f"Unsupported file '{filename}' with content type '{content_type}'"
            )
        if len(filename) > ORIGINAL_FILENAME_MAX_LENGTH:
            raise InvalidInputException(
                f"File name is longer than {ORIGINAL_FILENAME_MAX_LENGTH} characters"
            )

        photo_id = new_photo_id()
        storage_key = storage_key_for(photo_id, filename)

        caption = self.vision.describe(fileobj)
        description = caption.text[:DESCRIPTION_MAX_LENGTH] if caption else None

        photo = Photo(
            id=photo_id,
            original_filename=filename,
            storage_key=storage_key,
            description=description,
        )

        try:
            self.s3.save(storage_key, fileobj)
        except (BotoCoreError, ClientError) as e:
            log.error(f"S3 upload failed: {e}")
            raise BlobStoreException(f"Failed to store photo content: {e}")

        try:
            self.db.insert_photo(photo.to_item())
        except AlreadyExistsException:
            self._discard_blob(storage_key)
            raise
        except (BotoCoreError, ClientError) as e:
            log.error(f"DynamoDB insert_photo failed: {e}")
            self._discard_blob(storage_key)
            raise MetadataStoreException(f"Failed to save photo metadata: {e}")

        log.info("Saved photo %s as %s", photo.id, storage_key)
        return photo

    def _discard_blob(self, storage_key: str):
        """Removes the blob of an upload whose record could not be written."""
        try:
            self.s3.delete(storage_key)
        except (BotoCoreError, ClientError) as e:
            log.error(f"Orphan blob {storage_key} left behind, cleanup failed: {e}")

    def get_photo(self, photo_id: str) -> Photo:
        """Gets photo metadata from DynamoDB."""
        photo_id = normalize_photo_id(photo_id)
        try:
            item = self.db.get_photo(photo_id)
        except (BotoCoreError, ClientError) as e:
            log.error(f"DynamoDB get_photo failed: {e}")
            raise MetadataStoreException(f"Failed to get photo metadata: {e}")
        if not item:
            raise PhotoNotFoundException(photo_id)
        return Photo.from_item(item)

    def fetch_content(self, photo_id: str) -> Tuple[object, str]:
        """Returns the binary stream and the MIME type derived from the original file name."""
        photo = self.get_photo(photo_id)
        mime_type = mime_type_for(photo.original_filename)

        try:
            stream = self.s3.read(photo.storage_key)
        except (BotoCoreError, ClientError) as e:
            log.error(f"S3 read failed: {e}")
            raise BlobStoreException(f"Failed to read photo content: {e}")

        if stream is None:
            log.error("Store divergence: photo %s has no blob at %s", photo.id, photo.storage_key)
            raise ConflictingStateException(photo.id, photo.storage_key)
        return stream, mime_type

    def delete(self, photo_id: str):
        """Removes the blob first, then the metadata record."""
        photo = self.get_photo(photo_id)

        try:
            self.s3.delete(photo.storage_key)
        except (BotoCoreError, ClientError) as e:
            log.error(f"S3 delete failed: {e}")
            raise BlobStoreException(f"Failed to delete photo content: {e}")

        try:
            self.db.delete_photo(photo.id)
        except (BotoCoreError, ClientError) as e:
            log.error(f"DynamoDB delete_photo failed: {e}")
            raise MetadataStoreException(f"Failed to delete photo metadata: {e}")

        log.info("Deleted photo %s", photo.id)
