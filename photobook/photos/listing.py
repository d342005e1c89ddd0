from typing import List
import logging
from botocore.exceptions import BotoCoreError, ClientError

from photobook.storage.dynamodb import DynamoDBService
from photobook.photos.models import Photo
from photobook.exceptions import MetadataStoreException

log = logging.getLogger(__name__)

def list_photos(db: DynamoDBService) -> List[Photo]:
    """All photo records, ordered by original file name."""
    try:
        items = db.list_photos()
    except (BotoCoreError, ClientError) as e:
        log.error(f"DynamoDB list_photos failed: {e}")
        raise MetadataStoreException(f"Failed to list photos: {e}")
    return [Photo.from_item(it) for it in items]
