from typing import Optional
from datetime import datetime, timezone
from pydantic import BaseModel, Field
from uuid import uuid4

ORIGINAL_FILENAME_MAX_LENGTH = 256
STORAGE_KEY_MAX_LENGTH = 512
DESCRIPTION_MAX_LENGTH = 4000

def new_photo_id() -> str:
    """Generates a new unique photo ID."""
    return str(uuid4())

def utc_now() -> datetime:
    return datetime.now(timezone.utc)

class Photo(BaseModel):
    id: str = Field(default_factory=new_photo_id)
    original_filename: str = Field(..., min_length=1, max_length=ORIGINAL_FILENAME_MAX_LENGTH)
    storage_key: str = Field(..., min_length=1, max_length=STORAGE_KEY_MAX_LENGTH)
    description: Optional[str] = Field(None, max_length=DESCRIPTION_MAX_LENGTH)
    uploaded_at: datetime = Field(default_factory=utc_now)

    def to_item(self) -> dict:
        """Serializes the record for DynamoDB."""
        item = self.model_dump()
        # Dynamo needs uploaded_at as ISO string
        item["uploaded_at"] = item["uploaded_at"].isoformat()
        # no caption -> no attribute
        if item["description"] is None:
            del item["description"]
        return item

    @classmethod
    def from_item(cls, item: dict) -> "Photo":
        return cls(
            id=item["id"],
            original_filename=item["original_filename"],
            storage_key=item["storage_key"],
            description=item.get("description"),
            uploaded_at=datetime.fromisoformat(item["uploaded_at"]),
        )

class Caption(BaseModel):
    """A caption candidate returned by the analyzer."""
    text: str
    confidence: float = 0.0
