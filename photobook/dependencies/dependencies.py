from fastapi import Request
from photobook.storage.dynamodb import DynamoDBService
from photobook.photos.service import PhotoService
from photobook.monitoring.instrumented import InstrumentedPhotoService

def get_dynamodb_service(request: Request) -> DynamoDBService:
    """Dependency provider for DynamoDBService"""
    return request.app.state.db

def get_photo_service(request: Request) -> InstrumentedPhotoService:
    """Dependency provider for the photo pipeline, built from the shared clients"""
    state = request.app.state
    return InstrumentedPhotoService(PhotoService(db=state.db, s3=state.s3, vision=state.vision))
