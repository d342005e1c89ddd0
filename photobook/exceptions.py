"""
    Centralized exception handling for the FastAPI application.
"""
from fastapi import Request, HTTPException
from fastapi.responses import JSONResponse
import logging

log = logging.getLogger(__name__)

class APIException(Exception):
    """Base class for API exceptions."""
    def __init__(self, status_code: int, detail: str):
        self.status_code = status_code
        self.detail = detail
        super().__init__(self.detail)

class InvalidInputException(APIException):
    """Exception for uploads that are not an accepted image."""
    def __init__(self, detail: str):
        super().__init__(status_code=400, detail=detail)

class PhotoNotFoundException(APIException):
    """Exception for when a photo is not found."""
    def __init__(self, photo_id: str, detail: str = None):
        self.photo_id = photo_id
        super().__init__(status_code=404, detail=detail or f"Photo with ID '{photo_id}' not found.")

class ConflictingStateException(PhotoNotFoundException):
    """The metadata record exists but its blob is gone."""
    def __init__(self, photo_id: str, storage_key: str):
        self.storage_key = storage_key
        super().__init__(photo_id, detail=f"Content of photo '{photo_id}' is missing from storage.")

class AlreadyExistsException(APIException):
    """Exception for a key that is already taken in a store."""
    def __init__(self, key: str):
        self.key = key
        super().__init__(status_code=409, detail=f"'{key}' already exists.")

class UpstreamFailureException(APIException):
    """Exception for a storage backend that is unreachable or erroring."""
    def __init__(self, detail: str):
        super().__init__(status_code=502, detail=detail)

class BlobStoreException(UpstreamFailureException):
    """Exception for S3 failures."""

class MetadataStoreException(UpstreamFailureException):
    """Exception for DynamoDB failures."""

async def api_exception_handler(request: Request, exc: APIException):
    """Handles API exceptions. Client errors are logged without a traceback."""
    if exc.status_code >= 500:
        log.error(f"API Exception: {exc.detail}", exc_info=exc)
    else:
        log.warning("API Exception: %s", exc.detail)
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail},
    )

async def http_exception_handler(request: Request, exc: HTTPException):
    """Handles FastAPI HTTP exceptions."""
    log.error(f"HTTP Exception: {exc.detail}", exc_info=exc)
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail},
    )

async def generic_exception_handler(request: Request, exc: Exception):
    """Handles all other exceptions."""
    log.error(f"Unhandled Exception: {str(exc)}", exc_info=exc)
    return JSONResponse(
        status_code=500,
        content={"detail": "An unexpected error occurred."},
    )

def add_exception_handlers(app):
    """Adds exception handlers to the FastAPI app."""
    app.add_exception_handler(APIException, api_exception_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(Exception, generic_exception_handler)
