import os

# Declared content types accepted on upload
ALLOWED_CONTENT_TYPES = {
    "image/jpg",
    "image/jpeg",
    "image/pjpeg",
    "image/gif",
    "image/x-png",
    "image/png",
}

# Extension -> MIME type. The keys double as the accepted upload extensions.
MIME_TYPES = {
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".png": "image/png",
    ".gif": "image/gif",
}

DEFAULT_MIME_TYPE = "application/octet-stream"


def file_extension(filename: str) -> str:
    """Lower-cased extension including the dot, or '' when there is none."""
    return os.path.splitext(filename or "")[1].lower()


def mime_type_for(filename: str) -> str:
    """Resolves a MIME type from the file name alone, never from the bytes."""
    return MIME_TYPES.get(file_extension(filename), DEFAULT_MIME_TYPE)


def is_image(filename: str, content_type: str) -> bool:
    """Both the declared content type and the extension must be image ones."""
    if not filename or not content_type:
        return False
    return content_type.lower() in ALLOWED_CONTENT_TYPES and file_extension(filename) in MIME_TYPES
