from pydantic_settings import BaseSettings
from typing import Optional

class Settings(BaseSettings):
    # field names map to upper-case environment variables, e.g. S3_BUCKET
    aws_region: str = "us-east-1"
    s3_bucket: str = "photobook"
    dynamodb_table: str = "Photos"
    aws_endpoint_url: Optional[str] = None

    aws_access_key_id: str = "test"
    aws_secret_access_key: str = "test"

    # botocore transport limits, a hung backend must fail instead of blocking
    storage_connect_timeout: float = 5.0
    storage_read_timeout: float = 30.0
    storage_max_attempts: int = 3

    # Computer Vision; captions are skipped when no endpoint is configured
    vision_endpoint: Optional[str] = None
    vision_api_key: Optional[str] = None
    vision_api_version: str = "v3.2"
    vision_language: str = "en"
    vision_timeout_seconds: float = 30.0

    app_title: str = "Photobook"
    log_level: str = "INFO"

    class Config:
        env_file = ".env"
        extra = "allow"  # tolerate unknown vars if needed

settings = Settings()
