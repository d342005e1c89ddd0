import boto3
from typing import Optional
from botocore.client import Config as BotoConfig
from botocore.exceptions import ClientError
from photobook.settings import settings
from photobook.exceptions import AlreadyExistsException
from photobook.photos.media import mime_type_for
import logging

log = logging.getLogger(__name__)

# S3 reports a missing object with either of these codes depending on the call
MISSING_OBJECT_CODES = {"404", "NoSuchKey", "NotFound"}

def storage_config() -> BotoConfig:
    """Timeouts and retries shared by the S3 and DynamoDB clients."""
    return BotoConfig(
        connect_timeout=settings.storage_connect_timeout,
        read_timeout=settings.storage_read_timeout,
        retries={"max_attempts": settings.storage_max_attempts, "mode": "standard"},
    )

def is_missing(error: ClientError) -> bool:
    return str(error.response.get("Error", {}).get("Code")) in MISSING_OBJECT_CODES

# -------------------------
# S3 Service
# -------------------------
class S3Service:
    """Blob store for photo binaries. Every key is lower-cased before use."""

    def __init__(self):
        session = boto3.session.Session(region_name=settings.aws_region)
        kwargs = {
            "aws_access_key_id": settings.aws_access_key_id,
            "aws_secret_access_key": settings.aws_secret_access_key,
            "config": storage_config(),
        }
        if settings.aws_endpoint_url:
            kwargs["endpoint_url"] = settings.aws_endpoint_url

        self.bucket = settings.s3_bucket
        self.client = session.client("s3", **kwargs)
        log.info("Initialized S3 client")

        # Ensure bucket exists at initialization
        self.ensure_bucket()

    def ensure_bucket(self):
        try:
            self.client.head_bucket(Bucket=self.bucket)
            log.debug("Bucket %s already exists", self.bucket)
        except ClientError as e:
            if is_missing(e):
                create_params = {"Bucket": self.bucket}
                if settings.aws_region != "us-east-1":
                    create_params["CreateBucketConfiguration"] = {"LocationConstraint": settings.aws_region}
                self.client.create_bucket(**create_params)
                log.info("Created bucket %s", self.bucket)
            else:
                log.error("Failed to check/create bucket: %s", e)
                raise

    def exists(self, key: str) -> bool:
        try:
            self.client.head_object(Bucket=self.bucket, Key=key.lower())
            return True
        except ClientError as e:
            if is_missing(e):
                return False
            raise

    def save(self, key: str, fileobj, overwrite: bool = False):
        """Writes fileobj from its start. Refuses to replace an object unless overwrite is set."""
        key = key.lower()
        if not overwrite and self.exists(key):
            raise AlreadyExistsException(key)

        fileobj.seek(0)
        self.client.upload_fileobj(
            Fileobj=fileobj,
            Bucket=self.bucket,
            Key=key,
            ExtraArgs={"ContentType": mime_type_for(key)},
        )
        log.debug("Uploaded %s to s3://%s/%s", key, self.bucket, key)

    def read(self, key: str) -> Optional[object]:
        """Returns the object body as a stream, or None when there is no such key."""
        try:
            resp = self.client.get_object(Bucket=self.bucket, Key=key.lower())
        except ClientError as e:
            if is_missing(e):
                log.debug("s3://%s/%s does not exist", self.bucket, key.lower())
                return None
            raise
        return resp["Body"]

    def delete(self, key: str):
        # delete_object succeeds for a missing key
        self.client.delete_object(Bucket=self.bucket, Key=key.lower())
        log.debug("Deleted s3://%s/%s", self.bucket, key.lower())

    def close(self):
        self.client.close()
        log.info("Closed S3 client")
