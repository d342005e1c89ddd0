import boto3
from typing import Optional, Dict, Any, List
from botocore.exceptions import ClientError
from photobook.settings import settings
from photobook.exceptions import AlreadyExistsException
from photobook.storage.s3 import storage_config
import logging

log = logging.getLogger(__name__)

# -------------------------
# DynamoDB Service
# -------------------------
class DynamoDBService:
    """Metadata store for photo records, one item per photo keyed by id."""

    def __init__(self):
        session = boto3.session.Session(region_name=settings.aws_region)
        kwargs = {
            "aws_access_key_id": settings.aws_access_key_id,
            "aws_secret_access_key": settings.aws_secret_access_key,
            "config": storage_config(),
        }
        if settings.aws_endpoint_url:
            kwargs["endpoint_url"] = settings.aws_endpoint_url

        self.resource = session.resource("dynamodb", **kwargs)
        self.table = self.resource.Table(settings.dynamodb_table)
        log.info("Initialized DynamoDB resource")

        # Ensure table exists at initialization
        self.ensure_table()

    # Refer here: https://boto3.amazonaws.com/v1/documentation/api/latest/reference/services/dynamodb/client/create_table.html
    def ensure_table(self):
        try:
            self.table.load()
        except ClientError as e:
            if e.response["Error"]["Code"] != "ResourceNotFoundException":
                raise
            self.table = self.resource.create_table(
                TableName=settings.dynamodb_table,
                KeySchema=[{"AttributeName": "id", "KeyType": "HASH"}],
                AttributeDefinitions=[{"AttributeName": "id", "AttributeType": "S"}],
                BillingMode="PAY_PER_REQUEST",
            )
            self.table.wait_until_exists()
            log.info("Created table %s", settings.dynamodb_table)

    def insert_photo(self, item: Dict[str, Any]):
        """Adds a new item. The id must not be in the table yet."""
        try:
            self.table.put_item(
                Item=item,
                ConditionExpression="attribute_not_exists(#id)",
                ExpressionAttributeNames={"#id": "id"},
            )
        except ClientError as e:
            if e.response["Error"]["Code"] == "ConditionalCheckFailedException":
                raise AlreadyExistsException(item["id"])
            raise
        log.debug("Inserted metadata %s", item["id"])

    def get_photo(self, photo_id: str) -> Optional[Dict[str, Any]]:
        resp = self.table.get_item(Key={"id": photo_id}, ConsistentRead=True)
        return resp.get("Item")

    def delete_photo(self, photo_id: str):
        self.table.delete_item(Key={"id": photo_id})
        log.debug("Deleted metadata %s", photo_id)

    def list_photos(self) -> List[Dict[str, Any]]:
        """
            Scans the whole table, following LastEvaluatedKey, and returns the
            items ordered by original_filename. The sort is ordinal so upper-case
            names come before lower-case ones; uploaded_at and id break ties.
        """
        items = []
        scan_kwargs = {"ConsistentRead": True}
        while True:
            resp = self.table.scan(**scan_kwargs)
            items.extend(resp.get("Items", []))
            last_key = resp.get("LastEvaluatedKey")
            if not last_key:
                break
            scan_kwargs["ExclusiveStartKey"] = last_key
        items.sort(key=lambda it: (it["original_filename"], it.get("uploaded_at", ""), it["id"]))
        return items

    def close(self):
        self.resource.meta.client.close()
        log.info("Closed DynamoDB resource")
