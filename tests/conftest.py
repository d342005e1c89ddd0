import os
import pytest
import httpx
from moto import mock_aws
from fastapi.testclient import TestClient

# Set test environment variable BEFORE importing app modules
os.environ["TESTING"] = "true"

# Dummy AWS credentials for moto
os.environ["AWS_ACCESS_KEY_ID"] = "testing"
os.environ["AWS_SECRET_ACCESS_KEY"] = "testing"
os.environ["AWS_SECURITY_TOKEN"] = "testing"
os.environ["AWS_SESSION_TOKEN"] = "testing"
os.environ["AWS_REGION"] = "us-east-1"
os.environ["S3_BUCKET"] = "photobook-test"
os.environ["DYNAMODB_TABLE"] = "Photos"
# Clear the endpoints so moto mocks are used instead of localstack / a real analyzer
os.environ.pop("AWS_ENDPOINT_URL", None)
os.environ.pop("VISION_ENDPOINT", None)

from photobook.main import app
from photobook.storage.s3 import S3Service
from photobook.storage.dynamodb import DynamoDBService
from photobook.analysis.vision import VisionService
from photobook.monitoring.instrumented import InstrumentedVisionService


class VisionStub:
    """httpx transport handler standing in for the Computer Vision API."""

    def __init__(self):
        self.status_code = 200
        self.captions = [
            {"text": "a small square", "confidence": 0.41},
            {"text": "a red square", "confidence": 0.93},
        ]
        self.error = None
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        return httpx.Response(
            self.status_code,
            json={"description": {"tags": ["square"], "captions": self.captions}},
        )


@pytest.fixture(scope="function")
def aws_credentials():
    """Mocked AWS Credentials for moto."""
    os.environ["AWS_ACCESS_KEY_ID"] = "testing"
    os.environ["AWS_SECRET_ACCESS_KEY"] = "testing"
    os.environ["AWS_SECURITY_TOKEN"] = "testing"
    os.environ["AWS_SESSION_TOKEN"] = "testing"


@pytest.fixture(scope="function")
def aws(aws_credentials):
    with mock_aws():
        yield


@pytest.fixture(scope="function")
def s3_service(aws):
    return S3Service()


@pytest.fixture(scope="function")
def dynamodb_service(aws):
    return DynamoDBService()


@pytest.fixture(scope="function")
def vision_stub():
    return VisionStub()


@pytest.fixture(scope="function")
def vision_service(vision_stub):
    client = httpx.Client(
        base_url="https://vision.test",
        transport=httpx.MockTransport(vision_stub),
    )
    return VisionService(client=client)


@pytest.fixture(scope="function")
def test_client(aws, vision_service):
    # lifespan creates the bucket and table inside the moto context
    with TestClient(app) as client:
        app.state.vision = InstrumentedVisionService(vision_service)
        yield client
