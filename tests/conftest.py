"""
Pytest configuration and fixtures for the test suite.

MongoDB is replaced by an in-memory fake that mimics the parts of the motor
API the collection store uses; S3 runs against moto's mock_aws.
"""

import os
from typing import AsyncGenerator

import boto3
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from moto import mock_aws

# Credentials for moto; never real ones.
os.environ.setdefault("AWS_ACCESS_KEY_ID", "testing")
os.environ.setdefault("AWS_SECRET_ACCESS_KEY", "testing")
os.environ.setdefault("AWS_DEFAULT_REGION", "us-east-1")

from item_vault.api.main import create_app  # noqa: E402
from item_vault.core.config import Settings  # noqa: E402
from item_vault.db.mongo import MongoStore  # noqa: E402
from item_vault.services.blob_store import LocalBlobStore, S3BlobStore  # noqa: E402
from tests.utils.fakes import TEST_BUCKET, TEST_REGION, FakeMotorClient, make_settings  # noqa: E402


# =============================================================================
# Settings and stores
# =============================================================================

@pytest.fixture
def settings() -> Settings:
    return make_settings()


@pytest.fixture
def mongo_client() -> FakeMotorClient:
    return FakeMotorClient()


@pytest.fixture
def mongo(settings: Settings, mongo_client: FakeMotorClient) -> MongoStore:
    return MongoStore(settings, client_factory=lambda: mongo_client)


@pytest.fixture
def s3_client():
    """A moto-backed S3 client with the test bucket created."""
    with mock_aws():
        client = boto3.client("s3", region_name=TEST_REGION)
        client.create_bucket(Bucket=TEST_BUCKET)
        yield client


@pytest.fixture
def s3_blob_store(s3_client) -> S3BlobStore:
    return S3BlobStore(
        bucket=TEST_BUCKET,
        region=TEST_REGION,
        access_key="testing",
        secret_key="testing",
    )


@pytest.fixture
def local_blob_store(tmp_path) -> LocalBlobStore:
    return LocalBlobStore(str(tmp_path / "scratch"))


# =============================================================================
# Application Fixtures
# =============================================================================

@pytest.fixture
def app(settings, mongo, s3_blob_store):
    """Application wired to the fake MongoDB and moto S3."""
    return create_app(settings=settings, mongo=mongo, blob_store=s3_blob_store)


@pytest.fixture
def degraded_app(tmp_path, mongo):
    """Application without S3 credentials: uploads go to a scratch directory."""
    settings = make_settings(S3_BUCKET_NAME=None, LOCAL_UPLOAD_DIR=str(tmp_path / "scratch"))
    return create_app(settings=settings, mongo=mongo)


@pytest_asyncio.fixture
async def async_client(app) -> AsyncGenerator[AsyncClient, None]:
    """Create an async HTTP client for API testing."""
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client


@pytest_asyncio.fixture
async def degraded_client(degraded_app) -> AsyncGenerator[AsyncClient, None]:
    async with AsyncClient(transport=ASGITransport(app=degraded_app), base_url="http://test") as client:
        yield client
