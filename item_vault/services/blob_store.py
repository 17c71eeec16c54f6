"""
Blob storage for uploaded files.

Two implementations share the BlobStore interface:

- S3BlobStore writes objects to an S3 bucket and hands out signed GET URLs.
- LocalBlobStore is the degraded mode used when S3 credentials or the bucket
  name are missing. Uploads are written to a scratch directory, and any
  operation that needs object storage (signed URLs, deletes) raises
  ConfigurationError instead of silently doing nothing.

boto3 is synchronous; its calls are pushed to the threadpool so request
handlers only suspend while waiting on S3.
"""

import os
import re
import time
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO, Optional
from urllib.parse import quote

import aiofiles
import boto3
from boto3.exceptions import S3UploadFailedError
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError
from starlette.concurrency import run_in_threadpool

from ..core.config import Settings
from ..core.errors import ConfigurationError, StoreError
from ..core.logger import get_logger

_logger = get_logger(__name__)

S3_NOT_CONFIGURED = "AWS S3 not configured. Check environment variables."
_CHUNK = 1024 * 1024
_UNSAFE_NAME_CHARS = re.compile(r"[\\/\x00-\x1f]")


# PUBLIC_INTERFACE
@dataclass
class StoredObject:
    """Result of putting an upload into the blob store."""
    key: str
    location: str
    size: int
    content_type: Optional[str]
    original_name: str


def _timestamped_key(prefix: str, suggested_name: str) -> str:
    name = _UNSAFE_NAME_CHARS.sub("_", suggested_name or "") or "unnamed"
    return f"{prefix}{int(time.time() * 1000)}-{name}"


# PUBLIC_INTERFACE
class BlobStore:
    """Interface shared by the S3 and local implementations."""

    configured: bool = False

    async def put_object(
        self, fileobj: BinaryIO, suggested_name: str, content_type: Optional[str] = None
    ) -> StoredObject:
        raise NotImplementedError

    async def signed_get_url(self, key: str, ttl_seconds: int = 60) -> str:
        raise NotImplementedError

    async def delete_object(self, key: str) -> None:
        raise NotImplementedError


# PUBLIC_INTERFACE
class S3BlobStore(BlobStore):
    """Blob store backed by an S3 bucket."""

    configured = True

    def __init__(
        self,
        bucket: str,
        region: str,
        access_key: Optional[str] = None,
        secret_key: Optional[str] = None,
        key_prefix: str = "uploads/",
        endpoint_url: Optional[str] = None,
    ):
        self.bucket = bucket
        self.region = region
        self.key_prefix = key_prefix
        self.endpoint_url = endpoint_url
        self._s3 = boto3.client(
            "s3",
            region_name=region,
            aws_access_key_id=access_key,
            aws_secret_access_key=secret_key,
            endpoint_url=endpoint_url,
            config=Config(signature_version="s3v4"),
        )

    def object_url(self, key: str) -> str:
        """Public location of an object (virtual-hosted style)."""
        if self.endpoint_url:
            return f"{self.endpoint_url.rstrip('/')}/{self.bucket}/{quote(key)}"
        return f"https://{self.bucket}.s3.{self.region}.amazonaws.com/{quote(key)}"

    async def put_object(
        self, fileobj: BinaryIO, suggested_name: str, content_type: Optional[str] = None
    ) -> StoredObject:
        key = _timestamped_key(self.key_prefix, suggested_name)
        extra = {"Metadata": {"fieldName": "file"}}
        if content_type:
            extra["ContentType"] = content_type

        fileobj.seek(0, os.SEEK_END)
        size = fileobj.tell()
        fileobj.seek(0)
        try:
            await run_in_threadpool(self._s3.upload_fileobj, fileobj, self.bucket, key, ExtraArgs=extra)
        except (BotoCoreError, ClientError, S3UploadFailedError) as exc:
            _logger.error("S3 upload failed.", exc_info=exc, extra={"key": key})
            raise StoreError(f"S3 upload failed: {exc}") from exc

        _logger.info("Stored object in S3.", extra={"key": key, "size": size})
        return StoredObject(
            key=key,
            location=self.object_url(key),
            size=size,
            content_type=content_type,
            original_name=suggested_name,
        )

    async def signed_get_url(self, key: str, ttl_seconds: int = 60) -> str:
        try:
            return await run_in_threadpool(
                self._s3.generate_presigned_url,
                "get_object",
                Params={"Bucket": self.bucket, "Key": key},
                ExpiresIn=ttl_seconds,
            )
        except (BotoCoreError, ClientError) as exc:
            raise StoreError(f"Could not sign download URL: {exc}") from exc

    async def delete_object(self, key: str) -> None:
        try:
            await run_in_threadpool(self._s3.delete_object, Bucket=self.bucket, Key=key)
        except (BotoCoreError, ClientError) as exc:
            raise StoreError(f"S3 delete failed: {exc}") from exc


# PUBLIC_INTERFACE
class LocalBlobStore(BlobStore):
    """Degraded mode: uploads land in a scratch directory."""

    configured = False

    def __init__(self, base_dir: str):
        self.base_path = Path(base_dir)

    async def put_object(
        self, fileobj: BinaryIO, suggested_name: str, content_type: Optional[str] = None
    ) -> StoredObject:
        self.base_path.mkdir(parents=True, exist_ok=True)
        key = _timestamped_key("", suggested_name)
        file_path = self.base_path / key
        size = 0
        fileobj.seek(0)
        async with aiofiles.open(file_path, "wb") as out:
            while True:
                chunk = fileobj.read(_CHUNK)
                if not chunk:
                    break
                size += len(chunk)
                await out.write(chunk)
        _logger.info("Stored upload in local scratch directory.", extra={"path": str(file_path), "size": size})
        return StoredObject(
            key=key,
            location=str(file_path),
            size=size,
            content_type=content_type,
            original_name=suggested_name,
        )

    async def signed_get_url(self, key: str, ttl_seconds: int = 60) -> str:
        raise ConfigurationError(S3_NOT_CONFIGURED)

    async def delete_object(self, key: str) -> None:
        raise ConfigurationError(S3_NOT_CONFIGURED)


# PUBLIC_INTERFACE
def build_blob_store(settings: Settings) -> BlobStore:
    """Pick the blob store implementation for the current configuration."""
    if settings.s3_configured():
        _logger.info(
            "Using S3 blob store.",
            extra={"bucket": settings.S3_BUCKET_NAME, "region": settings.AWS_REGION},
        )
        return S3BlobStore(
            bucket=settings.S3_BUCKET_NAME,
            region=settings.AWS_REGION,
            access_key=settings.AWS_ACCESS_KEY_ID,
            secret_key=settings.AWS_SECRET_ACCESS_KEY,
            key_prefix=settings.S3_KEY_PREFIX,
            endpoint_url=settings.S3_ENDPOINT_URL,
        )
    _logger.warning(
        "S3 credentials or bucket missing; uploads go to the local scratch directory.",
        extra={"dir": settings.LOCAL_UPLOAD_DIR},
    )
    return LocalBlobStore(settings.LOCAL_UPLOAD_DIR)
