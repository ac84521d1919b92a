"""Object storage for profile attachments (avatars, resumes).

The core only needs ``upload(path, blob, content_type) -> public URL``.
"""

import asyncio
import logging
from typing import Protocol

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from collabhub.config import settings

logger = logging.getLogger(__name__)


class StorageError(Exception):
    pass


class ObjectStorage(Protocol):
    async def upload(self, path: str, blob: bytes, content_type: str) -> str: ...


class S3Storage:
    def __init__(self, bucket: str | None = None, public_base_url: str | None = None, client=None):
        self.bucket = bucket or settings.S3_BUCKET_NAME
        if not self.bucket:
            raise ValueError("S3_BUCKET_NAME must be configured")
        self.public_base_url = (
            public_base_url
            or settings.S3_PUBLIC_BASE_URL
            or f"https://{self.bucket}.s3.{settings.AWS_REGION}.amazonaws.com"
        ).rstrip("/")
        self.client = client or boto3.client(
            "s3",
            aws_access_key_id=settings.AWS_ACCESS_KEY_ID or None,
            aws_secret_access_key=settings.AWS_SECRET_ACCESS_KEY or None,
            region_name=settings.AWS_REGION,
        )

    async def upload(self, path: str, blob: bytes, content_type: str) -> str:
        """Store ``blob`` under ``path`` and return its public URL."""
        try:
            # boto3 is blocking; keep it off the event loop
            await asyncio.to_thread(
                self.client.put_object,
                Bucket=self.bucket,
                Key=path,
                Body=blob,
                ContentType=content_type,
            )
        except (BotoCoreError, ClientError) as exc:
            logger.error("Failed to upload %s to S3: %s", path, exc)
            raise StorageError(f"Upload failed for {path}") from exc
        return f"{self.public_base_url}/{path}"


class MemoryStorage:
    """In-process storage for development and tests."""

    def __init__(self, base_url: str = "memory://objects"):
        self.base_url = base_url.rstrip("/")
        self.objects: dict[str, tuple[bytes, str]] = {}

    async def upload(self, path: str, blob: bytes, content_type: str) -> str:
        self.objects[path] = (blob, content_type)
        return f"{self.base_url}/{path}"
