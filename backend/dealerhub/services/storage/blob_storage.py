"""
Blob storage for dealer logos and defect report attachments.

Two backends share the ``upload(folder, filename, content, content_type)``
contract and return the public URL of the stored file: a local directory
served by the API under ``/uploads`` and an S3 bucket.
"""

import asyncio
import re
import uuid
from pathlib import Path
from typing import Any, Optional, Protocol

import aiofiles
import boto3
from botocore.exceptions import BotoCoreError, ClientError

from dealerhub.core.config import Settings, get_settings
from dealerhub.core.logging import get_logger

logger = get_logger(__name__)

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


class BlobStorageError(Exception):
    """Base exception for blob storage errors."""

    def __init__(self, message: str, code: str, **context: Any):
        super().__init__(message)
        self.code = code
        self.context = context


def object_key(folder: str, filename: str) -> str:
    """Unique storage key under ``folder`` keeping a readable file name."""
    safe_folder = "/".join(
        part for part in (_UNSAFE_CHARS.sub("-", p) for p in folder.split("/")) if part
    )
    safe_name = _UNSAFE_CHARS.sub("-", Path(filename).name).strip("-") or "file"
    return f"{safe_folder}/{uuid.uuid4().hex}-{safe_name}"


class BlobStorage(Protocol):
    async def upload(
        self, folder: str, filename: str, content: bytes, content_type: Optional[str] = None
    ) -> str: ...


class _SizeLimited:
    max_bytes: int

    def _check_size(self, filename: str, content: bytes) -> None:
        if not content:
            raise BlobStorageError("Uploaded file is empty", code="EMPTY_FILE", filename=filename)
        if len(content) > self.max_bytes:
            raise BlobStorageError(
                "Uploaded file is too large",
                code="FILE_TOO_LARGE",
                filename=filename,
                size=len(content),
                max_size=self.max_bytes,
            )


class LocalBlobStorage(_SizeLimited):
    """Writes files below ``upload_dir`` and serves them from ``public_base_url``."""

    def __init__(self, upload_dir: str, public_base_url: str, max_bytes: int):
        self.root = Path(upload_dir)
        self.public_base_url = public_base_url.rstrip("/")
        self.max_bytes = max_bytes

    async def upload(
        self, folder: str, filename: str, content: bytes, content_type: Optional[str] = None
    ) -> str:
        self._check_size(filename, content)
        key = object_key(folder, filename)
        path = self.root / key

        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            async with aiofiles.open(path, mode="wb") as file:
                await file.write(content)
        except OSError as e:
            logger.error("Local upload failed", key=key, error=str(e))
            raise BlobStorageError(
                "Failed to store uploaded file", code="UPLOAD_FAILED", key=key
            ) from e

        logger.info("File stored locally", key=key, size=len(content), content_type=content_type)
        return f"{self.public_base_url}/{key}"


class S3BlobStorage(_SizeLimited):
    """Uploads files to an S3 bucket and returns their public object URL."""

    def __init__(
        self,
        bucket: str,
        region_name: str,
        max_bytes: int,
        aws_access_key_id: Optional[str] = None,
        aws_secret_access_key: Optional[str] = None,
        client: Any = None,
    ):
        self.bucket = bucket
        self.region_name = region_name
        self.max_bytes = max_bytes
        self._client = client or boto3.client(
            "s3",
            aws_access_key_id=aws_access_key_id,
            aws_secret_access_key=aws_secret_access_key,
            region_name=region_name,
        )

        logger.info("S3 blob storage initialized", bucket=bucket, region=region_name)

    async def upload(
        self, folder: str, filename: str, content: bytes, content_type: Optional[str] = None
    ) -> str:
        self._check_size(filename, content)
        key = object_key(folder, filename)

        params: dict[str, Any] = {"Bucket": self.bucket, "Key": key, "Body": content}
        if content_type:
            params["ContentType"] = content_type

        try:
            await asyncio.to_thread(self._client.put_object, **params)
        except ClientError as e:
            error_code = e.response.get("Error", {}).get("Code", "Unknown")
            logger.error("S3 upload failed", key=key, error_code=error_code, error=str(e))
            raise BlobStorageError(
                f"S3 error: {error_code}", code="UPLOAD_FAILED", key=key
            ) from e
        except BotoCoreError as e:
            logger.error("S3 connection error", key=key, error=str(e))
            raise BlobStorageError(
                "Storage service unreachable", code="UPLOAD_FAILED", key=key
            ) from e

        logger.info("File stored in S3", bucket=self.bucket, key=key, size=len(content))
        return f"https://{self.bucket}.s3.{self.region_name}.amazonaws.com/{key}"


def create_blob_storage(settings: Optional[Settings] = None) -> BlobStorage:
    """Build the blob storage backend selected by ``blob_storage_backend``."""
    settings = settings or get_settings()
    max_bytes = settings.max_upload_size_mb * 1024 * 1024

    if settings.blob_storage_backend == "s3":
        if not settings.s3_bucket:
            raise BlobStorageError(
                "s3_bucket must be set for the S3 storage backend", code="NOT_CONFIGURED"
            )
        return S3BlobStorage(
            bucket=settings.s3_bucket,
            region_name=settings.aws_region,
            max_bytes=max_bytes,
            aws_access_key_id=settings.aws_access_key_id,
            aws_secret_access_key=settings.aws_secret_access_key,
        )

    return LocalBlobStorage(settings.upload_dir, settings.public_base_url, max_bytes)
