"""Storage backends for recorded audio and generated media.

S3-compatible (Cloudflare R2 / AWS) through boto3, or the local filesystem.
Callers choose the object key; see ``audio_uploads.build_audio_key``.
"""
from __future__ import annotations
import asyncio
import logging
import mimetypes
import os
from dataclasses import dataclass, field
from typing import Protocol, Optional

import boto3
from botocore.client import Config as BotoConfig
from botocore.exceptions import BotoCoreError, ClientError

from pte_api.core.config import settings

logger = logging.getLogger(__name__)


class StorageError(Exception):
    """Raised when the backend could not persist an object."""


class StorageBackend(Protocol):
    async def store_bytes(self, *, key: str, data: bytes, content_type: str | None = None) -> str:
        """Store raw bytes under ``key`` and return the key."""
        ...

    async def get_presigned_url(self, *, key: str, expires_in: int | None = None) -> Optional[str]:
        ...

    def public_url(self, *, key: str) -> Optional[str]:
        ...


@dataclass
class LocalStorageBackend:
    base_path: str = "uploads"

    def _path(self, key: str) -> str:
        path = os.path.normpath(os.path.join(self.base_path, key))
        if not path.startswith(os.path.normpath(self.base_path) + os.sep):
            raise ValueError(f"Invalid storage key: {key}")
        return path

    def _write(self, path: str, data: bytes) -> None:
        os.makedirs(os.path.dirname(path), exist_ok=True)
        with open(path, "wb") as f:
            f.write(data)

    async def store_bytes(self, *, key: str, data: bytes, content_type: str | None = None) -> str:
        try:
            await asyncio.to_thread(self._write, self._path(key), data)
        except OSError as e:
            raise StorageError(f"Could not write {key}: {e}") from e
        return key

    async def get_presigned_url(self, *, key: str, expires_in: int | None = None) -> Optional[str]:
        return None

    def public_url(self, *, key: str) -> Optional[str]:
        return None


@dataclass
class S3StorageBackend:
    bucket: str
    endpoint_url: str | None
    region: str | None
    access_key: str
    secret_key: str
    client: object = field(init=False, repr=False)

    def __post_init__(self):
        self.client = boto3.client(
            "s3",
            endpoint_url=self.endpoint_url,
            aws_access_key_id=self.access_key,
            aws_secret_access_key=self.secret_key,
            region_name=self.region or "auto",
            config=BotoConfig(signature_version="s3v4"),
        )

    async def store_bytes(self, *, key: str, data: bytes, content_type: str | None = None) -> str:
        content_type = content_type or mimetypes.guess_type(key)[0] or "application/octet-stream"
        try:
            await asyncio.to_thread(
                self.client.put_object, Bucket=self.bucket, Key=key, Body=data, ContentType=content_type
            )
        except (BotoCoreError, ClientError) as e:
            logger.error(f"S3 upload failed for {key}: {e}")
            raise StorageError(f"Could not upload {key}") from e
        return key

    async def get_presigned_url(self, *, key: str, expires_in: int | None = None) -> Optional[str]:
        return await asyncio.to_thread(
            self.client.generate_presigned_url,
            ClientMethod="get_object",
            Params={"Bucket": self.bucket, "Key": key},
            ExpiresIn=expires_in or settings.S3_PRESIGN_EXPIRES,
        )

    def public_url(self, *, key: str) -> Optional[str]:
        if settings.S3_PUBLIC_BASE_URL:
            return f"{settings.S3_PUBLIC_BASE_URL.rstrip('/')}/{key}"
        return None


_backend: StorageBackend | None = None


def reset_storage_backend():
    """Drop the cached backend so the next call re-reads settings."""
    global _backend
    _backend = None


def get_storage_backend() -> StorageBackend:
    """S3 when fully configured, otherwise the local directory."""
    global _backend
    if _backend is not None:
        return _backend

    bucket = settings.S3_BUCKET_NAME
    access = settings.S3_ACCESS_KEY_ID
    secret = settings.S3_SECRET_ACCESS_KEY
    use_s3 = settings.STORAGE_BACKEND.lower() == "s3" and bucket and access and secret

    if use_s3:
        _backend = S3StorageBackend(
            bucket=bucket,
            endpoint_url=settings.S3_ENDPOINT_URL,
            region=settings.S3_REGION,
            access_key=access,
            secret_key=secret,
        )
        logger.info(f"Audio storage: s3 bucket {bucket}")
        return _backend

    if settings.STORAGE_BACKEND.lower() == "s3":
        logger.warning("STORAGE_BACKEND=s3 but bucket credentials are incomplete; using local storage")
    _backend = LocalStorageBackend(base_path=settings.LOCAL_STORAGE_PATH)
    logger.info(f"Audio storage: local directory {settings.LOCAL_STORAGE_PATH}")
    return _backend


async def store_bytes(*, key: str, data: bytes, content_type: str | None = None) -> str:
    return await get_storage_backend().store_bytes(key=key, data=data, content_type=content_type)


async def generate_access_url(*, key: str) -> Optional[str]:
    backend = get_storage_backend()
    url = await backend.get_presigned_url(key=key)
    if url:
        return url
    return backend.public_url(key=key)
