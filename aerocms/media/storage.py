"""Media storage providers (local disk and S3)."""

from __future__ import annotations

import asyncio
import logging
import re
import uuid
from dataclasses import dataclass
from pathlib import Path, PurePosixPath
from typing import BinaryIO, Optional, Protocol

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from aerocms.core.config import settings

logger = logging.getLogger(__name__)

_UNSAFE_CHARACTERS = re.compile(r"[^A-Za-z0-9._-]+")
_REPEATED_DASHES = re.compile(r"-{2,}")


@dataclass
class UploadResult:
    success: bool
    storage_key: str = ""
    error: Optional[str] = None


class StorageProvider(Protocol):
    alias: str

    async def upload(self, stream: BinaryIO, file_name: str, content_type: str) -> UploadResult:
        ...

    async def delete(self, storage_key: str) -> None:
        ...

    def get_public_url(self, storage_key: str) -> str:
        ...


def sanitize_file_name(file_name: str) -> str:
    """Keep the extension, replace spaces and unsafe characters with dashes."""

    name = PurePosixPath((file_name or "").replace("\\", "/")).name
    path = PurePosixPath(name)
    stem, suffix = path.stem, path.suffix.lower()
    stem = _REPEATED_DASHES.sub("-", _UNSAFE_CHARACTERS.sub("-", stem)).strip("-.") or "file"
    suffix = _UNSAFE_CHARACTERS.sub("", suffix)
    return f"{stem}{suffix}"


def build_storage_key(file_name: str) -> str:
    return f"{uuid.uuid4().hex}/{sanitize_file_name(file_name)}"


class DiskStorageProvider:
    """Stores uploads beneath ``root``; served publicly under ``url_prefix``."""

    alias = "disk"

    def __init__(self, root: Optional[Path] = None, url_prefix: Optional[str] = None) -> None:
        self.root = Path(root or settings.MEDIA_ROOT)
        self.url_prefix = (url_prefix or settings.MEDIA_URL_PREFIX).rstrip("/")

    def path_for(self, storage_key: str) -> Path:
        target = (self.root / storage_key).resolve()
        if self.root.resolve() not in target.parents:
            raise ValueError(f"Storage key escapes media root: {storage_key}")
        return target

    async def upload(self, stream: BinaryIO, file_name: str, content_type: str) -> UploadResult:
        key = build_storage_key(file_name)
        destination = self.path_for(key)

        def write() -> None:
            destination.parent.mkdir(parents=True, exist_ok=True)
            with open(destination, "wb") as handle:
                while True:
                    chunk = stream.read(64 * 1024)
                    if not chunk:
                        break
                    handle.write(chunk)

        try:
            await asyncio.to_thread(write)
        except OSError as exc:
            logger.exception("Failed writing media file %s", key)
            return UploadResult(success=False, error=str(exc))
        return UploadResult(success=True, storage_key=key)

    async def delete(self, storage_key: str) -> None:
        target = self.path_for(storage_key)

        def remove() -> None:
            target.unlink(missing_ok=True)
            parent = target.parent
            if parent != self.root.resolve() and parent.exists() and not any(parent.iterdir()):
                parent.rmdir()

        await asyncio.to_thread(remove)

    def get_public_url(self, storage_key: str) -> str:
        key = storage_key.replace("\\", "/").lstrip("/")
        return f"{self.url_prefix}/{key}"


class S3StorageProvider:
    alias = "s3"

    def __init__(self, bucket: Optional[str] = None, client=None, public_url: Optional[str] = None) -> None:
        self.bucket = bucket or settings.S3_BUCKET_NAME
        if not self.bucket:
            raise ValueError("S3_BUCKET_NAME is required for the s3 storage backend")
        self._s3 = client or boto3.client(
            "s3",
            region_name=settings.S3_REGION,
            endpoint_url=str(settings.S3_ENDPOINT_URL) if settings.S3_ENDPOINT_URL else None,
        )
        self.public_url = (public_url or settings.S3_PUBLIC_URL or f"https://{self.bucket}.s3.amazonaws.com").rstrip("/")

    async def upload(self, stream: BinaryIO, file_name: str, content_type: str) -> UploadResult:
        key = build_storage_key(file_name)

        def upload() -> None:
            self._s3.upload_fileobj(stream, self.bucket, key, ExtraArgs={"ContentType": content_type})

        try:
            await asyncio.to_thread(upload)
        except (ClientError, BotoCoreError) as exc:
            logger.exception("S3 upload failed for %s", key)
            return UploadResult(success=False, error=f"S3 upload failed: {exc}")
        return UploadResult(success=True, storage_key=key)

    async def delete(self, storage_key: str) -> None:
        def remove() -> None:
            self._s3.delete_object(Bucket=self.bucket, Key=storage_key)

        await asyncio.to_thread(remove)

    def get_public_url(self, storage_key: str) -> str:
        return f"{self.public_url}/{storage_key}"


def create_storage_provider(backend: Optional[str] = None) -> StorageProvider:
    backend = (backend or settings.STORAGE_BACKEND).lower()
    if backend == "s3":
        return S3StorageProvider()
    return DiskStorageProvider()
