"""Media upload, deletion and HTML reference maintenance."""

from __future__ import annotations

import asyncio
import io
import logging
from pathlib import PurePosixPath
from typing import BinaryIO, Dict, Iterable, Optional, Tuple

from bs4 import BeautifulSoup
from PIL import Image, UnidentifiedImageError

from aerocms.core.config import settings
from aerocms.core.results import INVALID, NOT_FOUND, HandlerResult
from aerocms.data.media import MediaRepository
from aerocms.media.storage import StorageProvider
from aerocms.models.media import MediaDocument, MediaType

logger = logging.getLogger(__name__)

IMAGE_EXTENSIONS = {".jpg", ".jpeg", ".png", ".gif", ".webp", ".svg", ".bmp"}


class MediaService:
    def __init__(
        self,
        repository: MediaRepository,
        storage: StorageProvider,
        allowed_extensions: Optional[Iterable[str]] = None,
        max_upload_bytes: Optional[int] = None,
    ) -> None:
        self.repository = repository
        self.storage = storage
        self.allowed_extensions = {
            ext.lower() for ext in (allowed_extensions or settings.ALLOWED_MEDIA_EXTENSIONS)
        }
        self.max_upload_bytes = max_upload_bytes or settings.MAX_UPLOAD_BYTES

    def validate_upload(self, file_name: str, size: int, images_only: bool = False) -> HandlerResult[None]:
        extension = PurePosixPath(file_name or "").suffix.lower()
        if not extension or extension not in self.allowed_extensions:
            return HandlerResult.fail("File not allowed", code=INVALID)
        if size > self.max_upload_bytes:
            return HandlerResult.fail("File is too large", code=INVALID)
        if images_only and extension not in IMAGE_EXTENSIONS:
            return HandlerResult.fail("File must be an image only", code=INVALID)
        return HandlerResult.ok()

    async def upload(
        self,
        stream: BinaryIO,
        file_name: str,
        content_type: str,
        *,
        user: Optional[str] = None,
        alt_text: str = "",
        parent_id: Optional[str] = None,
        images_only: bool = False,
    ) -> HandlerResult[MediaDocument]:
        # Never buffer more than one byte past the limit.
        data = await asyncio.to_thread(stream.read, self.max_upload_bytes + 1)
        validation = self.validate_upload(file_name, len(data), images_only=images_only)
        if not validation.success:
            return HandlerResult.fail(*validation.errors, code=validation.error_code)

        stored = await self.storage.upload(io.BytesIO(data), file_name, content_type)
        if not stored.success:
            return HandlerResult.fail(stored.error or "Upload failed")

        media_type = MediaType.from_content_type(content_type)
        width, height = image_dimensions(data) if media_type == MediaType.IMAGE else (None, None)
        media = MediaDocument(
            name=PurePosixPath(file_name).stem or file_name,
            file_name=file_name,
            content_type=content_type,
            media_type=media_type,
            file_size=len(data),
            width=width,
            height=height,
            storage_provider=self.storage.alias,
            storage_key=stored.storage_key,
            url=self.storage.get_public_url(stored.storage_key),
            alt_text=alt_text,
            parent_id=parent_id,
        )
        result = await self.repository.save(media, user)
        if not result.success:
            # Leave no orphaned file behind when the document could not be written.
            await self.storage.delete(stored.storage_key)
            return result
        logger.info("Uploaded media %s (%s, %d bytes)", media.id, media.storage_key, media.file_size)
        return result

    async def update(
        self,
        media_id: str,
        *,
        name: Optional[str] = None,
        alt_text: Optional[str] = None,
        user: Optional[str] = None,
    ) -> HandlerResult[MediaDocument]:
        media = await self.repository.get_by_id(media_id)
        if media is None:
            return HandlerResult.fail("Media not found.", code=NOT_FOUND)
        if name is not None:
            media.name = name
        if alt_text is not None:
            media.alt_text = alt_text
        return await self.repository.save(media, user)

    async def delete(self, media_id: str) -> HandlerResult[None]:
        media = await self.repository.get_by_id(media_id)
        if media is None:
            return HandlerResult.fail("Media not found.", code=NOT_FOUND)
        if media.storage_key:
            await self.storage.delete(media.storage_key)
        return await self.repository.delete(media_id)


def image_dimensions(data: bytes) -> Tuple[Optional[int], Optional[int]]:
    try:
        with Image.open(io.BytesIO(data)) as image:
            return image.width, image.height
    except (UnidentifiedImageError, OSError):
        return None, None


class MediaReferenceValidator:
    """Keeps ``data-mediaid`` elements in rich HTML in step with the media library."""

    def __init__(self, repository: MediaRepository) -> None:
        self.repository = repository

    async def validate_html(self, html: Optional[str]) -> Optional[str]:
        if not html or "data-mediaid" not in html:
            return html

        soup = BeautifulSoup(html, "html.parser")
        changed = False
        lookups: Dict[str, Optional[MediaDocument]] = {}
        for element in soup.select("[data-mediaid]"):
            media_id = element.get("data-mediaid", "")
            if media_id not in lookups:
                lookups[media_id] = await self.repository.get_by_id(media_id)
            media = lookups[media_id]
            if media is None:
                element.decompose()
                changed = True
                continue
            changed = _sync_element(element, media) or changed

        return str(soup) if changed else html


def _sync_element(element, media: MediaDocument) -> bool:
    attribute = "href" if element.name == "a" else "src"
    if element.get(attribute) == media.url:
        return False
    element[attribute] = media.url
    if element.name == "img":
        if media.width:
            element["width"] = str(media.width)
        if media.height:
            element["height"] = str(media.height)
        if media.alt_text:
            element["alt"] = media.alt_text
    return True
