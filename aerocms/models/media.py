"""Media library documents."""

from __future__ import annotations

from enum import Enum
from typing import Optional

from aerocms.models.base import CmsDocument


class MediaType(str, Enum):
    IMAGE = "image"
    VIDEO = "video"
    AUDIO = "audio"
    DOCUMENT = "document"
    OTHER = "other"

    @classmethod
    def from_content_type(cls, content_type: Optional[str]) -> "MediaType":
        major = (content_type or "").split("/", 1)[0].lower()
        if major in {"image", "video", "audio"}:
            return cls(major)
        if content_type in {
            "application/pdf",
            "application/msword",
            "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
            "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
            "text/plain",
        }:
            return cls.DOCUMENT
        return cls.OTHER


class MediaDocument(CmsDocument):
    name: str
    file_name: str
    content_type: str = "application/octet-stream"
    media_type: MediaType = MediaType.OTHER
    file_size: int = 0
    width: Optional[int] = None
    height: Optional[int] = None
    storage_provider: str = "disk"
    storage_key: str = ""
    url: str = ""
    alt_text: str = ""
    parent_id: Optional[str] = None
