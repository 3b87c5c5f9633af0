"""Content documents and content-type schemas."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, field_validator

from aerocms.core.clock import ensure_utc
from aerocms.models.base import CmsDocument
from aerocms.models.blocks import Block, as_typed_block


class PublishingStatus(str, Enum):
    DRAFT = "draft"
    PENDING_APPROVAL = "pending_approval"
    APPROVED = "approved"
    PUBLISHED = "published"
    EXPIRED = "expired"


class ContentDocument(CmsDocument):
    """A page, blog post or any other routable content record."""

    name: str = ""
    slug: str = ""
    content_type_alias: str = ""
    status: PublishingStatus = PublishingStatus.DRAFT
    published_at: Optional[datetime] = None
    expires_at: Optional[datetime] = None
    parent_id: Optional[str] = None
    sort_order: int = 0
    language_code: Optional[str] = None
    properties: Dict[str, Any] = Field(default_factory=dict)
    blocks: List[Block] = Field(default_factory=list)
    search_text: str = ""

    @field_validator("published_at", "expires_at", mode="after")
    @classmethod
    def _publishing_dates_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        return ensure_utc(value)

    @field_validator("blocks", mode="after")
    @classmethod
    def _type_blocks(cls, value: List[Block]) -> List[Block]:
        return [as_typed_block(block) for block in value]

    def ordered_blocks(self) -> List[Block]:
        return sorted(self.blocks, key=lambda block: block.sort_order)

    def all_blocks(self):
        for block in self.ordered_blocks():
            yield from block.walk()

    def is_visible(self, now: datetime) -> bool:
        """Published, already live, and not yet expired at ``now``."""

        if self.status != PublishingStatus.PUBLISHED:
            return False
        if self.published_at is None or self.published_at > now:
            return False
        return self.expires_at is None or self.expires_at > now


class PropertyType(str, Enum):
    TEXT = "text"
    TEXTAREA = "textarea"
    RICHTEXT = "richtext"
    MARKDOWN = "markdown"
    NUMBER = "number"
    BOOLEAN = "boolean"
    DATE = "date"
    MEDIA = "media"


class ContentTypeProperty(BaseModel):
    name: str
    alias: str
    property_type: PropertyType = PropertyType.TEXT
    description: str = ""
    required: bool = False
    sort_order: int = 0


class ContentTypeDocument(CmsDocument):
    name: str
    alias: str
    description: str = ""
    icon: Optional[str] = None
    allow_at_root: bool = True
    requires_approval: bool = False
    properties: List[ContentTypeProperty] = Field(default_factory=list)

    def missing_required(self, values: Dict[str, Any]) -> List[str]:
        return [
            prop.alias
            for prop in self.properties
            if prop.required and values.get(prop.alias) in (None, "")
        ]
