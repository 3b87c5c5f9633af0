"""Shared document base for everything persisted in the CMS store."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from aerocms.core.clock import ensure_utc


def new_id() -> str:
    return str(uuid.uuid4())


class CmsDocument(BaseModel):
    """Base class carrying identity and audit fields."""

    model_config = ConfigDict(populate_by_name=True, use_enum_values=False)

    id: str = Field(default_factory=new_id)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    created_by: str = "system"
    updated_at: Optional[datetime] = None
    updated_by: Optional[str] = None

    @field_validator("created_at", "updated_at", mode="after")
    @classmethod
    def _as_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        return ensure_utc(value)
