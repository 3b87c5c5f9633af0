"""Site documents."""

from __future__ import annotations

from typing import List, Optional

from pydantic import Field, field_validator

from aerocms.models.base import CmsDocument


class SiteDocument(CmsDocument):
    name: str
    base_url: str = ""
    description: str = ""
    hostnames: List[str] = Field(default_factory=list)
    default_layout: str = "default"
    default_culture: str = "en-US"
    footer_text: str = ""
    logo_media_id: Optional[str] = None
    is_default: bool = False
    not_found_page_id: Optional[str] = None

    @field_validator("hostnames", mode="after")
    @classmethod
    def _normalise_hostnames(cls, value: List[str]) -> List[str]:
        return [host.strip().lower() for host in value if host and host.strip()]
