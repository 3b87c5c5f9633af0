"""Languages and dictionary entries."""

from __future__ import annotations

from typing import Dict

from pydantic import Field

from aerocms.models.base import CmsDocument


class Language(CmsDocument):
    iso_code: str
    culture_name: str = ""
    is_default: bool = False


class DictionaryItem(CmsDocument):
    key: str
    translations: Dict[str, str] = Field(default_factory=dict)
