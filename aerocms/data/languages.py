"""Language and dictionary repositories."""

from __future__ import annotations

from typing import Optional

from aerocms.data.base import ASCENDING, BaseRepository
from aerocms.models.languages import DictionaryItem, Language


class LanguageRepository(BaseRepository[Language]):
    collection_name = "languages"
    model = Language
    default_sort = (("iso_code", ASCENDING),)

    async def get_by_iso_code(self, iso_code: str) -> Optional[Language]:
        return await self.find_one({"iso_code": iso_code})

    async def get_default(self) -> Optional[Language]:
        return await self.find_one({"is_default": True})


class DictionaryRepository(BaseRepository[DictionaryItem]):
    collection_name = "dictionary"
    model = DictionaryItem
    default_sort = (("key", ASCENDING),)

    async def get_by_key(self, key: str) -> Optional[DictionaryItem]:
        return await self.find_one({"key": key})
