"""Languages and dictionary translations."""

from __future__ import annotations

import logging
import re
from typing import Dict, List, Optional

from aerocms.core.results import CONFLICT, INVALID, NOT_FOUND, HandlerResult
from aerocms.data.languages import DictionaryRepository, LanguageRepository
from aerocms.models.languages import DictionaryItem, Language

logger = logging.getLogger(__name__)

ISO_CODE_PATTERN = re.compile(r"^[a-z]{2,3}(-[A-Za-z]{2,4})?$")


class LanguageService:
    def __init__(self, repository: LanguageRepository) -> None:
        self.repository = repository

    async def save_language(
        self,
        iso_code: str,
        culture_name: str = "",
        language_id: Optional[str] = None,
        is_default: bool = False,
        user: Optional[str] = None,
    ) -> HandlerResult[Language]:
        iso_code = (iso_code or "").strip()
        if not ISO_CODE_PATTERN.match(iso_code):
            return HandlerResult.fail(f"'{iso_code}' is not a valid culture code.", code=INVALID)

        existing = await self.repository.get_by_iso_code(iso_code)
        if language_id is not None:
            language = await self.repository.get_by_id(language_id)
            if language is None:
                return HandlerResult.fail("Language not found.", code=NOT_FOUND)
            if existing is not None and existing.id != language.id:
                return HandlerResult.fail("Language already exists", code=CONFLICT)
        else:
            if existing is not None:
                return HandlerResult.fail("Language already exists", code=CONFLICT)
            language = Language(iso_code=iso_code)

        language.iso_code = iso_code
        language.culture_name = culture_name or language.culture_name or iso_code
        if is_default:
            await self._clear_default(except_id=language.id, user=user)
            language.is_default = True
        return await self.repository.save(language, user)

    async def _clear_default(self, except_id: str, user: Optional[str]) -> None:
        for language in await self.repository.get_all():
            if language.is_default and language.id != except_id:
                language.is_default = False
                await self.repository.save(language, user)

    async def get_language(
        self, iso_code: Optional[str] = None, language_id: Optional[str] = None
    ) -> Optional[Language]:
        if iso_code:
            return await self.repository.get_by_iso_code(iso_code)
        if language_id:
            return await self.repository.get_by_id(language_id)
        return None

    async def list_languages(self) -> List[Language]:
        return await self.repository.get_all()

    async def get_default_language(self) -> Optional[Language]:
        return await self.repository.get_default()

    async def delete_language(self, language_id: str) -> HandlerResult[None]:
        return await self.repository.delete(language_id)


class DictionaryService:
    def __init__(self, repository: DictionaryRepository, languages: LanguageService) -> None:
        self.repository = repository
        self.languages = languages

    async def save_item(
        self, key: str, translations: Dict[str, str], user: Optional[str] = None
    ) -> HandlerResult[DictionaryItem]:
        key = (key or "").strip()
        if not key:
            return HandlerResult.fail("Dictionary key is required.", code=INVALID)
        item = await self.repository.get_by_key(key) or DictionaryItem(key=key)
        item.translations.update({code: text for code, text in translations.items() if code})
        return await self.repository.save(item, user)

    async def delete_item(self, key: str) -> HandlerResult[None]:
        item = await self.repository.get_by_key(key)
        if item is None:
            return HandlerResult.fail("Dictionary item not found.", code=NOT_FOUND)
        return await self.repository.delete(item.id)

    async def list_items(self) -> List[DictionaryItem]:
        return await self.repository.get_all()

    async def all_translations(self) -> Dict[str, Dict[str, str]]:
        return {item.key: dict(item.translations) for item in await self.list_items()}

    async def translate(self, key: str, culture: Optional[str] = None) -> str:
        """Exact culture, then its neutral language, then the default language, then the key."""

        item = await self.repository.get_by_key(key)
        if item is None:
            return key
        candidates: List[str] = []
        if culture:
            candidates.append(culture)
            neutral = culture.split("-", 1)[0]
            if neutral != culture:
                candidates.append(neutral)
        default = await self.languages.get_default_language()
        if default is not None:
            candidates.append(default.iso_code)
        for code in candidates:
            text = item.translations.get(code)
            if text:
                return text
        return key
