"""Language and dictionary endpoints."""

from __future__ import annotations

from typing import Dict, List, Optional

from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel, Field

from aerocms.api.dependencies import get_dictionary_service, get_language_service
from aerocms.api.security import require_roles
from aerocms.core.exceptions import NotFoundError
from aerocms.models.languages import DictionaryItem, Language
from aerocms.models.user import CmsRoles, User
from aerocms.services.languages import DictionaryService, LanguageService
from aerocms.utils.audit import audit_log

router = APIRouter(tags=["languages"])

admins = require_roles(CmsRoles.ADMIN)
editors = require_roles(*CmsRoles.EDITORS)


class LanguageRequest(BaseModel):
    iso_code: str = Field(..., min_length=2)
    culture_name: str = ""
    is_default: bool = False


class DictionaryItemRequest(BaseModel):
    key: str = Field(..., min_length=1)
    translations: Dict[str, str] = Field(default_factory=dict)


class TranslationResponse(BaseModel):
    key: str
    culture: Optional[str] = None
    value: str


@router.get("/languages", response_model=List[Language])
async def list_languages(service: LanguageService = Depends(get_language_service)) -> List[Language]:
    return await service.list_languages()


@router.get("/languages/{iso_code}", response_model=Language)
async def get_language(iso_code: str, service: LanguageService = Depends(get_language_service)) -> Language:
    language = await service.get_language(iso_code=iso_code)
    if language is None:
        raise NotFoundError("Language not found.")
    return language


@router.post("/languages", response_model=Language, status_code=status.HTTP_201_CREATED)
@audit_log
async def create_language(
    payload: LanguageRequest,
    service: LanguageService = Depends(get_language_service),
    current_user: User = Depends(admins),
) -> Language:
    result = await service.save_language(
        payload.iso_code, payload.culture_name, is_default=payload.is_default, user=current_user.id
    )
    return result.raise_for_errors()


@router.put("/languages/{language_id}", response_model=Language)
@audit_log
async def update_language(
    language_id: str,
    payload: LanguageRequest,
    service: LanguageService = Depends(get_language_service),
    current_user: User = Depends(admins),
) -> Language:
    result = await service.save_language(
        payload.iso_code,
        payload.culture_name,
        language_id=language_id,
        is_default=payload.is_default,
        user=current_user.id,
    )
    return result.raise_for_errors()


@router.delete("/languages/{language_id}", status_code=status.HTTP_204_NO_CONTENT)
@audit_log
async def delete_language(
    language_id: str,
    service: LanguageService = Depends(get_language_service),
    current_user: User = Depends(admins),
) -> None:
    (await service.delete_language(language_id)).raise_for_errors()


@router.get("/dictionary", response_model=List[DictionaryItem])
async def list_dictionary(service: DictionaryService = Depends(get_dictionary_service)) -> List[DictionaryItem]:
    return await service.list_items()


@router.get("/dictionary/translate", response_model=TranslationResponse)
async def translate(
    key: str = Query(..., min_length=1),
    culture: Optional[str] = None,
    service: DictionaryService = Depends(get_dictionary_service),
) -> TranslationResponse:
    return TranslationResponse(key=key, culture=culture, value=await service.translate(key, culture))


@router.put("/dictionary", response_model=DictionaryItem)
@audit_log
async def save_dictionary_item(
    payload: DictionaryItemRequest,
    service: DictionaryService = Depends(get_dictionary_service),
    current_user: User = Depends(editors),
) -> DictionaryItem:
    result = await service.save_item(payload.key, payload.translations, user=current_user.id)
    return result.raise_for_errors()


@router.delete("/dictionary/{key}", status_code=status.HTTP_204_NO_CONTENT)
@audit_log
async def delete_dictionary_item(
    key: str,
    service: DictionaryService = Depends(get_dictionary_service),
    current_user: User = Depends(editors),
) -> None:
    (await service.delete_item(key)).raise_for_errors()
