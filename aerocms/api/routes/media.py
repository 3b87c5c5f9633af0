"""Media library endpoints."""

from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile, status
from pydantic import BaseModel

from aerocms.api.dependencies import get_media_repository, get_media_service
from aerocms.api.security import require_roles
from aerocms.data.media import MediaRepository
from aerocms.media.service import MediaService
from aerocms.models.media import MediaDocument
from aerocms.models.user import CmsRoles, User
from aerocms.utils.audit import audit_log

router = APIRouter(prefix="/media", tags=["media"])

editors = require_roles(*CmsRoles.EDITORS)


class MediaUpdateRequest(BaseModel):
    name: Optional[str] = None
    alt_text: Optional[str] = None


@router.get("", response_model=List[MediaDocument])
async def list_media(
    parent_id: Optional[str] = None,
    repository: MediaRepository = Depends(get_media_repository),
    current_user: User = Depends(editors),
) -> List[MediaDocument]:
    if parent_id:
        return await repository.get_by_parent(parent_id)
    return await repository.get_all()


@router.post("", response_model=MediaDocument, status_code=status.HTTP_201_CREATED)
@audit_log
async def upload_media(
    file: UploadFile = File(...),
    alt_text: str = Form(""),
    parent_id: Optional[str] = Form(None),
    images_only: bool = Form(False),
    service: MediaService = Depends(get_media_service),
    current_user: User = Depends(editors),
) -> MediaDocument:
    result = await service.upload(
        file.file,
        file.filename or "upload",
        file.content_type or "application/octet-stream",
        user=current_user.id,
        alt_text=alt_text,
        parent_id=parent_id,
        images_only=images_only,
    )
    return result.raise_for_errors()


@router.patch("/{media_id}", response_model=MediaDocument)
@audit_log
async def update_media(
    media_id: str,
    payload: MediaUpdateRequest,
    service: MediaService = Depends(get_media_service),
    current_user: User = Depends(editors),
) -> MediaDocument:
    result = await service.update(media_id, name=payload.name, alt_text=payload.alt_text, user=current_user.id)
    return result.raise_for_errors()


@router.delete("/{media_id}", status_code=status.HTTP_204_NO_CONTENT)
@audit_log
async def delete_media(
    media_id: str,
    service: MediaService = Depends(get_media_service),
    current_user: User = Depends(require_roles(*CmsRoles.PUBLISHERS)),
) -> None:
    (await service.delete(media_id)).raise_for_errors()
