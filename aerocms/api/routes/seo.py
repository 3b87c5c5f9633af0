"""SEO redirect management endpoints."""

from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, Field

from aerocms.api.dependencies import get_redirect_service
from aerocms.api.security import require_roles
from aerocms.models.seo import SeoRedirectDocument
from aerocms.models.user import CmsRoles, User
from aerocms.services.redirects import RedirectService
from aerocms.utils.audit import audit_log

router = APIRouter(prefix="/seo", tags=["seo"])

admins = require_roles(CmsRoles.ADMIN)


class RedirectRequest(BaseModel):
    from_url: str = Field(..., min_length=1)
    to_url: str = Field(..., min_length=1)
    status_code: int = 301
    is_active: bool = True


@router.get("/redirects", response_model=List[SeoRedirectDocument])
async def list_redirects(
    service: RedirectService = Depends(get_redirect_service),
    current_user: User = Depends(admins),
) -> List[SeoRedirectDocument]:
    return await service.list_redirects()


@router.post("/redirects", response_model=SeoRedirectDocument, status_code=status.HTTP_201_CREATED)
@audit_log
async def create_redirect(
    payload: RedirectRequest,
    service: RedirectService = Depends(get_redirect_service),
    current_user: User = Depends(admins),
) -> SeoRedirectDocument:
    result = await service.save_redirect(
        payload.from_url, payload.to_url, payload.status_code, payload.is_active, user=current_user.id
    )
    return result.raise_for_errors()


@router.put("/redirects/{redirect_id}", response_model=SeoRedirectDocument)
@audit_log
async def update_redirect(
    redirect_id: str,
    payload: RedirectRequest,
    service: RedirectService = Depends(get_redirect_service),
    current_user: User = Depends(admins),
) -> SeoRedirectDocument:
    result = await service.save_redirect(
        payload.from_url,
        payload.to_url,
        payload.status_code,
        payload.is_active,
        redirect_id=redirect_id,
        user=current_user.id,
    )
    return result.raise_for_errors()


@router.delete("/redirects/{redirect_id}", status_code=status.HTTP_204_NO_CONTENT)
@audit_log
async def delete_redirect(
    redirect_id: str,
    service: RedirectService = Depends(get_redirect_service),
    current_user: User = Depends(admins),
) -> None:
    (await service.delete_redirect(redirect_id)).raise_for_errors()
