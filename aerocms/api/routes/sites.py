"""Site management endpoints."""

from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, Field

from aerocms.api.dependencies import get_current_site, get_site_repository
from aerocms.api.security import require_roles
from aerocms.core.exceptions import NotFoundError
from aerocms.data.sites import SiteRepository
from aerocms.models.site import SiteDocument
from aerocms.models.user import CmsRoles, User
from aerocms.utils.audit import audit_log

router = APIRouter(prefix="/sites", tags=["sites"])

admins = require_roles(CmsRoles.ADMIN)


class SiteRequest(BaseModel):
    name: str = Field(..., min_length=1)
    base_url: str = ""
    description: str = ""
    hostnames: List[str] = Field(default_factory=list)
    default_layout: str = "default"
    default_culture: str = "en-US"
    footer_text: str = ""
    is_default: bool = False
    not_found_page_id: Optional[str] = None


@router.get("", response_model=List[SiteDocument])
async def list_sites(
    repository: SiteRepository = Depends(get_site_repository),
    current_user: User = Depends(require_roles(*CmsRoles.EDITORS)),
) -> List[SiteDocument]:
    return await repository.get_all()


@router.get("/current", response_model=Optional[SiteDocument])
async def current_site(site: Optional[SiteDocument] = Depends(get_current_site)) -> Optional[SiteDocument]:
    return site


@router.post("", response_model=SiteDocument, status_code=status.HTTP_201_CREATED)
@audit_log
async def create_site(
    payload: SiteRequest,
    repository: SiteRepository = Depends(get_site_repository),
    current_user: User = Depends(admins),
) -> SiteDocument:
    site = SiteDocument(**payload.model_dump())
    return (await repository.save(site, current_user.id)).raise_for_errors()


@router.put("/{site_id}", response_model=SiteDocument)
@audit_log
async def update_site(
    site_id: str,
    payload: SiteRequest,
    repository: SiteRepository = Depends(get_site_repository),
    current_user: User = Depends(admins),
) -> SiteDocument:
    site = await repository.get_by_id(site_id)
    if site is None:
        raise NotFoundError("Site not found.")
    updated = SiteDocument.model_validate({**site.model_dump(), **payload.model_dump()})
    return (await repository.save(updated, current_user.id)).raise_for_errors()


@router.delete("/{site_id}", status_code=status.HTTP_204_NO_CONTENT)
@audit_log
async def delete_site(
    site_id: str,
    repository: SiteRepository = Depends(get_site_repository),
    current_user: User = Depends(admins),
) -> None:
    (await repository.delete(site_id)).raise_for_errors()
