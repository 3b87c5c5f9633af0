"""Tag management and item tagging endpoints."""

from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel, Field

from aerocms.api.dependencies import get_tag_service
from aerocms.api.security import require_roles
from aerocms.models.tags import Tag, TagItem
from aerocms.models.user import CmsRoles, User
from aerocms.services.tags import TagService
from aerocms.utils.audit import audit_log

router = APIRouter(prefix="/tags", tags=["tags"])

editors = require_roles(*CmsRoles.EDITORS)


class TagRequest(BaseModel):
    tag_name: str = Field(..., min_length=1)
    sort_order: int = 0


class ItemTagsRequest(BaseModel):
    tag_ids: List[str] = Field(default_factory=list)


@router.get("", response_model=List[Tag])
async def list_tags(
    slug: Optional[List[str]] = Query(None),
    order_by: str = Query("sort_order", pattern=r"^(sort_order|name)$"),
    service: TagService = Depends(get_tag_service),
) -> List[Tag]:
    return await service.query_tags(slugs=slug, order_by=order_by)


@router.post("", response_model=Tag, status_code=status.HTTP_201_CREATED)
@audit_log
async def create_tag(
    payload: TagRequest,
    service: TagService = Depends(get_tag_service),
    current_user: User = Depends(editors),
) -> Tag:
    result = await service.save_tag(payload.tag_name, payload.sort_order, user=current_user.id)
    return result.raise_for_errors()


@router.put("/{tag_id}", response_model=Tag)
@audit_log
async def update_tag(
    tag_id: str,
    payload: TagRequest,
    service: TagService = Depends(get_tag_service),
    current_user: User = Depends(editors),
) -> Tag:
    result = await service.save_tag(payload.tag_name, payload.sort_order, tag_id=tag_id, user=current_user.id)
    return result.raise_for_errors()


@router.delete("/{tag_id}", status_code=status.HTTP_204_NO_CONTENT)
@audit_log
async def delete_tag(
    tag_id: str,
    service: TagService = Depends(get_tag_service),
    current_user: User = Depends(require_roles(*CmsRoles.PUBLISHERS)),
) -> None:
    (await service.delete_tag(tag_id=tag_id)).raise_for_errors()


@router.get("/items/{item_id}", response_model=List[Tag])
async def get_item_tags(item_id: str, service: TagService = Depends(get_tag_service)) -> List[Tag]:
    return await service.get_tags_for_item(item_id)


@router.put("/items/{item_id}", response_model=List[TagItem])
@audit_log
async def set_item_tags(
    item_id: str,
    payload: ItemTagsRequest,
    service: TagService = Depends(get_tag_service),
    current_user: User = Depends(editors),
) -> List[TagItem]:
    result = await service.set_item_tags(item_id, payload.tag_ids, user=current_user.id)
    return result.raise_for_errors()
