"""Headless content delivery endpoints."""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Query, Request, status
from pydantic import BaseModel

from aerocms.api.dependencies import get_finder_pipeline, get_optional_user, get_renderer
from aerocms.content.finders import ContentFinderContext, ContentFinderPipeline
from aerocms.content.hooks import delivery_cache_key
from aerocms.content.rendering import BlockRenderer
from aerocms.content.slugs import normalise_path
from aerocms.core.config import settings
from aerocms.core.exceptions import ForbiddenError, NotFoundError
from aerocms.models.content import ContentDocument
from aerocms.models.user import CmsRoles, User
from aerocms.utils.cache import cache

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/delivery", tags=["delivery"])


class DeliveryResponse(BaseModel):
    content: ContentDocument
    html: str
    status_code: int = 200


@router.get("/content", response_model=DeliveryResponse)
async def deliver_content(
    request: Request,
    slug: str = Query("/"),
    preview: bool = False,
    pipeline: ContentFinderPipeline = Depends(get_finder_pipeline),
    renderer: BlockRenderer = Depends(get_renderer),
    user: Optional[User] = Depends(get_optional_user),
) -> Dict[str, Any]:
    path = normalise_path(slug)
    if preview and (user is None or not user.has_any_role(*CmsRoles.EDITORS)):
        raise ForbiddenError("Preview requires an editor role.")

    cache_key = delivery_cache_key(path)
    if not preview:
        cached = await cache.get(cache_key)
        if cached is not None:
            return cached

    context = ContentFinderContext(
        slug=path,
        is_preview=preview,
        site=getattr(request.state, "site", None),
        request=request,
    )
    document = await pipeline.execute(context)
    if document is None:
        raise NotFoundError(f"No content found for '{path}'.")

    payload = DeliveryResponse(
        content=document,
        html=renderer.render_content(document),
        status_code=context.status_code,
    ).model_dump(mode="json")
    if not preview and context.status_code == status.HTTP_200_OK:
        await cache.set(cache_key, payload, ttl=settings.DELIVERY_CACHE_SECONDS)
    return payload
