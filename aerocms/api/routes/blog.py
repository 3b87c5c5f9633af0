"""Blog view-model endpoints."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query

from aerocms.api.dependencies import get_blog_service
from aerocms.core.config import settings
from aerocms.core.exceptions import NotFoundError
from aerocms.services.blog import BlogIndexViewModel, BlogPostViewModel, BlogService

router = APIRouter(prefix="/blog", tags=["blog"])


@router.get("", response_model=BlogIndexViewModel)
async def blog_index(
    page: int = Query(1, ge=1),
    page_size: Optional[int] = Query(None, ge=1, le=100),
    tag: Optional[str] = None,
    service: BlogService = Depends(get_blog_service),
) -> BlogIndexViewModel:
    return await service.get_index(page, page_size or settings.BLOG_PAGE_SIZE, tag)


@router.get("/{slug}", response_model=BlogPostViewModel)
async def blog_post(slug: str, service: BlogService = Depends(get_blog_service)) -> BlogPostViewModel:
    post = await service.get_post(slug)
    if post is None:
        raise NotFoundError("Post not found.")
    return post
