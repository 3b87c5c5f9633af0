"""Blog view-models built over ``blogPost`` content."""

from __future__ import annotations

import math
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from aerocms.content.hooks import html_to_text
from aerocms.content.markdown import BLOG_POST_CONTENT_TYPE
from aerocms.content.rendering import BlockRenderer
from aerocms.content.slugs import generate_slug
from aerocms.core.clock import Clock, system_clock
from aerocms.data.content import ContentRepository
from aerocms.models.content import ContentDocument
from aerocms.services.tags import TagService

EXCERPT_LENGTH = 160
WORDS_PER_MINUTE = 200


class BlogPostSummary(BaseModel):
    id: str
    title: str
    slug: str
    excerpt: str = ""
    published_at: Optional[datetime] = None
    tags: List[str] = Field(default_factory=list)


class BlogPostViewModel(BlogPostSummary):
    html: str = ""
    reading_time_minutes: int = 1
    author: Optional[str] = None


class BlogIndexViewModel(BaseModel):
    posts: List[BlogPostSummary] = Field(default_factory=list)
    page: int = 1
    page_size: int = 10
    total_posts: int = 0
    total_pages: int = 0
    tag: Optional[str] = None

    @property
    def has_previous(self) -> bool:
        return self.page > 1

    @property
    def has_next(self) -> bool:
        return self.page < self.total_pages


def make_excerpt(text: str, length: int = EXCERPT_LENGTH) -> str:
    text = " ".join((text or "").split())
    if len(text) <= length:
        return text
    cut = text[:length].rsplit(" ", 1)[0]
    return cut.rstrip(",.;:") + "..."


def reading_time(text: str) -> int:
    return max(1, math.ceil(len((text or "").split()) / WORDS_PER_MINUTE))


def post_tags(post: ContentDocument) -> List[str]:
    raw = post.properties.get("tags") or ""
    if isinstance(raw, list):
        return [str(tag).strip() for tag in raw if str(tag).strip()]
    return [tag.strip() for tag in str(raw).split(",") if tag.strip()]


class BlogService:
    def __init__(
        self,
        repository: ContentRepository,
        renderer: BlockRenderer,
        tags: Optional[TagService] = None,
        clock: Clock = system_clock,
    ) -> None:
        self.repository = repository
        self.renderer = renderer
        self.tags = tags
        self.clock = clock

    async def visible_posts(self, tag_slug: Optional[str] = None) -> List[ContentDocument]:
        now = self.clock.now()
        posts = [
            post
            for post in await self.repository.get_by_content_type(BLOG_POST_CONTENT_TYPE)
            if post.is_visible(now)
        ]
        if tag_slug:
            linked = set(await self.tags.get_item_ids_for_tag(tag_slug)) if self.tags else set()
            posts = [
                post
                for post in posts
                if post.id in linked or tag_slug in {generate_slug(tag) for tag in post_tags(post)}
            ]
        return sorted(posts, key=lambda post: post.published_at, reverse=True)

    async def get_index(self, page: int = 1, page_size: int = 10, tag_slug: Optional[str] = None) -> BlogIndexViewModel:
        page = max(1, page)
        page_size = max(1, page_size)
        posts = await self.visible_posts(tag_slug)
        start = (page - 1) * page_size
        return BlogIndexViewModel(
            posts=[self._summary(post) for post in posts[start:start + page_size]],
            page=page,
            page_size=page_size,
            total_posts=len(posts),
            total_pages=math.ceil(len(posts) / page_size),
            tag=tag_slug,
        )

    async def get_post(self, slug: str) -> Optional[BlogPostViewModel]:
        post = await self.repository.get_by_slug(slug.strip("/"))
        if post is None or post.content_type_alias != BLOG_POST_CONTENT_TYPE:
            return None
        if not post.is_visible(self.clock.now()):
            return None
        html = self.renderer.render_content(post)
        text = post.search_text or html_to_text(html)
        summary = self._summary(post, text)
        return BlogPostViewModel(
            **summary.model_dump(),
            html=html,
            reading_time_minutes=reading_time(text),
            author=post.properties.get("author"),
        )

    def _summary(self, post: ContentDocument, text: Optional[str] = None) -> BlogPostSummary:
        if text is None:
            text = post.search_text or html_to_text(self.renderer.render_content(post))
        return BlogPostSummary(
            id=post.id,
            title=post.name,
            slug=post.slug,
            excerpt=post.properties.get("description") or make_excerpt(text),
            published_at=post.published_at,
            tags=post_tags(post),
        )
