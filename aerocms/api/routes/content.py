"""Content management endpoints: CRUD, publishing workflow, sections, import and SEO."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import BaseModel, Field

from aerocms.api.dependencies import (
    get_content_repository,
    get_content_type_repository,
    get_markdown_import_service,
    get_page_service,
    get_publishing_workflow,
    get_section_service,
    get_seo_analyzer,
)
from aerocms.api.security import require_roles
from aerocms.content.markdown import BLOG_POST_CONTENT_TYPE, MarkdownImportService
from aerocms.content.pages import PageService
from aerocms.content.publishing import PublishingWorkflow
from aerocms.content.sections import SectionService
from aerocms.content.slugs import generate_slug, normalise_path
from aerocms.core.clock import ensure_utc
from aerocms.core.exceptions import NotFoundError, ValidationError
from aerocms.data.content import ContentRepository, ContentTypeRepository
from aerocms.models.blocks import SectionLayout, block_from_dict
from aerocms.models.content import ContentDocument, ContentTypeDocument
from aerocms.models.user import CmsRoles, User
from aerocms.seo.analyzer import SeoAnalyzer
from aerocms.utils.audit import audit_log

logger = logging.getLogger(__name__)

router = APIRouter(tags=["content"])

editors = require_roles(*CmsRoles.EDITORS)
publishers = require_roles(*CmsRoles.PUBLISHERS)
admins = require_roles(CmsRoles.ADMIN)


class ContentCreateRequest(BaseModel):
    name: str = Field(..., min_length=1)
    content_type_alias: str
    slug: Optional[str] = None
    parent_id: Optional[str] = None
    language_code: Optional[str] = None
    properties: Dict[str, Any] = Field(default_factory=dict)
    blocks: List[Dict[str, Any]] = Field(default_factory=list)


class ContentUpdateRequest(BaseModel):
    name: Optional[str] = None
    slug: Optional[str] = None
    parent_id: Optional[str] = None
    sort_order: Optional[int] = None
    language_code: Optional[str] = None
    expires_at: Optional[datetime] = None
    properties: Optional[Dict[str, Any]] = None
    blocks: Optional[List[Dict[str, Any]]] = None


class PageCreateRequest(BaseModel):
    site_id: str
    name: str
    slug: Optional[str] = None


class SectionCreateRequest(BaseModel):
    layout: SectionLayout = SectionLayout.FULL


class SectionMoveRequest(BaseModel):
    direction: int = Field(..., description="-1 moves up, 1 moves down")


class MarkdownImportRequest(BaseModel):
    markdown: str


class SeoReport(BaseModel):
    content_id: str
    score: int
    checks: List[Dict[str, str]]


async def _load(repository: ContentRepository, content_id: str) -> ContentDocument:
    document = await repository.get_by_id(content_id)
    if document is None:
        raise NotFoundError("Content not found.")
    return document


async def _persist(repository: ContentRepository, document: ContentDocument, user: User) -> ContentDocument:
    return (await repository.save(document, user.id)).raise_for_errors()


def _routable_slug(content_type_alias: str, slug: str) -> str:
    # Blog posts are served under /blog/{slug}; everything else resolves by path.
    if content_type_alias == BLOG_POST_CONTENT_TYPE:
        return slug.strip().strip("/")
    return normalise_path(slug)


# Content types


@router.get("/content-types", response_model=List[ContentTypeDocument])
async def list_content_types(
    repository: ContentTypeRepository = Depends(get_content_type_repository),
    current_user: User = Depends(editors),
) -> List[ContentTypeDocument]:
    return await repository.get_all()


@router.post("/content-types", response_model=ContentTypeDocument, status_code=status.HTTP_201_CREATED)
@audit_log
async def save_content_type(
    payload: ContentTypeDocument,
    repository: ContentTypeRepository = Depends(get_content_type_repository),
    current_user: User = Depends(admins),
) -> ContentTypeDocument:
    existing = await repository.get_by_alias(payload.alias)
    if existing is not None and existing.id != payload.id:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Content type alias already exists")
    return (await repository.save(payload, current_user.id)).raise_for_errors()


# Content CRUD


@router.get("/content", response_model=List[ContentDocument])
async def list_content(
    content_type: Optional[str] = Query(None, alias="type"),
    parent_id: Optional[str] = None,
    repository: ContentRepository = Depends(get_content_repository),
    current_user: User = Depends(editors),
) -> List[ContentDocument]:
    if parent_id:
        return await repository.get_children(parent_id)
    if content_type:
        return await repository.get_by_content_type(content_type)
    return await repository.get_all()


@router.get("/content/{content_id}", response_model=ContentDocument)
async def get_content(
    content_id: str,
    repository: ContentRepository = Depends(get_content_repository),
    current_user: User = Depends(editors),
) -> ContentDocument:
    return await _load(repository, content_id)


@router.post("/content", response_model=ContentDocument, status_code=status.HTTP_201_CREATED)
@audit_log
async def create_content(
    payload: ContentCreateRequest,
    repository: ContentRepository = Depends(get_content_repository),
    content_types: ContentTypeRepository = Depends(get_content_type_repository),
    current_user: User = Depends(editors),
) -> ContentDocument:
    content_type = await content_types.get_by_alias(payload.content_type_alias)
    if content_type is None:
        raise ValidationError(f"Unknown content type '{payload.content_type_alias}'")
    if payload.parent_id is None and not content_type.allow_at_root:
        raise ValidationError(f"{content_type.name} cannot be created at the root")
    missing = content_type.missing_required(payload.properties)
    if missing:
        raise ValidationError(f"Missing required properties: {', '.join(missing)}")

    slug = _routable_slug(content_type.alias, payload.slug or generate_slug(payload.name))
    if await repository.get_by_slug(slug) is not None:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=f"Slug '{slug}' is already in use")

    document = ContentDocument(
        name=payload.name,
        slug=slug,
        content_type_alias=content_type.alias,
        parent_id=payload.parent_id,
        language_code=payload.language_code,
        properties=payload.properties,
        blocks=[block_from_dict(block) for block in payload.blocks],
        created_by=current_user.id,
    )
    return await _persist(repository, document, current_user)


@router.put("/content/{content_id}", response_model=ContentDocument)
@audit_log
async def update_content(
    content_id: str,
    payload: ContentUpdateRequest,
    repository: ContentRepository = Depends(get_content_repository),
    current_user: User = Depends(editors),
) -> ContentDocument:
    document = await _load(repository, content_id)
    slug = _routable_slug(document.content_type_alias, payload.slug) if payload.slug is not None else None
    if slug is not None and slug != document.slug:
        clash = await repository.get_by_slug(slug)
        if clash is not None and clash.id != document.id:
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=f"Slug '{slug}' is already in use")
        document.slug = slug
    for field in ("name", "parent_id", "sort_order", "language_code"):
        value = getattr(payload, field)
        if value is not None:
            setattr(document, field, value)
    if payload.expires_at is not None:
        document.expires_at = ensure_utc(payload.expires_at)
    if payload.properties is not None:
        document.properties.update(payload.properties)
    if payload.blocks is not None:
        document.blocks = [block_from_dict(block) for block in payload.blocks]
    return await _persist(repository, document, current_user)


@router.delete("/content/{content_id}", status_code=status.HTTP_204_NO_CONTENT)
@audit_log
async def delete_content(
    content_id: str,
    repository: ContentRepository = Depends(get_content_repository),
    current_user: User = Depends(publishers),
) -> None:
    (await repository.delete(content_id)).raise_for_errors()


# Pages


@router.get("/sites/{site_id}/pages", response_model=List[ContentDocument])
async def list_site_pages(
    site_id: str,
    pages: PageService = Depends(get_page_service),
    current_user: User = Depends(editors),
) -> List[ContentDocument]:
    return await pages.get_pages_for_site(site_id)


@router.post("/content/pages", response_model=ContentDocument, status_code=status.HTTP_201_CREATED)
@audit_log
async def create_page(
    payload: PageCreateRequest,
    pages: PageService = Depends(get_page_service),
    current_user: User = Depends(publishers),
) -> ContentDocument:
    result = await pages.create_page(payload.site_id, payload.name, payload.slug, created_by=current_user.id)
    return result.raise_for_errors()


# Publishing workflow


@router.post("/content/{content_id}/submit", response_model=ContentDocument)
@audit_log
async def submit_for_approval(
    content_id: str,
    workflow: PublishingWorkflow = Depends(get_publishing_workflow),
    current_user: User = Depends(editors),
) -> ContentDocument:
    return (await workflow.submit_for_approval(content_id, current_user.id)).raise_for_errors()


@router.post("/content/{content_id}/approve", response_model=ContentDocument)
@audit_log
async def approve(
    content_id: str,
    workflow: PublishingWorkflow = Depends(get_publishing_workflow),
    current_user: User = Depends(publishers),
) -> ContentDocument:
    return (await workflow.approve(content_id, current_user.id)).raise_for_errors()


@router.post("/content/{content_id}/reject", response_model=ContentDocument)
@audit_log
async def reject(
    content_id: str,
    workflow: PublishingWorkflow = Depends(get_publishing_workflow),
    current_user: User = Depends(publishers),
) -> ContentDocument:
    return (await workflow.reject(content_id, current_user.id)).raise_for_errors()


@router.post("/content/{content_id}/publish", response_model=ContentDocument)
@audit_log
async def publish(
    content_id: str,
    workflow: PublishingWorkflow = Depends(get_publishing_workflow),
    current_user: User = Depends(publishers),
) -> ContentDocument:
    return (await workflow.publish(content_id, current_user.id)).raise_for_errors()


@router.post("/content/{content_id}/unpublish", response_model=ContentDocument)
@audit_log
async def unpublish(
    content_id: str,
    workflow: PublishingWorkflow = Depends(get_publishing_workflow),
    current_user: User = Depends(publishers),
) -> ContentDocument:
    return (await workflow.unpublish(content_id, current_user.id)).raise_for_errors()


@router.post("/content/{content_id}/expire", response_model=ContentDocument)
@audit_log
async def expire(
    content_id: str,
    workflow: PublishingWorkflow = Depends(get_publishing_workflow),
    current_user: User = Depends(publishers),
) -> ContentDocument:
    return (await workflow.expire(content_id, current_user.id)).raise_for_errors()


# Sections


@router.post("/content/{content_id}/sections", response_model=ContentDocument, status_code=status.HTTP_201_CREATED)
async def add_section(
    content_id: str,
    payload: SectionCreateRequest,
    repository: ContentRepository = Depends(get_content_repository),
    sections: SectionService = Depends(get_section_service),
    current_user: User = Depends(editors),
) -> ContentDocument:
    page = await _load(repository, content_id)
    sections.add_section(page, payload.layout)
    return await _persist(repository, page, current_user)


@router.delete("/content/{content_id}/sections/{section_id}", response_model=ContentDocument)
async def remove_section(
    content_id: str,
    section_id: str,
    repository: ContentRepository = Depends(get_content_repository),
    sections: SectionService = Depends(get_section_service),
    current_user: User = Depends(editors),
) -> ContentDocument:
    page = await _load(repository, content_id)
    if not sections.remove_section(page, section_id):
        raise NotFoundError("Section not found.")
    return await _persist(repository, page, current_user)


@router.post("/content/{content_id}/sections/{section_id}/move", response_model=ContentDocument)
async def move_section(
    content_id: str,
    section_id: str,
    payload: SectionMoveRequest,
    repository: ContentRepository = Depends(get_content_repository),
    sections: SectionService = Depends(get_section_service),
    current_user: User = Depends(editors),
) -> ContentDocument:
    page = await _load(repository, content_id)
    if not sections.move_section(page, section_id, payload.direction):
        raise ValidationError("Section cannot be moved in that direction.")
    return await _persist(repository, page, current_user)


@router.post(
    "/content/{content_id}/sections/{section_id}/columns/{col_index}/blocks",
    response_model=ContentDocument,
    status_code=status.HTTP_201_CREATED,
)
async def add_block(
    content_id: str,
    section_id: str,
    col_index: int,
    payload: Dict[str, Any],
    repository: ContentRepository = Depends(get_content_repository),
    sections: SectionService = Depends(get_section_service),
    current_user: User = Depends(editors),
) -> ContentDocument:
    if not payload.get("type"):
        raise ValidationError("Block type is required.")
    page = await _load(repository, content_id)
    sections.add_block(page, section_id, col_index, block_from_dict(payload))
    return await _persist(repository, page, current_user)


@router.delete("/content/{content_id}/sections/{section_id}/blocks/{block_id}", response_model=ContentDocument)
async def remove_block(
    content_id: str,
    section_id: str,
    block_id: str,
    repository: ContentRepository = Depends(get_content_repository),
    sections: SectionService = Depends(get_section_service),
    current_user: User = Depends(editors),
) -> ContentDocument:
    page = await _load(repository, content_id)
    if not sections.remove_block(page, section_id, block_id):
        raise NotFoundError("Block not found.")
    return await _persist(repository, page, current_user)


# Import / SEO


@router.post("/content/import/markdown", response_model=ContentDocument, status_code=status.HTTP_201_CREATED)
@audit_log
async def import_markdown(
    payload: MarkdownImportRequest,
    importer: MarkdownImportService = Depends(get_markdown_import_service),
    current_user: User = Depends(editors),
) -> ContentDocument:
    return (await importer.import_markdown(payload.markdown, current_user.id)).raise_for_errors()


@router.get("/content/{content_id}/seo", response_model=SeoReport)
async def analyze_seo(
    content_id: str,
    repository: ContentRepository = Depends(get_content_repository),
    analyzer: SeoAnalyzer = Depends(get_seo_analyzer),
    current_user: User = Depends(editors),
) -> SeoReport:
    document = await _load(repository, content_id)
    result = analyzer.analyze(document)
    return SeoReport(
        content_id=document.id,
        score=result.score,
        checks=[
            {"check": item.check_alias, "status": item.status.value, "message": item.message}
            for item in result.checks
        ],
    )
