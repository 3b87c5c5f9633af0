"""Public, server-rendered routes: pages, blog, sitemap and the error page.

This router has no ``/api`` prefix and is included last because it ends in a
catch-all path.
"""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import HTMLResponse, Response

from aerocms.api.dependencies import (
    get_blog_service,
    get_finder_pipeline,
    get_optional_user,
    get_renderer,
    get_site_repository,
    get_sitemap_generator,
)
from aerocms.content.finders import ContentFinderContext, ContentFinderPipeline
from aerocms.content.rendering import BlockRenderer
from aerocms.content.slugs import normalise_path
from aerocms.core.config import settings
from aerocms.data.sites import SiteRepository
from aerocms.models.user import CmsRoles, User
from aerocms.seo.sitemap import SitemapGenerator
from aerocms.services.blog import BlogService

logger = logging.getLogger(__name__)

router = APIRouter(include_in_schema=False)

ERROR_MESSAGES = {
    401: "You need to sign in to view this page.",
    403: "You do not have access to this page.",
    404: "The page you were looking for could not be found.",
}


def _not_found(renderer: BlockRenderer) -> HTMLResponse:
    html = renderer.render_template("error.html", title="Page not found", message=ERROR_MESSAGES[404])
    return HTMLResponse(html, status_code=404)


@router.get("/sitemap.xml")
async def sitemap(
    request: Request,
    generator: SitemapGenerator = Depends(get_sitemap_generator),
    sites: SiteRepository = Depends(get_site_repository),
) -> Response:
    site = getattr(request.state, "site", None) or await sites.get_default()
    if site is None:
        return Response(status_code=404)
    return Response(await generator.generate(site), media_type="application/xml")


@router.get(settings.ERROR_PAGE_PATH, response_class=HTMLResponse)
async def error_page(code: int = Query(500), renderer: BlockRenderer = Depends(get_renderer)) -> HTMLResponse:
    message = ERROR_MESSAGES.get(code, "Something went wrong while processing your request.")
    html = renderer.render_template("error.html", title=f"Error {code}", message=message)
    return HTMLResponse(html, status_code=code if 400 <= code < 600 else 500)


@router.get("/blog", response_class=HTMLResponse)
async def blog_index(
    page: int = Query(1, ge=1),
    tag: Optional[str] = None,
    service: BlogService = Depends(get_blog_service),
    renderer: BlockRenderer = Depends(get_renderer),
) -> HTMLResponse:
    model = await service.get_index(page, settings.BLOG_PAGE_SIZE, tag)
    return HTMLResponse(renderer.render_template("blog_index.html", model=model))


@router.get("/blog/{slug}", response_class=HTMLResponse)
async def blog_post(
    slug: str,
    service: BlogService = Depends(get_blog_service),
    renderer: BlockRenderer = Depends(get_renderer),
) -> HTMLResponse:
    post = await service.get_post(slug)
    if post is None:
        return _not_found(renderer)
    return HTMLResponse(renderer.render_template("blog_post.html", post=post))


@router.get("/{slug:path}", response_class=HTMLResponse)
async def render_page(
    request: Request,
    slug: str,
    preview: bool = False,
    pipeline: ContentFinderPipeline = Depends(get_finder_pipeline),
    renderer: BlockRenderer = Depends(get_renderer),
    user: Optional[User] = Depends(get_optional_user),
) -> HTMLResponse:
    is_preview = preview and user is not None and user.has_any_role(*CmsRoles.EDITORS)
    site = getattr(request.state, "site", None)
    context = ContentFinderContext(slug=normalise_path(slug), is_preview=is_preview, site=site, request=request)

    document = await pipeline.execute(context)
    if document is None:
        logger.info("No content for %s", context.slug)
        return _not_found(renderer)

    html = renderer.render_page(document, site, extra={"is_preview": is_preview})
    return HTMLResponse(html, status_code=context.status_code)
