"""FastAPI application entrypoint for Aero CMS."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, RedirectResponse, Response
from fastapi.staticfiles import StaticFiles
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from pymongo.errors import PyMongoError
from starlette.exceptions import HTTPException as StarletteHTTPException

from aerocms.api.dependencies import (
    get_auth_service,
    get_content_repository,
    get_content_type_repository,
    get_site_repository,
    get_user_repository,
    redirect_resolver,
)
from aerocms.api.middleware.logging import LoggingMiddleware
from aerocms.api.middleware.ratelimit import RateLimitMiddleware
from aerocms.api.middleware.redirects import RedirectMiddleware
from aerocms.api.middleware.site import SiteResolutionMiddleware
from aerocms.api.routes import admin, auth, blog, content, delivery, languages, media, render, seo, sites, tags
from aerocms.bootstrap import SiteBootstrapService
from aerocms.core.config import settings
from aerocms.core.database import database_manager
from aerocms.core.exceptions import ApplicationError, ServiceUnavailableError
from aerocms.core.observability import setup_tracing
from aerocms.data.languages import LanguageRepository

logger = logging.getLogger(__name__)

API_PREFIX = "/api"


async def bootstrap(admin_email: Optional[str] = None, admin_password: Optional[str] = None) -> None:
    service = SiteBootstrapService(
        get_site_repository(),
        get_content_type_repository(),
        get_content_repository(),
        languages=LanguageRepository(),
        auth=get_auth_service(get_user_repository()),
    )
    await service.run(admin_email, admin_password)


@asynccontextmanager
async def lifespan(_: FastAPI) -> AsyncIterator[None]:
    """Initialize shared resources on startup and tear them down on shutdown."""

    await database_manager.initialize()
    try:
        await bootstrap()
    except (ServiceUnavailableError, PyMongoError) as exc:
        logger.error("Site bootstrap failed: %s", exc)

    try:
        yield
    finally:
        await database_manager.close()


app = FastAPI(
    title=settings.API_TITLE,
    version=settings.API_VERSION,
    debug=settings.DEBUG,
    lifespan=lifespan,
)
app.state.redirect_resolver = redirect_resolver

setup_tracing(app)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
# Last added runs first: rate limit, logging, site resolution, redirects, CORS.
app.add_middleware(RedirectMiddleware, resolver=redirect_resolver)
app.add_middleware(SiteResolutionMiddleware)
app.add_middleware(LoggingMiddleware)
app.add_middleware(RateLimitMiddleware)

# Routers
app.include_router(admin.router, prefix=API_PREFIX)
app.include_router(auth.router, prefix=API_PREFIX)
app.include_router(content.router, prefix=API_PREFIX)
app.include_router(sites.router, prefix=API_PREFIX)
app.include_router(media.router, prefix=API_PREFIX)
app.include_router(seo.router, prefix=API_PREFIX)
app.include_router(tags.router, prefix=API_PREFIX)
app.include_router(languages.router, prefix=API_PREFIX)
app.include_router(blog.router, prefix=API_PREFIX)
app.include_router(delivery.router, prefix=API_PREFIX)


@app.get("/metrics", include_in_schema=False)
async def metrics() -> Response:
    return Response(generate_latest(), media_type=CONTENT_TYPE_LATEST)


if settings.STORAGE_BACKEND == "disk":
    app.mount(settings.MEDIA_URL_PREFIX, StaticFiles(directory=settings.MEDIA_ROOT, check_dir=False), name="media")

# The public renderer ends in a catch-all route, so it goes last.
app.include_router(render.router)


def is_api_request(request: Request) -> bool:
    return request.url.path.startswith(API_PREFIX)


def error_response(request: Request, status_code: int, detail: str, code: str) -> Response:
    """JSON for API callers; everyone else is sent to the friendly error page."""

    if is_api_request(request):
        return JSONResponse(status_code=status_code, content={"detail": detail, "code": code})
    return RedirectResponse(f"{settings.ERROR_PAGE_PATH}?code={status_code}", status_code=302)


@app.exception_handler(ApplicationError)
async def handle_application_error(request: Request, exc: ApplicationError):
    """Return standardized responses for application layer exceptions."""

    if exc.status_code >= 500:
        logger.error("Application error on %s: %s", request.url.path, exc.message)
    return error_response(request, exc.status_code, exc.message, exc.code)


@app.exception_handler(StarletteHTTPException)
async def handle_http_error(request: Request, exc: StarletteHTTPException):
    if is_api_request(request):
        return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail}, headers=exc.headers)
    return error_response(request, exc.status_code, str(exc.detail), "http_error")


@app.exception_handler(Exception)
async def handle_unexpected_error(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s", request.url.path)
    return error_response(request, 500, "An unexpected error occurred.", "internal_error")
