"""Resolves the current site from the request host."""

from __future__ import annotations

import logging
from typing import Callable, Optional

from fastapi import Request
from pymongo.errors import PyMongoError
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from aerocms.core.exceptions import ServiceUnavailableError
from aerocms.data.sites import SiteRepository
from aerocms.models.site import SiteDocument

logger = logging.getLogger(__name__)


class SiteResolutionMiddleware(BaseHTTPMiddleware):
    """Stores the matching site (or the default one) on ``request.state.site``."""

    def __init__(self, app, *, repository: Optional[SiteRepository] = None) -> None:
        super().__init__(app)
        self.repository = repository or SiteRepository()

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request.state.site = await self.resolve(request)
        return await call_next(request)

    async def resolve(self, request: Request) -> Optional[SiteDocument]:
        repository = getattr(request.app.state, "site_repository", None) or self.repository
        host = (request.headers.get("host") or "").split(":", 1)[0].lower()
        try:
            site = await repository.get_by_hostname(host) if host else None
            return site or await repository.get_default()
        except (ServiceUnavailableError, PyMongoError) as exc:
            logger.debug("Site resolution skipped: %s", exc)
            return None
