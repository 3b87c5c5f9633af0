"""Answers requests matching an SEO redirect before routing."""

from __future__ import annotations

import logging
from typing import Callable, Optional

from fastapi import Request
from pymongo.errors import PyMongoError
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import RedirectResponse, Response

from aerocms.core.exceptions import ServiceUnavailableError
from aerocms.seo.redirects import RedirectResolver
from aerocms.utils.monitoring import observe_redirect

logger = logging.getLogger(__name__)

SKIPPED_PREFIXES = ("/admin", "/api", "/account")


def should_skip(path: str) -> bool:
    lowered = path.lower()
    return lowered.startswith(SKIPPED_PREFIXES) or "." in path


class RedirectMiddleware(BaseHTTPMiddleware):
    def __init__(self, app, *, resolver: Optional[RedirectResolver] = None) -> None:
        super().__init__(app)
        self.resolver = resolver

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        path = request.url.path
        if should_skip(path):
            return await call_next(request)

        resolver = getattr(request.app.state, "redirect_resolver", None) or self.resolver
        if resolver is None:
            return await call_next(request)

        target = path + (f"?{request.url.query}" if request.url.query else "")
        try:
            match = await resolver.resolve(target)
        except (ServiceUnavailableError, PyMongoError) as exc:
            logger.warning("Redirect lookup failed for %s: %s", target, exc)
            return await call_next(request)
        except Exception:
            logger.exception("Redirect resolution error for %s", target)
            return await call_next(request)

        if match is None:
            return await call_next(request)

        logger.info("Redirecting %s to %s (%d)", target, match.location, match.status_code)
        observe_redirect(match.status_code)
        return RedirectResponse(match.location, status_code=match.status_code)
