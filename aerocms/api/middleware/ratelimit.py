"""Simple Redis-backed rate limiting middleware."""

from __future__ import annotations

import logging
from typing import Callable, Optional

from fastapi import Request, status
from redis.exceptions import RedisError
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import JSONResponse, Response

from aerocms.core.config import settings
from aerocms.core.database import database_manager
from aerocms.core.exceptions import UnauthorizedError
from aerocms.core.security import verify_access_token

logger = logging.getLogger(__name__)


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Enforce a fixed-window rate limit per client identity."""

    def __init__(self, app, *, requests: Optional[int] = None, window_seconds: int = 60) -> None:
        super().__init__(app)
        self.requests = requests or settings.RATE_LIMIT_PER_MINUTE
        self.window_seconds = window_seconds

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        redis = database_manager.redis
        if redis is None:
            return await call_next(request)

        identifier = self._derive_identifier(request)
        bucket = f"ratelimit:{identifier}"
        try:
            ttl = await redis.ttl(bucket)
            count = await redis.incr(bucket)
            if count == 1 or ttl == -1:
                await redis.expire(bucket, self.window_seconds)
        except RedisError as exc:
            logger.warning("Rate limiter unavailable: %s", exc)
            return await call_next(request)

        if count > self.requests:
            retry_after = ttl if ttl > 0 else self.window_seconds
            return JSONResponse(
                status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                content={"detail": "Rate limit exceeded", "code": "rate_limited"},
                headers={"Retry-After": str(retry_after)},
            )

        response = await call_next(request)
        response.headers["X-RateLimit-Limit"] = str(self.requests)
        response.headers["X-RateLimit-Remaining"] = str(max(self.requests - count, 0))
        return response

    def _derive_identifier(self, request: Request) -> str:
        api_key = request.headers.get("X-API-Key")
        if api_key:
            return f"api:{api_key[:12]}"

        auth_header = request.headers.get("Authorization")
        if auth_header and auth_header.startswith("Bearer "):
            token = auth_header.split(" ", 1)[1]
            try:
                payload = verify_access_token(token)
                return f"user:{payload.get('sub', 'anonymous')}"
            except UnauthorizedError:
                pass

        client_ip = request.client.host if request.client else "anonymous"
        return f"ip:{client_ip}"
