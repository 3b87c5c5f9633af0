"""Redis-backed JSON cache."""

from __future__ import annotations

import json
import logging
from typing import Any, Optional

from redis.exceptions import RedisError

from aerocms.core.database import database_manager

logger = logging.getLogger(__name__)


class Cache:
    """Wrapper around Redis for simple JSON caching.

    A missing or unreachable Redis degrades to cache misses.
    """

    def __init__(self, prefix: str = "aerocms") -> None:
        self.prefix = prefix

    def _key(self, key: str) -> str:
        return f"{self.prefix}:{key}"

    async def get(self, key: str) -> Optional[Any]:
        redis = database_manager.redis
        if redis is None:
            return None
        try:
            value = await redis.get(self._key(key))
        except RedisError as exc:
            logger.warning("Cache read failed for %s: %s", key, exc)
            return None
        return json.loads(value) if value else None

    async def set(self, key: str, value: Any, ttl: int = 300) -> None:
        redis = database_manager.redis
        if redis is None:
            return
        try:
            await redis.set(self._key(key), json.dumps(value, default=str), ex=ttl)
        except RedisError as exc:
            logger.warning("Cache write failed for %s: %s", key, exc)

    async def delete(self, key: str) -> None:
        redis = database_manager.redis
        if redis is None:
            return
        try:
            await redis.delete(self._key(key))
        except RedisError as exc:
            logger.warning("Cache delete failed for %s: %s", key, exc)


cache = Cache()
