"""Database connectivity layer for Aero CMS."""

from __future__ import annotations

import logging
from typing import Optional

import redis.asyncio as redis
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase

from aerocms.core.config import settings

logger = logging.getLogger(__name__)


class DatabaseManager:
    """Lazily establishes connections to the document store and cache."""

    def __init__(self) -> None:
        self.redis: Optional[redis.Redis] = None
        self.mongodb: Optional[AsyncIOMotorClient] = None

    @property
    def database(self) -> Optional[AsyncIOMotorDatabase]:
        if self.mongodb is None:
            return None
        return self.mongodb[settings.MONGODB_DATABASE]

    async def initialize(self) -> None:
        """Connect to all backing services."""

        logger.info("Initializing Aero CMS database manager")

        # Redis backs rate limiting and the delivery cache
        self.redis = await redis.from_url(str(settings.REDIS_URL), decode_responses=True)

        # MongoDB holds every CMS document; datetimes come back UTC-aware
        self.mongodb = AsyncIOMotorClient(str(settings.MONGODB_URL), tz_aware=True)

        logger.info("Database manager initialized (database=%s)", settings.MONGODB_DATABASE)

    async def close(self) -> None:
        """Tear down connections gracefully."""

        logger.info("Closing database connections")

        if self.redis is not None:
            await self.redis.close()
            self.redis = None

        if self.mongodb is not None:
            self.mongodb.close()
            self.mongodb = None


# Singleton instance used by the repositories
database_manager = DatabaseManager()
