#!/usr/bin/env python
"""
Database migration script for Aero CMS.

Creates the MongoDB indexes the repositories rely on for slug, hostname and
redirect lookups.

Usage:
    python scripts/migrate.py [migrate|rollback|check]
"""

from __future__ import annotations

import asyncio
import logging
import sys

from pymongo import ASCENDING, IndexModel
from pymongo.errors import PyMongoError

from aerocms.core.config import settings
from aerocms.core.database import database_manager

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


# ============================================================================
# MongoDB index definitions
# ============================================================================

MONGODB_INDEXES = {
    "content": [
        IndexModel([("slug", ASCENDING)], name="content_slug"),
        IndexModel([("content_type_alias", ASCENDING), ("status", ASCENDING)], name="content_type_status"),
        IndexModel([("parent_id", ASCENDING), ("sort_order", ASCENDING)], name="content_parent"),
    ],
    "content_types": [IndexModel([("alias", ASCENDING)], name="content_type_alias", unique=True)],
    "sites": [
        IndexModel([("hostnames", ASCENDING)], name="site_hostnames"),
        IndexModel([("is_default", ASCENDING), ("created_at", ASCENDING)], name="site_default"),
    ],
    "media": [IndexModel([("parent_id", ASCENDING)], name="media_parent")],
    "seo_redirects": [IndexModel([("from_url", ASCENDING)], name="redirect_from_url", unique=True)],
    "tags": [
        IndexModel([("tag_name", ASCENDING)], name="tag_name", unique=True),
        IndexModel([("slug", ASCENDING)], name="tag_slug"),
    ],
    "tag_items": [
        IndexModel([("item_id", ASCENDING)], name="tag_item_item"),
        IndexModel([("tag_id", ASCENDING)], name="tag_item_tag"),
    ],
    "languages": [IndexModel([("iso_code", ASCENDING)], name="language_iso_code", unique=True)],
    "dictionary": [IndexModel([("key", ASCENDING)], name="dictionary_key", unique=True)],
    "users": [IndexModel([("email", ASCENDING)], name="user_email", unique=True)],
    "api_keys": [IndexModel([("hashed_key", ASCENDING)], name="api_key_hash", unique=True)],
}


async def run_migrations() -> None:
    """Create every index; existing ones are left untouched."""
    logger.info("Starting Aero CMS database migrations on %s", settings.MONGODB_DATABASE)

    await database_manager.initialize()
    database = database_manager.database

    if database is None:
        logger.error("MongoDB client unavailable")
        return

    try:
        for collection, indexes in MONGODB_INDEXES.items():
            names = await database[collection].create_indexes(indexes)
            logger.info("%s: %s", collection, ", ".join(names))
        logger.info("Database migrations completed successfully")
    except PyMongoError as e:
        logger.error(f"Migration failed: {e}")
        raise
    finally:
        await database_manager.close()


async def rollback_migrations() -> None:
    """Drop the indexes created by ``run_migrations``."""
    logger.warning("Rolling back migrations - this will drop the Aero CMS indexes!")

    response = input("Are you sure? (yes/no): ")
    if response.lower() != "yes":
        logger.info("Rollback cancelled.")
        return

    await database_manager.initialize()
    database = database_manager.database

    if database is None:
        logger.error("MongoDB client unavailable")
        return

    try:
        for collection, indexes in MONGODB_INDEXES.items():
            for index in indexes:
                name = index.document["name"]
                try:
                    await database[collection].drop_index(name)
                    logger.info(f"Dropped index: {collection}.{name}")
                except PyMongoError as e:
                    logger.warning(f"Index {collection}.{name} not dropped: {e}")
        logger.info("Rollback completed.")
    finally:
        await database_manager.close()


async def check_schema() -> None:
    """Print the indexes and document counts of each collection."""
    logger.info("Checking database schema...")

    await database_manager.initialize()
    database = database_manager.database

    if database is None:
        logger.error("MongoDB client unavailable")
        return

    try:
        for collection in MONGODB_INDEXES:
            info = await database[collection].index_information()
            count = await database[collection].count_documents({})
            logger.info(f"  {collection}: {count} documents, indexes: {', '.join(sorted(info))}")
    finally:
        await database_manager.close()


def main() -> None:
    """Main entry point."""
    import argparse

    parser = argparse.ArgumentParser(description="Aero CMS Database Migration Tool")
    parser.add_argument(
        "command",
        nargs="?",
        default="migrate",
        choices=["migrate", "rollback", "check"],
        help="Command to execute (default: migrate)"
    )

    args = parser.parse_args()

    try:
        if args.command == "migrate":
            asyncio.run(run_migrations())
        elif args.command == "rollback":
            asyncio.run(rollback_migrations())
        elif args.command == "check":
            asyncio.run(check_schema())
    except KeyboardInterrupt:
        logger.info("\nOperation cancelled by user.")
        sys.exit(1)
    except PyMongoError as e:
        logger.error(f"Operation failed: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
