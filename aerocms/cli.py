"""Command line entry for Aero CMS."""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from typing import List, Optional

import uvicorn

from aerocms.core.config import settings
from aerocms.core.database import database_manager

logger = logging.getLogger("aerocms.cli")


def run_server(host: str, port: int, reload: bool = False) -> None:
    uvicorn.run("aerocms.api.main:app", host=host, port=port, reload=reload)


async def seed(admin_email: Optional[str], admin_password: Optional[str]) -> None:
    from aerocms.api.main import bootstrap

    await database_manager.initialize()
    try:
        await bootstrap(admin_email, admin_password)
        logger.info("Seeding complete")
    finally:
        await database_manager.close()


async def create_user(email: str, password: str, name: str, roles: List[str]) -> int:
    from aerocms.data.users import UserRepository
    from aerocms.services.auth import AuthService

    await database_manager.initialize()
    try:
        result = await AuthService(UserRepository()).register(email, password, name, roles)
    finally:
        await database_manager.close()
    if not result.success:
        logger.error("Could not create user: %s", result.message)
        return 1
    logger.info("Created user %s with roles %s", result.value.email, ", ".join(result.value.roles))
    return 0


async def write_sitemap(output: Optional[str]) -> int:
    from aerocms.data.content import ContentRepository
    from aerocms.data.sites import SiteRepository
    from aerocms.seo.sitemap import SitemapGenerator

    await database_manager.initialize()
    try:
        site = await SiteRepository().get_default()
        if site is None:
            logger.error("No default site configured")
            return 1
        xml = await SitemapGenerator(ContentRepository()).generate(site)
    finally:
        await database_manager.close()
    if output:
        with open(output, "w", encoding="utf-8") as handle:
            handle.write(xml)
    else:
        sys.stdout.write(xml)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="aerocms", description="Aero CMS management commands")
    commands = parser.add_subparsers(dest="command")

    serve = commands.add_parser("serve", help="Run the HTTP server")
    serve.add_argument("--host", default="0.0.0.0")
    serve.add_argument("--port", type=int, default=8080)
    serve.add_argument("--reload", action="store_true")

    seed_cmd = commands.add_parser("seed", help="Create the default site, content types and admin user")
    seed_cmd.add_argument("--admin-email")
    seed_cmd.add_argument("--admin-password")

    user = commands.add_parser("create-user", help="Register a CMS user")
    user.add_argument("email")
    user.add_argument("password")
    user.add_argument("--name", default="")
    user.add_argument("--role", dest="roles", action="append", default=[])

    sitemap = commands.add_parser("sitemap", help="Print the default site's sitemap.xml")
    sitemap.add_argument("--output", "-o")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    logging.basicConfig(level=settings.LOG_LEVEL)
    args = build_parser().parse_args(argv)

    if args.command in (None, "serve"):
        run_server(getattr(args, "host", "0.0.0.0"), getattr(args, "port", 8080), getattr(args, "reload", False))
        return 0
    if args.command == "seed":
        asyncio.run(seed(args.admin_email, args.admin_password))
        return 0
    if args.command == "create-user":
        return asyncio.run(create_user(args.email, args.password, args.name, args.roles))
    return asyncio.run(write_sitemap(args.output))


if __name__ == "__main__":
    sys.exit(main())
