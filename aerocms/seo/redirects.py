"""Redirect table compilation and lookup."""

from __future__ import annotations

import logging
import re
import time
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Dict, List, Optional, Pattern, Tuple

from aerocms.models.seo import SeoRedirectDocument

logger = logging.getLogger(__name__)

REGEX_CHARACTERS = set("()[]{}|^$*+?\\")
_GROUP_REFERENCE = re.compile(r"\$(\d+)")

RedirectLoader = Callable[[], Awaitable[List[SeoRedirectDocument]]]


@dataclass(frozen=True)
class RedirectMatch:
    location: str
    status_code: int


@dataclass
class RedirectTable:
    direct: Dict[str, SeoRedirectDocument] = field(default_factory=dict)
    case_insensitive: Dict[str, SeoRedirectDocument] = field(default_factory=dict)
    patterns: List[Tuple[Pattern[str], SeoRedirectDocument]] = field(default_factory=list)

    @classmethod
    def compile(cls, redirects: List[SeoRedirectDocument]) -> "RedirectTable":
        table = cls()
        for redirect in redirects:
            if not redirect.is_active or not redirect.from_url or not (redirect.to_url or "").strip():
                continue
            if is_regex(redirect.from_url):
                try:
                    table.patterns.append((re.compile(redirect.from_url, re.IGNORECASE), redirect))
                    continue
                except re.error as exc:
                    logger.warning("Invalid redirect pattern %r (%s); treating as a literal", redirect.from_url, exc)
            table.direct.setdefault(redirect.from_url, redirect)
            table.case_insensitive.setdefault(redirect.from_url.lower(), redirect)
        return table

    def match(self, path: str) -> Optional[RedirectMatch]:
        redirect = self.direct.get(path) or self.case_insensitive.get(path.lower())
        if redirect is not None:
            return RedirectMatch(redirect.to_url, redirect.status_code)
        for pattern, redirect in self.patterns:
            found = pattern.search(path)
            if found:
                # Targets reference groups as $1 or \1.
                target = _GROUP_REFERENCE.sub(r"\\g<\1>", redirect.to_url)
                try:
                    location = found.expand(target)
                except (re.error, IndexError) as exc:
                    logger.warning("Cannot expand redirect target %r for %s: %s", redirect.to_url, path, exc)
                    continue
                return RedirectMatch(location, redirect.status_code)
        return None


def is_regex(from_url: str) -> bool:
    return any(character in REGEX_CHARACTERS for character in from_url)


class RedirectResolver:
    """Caches the compiled redirect table for ``ttl_seconds``."""

    def __init__(
        self,
        loader: RedirectLoader,
        ttl_seconds: float = 300,
        timer: Callable[[], float] = time.monotonic,
    ) -> None:
        self.loader = loader
        self.ttl_seconds = ttl_seconds
        self.timer = timer
        self._table: Optional[RedirectTable] = None
        self._loaded_at = 0.0

    async def table(self) -> RedirectTable:
        now = self.timer()
        if self._table is None or now - self._loaded_at >= self.ttl_seconds:
            redirects = await self.loader()
            self._table = RedirectTable.compile(redirects)
            self._loaded_at = now
            logger.debug("Loaded %d redirects", len(redirects))
        return self._table

    async def resolve(self, path: str) -> Optional[RedirectMatch]:
        return (await self.table()).match(path)

    def invalidate(self) -> None:
        self._table = None
