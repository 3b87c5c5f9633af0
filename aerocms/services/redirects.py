"""Redirect management; keeps the resolver cache in step with edits."""

from __future__ import annotations

from typing import List, Optional

from aerocms.core.results import CONFLICT, INVALID, NOT_FOUND, HandlerResult
from aerocms.data.media import RedirectRepository
from aerocms.models.seo import SeoRedirectDocument
from aerocms.seo.redirects import RedirectResolver


class RedirectService:
    def __init__(self, repository: RedirectRepository, resolver: Optional[RedirectResolver] = None) -> None:
        self.repository = repository
        self.resolver = resolver

    async def list_redirects(self) -> List[SeoRedirectDocument]:
        return await self.repository.get_all()

    async def save_redirect(
        self,
        from_url: str,
        to_url: str,
        status_code: int = 301,
        is_active: bool = True,
        redirect_id: Optional[str] = None,
        user: Optional[str] = None,
    ) -> HandlerResult[SeoRedirectDocument]:
        from_url, to_url = (from_url or "").strip(), (to_url or "").strip()
        if not from_url or not to_url:
            return HandlerResult.fail("Both from and to URLs are required.", code=INVALID)
        if from_url == to_url:
            return HandlerResult.fail("A redirect cannot point to itself.", code=INVALID)
        if status_code not in (301, 302):
            return HandlerResult.fail("Status code must be 301 or 302.", code=INVALID)

        existing = await self.repository.get_by_from_url(from_url)
        if redirect_id is not None:
            redirect = await self.repository.get_by_id(redirect_id)
            if redirect is None:
                return HandlerResult.fail("Redirect not found.", code=NOT_FOUND)
        else:
            redirect = None
        if existing is not None and (redirect is None or existing.id != redirect.id):
            return HandlerResult.fail(f"A redirect from '{from_url}' already exists.", code=CONFLICT)

        if redirect is None:
            redirect = SeoRedirectDocument(from_url=from_url, to_url=to_url, status_code=status_code)
        redirect.from_url = from_url
        redirect.to_url = to_url
        redirect.status_code = status_code
        redirect.is_active = is_active

        result = await self.repository.save(redirect, user)
        self._invalidate()
        return result

    async def delete_redirect(self, redirect_id: str) -> HandlerResult[None]:
        result = await self.repository.delete(redirect_id)
        self._invalidate()
        return result

    def _invalidate(self) -> None:
        if self.resolver is not None:
            self.resolver.invalidate()
