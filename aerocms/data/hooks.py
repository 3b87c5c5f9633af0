"""Before/after save hooks for content documents."""

from __future__ import annotations

import logging
from typing import Awaitable, Callable, List, Optional, Protocol

from aerocms.core.results import HandlerResult
from aerocms.models.content import ContentDocument

logger = logging.getLogger(__name__)


class BeforeSaveHook(Protocol):
    async def before_save(self, document: ContentDocument) -> None:
        ...


class AfterSaveHook(Protocol):
    async def after_save(self, document: ContentDocument) -> None:
        ...


class ReleaseHook(Protocol):
    """Called with the stored document whose slug stops resolving (delete or rename)."""

    async def after_release(self, document: ContentDocument) -> None:
        ...


class SaveHookPipeline:
    """Runs registered hooks around a repository save."""

    def __init__(self) -> None:
        self.before: List[BeforeSaveHook] = []
        self.after: List[AfterSaveHook] = []
        self.released: List[ReleaseHook] = []

    def register(self, hook) -> None:
        if hasattr(hook, "before_save"):
            self.before.append(hook)
        if hasattr(hook, "after_save"):
            self.after.append(hook)
        if hasattr(hook, "after_release"):
            self.released.append(hook)

    async def run(
        self,
        document: ContentDocument,
        save: Callable[[ContentDocument], Awaitable[HandlerResult[ContentDocument]]],
        previous: Optional[ContentDocument] = None,
    ) -> HandlerResult[ContentDocument]:
        try:
            for hook in self.before:
                await hook.before_save(document)
        except Exception as exc:
            logger.exception("before_save hook failed for content %s", document.id)
            return HandlerResult.fail(f"Save hook failed: {exc}")

        result = await save(document)
        if not result.success:
            return result

        for hook in self.after:
            try:
                await hook.after_save(document)
            except Exception:
                logger.exception("after_save hook %s failed for content %s", type(hook).__name__, document.id)
        if previous is not None and previous.slug != document.slug:
            await self.release(previous)
        return result

    async def release(self, document: ContentDocument) -> None:
        for hook in self.released:
            try:
                await hook.after_release(document)
            except Exception:
                logger.exception("after_release hook %s failed for content %s", type(hook).__name__, document.id)
