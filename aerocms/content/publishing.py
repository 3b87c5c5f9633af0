"""Publishing workflow transitions."""

from __future__ import annotations

import logging
from typing import Optional

from aerocms.core.clock import Clock, system_clock
from aerocms.core.results import INVALID, NOT_FOUND, HandlerResult
from aerocms.data.content import ContentRepository, ContentTypeRepository
from aerocms.models.content import ContentDocument, PublishingStatus

logger = logging.getLogger(__name__)


class PublishingWorkflow:
    """Moves content between publishing states.

    Draft -> PendingApproval -> Approved -> Published -> Expired, with
    reject (back to Draft) and unpublish (Published back to Draft).
    """

    def __init__(
        self,
        content: ContentRepository,
        content_types: ContentTypeRepository,
        clock: Clock = system_clock,
    ) -> None:
        self.content = content
        self.content_types = content_types
        self.clock = clock

    async def submit_for_approval(self, content_id: str, user: Optional[str] = None) -> HandlerResult[ContentDocument]:
        document = await self.content.get_by_id(content_id)
        if document is None:
            return _missing()
        if document.status != PublishingStatus.DRAFT:
            return HandlerResult.fail(
                f"Cannot submit for approval from status {document.status.value}.", code=INVALID
            )
        return await self._transition(document, PublishingStatus.PENDING_APPROVAL, user)

    async def approve(self, content_id: str, user: Optional[str] = None) -> HandlerResult[ContentDocument]:
        document = await self.content.get_by_id(content_id)
        if document is None:
            return _missing()
        if document.status != PublishingStatus.PENDING_APPROVAL:
            return HandlerResult.fail("Only content pending approval can be approved.", code=INVALID)
        return await self._transition(document, PublishingStatus.APPROVED, user)

    async def reject(self, content_id: str, user: Optional[str] = None) -> HandlerResult[ContentDocument]:
        document = await self.content.get_by_id(content_id)
        if document is None:
            return _missing()
        if document.status != PublishingStatus.PENDING_APPROVAL:
            return HandlerResult.fail("Only content pending approval can be rejected.", code=INVALID)
        return await self._transition(document, PublishingStatus.DRAFT, user)

    async def publish(self, content_id: str, user: Optional[str] = None) -> HandlerResult[ContentDocument]:
        document = await self.content.get_by_id(content_id)
        if document is None:
            return _missing()
        if document.status == PublishingStatus.PUBLISHED:
            return HandlerResult.fail("Content is already published.", code=INVALID)
        if document.status == PublishingStatus.DRAFT:
            content_type = await self.content_types.get_by_alias(document.content_type_alias)
            if content_type is not None and content_type.requires_approval:
                return HandlerResult.fail("Requires approval before publishing.", code=INVALID)
        if document.published_at is None:
            document.published_at = self.clock.now()
        return await self._transition(document, PublishingStatus.PUBLISHED, user)

    async def unpublish(self, content_id: str, user: Optional[str] = None) -> HandlerResult[ContentDocument]:
        document = await self.content.get_by_id(content_id)
        if document is None:
            return _missing()
        if document.status != PublishingStatus.PUBLISHED:
            return HandlerResult.fail("Content is not published.", code=INVALID)
        return await self._transition(document, PublishingStatus.DRAFT, user)

    async def expire(self, content_id: str, user: Optional[str] = None) -> HandlerResult[ContentDocument]:
        document = await self.content.get_by_id(content_id)
        if document is None:
            return _missing()
        if document.status != PublishingStatus.PUBLISHED:
            return HandlerResult.fail("Only published content can be expired.", code=INVALID)
        return await self._transition(document, PublishingStatus.EXPIRED, user)

    async def _transition(
        self, document: ContentDocument, status: PublishingStatus, user: Optional[str]
    ) -> HandlerResult[ContentDocument]:
        previous = document.status
        document.status = status
        result = await self.content.save(document, user)
        if result.success:
            logger.info(
                "content.status_changed",
                extra={"content_id": document.id, "from": previous.value, "to": status.value, "user": user},
            )
        return result


def _missing() -> HandlerResult[ContentDocument]:
    return HandlerResult.fail("Content not found.", code=NOT_FOUND)
