"""SEO redirects and analysis results."""

from __future__ import annotations

from enum import Enum
from typing import List

from pydantic import BaseModel, Field, field_validator

from aerocms.models.base import CmsDocument


class SeoRedirectDocument(CmsDocument):
    from_url: str
    to_url: str
    status_code: int = 301
    is_active: bool = True

    @field_validator("status_code")
    @classmethod
    def _redirect_status(cls, value: int) -> int:
        if value not in (301, 302):
            raise ValueError("status_code must be 301 or 302")
        return value


class SeoCheckStatus(str, Enum):
    PASS = "pass"
    WARNING = "warning"
    FAIL = "fail"
    INFO = "info"

    @property
    def penalty(self) -> int:
        if self is SeoCheckStatus.WARNING:
            return 25
        if self is SeoCheckStatus.FAIL:
            return 100
        return 0


class SeoCheckItem(BaseModel):
    check_alias: str
    status: SeoCheckStatus
    message: str


class SeoCheckResult(BaseModel):
    content_id: str = ""
    checks: List[SeoCheckItem] = Field(default_factory=list)

    @property
    def score(self) -> int:
        if not self.checks:
            return 100
        penalty = sum(check.status.penalty for check in self.checks)
        value = 100 - (penalty / (len(self.checks) * 100) * 100)
        return max(0, int(value))

    def add(self, alias: str, status: SeoCheckStatus, message: str) -> None:
        self.checks.append(SeoCheckItem(check_alias=alias, status=status, message=message))
