"""Time source abstraction so publishing rules can be tested deterministically."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional, Protocol


class Clock(Protocol):
    def now(self) -> datetime:
        ...


class SystemClock:
    def now(self) -> datetime:
        return datetime.now(timezone.utc)


class FixedClock:
    """Clock pinned to a single instant."""

    def __init__(self, instant: datetime) -> None:
        self.instant = ensure_utc(instant)

    def now(self) -> datetime:
        return self.instant


def ensure_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Interpret naive datetimes as UTC and normalise aware ones to UTC."""

    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


system_clock = SystemClock()

__all__ = ["Clock", "FixedClock", "SystemClock", "ensure_utc", "system_clock"]
