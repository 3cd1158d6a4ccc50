"""
System Clock

Wall-clock time from the host, always timezone-aware UTC.
"""

from datetime import datetime, timezone

from kitchen_queue.services.clock.base import BaseClock


class SystemClock(BaseClock):
    """Host wall clock."""

    @property
    def provider_name(self) -> str:
        return "system"

    def now(self) -> datetime:
        return datetime.now(timezone.utc)
