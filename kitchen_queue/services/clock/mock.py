"""
Fixed Clock

Settable clock for tests and simulations. Time only moves when the
caller moves it, either to an absolute instant with ``set`` or by a
step with ``advance``.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

from kitchen_queue.core.timeutils import coerce_timestamp
from kitchen_queue.services.clock.base import BaseClock

logger = logging.getLogger(__name__)


class FixedClock(BaseClock):
    """Deterministic clock that is stepped manually."""

    def __init__(self, start: Optional[datetime] = None):
        self._now = self._normalise(start or datetime.now(timezone.utc))
        logger.debug(f"FixedClock initialized at {self._now.isoformat()}")

    @property
    def provider_name(self) -> str:
        return "fixed"

    @staticmethod
    def _normalise(value: datetime) -> datetime:
        normalised = coerce_timestamp(value)
        if normalised is None:
            raise ValueError(f"FixedClock needs a datetime, got {value!r}")
        return normalised

    def now(self) -> datetime:
        return self._now

    def set(self, value: datetime) -> None:
        """Jump to an absolute instant (backwards jumps model clock drift)."""
        self._now = self._normalise(value)

    def advance(self, seconds: float = 0, **kwargs) -> datetime:
        """Step forward; keyword arguments are passed to ``timedelta``."""
        self._now = self._now + timedelta(seconds=seconds, **kwargs)
        return self._now
