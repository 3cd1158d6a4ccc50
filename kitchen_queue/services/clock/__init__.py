"""
Clock Factory

Returns the clock used by the queue engine. Production always runs on
the system clock; tests construct FixedClock directly and inject it.

Usage:
    from kitchen_queue.services.clock import get_clock

    now = get_clock().now()
"""

import logging
from functools import lru_cache

from kitchen_queue.services.clock.base import BaseClock
from kitchen_queue.services.clock.system import SystemClock
from kitchen_queue.services.clock.mock import FixedClock

logger = logging.getLogger(__name__)


@lru_cache()
def get_clock() -> BaseClock:
    """Get the process-wide clock."""
    logger.info("Clock: Using SystemClock")
    return SystemClock()


def reset_clock() -> None:
    """Clear the cached clock instance."""
    get_clock.cache_clear()


__all__ = [
    "get_clock",
    "reset_clock",
    "BaseClock",
    "SystemClock",
    "FixedClock",
]
