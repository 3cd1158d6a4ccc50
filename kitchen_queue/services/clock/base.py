"""
Clock Abstract Base Class

Single source of "now" for the queue engine. The estimator, the queue
filter and the auto-advance scheduler all read time through a Clock so
timing behaviour can be pinned down under test.
"""

from abc import ABC, abstractmethod
from datetime import datetime


class BaseClock(ABC):
    """Abstract base class for clocks."""

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Return the provider name."""
        pass

    @abstractmethod
    def now(self) -> datetime:
        """Current time as a timezone-aware UTC datetime."""
        pass
