"""
Timestamp helpers shared by the queue engine.

Stores hand back timestamps in different shapes (aware datetimes from
PostgreSQL, naive ones from SQLite, ISO strings from JSON payloads).
Everything is normalised to timezone-aware UTC here, and anything that
cannot be normalised comes back as None instead of raising.
"""

from datetime import datetime, time, timezone, tzinfo
from typing import Any, Optional


def coerce_timestamp(value: Any) -> Optional[datetime]:
    """
    Normalise a stored timestamp to an aware UTC datetime.

    Naive datetimes are interpreted as UTC. ISO-8601 strings are parsed.
    Returns None for missing or malformed values.
    """
    if value is None:
        return None
    if isinstance(value, str):
        try:
            value = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return None
    if not isinstance(value, datetime):
        return None
    if value.tzinfo is None or value.utcoffset() is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def start_of_day(now: datetime, tz: Optional[tzinfo] = None) -> datetime:
    """
    Return local midnight of the day containing ``now``.

    ``tz`` selects the local zone; None uses the host's zone.
    """
    if tz is not None:
        return now.astimezone(tz).replace(hour=0, minute=0, second=0, microsecond=0)
    # Host zone: localise a naive midnight so the offset in force at midnight is used
    return datetime.combine(now.astimezone().date(), time()).astimezone()
