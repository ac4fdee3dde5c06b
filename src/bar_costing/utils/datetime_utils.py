"""Datetime utilities for timezone-aware UTC timestamps.

Usage:
    from bar_costing.utils.datetime_utils import utc_now

    timestamp = utc_now()

    # For SQLAlchemy Column defaults
    created_at = Column(DateTime, default=utc_now)
"""

from datetime import datetime, timezone
from typing import Optional


def utc_now() -> datetime:
    """Return current UTC time as timezone-aware datetime."""
    return datetime.now(timezone.utc)


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Normalize a datetime to timezone-aware UTC.

    SQLite drops tzinfo on round-trip, so naive values read back from the
    database are assumed to already be UTC.

    Args:
        value: Datetime to normalize (may be None)

    Returns:
        Timezone-aware UTC datetime, or None if value is None
    """
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def to_storage_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Convert a datetime to naive UTC for a SQLite DateTime column.

    SQLite keeps only the wall-clock fields, so an offset-aware value must be
    shifted to UTC before storing or as_utc() will misread it on the way back.
    Naive input is assumed to be UTC already.

    Args:
        value: Datetime to convert (may be None)

    Returns:
        Naive datetime in UTC, or None if value is None
    """
    if value is None:
        return None
    return as_utc(value).replace(tzinfo=None)
