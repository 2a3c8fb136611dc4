"""Datetime utilities for timezone-aware UTC timestamps and event dates.

Usage:
    from src.utils.datetime_utils import utc_now, is_today_or_future

    # For SQLAlchemy Column defaults
    created_at = Column(DateTime, default=utc_now)

    # Booking validation
    if not is_today_or_future(event_date):
        ...
"""

from datetime import date, datetime, timezone
from typing import Optional


def utc_now() -> datetime:
    """Return current UTC time as timezone-aware datetime."""
    return datetime.now(timezone.utc)


def parse_event_date(value) -> Optional[date]:
    """Parse an event date given as a date or an ISO ``YYYY-MM-DD`` string.

    Args:
        value: date, datetime, ISO string, or None/empty

    Returns:
        The parsed date, or None when value is empty

    Raises:
        ValueError: If value is a non-empty string that is not an ISO date
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value).strip())


def is_today_or_future(value: date, today: Optional[date] = None) -> bool:
    """Check that an event date is not in the past.

    Args:
        value: Date to check
        today: Reference date (defaults to the local current date)

    Returns:
        True if value >= today
    """
    if today is None:
        today = date.today()
    return value >= today
