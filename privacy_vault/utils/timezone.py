"""
Timestamp helpers.

All three stores persist naive UTC datetimes; SQLite has no timezone type, so
values are normalized to UTC and stripped of tzinfo before they are written.
"""

from datetime import date, datetime, timezone


def utc_now() -> datetime:
    """Current time as a naive UTC datetime."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def utc_today() -> date:
    """Current UTC date."""
    return utc_now().date()


def to_naive_utc(dt: datetime) -> datetime:
    """
    Normalize a datetime for storage.

    Args:
        dt: A datetime object (naive assumed UTC, or timezone-aware)

    Returns:
        Naive datetime in UTC
    """
    if dt is None:
        return None

    if dt.tzinfo is None:
        return dt

    return dt.astimezone(timezone.utc).replace(tzinfo=None)
