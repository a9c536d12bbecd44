"""
Datetime utilities.

Provides timezone-aware datetime functions.
"""

from datetime import UTC, datetime, timedelta


def utc_now() -> datetime:
    """
    Get current UTC datetime with timezone info.

    Returns:
        Current datetime in UTC with timezone awareness
    """
    return datetime.now(UTC)


def ensure_utc(value: datetime) -> datetime:
    """
    Make a datetime timezone-aware in UTC.

    Some drivers (SQLite) return naive datetimes for timezone columns;
    those are stored in UTC, so they are tagged rather than converted.

    Args:
        value: Naive or aware datetime

    Returns:
        Aware datetime in UTC
    """
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def add_days(value: datetime, days: int) -> datetime:
    """Shift a datetime by whole days."""
    return value + timedelta(days=days)


def whole_days_between(start: datetime, end: datetime) -> int:
    """
    Count whole elapsed days between two datetimes.

    Args:
        start: Start moment
        end: End moment

    Returns:
        floor((end - start) / 1 day), never negative
    """
    elapsed = ensure_utc(end) - ensure_utc(start)
    if elapsed <= timedelta(0):
        return 0
    return elapsed // timedelta(days=1)


def start_of_month(value: datetime) -> datetime:
    """First moment of the month containing value (UTC)."""
    value = ensure_utc(value)
    return value.replace(day=1, hour=0, minute=0, second=0, microsecond=0)
