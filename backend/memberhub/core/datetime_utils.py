"""Datetime utilities for consistent timezone handling across the application."""

from datetime import datetime, timedelta, timezone


def utc_now() -> datetime:
    """Get current UTC time as an aware datetime."""
    return datetime.now(timezone.utc)


def utc_now_naive() -> datetime:
    """Get current UTC time as naive datetime for database operations.

    Returns:
        Current datetime in UTC as naive datetime (no timezone info).

    Note:
        The models use TIMESTAMP WITHOUT TIME ZONE columns, so every timestamp that is
        written or compared against a stored one goes through this function.
    """
    return utc_now().replace(tzinfo=None)


def utc_days_from_now_naive(days: int) -> datetime:
    """Naive UTC datetime ``days`` days from now, used for invitation expiry."""
    return utc_now_naive() + timedelta(days=days)
