# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""DateTime utilities.

Design Decisions:
-----------------
1. All timestamps are stored in UTC (PostgreSQL TIMESTAMPTZ)
2. All Python datetimes are timezone-aware (with timezone.utc)
3. Values read back from SQLite come back naive and are treated as UTC

Usage:
------
    from src.utils.datetime import utc_now

    enrolled_date = utc_now()
"""

from datetime import datetime, timedelta, timezone


def utc_now() -> datetime:
    """Get current UTC time as timezone-aware datetime.

    Returns:
        Timezone-aware datetime representing current UTC time.
    """
    return datetime.now(timezone.utc)


def ensure_utc(dt: datetime | None) -> datetime | None:
    """Ensure a datetime is timezone-aware UTC.

    Args:
        dt: A datetime object (naive or aware) or None.

    Returns:
        Timezone-aware UTC datetime or None.

    Note:
        - If dt is None, returns None
        - If dt is naive, assumes UTC and adds tzinfo
        - If dt is aware, converts to UTC
    """
    if dt is None:
        return None

    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)

    return dt.astimezone(timezone.utc)


def has_passed(moment: datetime, now: datetime | None = None) -> bool:
    """Check if a moment is at or before the current time.

    Args:
        moment: The datetime to check.
        now: Reference time, defaults to utc_now().

    Returns:
        True if the moment is not in the future.
    """
    reference = ensure_utc(now) if now is not None else utc_now()
    return ensure_utc(moment) <= reference


def days_ago(days: int) -> datetime:
    """Get a datetime N days ago from now.

    Args:
        days: Number of days to go back.

    Returns:
        Timezone-aware UTC datetime.
    """
    return utc_now() - timedelta(days=days)


def days_from_now(days: int) -> datetime:
    """Get a datetime N days from now.

    Args:
        days: Number of days to add.

    Returns:
        Timezone-aware UTC datetime.
    """
    return utc_now() + timedelta(days=days)
