# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""DateTime utilities for the campus backend.

All timestamps are stored as timezone-aware UTC values. SQLite drops the
offset on the way back, so values read from it go through ensure_utc()
before they leave the service layer.

Usage:
------
    from campus.utils.datetime import utc_now

    # For SQLAlchemy model defaults
    created_at = mapped_column(DateTime(timezone=True), default=utc_now)
"""

from datetime import date, datetime, timezone


def utc_now() -> datetime:
    """Get current UTC time as timezone-aware datetime.

    Returns:
        Timezone-aware datetime representing current UTC time.
    """
    return datetime.now(timezone.utc)


def utc_today() -> date:
    """Get the current UTC calendar date."""
    return utc_now().date()


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
