# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Configuration package for the campus backend.

This package provides centralized configuration management:
- Settings: Pydantic-based settings loaded from environment variables

Example:
    >>> from campus.core.config import get_settings
    >>> settings = get_settings()
    >>> print(settings.database.isolation_level)
    'READ COMMITTED'
"""

from campus.core.config.settings import (
    DatabaseSettings,
    EnrollmentSettings,
    Settings,
    clear_settings_cache,
    get_settings,
)

__all__ = [
    # Settings
    "Settings",
    "get_settings",
    "clear_settings_cache",
    # Subsettings
    "DatabaseSettings",
    "EnrollmentSettings",
]
