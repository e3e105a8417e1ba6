# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Pytest configuration and shared fixtures.

This module provides fixtures used across all test types:
- Unit tests
- Integration tests
"""

from collections.abc import Iterator
from datetime import date
from typing import Any

import pytest

from campus.core.config import clear_settings_cache


# =============================================================================
# Settings Isolation
# =============================================================================


@pytest.fixture(autouse=True)
def _reset_settings_cache() -> Iterator[None]:
    """Drop cached settings so environment patches take effect per test."""
    clear_settings_cache()
    yield
    clear_settings_cache()


# =============================================================================
# Marker Configuration
# =============================================================================


def pytest_configure(config: pytest.Config) -> None:
    """Configure custom pytest markers."""
    config.addinivalue_line(
        "markers", "unit: mark test as a unit test"
    )
    config.addinivalue_line(
        "markers", "integration: mark test as an integration test (uses a SQLite file database)"
    )
    config.addinivalue_line(
        "markers", "slow: mark test as slow running"
    )


# =============================================================================
# Helper Fixtures
# =============================================================================


@pytest.fixture
def sample_student_data() -> dict[str, Any]:
    """Provide sample student data for testing."""
    return {
        "user_id": 5001,
        "first_name": "Ana",
        "last_name": "Quispe",
        "email": "ana.quispe@university.edu",
        "is_active": True,
    }


@pytest.fixture
def sample_subject_data() -> dict[str, Any]:
    """Provide sample subject data for testing."""
    return {
        "name": "Calculus I",
        "credits": 4,
        "max_quota": 2,
    }


@pytest.fixture
def sample_period_data() -> dict[str, Any]:
    """Provide sample academic period data for testing."""
    return {
        "name": "2025-I",
        "start_date": date(2025, 3, 1),
        "end_date": date(2025, 7, 31),
        "is_active": True,
    }
