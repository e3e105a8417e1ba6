# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Academic period domain package.

This package provides academic period management including:
- Academic period CRUD operations
- Opening a single period for enrollment
- Period date validation
"""

from campus.domains.academic_period.service import (
    AcademicPeriodExistsError,
    AcademicPeriodInUseError,
    AcademicPeriodNotFoundError,
    AcademicPeriodService,
    AcademicPeriodServiceError,
    InvalidPeriodDatesError,
)

__all__ = [
    "AcademicPeriodService",
    "AcademicPeriodServiceError",
    "AcademicPeriodNotFoundError",
    "AcademicPeriodExistsError",
    "InvalidPeriodDatesError",
    "AcademicPeriodInUseError",
]
