# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Enrollment domain package.

This package provides the enrollment ledger including:
- Student enrollment in subjects for an academic period
- Moving an enrollment to another subject
- Enrollment withdrawal
- Seat quota arithmetic
"""

from campus.domains.enrollment.quota import (
    occupied_seats,
    recalculate_available_quota,
    released_available_quota,
)
from campus.domains.enrollment.service import (
    AcademicPeriodInactiveError,
    AcademicPeriodNotFoundError,
    AlreadyEnrolledError,
    EnrollmentNotFoundError,
    EnrollmentService,
    EnrollmentServiceError,
    StudentInactiveError,
    StudentNotFoundError,
    SubjectFullError,
    SubjectNotFoundError,
)

__all__ = [
    "EnrollmentService",
    "EnrollmentServiceError",
    "StudentNotFoundError",
    "StudentInactiveError",
    "AcademicPeriodNotFoundError",
    "AcademicPeriodInactiveError",
    "SubjectNotFoundError",
    "SubjectFullError",
    "AlreadyEnrolledError",
    "EnrollmentNotFoundError",
    "occupied_seats",
    "recalculate_available_quota",
    "released_available_quota",
]
