# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""SQLAlchemy models for the academic database."""

from campus.infrastructure.database.models.academic import (
    AcademicPeriod,
    Career,
    Cycle,
    Enrollment,
    Student,
    Subject,
)
from campus.infrastructure.database.models.base import Base, TimestampMixin

__all__ = [
    "Base",
    "TimestampMixin",
    "Career",
    "Cycle",
    "Student",
    "Subject",
    "AcademicPeriod",
    "Enrollment",
]
