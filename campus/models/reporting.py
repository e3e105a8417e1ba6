# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Read-only report rows built from the enrollment ledger."""

from datetime import datetime

from pydantic import BaseModel


class EnrollmentListItem(BaseModel):
    """Enrollment joined with student, subject and period names."""

    id: int
    student_id: int
    student_name: str
    student_email: str
    subject_id: int
    subject_name: str
    academic_period_id: int
    academic_period_name: str
    created_at: datetime


class SubjectOccupancy(BaseModel):
    """Seat counters of a subject next to its live enrollment count.

    consistent is False when max_quota - available_quota does not match
    the number of enrollment rows, e.g. after a capacity cut below
    occupancy.
    """

    subject_id: int
    subject_name: str
    max_quota: int
    available_quota: int
    occupied_seats: int
    enrollment_count: int
    consistent: bool
