# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Enrollment ledger request and response models."""

from datetime import datetime

from pydantic import BaseModel, Field


class EnrollRequest(BaseModel):
    """Request to place a student in a subject for an academic period."""

    student_id: int = Field(gt=0)
    subject_id: int = Field(gt=0)
    academic_period_id: int = Field(gt=0)


class ReassignRequest(BaseModel):
    """Request to move an existing enrollment to another subject."""

    subject_id: int = Field(gt=0)


class BulkEnrollRequest(BaseModel):
    """Request to enroll several students in the same subject and period."""

    subject_id: int = Field(gt=0)
    academic_period_id: int = Field(gt=0)
    student_ids: list[int] = Field(min_length=1, max_length=500)


class EnrollmentResponse(BaseModel):
    """Enrollment ledger row."""

    id: int
    student_id: int
    subject_id: int
    academic_period_id: int
    created_at: datetime
    updated_at: datetime


class BulkEnrollFailure(BaseModel):
    """A student that could not be enrolled, with the failure category."""

    student_id: int
    reason: str
    category: str


class BulkEnrollResponse(BaseModel):
    """Outcome of a bulk enrollment."""

    enrolled: list[EnrollmentResponse]
    failed: list[BulkEnrollFailure]
    total_enrolled: int
    total_failed: int
