# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Academic period request and response models."""

from datetime import date, datetime

from pydantic import BaseModel, Field, model_validator


class AcademicPeriodCreateRequest(BaseModel):
    """Academic period creation data."""

    name: str = Field(min_length=1, max_length=50)
    start_date: date
    end_date: date
    is_active: bool = False

    @model_validator(mode="after")
    def check_dates(self) -> "AcademicPeriodCreateRequest":
        """Reject periods that end before they start."""
        if self.end_date <= self.start_date:
            raise ValueError("end_date must be after start_date")
        return self


class AcademicPeriodUpdateRequest(BaseModel):
    """Partial academic period update."""

    name: str | None = Field(default=None, min_length=1, max_length=50)
    start_date: date | None = None
    end_date: date | None = None
    is_active: bool | None = None


class AcademicPeriodResponse(BaseModel):
    """Academic period details."""

    id: int
    name: str
    start_date: date
    end_date: date
    is_active: bool
    enrollment_count: int = 0
    created_at: datetime
