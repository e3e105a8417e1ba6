# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Subject catalog request and response models."""

from datetime import datetime

from pydantic import BaseModel, Field


class SubjectCreateRequest(BaseModel):
    """Subject creation data. Every seat starts free."""

    name: str = Field(min_length=1, max_length=150)
    credits: int = Field(ge=1)
    max_quota: int = Field(ge=1, le=100)
    career_id: int = Field(gt=0)
    cycle_id: int = Field(gt=0)


class SubjectUpdateRequest(BaseModel):
    """Partial subject update. Omitted fields are left untouched."""

    name: str | None = Field(default=None, min_length=1, max_length=150)
    credits: int | None = Field(default=None, ge=1)
    max_quota: int | None = Field(default=None, ge=1, le=100)
    career_id: int | None = Field(default=None, gt=0)
    cycle_id: int | None = Field(default=None, gt=0)


class SubjectResponse(BaseModel):
    """Subject details including seat counters."""

    id: int
    name: str
    credits: int
    max_quota: int
    available_quota: int
    occupied_seats: int
    career_id: int
    cycle_id: int
    created_at: datetime
    updated_at: datetime
