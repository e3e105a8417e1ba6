# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Student catalog request and response models."""

from datetime import datetime

from pydantic import BaseModel, Field


class StudentCreateRequest(BaseModel):
    """Student creation data."""

    user_id: int = Field(gt=0)
    first_name: str = Field(min_length=1, max_length=100)
    last_name: str = Field(min_length=1, max_length=100)
    email: str = Field(min_length=3, max_length=255)
    career_id: int = Field(gt=0)
    is_active: bool = True


class StudentUpdateRequest(BaseModel):
    """Partial student update."""

    user_id: int | None = Field(default=None, gt=0)
    first_name: str | None = Field(default=None, min_length=1, max_length=100)
    last_name: str | None = Field(default=None, min_length=1, max_length=100)
    email: str | None = Field(default=None, min_length=3, max_length=255)
    career_id: int | None = Field(default=None, gt=0)
    is_active: bool | None = None


class StudentResponse(BaseModel):
    """Student details."""

    id: int
    user_id: int
    first_name: str
    last_name: str
    email: str
    is_active: bool
    career_id: int
    created_at: datetime
