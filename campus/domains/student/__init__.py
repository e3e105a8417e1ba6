# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Student domain package.

This package provides student record management including:
- Student CRUD operations
- Activating and deactivating students
"""

from campus.domains.student.service import (
    CareerNotFoundError,
    StudentExistsError,
    StudentNotFoundError,
    StudentService,
    StudentServiceError,
)

__all__ = [
    "StudentService",
    "StudentServiceError",
    "StudentNotFoundError",
    "CareerNotFoundError",
    "StudentExistsError",
]
