# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Subject domain package.

This package provides subject catalog management including:
- Subject CRUD operations
- Seat capacity changes
"""

from campus.domains.subject.service import (
    CareerNotFoundError,
    CycleNotFoundError,
    SubjectExistsError,
    SubjectHasEnrollmentsError,
    SubjectNotFoundError,
    SubjectQuotaLimitError,
    SubjectService,
    SubjectServiceError,
)

__all__ = [
    "SubjectService",
    "SubjectServiceError",
    "SubjectNotFoundError",
    "CareerNotFoundError",
    "CycleNotFoundError",
    "SubjectExistsError",
    "SubjectQuotaLimitError",
    "SubjectHasEnrollmentsError",
]
