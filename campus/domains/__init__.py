# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Domain services layer for the campus backend.

This package contains domain services that encapsulate business logic.
Each service works on an async database session and raises domain
errors from campus.domains.errors.

Domains:
    academic_period: Academic period catalog and the single active period.
    enrollment: Enrollment coordinator and seat quota bookkeeping.
    reporting: Read-only enrollment and occupancy reports.
    student: Student catalog.
    subject: Subject catalog and capacity changes.
"""
