# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Reporting domain package: read-only enrollment queries."""

from campus.domains.reporting.service import ReportingService

__all__ = ["ReportingService"]
