# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Failure kinds shared by all domain services.

Every service error inherits from exactly one of the kinds below so a
request layer can map failures to responses without knowing each service:

    NotFoundError          -> resource absent         (404)
    InvalidStateError      -> precondition violated   (400)
    QuotaExhaustedError    -> capacity violated       (409)
    ConflictError          -> duplicate state         (409)
    OperationAbortedError  -> operation aborted       (503)

The first four are expected outcomes. OperationAbortedError means the
store failed mid-operation; the transaction was rolled back and nothing
was written, so the caller may re-run the whole operation.
"""

from typing import Optional


class DomainError(Exception):
    """Base exception for domain service failures.

    Attributes:
        category: Response category for the request layer.
        status_code: Suggested HTTP status code.
    """

    category: str = "domain_error"
    status_code: int = 500


class NotFoundError(DomainError):
    """A referenced entity does not exist."""

    category = "resource_absent"
    status_code = 404


class InvalidStateError(DomainError):
    """An entity exists but fails a required state predicate."""

    category = "precondition_violated"
    status_code = 400


class QuotaExhaustedError(DomainError):
    """No seats remain."""

    category = "capacity_violated"
    status_code = 409


class ConflictError(DomainError):
    """The operation would duplicate existing state."""

    category = "duplicate_state"
    status_code = 409


class OperationAbortedError(DomainError):
    """The store failed mid-operation; no effect was committed.

    Attributes:
        original_error: The underlying database error.
    """

    category = "operation_aborted"
    status_code = 503

    def __init__(self, message: str, original_error: Optional[Exception] = None) -> None:
        super().__init__(message)
        self.original_error = original_error

    def __str__(self) -> str:
        if self.original_error:
            return f"{self.args[0]}: {self.original_error}"
        return self.args[0]
