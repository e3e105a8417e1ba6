# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Subject service for managing the subject catalog.

This module provides the SubjectService class for:
- Subject CRUD operations
- Seat capacity changes

A capacity change locks the subject row and recomputes available_quota
from the live enrollment count, the same way the enrollment service does
when it releases a seat.
"""

from __future__ import annotations

import logging

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from campus.core.config import get_settings
from campus.domains.enrollment.quota import recalculate_available_quota
from campus.domains.errors import (
    ConflictError,
    DomainError,
    InvalidStateError,
    NotFoundError,
)
from campus.domains.transaction import atomic
from campus.infrastructure.database.models import Career, Cycle, Enrollment, Subject
from campus.models.subject import (
    SubjectCreateRequest,
    SubjectResponse,
    SubjectUpdateRequest,
)
from campus.utils.datetime import ensure_utc

logger = logging.getLogger(__name__)


class SubjectServiceError(DomainError):
    """Base exception for subject service errors."""

    pass


class SubjectNotFoundError(SubjectServiceError, NotFoundError):
    """Raised when subject is not found."""

    pass


class CareerNotFoundError(SubjectServiceError, NotFoundError):
    """Raised when career is not found."""

    pass


class CycleNotFoundError(SubjectServiceError, NotFoundError):
    """Raised when cycle is not found."""

    pass


class SubjectExistsError(SubjectServiceError, ConflictError):
    """Raised when a subject with the same name exists in the career cycle."""

    pass


class SubjectQuotaLimitError(SubjectServiceError, InvalidStateError):
    """Raised when a capacity exceeds the configured ceiling."""

    pass


class SubjectHasEnrollmentsError(SubjectServiceError, InvalidStateError):
    """Raised when deleting a subject that still has enrollments."""

    pass


class SubjectService:
    """Service for managing subjects.

    Attributes:
        db: Async database session.
        max_quota_limit: Largest capacity a subject may have.
    """

    def __init__(self, db: AsyncSession, max_quota_limit: int | None = None) -> None:
        """Initialize subject service.

        Args:
            db: Async database session for the academic database.
            max_quota_limit: Overrides ENROLLMENT_MAX_SUBJECT_QUOTA when given.
        """
        self.db = db
        if max_quota_limit is None:
            max_quota_limit = get_settings().enrollment.max_subject_quota
        self.max_quota_limit = max_quota_limit

    async def create_subject(self, request: SubjectCreateRequest) -> SubjectResponse:
        """Create a new subject with every seat free.

        Args:
            request: Subject creation data.

        Returns:
            Created subject.

        Raises:
            CareerNotFoundError: If career not found.
            CycleNotFoundError: If cycle not found.
            SubjectExistsError: If the name is taken in that career cycle.
            SubjectQuotaLimitError: If max_quota exceeds the ceiling.
        """
        self._check_quota_limit(request.max_quota)

        async with atomic(self.db, "create_subject"):
            await self._check_career(request.career_id)
            await self._check_cycle(request.cycle_id)
            await self._check_unique(request.career_id, request.cycle_id, request.name)

            subject = Subject(
                name=request.name,
                credits=request.credits,
                max_quota=request.max_quota,
                available_quota=request.max_quota,
                career_id=request.career_id,
                cycle_id=request.cycle_id,
            )
            self.db.add(subject)
            await self._flush_subject()

            response = self._to_response(subject)

        logger.info("Created subject: %s (%s)", subject.name, subject.id)

        return response

    async def get_subject(self, subject_id: int) -> SubjectResponse:
        """Get subject by ID.

        Raises:
            SubjectNotFoundError: If subject not found.
        """
        subject = await self._get_by_id(subject_id)
        return self._to_response(subject)

    async def list_subjects(
        self,
        career_id: int | None = None,
        cycle_id: int | None = None,
    ) -> tuple[list[SubjectResponse], int]:
        """List subjects, optionally filtered by career and cycle.

        Args:
            career_id: Only subjects of this career.
            cycle_id: Only subjects of this cycle.

        Returns:
            Tuple of (list of subjects, total count).
        """
        query = select(Subject)

        if career_id is not None:
            query = query.where(Subject.career_id == career_id)
        if cycle_id is not None:
            query = query.where(Subject.cycle_id == cycle_id)

        query = query.order_by(Subject.name, Subject.id)

        count_query = select(func.count()).select_from(query.subquery())
        total_result = await self.db.execute(count_query)
        total = total_result.scalar() or 0

        result = await self.db.execute(query)
        subjects = result.scalars().all()

        return [self._to_response(subject) for subject in subjects], total

    async def update_subject(
        self,
        subject_id: int,
        request: SubjectUpdateRequest,
    ) -> SubjectResponse:
        """Update a subject.

        When max_quota changes, occupied seats are kept and the free seats
        are recomputed from the live enrollment count. Cutting capacity
        below occupancy evicts nobody; available_quota drops to 0.

        Args:
            subject_id: Subject identifier.
            request: Update data.

        Returns:
            Updated subject.

        Raises:
            SubjectNotFoundError: If subject not found.
            CareerNotFoundError: If the new career is not found.
            CycleNotFoundError: If the new cycle is not found.
            SubjectExistsError: If the new name is taken in the career cycle.
            SubjectQuotaLimitError: If max_quota exceeds the ceiling.
        """
        if request.max_quota is not None:
            self._check_quota_limit(request.max_quota)

        async with atomic(self.db, "update_subject"):
            subject = await self._get_by_id(subject_id, lock=True)

            new_name = request.name if request.name is not None else subject.name
            new_career = request.career_id if request.career_id is not None else subject.career_id
            new_cycle = request.cycle_id if request.cycle_id is not None else subject.cycle_id

            if new_career != subject.career_id:
                await self._check_career(new_career)
            if new_cycle != subject.cycle_id:
                await self._check_cycle(new_cycle)
            if (new_name, new_career, new_cycle) != (
                subject.name,
                subject.career_id,
                subject.cycle_id,
            ):
                await self._check_unique(new_career, new_cycle, new_name, exclude_id=subject.id)

            if request.max_quota is not None and request.max_quota != subject.max_quota:
                enrolled = await self._get_enrollment_count(subject.id)
                subject.available_quota = recalculate_available_quota(
                    subject.max_quota,
                    subject.available_quota,
                    request.max_quota,
                    enrolled=enrolled,
                )
                subject.max_quota = request.max_quota

            subject.name = new_name
            subject.career_id = new_career
            subject.cycle_id = new_cycle
            if request.credits is not None:
                subject.credits = request.credits

            await self._flush_subject()

            response = self._to_response(subject)

        logger.info(
            "Updated subject: %s, max_quota=%d, available_quota=%d",
            subject_id,
            response.max_quota,
            response.available_quota,
        )

        return response

    async def delete_subject(self, subject_id: int) -> None:
        """Delete a subject.

        Raises:
            SubjectNotFoundError: If subject not found.
            SubjectHasEnrollmentsError: If students are enrolled in it.
        """
        async with atomic(self.db, "delete_subject"):
            subject = await self._get_by_id(subject_id, lock=True)

            enrollment_count = await self._get_enrollment_count(subject.id)
            if enrollment_count > 0:
                raise SubjectHasEnrollmentsError(
                    f"Cannot delete subject with {enrollment_count} enrollments"
                )

            await self.db.delete(subject)

        logger.info("Deleted subject: %s", subject_id)

    def _check_quota_limit(self, max_quota: int) -> None:
        if max_quota > self.max_quota_limit:
            raise SubjectQuotaLimitError(
                f"max_quota {max_quota} exceeds the limit of {self.max_quota_limit}"
            )

    async def _get_by_id(self, subject_id: int, lock: bool = False) -> Subject:
        """Get subject by ID.

        Args:
            subject_id: Subject identifier.
            lock: Hold the row lock until the transaction ends.

        Returns:
            Subject model instance.

        Raises:
            SubjectNotFoundError: If not found.
        """
        query = select(Subject).where(Subject.id == subject_id)
        if lock:
            query = query.with_for_update().execution_options(populate_existing=True)
        result = await self.db.execute(query)
        subject = result.scalar_one_or_none()

        if not subject:
            raise SubjectNotFoundError(f"Subject with ID {subject_id} not found")

        return subject

    async def _check_career(self, career_id: int) -> None:
        result = await self.db.execute(select(Career.id).where(Career.id == career_id))
        if result.scalar_one_or_none() is None:
            raise CareerNotFoundError(f"Career with ID {career_id} not found")

    async def _check_cycle(self, cycle_id: int) -> None:
        result = await self.db.execute(select(Cycle.id).where(Cycle.id == cycle_id))
        if result.scalar_one_or_none() is None:
            raise CycleNotFoundError(f"Cycle with ID {cycle_id} not found")

    async def _check_unique(
        self,
        career_id: int,
        cycle_id: int,
        name: str,
        exclude_id: int | None = None,
    ) -> None:
        """Reject a name already used in the same career cycle.

        Raises:
            SubjectExistsError: If another subject has the name.
        """
        query = select(Subject.id).where(
            Subject.career_id == career_id,
            Subject.cycle_id == cycle_id,
            Subject.name == name,
        )
        if exclude_id is not None:
            query = query.where(Subject.id != exclude_id)
        result = await self.db.execute(query)
        if result.scalar_one_or_none() is not None:
            raise SubjectExistsError(
                f"Subject '{name}' already exists in career {career_id}, cycle {cycle_id}"
            )

    async def _get_enrollment_count(self, subject_id: int) -> int:
        """Get count of enrollments in a subject."""
        query = select(func.count()).select_from(Enrollment).where(
            Enrollment.subject_id == subject_id
        )
        result = await self.db.execute(query)
        return result.scalar() or 0

    async def _flush_subject(self) -> None:
        try:
            await self.db.flush()
        except IntegrityError as e:
            raise SubjectExistsError(
                "Subject already exists in this career cycle"
            ) from e

    def _to_response(self, subject: Subject) -> SubjectResponse:
        """Convert subject model to response DTO."""
        return SubjectResponse(
            id=subject.id,
            name=subject.name,
            credits=subject.credits,
            max_quota=subject.max_quota,
            available_quota=subject.available_quota,
            occupied_seats=subject.max_quota - subject.available_quota,
            career_id=subject.career_id,
            cycle_id=subject.cycle_id,
            created_at=ensure_utc(subject.created_at),
            updated_at=ensure_utc(subject.updated_at),
        )
