# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Academic period service for managing enrollment windows.

This module provides the AcademicPeriodService class for:
- Academic period CRUD operations
- Activating the period students enroll in
- Academic period validation

At most one period is active at a time. Activating a period deactivates
the others in the same transaction.
"""

from __future__ import annotations

import logging

from sqlalchemy import func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from campus.domains.errors import (
    ConflictError,
    DomainError,
    InvalidStateError,
    NotFoundError,
)
from campus.domains.transaction import atomic
from campus.infrastructure.database.models import AcademicPeriod, Enrollment
from campus.models.academic_period import (
    AcademicPeriodCreateRequest,
    AcademicPeriodResponse,
    AcademicPeriodUpdateRequest,
)
from campus.utils.datetime import ensure_utc

logger = logging.getLogger(__name__)


class AcademicPeriodServiceError(DomainError):
    """Base exception for academic period service errors."""

    pass


class AcademicPeriodNotFoundError(AcademicPeriodServiceError, NotFoundError):
    """Raised when academic period is not found."""

    pass


class AcademicPeriodExistsError(AcademicPeriodServiceError, ConflictError):
    """Raised when an academic period with the same name exists."""

    pass


class InvalidPeriodDatesError(AcademicPeriodServiceError, InvalidStateError):
    """Raised when a period would end on or before its start date."""

    pass


class AcademicPeriodInUseError(AcademicPeriodServiceError, InvalidStateError):
    """Raised when deleting a period that enrollments still reference."""

    pass


class AcademicPeriodService:
    """Service for managing academic periods.

    Attributes:
        db: Async database session.
    """

    def __init__(self, db: AsyncSession) -> None:
        """Initialize academic period service.

        Args:
            db: Async database session for the academic database.
        """
        self.db = db

    async def create_period(
        self,
        request: AcademicPeriodCreateRequest,
    ) -> AcademicPeriodResponse:
        """Create a new academic period.

        Args:
            request: Academic period creation data.

        Returns:
            Created academic period.

        Raises:
            InvalidPeriodDatesError: If end date is not after start date.
            AcademicPeriodExistsError: If the name is taken.
        """
        if request.end_date <= request.start_date:
            raise InvalidPeriodDatesError("End date must be after start date")

        async with atomic(self.db, "create_period"):
            await self._check_unique(request.name)

            # Only one period may be open for enrollment
            if request.is_active:
                await self._deactivate_all()

            period = AcademicPeriod(
                name=request.name,
                start_date=request.start_date,
                end_date=request.end_date,
                is_active=request.is_active,
            )
            self.db.add(period)
            await self._flush_period()

            response = self._to_response(period, enrollment_count=0)

        logger.info("Created academic period: %s (%s)", period.name, period.id)

        return response

    async def list_periods(
        self,
        active_only: bool = False,
    ) -> tuple[list[AcademicPeriodResponse], int]:
        """List academic periods, newest first.

        Args:
            active_only: Only return the active period.

        Returns:
            Tuple of (list of periods, total count).
        """
        query = select(AcademicPeriod)

        if active_only:
            query = query.where(AcademicPeriod.is_active.is_(True))

        query = query.order_by(AcademicPeriod.start_date.desc())

        count_query = select(func.count()).select_from(query.subquery())
        total_result = await self.db.execute(count_query)
        total = total_result.scalar() or 0

        result = await self.db.execute(query)
        periods = result.scalars().all()

        counts = await self._get_enrollment_counts([period.id for period in periods])
        items = [
            self._to_response(period, enrollment_count=counts.get(period.id, 0))
            for period in periods
        ]

        return items, total

    async def get_period(self, period_id: int) -> AcademicPeriodResponse:
        """Get academic period by ID.

        Args:
            period_id: Academic period identifier.

        Returns:
            Academic period details.

        Raises:
            AcademicPeriodNotFoundError: If period not found.
        """
        period = await self._get_by_id(period_id)
        count = await self._get_enrollment_count(period.id)
        return self._to_response(period, enrollment_count=count)

    async def get_active_period(self) -> AcademicPeriodResponse | None:
        """Get the active academic period.

        Returns:
            Active academic period or None if none is open.
        """
        query = select(AcademicPeriod).where(AcademicPeriod.is_active.is_(True))
        result = await self.db.execute(query)
        period = result.scalars().first()

        if not period:
            return None

        count = await self._get_enrollment_count(period.id)
        return self._to_response(period, enrollment_count=count)

    async def update_period(
        self,
        period_id: int,
        request: AcademicPeriodUpdateRequest,
    ) -> AcademicPeriodResponse:
        """Update an academic period.

        Args:
            period_id: Academic period identifier.
            request: Update data.

        Returns:
            Updated academic period.

        Raises:
            AcademicPeriodNotFoundError: If period not found.
            InvalidPeriodDatesError: If the new dates are out of order.
            AcademicPeriodExistsError: If the new name is taken.
        """
        async with atomic(self.db, "update_period"):
            period = await self._get_by_id(period_id, lock=True)

            new_start = request.start_date or period.start_date
            new_end = request.end_date or period.end_date
            if new_end <= new_start:
                raise InvalidPeriodDatesError("End date must be after start date")

            if request.name is not None and request.name != period.name:
                await self._check_unique(request.name, exclude_id=period.id)
                period.name = request.name

            if request.is_active and not period.is_active:
                await self._deactivate_all()

            period.start_date = new_start
            period.end_date = new_end
            if request.is_active is not None:
                period.is_active = request.is_active

            await self._flush_period()

            count = await self._get_enrollment_count(period.id)
            response = self._to_response(period, enrollment_count=count)

        logger.info("Updated academic period: %s", period_id)

        return response

    async def activate_period(self, period_id: int) -> AcademicPeriodResponse:
        """Open an academic period for enrollment, closing any other.

        Raises:
            AcademicPeriodNotFoundError: If period not found.
        """
        async with atomic(self.db, "activate_period"):
            period = await self._get_by_id(period_id, lock=True)

            await self._deactivate_all()
            period.is_active = True
            await self.db.flush()

            count = await self._get_enrollment_count(period.id)
            response = self._to_response(period, enrollment_count=count)

        logger.info("Set academic period %s as active", period_id)

        return response

    async def delete_period(self, period_id: int) -> None:
        """Delete an academic period.

        Raises:
            AcademicPeriodNotFoundError: If period not found.
            AcademicPeriodInUseError: If enrollments reference the period.
        """
        async with atomic(self.db, "delete_period"):
            period = await self._get_by_id(period_id, lock=True)

            enrollment_count = await self._get_enrollment_count(period.id)
            if enrollment_count > 0:
                raise AcademicPeriodInUseError(
                    f"Cannot delete academic period with {enrollment_count} enrollments"
                )

            await self.db.delete(period)

        logger.info("Deleted academic period: %s", period_id)

    async def _get_by_id(self, period_id: int, lock: bool = False) -> AcademicPeriod:
        """Get academic period by ID.

        Args:
            period_id: Academic period identifier.
            lock: Hold the row lock until the transaction ends.

        Returns:
            AcademicPeriod model instance.

        Raises:
            AcademicPeriodNotFoundError: If not found.
        """
        query = select(AcademicPeriod).where(AcademicPeriod.id == period_id)
        if lock:
            query = query.with_for_update().execution_options(populate_existing=True)
        result = await self.db.execute(query)
        period = result.scalar_one_or_none()

        if not period:
            raise AcademicPeriodNotFoundError(f"Academic period {period_id} not found")

        return period

    async def _check_unique(self, name: str, exclude_id: int | None = None) -> None:
        query = select(AcademicPeriod.id).where(AcademicPeriod.name == name)
        if exclude_id is not None:
            query = query.where(AcademicPeriod.id != exclude_id)
        result = await self.db.execute(query)
        if result.scalar_one_or_none() is not None:
            raise AcademicPeriodExistsError(f"Academic period '{name}' already exists")

    async def _deactivate_all(self) -> None:
        """Close every active academic period."""
        stmt = (
            update(AcademicPeriod)
            .where(AcademicPeriod.is_active.is_(True))
            .values(is_active=False)
            .execution_options(synchronize_session="fetch")
        )
        await self.db.execute(stmt)

    async def _get_enrollment_count(self, period_id: int) -> int:
        """Get count of enrollments in an academic period."""
        query = select(func.count()).select_from(Enrollment).where(
            Enrollment.academic_period_id == period_id
        )
        result = await self.db.execute(query)
        return result.scalar() or 0

    async def _get_enrollment_counts(self, period_ids: list[int]) -> dict[int, int]:
        if not period_ids:
            return {}
        query = (
            select(Enrollment.academic_period_id, func.count())
            .where(Enrollment.academic_period_id.in_(period_ids))
            .group_by(Enrollment.academic_period_id)
        )
        result = await self.db.execute(query)
        return {period_id: count for period_id, count in result.all()}

    async def _flush_period(self) -> None:
        try:
            await self.db.flush()
        except IntegrityError as e:
            raise AcademicPeriodExistsError("Academic period name is already used") from e

    def _to_response(
        self,
        period: AcademicPeriod,
        enrollment_count: int,
    ) -> AcademicPeriodResponse:
        """Convert academic period model to response DTO.

        Args:
            period: AcademicPeriod model instance.
            enrollment_count: Enrollments recorded in the period.

        Returns:
            AcademicPeriodResponse DTO.
        """
        return AcademicPeriodResponse(
            id=period.id,
            name=period.name,
            start_date=period.start_date,
            end_date=period.end_date,
            is_active=period.is_active,
            enrollment_count=enrollment_count,
            created_at=ensure_utc(period.created_at),
        )
