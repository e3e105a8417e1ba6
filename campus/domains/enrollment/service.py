# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Enrollment service: the only writer of the enrollment ledger.

This module provides the EnrollmentService class for:
- Enrolling a student in a subject for an academic period
- Moving an enrollment to another subject
- Withdrawing an enrollment
- Bulk enrollment

Each operation runs as a single transaction. Preconditions are read inside
that transaction with row locks, the subject row is locked before its
quota is checked, and the seat is taken with a conditional decrement
(``available_quota > 0``). Two requests racing for the last seat therefore
serialize on the subject row and the second one sees zero seats.
"""

from __future__ import annotations

import logging

from sqlalchemy import func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.attributes import set_committed_value

from campus.core.config import get_settings
from campus.domains.enrollment.quota import released_available_quota
from campus.domains.errors import (
    ConflictError,
    DomainError,
    InvalidStateError,
    NotFoundError,
    QuotaExhaustedError,
)
from campus.domains.transaction import atomic
from campus.infrastructure.database.models import (
    AcademicPeriod,
    Enrollment,
    Student,
    Subject,
)
from campus.models.enrollment import (
    BulkEnrollFailure,
    BulkEnrollRequest,
    BulkEnrollResponse,
    EnrollmentResponse,
    EnrollRequest,
    ReassignRequest,
)
from campus.utils.datetime import ensure_utc

logger = logging.getLogger(__name__)


class EnrollmentServiceError(DomainError):
    """Base exception for enrollment service errors."""

    pass


class StudentNotFoundError(EnrollmentServiceError, NotFoundError):
    """Raised when student is not found."""

    pass


class StudentInactiveError(EnrollmentServiceError, InvalidStateError):
    """Raised when student exists but is not active."""

    pass


class AcademicPeriodNotFoundError(EnrollmentServiceError, NotFoundError):
    """Raised when academic period is not found."""

    pass


class AcademicPeriodInactiveError(EnrollmentServiceError, InvalidStateError):
    """Raised when academic period exists but is not open for enrollment."""

    pass


class SubjectNotFoundError(EnrollmentServiceError, NotFoundError):
    """Raised when subject is not found."""

    pass


class SubjectFullError(EnrollmentServiceError, QuotaExhaustedError):
    """Raised when subject has no seats left."""

    pass


class AlreadyEnrolledError(EnrollmentServiceError, ConflictError):
    """Raised when the student already holds the same enrollment."""

    pass


class EnrollmentNotFoundError(EnrollmentServiceError, NotFoundError):
    """Raised when enrollment is not found."""

    pass


class EnrollmentService:
    """Service coordinating the enrollment ledger and subject seat quotas.

    Attributes:
        db: Async database session.
        revalidate_on_reassign: Require an active student and period when
            an enrollment moves to another subject.
    """

    def __init__(
        self,
        db: AsyncSession,
        revalidate_on_reassign: bool | None = None,
    ) -> None:
        """Initialize enrollment service.

        Args:
            db: Async database session for the academic database.
            revalidate_on_reassign: Overrides the ENROLLMENT_REVALIDATE_ON_REASSIGN
                setting when given.
        """
        self.db = db
        if revalidate_on_reassign is None:
            revalidate_on_reassign = get_settings().enrollment.revalidate_on_reassign
        self.revalidate_on_reassign = revalidate_on_reassign

    async def enroll_student(
        self,
        request: EnrollRequest,
        enrolled_by: str | None = None,
    ) -> EnrollmentResponse:
        """Enroll a student in a subject for an academic period.

        Checks run in this order: student, academic period, subject seats,
        duplicate enrollment. The enrollment row and the seat decrement
        commit together.

        Args:
            request: Enrollment request data.
            enrolled_by: ID of user performing enrollment.

        Returns:
            Created enrollment.

        Raises:
            StudentNotFoundError: If student not found.
            StudentInactiveError: If student is inactive.
            AcademicPeriodNotFoundError: If period not found.
            AcademicPeriodInactiveError: If period is not active.
            SubjectNotFoundError: If subject not found.
            SubjectFullError: If subject has no available seats.
            AlreadyEnrolledError: If the same enrollment already exists.
            OperationAbortedError: If the database failed mid-operation.
        """
        async with atomic(self.db, "enroll"):
            await self._get_active_student(request.student_id)
            await self._get_active_period(request.academic_period_id)

            subject = await self._lock_subject(request.subject_id)
            if subject.available_quota <= 0:
                raise SubjectFullError(f"No available quota for subject {subject.name}")

            existing = await self._find_enrollment(
                request.student_id,
                request.subject_id,
                request.academic_period_id,
            )
            if existing is not None:
                raise AlreadyEnrolledError(
                    "Student is already enrolled in this subject for this period"
                )

            remaining = await self._take_seat(subject)

            enrollment = Enrollment(
                student_id=request.student_id,
                subject_id=request.subject_id,
                academic_period_id=request.academic_period_id,
            )
            self.db.add(enrollment)
            await self._flush_enrollment()

            response = self._to_response(enrollment)

        logger.info(
            "Enrolled student: student=%s, subject=%s, period=%s, remaining=%d, by=%s",
            request.student_id,
            request.subject_id,
            request.academic_period_id,
            remaining,
            enrolled_by,
        )

        return response

    async def bulk_enroll(
        self,
        request: BulkEnrollRequest,
        enrolled_by: str | None = None,
    ) -> BulkEnrollResponse:
        """Enroll several students in the same subject and period.

        Each student is enrolled in a separate transaction, so one failure
        does not undo the others. Duplicate ids in the request are
        processed once.

        Args:
            request: Bulk enrollment request.
            enrolled_by: ID of user performing enrollment.

        Returns:
            Bulk enrollment response with success/failure details.
        """
        enrolled: list[EnrollmentResponse] = []
        failed: list[BulkEnrollFailure] = []

        for student_id in dict.fromkeys(request.student_ids):
            try:
                enrolled.append(
                    await self.enroll_student(
                        EnrollRequest(
                            student_id=student_id,
                            subject_id=request.subject_id,
                            academic_period_id=request.academic_period_id,
                        ),
                        enrolled_by=enrolled_by,
                    )
                )
            except DomainError as e:
                failed.append(
                    BulkEnrollFailure(
                        student_id=student_id,
                        reason=str(e),
                        category=e.category,
                    )
                )

        logger.info(
            "Bulk enrollment: subject=%s, period=%s, enrolled=%d, failed=%d, by=%s",
            request.subject_id,
            request.academic_period_id,
            len(enrolled),
            len(failed),
            enrolled_by,
        )

        return BulkEnrollResponse(
            enrolled=enrolled,
            failed=failed,
            total_enrolled=len(enrolled),
            total_failed=len(failed),
        )

    async def get_enrollment(self, enrollment_id: int) -> EnrollmentResponse:
        """Get enrollment by ID.

        Args:
            enrollment_id: Enrollment identifier.

        Returns:
            Enrollment details.

        Raises:
            EnrollmentNotFoundError: If enrollment not found.
        """
        query = select(Enrollment).where(Enrollment.id == enrollment_id)
        result = await self.db.execute(query)
        enrollment = result.scalar_one_or_none()

        if not enrollment:
            raise EnrollmentNotFoundError(f"Enrollment with ID {enrollment_id} not found")

        return self._to_response(enrollment)

    async def reassign(
        self,
        enrollment_id: int,
        request: ReassignRequest,
        reassigned_by: str | None = None,
    ) -> EnrollmentResponse:
        """Move an enrollment to another subject.

        The old subject gets its seat back and the new subject loses one in
        the same transaction as the row update. Reassigning to the current
        subject is a no-op.

        Args:
            enrollment_id: Enrollment identifier.
            request: Reassignment data.
            reassigned_by: ID of user performing the change.

        Returns:
            Updated enrollment.

        Raises:
            EnrollmentNotFoundError: If enrollment not found.
            StudentInactiveError: If revalidation is on and the student is inactive.
            AcademicPeriodInactiveError: If revalidation is on and the period is closed.
            SubjectNotFoundError: If the new subject does not exist.
            AlreadyEnrolledError: If the student already holds the new subject
                in the same period.
            SubjectFullError: If the new subject has no available seats.
            OperationAbortedError: If the database failed mid-operation.
        """
        async with atomic(self.db, "reassign"):
            enrollment = await self._lock_enrollment(enrollment_id)
            old_subject_id = enrollment.subject_id

            if old_subject_id == request.subject_id:
                return self._to_response(enrollment)

            if self.revalidate_on_reassign:
                await self._get_active_student(enrollment.student_id)
                await self._get_active_period(enrollment.academic_period_id)

            old_subject, new_subject = await self._lock_subject_pair(
                old_subject_id,
                request.subject_id,
            )

            existing = await self._find_enrollment(
                enrollment.student_id,
                new_subject.id,
                enrollment.academic_period_id,
            )
            if existing is not None:
                raise AlreadyEnrolledError(
                    "Student is already enrolled in this subject for this period"
                )

            if new_subject.available_quota <= 0:
                raise SubjectFullError(f"No available quota for subject {new_subject.name}")

            enrollment.subject_id = new_subject.id
            await self._flush_enrollment()

            await self._release_seat(old_subject)
            await self._take_seat(new_subject)

            response = self._to_response(enrollment)

        logger.info(
            "Reassigned enrollment: id=%s, student=%s, subject=%s->%s, by=%s",
            enrollment_id,
            response.student_id,
            old_subject_id,
            request.subject_id,
            reassigned_by,
        )

        return response

    async def withdraw(
        self,
        enrollment_id: int,
        withdrawn_by: str | None = None,
    ) -> None:
        """Delete an enrollment and give its seat back to the subject.

        Args:
            enrollment_id: Enrollment identifier.
            withdrawn_by: ID of user performing withdrawal.

        Raises:
            EnrollmentNotFoundError: If enrollment not found.
            OperationAbortedError: If the database failed mid-operation.
        """
        async with atomic(self.db, "withdraw"):
            enrollment = await self._lock_enrollment(enrollment_id)
            subject = await self._lock_subject(enrollment.subject_id)
            student_id = enrollment.student_id

            await self.db.delete(enrollment)
            await self.db.flush()

            available = await self._release_seat(subject)

        logger.info(
            "Withdrew enrollment: id=%s, student=%s, subject=%s, available=%d, by=%s",
            enrollment_id,
            student_id,
            subject.id,
            available,
            withdrawn_by,
        )

    async def _get_active_student(self, student_id: int) -> Student:
        """Get student by ID, requiring it to be active.

        Args:
            student_id: Student identifier.

        Returns:
            Student model instance.

        Raises:
            StudentNotFoundError: If not found.
            StudentInactiveError: If not active.
        """
        query = (
            select(Student)
            .where(Student.id == student_id)
            .with_for_update(read=True)
            .execution_options(populate_existing=True)
        )
        result = await self.db.execute(query)
        student = result.scalar_one_or_none()

        if not student:
            raise StudentNotFoundError(f"Student with ID {student_id} not found")
        if not student.is_active:
            raise StudentInactiveError(f"Student with ID {student_id} is not active")

        return student

    async def _get_active_period(self, period_id: int) -> AcademicPeriod:
        """Get academic period by ID, requiring it to be active.

        Args:
            period_id: Academic period identifier.

        Returns:
            AcademicPeriod model instance.

        Raises:
            AcademicPeriodNotFoundError: If not found.
            AcademicPeriodInactiveError: If not active.
        """
        query = (
            select(AcademicPeriod)
            .where(AcademicPeriod.id == period_id)
            .with_for_update(read=True)
            .execution_options(populate_existing=True)
        )
        result = await self.db.execute(query)
        period = result.scalar_one_or_none()

        if not period:
            raise AcademicPeriodNotFoundError(f"Academic period with ID {period_id} not found")
        if not period.is_active:
            raise AcademicPeriodInactiveError(f"Academic period with ID {period_id} is not active")

        return period

    async def _lock_subject(self, subject_id: int) -> Subject:
        """Get subject by ID holding its row lock until commit.

        Raises:
            SubjectNotFoundError: If not found.
        """
        query = (
            select(Subject)
            .where(Subject.id == subject_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        result = await self.db.execute(query)
        subject = result.scalar_one_or_none()

        if not subject:
            raise SubjectNotFoundError(f"Subject with ID {subject_id} not found")

        return subject

    async def _lock_subject_pair(
        self,
        old_subject_id: int,
        new_subject_id: int,
    ) -> tuple[Subject, Subject]:
        """Lock two subjects in ascending id order.

        Raises:
            SubjectNotFoundError: If either subject is missing.
        """
        query = (
            select(Subject)
            .where(Subject.id.in_([old_subject_id, new_subject_id]))
            .order_by(Subject.id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        result = await self.db.execute(query)
        subjects = {subject.id: subject for subject in result.scalars().all()}

        for subject_id in (new_subject_id, old_subject_id):
            if subject_id not in subjects:
                raise SubjectNotFoundError(f"Subject with ID {subject_id} not found")

        return subjects[old_subject_id], subjects[new_subject_id]

    async def _lock_enrollment(self, enrollment_id: int) -> Enrollment:
        """Get enrollment by ID holding its row lock until commit.

        Raises:
            EnrollmentNotFoundError: If not found.
        """
        query = (
            select(Enrollment)
            .where(Enrollment.id == enrollment_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        result = await self.db.execute(query)
        enrollment = result.scalar_one_or_none()

        if not enrollment:
            raise EnrollmentNotFoundError(f"Enrollment with ID {enrollment_id} not found")

        return enrollment

    async def _find_enrollment(
        self,
        student_id: int,
        subject_id: int,
        period_id: int,
    ) -> Enrollment | None:
        """Get the enrollment for a (student, subject, period) triple.

        Returns:
            Enrollment if found, None otherwise.
        """
        query = select(Enrollment).where(
            Enrollment.student_id == student_id,
            Enrollment.subject_id == subject_id,
            Enrollment.academic_period_id == period_id,
        )
        result = await self.db.execute(query)
        return result.scalar_one_or_none()

    async def _take_seat(self, subject: Subject) -> int:
        """Decrement the subject's free seats if any remain.

        Returns:
            Seats left after the decrement.

        Raises:
            SubjectFullError: If no seat was left to take.
        """
        stmt = (
            update(Subject)
            .where(Subject.id == subject.id, Subject.available_quota > 0)
            .values(available_quota=Subject.available_quota - 1)
            .returning(Subject.available_quota)
            .execution_options(synchronize_session=False)
        )
        result = await self.db.execute(stmt)
        remaining = result.scalar_one_or_none()

        if remaining is None:
            raise SubjectFullError(f"No available quota for subject {subject.name}")

        set_committed_value(subject, "available_quota", remaining)
        return remaining

    async def _release_seat(self, subject: Subject) -> int:
        """Give one seat back to a locked subject.

        Must run after the enrollment change has been flushed so the
        remaining enrollments are counted correctly.

        Returns:
            Seats available after the release.
        """
        count_query = select(func.count()).select_from(Enrollment).where(
            Enrollment.subject_id == subject.id
        )
        result = await self.db.execute(count_query)
        enrolled = result.scalar() or 0

        available = released_available_quota(
            subject.max_quota,
            subject.available_quota,
            enrolled,
        )

        stmt = (
            update(Subject)
            .where(Subject.id == subject.id)
            .values(available_quota=available)
            .execution_options(synchronize_session=False)
        )
        await self.db.execute(stmt)

        set_committed_value(subject, "available_quota", available)
        return available

    async def _flush_enrollment(self) -> None:
        """Flush pending enrollment changes.

        Raises:
            AlreadyEnrolledError: If a concurrent request inserted the same
                (student, subject, period) triple first.
        """
        try:
            await self.db.flush()
        except IntegrityError as e:
            raise AlreadyEnrolledError(
                "Student is already enrolled in this subject for this period"
            ) from e

    def _to_response(self, enrollment: Enrollment) -> EnrollmentResponse:
        """Convert enrollment to response DTO.

        Args:
            enrollment: Enrollment model instance.

        Returns:
            EnrollmentResponse DTO.
        """
        return EnrollmentResponse(
            id=enrollment.id,
            student_id=enrollment.student_id,
            subject_id=enrollment.subject_id,
            academic_period_id=enrollment.academic_period_id,
            created_at=ensure_utc(enrollment.created_at),
            updated_at=ensure_utc(enrollment.updated_at),
        )
