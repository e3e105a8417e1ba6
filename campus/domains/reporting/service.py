# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Read-only queries over the enrollment ledger.

Nothing here writes. Reports run on whatever session they are given and
see the data committed at the time of the query.
"""

from __future__ import annotations

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from campus.infrastructure.database.models import (
    AcademicPeriod,
    Enrollment,
    Student,
    Subject,
)
from campus.models.reporting import EnrollmentListItem, SubjectOccupancy
from campus.utils.datetime import ensure_utc
from campus.utils.logging import get_logger

logger = get_logger(__name__)


class ReportingService:
    """Enrollment listings and seat occupancy reports.

    Attributes:
        db: Async database session.
    """

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def list_enrollments(
        self,
        subject_id: int | None = None,
        period_id: int | None = None,
        student_id: int | None = None,
    ) -> list[EnrollmentListItem]:
        """List enrollments with student, subject and period names.

        Args:
            subject_id: Only enrollments in this subject.
            period_id: Only enrollments in this academic period.
            student_id: Only enrollments of this student.

        Returns:
            Matching enrollments, oldest first.
        """
        query = (
            select(
                Enrollment.id,
                Enrollment.student_id,
                Student.first_name,
                Student.last_name,
                Student.email,
                Enrollment.subject_id,
                Subject.name.label("subject_name"),
                Enrollment.academic_period_id,
                AcademicPeriod.name.label("academic_period_name"),
                Enrollment.created_at,
            )
            .join(Student, Student.id == Enrollment.student_id)
            .join(Subject, Subject.id == Enrollment.subject_id)
            .join(AcademicPeriod, AcademicPeriod.id == Enrollment.academic_period_id)
        )

        if subject_id is not None:
            query = query.where(Enrollment.subject_id == subject_id)
        if period_id is not None:
            query = query.where(Enrollment.academic_period_id == period_id)
        if student_id is not None:
            query = query.where(Enrollment.student_id == student_id)

        query = query.order_by(Enrollment.created_at, Enrollment.id)

        result = await self.db.execute(query)

        return [
            EnrollmentListItem(
                id=row.id,
                student_id=row.student_id,
                student_name=f"{row.first_name} {row.last_name}".strip(),
                student_email=row.email,
                subject_id=row.subject_id,
                subject_name=row.subject_name,
                academic_period_id=row.academic_period_id,
                academic_period_name=row.academic_period_name,
                created_at=ensure_utc(row.created_at),
            )
            for row in result.all()
        ]

    async def count_active_students(self) -> int:
        """Count students that may currently enroll."""
        query = select(func.count()).select_from(Student).where(Student.is_active.is_(True))
        result = await self.db.execute(query)
        return result.scalar() or 0

    async def subject_occupancy(self) -> list[SubjectOccupancy]:
        """Compare each subject's seat counter with its enrollment rows.

        A row is consistent when max_quota - available_quota equals the
        number of enrollments. Subjects whose capacity was cut below
        occupancy show up as inconsistent until enough students withdraw.

        Returns:
            One entry per subject, ordered by subject ID.
        """
        counts = (
            select(
                Enrollment.subject_id,
                func.count(Enrollment.id).label("enrollment_count"),
            )
            .group_by(Enrollment.subject_id)
            .subquery()
        )
        query = (
            select(Subject, func.coalesce(counts.c.enrollment_count, 0))
            .outerjoin(counts, counts.c.subject_id == Subject.id)
            .order_by(Subject.id)
        )
        result = await self.db.execute(query)

        report = []
        for subject, enrollment_count in result.all():
            occupied = subject.max_quota - subject.available_quota
            report.append(
                SubjectOccupancy(
                    subject_id=subject.id,
                    subject_name=subject.name,
                    max_quota=subject.max_quota,
                    available_quota=subject.available_quota,
                    occupied_seats=occupied,
                    enrollment_count=enrollment_count,
                    consistent=occupied == enrollment_count,
                )
            )

        inconsistent = [row.subject_id for row in report if not row.consistent]
        if inconsistent:
            logger.warning(
                "subject_quota_mismatch",
                subject_ids=inconsistent,
                subject_count=len(report),
            )

        return report
