# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Student service for managing student records.

This module provides the StudentService class for:
- Student CRUD operations
- Activating and deactivating students

Deactivating a student keeps their enrollments; it only stops new ones.
"""

from __future__ import annotations

import logging

from sqlalchemy import func, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from campus.domains.errors import ConflictError, DomainError, NotFoundError
from campus.domains.transaction import atomic
from campus.infrastructure.database.models import Career, Student
from campus.models.student import (
    StudentCreateRequest,
    StudentResponse,
    StudentUpdateRequest,
)
from campus.utils.datetime import ensure_utc

logger = logging.getLogger(__name__)


class StudentServiceError(DomainError):
    """Base exception for student service errors."""

    pass


class StudentNotFoundError(StudentServiceError, NotFoundError):
    """Raised when student is not found."""

    pass


class CareerNotFoundError(StudentServiceError, NotFoundError):
    """Raised when career is not found."""

    pass


class StudentExistsError(StudentServiceError, ConflictError):
    """Raised when email or user_id is already used by another student."""

    pass


class StudentService:
    """Service for managing students.

    Attributes:
        db: Async database session.
    """

    def __init__(self, db: AsyncSession) -> None:
        """Initialize student service.

        Args:
            db: Async database session for the academic database.
        """
        self.db = db

    async def create_student(self, request: StudentCreateRequest) -> StudentResponse:
        """Create a new student.

        Args:
            request: Student creation data.

        Returns:
            Created student.

        Raises:
            CareerNotFoundError: If career not found.
            StudentExistsError: If email or user_id is taken.
        """
        email = request.email.strip().lower()

        async with atomic(self.db, "create_student"):
            await self._check_career(request.career_id)
            await self._check_unique(email, request.user_id)

            student = Student(
                user_id=request.user_id,
                first_name=request.first_name,
                last_name=request.last_name,
                email=email,
                career_id=request.career_id,
                is_active=request.is_active,
            )
            self.db.add(student)
            await self._flush_student()

            response = self._to_response(student)

        logger.info("Created student: %s (%s)", student.email, student.id)

        return response

    async def get_student(self, student_id: int) -> StudentResponse:
        """Get student by ID.

        Raises:
            StudentNotFoundError: If student not found.
        """
        student = await self._get_by_id(student_id)
        return self._to_response(student)

    async def list_students(
        self,
        career_id: int | None = None,
        active_only: bool = False,
    ) -> tuple[list[StudentResponse], int]:
        """List students.

        Args:
            career_id: Only students of this career.
            active_only: Skip inactive students.

        Returns:
            Tuple of (list of students, total count).
        """
        query = select(Student)

        if career_id is not None:
            query = query.where(Student.career_id == career_id)
        if active_only:
            query = query.where(Student.is_active.is_(True))

        query = query.order_by(Student.last_name, Student.first_name, Student.id)

        count_query = select(func.count()).select_from(query.subquery())
        total_result = await self.db.execute(count_query)
        total = total_result.scalar() or 0

        result = await self.db.execute(query)
        students = result.scalars().all()

        return [self._to_response(student) for student in students], total

    async def update_student(
        self,
        student_id: int,
        request: StudentUpdateRequest,
    ) -> StudentResponse:
        """Update a student.

        Args:
            student_id: Student identifier.
            request: Update data.

        Returns:
            Updated student.

        Raises:
            StudentNotFoundError: If student not found.
            CareerNotFoundError: If the new career is not found.
            StudentExistsError: If the new email or user_id is taken.
        """
        async with atomic(self.db, "update_student"):
            student = await self._get_by_id(student_id)

            email = request.email.strip().lower() if request.email is not None else None

            if request.career_id is not None and request.career_id != student.career_id:
                await self._check_career(request.career_id)
            if email is not None or request.user_id is not None:
                await self._check_unique(email, request.user_id, exclude_id=student.id)

            if request.user_id is not None:
                student.user_id = request.user_id
            if request.first_name is not None:
                student.first_name = request.first_name
            if request.last_name is not None:
                student.last_name = request.last_name
            if email is not None:
                student.email = email
            if request.career_id is not None:
                student.career_id = request.career_id
            if request.is_active is not None:
                student.is_active = request.is_active

            await self._flush_student()

            response = self._to_response(student)

        logger.info("Updated student: %s", student_id)

        return response

    async def deactivate_student(self, student_id: int) -> StudentResponse:
        """Mark a student inactive. Existing enrollments are kept."""
        return await self._set_active(student_id, False)

    async def activate_student(self, student_id: int) -> StudentResponse:
        """Mark a student active again."""
        return await self._set_active(student_id, True)

    async def _set_active(self, student_id: int, is_active: bool) -> StudentResponse:
        async with atomic(self.db, "set_student_active"):
            student = await self._get_by_id(student_id, lock=True)
            student.is_active = is_active
            await self.db.flush()
            response = self._to_response(student)

        logger.info("Set student %s active=%s", student_id, is_active)

        return response

    async def _get_by_id(self, student_id: int, lock: bool = False) -> Student:
        """Get student by ID.

        Args:
            student_id: Student identifier.
            lock: Hold the row lock until the transaction ends.

        Returns:
            Student model instance.

        Raises:
            StudentNotFoundError: If not found.
        """
        query = select(Student).where(Student.id == student_id)
        if lock:
            query = query.with_for_update().execution_options(populate_existing=True)
        result = await self.db.execute(query)
        student = result.scalar_one_or_none()

        if not student:
            raise StudentNotFoundError(f"Student with ID {student_id} not found")

        return student

    async def _check_career(self, career_id: int) -> None:
        result = await self.db.execute(select(Career.id).where(Career.id == career_id))
        if result.scalar_one_or_none() is None:
            raise CareerNotFoundError(f"Career with ID {career_id} not found")

    async def _check_unique(
        self,
        email: str | None,
        user_id: int | None,
        exclude_id: int | None = None,
    ) -> None:
        """Reject an email or user_id used by another student.

        Raises:
            StudentExistsError: If either value is taken.
        """
        conditions = []
        if email is not None:
            conditions.append(Student.email == email)
        if user_id is not None:
            conditions.append(Student.user_id == user_id)
        if not conditions:
            return

        query = select(Student).where(or_(*conditions))
        if exclude_id is not None:
            query = query.where(Student.id != exclude_id)
        result = await self.db.execute(query.limit(1))
        existing = result.scalar_one_or_none()

        if existing is not None:
            if email is not None and existing.email == email:
                raise StudentExistsError(f"Email {email} is already registered")
            raise StudentExistsError(f"User {user_id} is already linked to a student")

    async def _flush_student(self) -> None:
        try:
            await self.db.flush()
        except IntegrityError as e:
            raise StudentExistsError("Email or user is already linked to a student") from e

    def _to_response(self, student: Student) -> StudentResponse:
        """Convert student model to response DTO."""
        return StudentResponse(
            id=student.id,
            user_id=student.user_id,
            first_name=student.first_name,
            last_name=student.last_name,
            email=student.email,
            is_active=student.is_active,
            career_id=student.career_id,
            created_at=ensure_utc(student.created_at),
        )
