# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Academic schema models.

Tables:
- careers, cycles: static catalog referenced by students and subjects
- students, subjects, academic_periods: catalog records
- enrollments: the enrollment ledger, one row per occupied seat

Subject.available_quota is the seat counter kept in step with the
enrollments table by the enrollment service.
"""

from datetime import date

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Date,
    ForeignKey,
    Integer,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from campus.infrastructure.database.models.base import Base, TimestampMixin


class Career(Base, TimestampMixin):
    """Degree programme a student belongs to."""

    __tablename__ = "careers"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(150), unique=True, nullable=False)
    total_cycles: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    duration_years: Mapped[int] = mapped_column(Integer, nullable=False, default=1)


class Cycle(Base, TimestampMixin):
    """Curriculum cycle (semester slot) a subject is taught in."""

    __tablename__ = "cycles"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    number: Mapped[int] = mapped_column(Integer, unique=True, nullable=False)


class Student(Base, TimestampMixin):
    """Student record. Only is_active matters to the enrollment ledger."""

    __tablename__ = "students"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(Integer, unique=True, nullable=False)
    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    career_id: Mapped[int] = mapped_column(
        ForeignKey("careers.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )

    career: Mapped[Career] = relationship()

    @property
    def full_name(self) -> str:
        """First and last name joined with a space."""
        return f"{self.first_name} {self.last_name}".strip()


class Subject(Base, TimestampMixin):
    """Subject offered to students, with a seat capacity.

    available_quota counts free seats: max_quota minus live enrollments,
    floored at zero when the capacity was reduced below occupancy.
    """

    __tablename__ = "subjects"
    __table_args__ = (
        UniqueConstraint("career_id", "cycle_id", "name"),
        CheckConstraint("max_quota >= 1", name="max_quota_positive"),
        CheckConstraint("available_quota >= 0", name="available_quota_non_negative"),
        CheckConstraint("available_quota <= max_quota", name="available_quota_within_max"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(150), nullable=False)
    credits: Mapped[int] = mapped_column(Integer, nullable=False)
    max_quota: Mapped[int] = mapped_column(Integer, nullable=False)
    available_quota: Mapped[int] = mapped_column(Integer, nullable=False)
    career_id: Mapped[int] = mapped_column(
        ForeignKey("careers.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    cycle_id: Mapped[int] = mapped_column(
        ForeignKey("cycles.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )

    career: Mapped[Career] = relationship()
    cycle: Mapped[Cycle] = relationship()

    @property
    def occupied_seats(self) -> int:
        """Seats currently taken according to the quota counter."""
        return self.max_quota - self.available_quota


class AcademicPeriod(Base, TimestampMixin):
    """Enrollment window. Students can only enroll while it is active."""

    __tablename__ = "academic_periods"
    __table_args__ = (
        CheckConstraint("end_date > start_date", name="dates_ordered"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(50), unique=True, nullable=False)
    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    end_date: Mapped[date] = mapped_column(Date, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)


class Enrollment(Base, TimestampMixin):
    """One student occupying one seat of a subject in an academic period."""

    __tablename__ = "enrollments"
    __table_args__ = (
        UniqueConstraint("student_id", "subject_id", "academic_period_id"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    student_id: Mapped[int] = mapped_column(
        ForeignKey("students.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    subject_id: Mapped[int] = mapped_column(
        ForeignKey("subjects.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    academic_period_id: Mapped[int] = mapped_column(
        ForeignKey("academic_periods.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )

    student: Mapped[Student] = relationship()
    subject: Mapped[Subject] = relationship()
    academic_period: Mapped[AcademicPeriod] = relationship()
