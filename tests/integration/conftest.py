# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Pytest fixtures for database integration tests.

Each test gets a fresh SQLite file database built through the same engine
factory the application uses, so IMMEDIATE transactions and foreign keys
behave as they do outside tests. Separate sessions get separate
connections, which lets tests race real transactions against each other.
"""

import os
from datetime import date
from pathlib import Path
from typing import AsyncGenerator

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from campus.infrastructure.database import create_database_engine, create_sessionmaker
from campus.infrastructure.database.models import (
    AcademicPeriod,
    Base,
    Career,
    Cycle,
    Student,
    Subject,
)


@pytest.fixture
def academic_db_url(tmp_path: Path) -> str:
    """Get academic database URL for tests."""
    return os.environ.get(
        "TEST_ACADEMIC_DB_URL",
        f"sqlite+aiosqlite:///{tmp_path / 'academic_test.db'}",
    )


@pytest_asyncio.fixture(scope="function")
async def academic_db_engine(academic_db_url: str) -> AsyncGenerator[AsyncEngine, None]:
    """Create async engine for academic database tests."""
    engine = create_database_engine(academic_db_url, busy_timeout=30.0)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest.fixture
def session_factory(academic_db_engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Create the sessionmaker the services run on."""
    return create_sessionmaker(academic_db_engine)


@pytest_asyncio.fixture(scope="function")
async def academic_db_session(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncSession, None]:
    """Create async session for academic database tests."""
    async with session_factory() as session:
        yield session
        await session.rollback()


@pytest_asyncio.fixture(scope="function")
async def catalog(session_factory: async_sessionmaker[AsyncSession]) -> dict[str, list[int]]:
    """Seed one career, one cycle, an active period and a few students and subjects.

    Returns:
        Mapping of entity kind to the created IDs:
        - careers, cycles: one each
        - periods: [active, closed]
        - students: six active students followed by one inactive
        - subjects: capacities [1, 2, 30]
    """
    async with session_factory() as session:
        career = Career(name="Systems Engineering", total_cycles=10, duration_years=5)
        cycle = Cycle(name="First cycle", number=1)
        session.add_all([career, cycle])
        await session.flush()

        periods = [
            AcademicPeriod(
                name="2025-I",
                start_date=date(2025, 3, 1),
                end_date=date(2025, 7, 31),
                is_active=True,
            ),
            AcademicPeriod(
                name="2024-II",
                start_date=date(2024, 8, 1),
                end_date=date(2024, 12, 15),
                is_active=False,
            ),
        ]
        students = [
            Student(
                user_id=1000 + n,
                first_name=f"Student{n}",
                last_name="Test",
                email=f"student{n}@university.edu",
                is_active=n < 6,
                career_id=career.id,
            )
            for n in range(7)
        ]
        subjects = [
            Subject(
                name=name,
                credits=4,
                max_quota=quota,
                available_quota=quota,
                career_id=career.id,
                cycle_id=cycle.id,
            )
            for name, quota in [("Calculus I", 1), ("Physics I", 2), ("Programming I", 30)]
        ]
        session.add_all([*periods, *students, *subjects])
        await session.flush()

        ids = {
            "careers": [career.id],
            "cycles": [cycle.id],
            "periods": [period.id for period in periods],
            "students": [student.id for student in students],
            "subjects": [subject.id for subject in subjects],
        }
        await session.commit()

    return ids
