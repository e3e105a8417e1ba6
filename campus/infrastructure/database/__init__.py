# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Database infrastructure for the academic schema.

This package provides SQLAlchemy async database connections and the
session factory used by the domain services.

Example:
    from campus.infrastructure.database import init_database, get_session

    await init_database(settings)
    async with get_session() as session:
        result = await session.execute(select(Subject))
"""

from campus.infrastructure.database.connection import (
    DatabaseError,
    check_database_connection,
    close_database,
    create_database_engine,
    create_sessionmaker,
    get_engine,
    get_session,
    get_sessionmaker,
    init_database,
)

__all__ = [
    "DatabaseError",
    "check_database_connection",
    "close_database",
    "create_database_engine",
    "create_sessionmaker",
    "get_engine",
    "get_session",
    "get_sessionmaker",
    "init_database",
]
