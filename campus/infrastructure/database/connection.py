# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Academic database connection management using SQLAlchemy async.

Uses SQLAlchemy 2.0 async API with the asyncpg driver in deployments and
aiosqlite for local runs and tests.

Seat quota correctness relies on the store serializing writers to the same
subject row. PostgreSQL engines run at the configured isolation level and
the services lock rows with SELECT ... FOR UPDATE. SQLite has no row locks,
so SQLite engines open every transaction with BEGIN IMMEDIATE, which takes
the database write lock up front.

Example:
    from campus.infrastructure.database.connection import (
        init_database,
        get_session,
    )

    # Initialize at application startup
    await init_database(settings)

    # Use in request handlers
    async with get_session() as session:
        service = EnrollmentService(db=session)
        await service.withdraw(enrollment_id=42)
"""

from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, Any, AsyncIterator, Optional

from sqlalchemy import event, text
from sqlalchemy.engine import make_url
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

if TYPE_CHECKING:
    from campus.core.config.settings import Settings

# Module-level state for the academic database connection
_engine: Optional[AsyncEngine] = None
_sessionmaker: Optional[async_sessionmaker[AsyncSession]] = None


class DatabaseError(Exception):
    """Base exception for database operations.

    Attributes:
        message: Human-readable error description.
        original_error: The underlying SQLAlchemy or database error.
    """

    def __init__(self, message: str, original_error: Optional[Exception] = None) -> None:
        """Initialize the database error.

        Args:
            message: Human-readable error description.
            original_error: The underlying exception that caused this error.
        """
        super().__init__(message)
        self.message = message
        self.original_error = original_error

    def __str__(self) -> str:
        """Return string representation of the error."""
        if self.original_error:
            return f"{self.message}: {self.original_error}"
        return self.message


def _install_sqlite_hooks(engine: AsyncEngine) -> None:
    """Enable foreign keys and IMMEDIATE transactions on a SQLite engine."""

    @event.listens_for(engine.sync_engine, "connect")
    def _on_connect(dbapi_connection: Any, connection_record: Any) -> None:
        # Stop the driver from emitting its own deferred BEGIN
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(engine.sync_engine, "begin")
    def _on_begin(conn: Any) -> None:
        conn.exec_driver_sql("BEGIN IMMEDIATE")


def create_database_engine(
    url: str,
    *,
    pool_size: int = 10,
    max_overflow: int = 20,
    isolation_level: str = "READ COMMITTED",
    echo: bool = False,
    busy_timeout: float = 30.0,
) -> AsyncEngine:
    """Create an async engine suitable for the enrollment ledger.

    Args:
        url: Async database URL (postgresql+asyncpg or sqlite+aiosqlite).
        pool_size: Connection pool size (server databases only).
        max_overflow: Maximum overflow connections (server databases only).
        isolation_level: Transaction isolation level (server databases only).
        echo: Log every SQL statement.
        busy_timeout: Seconds a SQLite connection waits for the write lock.

    Returns:
        Configured AsyncEngine.
    """
    if make_url(url).get_backend_name() == "sqlite":
        engine = create_async_engine(
            url,
            echo=echo,
            connect_args={"timeout": busy_timeout},
        )
        _install_sqlite_hooks(engine)
        return engine

    return create_async_engine(
        url,
        pool_size=pool_size,
        max_overflow=max_overflow,
        isolation_level=isolation_level,
        pool_pre_ping=True,
        pool_recycle=1800,
        echo=echo,
    )


def create_sessionmaker(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Build the session factory used by the domain services.

    Args:
        engine: Engine returned by create_database_engine().

    Returns:
        Sessionmaker producing AsyncSession objects.
    """
    return async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


async def init_database(settings: "Settings") -> None:
    """Initialize the academic database connection pool.

    This should be called once at application startup.

    Args:
        settings: Application settings containing database configuration.

    Raises:
        DatabaseError: If connection pool creation fails.
    """
    global _engine, _sessionmaker

    try:
        _engine = create_database_engine(
            settings.database.url,
            pool_size=settings.database.pool_size,
            max_overflow=settings.database.max_overflow,
            isolation_level=settings.database.isolation_level,
            echo=settings.database.echo,
        )
        _sessionmaker = create_sessionmaker(_engine)
    except SQLAlchemyError as e:
        raise DatabaseError("Failed to initialize academic database connection", e) from e


async def close_database() -> None:
    """Close the academic database connection pool.

    This should be called at application shutdown to properly
    close all connections in the pool.
    """
    global _engine, _sessionmaker

    if _engine is not None:
        await _engine.dispose()
        _engine = None
        _sessionmaker = None


def get_engine() -> AsyncEngine:
    """Get the academic database async engine.

    Returns:
        The SQLAlchemy async engine.

    Raises:
        DatabaseError: If the database has not been initialized.
    """
    if _engine is None:
        raise DatabaseError(
            "Academic database not initialized. Call init_database() first."
        )
    return _engine


def get_sessionmaker() -> async_sessionmaker[AsyncSession]:
    """Get the academic database sessionmaker.

    Returns:
        The SQLAlchemy async sessionmaker.

    Raises:
        DatabaseError: If the database has not been initialized.
    """
    if _sessionmaker is None:
        raise DatabaseError(
            "Academic database not initialized. Call init_database() first."
        )
    return _sessionmaker


@asynccontextmanager
async def get_session() -> AsyncIterator[AsyncSession]:
    """Get an async session for the academic database.

    The session is committed on success and rolled back on exception.
    Domain services commit their own units of work; the final commit here
    only flushes whatever the caller did outside them.

    Yields:
        AsyncSession for database operations.

    Raises:
        DatabaseError: If the database has not been initialized or
            if a database operation fails.
    """
    sessionmaker = get_sessionmaker()

    async with sessionmaker() as session:
        try:
            yield session
            await session.commit()
        except SQLAlchemyError as e:
            await session.rollback()
            raise DatabaseError("Database operation failed", e) from e
        except Exception:
            await session.rollback()
            raise


async def check_database_connection() -> bool:
    """Check if the academic database is reachable.

    Returns:
        True if the database is reachable, False otherwise.
    """
    if _engine is None:
        return False

    try:
        async with _engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        return True
    except SQLAlchemyError:
        return False
