# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Database connection management using SQLAlchemy async.

This module owns the process-wide engine and sessionmaker for the
relational store. Uses SQLAlchemy 2.0 async API with the asyncpg driver
in deployment and aiosqlite for local runs and tests.

Example:
    from src.infrastructure.database.connection import (
        init_database,
        get_sessionmaker,
    )

    # Initialize at application startup
    await init_database(settings)

    # Open a read session
    async with get_sessionmaker()() as session:
        result = await session.execute(select(Course))
        courses = result.scalars().all()
"""

from typing import TYPE_CHECKING, Any, Optional

from sqlalchemy import event, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from src.infrastructure.database.models import Base

if TYPE_CHECKING:
    from src.core.config.settings import DatabaseSettings, Settings

# Module-level state for the store connection
_engine: Optional[AsyncEngine] = None
_sessionmaker: Optional[async_sessionmaker[AsyncSession]] = None


class DatabaseError(Exception):
    """Opaque internal error for unexpected store failures.

    Attributes:
        message: Human-readable error description.
        original_error: The underlying SQLAlchemy or database error.
    """

    code = "internal_error"

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


def _serialize_sqlite_transactions(engine: AsyncEngine) -> None:
    """Make every SQLite transaction take the write lock when it begins.

    The driver's own deferred BEGIN is disabled and replaced with
    ``BEGIN IMMEDIATE``, so units of work run one at a time and reads inside
    a unit see the latest committed state. Foreign keys are enforced per
    connection.
    """

    @event.listens_for(engine.sync_engine, "connect")
    def _on_connect(dbapi_connection: Any, connection_record: Any) -> None:
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(engine.sync_engine, "begin")
    def _on_begin(conn: Any) -> None:
        conn.exec_driver_sql("BEGIN IMMEDIATE")


def build_engine(settings: "DatabaseSettings") -> AsyncEngine:
    """Create an async engine for the configured store.

    Pool sizing and isolation level are only passed for server databases;
    SQLite transactions are serialized on its single-writer lock.

    Args:
        settings: Database settings.

    Returns:
        A new AsyncEngine.
    """
    options: dict[str, Any] = {}
    if settings.is_sqlite:
        options["connect_args"] = {"timeout": 15}
        engine = create_async_engine(settings.url, **options)
        _serialize_sqlite_transactions(engine)
        return engine

    options.update(
        pool_size=settings.pool_size,
        max_overflow=settings.max_overflow,
        pool_pre_ping=True,
        pool_recycle=1800,
        isolation_level=settings.isolation_level,
    )
    return create_async_engine(settings.url, **options)


def build_sessionmaker(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Create the session factory used by services and the transaction coordinator."""
    return async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


async def init_database(settings: "Settings") -> None:
    """Initialize the store connection pool.

    This should be called once at application startup.

    Args:
        settings: Application settings containing database configuration.

    Raises:
        DatabaseError: If connection pool creation fails.
    """
    global _engine, _sessionmaker

    try:
        _engine = build_engine(settings.database)
        _sessionmaker = build_sessionmaker(_engine)
    except SQLAlchemyError as e:
        raise DatabaseError("Failed to initialize database connection", e) from e


async def close_database() -> None:
    """Close the store connection pool.

    This should be called at application shutdown to properly
    close all connections in the pool.
    """
    global _engine, _sessionmaker

    if _engine is not None:
        await _engine.dispose()
        _engine = None
        _sessionmaker = None


def get_sessionmaker() -> async_sessionmaker[AsyncSession]:
    """Get the store sessionmaker.

    Raises:
        DatabaseError: If the database has not been initialized.
    """
    if _sessionmaker is None:
        raise DatabaseError("Database not initialized. Call init_database() first.")
    return _sessionmaker


async def create_schema(engine: AsyncEngine) -> None:
    """Create all tables. Used by tests and local development runs."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def check_database_connection() -> bool:
    """Check if the store is reachable.

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
