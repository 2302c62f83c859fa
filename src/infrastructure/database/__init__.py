# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Database infrastructure for the relational store.

Example:
    from src.infrastructure.database import (
        TransactionCoordinator,
        get_sessionmaker,
    )

    async with get_sessionmaker()() as session:
        result = await session.execute(select(Branch))

    coordinator = TransactionCoordinator(get_sessionmaker())
    await coordinator.run(unit)
"""

from src.infrastructure.database.connection import (
    DatabaseError,
    build_engine,
    build_sessionmaker,
    check_database_connection,
    close_database,
    create_schema,
    get_sessionmaker,
    init_database,
)
from src.infrastructure.database.transaction import (
    TransactionCoordinator,
    is_enrollment_pair_violation,
    is_retryable,
)

__all__ = [
    "DatabaseError",
    "build_engine",
    "build_sessionmaker",
    "check_database_connection",
    "close_database",
    "create_schema",
    "get_sessionmaker",
    "init_database",
    "TransactionCoordinator",
    "is_enrollment_pair_violation",
    "is_retryable",
]
