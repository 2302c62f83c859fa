# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Transaction coordinator for all-or-nothing units of work.

A unit of work is an async callable receiving a fresh AsyncSession. The
coordinator begins a transaction, awaits the unit, and commits only if it
returns normally. Any exception rolls back every change made in the unit.

Retryable store failures (serialization failures, deadlocks, a locked
SQLite file) re-run the whole unit in a new session.

Example:
    coordinator = TransactionCoordinator(get_sessionmaker(), max_retries=3)

    async def unit(session: AsyncSession) -> int:
        course = await session.get(Course, course_id, with_for_update=True)
        await ledger.reserve(session, course)
        return course.seats_available

    seats = await coordinator.run(unit, name="reserve")
"""

import asyncio
import logging
from typing import Awaitable, Callable, TypeVar

from sqlalchemy.exc import DBAPIError, IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from src.domains.errors import DomainError, DuplicateEnrollmentError
from src.infrastructure.database.connection import DatabaseError
from src.infrastructure.database.models import ENROLLMENT_PAIR_CONSTRAINT

logger = logging.getLogger(__name__)

T = TypeVar("T")

UnitOfWork = Callable[[AsyncSession], Awaitable[T]]

RETRYABLE_SQLSTATES = frozenset({"40001", "40P01"})

RETRYABLE_MESSAGES = (
    "could not serialize access",
    "deadlock detected",
    "database is locked",
)


def _sqlstate(error: DBAPIError) -> str | None:
    orig = error.orig
    return getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)


def is_retryable(error: DBAPIError) -> bool:
    """Check if a store failure is safe to retry from scratch.

    Args:
        error: The wrapped DBAPI error.

    Returns:
        True for serialization failures, deadlocks and SQLite lock timeouts.
    """
    if _sqlstate(error) in RETRYABLE_SQLSTATES:
        return True
    message = str(error.orig).lower()
    return any(fragment in message for fragment in RETRYABLE_MESSAGES)


def is_enrollment_pair_violation(error: IntegrityError) -> bool:
    """Check if an integrity error comes from the (student, course) constraint."""
    message = str(error.orig)
    if ENROLLMENT_PAIR_CONSTRAINT in message:
        return True
    return "enrollments.student_id" in message and "enrollments.course_id" in message


class TransactionCoordinator:
    """Runs units of work as single atomic transactions.

    Attributes:
        _session_factory: Factory producing a new session per attempt.
        _max_retries: Number of re-runs allowed after a retryable failure.
        _retry_backoff: Base delay in seconds, multiplied by the attempt number.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        max_retries: int = 3,
        retry_backoff: float = 0.05,
    ) -> None:
        self._session_factory = session_factory
        self._max_retries = max_retries
        self._retry_backoff = retry_backoff

    async def run(self, fn: UnitOfWork[T], *, name: str = "unit") -> T:
        """Execute a unit of work atomically.

        Args:
            fn: Async callable performing reads and writes on the session.
            name: Label used in log lines.

        Returns:
            Whatever the unit returned, after a successful commit.

        Raises:
            DomainError: Propagated unchanged from the unit.
            DuplicateEnrollmentError: If the store rejected a second row for
                the same (student, course) pair.
            DatabaseError: For any other store failure, or when retries
                are exhausted.
        """
        attempt = 0
        while True:
            try:
                return await self._run_once(fn)
            except DomainError:
                raise
            except IntegrityError as e:
                if is_enrollment_pair_violation(e):
                    raise DuplicateEnrollmentError() from e
                raise DatabaseError(f"Integrity violation in {name}", e) from e
            except DBAPIError as e:
                if is_retryable(e) and attempt < self._max_retries:
                    attempt += 1
                    logger.warning(
                        "Retrying transaction: unit=%s, attempt=%d, reason=%s",
                        name,
                        attempt,
                        str(e.orig),
                    )
                    await asyncio.sleep(self._retry_backoff * attempt)
                    continue
                raise DatabaseError(f"Transaction {name} failed", e) from e
            except SQLAlchemyError as e:
                raise DatabaseError(f"Transaction {name} failed", e) from e

    async def _run_once(self, fn: UnitOfWork[T]) -> T:
        async with self._session_factory() as session:
            async with session.begin():
                return await fn(session)
