# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Capacity ledger for course seats.

Keeps ``seats_available == capacity - active enrollments`` for every course.
All methods run inside the caller's transaction so a seat movement commits
or rolls back together with the enrollment row it belongs to.

Seat counters are changed with conditional UPDATE statements rather than
read-modify-write on the ORM object. The WHERE predicate is re-checked by
the store against the latest committed row, so two concurrent reservations
for the last seat cannot both succeed.
"""

import logging

from sqlalchemy import case, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from src.domains.errors import CapacityExceededError, InvalidCapacityError
from src.infrastructure.database.models import Course, Enrollment

logger = logging.getLogger(__name__)

_SEAT_FIELDS = ["capacity", "seats_available"]


class CapacityLedger:
    """Seat accounting operations over a session."""

    async def reserve(self, session: AsyncSession, course: Course) -> None:
        """Take one seat.

        Args:
            session: Session of the enclosing unit of work.
            course: Course to reserve a seat on.

        Raises:
            CapacityExceededError: If no seat is available.
        """
        result = await session.execute(
            update(Course)
            .where(Course.id == course.id, Course.seats_available > 0)
            .values(seats_available=Course.seats_available - 1)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            raise CapacityExceededError()

        await session.refresh(course, attribute_names=_SEAT_FIELDS)

    async def release(self, session: AsyncSession, course: Course) -> bool:
        """Give one seat back.

        The increment never pushes ``seats_available`` above ``capacity``.
        A release that would is dropped and logged.

        Args:
            session: Session of the enclosing unit of work.
            course: Course to release a seat on.

        Returns:
            True if a seat was released, False if the release was clamped.
        """
        result = await session.execute(
            update(Course)
            .where(Course.id == course.id, Course.seats_available < Course.capacity)
            .values(seats_available=Course.seats_available + 1)
            .execution_options(synchronize_session=False)
        )
        await session.refresh(course, attribute_names=_SEAT_FIELDS)

        if result.rowcount == 0:
            logger.warning(
                "Seat release clamped at capacity: course=%s, capacity=%d",
                course.id,
                course.capacity,
            )
            return False
        return True

    async def reconcile(
        self,
        session: AsyncSession,
        course: Course,
        new_capacity: int,
    ) -> int:
        """Set a new capacity and recompute the available seats.

        ``seats_available`` becomes ``max(0, new_capacity - active)``. Lowering
        the capacity below the active count is allowed and only logged.

        Args:
            session: Session of the enclosing unit of work.
            course: Course being edited.
            new_capacity: Capacity to store.

        Returns:
            Number of Active enrollments on the course.

        Raises:
            InvalidCapacityError: If ``new_capacity`` is not positive.
        """
        if new_capacity < 1:
            raise InvalidCapacityError()

        active_subquery = (
            select(func.count(Enrollment.id))
            .where(Enrollment.course_id == course.id, Enrollment.active_clause())
            .scalar_subquery()
        )
        free = new_capacity - active_subquery
        await session.execute(
            update(Course)
            .where(Course.id == course.id)
            .values(
                capacity=new_capacity,
                seats_available=case((free > 0, free), else_=0),
            )
            .execution_options(synchronize_session=False)
        )
        await session.refresh(course, attribute_names=_SEAT_FIELDS)

        active = await self.active_count(session, course.id)
        if new_capacity < active:
            logger.warning(
                "Capacity below active enrollments, seats clamped to zero: "
                "course=%s, capacity=%d, active=%d",
                course.id,
                new_capacity,
                active,
            )
        return active

    async def active_count(self, session: AsyncSession, course_id: int) -> int:
        """Count Active enrollments on a course."""
        result = await session.execute(
            select(func.count(Enrollment.id)).where(
                Enrollment.course_id == course_id,
                Enrollment.active_clause(),
            )
        )
        return result.scalar_one()
