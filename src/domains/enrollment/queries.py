# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Read paths over enrollments.

Every query carries the acting user's branch filter as a WHERE clause, so a
scoped user never observes rows, counts or existence from another branch.
Single-record reads check access on the parent record (course or student)
before listing its enrollments.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from sqlalchemy import Select, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.orm import selectinload

from src.domains.access import assert_branch_access, resolve_scope
from src.domains.auth import AuthUser
from src.domains.lookup import EntityLookup
from src.infrastructure.database.models import Enrollment
from src.models.common import EnrollmentState


@dataclass
class StudentProfile:
    """A student's enrollments partitioned by state."""

    student_id: int
    active: list[Enrollment] = field(default_factory=list)
    completed: list[Enrollment] = field(default_factory=list)
    canceled: list[Enrollment] = field(default_factory=list)


def _with_relations(query: Select[Any]) -> Select[Any]:
    return query.options(
        selectinload(Enrollment.student),
        selectinload(Enrollment.course),
    )


def _newest_first(query: Select[Any]) -> Select[Any]:
    return query.order_by(Enrollment.enrolled_date.desc(), Enrollment.id.desc())


def _oldest_first(query: Select[Any]) -> Select[Any]:
    return query.order_by(Enrollment.enrolled_date.asc(), Enrollment.id.asc())


class EnrollmentQueries:
    """Branch-scoped enrollment reads.

    Each call runs in its own short-lived session, outside any write
    transaction.

    Attributes:
        _session_factory: Factory producing read sessions.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def get_enrollment(self, enrollment_id: int, user: AuthUser) -> Enrollment:
        """Get one enrollment with its student and course.

        Raises:
            EnrollmentNotFoundError: If not found.
            NoBranchAssignedError: If a scoped user has no branch.
            BranchAccessForbiddenError: If the row belongs to another branch.
        """
        async with self._session_factory() as session:
            enrollment = await EntityLookup(session).find_enrollment(
                enrollment_id, with_relations=True
            )
        assert_branch_access(user, enrollment.branch_id)
        return enrollment

    async def list_enrollments(self, user: AuthUser) -> list[Enrollment]:
        """List all enrollments in scope, newest first."""
        scope = resolve_scope(user)
        query = scope.apply(_with_relations(select(Enrollment)), Enrollment.branch_id)
        return await self._fetch(_newest_first(query))

    async def list_active_enrollments(self, user: AuthUser) -> list[Enrollment]:
        """List Active enrollments in scope, newest first."""
        scope = resolve_scope(user)
        query = _with_relations(select(Enrollment)).where(Enrollment.active_clause())
        query = scope.apply(query, Enrollment.branch_id)
        return await self._fetch(_newest_first(query))

    async def course_roster(self, course_id: int, user: AuthUser) -> list[Enrollment]:
        """List Active enrollments of a course, oldest first.

        Raises:
            CourseNotFoundError: If the course does not exist.
            NoBranchAssignedError: If a scoped user has no branch.
            BranchAccessForbiddenError: If the course belongs to another branch.
        """
        async with self._session_factory() as session:
            course = await EntityLookup(session).find_course(course_id)
            assert_branch_access(user, course.branch_id)

            query = _with_relations(select(Enrollment)).where(
                Enrollment.course_id == course_id,
                Enrollment.active_clause(),
            )
            query = resolve_scope(user).apply(query, Enrollment.branch_id)
            result = await session.execute(_oldest_first(query))
            return list(result.scalars().all())

    async def student_history(self, student_id: int, user: AuthUser) -> list[Enrollment]:
        """List every enrollment row of a student, newest first.

        Rows are returned as stored. A re-enrolled pair shows only its latest
        cycle, earlier cancellation timestamps are not kept.

        Raises:
            StudentNotFoundError: If the student does not exist.
            NoBranchAssignedError: If a scoped user has no branch.
            BranchAccessForbiddenError: If the student belongs to another branch.
        """
        async with self._session_factory() as session:
            student = await EntityLookup(session).find_student(student_id)
            assert_branch_access(user, student.branch_id)

            query = _with_relations(select(Enrollment)).where(
                Enrollment.student_id == student_id
            )
            query = resolve_scope(user).apply(query, Enrollment.branch_id)
            result = await session.execute(_newest_first(query))
            return list(result.scalars().all())

    async def student_profile(self, student_id: int, user: AuthUser) -> StudentProfile:
        """Partition a student's history into active, completed and canceled."""
        profile = StudentProfile(student_id=student_id)
        buckets = {
            EnrollmentState.ACTIVE: profile.active,
            EnrollmentState.COMPLETED: profile.completed,
            EnrollmentState.CANCELED: profile.canceled,
        }
        for enrollment in await self.student_history(student_id, user):
            buckets[enrollment.state].append(enrollment)
        return profile

    async def _fetch(self, query: Select[Any]) -> list[Enrollment]:
        async with self._session_factory() as session:
            result = await session.execute(query)
            return list(result.scalars().all())
