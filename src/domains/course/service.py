# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Course service for the course lifecycle.

This module provides the CourseService class for:
- Course creation with branch and instructor checks
- Course updates, including capacity changes reconciled by the ledger
- Course deletion, blocked while Active enrollments exist
- Course reads with schedule status
"""

from __future__ import annotations

import logging
from datetime import datetime

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from src.domains.access import (
    assert_branch_access,
    assert_can_write,
    assert_superadmin,
    resolve_branch_for_write,
)
from src.domains.auth import AuthUser
from src.domains.enrollment.ledger import CapacityLedger
from src.domains.errors import (
    BadRequestError,
    CourseBranchChangeError,
    CourseEndedInstructorChangeError,
    CourseHasActiveEnrollmentsError,
    InstructorBranchMismatchError,
    InvalidCapacityError,
    InvalidDateRangeError,
)
from src.domains.lookup import EntityLookup
from src.infrastructure.database import TransactionCoordinator
from src.infrastructure.database.models import Course, Enrollment, Instructor
from src.models.common import CourseStatus
from src.models.course import CourseCreateRequest, CourseResponse, CourseUpdateRequest
from src.utils.datetime import ensure_utc, has_passed, utc_now

logger = logging.getLogger(__name__)


def course_status(course: Course, now: datetime | None = None) -> CourseStatus:
    """Get the schedule status of a course relative to ``now``."""
    reference = ensure_utc(now) if now is not None else utc_now()
    if reference < ensure_utc(course.start_date):
        return CourseStatus.UPCOMING
    if reference > ensure_utc(course.end_date):
        return CourseStatus.COMPLETED
    return CourseStatus.ONGOING


def _check_date_range(start_date: datetime, end_date: datetime) -> None:
    if ensure_utc(start_date) >= ensure_utc(end_date):
        raise InvalidDateRangeError()


def _check_instructor_branch(instructor: Instructor, branch_id: int | None) -> None:
    if branch_id and instructor.branch_id and instructor.branch_id != branch_id:
        raise InstructorBranchMismatchError()


class CourseService:
    """Service for managing courses.

    Writes run through the TransactionCoordinator so that capacity edits
    and the seat recount commit together.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        coordinator: TransactionCoordinator | None = None,
        ledger: CapacityLedger | None = None,
    ) -> None:
        """Initialize course service.

        Args:
            session_factory: Factory producing sessions.
            coordinator: Transaction coordinator, one is built when omitted.
            ledger: Capacity ledger, one is built when omitted.
        """
        self._session_factory = session_factory
        self._coordinator = coordinator or TransactionCoordinator(session_factory)
        self._ledger = ledger or CapacityLedger()

    async def create_course(self, request: CourseCreateRequest, user: AuthUser) -> CourseResponse:
        """Create a course with all seats available.

        Args:
            request: Course data.
            user: Acting user.

        Returns:
            The created course.

        Raises:
            RoleForbiddenError: If the role may not write.
            InvalidDateRangeError: If start_date is not before end_date.
            InvalidCapacityError: If capacity is not positive.
            BadRequestError: If a superadmin names no branch.
            BranchNotFoundError: If the named branch does not exist.
            BranchAccessForbiddenError: If a scoped user names another branch.
            InstructorNotFoundError: If the instructor does not exist.
            InstructorBranchMismatchError: If the instructor is in another branch.
        """
        assert_can_write(user)
        _check_date_range(request.start_date, request.end_date)
        if request.capacity < 1:
            raise InvalidCapacityError()

        async def unit(session: AsyncSession) -> Course:
            lookup = EntityLookup(session)
            branch_id = resolve_branch_for_write(request.branch_id, user)
            if branch_id is None:
                raise BadRequestError("branch_id is required")
            await lookup.find_branch(branch_id)

            instructor_id = None
            if request.instructor_id is not None:
                instructor = await lookup.find_instructor(request.instructor_id)
                _check_instructor_branch(instructor, branch_id)
                instructor_id = instructor.id

            course = Course(
                title=request.title,
                description=request.description,
                start_date=request.start_date,
                end_date=request.end_date,
                capacity=request.capacity,
                seats_available=request.capacity,
                instructor_id=instructor_id,
                branch_id=branch_id,
                created_by_id=user.id,
            )
            session.add(course)
            await session.flush()
            return course

        course = await self._coordinator.run(unit, name="create_course")

        logger.info(
            "Course created: course=%s, branch=%s, instructor=%s, by=%s",
            course.id,
            course.branch_id,
            course.instructor_id,
            user.id,
        )

        return self._to_response(course)

    async def update_course(
        self,
        course_id: int,
        request: CourseUpdateRequest,
        user: AuthUser,
    ) -> CourseResponse:
        """Update course fields.

        A capacity change recomputes ``seats_available`` from the Active
        enrollment count; lowering it below that count clamps the seats to
        zero and is only logged.

        Args:
            course_id: Course identifier.
            request: Fields to change; unset fields are left alone.
            user: Acting user.

        Returns:
            The updated course.

        Raises:
            RoleForbiddenError: If the role may not write, or a non-superadmin
                changes the branch.
            CourseBranchChangeError: If the course moves branch while any
                enrollment row references it.
            CourseNotFoundError: If not found.
            BranchAccessForbiddenError: If outside the user's branch.
            InvalidDateRangeError: If the resulting dates are out of order.
            CourseEndedInstructorChangeError: If the instructor of an ended
                course is changed.
            InstructorNotFoundError: If the new instructor does not exist.
            InstructorBranchMismatchError: If the new instructor is in another branch.
        """
        assert_can_write(user)
        changes = request.model_dump(exclude_unset=True)

        async def unit(session: AsyncSession) -> Course:
            lookup = EntityLookup(session)
            course = await lookup.find_course(course_id, for_update=True)
            assert_branch_access(user, course.branch_id)

            if changes.get("capacity") is not None:
                await self._ledger.reconcile(session, course, changes["capacity"])

            branch_moved = False
            if "branch_id" in changes:
                assert_superadmin(user, "Only superadmin can change branch")
                new_branch_id = changes["branch_id"]
                if new_branch_id is None:
                    raise BadRequestError("branch_id is required")
                if new_branch_id != course.branch_id:
                    await lookup.find_branch(new_branch_id)
                    # Enrollment rows carry the course branch
                    if await self._enrollment_count(session, course.id) > 0:
                        raise CourseBranchChangeError()
                    course.branch_id = new_branch_id
                    branch_moved = True

            if changes.get("start_date") is not None:
                course.start_date = changes["start_date"]
            if changes.get("end_date") is not None:
                course.end_date = changes["end_date"]
            _check_date_range(course.start_date, course.end_date)

            if changes.get("title") is not None:
                course.title = changes["title"]
            if changes.get("description") is not None:
                course.description = changes["description"]

            if "instructor_id" in changes:
                await self._change_instructor(lookup, course, changes["instructor_id"])
            elif branch_moved and course.instructor_id is not None:
                instructor = await lookup.find_instructor(course.instructor_id)
                _check_instructor_branch(instructor, course.branch_id)

            await session.flush()
            return course

        course = await self._coordinator.run(unit, name="update_course")

        logger.info(
            "Course updated: course=%s, fields=%s, by=%s",
            course.id,
            sorted(changes),
            user.id,
        )

        return self._to_response(course)

    async def delete_course(self, course_id: int, user: AuthUser) -> None:
        """Delete a course with no Active enrollments.

        Completed and canceled enrollment rows are removed with the course.

        Raises:
            RoleForbiddenError: If the role may not write.
            CourseNotFoundError: If not found.
            BranchAccessForbiddenError: If outside the user's branch.
            CourseHasActiveEnrollmentsError: If Active enrollments remain.
        """
        assert_can_write(user)

        async def unit(session: AsyncSession) -> None:
            course = await EntityLookup(session).find_course(course_id, for_update=True)
            assert_branch_access(user, course.branch_id)

            if await self._ledger.active_count(session, course.id) > 0:
                raise CourseHasActiveEnrollmentsError()

            await session.delete(course)
            await session.flush()

        await self._coordinator.run(unit, name="delete_course")

        logger.info("Course deleted: course=%s, by=%s", course_id, user.id)

    async def get_course(self, course_id: int, user: AuthUser) -> CourseResponse:
        """Get a course in the user's scope.

        Raises:
            CourseNotFoundError: If not found.
            BranchAccessForbiddenError: If outside the user's branch.
        """
        async with self._session_factory() as session:
            course = await EntityLookup(session).find_course(course_id)
        assert_branch_access(user, course.branch_id)
        return self._to_response(course)

    async def _change_instructor(
        self,
        lookup: EntityLookup,
        course: Course,
        instructor_id: int | None,
    ) -> None:
        if instructor_id != course.instructor_id and has_passed(course.end_date):
            raise CourseEndedInstructorChangeError()

        if instructor_id is None:
            course.instructor_id = None
            return

        instructor = await lookup.find_instructor(instructor_id)
        _check_instructor_branch(instructor, course.branch_id)
        course.instructor_id = instructor.id

    @staticmethod
    async def _enrollment_count(session: AsyncSession, course_id: int) -> int:
        """Count enrollment rows of a course in any state."""
        result = await session.execute(
            select(func.count(Enrollment.id)).where(Enrollment.course_id == course_id)
        )
        return result.scalar_one()

    @staticmethod
    def _to_response(course: Course) -> CourseResponse:
        """Convert a course row to a response model."""
        return CourseResponse(
            id=course.id,
            title=course.title,
            description=course.description,
            start_date=course.start_date,
            end_date=course.end_date,
            capacity=course.capacity,
            seats_available=course.seats_available,
            instructor_id=course.instructor_id,
            branch_id=course.branch_id,
            status=course_status(course),
        )
