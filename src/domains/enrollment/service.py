# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Enrollment service for managing student course enrollments.

This module provides the EnrollmentService class for:
- Enrolling and re-enrolling students
- Completing and canceling enrollments
- Direct enrollment edits and removal
- Branch-scoped enrollment reads

Every mutation runs as one unit of work through the TransactionCoordinator:
lookups, authorization, the state transition and the seat movement commit
together or not at all. After commit the enrollment is re-read with its
student and course for the response.
"""

from __future__ import annotations

import logging

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from src.domains.access import (
    assert_branch_access,
    assert_can_write,
    assert_superadmin,
    resolve_pair_branch,
)
from src.domains.auth import AuthUser
from src.domains.enrollment.ledger import CapacityLedger
from src.domains.enrollment.queries import EnrollmentQueries
from src.domains.enrollment.state import (
    EnrollmentEvent,
    SeatEffect,
    Transition,
    apply_transition,
    plan_transition,
)
from src.domains.errors import CourseEndedError, DuplicateEnrollmentError
from src.domains.lookup import EntityLookup
from src.infrastructure.database import TransactionCoordinator
from src.infrastructure.database.models import Course, Enrollment
from src.models.enrollment import (
    EnrollmentResponse,
    StudentProfileResponse,
    UpdateEnrollmentRequest,
)
from src.utils.datetime import has_passed, utc_now

logger = logging.getLogger(__name__)


class EnrollmentService:
    """Service for managing enrollments.

    Attributes:
        queries: Branch-scoped read paths.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        coordinator: TransactionCoordinator | None = None,
        ledger: CapacityLedger | None = None,
    ) -> None:
        """Initialize enrollment service.

        Args:
            session_factory: Factory producing sessions for units of work and reads.
            coordinator: Transaction coordinator, one is built when omitted.
            ledger: Capacity ledger, one is built when omitted.
        """
        self._coordinator = coordinator or TransactionCoordinator(session_factory)
        self._ledger = ledger or CapacityLedger()
        self.queries = EnrollmentQueries(session_factory)

    # =========================================================================
    # Mutations
    # =========================================================================

    async def enroll(
        self,
        student_id: int,
        course_id: int,
        user: AuthUser,
    ) -> EnrollmentResponse:
        """Enroll a student in a course.

        A canceled pair is re-enrolled on its existing row: the id is kept,
        ``canceled_at`` and ``completion_date`` are cleared and
        ``enrolled_date`` is reset.

        Args:
            student_id: Student identifier.
            course_id: Course identifier.
            user: Acting user.

        Returns:
            The Active enrollment.

        Raises:
            RoleForbiddenError: If the role may not mutate enrollments.
            StudentNotFoundError: If the student does not exist.
            CourseNotFoundError: If the course does not exist.
            UnassignedBranchError: If student or course has no branch.
            BranchAccessForbiddenError: If either is outside the user's branch.
            CrossBranchPairError: If they belong to different branches.
            CourseEndedError: If the course end date has passed.
            DuplicateEnrollmentError: If the pair is already Active.
            AlreadyCompletedError: If the pair is Completed.
            CapacityExceededError: If no seat is available.
        """
        assert_can_write(user)

        async def unit(session: AsyncSession) -> tuple[Enrollment, Transition]:
            lookup = EntityLookup(session)
            student = await lookup.find_student(student_id)
            course = await lookup.find_course(course_id, for_update=True)
            branch_id = resolve_pair_branch(student, course, user)

            now = utc_now()
            if has_passed(course.end_date, now):
                raise CourseEndedError()

            existing = await lookup.find_pair(student_id, course_id)
            if existing is not None:
                assert_branch_access(user, existing.branch_id)

            transition = plan_transition(
                existing.state if existing is not None else None,
                EnrollmentEvent.ENROLL,
            )
            await self._ledger.reserve(session, course)

            if existing is None:
                enrollment = Enrollment(
                    student_id=student_id,
                    course_id=course_id,
                    completed=False,
                    enrolled_date=now,
                )
                session.add(enrollment)
            else:
                enrollment = existing
                apply_transition(enrollment, transition, now)

            enrollment.branch_id = branch_id
            enrollment.created_by_id = user.id
            await session.flush()
            return enrollment, transition

        enrollment, transition = await self._coordinator.run(unit, name="enroll")

        logger.info(
            "%s: enrollment=%s, student=%s, course=%s, by=%s",
            "Enrollment created" if transition.source is None else "Enrollment reactivated",
            enrollment.id,
            student_id,
            course_id,
            user.id,
        )

        return await self.get_enrollment(enrollment.id, user)

    async def complete_enrollment(self, enrollment_id: int, user: AuthUser) -> EnrollmentResponse:
        """Mark an enrollment completed and free its seat.

        Completing an already completed enrollment returns it unchanged.

        Raises:
            RoleForbiddenError: If the role may not mutate enrollments.
            EnrollmentNotFoundError: If not found.
            BranchAccessForbiddenError: If outside the user's branch.
            CanceledEnrollmentError: If the enrollment is canceled.
        """
        return await self._transition(enrollment_id, EnrollmentEvent.COMPLETE, user)

    async def cancel_enrollment(self, enrollment_id: int, user: AuthUser) -> EnrollmentResponse:
        """Cancel an enrollment and free its seat.

        Canceling an already canceled enrollment returns it unchanged.

        Raises:
            RoleForbiddenError: If the role may not mutate enrollments.
            EnrollmentNotFoundError: If not found.
            BranchAccessForbiddenError: If outside the user's branch.
            CompletedEnrollmentError: If the enrollment is completed.
        """
        return await self._transition(enrollment_id, EnrollmentEvent.UNENROLL, user)

    async def update_enrollment(
        self,
        enrollment_id: int,
        request: UpdateEnrollmentRequest,
        user: AuthUser,
    ) -> EnrollmentResponse:
        """Edit enrollment fields directly.

        Seat effects are derived from the state before and after the edit:
        a row leaving Active, or moving to another course while Active,
        releases a seat on its old course; a row entering Active, or moving
        while Active, reserves one on its new course.

        Args:
            enrollment_id: Enrollment identifier.
            request: Fields to change; unset fields are left alone.
            user: Acting user, must be superadmin.

        Returns:
            The updated enrollment.

        Raises:
            RoleForbiddenError: If the user is not a superadmin.
            EnrollmentNotFoundError: If not found.
            StudentNotFoundError: If a new student does not exist.
            CourseNotFoundError: If a new course does not exist.
            UnassignedBranchError: If the new pair has no branch.
            CrossBranchPairError: If the new pair spans two branches.
            DuplicateEnrollmentError: If the new pair already has a row.
            CapacityExceededError: If the row enters Active on a full course.
        """
        assert_superadmin(user, "Only superadmin can update enrollments directly")
        changes = request.model_dump(exclude_unset=True)

        async def unit(session: AsyncSession) -> Enrollment:
            lookup = EntityLookup(session)
            enrollment = await lookup.find_enrollment(enrollment_id, for_update=True)
            assert_branch_access(user, enrollment.branch_id)

            was_active = enrollment.is_active
            old_course_id = enrollment.course_id

            new_student_id = changes.get("student_id") or enrollment.student_id
            new_course_id = changes.get("course_id") or enrollment.course_id
            if (new_student_id, new_course_id) != (enrollment.student_id, enrollment.course_id):
                student = await lookup.find_student(new_student_id)
                course = await lookup.find_course(new_course_id, for_update=True)
                enrollment.branch_id = resolve_pair_branch(student, course, user)

                clash = await lookup.find_pair(new_student_id, new_course_id)
                if clash is not None and clash.id != enrollment.id:
                    raise DuplicateEnrollmentError()

                enrollment.student_id = new_student_id
                enrollment.course_id = new_course_id

            self._apply_field_edits(enrollment, changes)

            is_active = enrollment.is_active
            moved = enrollment.course_id != old_course_id

            if was_active and (not is_active or moved):
                old_course = await lookup.find_course(old_course_id, for_update=True)
                await self._ledger.release(session, old_course)
            if is_active and (not was_active or moved):
                new_course = await lookup.find_course(enrollment.course_id, for_update=True)
                await self._ledger.reserve(session, new_course)

            await session.flush()
            return enrollment

        enrollment = await self._coordinator.run(unit, name="update_enrollment")

        logger.info(
            "Enrollment updated: enrollment=%s, student=%s, course=%s, fields=%s, by=%s",
            enrollment.id,
            enrollment.student_id,
            enrollment.course_id,
            sorted(changes),
            user.id,
        )

        return await self.get_enrollment(enrollment.id, user)

    async def delete_enrollment(self, enrollment_id: int, user: AuthUser) -> None:
        """Permanently remove an enrollment.

        A seat is released only when the row was Active.

        Raises:
            RoleForbiddenError: If the role may not mutate enrollments.
            EnrollmentNotFoundError: If not found.
            BranchAccessForbiddenError: If outside the user's branch.
        """
        assert_can_write(user)

        async def unit(session: AsyncSession) -> Enrollment:
            lookup = EntityLookup(session)
            enrollment = await lookup.find_enrollment(enrollment_id, for_update=True)
            assert_branch_access(user, enrollment.branch_id)

            transition = plan_transition(enrollment.state, EnrollmentEvent.DELETE)
            if transition.seats is SeatEffect.RELEASE:
                course = await lookup.find_course(enrollment.course_id, for_update=True)
                await self._ledger.release(session, course)

            await session.delete(enrollment)
            await session.flush()
            return enrollment

        enrollment = await self._coordinator.run(unit, name="delete_enrollment")

        logger.info(
            "Enrollment removed: enrollment=%s, student=%s, course=%s, by=%s",
            enrollment_id,
            enrollment.student_id,
            enrollment.course_id,
            user.id,
        )

    # =========================================================================
    # Reads
    # =========================================================================

    async def get_enrollment(self, enrollment_id: int, user: AuthUser) -> EnrollmentResponse:
        """Get one enrollment with its student and course."""
        enrollment = await self.queries.get_enrollment(enrollment_id, user)
        return self._to_response(enrollment)

    async def list_enrollments(self, user: AuthUser) -> list[EnrollmentResponse]:
        """List all enrollments in scope, newest first."""
        return [self._to_response(e) for e in await self.queries.list_enrollments(user)]

    async def list_active_enrollments(self, user: AuthUser) -> list[EnrollmentResponse]:
        """List Active enrollments in scope, newest first."""
        return [self._to_response(e) for e in await self.queries.list_active_enrollments(user)]

    async def course_roster(self, course_id: int, user: AuthUser) -> list[EnrollmentResponse]:
        """List Active enrollments of a course, oldest first."""
        return [self._to_response(e) for e in await self.queries.course_roster(course_id, user)]

    async def student_history(self, student_id: int, user: AuthUser) -> list[EnrollmentResponse]:
        """List every enrollment row of a student, newest first."""
        return [
            self._to_response(e) for e in await self.queries.student_history(student_id, user)
        ]

    async def student_profile(self, student_id: int, user: AuthUser) -> StudentProfileResponse:
        """Get a student's enrollments partitioned by state."""
        profile = await self.queries.student_profile(student_id, user)
        return StudentProfileResponse(
            student_id=profile.student_id,
            active=[self._to_response(e) for e in profile.active],
            completed=[self._to_response(e) for e in profile.completed],
            canceled=[self._to_response(e) for e in profile.canceled],
        )

    # =========================================================================
    # Helpers
    # =========================================================================

    async def _transition(
        self,
        enrollment_id: int,
        event: EnrollmentEvent,
        user: AuthUser,
    ) -> EnrollmentResponse:
        """Apply a complete or unenroll event to an existing enrollment."""
        assert_can_write(user)

        async def unit(session: AsyncSession) -> tuple[Enrollment, Transition]:
            lookup = EntityLookup(session)
            enrollment = await lookup.find_enrollment(enrollment_id, for_update=True)
            assert_branch_access(user, enrollment.branch_id)

            transition = plan_transition(enrollment.state, event)
            if transition.is_noop:
                return enrollment, transition

            course = await lookup.find_course(enrollment.course_id, for_update=True)
            await self._move_seat(session, course, transition.seats)
            apply_transition(enrollment, transition, utc_now())
            await session.flush()
            return enrollment, transition

        enrollment, transition = await self._coordinator.run(unit, name=event.value)

        if transition.is_noop:
            logger.debug(
                "Enrollment already %s: enrollment=%s",
                enrollment.state.value,
                enrollment.id,
            )
        else:
            logger.info(
                "Enrollment %s: enrollment=%s, student=%s, course=%s, by=%s",
                transition.target.value,
                enrollment.id,
                enrollment.student_id,
                enrollment.course_id,
                user.id,
            )

        return await self.get_enrollment(enrollment.id, user)

    async def _move_seat(self, session: AsyncSession, course: Course, seats: SeatEffect) -> None:
        if seats is SeatEffect.RESERVE:
            await self._ledger.reserve(session, course)
        elif seats is SeatEffect.RELEASE:
            await self._ledger.release(session, course)

    @staticmethod
    def _apply_field_edits(enrollment: Enrollment, changes: dict) -> None:
        """Apply direct date and flag edits, keeping completion fields consistent."""
        if changes.get("enrolled_date") is not None:
            enrollment.enrolled_date = changes["enrolled_date"]
        if changes.get("completed") is not None:
            enrollment.completed = changes["completed"]
        if "completion_date" in changes:
            enrollment.completion_date = changes["completion_date"]
        if "canceled_at" in changes:
            enrollment.canceled_at = changes["canceled_at"]

        if not enrollment.completed:
            enrollment.completion_date = None
        elif enrollment.completion_date is None:
            enrollment.completion_date = utc_now()

    @staticmethod
    def _to_response(enrollment: Enrollment) -> EnrollmentResponse:
        """Convert an enrollment row to a response model."""
        return EnrollmentResponse.model_validate(enrollment)


