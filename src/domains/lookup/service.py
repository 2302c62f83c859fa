# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Record lookups shared by the enrollment and course services.

Each finder resolves one row by id inside the caller's session and raises
the matching NotFound error when it is missing. Mutating units pass
``for_update=True`` so the row stays locked until commit.
"""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from src.domains.errors import (
    BranchNotFoundError,
    CourseNotFoundError,
    EnrollmentNotFoundError,
    InstructorNotFoundError,
    StudentNotFoundError,
)
from src.infrastructure.database.models import (
    Branch,
    Course,
    Enrollment,
    Instructor,
    Student,
)


class EntityLookup:
    """Finders over a single session.

    Attributes:
        db: Async database session.
    """

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def find_branch(self, branch_id: int) -> Branch:
        """Get branch by ID.

        Raises:
            BranchNotFoundError: If not found.
        """
        branch = await self.db.get(Branch, branch_id)
        if branch is None:
            raise BranchNotFoundError(f"Branch with id {branch_id} not found")
        return branch

    async def find_student(self, student_id: int) -> Student:
        """Get student by ID.

        Raises:
            StudentNotFoundError: If not found.
        """
        student = await self.db.get(Student, student_id)
        if student is None:
            raise StudentNotFoundError(f"Student with id {student_id} not found")
        return student

    async def find_instructor(self, instructor_id: int) -> Instructor:
        """Get instructor by ID.

        Raises:
            InstructorNotFoundError: If not found.
        """
        instructor = await self.db.get(Instructor, instructor_id)
        if instructor is None:
            raise InstructorNotFoundError(f"Instructor with id {instructor_id} not found")
        return instructor

    async def find_course(self, course_id: int, *, for_update: bool = False) -> Course:
        """Get course by ID.

        Args:
            course_id: Course identifier.
            for_update: Lock the row for the rest of the transaction.

        Raises:
            CourseNotFoundError: If not found.
        """
        query = select(Course).where(Course.id == course_id)
        if for_update:
            query = query.with_for_update()
        result = await self.db.execute(query)
        course = result.scalar_one_or_none()

        if course is None:
            raise CourseNotFoundError(f"Course with id {course_id} not found")

        return course

    async def find_enrollment(
        self,
        enrollment_id: int,
        *,
        for_update: bool = False,
        with_relations: bool = False,
    ) -> Enrollment:
        """Get enrollment by ID.

        Args:
            enrollment_id: Enrollment identifier.
            for_update: Lock the row for the rest of the transaction.
            with_relations: Eager-load student and course.

        Raises:
            EnrollmentNotFoundError: If not found.
        """
        query = select(Enrollment).where(Enrollment.id == enrollment_id)
        if with_relations:
            query = query.options(
                selectinload(Enrollment.student),
                selectinload(Enrollment.course),
            )
        if for_update:
            query = query.with_for_update()
        result = await self.db.execute(query)
        enrollment = result.scalar_one_or_none()

        if enrollment is None:
            raise EnrollmentNotFoundError(f"Enrollment with id {enrollment_id} not found")

        return enrollment

    async def find_pair(self, student_id: int, course_id: int) -> Enrollment | None:
        """Get the enrollment row for a (student, course) pair, if any."""
        query = select(Enrollment).where(
            Enrollment.student_id == student_id,
            Enrollment.course_id == course_id,
        )
        result = await self.db.execute(query)
        return result.scalar_one_or_none()
