# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Enrollment model: one row per (student, course) pair for its lifetime."""

from datetime import datetime

from sqlalchemy import (
    Boolean,
    ColumnElement,
    DateTime,
    ForeignKey,
    Integer,
    UniqueConstraint,
    and_,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.infrastructure.database.models.base import Base, TimestampMixin
from src.infrastructure.database.models.course import Course
from src.infrastructure.database.models.student import Student
from src.models.common import EnrollmentState, derive_state
from src.utils.datetime import utc_now

ENROLLMENT_PAIR_CONSTRAINT = "uq_enrollments_student_course"


class Enrollment(Base, TimestampMixin):
    """Student-course relationship.

    Cancellation and re-enrollment reuse the same row, so the pair is unique
    for the lifetime of the relationship.
    """

    __tablename__ = "enrollments"
    __table_args__ = (
        UniqueConstraint("student_id", "course_id", name=ENROLLMENT_PAIR_CONSTRAINT),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    student_id: Mapped[int] = mapped_column(
        ForeignKey("students.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    course_id: Mapped[int] = mapped_column(
        ForeignKey("courses.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    branch_id: Mapped[int | None] = mapped_column(
        ForeignKey("branches.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    enrolled_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utc_now,
    )
    completed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    completion_date: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )
    canceled_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )
    created_by_id: Mapped[int | None] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )

    # Read paths only; writes go through explicit ids.
    student: Mapped[Student] = relationship(Student, viewonly=True)
    course: Mapped[Course] = relationship(Course, viewonly=True)

    @property
    def state(self) -> EnrollmentState:
        return derive_state(self.completed, self.canceled_at)

    @property
    def is_active(self) -> bool:
        return self.state is EnrollmentState.ACTIVE

    @classmethod
    def active_clause(cls) -> ColumnElement[bool]:
        """SQL predicate matching Active rows."""
        return and_(cls.canceled_at.is_(None), cls.completed.is_(False))

    def __repr__(self) -> str:
        return (
            f"<Enrollment(id={self.id}, student_id={self.student_id}, "
            f"course_id={self.course_id}, state={self.state.value})>"
        )
