# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Enrollment API schemas.

Request models validate ids and dates at the boundary. Response models are
built from ORM rows with ``from_attributes`` and always carry UTC-aware
timestamps.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from src.models.common import EnrollmentState
from src.utils.datetime import ensure_utc


class EnrollStudentRequest(BaseModel):
    """Request to enroll a student in a course."""

    student_id: int = Field(ge=1, description="Student to enroll")
    course_id: int = Field(ge=1, description="Course to enroll in")


class CompleteEnrollmentRequest(BaseModel):
    """Request to mark an enrollment completed."""

    enrollment_id: int = Field(ge=1)


class UnenrollRequest(BaseModel):
    """Request to cancel an enrollment."""

    enrollment_id: int = Field(ge=1)


class UpdateEnrollmentRequest(BaseModel):
    """Direct field edit of an enrollment.

    Only fields present in the request are applied. ``completion_date`` and
    ``canceled_at`` accept null to clear them.
    """

    student_id: int | None = Field(default=None, ge=1)
    course_id: int | None = Field(default=None, ge=1)
    enrolled_date: datetime | None = None
    completed: bool | None = None
    completion_date: datetime | None = None
    canceled_at: datetime | None = None


class StudentSummary(BaseModel):
    """Student fields embedded in enrollment responses."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    email: str
    branch_id: int | None = None


class CourseSummary(BaseModel):
    """Course fields embedded in enrollment responses."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    start_date: datetime
    end_date: datetime
    capacity: int
    seats_available: int
    instructor_id: int | None = None
    branch_id: int | None = None

    @field_validator("start_date", "end_date")
    @classmethod
    def _as_utc(cls, value: datetime) -> datetime:
        return ensure_utc(value)


class EnrollmentResponse(BaseModel):
    """Enrollment with its derived state and related records."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    student_id: int
    course_id: int
    branch_id: int | None
    enrolled_date: datetime
    completed: bool
    completion_date: datetime | None = None
    canceled_at: datetime | None = None
    state: EnrollmentState
    student: StudentSummary | None = None
    course: CourseSummary | None = None

    @field_validator("enrolled_date", "completion_date", "canceled_at")
    @classmethod
    def _as_utc(cls, value: datetime | None) -> datetime | None:
        return ensure_utc(value)


class EnrollmentListResponse(BaseModel):
    """List of enrollments."""

    items: list[EnrollmentResponse]
    total: int


class StudentProfileResponse(BaseModel):
    """A student's enrollments partitioned by state."""

    student_id: int
    active: list[EnrollmentResponse]
    completed: list[EnrollmentResponse]
    canceled: list[EnrollmentResponse]
