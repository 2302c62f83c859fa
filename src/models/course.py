# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Course API schemas."""

from datetime import datetime

from pydantic import BaseModel, Field, field_validator

from src.models.common import CourseStatus
from src.utils.datetime import ensure_utc


class CourseCreateRequest(BaseModel):
    """Request to create a course.

    ``branch_id`` is required for superadmins and must match the acting
    user's branch otherwise.
    """

    title: str = Field(min_length=1, max_length=255)
    description: str = ""
    start_date: datetime
    end_date: datetime
    capacity: int = Field(ge=1)
    instructor_id: int | None = Field(default=None, ge=1)
    branch_id: int | None = Field(default=None, ge=1)


class CourseUpdateRequest(BaseModel):
    """Partial course update.

    Only fields present in the request are applied; ``instructor_id: null``
    unassigns the instructor.
    """

    title: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = None
    start_date: datetime | None = None
    end_date: datetime | None = None
    capacity: int | None = Field(default=None, ge=1)
    instructor_id: int | None = Field(default=None, ge=1)
    branch_id: int | None = Field(default=None, ge=1)


class CourseResponse(BaseModel):
    """Course with its seat counters and schedule status."""

    id: int
    title: str
    description: str
    start_date: datetime
    end_date: datetime
    capacity: int
    seats_available: int
    instructor_id: int | None = None
    branch_id: int | None = None
    status: CourseStatus

    @field_validator("start_date", "end_date")
    @classmethod
    def _as_utc(cls, value: datetime) -> datetime:
        return ensure_utc(value)
