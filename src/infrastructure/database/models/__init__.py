# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""ORM models.

Rows are linked by explicit foreign keys. Related rows are resolved by
lookups inside the unit of work, not by navigating an object graph.
"""

from src.infrastructure.database.models.base import Base, TimestampMixin
from src.infrastructure.database.models.branch import Branch
from src.infrastructure.database.models.course import Course
from src.infrastructure.database.models.enrollment import (
    ENROLLMENT_PAIR_CONSTRAINT,
    Enrollment,
)
from src.infrastructure.database.models.instructor import Instructor
from src.infrastructure.database.models.student import Student
from src.infrastructure.database.models.user import User

__all__ = [
    "Base",
    "TimestampMixin",
    "Branch",
    "User",
    "Instructor",
    "Student",
    "Course",
    "Enrollment",
    "ENROLLMENT_PAIR_CONSTRAINT",
]
