# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Shared enums used by ORM models, services and DTOs."""

from datetime import datetime
from enum import Enum


class UserRole(str, Enum):
    """Role hierarchy governing branch-scoped access.

    superadmin is unscoped; admin reads and writes within one branch;
    user only reads within one branch.
    """

    SUPERADMIN = "superadmin"
    ADMIN = "admin"
    USER = "user"


class EnrollmentState(str, Enum):
    """Logical enrollment state derived from ``completed`` and ``canceled_at``."""

    ACTIVE = "active"
    COMPLETED = "completed"
    CANCELED = "canceled"


def derive_state(completed: bool, canceled_at: datetime | None) -> EnrollmentState:
    """Derive the logical state from the stored fields.

    ``completed`` wins over ``canceled_at``.
    """
    if completed:
        return EnrollmentState.COMPLETED
    if canceled_at is not None:
        return EnrollmentState.CANCELED
    return EnrollmentState.ACTIVE


class CourseStatus(str, Enum):
    """Course schedule status relative to the current time."""

    UPCOMING = "upcoming"
    ONGOING = "ongoing"
    COMPLETED = "completed"
