# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Enrollment domain package.

This package provides the enrollment lifecycle including:
- The Active/Completed/Canceled state machine
- Seat accounting through the capacity ledger
- Branch-scoped roster, history and profile reads

Example:
    from src.domains.enrollment import EnrollmentService

    service = EnrollmentService(get_sessionmaker())
    enrollment = await service.enroll(student_id=1, course_id=2, user=current_user)
"""

from src.domains.enrollment.ledger import CapacityLedger
from src.domains.enrollment.queries import EnrollmentQueries, StudentProfile
from src.domains.enrollment.service import EnrollmentService
from src.domains.enrollment.state import (
    EnrollmentEvent,
    SeatEffect,
    Transition,
    apply_transition,
    plan_transition,
)

__all__ = [
    "CapacityLedger",
    "EnrollmentEvent",
    "EnrollmentQueries",
    "EnrollmentService",
    "SeatEffect",
    "StudentProfile",
    "Transition",
    "apply_transition",
    "plan_transition",
]
