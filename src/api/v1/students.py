# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Student enrollment read endpoints.

- GET /{student_id}/history - Every enrollment row of a student
- GET /{student_id}/profile - Enrollments partitioned by state
"""

from fastapi import APIRouter, Depends, Path

from src.api.dependencies import get_enrollment_service, require_auth
from src.domains.auth import AuthUser
from src.domains.enrollment import EnrollmentService
from src.models.enrollment import EnrollmentListResponse, StudentProfileResponse

router = APIRouter()


@router.get(
    "/{student_id}/history",
    response_model=EnrollmentListResponse,
    summary="Student enrollment history",
)
async def student_history(
    student_id: int = Path(ge=1),
    current_user: AuthUser = Depends(require_auth),
    service: EnrollmentService = Depends(get_enrollment_service),
) -> EnrollmentListResponse:
    """List every enrollment row of a student, newest first."""
    items = await service.student_history(student_id, current_user)
    return EnrollmentListResponse(items=items, total=len(items))


@router.get(
    "/{student_id}/profile",
    response_model=StudentProfileResponse,
    summary="Student enrollment profile",
)
async def student_profile(
    student_id: int = Path(ge=1),
    current_user: AuthUser = Depends(require_auth),
    service: EnrollmentService = Depends(get_enrollment_service),
) -> StudentProfileResponse:
    """Get a student's enrollments partitioned by state."""
    return await service.student_profile(student_id, current_user)
