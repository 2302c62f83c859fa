# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Enrollment API endpoints.

This module provides endpoints for the enrollment lifecycle:
- POST /enroll - Enroll a student in a course
- POST /complete - Mark an enrollment completed
- POST /unenroll - Cancel an enrollment
- GET /enroll - List enrollments in scope
- GET /enroll/{enrollment_id} - Get enrollment details
- GET /enrollments/active - List Active enrollments in scope
- PATCH /enroll/{enrollment_id} - Edit enrollment fields (superadmin)
- DELETE /enroll/{enrollment_id} - Remove an enrollment

Mutations require admin or superadmin; reads are open to every role within
its branch. Service errors are translated by the application's exception
handlers.
"""

import logging

from fastapi import APIRouter, Depends, Path, status

from src.api.dependencies import get_enrollment_service, require_auth, require_writer
from src.domains.auth import AuthUser
from src.domains.enrollment import EnrollmentService
from src.models.enrollment import (
    CompleteEnrollmentRequest,
    EnrollmentListResponse,
    EnrollmentResponse,
    EnrollStudentRequest,
    UnenrollRequest,
    UpdateEnrollmentRequest,
)

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post(
    "/enroll",
    response_model=EnrollmentResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Enroll student",
    description="Enroll a student in a course, or re-enroll a canceled pair.",
)
async def enroll_student(
    data: EnrollStudentRequest,
    current_user: AuthUser = Depends(require_writer),
    service: EnrollmentService = Depends(get_enrollment_service),
) -> EnrollmentResponse:
    """Enroll a student in a course.

    Args:
        data: Enrollment request.
        current_user: Authenticated admin or superadmin.
        service: Enrollment service.

    Returns:
        The Active enrollment.
    """
    logger.info(
        "Enrolling student: student=%s, course=%s, by=%s",
        data.student_id,
        data.course_id,
        current_user.id,
    )
    return await service.enroll(data.student_id, data.course_id, current_user)


@router.post(
    "/complete",
    response_model=EnrollmentResponse,
    summary="Complete enrollment",
)
async def complete_enrollment(
    data: CompleteEnrollmentRequest,
    current_user: AuthUser = Depends(require_writer),
    service: EnrollmentService = Depends(get_enrollment_service),
) -> EnrollmentResponse:
    """Mark an enrollment completed."""
    return await service.complete_enrollment(data.enrollment_id, current_user)


@router.post(
    "/unenroll",
    response_model=EnrollmentResponse,
    summary="Cancel enrollment",
)
async def unenroll_student(
    data: UnenrollRequest,
    current_user: AuthUser = Depends(require_writer),
    service: EnrollmentService = Depends(get_enrollment_service),
) -> EnrollmentResponse:
    """Cancel an enrollment."""
    return await service.cancel_enrollment(data.enrollment_id, current_user)


@router.get(
    "/enroll",
    response_model=EnrollmentListResponse,
    summary="List enrollments",
)
async def list_enrollments(
    current_user: AuthUser = Depends(require_auth),
    service: EnrollmentService = Depends(get_enrollment_service),
) -> EnrollmentListResponse:
    """List enrollments in the user's branch, newest first."""
    items = await service.list_enrollments(current_user)
    return EnrollmentListResponse(items=items, total=len(items))


@router.get(
    "/enrollments/active",
    response_model=EnrollmentListResponse,
    summary="List active enrollments",
)
async def list_active_enrollments(
    current_user: AuthUser = Depends(require_auth),
    service: EnrollmentService = Depends(get_enrollment_service),
) -> EnrollmentListResponse:
    """List Active enrollments in the user's branch, newest first."""
    items = await service.list_active_enrollments(current_user)
    return EnrollmentListResponse(items=items, total=len(items))


@router.get(
    "/enroll/{enrollment_id}",
    response_model=EnrollmentResponse,
    summary="Get enrollment",
)
async def get_enrollment(
    enrollment_id: int = Path(ge=1),
    current_user: AuthUser = Depends(require_auth),
    service: EnrollmentService = Depends(get_enrollment_service),
) -> EnrollmentResponse:
    """Get enrollment details."""
    return await service.get_enrollment(enrollment_id, current_user)


@router.patch(
    "/enroll/{enrollment_id}",
    response_model=EnrollmentResponse,
    summary="Update enrollment",
    description="Edit enrollment fields directly. Superadmin only.",
)
async def update_enrollment(
    data: UpdateEnrollmentRequest,
    enrollment_id: int = Path(ge=1),
    current_user: AuthUser = Depends(require_writer),
    service: EnrollmentService = Depends(get_enrollment_service),
) -> EnrollmentResponse:
    """Edit enrollment fields."""
    return await service.update_enrollment(enrollment_id, data, current_user)


@router.delete(
    "/enroll/{enrollment_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Remove enrollment",
)
async def remove_enrollment(
    enrollment_id: int = Path(ge=1),
    current_user: AuthUser = Depends(require_writer),
    service: EnrollmentService = Depends(get_enrollment_service),
) -> None:
    """Permanently remove an enrollment."""
    await service.delete_enrollment(enrollment_id, current_user)
