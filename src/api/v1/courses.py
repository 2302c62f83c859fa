# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Course API endpoints.

This module provides endpoints for the course lifecycle:
- POST / - Create a course
- GET /{course_id} - Get course details
- PATCH /{course_id} - Update a course
- DELETE /{course_id} - Delete a course
- GET /{course_id}/roster - List Active enrollments of a course
"""

import logging

from fastapi import APIRouter, Depends, Path, status

from src.api.dependencies import (
    get_course_service,
    get_enrollment_service,
    require_auth,
    require_writer,
)
from src.domains.auth import AuthUser
from src.domains.course import CourseService
from src.domains.enrollment import EnrollmentService
from src.models.course import CourseCreateRequest, CourseResponse, CourseUpdateRequest
from src.models.enrollment import EnrollmentListResponse

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post(
    "",
    response_model=CourseResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create course",
)
async def create_course(
    data: CourseCreateRequest,
    current_user: AuthUser = Depends(require_writer),
    service: CourseService = Depends(get_course_service),
) -> CourseResponse:
    """Create a course with all seats available."""
    return await service.create_course(data, current_user)


@router.get(
    "/{course_id}",
    response_model=CourseResponse,
    summary="Get course",
)
async def get_course(
    course_id: int = Path(ge=1),
    current_user: AuthUser = Depends(require_auth),
    service: CourseService = Depends(get_course_service),
) -> CourseResponse:
    """Get course details."""
    return await service.get_course(course_id, current_user)


@router.patch(
    "/{course_id}",
    response_model=CourseResponse,
    summary="Update course",
    description="Update course fields. Capacity changes recompute available seats.",
)
async def update_course(
    data: CourseUpdateRequest,
    course_id: int = Path(ge=1),
    current_user: AuthUser = Depends(require_writer),
    service: CourseService = Depends(get_course_service),
) -> CourseResponse:
    """Update a course."""
    return await service.update_course(course_id, data, current_user)


@router.delete(
    "/{course_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete course",
)
async def delete_course(
    course_id: int = Path(ge=1),
    current_user: AuthUser = Depends(require_writer),
    service: CourseService = Depends(get_course_service),
) -> None:
    """Delete a course with no Active enrollments."""
    await service.delete_course(course_id, current_user)


@router.get(
    "/{course_id}/roster",
    response_model=EnrollmentListResponse,
    summary="Course roster",
)
async def course_roster(
    course_id: int = Path(ge=1),
    current_user: AuthUser = Depends(require_auth),
    service: EnrollmentService = Depends(get_enrollment_service),
) -> EnrollmentListResponse:
    """List Active enrollments of a course, oldest first."""
    items = await service.course_roster(course_id, current_user)
    return EnrollmentListResponse(items=items, total=len(items))
