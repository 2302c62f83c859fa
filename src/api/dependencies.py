# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""FastAPI dependency injection definitions.

This module provides dependency functions for FastAPI endpoints.
Dependencies are used to:
- Get the session factory and transaction coordinator
- Get authenticated users
- Get service instances

Example:
    @router.get("/enrollments/active")
    async def list_active(
        service: EnrollmentService = Depends(get_enrollment_service),
        current_user: AuthUser = Depends(require_auth),
    ):
        ...
"""

import logging

from fastapi import Depends, HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from src.api.middleware.auth import get_current_user
from src.core.config import get_settings
from src.domains.auth import AuthUser
from src.domains.course import CourseService
from src.domains.enrollment import EnrollmentService
from src.infrastructure.database import TransactionCoordinator, get_sessionmaker
from src.models.common import UserRole

logger = logging.getLogger(__name__)


# =========================================================================
# Store Dependencies
# =========================================================================


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """Get the process-wide session factory.

    Tests override this dependency to point the services at their own store.
    """
    return get_sessionmaker()


def get_coordinator(
    session_factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
) -> TransactionCoordinator:
    """Get a transaction coordinator configured from settings."""
    db_settings = get_settings().database
    return TransactionCoordinator(
        session_factory,
        max_retries=db_settings.max_retries,
        retry_backoff=db_settings.retry_backoff,
    )


def get_enrollment_service(
    session_factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
    coordinator: TransactionCoordinator = Depends(get_coordinator),
) -> EnrollmentService:
    """Get enrollment service instance."""
    return EnrollmentService(session_factory, coordinator=coordinator)


def get_course_service(
    session_factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
    coordinator: TransactionCoordinator = Depends(get_coordinator),
) -> CourseService:
    """Get course service instance."""
    return CourseService(session_factory, coordinator=coordinator)


# =========================================================================
# Authentication Dependencies
# =========================================================================


def require_auth(request: Request) -> AuthUser:
    """Require authenticated user.

    Args:
        request: HTTP request.

    Returns:
        AuthUser.

    Raises:
        HTTPException: If not authenticated.
    """
    user = get_current_user(request)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user


class RequireRole:
    """Dependency for requiring specific roles.

    Example:
        @router.post("/enroll")
        async def enroll(
            user: AuthUser = Depends(RequireRole(UserRole.SUPERADMIN, UserRole.ADMIN)),
        ):
            ...
    """

    def __init__(self, *roles: UserRole) -> None:
        """Initialize role requirement.

        Args:
            roles: Accepted roles (any of these).
        """
        self.roles = roles

    def __call__(self, request: Request) -> AuthUser:
        """Check roles and return user.

        Args:
            request: HTTP request.

        Returns:
            AuthUser.

        Raises:
            HTTPException: If the user has none of the roles.
        """
        user = require_auth(request)
        if not user.has_any_role(*self.roles):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Requires one of: {', '.join(role.value for role in self.roles)}",
            )
        return user


require_writer = RequireRole(UserRole.SUPERADMIN, UserRole.ADMIN)
