# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Acting-user context passed explicitly into every service call."""

from dataclasses import dataclass

from src.models.common import UserRole


@dataclass(frozen=True)
class AuthUser:
    """Authenticated staff member performing an operation.

    Attributes:
        id: User id.
        role: Role in the hierarchy.
        branch_id: Branch the user is confined to; None only for superadmin.
        email: User email, if known.
        full_name: Display name, if known.
    """

    id: int
    role: UserRole
    branch_id: int | None = None
    email: str | None = None
    full_name: str | None = None

    @property
    def is_superadmin(self) -> bool:
        return self.role is UserRole.SUPERADMIN

    @property
    def can_write(self) -> bool:
        """Check if the role may mutate enrollments and courses."""
        return self.role in (UserRole.SUPERADMIN, UserRole.ADMIN)

    def has_any_role(self, *roles: UserRole) -> bool:
        return self.role in roles
