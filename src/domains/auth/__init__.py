# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Authentication domain.

Issuing credentials belongs to the identity service; this package only
turns a bearer token into the acting-user context.

Exports:
    AuthUser: Per-request acting user.
    JWTManager: JWT token creation and validation.
"""

from src.domains.auth.context import AuthUser
from src.domains.auth.jwt import (
    InvalidTokenError,
    JWTManager,
    TokenExpiredError,
    TokenPayload,
)

__all__ = [
    "AuthUser",
    "JWTManager",
    "TokenPayload",
    "TokenExpiredError",
    "InvalidTokenError",
]
