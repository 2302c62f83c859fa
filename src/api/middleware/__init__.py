# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""API middleware components.

Exports:
    AuthMiddleware: JWT authentication middleware.
    get_current_user: Acting user of the current request, if any.
"""

from src.api.middleware.auth import AuthMiddleware, get_current_user

__all__ = [
    "AuthMiddleware",
    "get_current_user",
]
