# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""JWT token management utilities.

This module provides JWT token creation and validation using python-jose.
Tokens carry the acting user's id, role and branch so that every request
can build an AuthUser without touching the store.

Example:
    >>> from src.core.config import get_settings
    >>> jwt_manager = JWTManager(get_settings().jwt)
    >>> token = jwt_manager.create_access_token(user_id=1, role=UserRole.ADMIN, branch_id=3)
    >>> user = jwt_manager.decode_token(token).to_auth_user()
"""

import logging
import secrets
from datetime import datetime, timedelta, timezone

from jose import ExpiredSignatureError, jwt
from pydantic import BaseModel, ValidationError

from src.core.config.settings import JWTSettings
from src.domains.auth.context import AuthUser
from src.models.common import UserRole

logger = logging.getLogger(__name__)


class TokenPayload(BaseModel):
    """JWT token payload structure.

    Attributes:
        sub: Subject (user ID).
        role: User role.
        branch_id: Branch of the user, None for superadmin.
        email: User email.
        full_name: User display name.
        exp: Expiration timestamp.
        iat: Issued at timestamp.
        jti: JWT ID for token tracking.
    """

    sub: str
    role: UserRole
    branch_id: int | None = None
    email: str | None = None
    full_name: str | None = None
    exp: int
    iat: int
    jti: str

    def to_auth_user(self) -> AuthUser:
        """Build the per-request acting user from the claims."""
        return AuthUser(
            id=int(self.sub),
            role=self.role,
            branch_id=self.branch_id,
            email=self.email,
            full_name=self.full_name,
        )


class JWTError(Exception):
    """Base exception for JWT operations."""

    pass


class TokenExpiredError(JWTError):
    """Raised when a token has expired."""

    pass


class InvalidTokenError(JWTError):
    """Raised when a token is invalid."""

    pass


class JWTManager:
    """JWT token creation and validation manager.

    Attributes:
        _settings: JWT configuration settings.
    """

    def __init__(self, settings: JWTSettings) -> None:
        """Initialize the JWT manager.

        Args:
            settings: JWT configuration settings.
        """
        self._settings = settings

    def create_access_token(
        self,
        user_id: int,
        role: UserRole,
        branch_id: int | None = None,
        email: str | None = None,
        full_name: str | None = None,
        expires_in: timedelta | None = None,
    ) -> str:
        """Create an access token.

        Args:
            user_id: User identifier.
            role: User role.
            branch_id: Branch of the user.
            email: User email.
            full_name: User display name.
            expires_in: Lifetime override.

        Returns:
            JWT access token string.
        """
        now = datetime.now(timezone.utc)
        lifetime = expires_in or timedelta(minutes=self._settings.access_token_expire_minutes)
        exp = now + lifetime

        payload = {
            "sub": str(user_id),
            "role": UserRole(role).value,
            "branch_id": branch_id,
            "email": email,
            "full_name": full_name,
            "exp": int(exp.timestamp()),
            "iat": int(now.timestamp()),
            "jti": secrets.token_urlsafe(16),
        }

        return jwt.encode(
            payload,
            self._settings.secret_key.get_secret_value(),
            algorithm=self._settings.algorithm,
        )

    def decode_token(self, token: str) -> TokenPayload:
        """Decode and validate a JWT token.

        Args:
            token: JWT token string.

        Returns:
            TokenPayload with decoded claims.

        Raises:
            TokenExpiredError: If the token has expired.
            InvalidTokenError: If the token is invalid or its claims are malformed.
        """
        try:
            payload = jwt.decode(
                token,
                self._settings.secret_key.get_secret_value(),
                algorithms=[self._settings.algorithm],
            )
        except ExpiredSignatureError:
            raise TokenExpiredError("Token has expired")
        except Exception as e:
            logger.warning("Token decode failed: %s", str(e))
            raise InvalidTokenError(f"Invalid token: {str(e)}")

        try:
            return TokenPayload.model_validate(payload)
        except ValidationError as e:
            raise InvalidTokenError(f"Invalid token claims: {e.error_count()} error(s)")

    def verify_token(self, token: str) -> bool:
        """Verify if a token is valid.

        Args:
            token: JWT token string.

        Returns:
            True if token is valid, False otherwise.
        """
        try:
            self.decode_token(token)
            return True
        except (TokenExpiredError, InvalidTokenError):
            return False
