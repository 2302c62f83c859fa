# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for JWT token utilities.

Tests the JWTManager class and the conversion of claims to an AuthUser.
"""

from datetime import timedelta

import pytest
from jose import jwt
from pydantic import SecretStr

from src.core.config.settings import JWTSettings
from src.domains.auth import AuthUser
from src.domains.auth.jwt import (
    InvalidTokenError,
    JWTManager,
    TokenExpiredError,
    TokenPayload,
)
from src.models.common import UserRole

SECRET = "test-secret-key-for-jwt-testing"


@pytest.fixture
def jwt_settings() -> JWTSettings:
    """Create JWT settings with a test secret."""
    return JWTSettings(secret_key=SecretStr(SECRET), access_token_expire_minutes=30)


@pytest.fixture
def jwt_manager(jwt_settings: JWTSettings) -> JWTManager:
    """Create JWT manager with test settings."""
    return JWTManager(jwt_settings)


@pytest.mark.unit
class TestJWTManager:
    """Tests for JWTManager class."""

    def test_round_trip_to_auth_user(self, jwt_manager: JWTManager) -> None:
        """Test that a minted token decodes to the same acting user."""
        token = jwt_manager.create_access_token(
            user_id=7,
            role=UserRole.ADMIN,
            branch_id=3,
            email="admin@example.com",
            full_name="Branch Admin",
        )

        user = jwt_manager.decode_token(token).to_auth_user()

        assert user == AuthUser(
            id=7,
            role=UserRole.ADMIN,
            branch_id=3,
            email="admin@example.com",
            full_name="Branch Admin",
        )

    def test_superadmin_has_no_branch(self, jwt_manager: JWTManager) -> None:
        token = jwt_manager.create_access_token(user_id=1, role=UserRole.SUPERADMIN)

        payload = jwt_manager.decode_token(token)

        assert payload.branch_id is None
        assert payload.to_auth_user().is_superadmin

    def test_expiry_uses_settings(self, jwt_manager: JWTManager) -> None:
        token = jwt_manager.create_access_token(user_id=1, role=UserRole.USER, branch_id=1)

        payload = jwt_manager.decode_token(token)

        assert payload.exp - payload.iat == 30 * 60

    def test_expired_token_raises(self, jwt_manager: JWTManager) -> None:
        """Test that expired tokens raise TokenExpiredError."""
        token = jwt_manager.create_access_token(
            user_id=1,
            role=UserRole.USER,
            branch_id=1,
            expires_in=timedelta(seconds=-10),
        )

        with pytest.raises(TokenExpiredError):
            jwt_manager.decode_token(token)

    def test_wrong_signature_raises(self, jwt_manager: JWTManager) -> None:
        other = JWTManager(JWTSettings(secret_key=SecretStr("another-secret")))
        token = other.create_access_token(user_id=1, role=UserRole.ADMIN, branch_id=1)

        with pytest.raises(InvalidTokenError):
            jwt_manager.decode_token(token)

    def test_garbage_token_raises(self, jwt_manager: JWTManager) -> None:
        with pytest.raises(InvalidTokenError):
            jwt_manager.decode_token("not.a.token")

    def test_unknown_role_raises(self, jwt_manager: JWTManager) -> None:
        """Test that claims with an unknown role are rejected."""
        token = jwt.encode(
            {"sub": "1", "role": "janitor", "exp": 4102444800, "iat": 0, "jti": "x"},
            SECRET,
            algorithm="HS256",
        )

        with pytest.raises(InvalidTokenError):
            jwt_manager.decode_token(token)

    def test_verify_token(self, jwt_manager: JWTManager) -> None:
        token = jwt_manager.create_access_token(user_id=1, role=UserRole.USER, branch_id=2)

        assert jwt_manager.verify_token(token) is True
        assert jwt_manager.verify_token("invalid") is False


@pytest.mark.unit
class TestTokenPayload:
    """Tests for TokenPayload."""

    def test_subject_becomes_int_id(self) -> None:
        payload = TokenPayload(
            sub="12",
            role=UserRole.USER,
            branch_id=4,
            exp=0,
            iat=0,
            jti="abc",
        )

        user = payload.to_auth_user()

        assert user.id == 12
        assert user.branch_id == 4
        assert not user.can_write
