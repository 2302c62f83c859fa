# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for application settings."""

import os
from unittest.mock import patch

import pytest

from src.core.config.settings import (
    APISettings,
    CORSSettings,
    DatabaseSettings,
    JWTSettings,
    Settings,
    clear_settings_cache,
    get_settings,
)


@pytest.mark.unit
class TestDatabaseSettings:
    """Tests for DatabaseSettings."""

    def test_default_values(self) -> None:
        """Test default configuration values."""
        settings = DatabaseSettings()

        assert settings.url.startswith("postgresql+asyncpg://")
        assert settings.pool_size == 10
        assert settings.max_overflow == 20
        assert settings.isolation_level == "READ COMMITTED"
        assert settings.max_retries == 3
        assert not settings.is_sqlite

    def test_sqlite_url(self) -> None:
        settings = DatabaseSettings(url="sqlite+aiosqlite:///./coursedesk.db")

        assert settings.is_sqlite

    def test_env_override(self) -> None:
        """Test that DB_ prefixed variables are loaded."""
        with patch.dict(os.environ, {"DB_MAX_RETRIES": "5", "DB_ECHO": "true"}):
            settings = DatabaseSettings()

        assert settings.max_retries == 5
        assert settings.echo is True

    def test_negative_retries_rejected(self) -> None:
        with pytest.raises(ValueError):
            DatabaseSettings(max_retries=-1)


@pytest.mark.unit
class TestJWTSettings:
    """Tests for JWTSettings."""

    def test_default_values(self) -> None:
        settings = JWTSettings()

        assert settings.algorithm == "HS256"
        assert settings.access_token_expire_minutes == 60

    def test_secret_is_hidden(self) -> None:
        settings = JWTSettings(secret_key="super-secret")  # type: ignore[arg-type]

        assert "super-secret" not in str(settings.secret_key)
        assert settings.secret_key.get_secret_value() == "super-secret"


@pytest.mark.unit
class TestCORSSettings:
    """Tests for CORSSettings."""

    def test_origins_list_parsing(self) -> None:
        """Test that comma-separated origins are split and trimmed."""
        settings = CORSSettings(origins="http://a.test, http://b.test,,")

        assert settings.origins_list == ["http://a.test", "http://b.test"]


@pytest.mark.unit
class TestSettings:
    """Tests for the aggregated Settings."""

    def test_defaults(self) -> None:
        settings = Settings(_env_file=None)  # type: ignore[call-arg]

        assert settings.environment == "development"
        assert settings.is_development
        assert not settings.is_production
        assert isinstance(settings.database, DatabaseSettings)
        assert isinstance(settings.api, APISettings)
        assert settings.api.port == 3000

    def test_production_requires_jwt_secret(self) -> None:
        """Test that production refuses the default JWT secret."""
        with pytest.raises(ValueError, match="JWT secret key"):
            Settings(environment="production", _env_file=None)  # type: ignore[call-arg]

    def test_production_with_secret(self) -> None:
        settings = Settings(
            environment="production",
            jwt=JWTSettings(secret_key="rotated-secret"),  # type: ignore[arg-type]
            _env_file=None,  # type: ignore[call-arg]
        )

        assert settings.is_production

    def test_get_settings_is_cached(self) -> None:
        clear_settings_cache()
        try:
            assert get_settings() is get_settings()
        finally:
            clear_settings_cache()
