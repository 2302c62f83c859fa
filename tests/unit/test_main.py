# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for the server entry point."""

import os
from unittest.mock import patch

import pytest

from src import main
from src.core.config.settings import clear_settings_cache


@pytest.mark.unit
class TestRun:
    """Tests for main.run."""

    def test_serves_on_configured_host_and_port(self) -> None:
        """Test that API_HOST and API_PORT reach uvicorn."""
        env = {"API_HOST": "127.0.0.1", "API_PORT": "8123", "ENVIRONMENT": "staging"}
        clear_settings_cache()
        try:
            with patch.dict(os.environ, env), patch.object(main.uvicorn, "run") as serve:
                main.run()
        finally:
            clear_settings_cache()

        serve.assert_called_once()
        args, kwargs = serve.call_args
        assert args == ("src.api.app:create_app",)
        assert kwargs["factory"] is True
        assert kwargs["host"] == "127.0.0.1"
        assert kwargs["port"] == 8123
        assert kwargs["reload"] is False
        assert kwargs["log_config"] is None
