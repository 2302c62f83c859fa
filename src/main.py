# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Server entry point.

Runs the API under uvicorn on the host and port from APISettings
(``API_HOST``, ``API_PORT``).

Example:
    $ coursedesk
    $ python -m src.main
"""

import uvicorn

from src.core.config import get_settings


def run() -> None:
    """Serve the application with uvicorn."""
    settings = get_settings()
    uvicorn.run(
        "src.api.app:create_app",
        factory=True,
        host=settings.api.host,
        port=settings.api.port,
        reload=settings.is_development,
        # setup_logging owns the handlers
        log_config=None,
    )


if __name__ == "__main__":
    run()
