# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Structured logging configuration using structlog.

Modules log through the standard library (``logging.getLogger(__name__)``).
setup_logging installs one root handler whose ProcessorFormatter renders
those records with structlog: JSON outside development, colored console
output in development. The acting user bound by the auth middleware
(``user_id``, ``role``, ``branch_id``) is merged into every record emitted
while the request is being served.

Example:
    >>> setup_logging(get_settings())
    >>> bind_context(user_id=7, role="admin", branch_id=1)
    >>> logging.getLogger("src.domains.enrollment").info("Enrolled: %s", 42)
"""

import logging
import sys
from typing import TYPE_CHECKING

import structlog
from structlog.types import Processor

if TYPE_CHECKING:
    from src.core.config.settings import Settings

HANDLER_NAME = "coursedesk"

_QUIET_LOGGERS = (
    "uvicorn.access",
    "httpx",
    "httpcore",
    "aiosqlite",
    "asyncio",
)


def build_formatter(json_output: bool) -> structlog.stdlib.ProcessorFormatter:
    """Build the formatter that renders stdlib records through structlog.

    Args:
        json_output: Render JSON lines instead of console output.

    Returns:
        Formatter for the root handler.
    """
    pre_chain: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
    ]
    renderer: Processor
    if json_output:
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=True)

    return structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=pre_chain,
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            structlog.processors.format_exc_info,
            renderer,
        ],
    )


def setup_logging(settings: "Settings") -> None:
    """Configure structured logging for the application.

    Calling it again replaces the handler installed by the previous call
    and leaves other root handlers alone.

    Args:
        settings: Application settings; log_level, debug, environment and
            database.echo are read.
    """
    log_level = getattr(logging, settings.log_level.upper(), logging.INFO)

    handler = logging.StreamHandler(sys.stdout)
    handler.set_name(HANDLER_NAME)
    handler.setFormatter(
        build_formatter(json_output=not (settings.is_development or settings.debug))
    )

    root = logging.getLogger()
    for existing in list(root.handlers):
        if existing.get_name() == HANDLER_NAME:
            root.removeHandler(existing)
    root.addHandler(handler)
    root.setLevel(log_level)

    for logger_name in _QUIET_LOGGERS:
        logging.getLogger(logger_name).setLevel(logging.WARNING)

    # SQL statements are logged by SQLAlchemy at INFO on this logger
    sql_level = logging.INFO if settings.database.echo else logging.WARNING
    logging.getLogger("sqlalchemy.engine").setLevel(sql_level)

    logging.getLogger("src").setLevel(log_level)


def bind_context(**kwargs: object) -> None:
    """Bind request-scoped values to every log record in this context.

    Args:
        **kwargs: Key-value pairs, typically user_id, role and branch_id.
    """
    structlog.contextvars.bind_contextvars(**kwargs)


def clear_context() -> None:
    """Clear all bound context variables at the end of a request."""
    structlog.contextvars.clear_contextvars()
