# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Exception handlers translating service errors to HTTP responses.

Domain errors keep their message and code; store failures are reported
with a generic message only.
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from src.domains.errors import DomainError
from src.infrastructure.database import DatabaseError

logger = logging.getLogger(__name__)

STATUS_BY_KIND = {
    "not_found": status.HTTP_404_NOT_FOUND,
    "conflict": status.HTTP_409_CONFLICT,
    "forbidden": status.HTTP_403_FORBIDDEN,
    "bad_request": status.HTTP_400_BAD_REQUEST,
}


async def domain_error_handler(request: Request, exc: DomainError) -> JSONResponse:
    """Map a domain error to its status code."""
    return JSONResponse(
        status_code=STATUS_BY_KIND.get(exc.kind, status.HTTP_400_BAD_REQUEST),
        content={"detail": exc.message, "code": exc.code},
    )


async def database_error_handler(request: Request, exc: DatabaseError) -> JSONResponse:
    """Report a store failure without leaking its details."""
    logger.error(
        "Store failure: method=%s, path=%s, error=%s",
        request.method,
        request.url.path,
        str(exc),
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal server error", "code": DatabaseError.code},
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Install the handlers on an application."""
    app.add_exception_handler(DomainError, domain_error_handler)
    app.add_exception_handler(DatabaseError, database_error_handler)
