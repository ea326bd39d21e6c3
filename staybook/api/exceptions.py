"""FastAPI exception handlers converting domain errors to HTTP responses.

Status mapping lives on each ``BookingError`` subclass:

- 422 ``ValidationError``: bad dates, guest count, unbookable property
- 409 ``ConflictError``: dates unavailable (expected, not a server fault)
- 409 ``InvalidTransitionError``: body carries ``current_status``
- 403 ``NotPermittedError``: no detail beyond "not permitted"
- 404 ``NotFoundError``

Usage::

    from staybook.api.exceptions import register_exception_handlers
    register_exception_handlers(app)
"""

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.status import HTTP_500_INTERNAL_SERVER_ERROR

from staybook.errors import BookingError

logger = logging.getLogger(__name__)


async def booking_error_handler(request: Request, exc: BookingError) -> JSONResponse:
    """Convert a ``BookingError`` into its JSON body and status code."""
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Log unexpected failures and return a body that reveals nothing internal."""
    logger.exception("Unhandled exception on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal server error"},
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(BookingError, booking_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, generic_exception_handler)
