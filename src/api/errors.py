"""
Exception handlers - map domain errors to JSON responses.

Every failure answers {"ok": false, "message": ...} with a status from the
error taxonomy. Unexpected exceptions are logged and answered with a
generic message; stack traces never reach the client.
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from src.api.cookies import NO_STORE
from src.domain.exceptions import (
    AuthenticationMismatch,
    ConfigurationError,
    GateError,
    InvalidCodeFormat,
    RateLimited,
    RemoteServiceError,
    SessionExpired,
    SessionMissing,
    StoreUnavailable,
)

logger = logging.getLogger(__name__)

STATUS_BY_ERROR: dict[type[GateError], int] = {
    ConfigurationError: status.HTTP_502_BAD_GATEWAY,
    RateLimited: status.HTTP_429_TOO_MANY_REQUESTS,
    AuthenticationMismatch: status.HTTP_401_UNAUTHORIZED,
    SessionMissing: status.HTTP_400_BAD_REQUEST,
    SessionExpired: status.HTTP_410_GONE,
    InvalidCodeFormat: status.HTTP_400_BAD_REQUEST,
    RemoteServiceError: status.HTTP_502_BAD_GATEWAY,
    StoreUnavailable: status.HTTP_502_BAD_GATEWAY,
}


def failure(message: str, status_code: int) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"ok": False, "message": message},
        headers=NO_STORE,
    )


async def gate_error_handler(request: Request, exc: GateError) -> JSONResponse:
    status_code = STATUS_BY_ERROR.get(type(exc), status.HTTP_400_BAD_REQUEST)
    if isinstance(exc, ConfigurationError):
        logger.error("Configuration missing: %s", exc.setting)
    return failure(exc.message, status_code)


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return failure("Malformed request.", status.HTTP_400_BAD_REQUEST)


async def unexpected_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return failure("Service temporarily unavailable.", status.HTTP_502_BAD_GATEWAY)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(GateError, gate_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(Exception, unexpected_error_handler)
