"""
Error types and global exception handlers — prevents stack-trace leakage
to clients.

Auth failures carry a machine-readable ``code``; the browser client keys
its silent-refresh logic off ``TOKEN_EXPIRED`` so those strings are part
of the public contract.
"""

from __future__ import annotations

import logging
from enum import Enum

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from afrisoutien.core.cookies import clear_session_cookies

logger = logging.getLogger(__name__)


class AuthErrorCode(str, Enum):
    TOKEN_MISSING = "TOKEN_MISSING"
    TOKEN_EXPIRED = "TOKEN_EXPIRED"
    TOKEN_INVALID = "TOKEN_INVALID"
    USER_NOT_FOUND = "USER_NOT_FOUND"
    REFRESH_TOKEN_MISSING = "REFRESH_TOKEN_MISSING"
    REFRESH_TOKEN_EXPIRED = "REFRESH_TOKEN_EXPIRED"
    REFRESH_TOKEN_INVALID = "REFRESH_TOKEN_INVALID"


class AuthError(HTTPException):
    """HTTP error with a machine-readable code.

    ``clear_session`` makes the handler delete both session cookies on the
    error response, forcing a full re-login.
    """

    def __init__(
        self,
        status_code: int,
        message: str,
        code: AuthErrorCode,
        clear_session: bool = False,
    ) -> None:
        super().__init__(status_code=status_code, detail=message)
        self.code = code
        self.clear_session = clear_session


class EmailSendError(Exception):
    """Outbound transactional e-mail could not be delivered."""


async def _auth_error_handler(_request: Request, exc: AuthError) -> JSONResponse:
    response = JSONResponse(
        status_code=exc.status_code,
        content={"message": exc.detail, "code": exc.code.value, "success": False},
    )
    if exc.clear_session:
        clear_session_cookies(response)
    return response


async def _http_exception_handler(_request: Request, exc: HTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": exc.detail, "success": False},
        headers=getattr(exc, "headers", None),
    )


async def _rate_limit_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    client = request.client.host if request.client else "unknown"
    logger.warning("Rate limit exceeded on %s from %s", request.url.path, client)
    return JSONResponse(
        status_code=status.HTTP_429_TOO_MANY_REQUESTS,
        content={
            "message": "Too many requests, please try again later",
            "code": "RATE_LIMIT_EXCEEDED",
            "success": False,
        },
    )


async def _integrity_error_handler(_request: Request, exc: IntegrityError) -> JSONResponse:
    logger.error("Database integrity error: %s", exc, exc_info=True)
    return JSONResponse(
        status_code=409,
        content={"message": "Database constraint violation", "success": False},
    )


async def _sqlalchemy_error_handler(_request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.error("Database error: %s", exc, exc_info=True)
    return JSONResponse(
        status_code=500,
        content={"message": "Internal database error", "success": False},
    )


async def _generic_exception_handler(_request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled exception: %s", exc)
    return JSONResponse(
        status_code=500,
        content={"message": "Internal server error", "success": False},
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Attach all exception handlers to the FastAPI app."""
    app.add_exception_handler(AuthError, _auth_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(HTTPException, _http_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RateLimitExceeded, _rate_limit_handler)  # type: ignore[arg-type]
    app.add_exception_handler(IntegrityError, _integrity_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(SQLAlchemyError, _sqlalchemy_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, _generic_exception_handler)
