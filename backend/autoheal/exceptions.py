"""Application error hierarchy and the handlers that render it over HTTP."""

import asyncio
import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy import exc as sa_exc

logger = logging.getLogger(__name__)


class AutoHealError(Exception):
    """Base exception for application errors."""
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str, original_error: Exception = None):
        super().__init__(message)
        self.message = message
        self.original_error = original_error


class ValidationError(AutoHealError):
    """Raised when a payload is missing fields or carries malformed ones."""
    status_code = status.HTTP_400_BAD_REQUEST


class AuthError(AutoHealError):
    """Raised for bad credentials or a missing/expired session."""
    status_code = status.HTTP_401_UNAUTHORIZED


class ConflictError(AutoHealError):
    """Raised when a write would violate a uniqueness rule."""
    status_code = status.HTTP_409_CONFLICT


class NotFoundError(AutoHealError):
    """Raised when a referenced record does not exist."""
    status_code = status.HTTP_404_NOT_FOUND


class StateConflictError(AutoHealError):
    """Raised when a workflow transition is not allowed from the current state."""
    status_code = status.HTTP_409_CONFLICT


class StorageError(AutoHealError):
    """Raised when the database cannot be reached."""
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE


class GitHubError(AutoHealError):
    """Raised when the GitHub API rejects a request or cannot be reached."""
    status_code = status.HTTP_502_BAD_GATEWAY

    def __init__(self, message: str, upstream_status: int | None = None, original_error: Exception = None):
        super().__init__(message, original_error)
        self.upstream_status = upstream_status


async def autoheal_error_handler(request: Request, exc: AutoHealError) -> JSONResponse:
    headers = None
    if isinstance(exc, StorageError):
        logger.error(
            "Storage failure on %s %s", request.method, request.url.path,
            exc_info=exc.original_error or exc,
        )
    elif isinstance(exc, AuthError):
        headers = {"WWW-Authenticate": "Cookie"}
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message}, headers=headers)


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = [
        {
            "field": ".".join(str(part) for part in error.get("loc", ())),
            "message": error.get("msg", "Invalid value"),
        }
        for error in exc.errors()
    ]
    return JSONResponse(
        status_code=ValidationError.status_code,
        content={"detail": "Invalid request data", "errors": errors},
    )


async def database_error_handler(request: Request, exc: Exception) -> JSONResponse:
    return await autoheal_error_handler(
        request, StorageError("Database unavailable", original_error=exc)
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AutoHealError, autoheal_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(sa_exc.OperationalError, database_error_handler)
    app.add_exception_handler(sa_exc.InterfaceError, database_error_handler)
    app.add_exception_handler(sa_exc.TimeoutError, database_error_handler)
    # asyncpg raises socket errors and connect timeouts without SQLAlchemy wrapping them
    app.add_exception_handler(OSError, database_error_handler)
    app.add_exception_handler(asyncio.TimeoutError, database_error_handler)
