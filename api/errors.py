"""Global exception handlers for FastAPI.

Services raise ValueError for bad input ("... not found" becomes 404) and
typed AuthError subclasses for auth failures. Handlers turn them into the
APIResponse envelope.
"""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from starlette.responses import JSONResponse

from api.base import ErrorCodes, error_json
from auth.exceptions import (
    AuthError,
    GuildAccessDeniedError,
    OAuthError,
    RateLimitedError,
    RoleAccessDeniedError,
    SessionExpiredError,
    UserNotFoundError,
)

logger = logging.getLogger(__name__)


def rate_limited_json(request: Request, exc: RateLimitedError) -> JSONResponse:
    return error_json(
        request,
        429,
        ErrorCodes.RATE_LIMITED,
        "Rate limit exceeded",
        headers={"Retry-After": str(exc.retry_after_seconds)},
    )


def register_error_handlers(app: FastAPI) -> None:
    """Register global exception handlers on the app."""

    @app.exception_handler(ValueError)
    async def value_error_handler(request: Request, exc: ValueError):
        message = str(exc)
        if "not found" in message.lower():
            return error_json(request, 404, ErrorCodes.NOT_FOUND, message)
        return error_json(request, 400, ErrorCodes.INVALID_REQUEST, message)

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        return error_json(request, 422, ErrorCodes.VALIDATION_ERROR, str(exc.errors()))

    @app.exception_handler(AuthError)
    async def auth_error_handler(request: Request, exc: AuthError):
        if isinstance(exc, RateLimitedError):
            return rate_limited_json(request, exc)
        if isinstance(exc, GuildAccessDeniedError):
            return error_json(request, 403, ErrorCodes.GUILD_ACCESS_DENIED, str(exc))
        if isinstance(exc, RoleAccessDeniedError):
            return error_json(request, 403, ErrorCodes.ROLE_ACCESS_DENIED, str(exc))
        if isinstance(exc, SessionExpiredError):
            return error_json(request, 401, ErrorCodes.SESSION_EXPIRED, "Session has expired")
        if isinstance(exc, OAuthError):
            return error_json(request, 401, ErrorCodes.OAUTH_FAILED, str(exc))
        if isinstance(exc, UserNotFoundError):
            return error_json(request, 401, ErrorCodes.NOT_AUTHENTICATED, "Authentication required")
        return error_json(request, 401, ErrorCodes.NOT_AUTHENTICATED, str(exc))

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.exception("Unhandled exception")
        return error_json(request, 500, ErrorCodes.INTERNAL_ERROR, "An internal error occurred")
