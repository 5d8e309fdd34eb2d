"""Request-scoped middleware for API requests."""

from uuid import uuid4

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

from api.errors import rate_limited_json
from auth.exceptions import RateLimitedError
from auth.rate_limiter import RateLimiter
from auth.security_middleware import get_client_ip

SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "X-XSS-Protection": "1; mode=block",
    "Referrer-Policy": "strict-origin-when-cross-origin",
    "Content-Security-Policy": (
        "default-src 'self'; script-src 'self' 'unsafe-inline'; style-src 'self' 'unsafe-inline';"
    ),
}


def rate_limit_category(path: str) -> str | None:
    """Rate-limit bucket for a path; None for non-API paths."""
    if not path.startswith("/api/"):
        return None
    if path.startswith("/api/auth/"):
        return "auth"
    if path.startswith("/api/shifts"):
        return "shifts"
    return "api"


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Assigns a unique request ID to every request."""

    async def dispatch(self, request: Request, call_next):
        request_id = str(uuid4())
        request.state.request_id = request_id
        response = await call_next(request)
        response.headers["X-Request-ID"] = request_id
        return response


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Adds the fixed security header set to every response."""

    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)
        for name, value in SECURITY_HEADERS.items():
            response.headers[name] = value
        return response


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Per-IP fixed-window limits on /api/ paths. CORS preflights are not counted."""

    def __init__(self, app, rate_limiter: RateLimiter):
        super().__init__(app)
        self._rate_limiter = rate_limiter

    async def dispatch(self, request: Request, call_next):
        category = rate_limit_category(request.url.path)
        if category is None or request.method == "OPTIONS":
            return await call_next(request)

        try:
            self._rate_limiter.check_rate_limit(category, get_client_ip(request))
        except RateLimitedError as e:
            return rate_limited_json(request, e)

        return await call_next(request)
