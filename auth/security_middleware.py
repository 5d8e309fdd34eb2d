"""Security middleware for FastAPI - session validation and user context."""

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

from auth.session import SessionManager
from auth.exceptions import SessionExpiredError
from api.base import ErrorCodes, error_json
from utils.user_context import set_current_user_id, clear_current_user_id


def get_client_ip(request: Request) -> str:
    """
    Client address as seen through proxies.

    First X-Forwarded-For entry, else X-Real-IP, else the socket peer,
    else "unknown".
    """
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        first = forwarded.split(",")[0].strip()
        if first:
            return first

    real_ip = request.headers.get("X-Real-IP")
    if real_ip:
        return real_ip.strip()

    if request.client and request.client.host:
        return request.client.host
    return "unknown"


def get_session_token(request: Request, cookie_name: str = "session") -> str | None:
    """Session token from the session cookie, else an Authorization: Bearer header."""
    token = request.cookies.get(cookie_name)
    if token:
        return token

    auth_header = request.headers.get("Authorization", "")
    if auth_header.startswith("Bearer "):
        return auth_header[len("Bearer "):].strip() or None
    return None


class AuthMiddleware(BaseHTTPMiddleware):
    """Middleware that validates session and sets user context.

    For protected routes:
    1. Extracts session token (cookie, then Bearer header)
    2. Validates session via SessionManager (slides expiry)
    3. Sets user_id in request.state and user context
    4. Clears context after request completes

    Public paths and anything outside /api/ bypass authentication.
    """

    PUBLIC_PATHS = [
        "/api/auth/discord",
        "/api/auth/callback",
        "/api/auth/logout",
        "/api/timezones",
    ]

    def __init__(self, app, session_manager: SessionManager, cookie_name: str = "session"):
        super().__init__(app)
        self._session_manager = session_manager
        self._cookie_name = cookie_name

    def _is_public_path(self, path: str) -> bool:
        if not path.startswith("/api/"):
            return True
        return path in self.PUBLIC_PATHS

    async def dispatch(self, request: Request, call_next):
        """Process request through middleware."""
        path = request.url.path

        if request.method == "OPTIONS" or self._is_public_path(path):
            return await call_next(request)

        session_token = get_session_token(request, self._cookie_name)
        if not session_token:
            return error_json(request, 401, ErrorCodes.NOT_AUTHENTICATED, "Authentication required")

        try:
            session = self._session_manager.validate_session(session_token)
        except SessionExpiredError:
            return error_json(request, 401, ErrorCodes.SESSION_EXPIRED, "Session has expired")

        set_current_user_id(session.user_id)
        request.state.user_id = session.user_id
        request.state.session = session

        try:
            return await call_next(request)
        finally:
            clear_current_user_id()
