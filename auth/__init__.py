"""Authentication and authorization modules."""

from auth.exceptions import (
    AuthError,
    OAuthError,
    GuildAccessDeniedError,
    RoleAccessDeniedError,
    RateLimitedError,
    UserNotFoundError,
    SessionExpiredError,
)
from auth.types import (
    User,
    Session,
    AuthenticatedUser,
)
from auth.config import AuthConfig
from auth.database import AuthDatabase
from auth.rate_limiter import RateLimiter
from auth.security_logger import SecurityLogger, SecurityEvent
from auth.session import SessionManager
from auth.guild_access import GuildAccessChecker
from auth.service import AuthService
from auth.security_middleware import AuthMiddleware, get_session_token
from auth.api import create_auth_router
