"""Typed exceptions for auth failures."""


class AuthError(Exception):
    """Base class for authentication/authorization errors."""


class OAuthError(AuthError):
    """
    Discord OAuth flow failed (bad or reused code, token exchange error,
    identity lookup failure).
    """


class GuildAccessDeniedError(AuthError):
    """User is not a member of the configured Discord guild."""


class RoleAccessDeniedError(AuthError):
    """User is in the guild but holds none of the allowed roles."""


class RateLimitedError(AuthError):
    """Too many attempts. Client should wait before retrying."""

    def __init__(self, retry_after_seconds: int):
        self.retry_after_seconds = retry_after_seconds
        super().__init__(f"Rate limited. Retry after {retry_after_seconds} seconds.")


class UserNotFoundError(AuthError):
    """Session refers to a user row that no longer exists."""


class SessionExpiredError(AuthError):
    """Session has expired (or never existed) and user must re-authenticate."""
