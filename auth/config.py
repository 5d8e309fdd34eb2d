"""Authentication configuration."""

from pydantic import BaseModel, Field


class AuthConfig(BaseModel):
    """
    Authentication configuration.

    Durations are in their natural units (seconds for caches and rate-limit
    windows, hours for sessions).
    """

    # Session settings
    session_expiry_hours: int = Field(
        default=72,
        description="Session lifetime in hours (sliding on activity)",
        ge=1,
        le=2160,
    )
    session_cookie_name: str = Field(
        default="session",
        description="Name of the HttpOnly session cookie",
    )
    session_cookie_secure: bool = Field(
        default=False,
        description="Set the Secure flag on the session cookie (enable behind HTTPS)",
    )

    # Guild gate
    allowed_roles: list[str] = Field(
        default_factory=lambda: ["Member", "Admin"],
        description="Guild role names that grant access (case-sensitive)",
    )
    roles_cache_ttl_seconds: int = Field(
        default=300,
        description="How long the guild role list is cached",
        ge=1,
    )

    # Rate limiting (fixed window per client IP)
    auth_rate_limit: int = Field(default=5, ge=1, description="Auth requests per window")
    auth_rate_window_seconds: int = Field(default=15 * 60, ge=1)
    api_rate_limit: int = Field(default=100, ge=1, description="API requests per window")
    api_rate_window_seconds: int = Field(default=60, ge=1)
    shifts_rate_limit: int = Field(default=20, ge=1, description="Shift writes per window")
    shifts_rate_window_seconds: int = Field(default=60, ge=1)

    # Application
    cors_origins: list[str] = Field(
        default_factory=lambda: ["http://localhost:3000"],
        description="Origins allowed to make credentialed requests",
    )
