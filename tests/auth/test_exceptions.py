"""Tests for auth exception hierarchy."""

import pytest

from auth.exceptions import (
    AuthError,
    GuildAccessDeniedError,
    OAuthError,
    RateLimitedError,
    RoleAccessDeniedError,
    SessionExpiredError,
    UserNotFoundError,
)


class TestHierarchy:

    @pytest.mark.parametrize("exc_class", [
        OAuthError,
        GuildAccessDeniedError,
        RoleAccessDeniedError,
        SessionExpiredError,
        UserNotFoundError,
    ])
    def test_all_are_auth_errors(self, exc_class):
        assert issubclass(exc_class, AuthError)

    def test_rate_limited_is_auth_error(self):
        assert isinstance(RateLimitedError(30), AuthError)


class TestRateLimitedError:

    def test_carries_retry_after(self):
        exc = RateLimitedError(retry_after_seconds=42)
        assert exc.retry_after_seconds == 42
        assert "42" in str(exc)
