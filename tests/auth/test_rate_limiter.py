"""Tests for RateLimiter - fixed window per IP and category."""

import pytest

from auth.rate_limiter import RateLimiter
from auth.config import AuthConfig
from auth.exceptions import RateLimitedError


@pytest.fixture
def config():
    return AuthConfig(auth_rate_limit=3, auth_rate_window_seconds=900)


@pytest.fixture
def rate_limiter(fake_valkey, config):
    return RateLimiter(fake_valkey, config)


class TestCheckRateLimit:
    """Counting and rejection."""

    def test_allows_up_to_limit(self, rate_limiter):
        for _ in range(3):
            rate_limiter.check_rate_limit("auth", "1.2.3.4")

    def test_rejects_over_limit(self, rate_limiter):
        for _ in range(3):
            rate_limiter.check_rate_limit("auth", "1.2.3.4")
        with pytest.raises(RateLimitedError) as exc_info:
            rate_limiter.check_rate_limit("auth", "1.2.3.4")
        assert exc_info.value.retry_after_seconds == 900

    def test_ips_are_independent(self, rate_limiter):
        for _ in range(3):
            rate_limiter.check_rate_limit("auth", "1.2.3.4")
        rate_limiter.check_rate_limit("auth", "5.6.7.8")

    def test_categories_are_independent(self, rate_limiter):
        for _ in range(3):
            rate_limiter.check_rate_limit("auth", "1.2.3.4")
        rate_limiter.check_rate_limit("api", "1.2.3.4")

    def test_key_layout(self, rate_limiter, fake_valkey):
        rate_limiter.check_rate_limit("shifts", "1.2.3.4")
        assert fake_valkey.store["ratelimit:shifts:1.2.3.4"] == "1"
        assert fake_valkey.ttls["ratelimit:shifts:1.2.3.4"] == 60

    def test_unknown_category(self, rate_limiter):
        with pytest.raises(ValueError, match="Unknown rate limit category"):
            rate_limiter.check_rate_limit("uploads", "1.2.3.4")

    def test_retry_after_uses_remaining_ttl(self, rate_limiter, fake_valkey):
        for _ in range(3):
            rate_limiter.check_rate_limit("auth", "1.2.3.4")
        fake_valkey.ttls["ratelimit:auth:1.2.3.4"] = 17
        with pytest.raises(RateLimitedError) as exc_info:
            rate_limiter.check_rate_limit("auth", "1.2.3.4")
        assert exc_info.value.retry_after_seconds == 17
