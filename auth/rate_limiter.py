"""Fixed-window rate limiting per client IP.

Each category (auth, api, shifts) has its own counter and window. The
window opens on the first request and is not extended by later ones.
"""

from clients.valkey_client import ValkeyClient
from auth.config import AuthConfig
from auth.exceptions import RateLimitedError


class RateLimiter:
    """Rate limiting for HTTP requests using Valkey counters."""

    KEY_PREFIX = "ratelimit:"

    def __init__(self, valkey: ValkeyClient, config: AuthConfig):
        self._valkey = valkey
        self._limits = {
            "auth": (config.auth_rate_limit, config.auth_rate_window_seconds),
            "api": (config.api_rate_limit, config.api_rate_window_seconds),
            "shifts": (config.shifts_rate_limit, config.shifts_rate_window_seconds),
        }

    def _key(self, category: str, client_ip: str) -> str:
        return f"{self.KEY_PREFIX}{category}:{client_ip}"

    def _limit(self, category: str) -> tuple[int, int]:
        try:
            return self._limits[category]
        except KeyError:
            raise ValueError(f"Unknown rate limit category: {category}")

    def check_rate_limit(self, category: str, client_ip: str) -> None:
        """Count this request and reject it if the window is exhausted.

        Raises:
            RateLimitedError: If rate limit exceeded.
            ValueError: If category is unknown.
        """
        max_requests, window_seconds = self._limit(category)
        key = self._key(category, client_ip)

        count = self._valkey.incr_window(key, window_seconds)
        if count > max_requests:
            ttl = self._valkey.ttl(key)
            retry_after = ttl if ttl > 0 else window_seconds
            raise RateLimitedError(retry_after_seconds=retry_after)
