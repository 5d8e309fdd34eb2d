"""Small in-process TTL cache with an injectable clock."""

from datetime import datetime, timedelta
from typing import Callable, Generic, TypeVar

from utils.timezone import now_utc

T = TypeVar("T")


class TTLCache(Generic[T]):
    """
    Key -> value cache where entries expire ttl_seconds after being stored.

    The clock is injected so expiry can be tested without sleeping.

    Usage:
        cache = TTLCache(ttl_seconds=300)
        roles = cache.get(guild_id)
        if roles is None:
            roles = fetch_roles(guild_id)
            cache.set(guild_id, roles)
    """

    def __init__(self, ttl_seconds: int, clock: Callable[[], datetime] = now_utc):
        if ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be positive")
        self._ttl = timedelta(seconds=ttl_seconds)
        self._clock = clock
        self._entries: dict[str, tuple[T, datetime]] = {}

    def get(self, key: str) -> T | None:
        """Return the cached value, or None if missing or expired."""
        entry = self._entries.get(key)
        if entry is None:
            return None
        value, expires_at = entry
        if self._clock() >= expires_at:
            self._entries.pop(key, None)
            return None
        return value

    def set(self, key: str, value: T) -> None:
        self._entries[key] = (value, self._clock() + self._ttl)

    def invalidate(self, key: str) -> None:
        self._entries.pop(key, None)

    def clear(self) -> None:
        self._entries.clear()
