"""Security event logging for auth audit trail.

Append-only log to the security_events table. Every login outcome is
recorded, including the guild and role gate denials.
"""

import logging
from enum import Enum
from typing import Any

from psycopg2.extras import Json

from clients.postgres_client import PostgresClient
from utils.timezone import now_utc

logger = logging.getLogger(__name__)


class SecurityEvent(Enum):
    """Auth security event types."""

    OAUTH_FAILED = "oauth_failed"
    GUILD_ACCESS_DENIED = "guild_access_denied"
    ROLE_ACCESS_DENIED = "role_access_denied"
    LOGIN_SUCCEEDED = "login_succeeded"
    USER_CREATED = "user_created"
    SESSION_CREATED = "session_created"
    SESSION_REVOKED = "session_revoked"
    RATE_LIMITED = "rate_limited"


class SecurityLogger:
    """Append-only security event logger."""

    def __init__(self, postgres: PostgresClient):
        self._db = postgres

    def log(
        self,
        event: SecurityEvent,
        discord_id: str | None = None,
        user_id: int | None = None,
        ip_address: str | None = None,
        user_agent: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Log security event to database."""
        logger.info(f"Security event {event.value} user_id={user_id} ip={ip_address}")
        self._db.execute_returning(
            """INSERT INTO security_events
               (event_type, discord_id, user_id, ip_address, user_agent, details, created_at)
               VALUES (%s, %s, %s, %s, %s, %s, %s)
               RETURNING id""",
            (
                event.value,
                discord_id,
                user_id,
                ip_address,
                user_agent,
                Json(details) if details else None,
                now_utc(),
            ),
        )
