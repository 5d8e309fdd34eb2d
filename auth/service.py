"""Authentication service - orchestrates the Discord OAuth login flow."""

import logging

from auth.database import AuthDatabase
from auth.guild_access import GuildAccessChecker
from auth.session import SessionManager
from auth.security_logger import SecurityLogger, SecurityEvent
from auth.types import AuthenticatedUser, Session, User
from auth.exceptions import (
    GuildAccessDeniedError,
    OAuthError,
    RateLimitedError,
    RoleAccessDeniedError,
    UserNotFoundError,
)
from clients.discord_client import DiscordAPIError, DiscordClient, DiscordRateLimitedError

logger = logging.getLogger(__name__)


class AuthService:
    """Orchestrates Discord login.

    Handles:
    - Authorization URL
    - OAuth callback (code exchange, identity, guild/role gate, session)
    - Session validation
    - Logout
    """

    def __init__(
        self,
        auth_db: AuthDatabase,
        session_manager: SessionManager,
        discord_client: DiscordClient,
        guild_access: GuildAccessChecker,
        security_logger: SecurityLogger,
    ):
        self._auth_db = auth_db
        self._session_manager = session_manager
        self._discord = discord_client
        self._guild_access = guild_access
        self._security_logger = security_logger

    def authorization_url(self) -> str:
        return self._discord.authorization_url()

    def handle_callback(
        self,
        code: str,
        ip_address: str | None,
        user_agent: str | None,
    ) -> AuthenticatedUser:
        """Complete login from an OAuth authorization code.

        Flow:
        1. Exchange code for access token
        2. Fetch Discord identity
        3. Guild membership and role gate
        4. Get or create user (profile refreshed on every login)
        5. Create session
        6. Log security events

        Raises:
            OAuthError: Code exchange or identity lookup failed
            GuildAccessDeniedError: Not in the guild
            RoleAccessDeniedError: No allowed role
            RateLimitedError: Discord throttled us
        """
        discord_id = None
        try:
            access_token = self._discord.exchange_code(code)
            identity = self._discord.get_current_user(access_token)
            discord_id = identity.id
            self._guild_access.check_access(identity.id, access_token)
        except DiscordRateLimitedError as e:
            self._log_failure(SecurityEvent.RATE_LIMITED, discord_id, ip_address, user_agent, str(e))
            raise RateLimitedError(retry_after_seconds=e.retry_after_seconds)
        except DiscordAPIError as e:
            self._log_failure(SecurityEvent.OAUTH_FAILED, discord_id, ip_address, user_agent, str(e))
            raise OAuthError(str(e))
        except GuildAccessDeniedError as e:
            self._log_failure(SecurityEvent.GUILD_ACCESS_DENIED, discord_id, ip_address, user_agent, str(e))
            raise
        except RoleAccessDeniedError as e:
            self._log_failure(SecurityEvent.ROLE_ACCESS_DENIED, discord_id, ip_address, user_agent, str(e))
            raise

        user, created = self._auth_db.get_or_create_user(
            discord_id=identity.id,
            username=identity.username,
            avatar_url=identity.avatar_url,
        )
        if created:
            logger.info(f"Created user {user.id} for discord id {identity.id}")
            self._security_logger.log(
                SecurityEvent.USER_CREATED,
                discord_id=identity.id,
                user_id=user.id,
                ip_address=ip_address,
                user_agent=user_agent,
            )

        session = self._session_manager.create_session(user.id)

        self._security_logger.log(
            SecurityEvent.LOGIN_SUCCEEDED,
            discord_id=identity.id,
            user_id=user.id,
            ip_address=ip_address,
            user_agent=user_agent,
        )
        self._security_logger.log(
            SecurityEvent.SESSION_CREATED,
            discord_id=identity.id,
            user_id=user.id,
            ip_address=ip_address,
            user_agent=user_agent,
        )

        return AuthenticatedUser(user=user, session=session)

    def _log_failure(
        self,
        event: SecurityEvent,
        discord_id: str | None,
        ip_address: str | None,
        user_agent: str | None,
        reason: str,
    ) -> None:
        logger.warning(f"Login failed ({event.value}): {reason}")
        self._security_logger.log(
            event,
            discord_id=discord_id,
            ip_address=ip_address,
            user_agent=user_agent,
            details={"reason": reason},
        )

    def validate_session(self, token: str) -> Session:
        """Validate session token.

        Raises:
            SessionExpiredError: If session invalid or expired.
        """
        return self._session_manager.validate_session(token)

    def get_user(self, user_id: int) -> User:
        """
        Raises:
            UserNotFoundError: If the session's user row is gone
        """
        user = self._auth_db.get_user_by_id(user_id)
        if user is None:
            raise UserNotFoundError(f"User {user_id} not found")
        return user

    def logout(self, session_token: str, ip_address: str | None, user_id: int | None = None) -> None:
        """Revoke session (logout).

        Safe to call with invalid token.
        """
        self._session_manager.revoke_session(session_token)
        self._security_logger.log(
            SecurityEvent.SESSION_REVOKED,
            user_id=user_id,
            ip_address=ip_address,
        )
