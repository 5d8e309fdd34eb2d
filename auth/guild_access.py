"""Discord guild membership and role gate.

A user may log in only if they are a member of the configured guild and
hold at least one role whose name is in AuthConfig.allowed_roles. With no
guild configured the gate is open.
"""

import logging

from auth.config import AuthConfig
from auth.exceptions import GuildAccessDeniedError, RoleAccessDeniedError
from clients.discord_client import (
    DiscordAPIError,
    DiscordClient,
    DiscordRateLimitedError,
    GuildRole,
)
from utils.cache import TTLCache

logger = logging.getLogger(__name__)


class GuildAccessChecker:
    """Checks guild membership and allowed roles for a Discord user.

    Rate-limit errors from Discord always propagate; other Discord
    failures fail closed.
    """

    def __init__(
        self,
        discord: DiscordClient,
        config: AuthConfig,
        roles_cache: TTLCache[list[GuildRole]] | None = None,
    ):
        self._discord = discord
        self._allowed_roles = list(config.allowed_roles)
        self._roles_cache = roles_cache or TTLCache(config.roles_cache_ttl_seconds)

    @property
    def enabled(self) -> bool:
        return bool(self._discord.guild_id)

    def get_member_roles(self, discord_user_id: str, access_token: str) -> list[str] | None:
        """
        Role ids the user holds, or None if they are not in the guild.

        Lookup order: bot token (if configured), the user's own member
        endpoint, then the user's guild list. Membership proven by the guild
        list alone carries no roles.
        """
        if self._discord.has_bot_token:
            try:
                return self._discord.get_member_roles_as_bot(discord_user_id)
            except DiscordRateLimitedError:
                raise
            except DiscordAPIError as e:
                logger.warning(f"Bot member lookup failed, falling back to OAuth: {e}")

        try:
            return self._discord.get_current_member_roles(access_token)
        except DiscordRateLimitedError:
            raise
        except DiscordAPIError as e:
            logger.warning(f"Member lookup failed, falling back to guild list: {e}")

        try:
            guild_ids = self._discord.get_current_user_guild_ids(access_token)
        except DiscordRateLimitedError:
            raise
        except DiscordAPIError as e:
            logger.warning(f"Guild list lookup failed: {e}")
            return None

        return [] if self._discord.guild_id in guild_ids else None

    def get_guild_roles(self, access_token: str) -> list[GuildRole]:
        """Guild role list, served from cache while fresh."""
        guild_id = self._discord.guild_id
        roles = self._roles_cache.get(guild_id)
        if roles is None:
            roles = self._discord.get_guild_roles(access_token)
            self._roles_cache.set(guild_id, roles)
        return roles

    def has_allowed_role(self, member_role_ids: list[str], access_token: str) -> bool:
        """True if any of the member's roles has an allowed name."""
        if not self._allowed_roles:
            return True
        if not member_role_ids:
            return False

        try:
            roles = self.get_guild_roles(access_token)
        except DiscordRateLimitedError:
            raise
        except DiscordAPIError as e:
            logger.error(f"Could not load guild roles: {e}")
            return False

        allowed_ids = {role.id for role in roles if role.name in self._allowed_roles}
        return any(role_id in allowed_ids for role_id in member_role_ids)

    def check_access(self, discord_user_id: str, access_token: str) -> None:
        """
        Raises:
            GuildAccessDeniedError: User is not in the guild
            RoleAccessDeniedError: User has none of the allowed roles
            DiscordRateLimitedError: Discord throttled a lookup
        """
        if not self.enabled:
            return

        member_roles = self.get_member_roles(discord_user_id, access_token)
        if member_roles is None:
            raise GuildAccessDeniedError(
                "You must be a member of the required Discord server to access this application."
            )

        if not self.has_allowed_role(member_roles, access_token):
            raise RoleAccessDeniedError(
                "You must have one of the following roles in the Discord server "
                f"to access this application: {', '.join(self._allowed_roles)}"
            )
