"""
Discord REST client for OAuth2 login and guild membership lookups.

Two credentials are in play:
- the user's OAuth access token (Bearer), obtained from the login callback
- an optional bot token (Bot), which can read any member of the guild

Fail-fast: non-2xx responses raise, except member lookups where 404 means
"not in guild" and is returned as None.
"""

import logging
from dataclasses import dataclass
from urllib.parse import urlencode

import requests

logger = logging.getLogger(__name__)

API_BASE = "https://discord.com/api"
CDN_BASE = "https://cdn.discordapp.com"
DEFAULT_RETRY_AFTER_SECONDS = 60
REQUEST_TIMEOUT_SECONDS = 10


class DiscordAPIError(Exception):
    """Discord returned an error or could not be reached."""

    def __init__(self, message: str, status_code: int | None = None):
        self.status_code = status_code
        super().__init__(message)


class DiscordRateLimitedError(DiscordAPIError):
    """Discord answered 429. Retry after retry_after_seconds."""

    def __init__(self, retry_after_seconds: int):
        self.retry_after_seconds = retry_after_seconds
        super().__init__(
            f"Discord rate limit exceeded. Please try again in {retry_after_seconds} seconds.",
            status_code=429,
        )


@dataclass
class DiscordUser:
    """Identity returned by /users/@me."""

    id: str
    username: str
    avatar_url: str | None


@dataclass
class GuildRole:
    id: str
    name: str


class DiscordClient:
    """Discord OAuth2 + guild API client."""

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        redirect_uri: str,
        guild_id: str = "",
        bot_token: str = "",
    ):
        """
        Raises:
            ValueError: If any OAuth credential is empty
        """
        if not client_id:
            raise ValueError("client_id is required")
        if not client_secret:
            raise ValueError("client_secret is required")
        if not redirect_uri:
            raise ValueError("redirect_uri is required")

        self.client_id = client_id
        self.client_secret = client_secret
        self.redirect_uri = redirect_uri
        self.guild_id = guild_id
        self.bot_token = bot_token

    @property
    def has_bot_token(self) -> bool:
        return bool(self.bot_token)

    # -------------------------------------------------------------------------
    # OAuth
    # -------------------------------------------------------------------------

    def authorization_url(self) -> str:
        """
        URL the browser is sent to for consent.

        Without a bot token the app needs guilds.members.read to see the
        user's own member record (and roles) in the guild.
        """
        scopes = "identify guilds" if self.has_bot_token else "identify guilds guilds.members.read"
        params = urlencode({
            "client_id": self.client_id,
            "redirect_uri": self.redirect_uri,
            "response_type": "code",
            "scope": scopes,
        })
        return f"{API_BASE}/oauth2/authorize?{params}"

    def exchange_code(self, code: str) -> str:
        """
        Exchange an authorization code for a user access token.

        Raises:
            DiscordRateLimitedError: On 429
            DiscordAPIError: On any other failure
        """
        response = self._request(
            "POST",
            "/oauth2/token",
            data={
                "client_id": self.client_id,
                "client_secret": self.client_secret,
                "grant_type": "authorization_code",
                "code": code,
                "redirect_uri": self.redirect_uri,
            },
            headers={"Content-Type": "application/x-www-form-urlencoded"},
        )
        self._raise_for_status(response, "Failed to exchange code for token")

        access_token = response.json().get("access_token")
        if not access_token:
            raise DiscordAPIError("Token response did not include access_token")
        return access_token

    def get_current_user(self, access_token: str) -> DiscordUser:
        response = self._request("GET", "/users/@me", headers=self._bearer(access_token))
        self._raise_for_status(response, "Failed to get user info")

        data = response.json()
        avatar = data.get("avatar")
        return DiscordUser(
            id=data["id"],
            username=data["username"],
            avatar_url=f"{CDN_BASE}/avatars/{data['id']}/{avatar}.png" if avatar else None,
        )

    def get_current_user_guild_ids(self, access_token: str) -> set[str]:
        """Ids of every guild the user belongs to (needs the 'guilds' scope)."""
        response = self._request("GET", "/users/@me/guilds", headers=self._bearer(access_token))
        self._raise_for_status(response, "Failed to list user guilds")
        return {guild["id"] for guild in response.json()}

    # -------------------------------------------------------------------------
    # Guild
    # -------------------------------------------------------------------------

    def get_member_roles_as_bot(self, user_id: str) -> list[str] | None:
        """
        Role ids a user holds in the configured guild, read with the bot token.

        Returns:
            List of role ids, or None if the user is not a member.

        Raises:
            DiscordAPIError: If no bot token is configured or the call fails
        """
        if not self.has_bot_token:
            raise DiscordAPIError("No authentication method available")
        return self._member_roles(f"/guilds/{self.guild_id}/members/{user_id}", self._bot())

    def get_current_member_roles(self, access_token: str) -> list[str] | None:
        """Same as get_member_roles_as_bot, using the user's own token
        (requires the guilds.members.read scope)."""
        return self._member_roles(
            f"/users/@me/guilds/{self.guild_id}/member", self._bearer(access_token)
        )

    def _member_roles(self, path: str, headers: dict) -> list[str] | None:
        response = self._request("GET", path, headers=headers)
        if response.status_code == 404:
            return None
        self._raise_for_status(response, "Failed to get guild member")
        return list(response.json().get("roles", []))

    def get_guild_roles(self, access_token: str | None = None) -> list[GuildRole]:
        """
        All roles defined in the configured guild.

        Raises:
            DiscordAPIError: If no credential is available or the call fails
        """
        if self.has_bot_token:
            headers = self._bot()
        elif access_token:
            headers = self._bearer(access_token)
        else:
            raise DiscordAPIError("No authentication method available")

        response = self._request("GET", f"/guilds/{self.guild_id}/roles", headers=headers)
        self._raise_for_status(response, "Failed to get guild roles")
        return [GuildRole(id=role["id"], name=role["name"]) for role in response.json()]

    # -------------------------------------------------------------------------
    # Plumbing
    # -------------------------------------------------------------------------

    def _bearer(self, access_token: str) -> dict:
        return {"Authorization": f"Bearer {access_token}"}

    def _bot(self) -> dict:
        return {"Authorization": f"Bot {self.bot_token}"}

    def _request(self, method: str, path: str, **kwargs) -> requests.Response:
        try:
            return requests.request(
                method,
                f"{API_BASE}{path}",
                timeout=REQUEST_TIMEOUT_SECONDS,
                **kwargs,
            )
        except requests.exceptions.RequestException as e:
            logger.error(f"Discord API connection failed: {e}")
            raise DiscordAPIError(f"Connection failed: {e}")

    def _raise_for_status(self, response: requests.Response, message: str) -> None:
        if response.status_code == 429:
            raise DiscordRateLimitedError(_retry_after(response))
        if not response.ok:
            logger.error(f"{message}: {response.status_code} {response.text}")
            raise DiscordAPIError(
                f"{message}: {response.status_code} {response.reason}",
                status_code=response.status_code,
            )


def _retry_after(response: requests.Response) -> int:
    header = response.headers.get("Retry-After")
    try:
        return max(int(float(header)), 1) if header else DEFAULT_RETRY_AFTER_SECONDS
    except ValueError:
        return DEFAULT_RETRY_AFTER_SECONDS
