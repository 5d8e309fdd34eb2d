# Infrastructure clients
from clients.vault_client import (
    VaultClient,
    VaultError,
    get_database_url,
    get_valkey_url,
    get_discord_config,
)
from clients.postgres_client import PostgresClient
from clients.valkey_client import ValkeyClient
from clients.discord_client import (
    DiscordClient,
    DiscordAPIError,
    DiscordRateLimitedError,
    DiscordUser,
    GuildRole,
)
