"""Database operations for users.

Users are keyed by an integer surrogate id; discord_id is the stable
external identity and is unique.
"""

from clients.postgres_client import PostgresClient
from auth.types import User

_USER_COLUMNS = "id, discord_id, username, avatar_url, timezone, created_at"


class AuthDatabase:
    """Database operations for users."""

    def __init__(self, postgres: PostgresClient):
        self._db = postgres

    def get_user_by_id(self, user_id: int) -> User | None:
        """Find user by ID."""
        row = self._db.execute_single(
            f"SELECT {_USER_COLUMNS} FROM users WHERE id = %s",
            (user_id,),
        )
        return User(**row) if row else None

    def get_user_by_discord_id(self, discord_id: str) -> User | None:
        row = self._db.execute_single(
            f"SELECT {_USER_COLUMNS} FROM users WHERE discord_id = %s",
            (discord_id,),
        )
        return User(**row) if row else None

    def create_user(self, discord_id: str, username: str, avatar_url: str | None) -> User:
        """Create new user. Timezone starts at the column default (UTC)."""
        rows = self._db.execute_returning(
            f"""INSERT INTO users (discord_id, username, avatar_url)
                VALUES (%s, %s, %s)
                RETURNING {_USER_COLUMNS}""",
            (discord_id, username, avatar_url),
        )
        return User(**rows[0])

    def update_profile(self, user_id: int, username: str, avatar_url: str | None) -> User:
        """Refresh username/avatar from the latest Discord identity."""
        rows = self._db.execute_returning(
            f"""UPDATE users SET username = %s, avatar_url = %s
                WHERE id = %s
                RETURNING {_USER_COLUMNS}""",
            (username, avatar_url, user_id),
        )
        if not rows:
            raise ValueError(f"User {user_id} not found")
        return User(**rows[0])

    def get_or_create_user(
        self, discord_id: str, username: str, avatar_url: str | None
    ) -> tuple[User, bool]:
        """Get existing (with refreshed profile) or create new user.

        Returns:
            Tuple of (user, was_created)
        """
        existing = self.get_user_by_discord_id(discord_id)
        if existing:
            return self.update_profile(existing.id, username, avatar_url), False
        return self.create_user(discord_id, username, avatar_url), True

    def update_timezone(self, user_id: int, timezone: str) -> User:
        """
        Store the user's preferred display timezone.

        Caller validates the zone name.

        Raises:
            ValueError: If user doesn't exist
        """
        rows = self._db.execute_returning(
            f"""UPDATE users SET timezone = %s
                WHERE id = %s
                RETURNING {_USER_COLUMNS}""",
            (timezone, user_id),
        )
        if not rows:
            raise ValueError(f"User {user_id} not found")
        return User(**rows[0])
