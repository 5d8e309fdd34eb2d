"""Shared test fixtures for the shiftboard test suite."""

import json
from datetime import datetime, timezone as dt_timezone
from pathlib import Path
from unittest.mock import Mock

import pytest
from dotenv import load_dotenv
from starlette.testclient import TestClient

# Load .env file BEFORE any other imports that might use env vars
load_dotenv(Path(__file__).parent.parent / ".env", override=True)

# Reset vault client singleton so no test sees a cached secret
import clients.vault_client as vault_module
vault_module._vault_client_instance = None
vault_module._secret_cache.clear()

from auth.config import AuthConfig
from auth.session import SessionManager
from clients.discord_client import DiscordClient
from clients.postgres_client import PostgresClient
from utils.user_context import user_context, clear_current_user_id


# =============================================================================
# TEST USER CONSTANTS
# =============================================================================

# Primary test user - use for single-user tests
TEST_USER_ID = 1
TEST_DISCORD_ID = "123456789012345678"

# Secondary test user - use for ownership tests
TEST_USER_B_ID = 2
TEST_DISCORD_B_ID = "223456789012345678"


# =============================================================================
# USER CONTEXT FIXTURES
# =============================================================================


@pytest.fixture(autouse=True)
def reset_user_context():
    """Ensure clean user context before and after each test."""
    clear_current_user_id()
    yield
    clear_current_user_id()


@pytest.fixture
def test_user_id() -> int:
    """The primary test user's ID."""
    return TEST_USER_ID


@pytest.fixture
def test_user_b_id() -> int:
    """The secondary test user's ID."""
    return TEST_USER_B_ID


@pytest.fixture
def as_test_user(test_user_id):
    """Run the test as the primary test user."""
    with user_context(test_user_id):
        yield test_user_id


@pytest.fixture
def as_test_user_b(test_user_b_id):
    """Run the test as the secondary test user."""
    with user_context(test_user_b_id):
        yield test_user_b_id


# =============================================================================
# VALKEY DOUBLE
# =============================================================================


class FakeValkey:
    """
    In-memory stand-in for ValkeyClient.

    Implements the subset of the interface the auth layer uses. TTLs are
    recorded but never elapse; tests that need expiry delete keys directly.
    """

    def __init__(self):
        self.store: dict[str, str] = {}
        self.ttls: dict[str, int] = {}

    def ping(self) -> bool:
        return True

    def get(self, key: str) -> str | None:
        return self.store.get(key)

    def set(self, key: str, value: str, expire_seconds: int | None = None) -> None:
        self.store[key] = value
        if expire_seconds is not None:
            self.ttls[key] = expire_seconds
        else:
            self.ttls.pop(key, None)

    def delete(self, key: str) -> bool:
        self.ttls.pop(key, None)
        return self.store.pop(key, None) is not None

    def ttl(self, key: str) -> int:
        if key not in self.store:
            return -2
        return self.ttls.get(key, -1)

    def incr_window(self, key: str, window_seconds: int) -> int:
        count = int(self.store.get(key, "0")) + 1
        self.store[key] = str(count)
        self.ttls.setdefault(key, window_seconds)
        return count

    def set_json(self, key: str, value, expire_seconds: int | None = None) -> None:
        self.set(key, json.dumps(value), expire_seconds)

    def get_json(self, key: str):
        value = self.get(key)
        return None if value is None else json.loads(value)

    def close(self) -> None:
        pass


@pytest.fixture
def fake_valkey() -> FakeValkey:
    return FakeValkey()


# =============================================================================
# APPLICATION FIXTURES
# =============================================================================


def user_row(user_id: int = TEST_USER_ID, timezone: str = "UTC", **overrides) -> dict:
    """A users row as PostgresClient returns it."""
    row = {
        "id": user_id,
        "discord_id": TEST_DISCORD_ID if user_id == TEST_USER_ID else TEST_DISCORD_B_ID,
        "username": "alice" if user_id == TEST_USER_ID else "bob",
        "avatar_url": None,
        "timezone": timezone,
        "created_at": datetime(2024, 1, 1, tzinfo=dt_timezone.utc),
    }
    row.update(overrides)
    return row


def shift_row(
    shift_id: int = 1,
    user_id: int = TEST_USER_ID,
    start: datetime = datetime(2024, 1, 15, 17, 0, tzinfo=dt_timezone.utc),
    end: datetime = datetime(2024, 1, 15, 19, 0, tzinfo=dt_timezone.utc),
    description: str | None = None,
) -> dict:
    """A shifts row as PostgresClient returns it."""
    return {
        "id": shift_id,
        "user_id": user_id,
        "start_time": start,
        "end_time": end,
        "description": description,
        "created_at": datetime(2024, 1, 1, tzinfo=dt_timezone.utc),
        "updated_at": datetime(2024, 1, 1, tzinfo=dt_timezone.utc),
    }


@pytest.fixture
def app_config() -> AuthConfig:
    return AuthConfig()


@pytest.fixture
def postgres_mock():
    """PostgresClient double. Writes return nothing unless a test says otherwise."""
    postgres = Mock(spec=PostgresClient)
    postgres.execute.return_value = []
    postgres.execute_single.return_value = None
    postgres.execute_returning.return_value = []
    postgres.execute_scalar.return_value = 1
    return postgres


@pytest.fixture
def discord_mock():
    """DiscordClient double with the guild gate switched off."""
    discord = Mock(spec=DiscordClient)
    discord.guild_id = ""
    discord.has_bot_token = False
    discord.authorization_url.return_value = (
        "https://discord.com/api/oauth2/authorize?client_id=1&response_type=code"
    )
    return discord


@pytest.fixture
def app(app_config, postgres_mock, fake_valkey, discord_mock):
    from main import create_app

    return create_app(app_config, postgres_mock, fake_valkey, discord_mock)


@pytest.fixture
def client(app) -> TestClient:
    return TestClient(app)


@pytest.fixture
def session_token(fake_valkey, app_config, test_user_id) -> str:
    """A live session for the primary test user."""
    return SessionManager(fake_valkey, app_config).create_session(test_user_id).token


@pytest.fixture
def auth_client(client, session_token) -> TestClient:
    """TestClient that sends the primary test user's session on every request."""
    client.headers["Authorization"] = f"Bearer {session_token}"
    return client


@pytest.fixture
def make_user_row():
    return user_row


@pytest.fixture
def make_shift_row():
    return shift_row
