"""
Application entry point.

create_app() wires already-constructed clients into a FastAPI app (tests
pass doubles). build_app() resolves secrets from Vault and builds the real
clients.

Run with:
    uvicorn main:build_app --factory --port 9624
"""

import logging
import os
from pathlib import Path

from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from api.base import ErrorCodes, error_json, get_request_id, success_response
from api.calendar import create_calendar_router
from api.errors import register_error_handlers
from api.middleware import RateLimitMiddleware, RequestIDMiddleware, SecurityHeadersMiddleware
from api.shifts import create_shifts_router
from api.users import create_users_router
from auth.api import create_auth_router
from auth.config import AuthConfig
from auth.database import AuthDatabase
from auth.guild_access import GuildAccessChecker
from auth.rate_limiter import RateLimiter
from auth.security_logger import SecurityLogger
from auth.security_middleware import AuthMiddleware
from auth.service import AuthService
from auth.session import SessionManager
from clients.discord_client import DiscordClient
from clients.postgres_client import PostgresClient
from clients.valkey_client import ValkeyClient
from core.services.calendar_service import CalendarService
from core.services.shift_service import ShiftService

logger = logging.getLogger(__name__)

SCHEMA_PATH = Path(__file__).parent / "db" / "schema.sql"


def setup_logging(level: str = "INFO") -> None:
    """Configure the root logger once for the process."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    # Reduce verbosity of third-party libraries
    logging.getLogger("urllib3").setLevel(logging.WARNING)
    logging.getLogger("hvac").setLevel(logging.WARNING)


def create_app(
    config: AuthConfig,
    postgres: PostgresClient,
    valkey: ValkeyClient,
    discord: DiscordClient,
) -> FastAPI:
    """Assemble services, middleware, and routers."""
    auth_db = AuthDatabase(postgres)
    session_manager = SessionManager(valkey, config)
    auth_service = AuthService(
        auth_db=auth_db,
        session_manager=session_manager,
        discord_client=discord,
        guild_access=GuildAccessChecker(discord, config),
        security_logger=SecurityLogger(postgres),
    )
    shift_service = ShiftService(postgres)
    calendar_service = CalendarService(postgres, shift_service)

    app = FastAPI(title="Shiftboard")

    # Last added runs first: CORS, headers, request id, rate limit, auth
    app.add_middleware(
        AuthMiddleware,
        session_manager=session_manager,
        cookie_name=config.session_cookie_name,
    )
    app.add_middleware(RateLimitMiddleware, rate_limiter=RateLimiter(valkey, config))
    app.add_middleware(RequestIDMiddleware)
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
    )
    register_error_handlers(app)

    app.include_router(create_auth_router(auth_service, config), prefix="/api/auth")
    app.include_router(create_shifts_router(shift_service), prefix="/api")
    app.include_router(create_calendar_router(calendar_service), prefix="/api")
    app.include_router(create_users_router(auth_db), prefix="/api")

    @app.get("/health")
    async def health(request: Request):
        try:
            postgres.execute_scalar("SELECT 1")
            valkey.ping()
        except Exception as e:
            logger.error(f"Health check failed: {e}")
            return error_json(request, 503, ErrorCodes.SERVICE_UNAVAILABLE, "Dependencies unavailable")
        return success_response({"status": "ok"}, request_id=get_request_id(request)).model_dump(mode="json")

    return app


def build_app() -> FastAPI:
    """Production factory: secrets from Vault, real clients."""
    from clients.vault_client import get_database_url, get_discord_config, get_valkey_url

    load_dotenv()
    setup_logging(os.getenv("LOG_LEVEL", "INFO"))

    config = AuthConfig(
        session_cookie_secure=os.getenv("SESSION_COOKIE_SECURE", "false").lower() == "true",
        cors_origins=[
            origin.strip()
            for origin in os.getenv("CORS_ORIGINS", "http://localhost:3000").split(",")
            if origin.strip()
        ],
    )
    discord = DiscordClient(**get_discord_config())
    postgres = PostgresClient(get_database_url())
    postgres.apply_schema(SCHEMA_PATH)

    logger.info(f"Starting with guild gate {'enabled' if discord.guild_id else 'disabled'}")
    return create_app(
        config=config,
        postgres=postgres,
        valkey=ValkeyClient(get_valkey_url()),
        discord=discord,
    )


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(build_app(), host="0.0.0.0", port=int(os.getenv("PORT", "9624")))
