"""HTTP routes for Discord authentication."""

import logging
from urllib.parse import quote

from fastapi import APIRouter, Query, Request, Response
from fastapi.responses import RedirectResponse

from api.base import get_request_id, success_response
from auth.config import AuthConfig
from auth.exceptions import AuthError
from auth.security_middleware import get_client_ip, get_session_token
from auth.service import AuthService
from auth.types import User

logger = logging.getLogger(__name__)

LOGIN_PAGE = "/login.html"


def _login_redirect(error: str) -> RedirectResponse:
    return RedirectResponse(url=f"{LOGIN_PAGE}?error={quote(error)}", status_code=302)


def user_payload(user: User) -> dict:
    """Public view of a User."""
    return {
        "id": user.id,
        "discord_id": user.discord_id,
        "username": user.username,
        "avatar_url": user.avatar_url,
        "timezone": user.timezone,
        "created_at": user.created_at.isoformat(),
    }


def create_auth_router(auth_service: AuthService, config: AuthConfig) -> APIRouter:
    """Create auth router with injected service."""
    router = APIRouter(tags=["auth"])
    cookie_name = config.session_cookie_name

    @router.get("/discord")
    async def discord_login_url(request: Request):
        """URL the frontend sends the browser to for Discord consent."""
        return success_response(
            {"url": auth_service.authorization_url()},
            request_id=get_request_id(request),
        ).model_dump(mode="json")

    @router.get("/callback")
    async def discord_callback(request: Request, code: str | None = Query(None)):
        """OAuth redirect target.

        Success: 302 to / with the session cookie.
        Failure: 302 to the login page carrying the error message.
        """
        if not code:
            return _login_redirect("missing_code")

        try:
            result = auth_service.handle_callback(
                code=code,
                ip_address=get_client_ip(request),
                user_agent=request.headers.get("User-Agent"),
            )
        except AuthError as e:
            logger.info(f"Discord login rejected: {type(e).__name__}")
            return _login_redirect(str(e) or "Authentication failed")

        response = RedirectResponse(url="/", status_code=302)
        response.set_cookie(
            key=cookie_name,
            value=result.session.token,
            max_age=config.session_expiry_hours * 3600,
            path="/",
            httponly=True,
            secure=config.session_cookie_secure,
            samesite="lax",
        )
        return response

    @router.get("/me")
    async def get_current_user(request: Request):
        """Current user. Requires authentication (middleware sets user_id)."""
        user = auth_service.get_user(request.state.user_id)
        return success_response(
            {"user": user_payload(user), "authenticated": True},
            request_id=get_request_id(request),
        ).model_dump(mode="json")

    @router.post("/logout")
    async def logout(request: Request, response: Response):
        """Revoke session and clear cookie. Succeeds without a session."""
        session_token = get_session_token(request, cookie_name)
        if session_token:
            auth_service.logout(
                session_token=session_token,
                ip_address=get_client_ip(request),
            )

        response.delete_cookie(key=cookie_name, path="/", httponly=True, samesite="lax")
        return success_response(
            {"message": "Logged out successfully"},
            request_id=get_request_id(request),
        ).model_dump(mode="json")

    return router
