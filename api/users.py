"""/api/users/me and /api/timezones."""

from typing import Any

from fastapi import APIRouter, Request
from pydantic import BaseModel

from api.base import get_request_id, success_response
from auth.api import user_payload
from auth.database import AuthDatabase
from utils.timezone import common_timezones
from utils.validation import is_valid_timezone


class UserUpdate(BaseModel):
    timezone: Any = None


def create_users_router(auth_db: AuthDatabase) -> APIRouter:
    router = APIRouter(tags=["users"])

    @router.get("/users/me")
    async def get_me(request: Request):
        user = auth_db.get_user_by_id(request.state.user_id)
        if user is None:
            raise ValueError("User not found")
        return success_response(user_payload(user), request_id=get_request_id(request)).model_dump(mode="json")

    @router.put("/users/me")
    async def update_me(request: Request, body: UserUpdate):
        if not body.timezone or not isinstance(body.timezone, str):
            raise ValueError("timezone is required")
        if not is_valid_timezone(body.timezone):
            raise ValueError("Invalid timezone")

        user = auth_db.update_timezone(request.state.user_id, body.timezone)
        return success_response(user_payload(user), request_id=get_request_id(request)).model_dump(mode="json")

    @router.get("/timezones")
    async def list_timezones(request: Request):
        """Zones offered in the picker."""
        return success_response(common_timezones(), request_id=get_request_id(request)).model_dump(mode="json")

    return router
