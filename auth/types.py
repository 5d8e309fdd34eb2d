"""Pydantic models for auth domain."""

from datetime import datetime

from pydantic import BaseModel, Field


class User(BaseModel):
    """A user who has logged in through Discord at least once."""

    id: int
    discord_id: str
    username: str
    avatar_url: str | None = None
    timezone: str = "UTC"
    created_at: datetime

    model_config = {"from_attributes": True}


class Session(BaseModel):
    """An active user session."""

    token: str = Field(..., description="Session token (opaque string)")
    user_id: int
    created_at: datetime
    expires_at: datetime
    last_activity_at: datetime


class AuthenticatedUser(BaseModel):
    """User info returned after successful authentication."""

    user: User
    session: Session
