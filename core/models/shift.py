"""Shift domain models."""

from datetime import datetime

from pydantic import BaseModel, Field


class ShiftWrite(BaseModel):
    """
    Payload for creating or replacing a shift.

    Times are local wall-clock values (YYYY-MM-DDTHH:mm) in `timezone`.
    Content checks happen in ShiftService so they surface as 400s with
    specific messages.
    """

    start_time: str | None = None
    end_time: str | None = None
    description: str | None = None
    timezone: str = Field(default="UTC", description="IANA zone the times are given in")


class Shift(BaseModel):
    """Full shift entity as stored. Times are UTC."""

    id: int
    user_id: int
    start_time: datetime
    end_time: datetime
    description: str | None = None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class ShiftUser(BaseModel):
    """Owner summary attached to calendar entries."""

    id: int
    username: str
    avatar_url: str | None = None
