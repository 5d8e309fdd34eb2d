"""GET /api/calendar: month view."""

from fastapi import APIRouter, Query, Request

from api.base import get_request_id, success_response
from core.services.calendar_service import CalendarService


def _parse_int(raw: str | None, message: str) -> int | None:
    if raw is None or raw == "":
        return None
    try:
        return int(raw)
    except ValueError:
        raise ValueError(message)


def create_calendar_router(calendar_service: CalendarService) -> APIRouter:
    router = APIRouter(tags=["calendar"])

    @router.get("/calendar")
    async def get_calendar(
        request: Request,
        year: str | None = Query(None),
        month: str | None = Query(None),
        timezone: str = Query("UTC"),
    ):
        data = calendar_service.month(
            year=_parse_int(year, "Invalid year (must be between 1900 and 2100)"),
            month=_parse_int(month, "Invalid month (must be between 1 and 12)"),
            tz_name=timezone,
        )
        return success_response(data, request_id=get_request_id(request)).model_dump(mode="json")

    return router
