"""/api/shifts: shift CRUD.

Reads are open to every signed-in user; writes act as the current user.
Responses carry times formatted in the requested zone plus *_utc instants.
"""

from fastapi import APIRouter, Query, Request
from fastapi.responses import JSONResponse

from api.base import get_request_id, success_response
from core.models import ShiftWrite
from core.services.shift_service import ShiftService
from utils.validation import is_valid_id, is_valid_timezone


def _shift_id(raw: str) -> int:
    if not is_valid_id(raw):
        raise ValueError("Invalid shift ID")
    return int(raw)


def _display_zone(timezone: str) -> str:
    if not is_valid_timezone(timezone):
        raise ValueError("Invalid timezone")
    return timezone


def create_shifts_router(shift_service: ShiftService) -> APIRouter:
    router = APIRouter(tags=["shifts"])

    @router.get("/shifts")
    async def list_shifts(
        request: Request,
        start: str | None = Query(None),
        end: str | None = Query(None),
        timezone: str = Query("UTC"),
    ):
        tz_name = _display_zone(timezone)
        shifts = shift_service.list_range(start, end)
        return success_response(
            [shift_service.present(shift, tz_name) for shift in shifts],
            request_id=get_request_id(request),
        ).model_dump(mode="json")

    @router.post("/shifts")
    async def create_shift(request: Request, body: ShiftWrite):
        shift = shift_service.create(body)
        return JSONResponse(
            status_code=201,
            content=success_response(
                shift_service.present(shift, body.timezone),
                request_id=get_request_id(request),
            ).model_dump(mode="json"),
        )

    @router.get("/shifts/{shift_id}")
    async def get_shift(request: Request, shift_id: str, timezone: str = Query("UTC")):
        id_ = _shift_id(shift_id)
        tz_name = _display_zone(timezone)

        shift = shift_service.get_by_id(id_)
        if shift is None:
            raise ValueError(f"Shift {id_} not found")

        return success_response(
            shift_service.present(shift, tz_name),
            request_id=get_request_id(request),
        ).model_dump(mode="json")

    @router.put("/shifts/{shift_id}")
    async def update_shift(request: Request, shift_id: str, body: ShiftWrite):
        shift = shift_service.update(_shift_id(shift_id), body)
        return success_response(
            shift_service.present(shift, body.timezone),
            request_id=get_request_id(request),
        ).model_dump(mode="json")

    @router.delete("/shifts/{shift_id}")
    async def delete_shift(request: Request, shift_id: str):
        shift_service.delete(_shift_id(shift_id))
        return success_response(
            {"deleted": True},
            request_id=get_request_id(request),
        ).model_dump(mode="json")

    return router
