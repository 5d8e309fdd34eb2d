"""
Shift service.

Shifts arrive as local wall-clock times plus an IANA zone, are converted to
UTC exactly once on the way in, and are stored and compared as UTC. Every
user can read every shift; only the owner can change or delete one.
"""

import logging

from clients.postgres_client import PostgresClient
from core.models import Shift, ShiftWrite
from utils.timezone import DisplayFormat, format_for_timezone, format_utc_iso, parse_iso, zoned_to_utc
from utils.user_context import get_current_user_id
from utils.validation import (
    MAX_DESCRIPTION_LENGTH,
    is_valid_date_range,
    is_valid_datetime_local,
    is_valid_description,
    is_valid_timezone,
    parse_instant,
    sanitize_string,
)

logger = logging.getLogger(__name__)

_SHIFT_COLUMNS = "id, user_id, start_time, end_time, description, created_at, updated_at"


class ShiftService:
    """Service for shift operations."""

    def __init__(self, postgres: PostgresClient):
        self.postgres = postgres

    def _prepare(self, data: ShiftWrite) -> tuple[str, str, str | None]:
        """
        Validate a write payload and convert it for storage.

        Returns:
            (start_utc, end_utc, description) with times in Z form and an
            empty sanitized description collapsed to None.

        Raises:
            ValueError: On any invalid field
        """
        if not data.start_time or not data.end_time:
            raise ValueError("start_time and end_time are required")

        if not is_valid_datetime_local(data.start_time) or not is_valid_datetime_local(data.end_time):
            raise ValueError("Invalid datetime format. Use YYYY-MM-DDTHH:mm")

        if not is_valid_timezone(data.timezone):
            raise ValueError("Invalid timezone")

        if not is_valid_description(data.description):
            raise ValueError(f"Description too long (max {MAX_DESCRIPTION_LENGTH} characters)")

        try:
            start_utc = zoned_to_utc(data.start_time, data.timezone)
            end_utc = zoned_to_utc(data.end_time, data.timezone)
        except OverflowError:
            raise ValueError("Invalid datetime: outside the supported date range")

        # Ordered after conversion: a range can straddle a DST change
        if parse_iso(end_utc) <= parse_iso(start_utc):
            raise ValueError("end_time must be after start_time")

        description = sanitize_string(data.description, MAX_DESCRIPTION_LENGTH) if data.description else ""
        return start_utc, end_utc, description or None

    def create(self, data: ShiftWrite) -> Shift:
        """
        Create a shift owned by the current user.

        Raises:
            ValueError: If the payload is invalid
        """
        user_id = get_current_user_id()
        start_utc, end_utc, description = self._prepare(data)

        row = self.postgres.execute_returning(
            f"""
            INSERT INTO shifts (user_id, start_time, end_time, description)
            VALUES (%s, %s, %s, %s)
            RETURNING {_SHIFT_COLUMNS}
            """,
            (user_id, start_utc, end_utc, description),
        )[0]

        shift = Shift.model_validate(row)
        logger.info(f"User {user_id} created shift {shift.id}")
        return shift

    def get_by_id(self, shift_id: int) -> Shift | None:
        row = self.postgres.execute_single(
            f"SELECT {_SHIFT_COLUMNS} FROM shifts WHERE id = %s",
            (shift_id,),
        )
        if row is None:
            return None
        return Shift.model_validate(row)

    def list_range(self, start: str | None = None, end: str | None = None) -> list[Shift]:
        """
        All users' shifts inside optional bounds, earliest first.

        A shift is included when it starts at or after `start` and ends at
        or before `end`. Bounds are strict-form datetimes.

        Raises:
            ValueError: If the bounds are malformed or reversed
        """
        if not is_valid_date_range(start, end):
            raise ValueError("Invalid date range")

        conditions = []
        params = []

        if start:
            conditions.append("start_time >= %s")
            params.append(parse_instant(start))

        if end:
            conditions.append("end_time <= %s")
            params.append(parse_instant(end))

        where_clause = " AND ".join(conditions) if conditions else "TRUE"

        rows = self.postgres.execute(
            f"""
            SELECT {_SHIFT_COLUMNS} FROM shifts
            WHERE {where_clause}
            ORDER BY start_time ASC
            """,
            tuple(params),
        )
        return [Shift.model_validate(row) for row in rows]

    def update(self, shift_id: int, data: ShiftWrite) -> Shift:
        """
        Replace times and description of a shift the current user owns.

        Raises:
            ValueError: If the payload is invalid, or the shift is missing
                or owned by someone else (reported as not found)
        """
        user_id = get_current_user_id()
        start_utc, end_utc, description = self._prepare(data)

        rows = self.postgres.execute_returning(
            f"""
            UPDATE shifts
            SET start_time = %s, end_time = %s, description = %s, updated_at = NOW()
            WHERE id = %s AND user_id = %s
            RETURNING {_SHIFT_COLUMNS}
            """,
            (start_utc, end_utc, description, shift_id, user_id),
        )
        if not rows:
            raise ValueError(f"Shift {shift_id} not found")

        logger.info(f"User {user_id} updated shift {shift_id}")
        return Shift.model_validate(rows[0])

    def delete(self, shift_id: int) -> None:
        """
        Delete a shift the current user owns.

        Raises:
            ValueError: If the shift is missing or owned by someone else
        """
        user_id = get_current_user_id()
        rows = self.postgres.execute_returning(
            "DELETE FROM shifts WHERE id = %s AND user_id = %s RETURNING id",
            (shift_id, user_id),
        )
        if not rows:
            raise ValueError(f"Shift {shift_id} not found")

        logger.info(f"User {user_id} deleted shift {shift_id}")

    @staticmethod
    def present(shift: Shift, tz_name: str) -> dict:
        """
        Shift as shown to a viewer in tz_name.

        start_time/end_time are display strings; the *_utc fields carry the
        exact instants for clients that need to round-trip them.
        """
        data = shift.model_dump(mode="json")
        data["start_time"] = format_for_timezone(shift.start_time, tz_name, DisplayFormat.DATETIME)
        data["end_time"] = format_for_timezone(shift.end_time, tz_name, DisplayFormat.DATETIME)
        data["start_time_utc"] = format_utc_iso(shift.start_time)
        data["end_time_utc"] = format_utc_iso(shift.end_time)
        return data
