"""Month view of every user's shifts."""

import calendar
import logging

from clients.postgres_client import PostgresClient
from core.models import ShiftUser
from core.services.shift_service import ShiftService
from utils.timezone import now_utc
from utils.validation import is_valid_timezone

logger = logging.getLogger(__name__)

MIN_YEAR = 1900
MAX_YEAR = 2100


class CalendarService:
    """Builds the calendar month payload."""

    def __init__(self, postgres: PostgresClient, shift_service: ShiftService):
        self.postgres = postgres
        self.shift_service = shift_service

    def month(self, year: int | None = None, month: int | None = None, tz_name: str = "UTC") -> dict:
        """
        Shifts that fall inside a UTC calendar month, formatted for tz_name.

        The window is [YYYY-MM-01T00:00:00Z, <last day>T23:59:59Z] in UTC,
        so a viewer far from UTC sees shifts near the month edges by their
        UTC date. Defaults to the current UTC year/month.

        Returns:
            {"year", "month", "shifts": [shift + "user" summary or None]}

        Raises:
            ValueError: On invalid timezone, year, or month
        """
        if not is_valid_timezone(tz_name):
            raise ValueError("Invalid timezone")

        today = now_utc()
        year = today.year if year is None else year
        month = today.month if month is None else month

        if not MIN_YEAR <= year <= MAX_YEAR:
            raise ValueError(f"Invalid year (must be between {MIN_YEAR} and {MAX_YEAR})")
        if not 1 <= month <= 12:
            raise ValueError("Invalid month (must be between 1 and 12)")

        last_day = calendar.monthrange(year, month)[1]
        start = f"{year:04d}-{month:02d}-01T00:00:00Z"
        end = f"{year:04d}-{month:02d}-{last_day:02d}T23:59:59Z"

        shifts = self.shift_service.list_range(start, end)
        users = self._user_summaries({shift.user_id for shift in shifts})

        entries = []
        for shift in shifts:
            entry = self.shift_service.present(shift, tz_name)
            user = users.get(shift.user_id)
            entry["user"] = user.model_dump(mode="json") if user else None
            entries.append(entry)

        return {"year": year, "month": month, "shifts": entries}

    def _user_summaries(self, user_ids: set[int]) -> dict[int, ShiftUser]:
        if not user_ids:
            return {}
        rows = self.postgres.execute(
            "SELECT id, username, avatar_url FROM users WHERE id = ANY(%s)",
            (sorted(user_ids),),
        )
        return {row["id"]: ShiftUser.model_validate(row) for row in rows}
