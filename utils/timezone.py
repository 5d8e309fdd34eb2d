"""UTC-everywhere time handling plus wall-clock <-> UTC conversion.

Shifts are stored as UTC instants. Browsers submit local wall-clock values
(YYYY-MM-DDTHH:mm) with a separate IANA zone name, and expect formatted
strings back in the viewer's zone. Everything here is pure and stateless.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from enum import Enum
from zoneinfo import ZoneInfo

MAX_ITERATIONS = 3

_COMMON_TIMEZONES = (
    "UTC",
    "America/New_York",
    "America/Chicago",
    "America/Denver",
    "America/Los_Angeles",
    "Europe/London",
    "Europe/Paris",
    "Europe/Berlin",
    "Asia/Tokyo",
    "Asia/Shanghai",
    "Australia/Sydney",
    "Pacific/Auckland",
)


class DisplayFormat(str, Enum):
    """Which fields format_for_timezone() renders."""

    DATE = "date"
    TIME = "time"
    DATETIME = "datetime"


@dataclass(frozen=True)
class WallClock:
    """
    Calendar and time-of-day fields as read off a clock in some zone.

    Not an instant: the same fields mean different instants in different
    zones, and may mean zero or two instants in one zone around DST changes.
    Values are not range-checked.
    """

    year: int
    month: int
    day: int
    hour: int
    minute: int
    second: int = 0

    @classmethod
    def parse(cls, text: str) -> "WallClock":
        """
        Parse YYYY-MM-DDTHH:mm[:ss] into fields.

        Missing time components default to 0. Structural validation belongs
        to utils.validation; this only splits and converts numbers.

        Raises:
            ValueError: If a component is not an integer
        """
        date_part, _, time_part = text.partition("T")
        year, month, day = (int(p) for p in date_part.split("-"))
        time_parts = time_part.split(":") if time_part else []
        hour, minute, second = (
            int(time_parts[i]) if i < len(time_parts) and time_parts[i] else 0
            for i in range(3)
        )
        return cls(year, month, day, hour, minute, second)

    @classmethod
    def from_datetime(cls, dt: datetime) -> "WallClock":
        return cls(dt.year, dt.month, dt.day, dt.hour, dt.minute, dt.second)

    def isoformat(self) -> str:
        return (
            f"{self.year:04d}-{self.month:02d}-{self.day:02d}"
            f"T{self.hour:02d}:{self.minute:02d}:{self.second:02d}"
        )


def now_utc() -> datetime:
    """
    Current time in UTC.

    Use this instead of datetime.now() everywhere.
    """
    return datetime.now(timezone.utc)


def to_utc(dt: datetime) -> datetime:
    """
    Convert a datetime to UTC.

    Raises ValueError if datetime is naive (no timezone).
    """
    if dt.tzinfo is None:
        raise ValueError(
            "Cannot convert naive datetime to UTC. Datetime must be timezone-aware."
        )
    return dt.astimezone(timezone.utc)


def get_zone(tz_name: str) -> ZoneInfo:
    """
    Look up an IANA zone.

    Raises:
        ValueError: If the host zone database does not know tz_name
    """
    if not isinstance(tz_name, str) or not tz_name:
        raise ValueError(f"Unknown timezone: {tz_name!r}")
    try:
        return ZoneInfo(tz_name)
    except (KeyError, ValueError, OSError):
        # ZoneInfoNotFoundError is a KeyError; malformed keys raise ValueError
        raise ValueError(f"Unknown timezone: {tz_name}")


def is_valid_timezone(tz_name: str) -> bool:
    """True if the host zone database recognizes tz_name. Never raises."""
    try:
        get_zone(tz_name)
    except ValueError:
        return False
    return True


def common_timezones() -> list[str]:
    """Zones offered in the client-side picker."""
    return list(_COMMON_TIMEZONES)


def parse_iso(iso_string: str) -> datetime:
    """
    Parse ISO 8601 datetime string to UTC datetime.

    Raises ValueError if string has no timezone info.
    """
    dt = datetime.fromisoformat(iso_string)
    if dt.tzinfo is None:
        raise ValueError(
            "Cannot parse naive datetime string. "
            "Include timezone offset (e.g., 'Z' or '+00:00')."
        )
    return to_utc(dt)


def format_utc_iso(dt: datetime) -> str:
    """Render an aware datetime as YYYY-MM-DDTHH:MM:SSZ (wire format)."""
    return f"{WallClock.from_datetime(to_utc(dt)).isoformat()}Z"


def _as_instant(instant: datetime | str) -> datetime:
    if isinstance(instant, str):
        return parse_iso(instant)
    return to_utc(instant)


def to_zoned(instant: datetime | str, tz_name: str) -> WallClock:
    """
    Wall-clock fields an observer in tz_name reads at the given instant.

    Single pass: every instant maps to exactly one reading per zone.

    Args:
        instant: Aware datetime, or ISO 8601 string with 'Z' or an offset
        tz_name: IANA timezone name

    Raises:
        ValueError: If the instant is naive or the zone is unknown
    """
    zone = get_zone(tz_name)
    return WallClock.from_datetime(_as_instant(instant).astimezone(zone))


def _naive_utc(fields: WallClock) -> datetime:
    """Treat fields as if they were UTC, normalizing overflow (month 13 -> next January)."""
    year = fields.year + (fields.month - 1) // 12
    month = (fields.month - 1) % 12 + 1
    base = datetime(year, month, 1, tzinfo=timezone.utc)
    return base + timedelta(
        days=fields.day - 1,
        hours=fields.hour,
        minutes=fields.minute,
        seconds=fields.second,
    )


def _clock_delta(target: WallClock, observed: WallClock) -> timedelta:
    return _naive_utc(target) - _naive_utc(observed)


def zoned_to_utc(fields: WallClock | str, tz_name: str) -> str:
    """
    UTC instant at which a clock in tz_name shows the given fields.

    Inverts the zone's offset function by fixed-point iteration: seed with
    the fields read as UTC, observe what the zone's clock shows at that
    guess, and shift the guess by the gap between wanted and observed
    readings. Stops on an exact match or after MAX_ITERATIONS adjustments.
    The gap spans the full date as well as the time of day, so a reading that
    lands on a neighbouring calendar day is corrected in a single step.

    Local times that do not exist (spring-forward gap) never match; the last
    guess is returned without error. Ambiguous times (fall-back overlap)
    resolve to whichever occurrence the iteration reaches first, which is
    not a stable policy callers may rely on.

    Args:
        fields: WallClock or a local YYYY-MM-DDTHH:mm[:ss] string
        tz_name: IANA timezone name

    Returns:
        ISO 8601 UTC string with 'Z' suffix

    Raises:
        ValueError: If the zone is unknown
    """
    zone = get_zone(tz_name)
    if isinstance(fields, str):
        fields = WallClock.parse(fields)

    guess = _naive_utc(fields)
    for _ in range(MAX_ITERATIONS):
        observed = WallClock.from_datetime(guess.astimezone(zone))
        if observed == fields:
            return format_utc_iso(guess)
        guess = guess + _clock_delta(fields, observed)

    return format_utc_iso(guess)


def format_for_timezone(
    instant: datetime | str,
    tz_name: str,
    mode: DisplayFormat | str = DisplayFormat.DATETIME,
) -> str:
    """
    Render an instant for display in tz_name.

    Layouts: date "YYYY-MM-DD", time "HH:MM", datetime "YYYY-MM-DD HH:MM".
    """
    mode = DisplayFormat(mode)
    clock = to_zoned(instant, tz_name)
    date_text = f"{clock.year:04d}-{clock.month:02d}-{clock.day:02d}"
    time_text = f"{clock.hour:02d}:{clock.minute:02d}"

    if mode is DisplayFormat.DATE:
        return date_text
    if mode is DisplayFormat.TIME:
        return time_text
    return f"{date_text} {time_text}"
