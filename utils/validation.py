"""Structural input checks run before anything reaches the conversion engine.

Every predicate is total: bad input of any type returns False, never raises.
"""

import html
import re
from datetime import datetime, timezone
from typing import Any

from utils.timezone import is_valid_timezone

MAX_DESCRIPTION_LENGTH = 5000
DEFAULT_MAX_STRING_LENGTH = 1000

# Any zone offset applied to years in this range stays inside datetime's range
MIN_YEAR = 2
MAX_YEAR = 9998

_DATETIME_RE = re.compile(
    r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}(\.\d{1,6})?(Z|[+-]\d{2}:\d{2})?$",
    re.ASCII,
)
_DATETIME_LOCAL_RE = re.compile(r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}$", re.ASCII)
_DISCORD_ID_RE = re.compile(r"^\d{17,19}$", re.ASCII)
_USERNAME_RE = re.compile(r"^[A-Za-z0-9_-]{2,32}$", re.ASCII)
_EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$", re.ASCII)

__all__ = [
    "MAX_DESCRIPTION_LENGTH",
    "escape_html",
    "is_valid_date_range",
    "is_valid_datetime",
    "is_valid_datetime_local",
    "is_valid_description",
    "is_valid_discord_id",
    "is_valid_email",
    "is_valid_id",
    "is_valid_time_range",
    "is_valid_timezone",
    "is_valid_username",
    "parse_instant",
    "sanitize_string",
]


def parse_instant(value: Any) -> datetime | None:
    """
    Parse a strict-form datetime to an aware UTC datetime.

    Zone-less values are read as UTC. Returns None when the value is not
    strict form, names an impossible calendar date, or falls outside
    MIN_YEAR..MAX_YEAR.
    """
    if not isinstance(value, str) or not _DATETIME_RE.fullmatch(value):
        return None
    try:
        dt = datetime.fromisoformat(value)
        if not MIN_YEAR <= dt.year <= MAX_YEAR:
            return None
        if dt.tzinfo is None:
            dt = dt.replace(tzinfo=timezone.utc)
        return dt.astimezone(timezone.utc)
    except (ValueError, OverflowError):
        return None


def is_valid_datetime(value: Any) -> bool:
    """YYYY-MM-DDTHH:mm:ss, optional fraction and 'Z'/'±HH:mm' suffix, real date."""
    return parse_instant(value) is not None


def is_valid_datetime_local(value: Any) -> bool:
    """
    Exactly YYYY-MM-DDTHH:mm, as emitted by <input type="datetime-local">.

    Seconds and zone suffixes are rejected: the zone travels separately.
    """
    if not isinstance(value, str) or not _DATETIME_LOCAL_RE.fullmatch(value):
        return False
    try:
        dt = datetime.fromisoformat(value)
    except ValueError:
        return False
    return MIN_YEAR <= dt.year <= MAX_YEAR


def is_valid_time_range(start: Any, end: Any) -> bool:
    """Both endpoints valid and end strictly after start."""
    start_dt = parse_instant(start)
    end_dt = parse_instant(end)
    if start_dt is None or end_dt is None:
        return False
    return end_dt > start_dt


def is_valid_date_range(start: Any, end: Any) -> bool:
    """Optional query bounds: each valid if present, and end >= start when both are."""
    start_dt = parse_instant(start) if start else None
    end_dt = parse_instant(end) if end else None

    if start and start_dt is None:
        return False
    if end and end_dt is None:
        return False
    if start_dt is not None and end_dt is not None:
        return end_dt >= start_dt
    return True


def is_valid_description(value: Any) -> bool:
    if value is None:
        return True
    if not isinstance(value, str):
        return False
    return len(value) <= MAX_DESCRIPTION_LENGTH


def is_valid_id(value: Any) -> bool:
    """Positive integer, or a whole-valued float or digit string naming one."""
    if isinstance(value, bool):
        return False
    if isinstance(value, int):
        return value > 0
    if isinstance(value, float):
        return value.is_integer() and value > 0
    if isinstance(value, str):
        text = value.strip()
        return text.isascii() and text.isdigit() and int(text) > 0
    return False


def is_valid_discord_id(value: Any) -> bool:
    """Discord snowflake: 17-19 digits."""
    return isinstance(value, str) and bool(_DISCORD_ID_RE.fullmatch(value))


def is_valid_username(value: Any) -> bool:
    return isinstance(value, str) and bool(_USERNAME_RE.fullmatch(value))


def is_valid_email(value: Any) -> bool:
    return isinstance(value, str) and bool(_EMAIL_RE.fullmatch(value))


def sanitize_string(value: Any, max_length: int = DEFAULT_MAX_STRING_LENGTH) -> str:
    """
    Strip '<' and '>', trim whitespace, truncate to max_length.

    This is not HTML escaping. Use escape_html() for markup contexts.
    Non-string input yields "".
    """
    if not isinstance(value, str):
        return ""
    sanitized = value.replace("<", "").replace(">", "").strip()
    return sanitized[:max_length]


def escape_html(value: str | None) -> str | None:
    """Entity-escape &, <, >, and both quote characters."""
    if value is None:
        return None
    return html.escape(value, quote=True)
