"""Utility modules for cross-cutting concerns."""

from utils.timezone import (
    DisplayFormat,
    WallClock,
    common_timezones,
    format_for_timezone,
    format_utc_iso,
    is_valid_timezone,
    now_utc,
    parse_iso,
    to_utc,
    to_zoned,
    zoned_to_utc,
)
from utils.user_context import (
    get_current_user_id,
    set_current_user_id,
    clear_current_user_id,
    user_context,
)
from utils.cache import TTLCache
