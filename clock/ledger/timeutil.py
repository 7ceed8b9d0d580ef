"""Time helpers: injected clock, UTC/local conversion, parsing and formatting.

Instants are always aware UTC datetimes. A `tz` of None means the system
local zone, which `datetime.astimezone(None)` resolves per instant, so DST
transitions are honoured for past dates too.
"""

import re
from datetime import date, datetime, time, timedelta, timezone, tzinfo
from typing import Callable

from clock.errors import TimeParseError

Clock = Callable[[], datetime]

_HHMM = re.compile(r"^(\d{1,2}):(\d{2})$")


def utc_now() -> datetime:
    """Current instant in UTC."""
    return datetime.now(timezone.utc)


def to_local(ts: datetime, tz: tzinfo | None = None) -> datetime:
    return ts.astimezone(tz)


def local_date(ts: datetime, tz: tzinfo | None = None) -> date:
    """Bucketing key: the calendar date of `ts` in the display zone."""
    return to_local(ts, tz).date()


def from_local(day: date, at: time, tz: tzinfo | None = None) -> datetime:
    """Wall-clock `day` + `at` in the display zone, as a UTC instant."""
    if tz is None:
        return datetime.combine(day, at).astimezone().astimezone(timezone.utc)
    return datetime.combine(day, at, tzinfo=tz).astimezone(timezone.utc)


def parse_clock_time(text: str) -> time:
    """Parse `HH:MM` (24h) or a bare hour `H`/`HH` into a time of day.

    Raises:
        TimeParseError: If the text matches neither format.
    """
    value = text.strip()
    match = _HHMM.match(value)
    if match:
        hour, minute = int(match.group(1)), int(match.group(2))
        if hour > 23 or minute > 59:
            raise TimeParseError(f"'{value}' is not a valid time of day")
        return time(hour, minute)

    if value.isdigit():
        hour = int(value)
        if not 0 <= hour <= 23:
            raise TimeParseError("hours have to be within 0 and 23")
        return time(hour, 0)

    raise TimeParseError(f"failed to parse '{value}', use 16 or 16:30")


def format_duration(delta: timedelta) -> str:
    """Render as `Xh Ym`; negative values clamp to zero, seconds are dropped."""
    total_minutes = max(0, int(delta.total_seconds() // 60))
    hours, minutes = divmod(total_minutes, 60)
    return f"{hours}h {minutes}m"


def format_clock(ts: datetime, tz: tzinfo | None = None) -> str:
    return to_local(ts, tz).strftime("%H:%M")
