"""Timestamp formatting for display.

Upstream sources emit login timestamps in either seconds or milliseconds.
Values below one trillion are treated as seconds and scaled to milliseconds;
anything else is already milliseconds.

Instants are renderable up to +/-8.64e15 ms from the epoch, the same range a
browser Date accepts. Python's datetime stops at year 9999, so later instants
are shifted back by whole 400-year Gregorian cycles before formatting and the
year is restored in the output.
"""

import math
import re
from datetime import datetime, timedelta, timezone as dt_timezone
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from app.config import settings

PLACEHOLDER = "-"
INVALID_DATE = "Invalid Date"
SECONDS_THRESHOLD = 1_000_000_000_000
MAX_INSTANT_MS = 8_640_000_000_000_000

_EPOCH = datetime(1970, 1, 1, tzinfo=dt_timezone.utc)
# 400 Gregorian years; same weekday and leap pattern on both ends
_CYCLE_YEARS = 400
_CYCLE_MS = 146_097 * 86_400_000
_NATIVE_UPPER_MS = (datetime(9000, 1, 1, tzinfo=dt_timezone.utc) - _EPOCH) // timedelta(milliseconds=1)
_NATIVE_LOWER_MS = (datetime(1000, 1, 1, tzinfo=dt_timezone.utc) - _EPOCH) // timedelta(milliseconds=1)
_YEAR_DIRECTIVE = re.compile(r"%[%Y]")


def to_milliseconds(value: float) -> float:
    """Normalize a seconds-or-milliseconds epoch value to milliseconds."""
    return value * 1000 if value < SECONDS_THRESHOLD else value


def _resolve_zone(name: str) -> dt_timezone | ZoneInfo:
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        return dt_timezone.utc


def _with_year(fmt: str, year: int) -> str:
    return _YEAR_DIRECTIVE.sub(lambda m: "%%" if m.group() == "%%" else str(year), fmt)


def format_timestamp(
    value: float | None,
    *,
    timezone: str | None = None,
    fmt: str | None = None,
) -> str:
    """Format an epoch timestamp for humans. Returns "-" when the value is absent or 0."""
    if not value:
        return PLACEHOLDER

    millis = to_milliseconds(value)
    if math.isnan(millis) or abs(millis) > MAX_INSTANT_MS:
        return INVALID_DATE

    cycles = 0
    if millis > _NATIVE_UPPER_MS:
        cycles = math.ceil((millis - _NATIVE_UPPER_MS) / _CYCLE_MS)
    elif millis < _NATIVE_LOWER_MS:
        cycles = -math.ceil((_NATIVE_LOWER_MS - millis) / _CYCLE_MS)
    moment = _EPOCH + timedelta(milliseconds=millis - cycles * _CYCLE_MS)
    moment = moment.astimezone(_resolve_zone(timezone or settings.display_timezone))

    pattern = fmt or settings.timestamp_format
    if cycles:
        pattern = _with_year(pattern, moment.year + cycles * _CYCLE_YEARS)
    return moment.strftime(pattern)
