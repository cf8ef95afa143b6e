"""
Time normalization for Notion writes and query filters.

Every timestamp sent to Notion is rendered in a single canonical form,
``YYYY-MM-DDTHH:MM:SS+09:00``, expressed in Asia/Tokyo (UTC+9).
"""

import re
from datetime import date, datetime, timedelta
from typing import Any, Dict, Optional, Tuple, Union

import pytz
from dateutil import parser as date_parser
from loguru import logger

TIMEZONE_NAME = "Asia/Tokyo"
JST = pytz.timezone(TIMEZONE_NAME)

DISPLAY_FORMAT = "%Y/%m/%d %H:%M"

_OFFSET_SUFFIX = re.compile(r"(Z|[+-]\d{2}:?\d{2})$")
_WALL_CLOCK = re.compile(r"^(\d{4})[-/](\d{2})[-/](\d{2})[ T](\d{2}):(\d{2})$")
_DATE_ONLY = re.compile(r"^(\d{4})[-/](\d{2})[-/](\d{2})$")


def _localize(dt: datetime) -> datetime:
    """Attach Asia/Tokyo to a naive datetime, or convert an aware one."""
    if dt.tzinfo is None:
        return JST.localize(dt)
    return dt.astimezone(JST)


def _render(dt: datetime) -> str:
    return _localize(dt).isoformat(timespec="seconds")


def _to_datetime(value: Any) -> datetime:
    """
    Resolve a date-like value to an aware datetime in Asia/Tokyo.

    Raises:
        ValueError: If a string cannot be parsed at all
    """
    if isinstance(value, datetime):
        return _localize(value)

    if isinstance(value, date):
        return JST.localize(datetime(value.year, value.month, value.day))

    if isinstance(value, str):
        s = value.strip()

        # Explicit zone: an absolute instant, only relabeled
        if _OFFSET_SUFFIX.search(s):
            return _localize(date_parser.parse(s))

        match = _WALL_CLOCK.match(s)
        if match:
            year, month, day, hour, minute = (int(part) for part in match.groups())
            return JST.localize(datetime(year, month, day, hour, minute))

        match = _DATE_ONLY.match(s)
        if match:
            year, month, day = (int(part) for part in match.groups())
            return JST.localize(datetime(year, month, day))

        try:
            return _localize(date_parser.parse(s))
        except (ValueError, OverflowError) as e:
            raise ValueError(f"Unrecognized date value: {value!r}") from e

    logger.debug(f"Non-date value {value!r}, falling back to the current time")
    return datetime.now(JST)


def to_canonical(value: Any) -> str:
    """
    Normalize a date-like value to a canonical ``+09:00`` timestamp.

    Accepted inputs:
      - ``datetime`` (naive values are read as Asia/Tokyo wall clock) and ``date``
      - strings ending in ``Z``, ``+HH:MM`` or ``+HHMM``: converted to Asia/Tokyo
      - ``YYYY-MM-DD HH:MM`` / ``YYYY/MM/DD HH:MM`` (or ``T``): Asia/Tokyo wall clock
      - ``YYYY-MM-DD`` / ``YYYY/MM/DD``: Asia/Tokyo midnight
      - any other string: parsed with dateutil
    Anything that is not a date or a string (``None``, numbers) yields the
    current time.

    Args:
        value: Date-like input

    Returns:
        Timestamp string such as ``2025-09-08T19:00:00+09:00``

    Raises:
        ValueError: If a string is not recognizable as a date
    """
    return _render(_to_datetime(value))


def parse_absolute(value: str) -> datetime:
    """
    Parse an ISO timestamp into an aware datetime.

    Naive timestamps (e.g. Notion date-only values) are read as Asia/Tokyo.
    """
    return _localize(date_parser.isoparse(value.strip()))


def add_minutes(canonical: str, minutes: int) -> str:
    """Shift a canonical timestamp by a number of minutes."""
    return _render(parse_absolute(canonical) + timedelta(minutes=minutes))


def format_display(value: str) -> str:
    """Render a stored timestamp as ``yyyy/MM/dd HH:mm`` in Asia/Tokyo."""
    return parse_absolute(value).strftime(DISPLAY_FORMAT)


def day_bounds(target: Union[date, datetime]) -> Tuple[str, str]:
    """
    Get the canonical bounds of the Asia/Tokyo calendar day containing ``target``.

    Returns:
        ``(start, next_start)``: midnight of that day and midnight of the next,
        suitable for ``on_or_after`` / ``before`` filters
    """
    if isinstance(target, datetime):
        day = _localize(target).date()
    else:
        day = target
    start = JST.localize(datetime(day.year, day.month, day.day))
    next_start = JST.localize(datetime(day.year, day.month, day.day) + timedelta(days=1))
    return _render(start), _render(next_start)


def today() -> date:
    """Current calendar date in Asia/Tokyo."""
    return datetime.now(JST).date()


def is_date_only(value: Any) -> bool:
    return isinstance(value, str) and bool(_DATE_ONLY.match(value.strip()))


def to_local_string(value: Any) -> str:
    """Asia/Tokyo wall clock without offset, ``YYYY-MM-DDTHH:MM:SS``."""
    return _to_datetime(value).strftime("%Y-%m-%dT%H:%M:%S")


def to_date_only(value: Any) -> str:
    """Asia/Tokyo calendar date, ``YYYY-MM-DD``."""
    return _to_datetime(value).strftime("%Y-%m-%d")


def notion_date_payload(value: Any) -> Optional[Dict[str, Any]]:
    """
    Build the alternative Notion date form: offset-free boundaries plus an
    explicit ``time_zone``. Date-only strings stay date-only.

    Args:
        value: Scalar date or ``{"start": ..., "end": ...}`` mapping

    Returns:
        Date payload, or None when ``value`` is falsy
    """
    if not value:
        return None

    def _boundary(v: Any) -> Optional[str]:
        if not v:
            return None
        return to_date_only(v) if is_date_only(v) else to_local_string(v)

    if isinstance(value, dict) and ("start" in value or "end" in value):
        return {
            "start": _boundary(value.get("start")),
            "end": _boundary(value.get("end")),
            "time_zone": TIMEZONE_NAME,
        }

    return {"start": _boundary(value), "time_zone": TIMEZONE_NAME}
