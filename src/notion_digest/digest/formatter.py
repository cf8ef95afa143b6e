"""
Render a day's tasks as a Discord message.
"""

import math
from datetime import date, datetime
from typing import Any, Dict, List, Optional, Sequence, Union

import pytz

from ..notion.columns import ColumnMapping
from ..utils.timeutil import JST, format_display, is_date_only, parse_absolute

UNTITLED = "(untitled)"
DATE_NOT_SET = "(date not set)"
TIME_NOT_SET = "(time not set)"
NO_TASKS = "No tasks."


def record_start(record: Dict[str, Any], mapping: ColumnMapping) -> Optional[str]:
    """Start value of a page's date property, if any."""
    prop = (record.get("properties") or {}).get(mapping.date) or {}
    return (prop.get("date") or {}).get("start") or None


def record_title(record: Dict[str, Any], mapping: ColumnMapping) -> str:
    prop = (record.get("properties") or {}).get(mapping.title) or {}
    fragments = prop.get("title") or []
    text = fragments[0].get("plain_text") if fragments else None
    return UNTITLED if text is None else text


def _sort_key(record: Dict[str, Any], mapping: ColumnMapping) -> float:
    start = record_start(record, mapping)
    if not start:
        return math.inf
    try:
        if is_date_only(start):
            # Date-only starts sort as UTC midnight (09:00 in Tokyo)
            return pytz.utc.localize(datetime.strptime(start.strip(), "%Y-%m-%d")).timestamp()
        return parse_absolute(start).timestamp()
    except (ValueError, OverflowError):
        return math.inf


def sort_records(records: Sequence[Dict[str, Any]], mapping: ColumnMapping) -> List[Dict[str, Any]]:
    """
    Order pages by date start, earliest first.

    Pages without a start go last. The sort is stable, so ties keep their
    input order.
    """
    return sorted(records, key=lambda record: _sort_key(record, mapping))


def format_start(start: Optional[str]) -> str:
    if not start:
        return DATE_NOT_SET
    if "T" not in start:
        return TIME_NOT_SET
    try:
        return format_display(start)
    except (ValueError, OverflowError):
        return start


def format_header(target: Union[date, datetime]) -> str:
    if isinstance(target, datetime):
        target = (target if target.tzinfo else JST.localize(target)).astimezone(JST).date()
    return f"**{target.strftime('%Y/%m/%d')} tasks (chronological):**\n"


def render_digest(records: Sequence[Dict[str, Any]], target: Union[date, datetime],
                  mapping: ColumnMapping) -> str:
    """
    Build the digest message for one day.

    Args:
        records: Page objects from the database query
        target: Day the digest covers
        mapping: Column mapping

    Returns:
        Message text: a bold header, then one numbered line per task, e.g.
        ``1. **Standup**\\t2025/09/08 10:00``
    """
    message = format_header(target)

    if not records:
        return message + NO_TASKS

    for number, record in enumerate(sort_records(records, mapping), start=1):
        title = record_title(record, mapping)
        when = format_start(record_start(record, mapping))
        message += f"{number}. **{title}**\t{when}\n"

    return message
