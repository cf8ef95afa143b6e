"""
Map generic JSON rows onto Notion page properties.
"""

from typing import Any, Dict, Mapping, Optional
from loguru import logger

from .columns import ColumnMapping
from .schema import FieldType, SchemaDescriptor
from ..utils.timeutil import to_canonical

DEFAULT_STATUS = "Not Started"


def build_date_property(value: Any) -> Dict[str, Any]:
    """
    Build a Notion date property from a row's ``date`` value.

    Args:
        value: Falsy (clears the date), ``{"start", "end", "time_zone"}`` mapping,
            or a scalar date-like value

    Returns:
        Property value such as ``{"date": {"start": "2025-09-08T19:00:00+09:00"}}``
    """
    if not value:
        return {"date": None}

    if isinstance(value, Mapping) and ("start" in value or "end" in value):
        start = value.get("start")
        end = value.get("end")
        payload = {
            "start": to_canonical(start) if start else None,
            "end": to_canonical(end) if end else None,
        }
        time_zone = value.get("time_zone")
        if isinstance(time_zone, str) and time_zone:
            payload["time_zone"] = time_zone
        return {"date": payload}

    return {"date": {"start": to_canonical(value)}}


def status_property_key(mapping: ColumnMapping, schema: Optional[SchemaDescriptor]) -> str:
    """Notion property type to use for the status value: ``select`` or ``status``."""
    if schema is not None and schema.type_of(mapping.status) is FieldType.SELECT:
        return FieldType.SELECT.value
    return FieldType.STATUS.value


def build_properties(row: Mapping[str, Any], mapping: ColumnMapping,
                     schema: Optional[SchemaDescriptor] = None) -> Dict[str, Any]:
    """
    Convert a generic row into a Notion ``properties`` payload.

    The title is always written. The date is written only when the row has a
    ``date`` key; a falsy value clears it. The status defaults to
    ``"Not Started"`` and is encoded as ``select`` or ``status`` depending on
    the database schema (``status`` when unknown).

    Args:
        row: Generic row, e.g. ``{"title": "Standup", "date": "2025-09-08 10:00"}``
        mapping: Column mapping
        schema: Database schema, if available

    Returns:
        Properties keyed by Notion property name

    Raises:
        TypeError: If ``row`` is not a mapping
        ValueError: If a date string cannot be parsed
    """
    if not isinstance(row, Mapping):
        raise TypeError(f"Row must be a JSON object, got {type(row).__name__}")

    title = row.get("title")
    properties: Dict[str, Any] = {
        mapping.title: {
            "title": [{"type": "text", "text": {"content": "" if title is None else str(title)}}]
        }
    }

    if "date" in row:
        properties[mapping.date] = build_date_property(row["date"])

    status = row.get("status")
    if status is None:
        status = DEFAULT_STATUS
    status_key = status_property_key(mapping, schema)
    properties[mapping.status] = {status_key: {"name": str(status)}}

    logger.debug(f"Built properties for '{title}': {list(properties)} (status as {status_key})")
    return properties
