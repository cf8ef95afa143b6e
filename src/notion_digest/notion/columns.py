"""
Column mapping between generic row keys and Notion property names.
"""

import json
from dataclasses import dataclass, fields, replace
from typing import Optional
from loguru import logger


@dataclass(frozen=True)
class ColumnMapping:
    """
    Names of the Notion properties that hold each generic field.

    ``used_default`` is True when no usable configuration was found.
    """

    title: str = "名前"
    date: str = "Date"
    status: str = "Status"
    tags: str = "Tags"
    description: str = "Description"
    url: str = "URL"
    used_default: bool = False


DEFAULT_COLUMN_MAPPING = ColumnMapping()

COLUMN_KEYS = tuple(f.name for f in fields(ColumnMapping) if f.name != "used_default")


def resolve_column_mapping(raw: Optional[str]) -> ColumnMapping:
    """
    Overlay a JSON-encoded mapping on the defaults.

    Only recognized keys are applied; a recognized key wins even when its value
    is an empty string. A missing or unparseable value yields the defaults with
    ``used_default`` set.

    Args:
        raw: JSON object text, e.g. ``{"title": "Name", "date": "Due"}``

    Returns:
        Resolved column mapping
    """
    if not raw or not raw.strip():
        return replace(DEFAULT_COLUMN_MAPPING, used_default=True)

    try:
        parsed = json.loads(raw)
    except json.JSONDecodeError as e:
        logger.warning(f"NOTION_COLUMN_MAP is not valid JSON, using defaults: {e}")
        return replace(DEFAULT_COLUMN_MAPPING, used_default=True)

    if not isinstance(parsed, dict):
        logger.warning("NOTION_COLUMN_MAP is not a JSON object, using defaults")
        return replace(DEFAULT_COLUMN_MAPPING, used_default=True)

    overrides = {key: str(parsed[key]) for key in COLUMN_KEYS if key in parsed and parsed[key] is not None}
    ignored = sorted(set(parsed) - set(COLUMN_KEYS))
    if ignored:
        logger.debug(f"Ignoring unknown column mapping keys: {ignored}")

    return replace(DEFAULT_COLUMN_MAPPING, **overrides)
