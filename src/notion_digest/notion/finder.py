"""
Locate existing pages that correspond to a generic row.
"""

from typing import Any, Dict, List, Mapping, Optional
from loguru import logger

from .columns import ColumnMapping
from ..utils.timeutil import add_minutes, to_canonical

# Width of the date window used when a row gives only a start. Covers
# sub-minute differences between the stored value and the row.
MATCH_TOLERANCE_MINUTES = 1

MAX_MATCHES = 100


def build_match_filter(row: Mapping[str, Any], mapping: ColumnMapping,
                       tolerance_minutes: int = MATCH_TOLERANCE_MINUTES) -> Optional[Dict[str, Any]]:
    """
    Build a query filter matching pages with the row's title (and date).

    Args:
        row: Generic row
        mapping: Column mapping
        tolerance_minutes: Window width when the row has no explicit end

    Returns:
        Compound ``and`` filter, or None when the row has no title and so
        cannot match anything
    """
    title = row.get("title")
    title = "" if title is None else str(title).strip()
    if not title:
        return None

    conditions: List[Dict[str, Any]] = [{"property": mapping.title, "title": {"equals": title}}]

    value = row.get("date")
    if value:
        is_range = isinstance(value, Mapping)
        lower = to_canonical(value.get("start") if is_range else value)
        if is_range and value.get("end"):
            upper = to_canonical(value["end"])
        else:
            upper = add_minutes(lower, tolerance_minutes)

        conditions.append({"property": mapping.date, "date": {"on_or_after": lower}})
        conditions.append({"property": mapping.date, "date": {"before": upper}})

    return {"and": conditions}


def find_page_ids(client, database_id: str, row: Mapping[str, Any], mapping: ColumnMapping,
                  tolerance_minutes: int = MATCH_TOLERANCE_MINUTES) -> List[str]:
    """
    Find the IDs of all pages matching a row.

    Args:
        client: ``NotionClient``
        database_id: Database to search
        row: Generic row
        mapping: Column mapping
        tolerance_minutes: Window width when the row has no explicit end

    Returns:
        Page IDs in query order; empty without querying when the row is untitled

    Raises:
        NotionAPIError: If the query fails
    """
    query_filter = build_match_filter(row, mapping, tolerance_minutes)
    if query_filter is None:
        logger.debug("Row has no title, skipping lookup")
        return []

    results = client.query_database(database_id, filter=query_filter, page_size=MAX_MATCHES)
    page_ids = [page["id"] for page in results if page.get("id")]
    logger.debug(f"Found {len(page_ids)} page(s) matching '{row.get('title')}'")
    return page_ids
