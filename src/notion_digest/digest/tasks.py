"""
Fetch the tasks scheduled on a given day.
"""

from datetime import date, datetime
from typing import Any, Dict, List, Union
from loguru import logger

from ..notion.client import NotionAPIError, NotionClient
from ..notion.columns import ColumnMapping
from ..utils.config import Config
from ..utils.timeutil import day_bounds


def build_day_filter(target: Union[date, datetime], mapping: ColumnMapping) -> Dict[str, Any]:
    """Filter for pages whose date falls on the Asia/Tokyo day of ``target``."""
    start, next_start = day_bounds(target)
    return {
        "and": [
            {"property": mapping.date, "date": {"on_or_after": start}},
            {"property": mapping.date, "date": {"before": next_start}},
        ]
    }


def fetch_tasks_for_date(client: NotionClient, config: Config, mapping: ColumnMapping,
                         target: Union[date, datetime]) -> List[Dict[str, Any]]:
    """
    Query the pages dated on one calendar day.

    Missing configuration or a failed query is logged and yields no tasks.

    Args:
        client: Notion client
        config: Configuration providing the database ID and token
        mapping: Column mapping
        target: Day to fetch

    Returns:
        Page objects in query order
    """
    if not config.database_id:
        logger.error("DATABASE_ID is not set")
        return []
    if not config.notion_api_token:
        logger.error("NOTION_API_TOKEN is not set")
        return []

    query_filter = build_day_filter(target, mapping)
    bounds = query_filter["and"]
    logger.info(
        f"Filter: on_or_after={bounds[0]['date']['on_or_after']} "
        f"before={bounds[1]['date']['before']} (prop={mapping.date})"
    )

    try:
        return client.query_database(config.database_id, filter=query_filter)
    except NotionAPIError as e:
        logger.error(f"Error querying Notion database: {e}")
        return []
