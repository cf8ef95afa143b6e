"""
Create or archive Notion pages from submitted JSON.
"""

import json
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional
from loguru import logger

from .client import NotionAPIError, NotionClient
from .finder import find_page_ids
from .properties import build_properties
from .schema import SchemaDescriptor
from ..utils.config import Config

ACTIONS = ("create", "delete")


@dataclass
class RowResult:
    index: int
    ok: bool
    id: Optional[str] = None
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {key: value for key, value in asdict(self).items() if value is not None}


@dataclass
class SubmitResult:
    """Outcome of a batch; ``ok`` only when every row succeeded."""

    results: List[RowResult] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return all(result.ok for result in self.results)

    @property
    def count(self) -> int:
        return len(self.results)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "ok": self.ok,
            "count": self.count,
            "results": [result.to_dict() for result in self.results],
        }


def normalize_rows(json_input: Any) -> List[Any]:
    """
    Turn submitted input into a list of rows.

    Args:
        json_input: JSON text, a single object, or a list of objects

    Returns:
        List of rows (not yet validated)

    Raises:
        ValueError: If JSON text cannot be parsed
    """
    if json_input is None:
        return []
    if isinstance(json_input, (str, bytes)):
        try:
            json_input = json.loads(json_input)
        except json.JSONDecodeError as e:
            raise ValueError(f"Could not parse JSON input: {e}") from e
    return list(json_input) if isinstance(json_input, list) else [json_input]


def _create_row(index: int, client: NotionClient, database_id: str, row: Dict[str, Any], mapping,
                schema: Optional[SchemaDescriptor]) -> RowResult:
    properties = build_properties(row, mapping, schema)
    page = client.create_page(database_id, properties)
    return RowResult(index=index, ok=True, id=page.get("id"))


def _delete_row(index: int, client: NotionClient, database_id: str, row: Dict[str, Any], mapping) -> RowResult:
    page_ids = find_page_ids(client, database_id, row, mapping)
    if not page_ids:
        return RowResult(index=index, ok=False, error="no matching record")
    for page_id in page_ids:
        client.archive_page(page_id)
    return RowResult(index=index, ok=True, id=",".join(page_ids))


def apply_json(json_input: Any, action: str = "create", config: Optional[Config] = None,
               client: Optional[NotionClient] = None) -> SubmitResult:
    """
    Create pages from, or archive pages matching, each submitted row.

    Rows are processed in order and independently; a failing row is recorded
    in its slot and never stops the batch.

    Args:
        json_input: JSON text, a single object, or a list of objects
        action: ``"create"`` or ``"delete"``
        config: Configuration (loaded from the environment if omitted)
        client: Notion client (built from ``config`` if omitted)

    Returns:
        Per-row results

    Raises:
        ConfigurationError: If the Notion token or database ID is missing
        ValueError: If ``action`` is unknown or the input is not valid JSON
    """
    if action not in ACTIONS:
        raise ValueError(f"Unknown action '{action}', expected one of {ACTIONS}")

    config = config or Config()
    config.require_notion()

    rows = normalize_rows(json_input)
    mapping = config.column_mapping()
    client = client or NotionClient(config.notion_api_token)
    database_id = config.database_id

    schema: Optional[SchemaDescriptor] = None
    if action == "create":
        try:
            schema = client.get_schema(database_id)
        except NotionAPIError as e:
            logger.warning(f"Could not read database schema, assuming status-typed field: {e}")

    logger.info(f"Applying '{action}' to {len(rows)} row(s)")
    result = SubmitResult()

    for index, row in enumerate(rows):
        try:
            if not isinstance(row, dict):
                raise TypeError(f"#{index}: not a JSON object")
            if action == "delete":
                row_result = _delete_row(index, client, database_id, row, mapping)
            else:
                row_result = _create_row(index, client, database_id, row, mapping, schema)
        except Exception as e:
            logger.error(f"Row {index} failed: {e}")
            row_result = RowResult(index=index, ok=False, error=str(e))
        result.results.append(row_result)

    logger.info(f"Batch finished: {sum(r.ok for r in result.results)}/{result.count} succeeded")
    return result


def submit_json(json_input: Any, config: Optional[Config] = None,
                client: Optional[NotionClient] = None) -> SubmitResult:
    """Create-only shortcut for ``apply_json``."""
    return apply_json(json_input, "create", config=config, client=client)
