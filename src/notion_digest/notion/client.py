"""
Notion API client for Notion Digest.
"""

from typing import Dict, List, Any, Optional
import httpx
from loguru import logger
from notion_client import Client
from notion_client.errors import HTTPResponseError, RequestTimeoutError

from .schema import SchemaDescriptor

NOTION_VERSION = "2022-06-28"


class NotionAPIError(Exception):
    """
    A Notion request failed.

    Carries the HTTP status (None for timeouts and connection failures) and
    the raw response body.
    """

    def __init__(self, status: Optional[int], body: str):
        self.status = status
        self.body = body
        super().__init__(f"Notion API Error {status}: {body}")


class NotionClient:
    """
    Client for interacting with Notion API.

    Wraps the official SDK for the handful of calls this project makes:
    schema reads, database queries, page creation and archiving. Every
    failure is raised as ``NotionAPIError``; callers decide whether to
    record it or log and carry on.
    """

    def __init__(self, api_key: str, timeout: int = 30, sdk: Optional[Client] = None):
        """
        Initialize Notion client.

        Args:
            api_key: Notion integration token
            timeout: Request timeout in seconds
            sdk: Preconfigured SDK client (optional)
        """
        self.api_key = api_key
        self.notion = sdk or Client(auth=api_key, notion_version=NOTION_VERSION, timeout_ms=timeout * 1000)

    def _call(self, description: str, func, *args, **kwargs) -> Dict[str, Any]:
        try:
            response = func(*args, **kwargs)
        except HTTPResponseError as e:
            logger.debug(f"Notion {description} failed with {e.status}")
            raise NotionAPIError(e.status, e.body) from e
        except RequestTimeoutError as e:
            logger.debug(f"Notion {description} timed out")
            raise NotionAPIError(None, str(e)) from e
        except httpx.HTTPError as e:
            logger.debug(f"Notion {description} could not connect: {e}")
            raise NotionAPIError(None, str(e)) from e
        return response or {}

    def retrieve_database(self, database_id: str) -> Dict[str, Any]:
        """
        Retrieve a database object, including its property schema.

        Args:
            database_id: ID of the Notion database

        Returns:
            Database object
        """
        return self._call("database retrieve", self.notion.databases.retrieve, database_id=database_id)

    def get_schema(self, database_id: str) -> SchemaDescriptor:
        """
        Fetch the property types of a database.

        Args:
            database_id: ID of the Notion database

        Returns:
            Schema descriptor
        """
        schema = SchemaDescriptor.from_database(self.retrieve_database(database_id))
        logger.debug(f"Database {database_id} schema: {schema}")
        return schema

    def query_database(self, database_id: str, filter: Optional[Dict[str, Any]] = None,
                       sorts: Optional[List[Dict[str, Any]]] = None,
                       page_size: Optional[int] = None) -> List[Dict[str, Any]]:
        """
        Query one page of results from a Notion database.

        Args:
            database_id: ID of the Notion database
            filter: Notion filter object
            sorts: Notion sort objects
            page_size: Maximum number of results

        Returns:
            List of page objects
        """
        body: Dict[str, Any] = {}
        if filter:
            body["filter"] = filter
        if sorts:
            body["sorts"] = sorts
        if page_size:
            body["page_size"] = page_size

        response = self._call(
            "database query",
            self.notion.request,
            path=f"databases/{database_id}/query",
            method="POST",
            body=body,
        )
        results = response.get("results")
        return results if isinstance(results, list) else []

    def create_page(self, database_id: str, properties: Dict[str, Any]) -> Dict[str, Any]:
        """
        Create a page in a database.

        Args:
            database_id: Parent database ID
            properties: Page properties

        Returns:
            Created page object
        """
        page = self._call(
            "page create",
            self.notion.pages.create,
            parent={"database_id": database_id},
            properties=properties,
        )
        logger.debug(f"Created page {page.get('id')}")
        return page

    def archive_page(self, page_id: str) -> Dict[str, Any]:
        """
        Archive (soft-delete) a page.

        Args:
            page_id: ID of the Notion page

        Returns:
            Updated page object
        """
        page = self._call("page archive", self.notion.pages.update, page_id=page_id, archived=True)
        logger.debug(f"Archived page {page_id}")
        return page
