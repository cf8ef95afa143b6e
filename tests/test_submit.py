"""
Tests for batch create/delete submission.
"""

import json
from unittest.mock import MagicMock

import httpx
import pytest
from notion_digest.notion.client import NotionAPIError, NotionClient
from notion_digest.notion.schema import FieldType, SchemaDescriptor
from notion_digest.notion.submit import apply_json, normalize_rows, submit_json
from notion_digest.utils.config import Config, ConfigurationError


@pytest.fixture
def config():
    return Config(env={
        "NOTION_API_TOKEN": "secret",
        "DATABASE_ID": "db-1",
        "NOTION_COLUMN_MAP": '{"title": "Name", "date": "When", "status": "State"}',
    })


@pytest.fixture
def client():
    client = MagicMock()
    client.get_schema.return_value = SchemaDescriptor({"State": FieldType.SELECT})
    client.create_page.side_effect = lambda database_id, properties: {
        "id": "page-" + properties["Name"]["title"][0]["text"]["content"]
    }
    return client


class TestNormalizeRows:
    """Test suite for normalize_rows."""

    def test_single_object_becomes_batch(self):
        assert normalize_rows({"title": "A"}) == [{"title": "A"}]

    def test_json_text(self):
        assert normalize_rows('[{"title": "A"}, 1]') == [{"title": "A"}, 1]

    def test_invalid_json_text(self):
        with pytest.raises(ValueError):
            normalize_rows("[{")


class TestApplyJson:
    """Test suite for apply_json."""

    def test_create_batch_with_non_object_row(self, config, client):
        result = apply_json([{"title": "A"}, 42, {"title": "B"}], "create", config=config, client=client)

        assert result.count == 3
        assert not result.ok
        assert [r.index for r in result.results] == [0, 1, 2]
        assert result.results[0].ok and result.results[0].id == "page-A"
        assert not result.results[1].ok
        assert "not a JSON object" in result.results[1].error
        assert result.results[2].ok and result.results[2].id == "page-B"

    def test_create_uses_schema_and_mapping(self, config, client):
        apply_json({"title": "A", "status": "Done", "date": "2025-09-08"}, config=config, client=client)

        database_id, properties = client.create_page.call_args[0]
        assert database_id == "db-1"
        assert properties["State"] == {"select": {"name": "Done"}}
        assert properties["When"] == {"date": {"start": "2025-09-08T00:00:00+09:00"}}

    def test_failing_row_does_not_stop_batch(self, config, client):
        client.create_page.side_effect = [
            NotionAPIError(400, '{"message": "validation"}'),
            {"id": "page-2"},
        ]

        result = apply_json([{"title": "A"}, {"title": "B"}], config=config, client=client)

        assert result.results[0].error == 'Notion API Error 400: {"message": "validation"}'
        assert result.results[1].ok and result.results[1].id == "page-2"

    def test_bad_date_fails_only_its_row(self, config, client):
        result = apply_json([{"title": "A", "date": "nonsense"}, {"title": "B"}], config=config, client=client)
        assert not result.results[0].ok
        assert result.results[1].ok

    def test_schema_failure_defaults_to_status(self, config, client):
        client.get_schema.side_effect = NotionAPIError(404, "not found")

        result = apply_json({"title": "A"}, config=config, client=client)

        assert result.ok
        properties = client.create_page.call_args[0][1]
        assert properties["State"] == {"status": {"name": "Not Started"}}

    def test_unreachable_schema_defaults_to_status(self, config):
        sdk = MagicMock()
        sdk.databases.retrieve.side_effect = httpx.ConnectError("dns failure")
        sdk.pages.create.return_value = {"id": "p1"}

        result = apply_json({"title": "A"}, config=config, client=NotionClient("secret", sdk=sdk))

        assert result.ok
        assert result.results[0].id == "p1"
        properties = sdk.pages.create.call_args.kwargs["properties"]
        assert properties["State"] == {"status": {"name": "Not Started"}}

    def test_delete_archives_every_match(self, config, client):
        client.query_database.return_value = [{"id": "p1"}, {"id": "p2"}]

        result = apply_json([{"title": "A", "date": "2025-09-08 19:00"}], "delete", config=config, client=client)

        assert result.ok
        assert result.results[0].id == "p1,p2"
        assert [c[0][0] for c in client.archive_page.call_args_list] == ["p1", "p2"]
        client.create_page.assert_not_called()

    def test_delete_without_match(self, config, client):
        client.query_database.return_value = []

        result = apply_json([{"title": "A"}, {"title": ""}], "delete", config=config, client=client)

        assert [r.error for r in result.results] == ["no matching record", "no matching record"]
        assert client.query_database.call_count == 1
        client.archive_page.assert_not_called()

    def test_missing_configuration_is_fatal(self, client):
        with pytest.raises(ConfigurationError):
            apply_json([{"title": "A"}], config=Config(env={"DATABASE_ID": "db"}), client=client)
        client.get_schema.assert_not_called()
        client.create_page.assert_not_called()

    def test_unknown_action(self, config, client):
        with pytest.raises(ValueError):
            apply_json([{"title": "A"}], "update", config=config, client=client)

    def test_result_serialization(self, config, client):
        result = submit_json('[{"title": "A"}, "x"]', config=config, client=client)

        data = json.loads(json.dumps(result.to_dict()))
        assert data["ok"] is False
        assert data["count"] == 2
        assert data["results"][0] == {"index": 0, "ok": True, "id": "page-A"}
        assert set(data["results"][1]) == {"index", "ok", "error"}

    def test_empty_batch_is_ok(self, config, client):
        result = apply_json([], config=config, client=client)
        assert result.ok
        assert result.count == 0
