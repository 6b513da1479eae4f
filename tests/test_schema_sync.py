"""Tests for the table schema synchronizer."""

from unittest.mock import AsyncMock

import pytest

from hubdb_sync.errors import SchemaSyncError, TransportError
from hubdb_sync.table.models import CanonicalDocument, Row
from hubdb_sync.table.schema_sync import create_or_update


def _document() -> CanonicalDocument:
    return CanonicalDocument(
        name="events",
        label="Events",
        use_for_pages=True,
        columns=[{"name": "title", "label": "Title", "type": "TEXT"}],
        rows=[Row(path="/a", values={"title": "A"})],
    )


class TestCreate:
    """table_id=None creates a table."""

    async def test_create_strips_rows(self) -> None:
        """The submitted schema has no rows."""
        client = AsyncMock()
        client.create_table.return_value = {
            "id": 42,
            "columns": [{"id": "1", "name": "title", "type": "TEXT"}],
        }

        await create_or_update(client, 123, None, _document())

        schema = client.create_table.await_args.args[1]
        assert "rows" not in schema
        assert schema["name"] == "events"
        assert schema["useForPages"] is True
        assert schema["columns"] == [{"name": "title", "label": "Title", "type": "TEXT"}]
        client.update_table.assert_not_awaited()

    async def test_create_returns_ids(self) -> None:
        """The new table id and column ids come back for row sync."""
        client = AsyncMock()
        client.create_table.return_value = {
            "id": 42,
            "columns": [{"id": "1", "name": "title"}],
        }

        result = await create_or_update(client, 123, None, _document())

        assert result.id == "42"
        assert [(c.id, c.name) for c in result.columns] == [("1", "title")]

    async def test_create_without_id_fails(self) -> None:
        client = AsyncMock()
        client.create_table.return_value = {"columns": []}

        with pytest.raises(SchemaSyncError, match="no table id"):
            await create_or_update(client, 123, None, _document())

    async def test_create_transport_error_wrapped(self) -> None:
        client = AsyncMock()
        client.create_table.side_effect = TransportError("400 bad", status_code=400)

        with pytest.raises(SchemaSyncError, match="Failed to create table 'events'") as exc_info:
            await create_or_update(client, 123, None, _document())

        assert isinstance(exc_info.value.__cause__, TransportError)


class TestUpdate:
    """An existing table_id updates the schema."""

    async def test_update_submits_schema(self) -> None:
        client = AsyncMock()
        client.update_table.return_value = {
            "id": "456",
            "columns": [{"id": "1", "name": "title"}, {"id": "2", "name": "new"}],
        }

        result = await create_or_update(client, 123, "456", _document())

        args = client.update_table.await_args.args
        assert args[:2] == (123, "456")
        assert "rows" not in args[2]
        client.create_table.assert_not_awaited()
        assert [c.name for c in result.columns] == ["title", "new"]

    async def test_update_keeps_table_id_when_response_omits_it(self) -> None:
        client = AsyncMock()
        client.update_table.return_value = {"columns": []}

        result = await create_or_update(client, 123, "456", _document())

        assert result.id == "456"
        assert result.columns == []

    async def test_update_failure_is_fatal(self) -> None:
        client = AsyncMock()
        client.update_table.side_effect = TransportError("404", status_code=404)

        with pytest.raises(SchemaSyncError, match="Failed to update table"):
            await create_or_update(client, 123, "456", _document())
