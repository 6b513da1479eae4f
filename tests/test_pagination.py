"""Tests for the pagination walker.

Verifies that ``fetch_all_rows`` drains cursor-style and offset-style
row pages into one list, passes the right page token on each request,
and discards partial results when a page fetch fails.
"""

from unittest.mock import AsyncMock

import pytest

from hubdb_sync.errors import TransportError
from hubdb_sync.table.models import PageToken, Row
from hubdb_sync.table.pagination import _next_page, fetch_all_rows


def _make_paged_client(pages: list[dict]) -> AsyncMock:
    """Create an AsyncMock client whose fetch_rows returns ``pages`` in order."""
    client = AsyncMock()
    client.fetch_rows = AsyncMock(side_effect=list(pages))
    return client


def _rows(*ids: int) -> list[dict]:
    return [{"id": str(i), "path": f"/row-{i}", "values": {}} for i in ids]


# ==================================================================
# Test Group 1: Cursor-style pages
# ==================================================================


class TestCursorPagination:
    """Pages shaped as ``{results, paging.next.after}``."""

    async def test_two_pages_merged(self) -> None:
        """A page with a cursor then a page without yields both pages' rows."""
        client = _make_paged_client([
            {"results": _rows(1, 2, 3), "paging": {"next": {"after": "3"}}},
            {"results": _rows(4, 5)},
        ])

        rows = await fetch_all_rows(client, 123, "456")

        assert len(rows) == 3 + 2
        assert [r.id for r in rows] == ["1", "2", "3", "4", "5"]
        assert all(isinstance(r, Row) for r in rows)

    async def test_cursor_passed_to_next_request(self) -> None:
        """The ``after`` token of one page is sent with the next request."""
        client = _make_paged_client([
            {"results": _rows(1), "paging": {"next": {"after": "abc"}}},
            {"results": _rows(2), "paging": {}},
        ])

        await fetch_all_rows(client, 123, "456")

        first, second = client.fetch_rows.await_args_list
        assert first.args == (123, "456", None)
        assert second.args == (123, "456", PageToken(after="abc"))

    async def test_single_page_without_paging(self) -> None:
        """A page with no ``paging`` key ends the walk after one request."""
        client = _make_paged_client([{"results": _rows(1, 2)}])

        rows = await fetch_all_rows(client, 123, "456")

        assert len(rows) == 2
        assert client.fetch_rows.await_count == 1

    async def test_empty_table(self) -> None:
        """An empty first page returns an empty list."""
        client = _make_paged_client([{"results": []}])

        assert await fetch_all_rows(client, 123, "456") == []

    async def test_null_after_ends_walk(self) -> None:
        """``paging.next.after`` of ``None`` is treated as absent."""
        client = _make_paged_client([
            {"results": _rows(1), "paging": {"next": {"after": None}}},
        ])

        rows = await fetch_all_rows(client, 123, "456")

        assert len(rows) == 1
        assert client.fetch_rows.await_count == 1


# ==================================================================
# Test Group 2: Offset-style pages
# ==================================================================


class TestOffsetPagination:
    """Pages shaped as ``{objects, total}``."""

    async def test_walks_until_total(self) -> None:
        """Requests continue with a growing offset until count reaches total."""
        client = _make_paged_client([
            {"objects": _rows(1, 2), "total": 5},
            {"objects": _rows(3, 4), "total": 5},
            {"objects": _rows(5), "total": 5},
        ])

        rows = await fetch_all_rows(client, 123, "456")

        assert len(rows) == 5
        offsets = [call.args[2] for call in client.fetch_rows.await_args_list]
        assert offsets == [None, PageToken(offset=2), PageToken(offset=4)]

    async def test_single_page_covers_total(self) -> None:
        """One page holding all rows ends the walk."""
        client = _make_paged_client([{"objects": _rows(1, 2), "total": 2}])

        rows = await fetch_all_rows(client, 123, "456")

        assert len(rows) == 2
        assert client.fetch_rows.await_count == 1

    async def test_empty_page_stops_short_total(self) -> None:
        """An empty page ends the walk even when total claims more rows."""
        client = _make_paged_client([
            {"objects": _rows(1), "total": 10},
            {"objects": [], "total": 10},
        ])

        rows = await fetch_all_rows(client, 123, "456")

        assert len(rows) == 1
        assert client.fetch_rows.await_count == 2


# ==================================================================
# Test Group 3: Failures
# ==================================================================


class TestPaginationFailures:
    """Errors abort the walk."""

    async def test_page_failure_propagates(self) -> None:
        """A TransportError on page 2 propagates; nothing is returned."""
        client = AsyncMock()
        client.fetch_rows = AsyncMock(side_effect=[
            {"results": _rows(1), "paging": {"next": {"after": "1"}}},
            TransportError("boom", status_code=500),
        ])

        with pytest.raises(TransportError):
            await fetch_all_rows(client, 123, "456")

    async def test_unknown_shape_raises(self) -> None:
        """A response with neither ``results`` nor ``objects`` is rejected."""
        client = _make_paged_client([{"rows": []}])

        with pytest.raises(ValueError, match="Unrecognized row page shape"):
            await fetch_all_rows(client, 123, "456")


class TestNextPage:
    """Unit tests for ``_next_page``."""

    def test_cursor_token_is_string(self) -> None:
        """Numeric cursors are carried as strings."""
        _, token = _next_page({"results": [], "paging": {"next": {"after": 50}}}, 0)
        assert token == PageToken(after="50")

    def test_offset_uses_running_count(self) -> None:
        """The next offset is the rows seen so far plus this page."""
        _, token = _next_page({"objects": _rows(1, 2), "total": 10}, 4)
        assert token == PageToken(offset=6)
