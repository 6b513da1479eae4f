"""HubDB client protocol definition.

Defines the ``HubDbClient`` Protocol that every data-access implementation
must satisfy.  All methods are ``async def`` -- the library is async-first.
Payloads and responses are plain dicts shaped like the HubDB JSON API.

Usage:
    from hubdb_sync.adapters.base import HubDbClient

    async def do_work(client: HubDbClient) -> None:
        table = await client.fetch_table(123, "456")
        page = await client.fetch_rows(123, "456")
        await client.publish_table(123, "456")
        await client.close()
"""

from typing import Any, Protocol

from hubdb_sync.table.models import PageToken


class HubDbClient(Protocol):
    """Data-access interface that all HubDB clients must implement.

    Every method raises ``TransportError`` when the remote call fails.
    """

    async def create_table(self, account_id: int, schema: dict[str, Any]) -> dict:
        """Create a table from a schema body (no ``rows``).

        Returns:
            The created table, including its ``id`` and ``columns`` with
            remote-assigned column ids.
        """
        ...

    async def update_table(
        self, account_id: int, table_id: str, schema: dict[str, Any]
    ) -> dict:
        """Replace the schema of an existing table.

        Returns:
            The updated table, including its current ``columns``.
        """
        ...

    async def fetch_table(self, account_id: int, table_id: str) -> dict:
        """Fetch a table's metadata and column catalog."""
        ...

    async def fetch_rows(
        self,
        account_id: int,
        table_id: str,
        page_token: PageToken | None = None,
    ) -> dict:
        """Fetch one page of rows.

        Args:
            account_id: Account (portal) id.
            table_id: Table id.
            page_token: Cursor or offset of the page to fetch.  ``None``
                fetches the first page.

        Returns:
            Either ``{"results": [...], "paging": {"next": {"after": ...}}}``
            (cursor style) or ``{"objects": [...], "total": N}`` (offset
            style).
        """
        ...

    async def create_rows(
        self, account_id: int, table_id: str, rows: list[dict[str, Any]]
    ) -> Any:
        """Create rows in one batch and return the batch result."""
        ...

    async def update_rows(
        self, account_id: int, table_id: str, rows: list[dict[str, Any]]
    ) -> Any:
        """Update rows (each carrying its ``id``) in one batch."""
        ...

    async def delete_rows(
        self, account_id: int, table_id: str, row_ids: list[Any]
    ) -> Any:
        """Delete rows by id in one batch."""
        ...

    async def publish_table(self, account_id: int, table_id: str) -> dict:
        """Publish pending row changes.

        Returns:
            The published table, including ``rowCount``.
        """
        ...

    async def delete_table(self, account_id: int, table_id: str) -> None:
        """Delete a table."""
        ...

    async def close(self) -> None:
        """Release network resources."""
        ...
