"""Table schema synchronizer: create or update a table before its rows.

The schema body is the local document without ``rows``.  On create the
remote service assigns the table id and every column id; on update the
returned column catalog replaces any catalog the caller held.  Either way
the result feeds the column resolver for the row sync that follows.

Usage:
    from hubdb_sync.table.schema_sync import create_or_update

    synced = await create_or_update(client, account_id, None, document)
    report = await reconcile(client, account_id, synced.id, rows, synced.columns)
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from hubdb_sync.errors import SchemaSyncError, TransportError
from hubdb_sync.table.models import CanonicalDocument, Column, TableSyncResult

if TYPE_CHECKING:
    from hubdb_sync.adapters.base import HubDbClient

logger = logging.getLogger(__name__)


async def create_or_update(
    client: HubDbClient,
    account_id: int,
    table_id: str | None,
    document: CanonicalDocument,
) -> TableSyncResult:
    """Create a new table, or update the schema of an existing one.

    Args:
        client: Data-access client.
        account_id: Account (portal) id.
        table_id: Existing table id, or ``None`` to create a table.
        document: Local table document; its ``rows`` are not submitted.

    Returns:
        ``TableSyncResult`` with the table id and its column catalog.

    Raises:
        SchemaSyncError: If the remote call fails or its response carries
            no table id.
    """
    schema = document.schema_body()
    action = "create" if table_id is None else "update"

    try:
        if table_id is None:
            response = await client.create_table(account_id, schema)
        else:
            response = await client.update_table(account_id, table_id, schema)
    except TransportError as e:
        raise SchemaSyncError(
            f"Failed to {action} table '{document.name}': {e}"
        ) from e

    response = response or {}
    result_id = response.get("id", table_id)
    if result_id is None:
        raise SchemaSyncError(
            f"Table {action} for '{document.name}' returned no table id"
        )

    columns = [Column.model_validate(col) for col in response.get("columns") or []]
    logger.debug(
        "Table %s %sd with %d columns", result_id, action, len(columns)
    )
    return TableSyncResult(id=str(result_id), columns=columns)
