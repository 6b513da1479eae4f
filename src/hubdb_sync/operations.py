"""Table operations exposed to the CLI and to library callers.

Each operation takes a ``HubDbClient`` and an account id, so the caller
owns client construction and cleanup.  Local documents are validated
before the first remote call of an operation.

Usage:
    from hubdb_sync.operations import create_table, update_table

    created = await create_table(client, 123, "events.hubdb.json")
    report = await update_table(client, 123, created.table_id, "events.hubdb.json")
    if report.has_errors:
        ...
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

from hubdb_sync.document import (
    read_document,
    validate_json_file,
    validate_json_path,
    write_document,
)
from hubdb_sync.table.columns import to_wire
from hubdb_sync.table.export import to_document
from hubdb_sync.table.models import (
    ClearRowsResult,
    Column,
    CreateTableResult,
    DownloadResult,
    PublishResult,
    ReconciliationPlan,
    ReconciliationReport,
    Table,
)
from hubdb_sync.table.pagination import fetch_all_rows
from hubdb_sync.table.reconcile import apply_plan, check_duplicate_paths, reconcile
from hubdb_sync.table.schema_sync import create_or_update

if TYPE_CHECKING:
    from hubdb_sync.adapters.base import HubDbClient

logger = logging.getLogger(__name__)


async def publish_table(
    client: HubDbClient, account_id: int, table_id: str
) -> PublishResult:
    """Publish a table's pending row changes.

    Returns:
        ``PublishResult`` with the published row count.
    """
    response = await client.publish_table(account_id, table_id) or {}
    return PublishResult(
        table_id=str(table_id),
        row_count=response.get("rowCount") or 0,
    )


async def create_table(
    client: HubDbClient, account_id: int, src: str | Path
) -> CreateTableResult:
    """Create a table and its rows from a local document, then publish it.

    Rows go out in a single create batch (skipped when the document has
    none), keyed by the column ids the new table was assigned.  Row-level
    errors from that batch are collected on the result; the table is
    published either way.

    Args:
        client: Data-access client.
        account_id: Account (portal) id.
        src: Path to the ``.json`` table document.

    Returns:
        ``CreateTableResult`` with the new table id, published row count,
        and any row errors.

    Raises:
        ValidationError: If ``src`` is not a usable document, or two of
            its rows share a path.
        SchemaSyncError: If the table could not be created.
        TransportError: If publishing fails.
    """
    document = read_document(src)
    check_duplicate_paths(document.rows)
    synced = await create_or_update(client, account_id, None, document)

    plan = ReconciliationPlan(
        to_create=[to_wire(row, synced.columns) for row in document.rows]
    )
    report = await apply_plan(client, account_id, synced.id, plan)

    published = await publish_table(client, account_id, synced.id)
    logger.info("Created table %s with %d rows", synced.id, published.row_count)

    return CreateTableResult(
        table_id=synced.id,
        row_count=published.row_count,
        errors=report.errors,
    )


async def update_table(
    client: HubDbClient, account_id: int, table_id: str, src: str | Path
) -> ReconciliationReport:
    """Update a table's schema and reconcile its rows, then publish it.

    Args:
        client: Data-access client.
        account_id: Account (portal) id.
        table_id: Existing table id.
        src: Path to the ``.json`` table document.

    Returns:
        ``ReconciliationReport`` with ``row_count`` set from the publish
        response.  Row-level errors are reported, not raised.

    Raises:
        ValidationError: If ``src`` is not a usable document, or two of
            its rows share a path.
        SchemaSyncError: If the schema update fails.
        TransportError: If fetching rows or publishing fails.
    """
    document = read_document(src)
    check_duplicate_paths(document.rows)
    synced = await create_or_update(client, account_id, table_id, document)

    columns: list[Column] = synced.columns
    if not columns:
        # Some responses omit the catalog; read it back
        table = Table.model_validate(await client.fetch_table(account_id, table_id))
        columns = table.columns

    report = await reconcile(client, account_id, synced.id, document.rows, columns)

    published = await publish_table(client, account_id, synced.id)
    report.row_count = published.row_count
    return report


async def download_table(
    client: HubDbClient,
    account_id: int,
    table_id: str,
    dest: str | Path | None = None,
    cwd: str | Path | None = None,
) -> DownloadResult:
    """Export a table and all of its rows to a local document.

    Args:
        client: Data-access client.
        account_id: Account (portal) id.
        table_id: Table id.
        dest: Output path.  Defaults to ``<table name>.hubdb.json``.
            Relative paths resolve against ``cwd``.
        cwd: Base directory (default: the current working directory).

    Returns:
        ``DownloadResult`` with the absolute path written.

    Raises:
        ValidationError: If ``dest`` exists and is not a regular ``.json``
            file, or does not end in ``.json``.
        TransportError: If fetching the table or its rows fails.
    """
    table = Table.model_validate(await client.fetch_table(account_id, table_id))

    base = Path(cwd) if cwd is not None else Path.cwd()
    path = (base / (dest or f"{table.name}.hubdb.json")).resolve()

    if path.exists():
        validate_json_file(path)
    else:
        validate_json_path(path)

    rows = await fetch_all_rows(client, account_id, table_id)
    write_document(path, to_document(table, rows))
    logger.info("Wrote table %s (%d rows) to %s", table_id, len(rows), path)

    return DownloadResult(file_path=str(path))


async def clear_table_rows(
    client: HubDbClient, account_id: int, table_id: str
) -> ClearRowsResult:
    """Delete every row of a table.  The table is not published.

    Returns:
        ``ClearRowsResult`` with the number of rows deleted.
    """
    rows = await fetch_all_rows(client, account_id, table_id)
    row_ids = [row.id for row in rows if row.id is not None]
    if row_ids:
        await client.delete_rows(account_id, table_id, row_ids)

    return ClearRowsResult(deleted_row_count=len(row_ids))


async def delete_table(client: HubDbClient, account_id: int, table_id: str) -> None:
    """Delete a table."""
    await client.delete_table(account_id, table_id)
