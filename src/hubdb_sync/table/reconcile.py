"""Row reconciliation: make a table's remote rows match a desired row list.

Rows are matched by **path**, not by id.  Paths are compared
case-insensitively with one trailing ``/`` stripped, so ``/Foo/`` in a
document matches ``/foo`` on the remote side.  Nothing is persisted
between runs; every run re-fetches the full set of existing rows.

A run has two explicit phases:

1. ``build_plan()`` -- pure.  Partitions desired rows into ``to_update``
   (matched an existing row) and ``to_create`` (did not), and collects the
   ids of unmatched existing rows into ``to_delete``.
2. ``apply_plan()`` -- issues at most three batch calls in the order
   update, create, delete.  Empty batches are never sent.  Batches are
   best-effort: a ``TransportError`` in one is recorded in the report and
   the remaining batches still run.

Usage:
    from hubdb_sync.table.reconcile import reconcile

    report = await reconcile(client, account_id, table_id, rows, columns)
    print(report.format_report())
    report.raise_for_errors()  # optional: treat row errors as fatal
"""

from __future__ import annotations

import logging
from collections import Counter
from typing import TYPE_CHECKING, Any, Iterable

from hubdb_sync.errors import DuplicatePathError, TransportError
from hubdb_sync.table.columns import to_wire
from hubdb_sync.table.models import (
    BatchOutcome,
    Column,
    Operation,
    ReconciliationPlan,
    ReconciliationReport,
    RemoteId,
    Row,
    RowBatch,
    RowError,
)
from hubdb_sync.table.pagination import fetch_all_rows

if TYPE_CHECKING:
    from hubdb_sync.adapters.base import HubDbClient

logger = logging.getLogger(__name__)

# Key holding the applied items in a batch summary, per operation
_APPLIED_KEYS: dict[Operation, tuple[str, ...]] = {
    "update": ("results", "rows"),
    "create": ("results", "rows"),
    "delete": ("rowIds",),
}


# ---------------------------------------------------------------------------
# Planning
# ---------------------------------------------------------------------------


def normalize_path(path: str | None) -> str | None:
    """Normalize a row path for matching.

    Lower-cases the path and strips one trailing ``/``.

    Example:
        >>> normalize_path("/Foo/")
        '/foo'
        >>> normalize_path(None) is None
        True
    """
    if path is None:
        return None
    if path.endswith("/"):
        path = path[:-1]
    return path.lower()


def check_duplicate_paths(rows: Iterable[Row]) -> None:
    """Raise ``DuplicatePathError`` if two desired rows share a normalized path.

    Runs without any remote call, so operations use it to reject a document
    before the table schema is touched.
    """
    counts = Counter(
        normalized
        for normalized in (normalize_path(row.path) for row in rows)
        if normalized is not None
    )
    duplicates = sorted(path for path, n in counts.items() if n > 1)
    if duplicates:
        raise DuplicatePathError(duplicates)


def _ids_by_path(existing_rows: Iterable[Row]) -> dict[str, RemoteId]:
    """Map normalized path to existing row id.

    When several existing rows share a normalized path, the last one in
    fetch order wins; the others stay unmatched and are deleted.
    """
    ids: dict[str, RemoteId] = {}
    for row in existing_rows:
        normalized = normalize_path(row.path)
        if normalized is None or row.id is None:
            continue
        if normalized in ids:
            logger.warning(
                "Existing rows %s and %s share path %r; keeping %s",
                ids[normalized], row.id, normalized, row.id,
            )
        ids[normalized] = row.id
    return ids


def build_plan(
    existing_rows: list[Row],
    desired_rows: list[Row],
    columns: list[Column],
) -> ReconciliationPlan:
    """Compute the create/update/delete sets for one run.

    Ids carried by desired rows are ignored: identity comes only from path
    matching.  Desired rows without a path are always created.

    Args:
        existing_rows: Snapshot of every remote row.
        desired_rows: Rows from the local document (name-keyed values).
        columns: Column catalog used to translate values to wire format.

    Returns:
        ``ReconciliationPlan`` whose update and create sets partition
        ``desired_rows`` and whose delete set holds the unmatched existing ids.

    Raises:
        DuplicatePathError: If two desired rows normalize to the same path.

    Example:
        >>> plan = build_plan(
        ...     [Row(id=1, path="/a")],
        ...     [Row(path="/a/"), Row(path="/b")],
        ...     columns,
        ... )
        >>> len(plan.to_update), len(plan.to_create), plan.to_delete
        (1, 1, [])
    """
    check_duplicate_paths(desired_rows)
    return _partition(existing_rows, desired_rows, columns)


def _partition(
    existing_rows: list[Row],
    desired_rows: list[Row],
    columns: list[Column],
) -> ReconciliationPlan:
    """Partition rows into a plan; desired paths must already be unique."""
    ids_by_path = _ids_by_path(existing_rows)

    plan = ReconciliationPlan()
    matched_ids: set[str] = set()

    for row in desired_rows:
        wire = to_wire(row, columns)
        normalized = normalize_path(row.path)
        row_id = ids_by_path.get(normalized) if normalized is not None else None
        if row_id is not None:
            plan.to_update.append({"id": str(row_id), **wire})
            matched_ids.add(str(row_id))
        else:
            plan.to_create.append(wire)

    plan.to_delete = [
        row.id
        for row in existing_rows
        if row.id is not None and str(row.id) not in matched_ids
    ]
    return plan


# ---------------------------------------------------------------------------
# Applying
# ---------------------------------------------------------------------------


def _batch_summary(response: Any) -> Any:
    """Return the summary element of a batch response.

    List responses carry the summary at index 0; dict responses are their
    own summary.
    """
    if isinstance(response, list):
        return response[0] if response else None
    return response


def _applied_count(operation: Operation, response: Any) -> int:
    """Count applied items from a batch response, 0 if the shape is unexpected."""
    summary = _batch_summary(response)
    if not isinstance(summary, dict):
        return 0
    for key in _APPLIED_KEYS[operation]:
        items = summary.get(key)
        if isinstance(items, list):
            return len(items)
    return 0


def _row_errors(operation: Operation, response: Any) -> list[RowError]:
    """Extract row-level errors from a batch response.

    List responses carry errors at indices 1 and up; dict responses carry
    them under ``errors``.
    """
    if isinstance(response, list):
        raw_errors = response[1:]
    elif isinstance(response, dict) and isinstance(response.get("errors"), list):
        raw_errors = response["errors"]
    else:
        raw_errors = []

    errors = []
    for raw in raw_errors:
        message = raw.get("message", "") if isinstance(raw, dict) else str(raw)
        errors.append(RowError(operation=operation, message=message, detail=raw))
    return errors


async def _send_batch(
    client: HubDbClient,
    account_id: int,
    table_id: str,
    batch: RowBatch,
) -> Any:
    """Issue the call that matches the batch's operation."""
    if batch.operation == "update":
        return await client.update_rows(account_id, table_id, batch.items)
    if batch.operation == "create":
        return await client.create_rows(account_id, table_id, batch.items)
    return await client.delete_rows(account_id, table_id, batch.items)


async def apply_plan(
    client: HubDbClient,
    account_id: int,
    table_id: str,
    plan: ReconciliationPlan,
) -> ReconciliationReport:
    """Apply a plan as up to three best-effort batch calls.

    Calls run sequentially in the order update, create, delete.  A batch
    whose set is empty is skipped.  A ``TransportError`` from one batch is
    recorded as a ``RowError`` for that operation and does not stop the
    batches after it.  Any other exception propagates.

    Args:
        client: Data-access client.
        account_id: Account (portal) id.
        table_id: Table id.
        plan: Plan from ``build_plan()``.

    Returns:
        ``ReconciliationReport`` with planned counts equal to the plan's
        set sizes, applied counts from each response, and all row errors.
    """
    report = ReconciliationReport(
        table_id=str(table_id),
        planned_updates=len(plan.to_update),
        planned_creations=len(plan.to_create),
        planned_deletions=len(plan.to_delete),
    )

    for batch in plan.batches():
        outcome = BatchOutcome(operation=batch.operation, planned=len(batch.items))
        try:
            response = await _send_batch(client, account_id, table_id, batch)
        except TransportError as e:
            logger.error("%s batch for table %s failed: %s", batch.operation, table_id, e)
            outcome.errors.append(
                RowError(operation=batch.operation, message=str(e), detail=e.body)
            )
        else:
            outcome.applied = _applied_count(batch.operation, response)
            outcome.errors.extend(_row_errors(batch.operation, response))

        logger.debug(
            "%s batch: planned=%d applied=%d errors=%d",
            batch.operation, outcome.planned, outcome.applied, len(outcome.errors),
        )
        _record(report, outcome)

    return report


def _record(report: ReconciliationReport, outcome: BatchOutcome) -> None:
    """Fold one batch outcome into the report."""
    if outcome.operation == "update":
        report.update_count = outcome.applied
    elif outcome.operation == "create":
        report.create_count = outcome.applied
    else:
        report.delete_count = outcome.applied
    report.errors.extend(outcome.errors)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


async def reconcile(
    client: HubDbClient,
    account_id: int,
    table_id: str,
    desired_rows: list[Row],
    columns: list[Column],
) -> ReconciliationReport:
    """Make the table's remote rows match ``desired_rows``.

    Fetches every existing row, builds a plan, and applies it.  Publishing
    is left to the caller.

    Args:
        client: Data-access client.
        account_id: Account (portal) id.
        table_id: Table id.
        desired_rows: Rows from the local document (name-keyed values).
        columns: Current column catalog of the table.

    Returns:
        ``ReconciliationReport`` for the run.

    Raises:
        DuplicatePathError: If two desired rows normalize to the same path
            (raised before any remote call).
        TransportError: If fetching existing rows fails.
    """
    check_duplicate_paths(desired_rows)

    existing_rows = await fetch_all_rows(client, account_id, table_id)
    plan = _partition(existing_rows, desired_rows, columns)

    logger.info(
        "Table %s: %d to update, %d to create, %d to delete",
        table_id, len(plan.to_update), len(plan.to_create), len(plan.to_delete),
    )

    return await apply_plan(client, account_id, table_id, plan)
