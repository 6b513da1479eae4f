"""Table sync engine: pagination, column resolution, reconciliation,
schema sync, and export.

Usage:
    from hubdb_sync.table import fetch_all_rows, reconcile, to_document
    from hubdb_sync.table import create_or_update, to_wire, from_wire
"""

from hubdb_sync.table.columns import from_wire, is_live, live_columns, to_wire
from hubdb_sync.table.export import EXPORTED_COLUMN_FIELDS, to_document
from hubdb_sync.table.models import (
    BatchOutcome,
    CanonicalDocument,
    Column,
    PageToken,
    ReconciliationPlan,
    ReconciliationReport,
    Row,
    RowBatch,
    RowError,
    Table,
    TableSyncResult,
)
from hubdb_sync.table.pagination import fetch_all_rows
from hubdb_sync.table.reconcile import (
    apply_plan,
    build_plan,
    check_duplicate_paths,
    normalize_path,
    reconcile,
)
from hubdb_sync.table.schema_sync import create_or_update

__all__ = [
    "fetch_all_rows",
    "to_wire",
    "from_wire",
    "is_live",
    "live_columns",
    "normalize_path",
    "check_duplicate_paths",
    "build_plan",
    "apply_plan",
    "reconcile",
    "create_or_update",
    "to_document",
    "EXPORTED_COLUMN_FIELDS",
    "Column",
    "Row",
    "Table",
    "PageToken",
    "CanonicalDocument",
    "RowBatch",
    "ReconciliationPlan",
    "ReconciliationReport",
    "RowError",
    "BatchOutcome",
    "TableSyncResult",
]
