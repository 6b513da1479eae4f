"""Export serializer: turn a fetched table and its rows into a local document.

The output is deterministic for a given snapshot: columns and rows keep
the order they were received in, and column attributes are projected
through ``EXPORTED_COLUMN_FIELDS`` in that fixed order.  Remote-only
attributes (``id``, ``deleted``, ``archived``, ``foreignIdsByName``,
``foreignIdsById``) and any attribute not on the allow-list never reach
the document.
"""

from typing import Any

from hubdb_sync.table.columns import from_wire, live_columns
from hubdb_sync.table.models import CanonicalDocument, Column, Row, Table

EXPORTED_COLUMN_FIELDS: tuple[str, ...] = (
    "name",
    "label",
    "type",
    "description",
    "options",
    "foreignTableId",
    "foreignColumnId",
    "maxNumberOfCharacters",
    "maxNumberOfOptions",
    "width",
)


def _project_column(column: Column) -> dict[str, Any]:
    """Keep only allow-listed attributes the column carries a value for."""
    data = column.model_dump(by_alias=True)
    return {
        key: data[key]
        for key in EXPORTED_COLUMN_FIELDS
        if data.get(key) is not None
    }


def to_document(table: Table, rows: list[Row]) -> CanonicalDocument:
    """Build the canonical document for a table snapshot.

    Deleted and archived columns are dropped.  Each row becomes
    ``{path, name, isSoftEditable, values}`` with values re-keyed from
    column id to column name.

    Args:
        table: Table as fetched from the remote service.
        rows: Every row of the table, as fetched.

    Returns:
        ``CanonicalDocument`` ready to be written to disk.
    """
    columns = live_columns(table.columns)

    return CanonicalDocument(
        name=table.name,
        use_for_pages=table.use_for_pages,
        label=table.label,
        allow_child_tables=table.allow_child_tables,
        allow_public_api_access=table.allow_public_api_access,
        dynamic_meta_tags=table.dynamic_meta_tags,
        enable_child_table_pages=table.enable_child_table_pages,
        columns=[_project_column(column) for column in columns],
        rows=[
            Row(
                path=row.path,
                name=row.name,
                is_soft_editable=row.is_soft_editable,
                values=from_wire(row, table.columns),
            )
            for row in rows
        ],
    )
