"""Column resolver: translate row values between names and column ids.

Local documents key row values by column **name**; the remote service keys
them by column **id**.  Only live columns take part in either direction: a
column is live when it is neither ``deleted`` nor ``archived``.

- ``to_wire`` writes every live column id, using an explicit ``None`` when
  the row has no value under that column's name.
- ``from_wire`` writes a column name only when the value under its id is
  present and not ``None``.

Two live columns that share a name (different ids) both receive the row's
value in ``to_wire``; in ``from_wire`` the last of them in catalog order
with a non-null value wins.

Usage:
    from hubdb_sync.table.columns import to_wire, from_wire

    wire = to_wire(row, table.columns)
    canonical = from_wire(wire_row, table.columns)
"""

from typing import Any, Iterable

from hubdb_sync.table.models import Column, Row


def is_live(column: Column) -> bool:
    """True if the column is neither deleted nor archived."""
    return not column.deleted and not column.archived


def live_columns(columns: Iterable[Column]) -> list[Column]:
    """Return live columns in catalog order."""
    return [column for column in columns if is_live(column)]


def to_wire(row: Row, columns: Iterable[Column]) -> dict[str, Any]:
    """Build the wire payload for a name-keyed row.

    The row's ``id`` is not included; the reconciliation engine attaches
    resolved ids itself.

    Args:
        row: Row whose ``values`` are keyed by column name.
        columns: Column catalog with remote-assigned ids.

    Returns:
        Dict with ``values`` keyed by column id (as strings), plus ``path``,
        ``name`` and ``isSoftEditable`` when the row sets them.

    Raises:
        ValueError: If a live column has no id (catalog not yet synced).

    Example:
        >>> cols = [Column(id="1", name="title"), Column(id="2", name="body")]
        >>> to_wire(Row(path="/a", values={"title": "Hi"}), cols)["values"]
        {'1': 'Hi', '2': None}
    """
    values: dict[str, Any] = {}
    for column in live_columns(columns):
        if column.id is None:
            raise ValueError(f"Column '{column.name}' has no id")
        values[str(column.id)] = row.values.get(column.name)

    wire: dict[str, Any] = {}
    if row.path is not None:
        wire["path"] = row.path
    if row.name is not None:
        wire["name"] = row.name
    wire["values"] = values
    if row.is_soft_editable is not None:
        wire["isSoftEditable"] = row.is_soft_editable
    return wire


def from_wire(row: Row, columns: Iterable[Column]) -> dict[str, Any]:
    """Translate id-keyed wire values into name-keyed values.

    Args:
        row: Row as fetched from the remote service.
        columns: Column catalog of the row's table.

    Returns:
        Dict of column name to value, omitting ``None`` values and
        columns that are not live.

    Example:
        >>> cols = [Column(id="1", name="title"), Column(id="2", name="body")]
        >>> from_wire(Row(values={"1": "Hi", "2": None}), cols)
        {'title': 'Hi'}
    """
    values: dict[str, Any] = {}
    for column in live_columns(columns):
        value = row.values.get(str(column.id))
        if value is not None:
            values[column.name] = value
    return values
