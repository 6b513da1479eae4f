"""Pydantic models for HubDB tables, rows, and sync results.

This module contains the table-domain models:
- Remote models: Column, Row, Table (parsed from the wire, camelCase aliases)
- Local document: CanonicalDocument
- Pagination: PageToken
- Reconciliation: RowBatch, ReconciliationPlan, RowError, BatchOutcome,
  ReconciliationReport
- Operation results: TableSyncResult, CreateTableResult, PublishResult,
  DownloadResult, ClearRowsResult

Configuration models (AccountProfile, HubDbConfig) live in
hubdb_sync.config.models.
"""

from dataclasses import dataclass, field
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from hubdb_sync.errors import PartialMutationError

Operation = Literal["update", "create", "delete"]

# Row and column ids are strings in v3 responses and integers in legacy ones.
RemoteId = str | int


class HubDbModel(BaseModel):
    """Base for models that mirror HubDB JSON (camelCase on the wire)."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="allow",
    )


# ============================================================================
# Remote Models
# ============================================================================


class Column(HubDbModel):
    """A typed field definition within a table.

    Unknown column attributes (``options``, ``foreignTableId``, ...) are
    kept as extras so schema documents survive a round trip.

    Example:
        >>> col = Column.model_validate({"id": "1", "name": "title", "type": "TEXT"})
        >>> col.deleted
        False
    """

    id: RemoteId | None = None
    name: str
    label: str | None = None
    type: str | None = None
    deleted: bool = False
    archived: bool = False
    foreign_ids_by_name: dict[str, Any] | None = None
    foreign_ids_by_id: dict[str, Any] | None = None


class Row(HubDbModel):
    """One record in a table.

    ``values`` is keyed by column id on the wire and by column name in
    local documents.
    """

    id: RemoteId | None = None
    path: str | None = None
    name: str | None = None
    is_soft_editable: bool | None = None
    values: dict[str, Any] = Field(default_factory=dict)


class Table(HubDbModel):
    """A table as returned by the remote service."""

    id: RemoteId | None = None
    name: str
    label: str | None = None
    columns: list[Column] = Field(default_factory=list)
    allow_child_tables: bool | None = None
    allow_public_api_access: bool | None = None
    dynamic_meta_tags: dict[str, Any] | None = None
    enable_child_table_pages: bool | None = None
    use_for_pages: bool | None = None


class PageToken(BaseModel):
    """Position of the next row page: a cursor (``after``) or an ``offset``."""

    after: str | None = None
    offset: int | None = None


# ============================================================================
# Local Document
# ============================================================================


class CanonicalDocument(BaseModel):
    """The local JSON representation of a table and its rows.

    Field order is the order written to disk.  Columns are plain dicts
    because the document carries whatever column attributes the schema
    needs; rows carry name-keyed values.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    name: str
    use_for_pages: bool | None = None
    label: str | None = None
    allow_child_tables: bool | None = None
    allow_public_api_access: bool | None = None
    dynamic_meta_tags: dict[str, Any] | None = None
    enable_child_table_pages: bool | None = None
    columns: list[dict[str, Any]] = Field(default_factory=list)
    rows: list[Row] = Field(default_factory=list)

    def schema_body(self) -> dict[str, Any]:
        """Return the table schema to submit, without ``rows``."""
        return self.model_dump(by_alias=True, exclude={"rows"}, exclude_none=True)

    def to_json_dict(self) -> dict[str, Any]:
        """Return the document as a JSON-ready dict (camelCase keys)."""
        data = self.model_dump(by_alias=True, exclude={"rows"}, exclude_none=True)
        data["rows"] = [
            row.model_dump(by_alias=True, exclude={"id"}, exclude_none=True)
            for row in self.rows
        ]
        return data


# ============================================================================
# Reconciliation
# ============================================================================


@dataclass
class RowBatch:
    """One batched mutation call.

    ``items`` are wire rows for ``update``/``create`` and row ids for
    ``delete``.
    """

    operation: Operation
    items: list[Any]


@dataclass
class ReconciliationPlan:
    """Create/update/delete sets computed from one snapshot of existing rows.

    The three sets are disjoint: ``to_update`` and ``to_create`` partition
    the desired rows, ``to_delete`` holds ids of existing rows no desired
    row matched.

    Attributes:
        to_update: Wire rows that resolved to an existing row id.
        to_create: Wire rows with no matching existing row.
        to_delete: Ids of existing rows left unmatched.
    """

    to_update: list[dict[str, Any]] = field(default_factory=list)
    to_create: list[dict[str, Any]] = field(default_factory=list)
    to_delete: list[RemoteId] = field(default_factory=list)

    @property
    def has_changes(self) -> bool:
        """True if applying the plan would issue any call."""
        return bool(self.to_update or self.to_create or self.to_delete)

    def batches(self) -> list[RowBatch]:
        """Return the non-empty batches in apply order (update, create, delete)."""
        candidates = [
            RowBatch("update", self.to_update),
            RowBatch("create", self.to_create),
            RowBatch("delete", self.to_delete),
        ]
        return [batch for batch in candidates if batch.items]


class RowError(BaseModel):
    """A row-level error reported by one batch call."""

    operation: Operation
    message: str = ""
    detail: Any = None


class BatchOutcome(BaseModel):
    """Result of one applied batch.

    Attributes:
        operation: Which batch this is.
        planned: Number of rows (or ids) submitted.
        applied: Number the remote reported as applied (0 if unknown).
        errors: Row-level errors extracted from the response.
    """

    operation: Operation
    planned: int = 0
    applied: int = 0
    errors: list[RowError] = Field(default_factory=list)


class ReconciliationReport(BaseModel):
    """Summary of a reconciliation run.

    Planned counts always equal the plan's partition sizes; applied counts
    stay 0 for skipped batches and for responses of unexpected shape.

    Example:
        >>> report = ReconciliationReport(table_id="42", planned_updates=2)
        >>> report.has_errors
        False
    """

    table_id: str
    planned_updates: int = 0
    update_count: int = 0
    planned_creations: int = 0
    create_count: int = 0
    planned_deletions: int = 0
    delete_count: int = 0
    errors: list[RowError] = Field(default_factory=list)
    row_count: int | None = None  # Set once the table is published

    @property
    def has_errors(self) -> bool:
        """True if any batch reported row-level errors."""
        return bool(self.errors)

    def raise_for_errors(self) -> None:
        """Raise ``PartialMutationError`` if any batch reported errors."""
        if self.errors:
            raise PartialMutationError(list(self.errors))

    def format_report(self) -> str:
        """Format the report as a one-line human-readable summary."""
        return (
            f"updated {self.update_count}/{self.planned_updates}, "
            f"created {self.create_count}/{self.planned_creations}, "
            f"deleted {self.delete_count}/{self.planned_deletions}"
        )


# ============================================================================
# Operation Results
# ============================================================================


class TableSyncResult(BaseModel):
    """Table id and column catalog returned by a schema create/update."""

    id: str
    columns: list[Column] = Field(default_factory=list)


class CreateTableResult(BaseModel):
    """Result of ``create_table()``.

    Attributes:
        table_id: Id of the new table.
        row_count: Row count reported when the table was published.
        errors: Row-level errors from the create batch.
    """

    table_id: str
    row_count: int = 0
    errors: list[RowError] = Field(default_factory=list)

    @property
    def has_errors(self) -> bool:
        """True if any row failed to be created."""
        return bool(self.errors)


class PublishResult(BaseModel):
    """Result of ``publish_table()``."""

    table_id: str
    row_count: int = 0


class DownloadResult(BaseModel):
    """Result of ``download_table()``."""

    file_path: str


class ClearRowsResult(BaseModel):
    """Result of ``clear_table_rows()``."""

    deleted_row_count: int = 0
