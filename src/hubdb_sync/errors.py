"""Error taxonomy for HubDB table sync.

- ``ValidationError``: bad local input, raised before any remote call.
- ``SchemaSyncError``: table create/update failed; nothing else can run
  without a column catalog.
- ``PartialMutationError``: row batches reported row-level errors.  Only
  raised on request via ``ReconciliationReport.raise_for_errors()``.
- ``TransportError``: any failed remote call, raised by the HTTP adapter.

Usage:
    from hubdb_sync.errors import HubDbError, TransportError

    try:
        report = await update_table(client, account_id, table_id, "t.json")
    except HubDbError as e:
        console.print(f"[red]{e}[/red]")
"""

from typing import Any


class HubDbError(Exception):
    """Base class for all hubdb-sync errors."""

    pass


class ValidationError(HubDbError):
    """Raised when a local document or its path is unusable."""

    pass


class DuplicatePathError(ValidationError):
    """Raised when two desired rows normalize to the same path."""

    def __init__(self, paths: list[str]) -> None:
        self.paths = paths
        super().__init__(
            f"Duplicate row paths in table document: {', '.join(paths)}"
        )


class SchemaSyncError(HubDbError):
    """Raised when the table schema could not be created or updated."""

    pass


class PartialMutationError(HubDbError):
    """Raised when one or more row batches returned row-level errors.

    Attributes:
        errors: The row errors collected from every batch.
    """

    def __init__(self, errors: list[Any]) -> None:
        self.errors = errors
        super().__init__(f"{len(errors)} row error(s) during row sync")


class TransportError(HubDbError):
    """Raised when a remote call fails.

    Attributes:
        method: HTTP method of the failed request.
        url: Request URL.
        status_code: HTTP status, or ``None`` when no response was received.
        body: Decoded response body (JSON or text) when available.
    """

    def __init__(
        self,
        message: str,
        method: str = "",
        url: str = "",
        status_code: int | None = None,
        body: Any = None,
    ) -> None:
        self.method = method
        self.url = url
        self.status_code = status_code
        self.body = body
        super().__init__(message)
