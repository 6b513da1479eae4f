"""Pagination walker: drain every row page of a table into one list.

Two page shapes are accepted and may be mixed freely by a client:

1. **Cursor** ``{"results": [...], "paging": {"next": {"after": "..."}}}``:
   continue while ``paging.next.after`` is present.
2. **Offset** ``{"objects": [...], "total": N}``: keep a running count and
   offset, continue while ``count < total``.

Pages are requested strictly one after another.  A failed page fetch
propagates and the rows gathered so far are discarded.

Usage:
    from hubdb_sync.table.pagination import fetch_all_rows

    rows = await fetch_all_rows(client, account_id=123, table_id="456")
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from hubdb_sync.table.models import PageToken, Row

if TYPE_CHECKING:
    from hubdb_sync.adapters.base import HubDbClient

logger = logging.getLogger(__name__)


def _next_page(
    response: dict[str, Any],
    count: int,
) -> tuple[list[dict[str, Any]], PageToken | None]:
    """Split one page response into its rows and the next page token.

    Args:
        response: One ``fetch_rows`` response.
        count: Rows gathered before this page (offset style only).

    Returns:
        Tuple of (raw rows on this page, token for the next page or
        ``None`` when the walk is complete).

    Raises:
        ValueError: If the response matches neither page shape.
    """
    if "results" in response:
        rows = response.get("results") or []
        paging = response.get("paging") or {}
        after = (paging.get("next") or {}).get("after")
        return rows, PageToken(after=str(after)) if after is not None else None

    if "objects" in response:
        rows = response.get("objects") or []
        total = response.get("total") or 0
        seen = count + len(rows)
        # An empty page ends the walk even if total claims more rows
        if rows and seen < total:
            return rows, PageToken(offset=seen)
        return rows, None

    raise ValueError(
        f"Unrecognized row page shape with keys: {sorted(response.keys())}"
    )


async def fetch_all_rows(
    client: HubDbClient,
    account_id: int,
    table_id: str,
) -> list[Row]:
    """Fetch every row of a table, page by page.

    Args:
        client: Data-access client.
        account_id: Account (portal) id.
        table_id: Table id.

    Returns:
        All rows in the order the pages returned them.

    Raises:
        TransportError: If any page fetch fails.
        ValueError: If a page response has an unrecognized shape.

    Example:
        >>> rows = await fetch_all_rows(client, 123, "456")
        >>> len(rows)
        250
    """
    raw_rows: list[dict[str, Any]] = []
    token: PageToken | None = None
    pages = 0

    while True:
        response = await client.fetch_rows(account_id, table_id, token)
        page_rows, token = _next_page(response, len(raw_rows))
        raw_rows.extend(page_rows)
        pages += 1
        logger.debug(
            "Fetched page %d of table %s (%d rows)", pages, table_id, len(page_rows)
        )
        if token is None:
            break

    return [Row.model_validate(row) for row in raw_rows]
