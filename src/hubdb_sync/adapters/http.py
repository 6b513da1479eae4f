"""Async HTTP HubDB adapter.

Provides ``AsyncHubDbHttpAdapter``, an implementation of the ``HubDbClient``
protocol over the HubDB v3 REST API using ``httpx``.

The ``httpx.AsyncClient`` is created lazily on first use under an
``asyncio.Lock``.  Row mutations and reads target the table's draft
version; ``publish_table`` pushes the draft live.

Usage:
    from hubdb_sync.adapters.http import AsyncHubDbHttpAdapter

    adapter = AsyncHubDbHttpAdapter(access_token="pat-na1-...")

    table = await adapter.fetch_table(123, "456")
    await adapter.close()
"""

import asyncio
import logging
from typing import Any

import httpx

from hubdb_sync.errors import TransportError
from hubdb_sync.table.models import PageToken

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api.hubapi.com"
TABLES_PATH = "/cms/v3/hubdb/tables"


class AsyncHubDbHttpAdapter:
    """HubDB v3 implementation of the ``HubDbClient`` protocol.

    Exactly one credential is used: ``access_token`` is sent as a bearer
    token, otherwise ``api_key`` is sent as the ``hapikey`` query parameter.
    No retries are attempted; timeouts are left to ``httpx``.

    Args:
        access_token: Private app or OAuth access token.
        api_key: Legacy HubSpot API key.
        base_url: API root.  Defaults to ``https://api.hubapi.com``.
        timeout: Request timeout in seconds.
        transport: Optional ``httpx`` transport (tests pass
            ``httpx.MockTransport``).

    Example:
        adapter = AsyncHubDbHttpAdapter(access_token="pat-na1-...")
        page = await adapter.fetch_rows(123, "456")
        await adapter.close()
    """

    def __init__(
        self,
        access_token: str | None = None,
        api_key: str | None = None,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        if not access_token and not api_key:
            raise ValueError("Either access_token or api_key is required")
        self._access_token = access_token
        self._api_key = api_key
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._transport = transport
        self._client: httpx.AsyncClient | None = None
        self._lock: asyncio.Lock = asyncio.Lock()

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the ``httpx.AsyncClient``."""
        if self._client is None:
            async with self._lock:
                # Double-check after acquiring lock
                if self._client is None:
                    headers = {"Accept": "application/json"}
                    if self._access_token:
                        headers["Authorization"] = f"Bearer {self._access_token}"
                    self._client = httpx.AsyncClient(
                        base_url=self._base_url,
                        headers=headers,
                        timeout=self._timeout,
                        transport=self._transport,
                    )
        return self._client

    async def _request(
        self,
        method: str,
        path: str,
        account_id: int,
        json: Any = None,
        params: dict[str, Any] | None = None,
    ) -> Any:
        """Send one request and return the decoded JSON body.

        Returns:
            The decoded JSON body, or ``None`` for an empty response.

        Raises:
            TransportError: On connection failure or a non-2xx status.
        """
        client = await self._get_client()
        query: dict[str, Any] = {"portalId": account_id}
        if params:
            query.update(params)
        if not self._access_token:
            query["hapikey"] = self._api_key

        logger.debug("%s %s params=%s", method, path, {
            k: v for k, v in query.items() if k != "hapikey"
        })

        try:
            response = await client.request(method, path, json=json, params=query)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            body = _decode_body(e.response)
            message = body.get("message") if isinstance(body, dict) else None
            raise TransportError(
                f"{method} {path} failed with status "
                f"{e.response.status_code}: {message or e.response.reason_phrase}",
                method=method,
                url=str(e.request.url),
                status_code=e.response.status_code,
                body=body,
            ) from e
        except httpx.RequestError as e:
            raise TransportError(
                f"{method} {path} failed: {e}",
                method=method,
                url=str(e.request.url),
            ) from e

        return _decode_body(response)

    # ------------------------------------------------------------------
    # Tables
    # ------------------------------------------------------------------

    async def create_table(self, account_id: int, schema: dict[str, Any]) -> dict:
        """Create a table (``POST /tables``)."""
        return await self._request("POST", TABLES_PATH, account_id, json=schema)

    async def update_table(
        self, account_id: int, table_id: str, schema: dict[str, Any]
    ) -> dict:
        """Replace the draft schema (``PATCH /tables/{id}/draft``)."""
        return await self._request(
            "PATCH", f"{TABLES_PATH}/{table_id}/draft", account_id, json=schema
        )

    async def fetch_table(self, account_id: int, table_id: str) -> dict:
        """Fetch the draft table (``GET /tables/{id}/draft``)."""
        return await self._request(
            "GET", f"{TABLES_PATH}/{table_id}/draft", account_id
        )

    async def publish_table(self, account_id: int, table_id: str) -> dict:
        """Publish the draft (``POST /tables/{id}/draft/publish``)."""
        return await self._request(
            "POST", f"{TABLES_PATH}/{table_id}/draft/publish", account_id
        )

    async def delete_table(self, account_id: int, table_id: str) -> None:
        """Delete a table (``DELETE /tables/{id}``)."""
        await self._request("DELETE", f"{TABLES_PATH}/{table_id}", account_id)

    # ------------------------------------------------------------------
    # Rows
    # ------------------------------------------------------------------

    async def fetch_rows(
        self,
        account_id: int,
        table_id: str,
        page_token: PageToken | None = None,
    ) -> dict:
        """Fetch one page of draft rows (``GET /tables/{id}/rows/draft``)."""
        params: dict[str, Any] = {}
        if page_token is not None:
            if page_token.after is not None:
                params["after"] = page_token.after
            if page_token.offset is not None:
                params["offset"] = page_token.offset
        return await self._request(
            "GET", f"{TABLES_PATH}/{table_id}/rows/draft", account_id, params=params
        )

    async def create_rows(
        self, account_id: int, table_id: str, rows: list[dict[str, Any]]
    ) -> Any:
        """Create rows (``POST /tables/{id}/rows/draft/batch/create``)."""
        return await self._request(
            "POST",
            f"{TABLES_PATH}/{table_id}/rows/draft/batch/create",
            account_id,
            json={"inputs": rows},
        )

    async def update_rows(
        self, account_id: int, table_id: str, rows: list[dict[str, Any]]
    ) -> Any:
        """Update rows (``POST /tables/{id}/rows/draft/batch/update``)."""
        return await self._request(
            "POST",
            f"{TABLES_PATH}/{table_id}/rows/draft/batch/update",
            account_id,
            json={"inputs": rows},
        )

    async def delete_rows(
        self, account_id: int, table_id: str, row_ids: list[Any]
    ) -> Any:
        """Purge rows (``POST /tables/{id}/rows/draft/batch/purge``).

        The purge endpoint answers with an empty body, so a successful call
        returns ``{"rowIds": [...]}`` echoing the ids that were submitted.
        """
        ids = [str(row_id) for row_id in row_ids]
        body = await self._request(
            "POST",
            f"{TABLES_PATH}/{table_id}/rows/draft/batch/purge",
            account_id,
            json={"inputs": ids},
        )
        if body is None:
            return {"rowIds": ids}
        return body

    async def close(self) -> None:
        """Close the underlying ``httpx.AsyncClient``.

        If no request was ever made, this is a no-op.
        """
        if self._client is not None:
            await self._client.aclose()
            self._client = None


def _decode_body(response: httpx.Response) -> Any:
    """Decode a response body as JSON, falling back to text."""
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        return response.text
