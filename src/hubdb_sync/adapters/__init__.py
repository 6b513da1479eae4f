"""HubDB client adapters package.

Provides the ``HubDbClient`` Protocol and the ``httpx``-based
``AsyncHubDbHttpAdapter`` implementation.

Usage:
    from hubdb_sync.adapters import HubDbClient, AsyncHubDbHttpAdapter
"""

from hubdb_sync.adapters.base import HubDbClient
from hubdb_sync.adapters.http import AsyncHubDbHttpAdapter

__all__ = [
    "HubDbClient",
    "AsyncHubDbHttpAdapter",
]
