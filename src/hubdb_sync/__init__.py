"""hubdb-sync: Reconcile HubDB tables against local JSON documents.

Provides an async data-access Protocol with an httpx implementation, a
path-keyed row reconciliation engine, table schema sync, export to a
canonical JSON document, multi-account configuration, and a CLI.

Usage:
    from hubdb_sync import AsyncHubDbHttpAdapter, update_table
    from hubdb_sync import load_hubdb_config, get_active_account, get_client
    from hubdb_sync import reconcile, to_document, ReconciliationReport
"""

__version__ = "0.1.0"

# Adapters
from hubdb_sync.adapters.base import HubDbClient
from hubdb_sync.adapters.http import AsyncHubDbHttpAdapter

# Config
from hubdb_sync.config.loader import get_environment_variable_config, load_hubdb_config
from hubdb_sync.config.models import AccountProfile, HubDbConfig

# Errors
from hubdb_sync.errors import (
    DuplicatePathError,
    HubDbError,
    PartialMutationError,
    SchemaSyncError,
    TransportError,
    ValidationError,
)

# Factory
from hubdb_sync.factory import (
    ProfileNotFoundError,
    get_active_account,
    get_active_account_name,
    get_client,
)

# Operations
from hubdb_sync.operations import (
    clear_table_rows,
    create_table,
    delete_table,
    download_table,
    publish_table,
    update_table,
)

# Table engine
from hubdb_sync.table.export import to_document
from hubdb_sync.table.models import (
    CanonicalDocument,
    Column,
    ReconciliationPlan,
    ReconciliationReport,
    Row,
    Table,
)
from hubdb_sync.table.pagination import fetch_all_rows
from hubdb_sync.table.reconcile import apply_plan, build_plan, reconcile
from hubdb_sync.table.schema_sync import create_or_update

__all__ = [
    # Adapters
    "HubDbClient",
    "AsyncHubDbHttpAdapter",
    # Config
    "load_hubdb_config",
    "get_environment_variable_config",
    "AccountProfile",
    "HubDbConfig",
    # Errors
    "HubDbError",
    "ValidationError",
    "DuplicatePathError",
    "SchemaSyncError",
    "PartialMutationError",
    "TransportError",
    # Factory
    "ProfileNotFoundError",
    "get_active_account",
    "get_active_account_name",
    "get_client",
    # Operations
    "create_table",
    "update_table",
    "download_table",
    "clear_table_rows",
    "publish_table",
    "delete_table",
    # Table engine
    "fetch_all_rows",
    "build_plan",
    "apply_plan",
    "reconcile",
    "create_or_update",
    "to_document",
    "Column",
    "Row",
    "Table",
    "CanonicalDocument",
    "ReconciliationPlan",
    "ReconciliationReport",
]
