"""ledger-db: declarative schema synchronization with recorded migrations.

Converges a MySQL/MariaDB database on a set of declared table models at
startup, records every structural change as a reversible migration group,
and replays groups forward or backward on demand.

Usage:
    from ledger_db import AsyncMySQLAdapter, MODELS, sync_database
    from ledger_db import MigrationExecutor, MigrationDirection
    from ledger_db import get_adapter, connect_and_sync, load_db_config
"""

__version__ = "0.1.0"

# Schema (imported before migrations: the synchronizer depends on the recorder)
from ledger_db.schema import (
    ColumnDescriptor,
    ColumnType,
    ModelDescriptor,
    Relation,
    TableSyncResult,
    TableSynchronizer,
    sync_database,
)

# Migrations
from ledger_db.migrations import (
    MigrationDirection,
    MigrationExecutor,
    MigrationRecorder,
    MigrationStore,
    ReplayResult,
)

# Adapters
from ledger_db.adapters import AsyncMySQLAdapter, DatabaseClient

# Registry
from ledger_db.registry import MODELS, get_model

# Config
from ledger_db.config import DatabaseConfig, DatabaseProfile, load_db_config

# Factory
from ledger_db.factory import (
    ProfileNotFoundError,
    connect_and_sync,
    get_adapter,
    resolve_url,
)

__all__ = [
    # Schema
    "ColumnDescriptor",
    "ColumnType",
    "ModelDescriptor",
    "Relation",
    "TableSyncResult",
    "TableSynchronizer",
    "sync_database",
    # Migrations
    "MigrationDirection",
    "MigrationExecutor",
    "MigrationRecorder",
    "MigrationStore",
    "ReplayResult",
    # Adapters
    "DatabaseClient",
    "AsyncMySQLAdapter",
    # Registry
    "MODELS",
    "get_model",
    # Config
    "load_db_config",
    "DatabaseProfile",
    "DatabaseConfig",
    # Factory
    "get_adapter",
    "connect_and_sync",
    "ProfileNotFoundError",
    "resolve_url",
]
