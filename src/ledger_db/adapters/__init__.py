"""Database adapters package.

Provides the ``DatabaseClient`` and ``QueryExecutor`` Protocols and the
async MySQL/MariaDB adapter implementation.

Usage:
    from ledger_db.adapters import AsyncMySQLAdapter, DatabaseClient
"""

from ledger_db.adapters.base import DatabaseClient, QueryExecutor
from ledger_db.adapters.mysql import AsyncMySQLAdapter

__all__ = [
    "DatabaseClient",
    "QueryExecutor",
    "AsyncMySQLAdapter",
]
