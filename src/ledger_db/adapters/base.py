"""Database client protocol definition.

Defines the ``DatabaseClient`` Protocol that all adapters must implement.
All methods are ``async def`` -- the library is async-first.

``QueryExecutor`` is the narrow slice the schema engine needs: one
``execute()`` entry point returning rows.  ``DatabaseClient.connection()``
hands out a ``QueryExecutor`` pinned to a single pooled connection so that
``START TRANSACTION`` / ``COMMIT`` / ``ROLLBACK`` issued as plain statements
apply to the same session.

Usage:
    from ledger_db.adapters.base import DatabaseClient

    async def do_work(client: DatabaseClient) -> None:
        rows = await client.select("migration_group", "id, name")
        group_id = await client.insert("migration_group", {"name": "g1"})
        await client.execute("CREATE INDEX idx_name ON account (name)")

        async with client.connection() as conn:
            await conn.execute("START TRANSACTION")
            await conn.execute("ALTER TABLE account DROP COLUMN legacy")
            await conn.execute("COMMIT")

        await client.close()
"""

from contextlib import AbstractAsyncContextManager
from typing import Any, Protocol


class QueryExecutor(Protocol):
    """Anything that can run one SQL statement and return its rows."""

    async def execute(self, sql: str, params: dict | None = None) -> list[dict]:
        """Execute a SQL statement.

        Args:
            sql: SQL text.  Named parameters use ``:name`` placeholders.
            params: Optional dict of named parameters.

        Returns:
            Result rows as dicts (empty list for statements without rows).
        """
        ...


class DatabaseClient(QueryExecutor, Protocol):
    """Database client interface that all adapters must implement.

    All methods are async -- callers must ``await`` every operation.
    """

    async def select(
        self,
        table: str,
        columns: str,
        filters: dict[str, Any] | None = None,
        order_by: str | None = None,
    ) -> list[dict]:
        """Select rows from table.

        Args:
            table: Table name.
            columns: Comma-separated column names (e.g., ``"id, name, up"``).
            filters: Optional dict of field=value filters (all must match via AND).
            order_by: Optional ORDER BY expression.

        Returns:
            List of dicts, one per row.  Empty list if no matches.
        """
        ...

    async def insert(self, table: str, data: dict) -> int:
        """Insert one row and return its auto-increment id.

        Raises:
            Exception: If duplicate key or constraint violation.
        """
        ...

    async def update(self, table: str, data: dict, filters: dict[str, Any]) -> int:
        """Update rows in table and return the number of matched rows."""
        ...

    def connection(self) -> AbstractAsyncContextManager[QueryExecutor]:
        """Pin one pooled connection for a sequence of statements.

        Statements run in autocommit mode; transaction control is left to the
        caller via plain ``START TRANSACTION`` / ``COMMIT`` / ``ROLLBACK``.
        """
        ...

    async def close(self) -> None:
        """Close database connection and clean up resources."""
        ...
