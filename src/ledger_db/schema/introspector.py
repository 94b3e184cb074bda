"""MySQL schema introspection via information_schema.

This module queries the live database for one table at a time:
- Table existence
- Columns with their full SQL type, stored default, and extra attributes
- Columns participating in a foreign key

All queries are read-only and scoped to the connection's current database
(``DATABASE()``).  Nothing is cached: an earlier table's sync pass may have
changed the schema since the process started.  Query errors propagate to the
caller -- a table pass must not proceed on incomplete structural knowledge.
"""

from ledger_db.adapters.base import QueryExecutor
from ledger_db.schema.models import IntrospectedColumn


class SchemaIntrospector:
    """Introspects MySQL table structure through an injected query executor.

    Usage:
        introspector = SchemaIntrospector(client)
        if await introspector.table_exists("account"):
            columns = await introspector.list_columns("account")
            fk_columns = await introspector.list_foreign_key_columns("account")
    """

    def __init__(self, client: QueryExecutor) -> None:
        """Initialize with the query executor used for metadata queries.

        Args:
            client: Any object exposing ``async execute(sql, params)``.
        """
        self._client = client

    async def table_exists(self, table_name: str) -> bool:
        """Return True if *table_name* is a table in the current database."""
        query = """
            SELECT TABLE_NAME AS name
            FROM information_schema.TABLES
            WHERE TABLE_SCHEMA = DATABASE()
              AND TABLE_NAME = :table_name
        """
        rows = await self._client.execute(query, {"table_name": table_name})
        return len(rows) > 0

    async def list_columns(self, table_name: str) -> list[IntrospectedColumn]:
        """Get columns for a table in ordinal order."""
        query = """
            SELECT
                COLUMN_NAME AS name,
                COLUMN_TYPE AS sql_type,
                COLUMN_DEFAULT AS default_raw,
                EXTRA AS extra
            FROM information_schema.COLUMNS
            WHERE TABLE_SCHEMA = DATABASE()
              AND TABLE_NAME = :table_name
            ORDER BY ORDINAL_POSITION
        """
        rows = await self._client.execute(query, {"table_name": table_name})
        return [
            IntrospectedColumn(
                name=row["name"],
                sql_type=row["sql_type"],
                default_raw=None if row["default_raw"] is None else str(row["default_raw"]),
                extra=row["extra"] or "",
            )
            for row in rows
        ]

    async def list_foreign_key_columns(self, table_name: str) -> list[str]:
        """Get names of columns that reference another table."""
        query = """
            SELECT DISTINCT COLUMN_NAME AS name
            FROM information_schema.KEY_COLUMN_USAGE
            WHERE TABLE_SCHEMA = DATABASE()
              AND TABLE_NAME = :table_name
              AND REFERENCED_COLUMN_NAME IS NOT NULL
        """
        rows = await self._client.execute(query, {"table_name": table_name})
        return [row["name"] for row in rows]
