"""Persistence for migration groups and migration entries.

All reads and writes of the ``migration_group`` and ``migration`` tables go
through ``MigrationStore``.  Records are append-only: groups are inserted and
then completed once with their assembled query lists; nothing is deleted.
"""

from ledger_db.adapters.base import DatabaseClient
from ledger_db.migrations.models import MigrationEntry, MigrationGroup, serialize_queries

GROUP_TABLE = "migration_group"
ENTRY_TABLE = "migration"


class MigrationStore:
    """Reads and writes migration records through a ``DatabaseClient``."""

    def __init__(self, client: DatabaseClient) -> None:
        self._client = client

    async def insert_group(
        self,
        name: str,
        up_queries: list[str] | None = None,
        down_queries: list[str] | None = None,
    ) -> int:
        """Insert a migration group and return its id."""
        return await self._client.insert(
            GROUP_TABLE,
            {
                "name": name,
                "up": serialize_queries(up_queries or []),
                "down": serialize_queries(down_queries or []),
            },
        )

    async def update_group_queries(
        self, group_id: int, up_queries: list[str], down_queries: list[str]
    ) -> None:
        await self._client.update(
            GROUP_TABLE,
            {"up": serialize_queries(up_queries), "down": serialize_queries(down_queries)},
            {"id": group_id},
        )

    async def insert_entry(self, entry: MigrationEntry) -> int:
        return await self._client.insert(ENTRY_TABLE, entry.to_row())

    async def get_group(self, group_id: int) -> MigrationGroup | None:
        rows = await self._client.select(
            GROUP_TABLE, "id, name, up, down, created_at", filters={"id": group_id}
        )
        if not rows:
            return None
        return MigrationGroup.from_row(rows[0])

    async def list_groups(self) -> list[MigrationGroup]:
        rows = await self._client.select(
            GROUP_TABLE, "id, name, up, down, created_at", order_by="id"
        )
        return [MigrationGroup.from_row(row) for row in rows]

    async def list_entries(self, group_id: int) -> list[MigrationEntry]:
        rows = await self._client.select(
            ENTRY_TABLE,
            "id, name, table_name, column_name, operation, up, down, migration_group_id",
            filters={"migration_group_id": group_id},
            order_by="id",
        )
        return [MigrationEntry.from_row(row) for row in rows]
