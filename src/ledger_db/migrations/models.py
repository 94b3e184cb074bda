"""Migration record models and their stored query serialization.

Migration groups persist their query lists as JSON text
``{"queries": [...]}``; migration entries persist a single statement as
``{"query": "..."}``.

Usage:
    from ledger_db.migrations.models import MigrationGroup, serialize_queries

    group = MigrationGroup.from_row({"id": 3, "name": "g", "up": '{"queries": []}', "down": ""})
    group.up_queries
    # []
"""

import json
from enum import Enum

from pydantic import BaseModel, Field

from ledger_db.logs import Operation


class MigrationDirection(str, Enum):
    """Which stored query list a replay executes."""

    APPLY = "apply"         # run ``up``
    ROLLBACK = "rollback"   # run ``down``


def serialize_queries(queries: list[str]) -> str:
    return json.dumps({"queries": list(queries)})


def parse_queries(raw: str | None) -> list[str]:
    """Decode a stored query list; empty or missing text means no queries."""
    if not raw:
        return []
    return list(json.loads(raw).get("queries", []))


def serialize_query(query: str) -> str:
    return json.dumps({"query": query})


def parse_query(raw: str | None) -> str:
    if not raw:
        return ""
    return json.loads(raw).get("query", "")


class MigrationGroup(BaseModel):
    """Named bundle of forward and reverse statements for one table pass.

    ``down_queries`` is the reverse of ``up_queries``: the last statement
    applied is the first one undone.
    """

    id: int | None = None
    name: str
    up_queries: list[str] = Field(default_factory=list)
    down_queries: list[str] = Field(default_factory=list)
    created_at: str | None = None

    @classmethod
    def from_row(cls, row: dict) -> "MigrationGroup":
        return cls(
            id=row.get("id"),
            name=row.get("name") or "",
            up_queries=parse_queries(row.get("up")),
            down_queries=parse_queries(row.get("down")),
            created_at=row.get("created_at"),
        )

    def queries_for(self, direction: MigrationDirection) -> list[str]:
        if direction == MigrationDirection.APPLY:
            return self.up_queries
        return self.down_queries


class MigrationEntry(BaseModel):
    """One column-level add or remove within a migration group."""

    id: int | None = None
    name: str
    table_name: str
    column_name: str
    operation: Operation
    up: str
    down: str
    migration_group_id: int | None = None

    def to_row(self) -> dict:
        return {
            "name": self.name,
            "table_name": self.table_name,
            "column_name": self.column_name,
            "operation": self.operation.value,
            "up": serialize_query(self.up),
            "down": serialize_query(self.down),
            "migration_group_id": self.migration_group_id,
        }

    @classmethod
    def from_row(cls, row: dict) -> "MigrationEntry":
        return cls(
            id=row.get("id"),
            name=row["name"],
            table_name=row["table_name"],
            column_name=row["column_name"],
            operation=Operation(row["operation"]),
            up=parse_query(row.get("up")),
            down=parse_query(row.get("down")),
            migration_group_id=row.get("migration_group_id"),
        )


class ReplayResult(BaseModel):
    """Result of replaying a migration group.

    Attributes:
        success: True if every statement ran and the transaction committed.
        group_id: Migration group that was requested.
        direction: Requested direction (as given, even if invalid).
        steps: Number of statements in the selected list.
        error: Error message if the replay was rejected or rolled back.
    """

    success: bool = False
    group_id: int
    direction: str
    steps: int = 0
    error: str | None = None
