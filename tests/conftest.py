"""Shared fixtures: an in-memory stand-in for a MySQL ``DatabaseClient``.

``FakeDatabaseClient`` understands exactly the statements this package
emits (information_schema lookups, CREATE TABLE, ALTER TABLE ADD/MODIFY/DROP
COLUMN, ADD UNIQUE KEY, CREATE INDEX, ADD CONSTRAINT ... FOREIGN KEY, and plain
transaction control) and keeps row storage for the migration tables.
"""

import copy
import re
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import Any

import pytest


@dataclass
class FakeColumn:
    name: str
    sql_type: str
    default_raw: str | None = None
    extra: str = ""


@dataclass
class FakeTable:
    columns: dict[str, FakeColumn] = field(default_factory=dict)
    unique: set[str] = field(default_factory=set)
    indexes: set[str] = field(default_factory=set)
    foreign_keys: dict[str, str] = field(default_factory=dict)


def _split_definitions(body: str) -> list[str]:
    """Split a CREATE TABLE body on top-level commas."""
    parts: list[str] = []
    depth = 0
    in_quote = False
    current = ""
    for ch in body:
        if ch == "'":
            in_quote = not in_quote
        elif not in_quote and ch == "(":
            depth += 1
        elif not in_quote and ch == ")":
            depth -= 1
        if ch == "," and depth == 0 and not in_quote:
            parts.append(current.strip())
            current = ""
            continue
        current += ch
    if current.strip():
        parts.append(current.strip())
    return parts


def _unquote(value: str) -> str:
    if len(value) >= 2 and value.startswith("'") and value.endswith("'"):
        return value[1:-1].replace("''", "'")
    return value


def parse_column_definition(definition: str) -> FakeColumn:
    """Turn ``name TYPE [DEFAULT x] [ON UPDATE CURRENT_TIMESTAMP]`` into a column.

    Reports values the way MySQL's information_schema does: lower-case type,
    unquoted default, ``tinyint(1)`` for BOOLEAN.
    """
    name, _, rest = definition.strip().partition(" ")

    if "AUTO_INCREMENT" in rest:
        return FakeColumn(name=name, sql_type="int", extra="auto_increment")

    extra = ""
    if rest.endswith(" ON UPDATE CURRENT_TIMESTAMP"):
        rest = rest[: -len(" ON UPDATE CURRENT_TIMESTAMP")]
        extra = "DEFAULT_GENERATED on update CURRENT_TIMESTAMP"

    default_raw: str | None = None
    sql_type, sep, default = rest.partition(" DEFAULT ")
    if sep:
        default = default.strip()
        default_raw = None if default == "NULL" else _unquote(default)
        if default == "CURRENT_TIMESTAMP" and not extra:
            extra = "DEFAULT_GENERATED"

    sql_type = sql_type.strip()
    if sql_type.upper() == "BOOLEAN":
        sql_type = "tinyint(1)"
    elif sql_type.upper().startswith("ENUM("):
        sql_type = "enum" + sql_type[4:]
    else:
        sql_type = sql_type.lower()

    return FakeColumn(name=name, sql_type=sql_type, default_raw=default_raw, extra=extra)


class FakeDatabaseClient:
    """In-memory ``DatabaseClient`` with schema state and a statement journal.

    Attributes:
        tables: Live schema, by table name.
        rows: Stored rows, by table name.
        statements: Every SQL statement passed to ``execute`` (metadata
            queries excluded), in order.
        fail_on: Substrings; any statement containing one raises.
    """

    def __init__(self) -> None:
        self.tables: dict[str, FakeTable] = {}
        self.rows: dict[str, list[dict]] = {}
        self.statements: list[str] = []
        self.fail_on: list[str] = []
        self.closed = False
        self._next_id: dict[str, int] = {}
        self._snapshot: dict[str, FakeTable] | None = None

    # ------------------------------------------------------------------
    # Helpers for tests
    # ------------------------------------------------------------------

    def create_table(self, name: str, *definitions: str) -> FakeTable:
        table = FakeTable()
        for definition in definitions:
            col = parse_column_definition(definition)
            table.columns[col.name] = col
        self.tables[name] = table
        return table

    def ddl(self) -> list[str]:
        """Executed statements excluding transaction control."""
        return [
            s for s in self.statements
            if s not in ("START TRANSACTION", "COMMIT", "ROLLBACK")
        ]

    def _check_failure(self, sql: str) -> None:
        for marker in self.fail_on:
            if marker in sql:
                raise RuntimeError(f"Simulated failure: {sql}")

    def _table(self, name: str) -> FakeTable:
        if name not in self.tables:
            raise RuntimeError(f"Table '{name}' doesn't exist")
        return self.tables[name]

    # ------------------------------------------------------------------
    # QueryExecutor
    # ------------------------------------------------------------------

    async def execute(self, sql: str, params: dict | None = None) -> list[dict]:
        params = params or {}
        if "information_schema" in sql:
            return self._metadata(sql, params)

        sql = sql.strip()
        self.statements.append(sql)
        self._check_failure(sql)
        self._apply(sql)
        return []

    def _metadata(self, sql: str, params: dict) -> list[dict]:
        self._check_failure(sql)
        name = params["table_name"]
        if "information_schema.TABLES" in sql:
            return [{"name": name}] if name in self.tables else []
        table = self.tables.get(name, FakeTable())
        if "information_schema.COLUMNS" in sql:
            return [
                {
                    "name": col.name,
                    "sql_type": col.sql_type,
                    "default_raw": col.default_raw,
                    "extra": col.extra,
                }
                for col in table.columns.values()
            ]
        if "KEY_COLUMN_USAGE" in sql:
            return [{"name": col} for col in table.foreign_keys]
        raise AssertionError(f"Unexpected metadata query: {sql}")

    def _apply(self, sql: str) -> None:
        if sql == "START TRANSACTION":
            self._snapshot = copy.deepcopy(self.tables)
            return
        if sql == "COMMIT":
            self._snapshot = None
            return
        if sql == "ROLLBACK":
            if self._snapshot is not None:
                self.tables = self._snapshot
            self._snapshot = None
            return

        if m := re.fullmatch(r"CREATE TABLE (\w+) \((.*)\)", sql, re.DOTALL):
            name, body = m.groups()
            if name in self.tables:
                raise RuntimeError(f"Table '{name}' already exists")
            self.create_table(name, *_split_definitions(body))
            return

        if m := re.fullmatch(r"CREATE INDEX (\w+) ON (\w+)\((\w+)\)", sql):
            index, name, column = m.groups()
            table = self._table(name)
            if column not in table.columns:
                raise RuntimeError(f"Key column '{column}' doesn't exist in table")
            if index in table.indexes:
                raise RuntimeError(f"Duplicate key name '{index}'")
            table.indexes.add(index)
            return

        m = re.fullmatch(r"ALTER TABLE (\w+) (.*)", sql, re.DOTALL)
        if not m:
            raise RuntimeError(f"Unsupported statement: {sql}")
        table = self._table(m.group(1))
        action = m.group(2)

        if action.startswith("ADD COLUMN "):
            col = parse_column_definition(action[len("ADD COLUMN "):])
            if col.name in table.columns:
                raise RuntimeError(f"Duplicate column name '{col.name}'")
            table.columns[col.name] = col
        elif action.startswith("MODIFY COLUMN "):
            col = parse_column_definition(action[len("MODIFY COLUMN "):])
            if col.name not in table.columns:
                raise RuntimeError(f"Unknown column '{col.name}'")
            table.columns[col.name] = col
        elif action.startswith("DROP COLUMN "):
            column = action[len("DROP COLUMN "):]
            if column not in table.columns:
                raise RuntimeError(f"Can't DROP '{column}'; check that column/key exists")
            del table.columns[column]
        elif um := re.fullmatch(r"ADD UNIQUE KEY (\w+) \((\w+)\)", action):
            key, column = um.groups()
            if column not in table.columns:
                raise RuntimeError(f"Key column '{column}' doesn't exist in table")
            if key in table.indexes:
                raise RuntimeError(f"Duplicate key name '{key}'")
            table.indexes.add(key)
            table.unique.add(column)
        elif fm := re.fullmatch(
            r"ADD CONSTRAINT \w+ FOREIGN KEY \((\w+)\) REFERENCES (\w+)\(id\).*", action
        ):
            column, target = fm.groups()
            if column not in table.columns:
                raise RuntimeError(f"Key column '{column}' doesn't exist in table")
            self._table(target)
            table.foreign_keys[column] = target
        else:
            raise RuntimeError(f"Unsupported statement: {sql}")

    # ------------------------------------------------------------------
    # DatabaseClient
    # ------------------------------------------------------------------

    async def select(
        self,
        table: str,
        columns: str,
        filters: dict[str, Any] | None = None,
        order_by: str | None = None,
    ) -> list[dict]:
        self._check_failure(f"SELECT {columns} FROM {table}")
        names = [c.strip() for c in columns.split(",")]
        rows = [
            row for row in self.rows.get(table, [])
            if all(row.get(k) == v for k, v in (filters or {}).items())
        ]
        if order_by:
            rows = sorted(rows, key=lambda row: row.get(order_by))
        return [{name: row.get(name) for name in names} for row in rows]

    async def insert(self, table: str, data: dict) -> int:
        self._check_failure(f"INSERT INTO {table}")
        row_id = self._next_id.get(table, 0) + 1
        self._next_id[table] = row_id
        self.rows.setdefault(table, []).append(
            {"id": row_id, "created_at": "2026-01-01T00:00:00", **data}
        )
        return row_id

    async def update(self, table: str, data: dict, filters: dict[str, Any]) -> int:
        self._check_failure(f"UPDATE {table}")
        count = 0
        for row in self.rows.get(table, []):
            if all(row.get(k) == v for k, v in filters.items()):
                row.update(data)
                count += 1
        return count

    @asynccontextmanager
    async def connection(self):
        yield self

    async def close(self) -> None:
        self.closed = True


@pytest.fixture
def client() -> FakeDatabaseClient:
    return FakeDatabaseClient()


@pytest.fixture
def log_records() -> list[tuple]:
    return []


@pytest.fixture
def log(log_records: list[tuple]):
    """Log sink that captures records as tuples."""

    def sink(log_type, operation, category, detail, subject_id=None) -> None:
        log_records.append((log_type, operation, category, detail, subject_id))

    return sink
