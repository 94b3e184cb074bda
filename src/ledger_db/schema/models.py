"""Pydantic models for declared and introspected table structure.

This module contains schema-domain models:
- Declaration models: ColumnType, ColumnDescriptor, Relation, ModelDescriptor
- Introspection models: IntrospectedColumn
- Diff models: ChangeSet, TableSyncResult
- Connection result: ConnectionResult

Migration records (MigrationGroup, MigrationEntry) live in
ledger_db.migrations.models.
"""

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


# ============================================================================
# Declaration Models
# ============================================================================


class ColumnType(str, Enum):
    """Logical column types and their MySQL rendering."""

    VARCHAR = "VARCHAR(255)"
    CHAR = "CHAR(255)"
    TEXT = "TEXT"
    TINYINT = "TINYINT"
    INTEGER = "INT"
    MEDIUMINT = "MEDIUMINT"
    BIGINT = "BIGINT"
    FLOAT = "FLOAT"
    DOUBLE = "DOUBLE"
    DECIMAL = "DECIMAL(10,2)"
    BOOLEAN = "BOOLEAN"
    DATE = "DATE"
    DATETIME = "DATETIME"
    TIME = "TIME"
    TIMESTAMP = "TIMESTAMP"
    YEAR = "YEAR"
    ENUM = "ENUM"
    BLOB = "BLOB"


# Default-value sentinel rendered as the database-native current timestamp.
CURRENT_TIMESTAMP = "CURRENT_TIMESTAMP"


class ColumnDescriptor(BaseModel):
    """Declared shape of one column.

    Example:
        >>> col = ColumnDescriptor(name="active", type=ColumnType.BOOLEAN, default=True)
        >>> col.unique
        False
    """

    model_config = ConfigDict(frozen=True)

    name: str
    type: ColumnType = ColumnType.VARCHAR
    enum_values: tuple[str, ...] | None = None
    default: Any = None
    unique: bool = False
    index: bool = False
    on_update_timestamp: bool = False

    @model_validator(mode="after")
    def _check_enum_values(self) -> "ColumnDescriptor":
        if self.type == ColumnType.ENUM and not self.enum_values:
            raise ValueError(f"ENUM column '{self.name}' requires enum_values")
        return self


class Relation(BaseModel):
    """Many-to-one link to another table, stored as ``<name>_id``."""

    model_config = ConfigDict(frozen=True)

    name: str
    target: str

    @property
    def column_name(self) -> str:
        return f"{self.name}_id"


ID_COLUMN = ColumnDescriptor(name="id", type=ColumnType.INTEGER)


class ModelDescriptor(BaseModel):
    """Declared table: name, columns, and many-to-one relations."""

    model_config = ConfigDict(frozen=True)

    table_name: str
    columns: tuple[ColumnDescriptor, ...] = ()
    relations: tuple[Relation, ...] = ()

    @field_validator("table_name")
    @classmethod
    def _lower_table_name(cls, value: str) -> str:
        return value.lower()

    def with_id_column(self) -> tuple[ColumnDescriptor, ...]:
        """Declared columns with ``id`` prepended when it is missing."""
        if any(col.name == "id" for col in self.columns):
            return self.columns
        return (ID_COLUMN, *self.columns)

    @property
    def column_names(self) -> list[str]:
        return [col.name for col in self.with_id_column()]


# ============================================================================
# Introspection Models
# ============================================================================


class IntrospectedColumn(BaseModel):
    """A column as currently stored in the database.

    Example:
        >>> col = IntrospectedColumn(name="type", sql_type="enum('a','b')")
        >>> col.default_raw is None
        True
    """

    name: str
    sql_type: str
    default_raw: str | None = None
    extra: str = ""


# ============================================================================
# Diff Models
# ============================================================================


class ChangeSet(BaseModel):
    """Column names added, updated, and removed in one table pass."""

    added: list[str] = Field(default_factory=list)
    updated: list[str] = Field(default_factory=list)
    removed: list[str] = Field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not (self.added or self.updated or self.removed)

    def without(self, ignored: set[str] | frozenset[str]) -> "ChangeSet":
        """Copy of this change set with *ignored* column names filtered out."""
        return ChangeSet(
            added=[c for c in self.added if c not in ignored],
            updated=[c for c in self.updated if c not in ignored],
            removed=[c for c in self.removed if c not in ignored],
        )


class TableSyncResult(BaseModel):
    """Outcome of one table's synchronization pass."""

    table: str
    created: bool = False
    changes: ChangeSet = Field(default_factory=ChangeSet)
    migration_group_id: int | None = None
    foreign_keys_added: list[str] = Field(default_factory=list)


# ============================================================================
# Connection Result
# ============================================================================


class ConnectionResult(BaseModel):
    """Result of connect_and_sync().

    Example:
        >>> result = ConnectionResult(success=True, profile_name="dev")
        >>> result.sync_results
        []
    """

    success: bool
    profile_name: str | None = None
    sync_results: list[TableSyncResult] = Field(default_factory=list)
    error: str | None = None
