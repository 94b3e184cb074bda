"""MySQL DDL generation from column descriptors.

Pure functions -- no I/O, no database connections. Output is deterministic
for identical input, which the comparator relies on when it normalizes
declared defaults.

Usage:
    from ledger_db.schema.ddl import column_definition, create_table_sql

    column_definition(ColumnDescriptor(name="active", type=ColumnType.BOOLEAN, default=True))
    # 'active BOOLEAN DEFAULT 1'
"""

from ledger_db.schema.models import (
    CURRENT_TIMESTAMP,
    ColumnDescriptor,
    ColumnType,
    ModelDescriptor,
    Relation,
)

ID_DEFINITION = "id INT AUTO_INCREMENT PRIMARY KEY"


def _quote(value: object) -> str:
    return "'" + str(value).replace("'", "''") + "'"


def resolve_column_type(col: ColumnDescriptor) -> str:
    """SQL type for *col*; enums render their values inline.

    Examples:
        >>> resolve_column_type(ColumnDescriptor(name="t", type=ColumnType.ENUM, enum_values=("a", "b")))
        "ENUM('a','b')"
        >>> resolve_column_type(ColumnDescriptor(name="n"))
        'VARCHAR(255)'
    """
    if col.type == ColumnType.ENUM:
        return f"ENUM({','.join(_quote(v) for v in col.enum_values or ())})"
    return col.type.value


def resolve_default_clause(col: ColumnDescriptor) -> str:
    """Default clause for *col*, with a leading space.

    Examples:
        >>> resolve_default_clause(ColumnDescriptor(name="b", type=ColumnType.BOOLEAN, default=False))
        ' DEFAULT 0'
        >>> resolve_default_clause(ColumnDescriptor(name="n"))
        ' DEFAULT NULL'
    """
    if col.default == CURRENT_TIMESTAMP:
        if col.on_update_timestamp:
            return f" DEFAULT {CURRENT_TIMESTAMP} ON UPDATE {CURRENT_TIMESTAMP}"
        return f" DEFAULT {CURRENT_TIMESTAMP}"
    if col.default is None:
        return " DEFAULT NULL"
    if col.type == ColumnType.BOOLEAN:
        return f" DEFAULT {1 if col.default else 0}"
    return f" DEFAULT {_quote(col.default)}"


def intended_default(col: ColumnDescriptor) -> str:
    """Normalized text of the default the database should report for *col*.

    Used by the comparator; matches the normalization applied to the stored
    default (upper-cased, ``NULL`` for no default, ``0``/``1`` for booleans).
    """
    if col.default == CURRENT_TIMESTAMP:
        return CURRENT_TIMESTAMP
    if col.default is None:
        return "NULL"
    if col.type == ColumnType.BOOLEAN:
        return "1" if col.default else "0"
    return str(col.default).upper()


def column_definition(col: ColumnDescriptor) -> str:
    """Full column definition (``name type default``)."""
    if col.name == "id":
        return ID_DEFINITION
    return f"{col.name} {resolve_column_type(col)}{resolve_default_clause(col)}"


def create_table_sql(model: ModelDescriptor) -> str:
    """``CREATE TABLE`` for *model* with ``id`` as the first column."""
    definitions = ", ".join(column_definition(col) for col in model.with_id_column())
    return f"CREATE TABLE {model.table_name} ({definitions})"


def add_column_sql(table: str, definition: str) -> str:
    return f"ALTER TABLE {table} ADD COLUMN {definition}"


def modify_column_sql(table: str, col: ColumnDescriptor) -> str:
    return f"ALTER TABLE {table} MODIFY COLUMN {column_definition(col)}"


def drop_column_sql(table: str, column: str) -> str:
    return f"ALTER TABLE {table} DROP COLUMN {column}"


def unique_constraint_sql(table: str, column: str) -> str:
    """Named unique key; re-running it fails with a duplicate key name."""
    return f"ALTER TABLE {table} ADD UNIQUE KEY uq_{table}_{column} ({column})"


def index_sql(table: str, column: str) -> str:
    return f"CREATE INDEX idx_{column} ON {table}({column})"


def foreign_key_sql(table: str, relation: Relation) -> str:
    """Constraint linking ``<relation>_id`` to ``<target>(id)``."""
    column = relation.column_name
    return (
        f"ALTER TABLE {table} ADD CONSTRAINT fk_{table}_{column} "
        f"FOREIGN KEY ({column}) REFERENCES {relation.target}(id) ON DELETE CASCADE"
    )
