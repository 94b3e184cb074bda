"""Schema comparison between declared and introspected columns.

Pure logic -- no I/O, no database connections.

Three kinds of drift trigger an update of an existing column:
- Enum value sets differ (compared as sets, order-independent)
- Normalized defaults differ
- The column is declared ``on_update_timestamp`` but the database does not
  report the update trigger in ``extra``

Differences in the textual SQL type alone (e.g. ``int`` vs ``INT``) never
trigger a change.

Usage:
    from ledger_db.schema.comparator import diff_columns
    from ledger_db.schema.introspector import SchemaIntrospector

    introspector = SchemaIntrospector(client)
    existing = await introspector.list_columns("account")
    fk_columns = await introspector.list_foreign_key_columns("account")

    changes = diff_columns(model.with_id_column(), existing, fk_columns)
"""

import re
from collections.abc import Iterable, Sequence

from ledger_db.schema.ddl import intended_default
from ledger_db.schema.models import (
    CURRENT_TIMESTAMP,
    ChangeSet,
    ColumnDescriptor,
    ColumnType,
    IntrospectedColumn,
)

_ENUM_TYPE = re.compile(r"^enum\((.*)\)$", re.IGNORECASE | re.DOTALL)
_ENUM_VALUE = re.compile(r"'((?:[^']|'')*)'")

ON_UPDATE_MARKER = "on update current_timestamp"


def parse_enum_values(sql_type: str) -> set[str]:
    """Extract the value set of a live ``enum('a','b')`` type.

    Examples:
        >>> sorted(parse_enum_values("enum('income','expense')"))
        ['expense', 'income']
        >>> parse_enum_values("varchar(255)")
        set()
    """
    match = _ENUM_TYPE.match(sql_type.strip())
    if not match:
        return set()
    return {value.replace("''", "'") for value in _ENUM_VALUE.findall(match.group(1))}


def normalize_stored_default(default_raw: str | None) -> str:
    """Normalize a default as reported by the database.

    Examples:
        >>> normalize_stored_default(None)
        'NULL'
        >>> normalize_stored_default("'dark'")
        'DARK'
    """
    if default_raw is None:
        return "NULL"
    value = str(default_raw)
    if len(value) >= 2 and value.startswith("'") and value.endswith("'"):
        value = value[1:-1]
    return value.upper()


def enums_match(existing: IntrospectedColumn, col: ColumnDescriptor) -> bool:
    """True if the live enum holds exactly the declared values."""
    return parse_enum_values(existing.sql_type) == set(col.enum_values or ())


def defaults_match(existing: IntrospectedColumn, col: ColumnDescriptor) -> bool:
    """True if the stored default is equivalent to the declared one."""
    stored = normalize_stored_default(existing.default_raw)
    intended = intended_default(col)
    if intended == CURRENT_TIMESTAMP:
        return CURRENT_TIMESTAMP in stored
    return stored == intended


def on_update_matches(existing: IntrospectedColumn, col: ColumnDescriptor) -> bool:
    """True unless the update trigger is declared but missing in the database."""
    if not col.on_update_timestamp:
        return True
    return ON_UPDATE_MARKER in existing.extra.lower()


def column_needs_update(col: ColumnDescriptor, existing: IntrospectedColumn) -> bool:
    """Decide whether an existing column has drifted from its declaration."""
    enum_drift = col.type == ColumnType.ENUM and not enums_match(existing, col)
    return enum_drift or not defaults_match(existing, col) or not on_update_matches(existing, col)


def removable_columns(
    declared_names: Iterable[str],
    introspected: Sequence[IntrospectedColumn],
    fk_columns: Iterable[str],
) -> list[str]:
    """Live columns eligible for removal, in live column order.

    ``id`` and foreign-key columns are never offered for removal.
    """
    declared = set(declared_names)
    protected = set(fk_columns) | {"id"}
    return [
        col.name
        for col in introspected
        if col.name not in declared and col.name not in protected
    ]


def diff_columns(
    declared: Sequence[ColumnDescriptor],
    introspected: Sequence[IntrospectedColumn],
    fk_columns: Iterable[str] = (),
) -> ChangeSet:
    """Compute the change set between declared and live columns.

    Args:
        declared: Declared columns (``id`` included or not; it is never
            reported as a change).
        introspected: Columns read from the database.
        fk_columns: Names of live columns participating in a foreign key.

    Returns:
        ``ChangeSet`` with added and updated columns in declaration order and
        removed columns in live order.

    Examples:
        >>> declared = [ColumnDescriptor(name="name")]
        >>> live = [IntrospectedColumn(name="id", sql_type="int"),
        ...         IntrospectedColumn(name="legacy", sql_type="text")]
        >>> diff_columns(declared, live).model_dump()
        {'added': ['name'], 'updated': [], 'removed': ['legacy']}
    """
    existing = {col.name: col for col in introspected}
    changes = ChangeSet()

    for col in declared:
        if col.name == "id":
            continue
        current = existing.get(col.name)
        if current is None:
            changes.added.append(col.name)
        elif column_needs_update(col, current):
            changes.updated.append(col.name)

    changes.removed = removable_columns(
        (col.name for col in declared), introspected, fk_columns
    )
    return changes
