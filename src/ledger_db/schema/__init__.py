"""Declared models, introspection, comparison, and table synchronization.

Provides declaration models (``ColumnDescriptor``, ``ModelDescriptor``),
MySQL DDL generation (``ddl``), live introspection
(``SchemaIntrospector``), drift detection (``diff_columns``), and the
startup synchronizer (``TableSynchronizer``, ``sync_database``).

Usage:
    from ledger_db.schema import ColumnDescriptor, ColumnType, ModelDescriptor
    from ledger_db.schema import SchemaIntrospector, diff_columns
    from ledger_db.schema import TableSynchronizer, sync_database
"""

from ledger_db.schema import ddl
from ledger_db.schema.comparator import column_needs_update, diff_columns
from ledger_db.schema.introspector import SchemaIntrospector
from ledger_db.schema.models import (
    CURRENT_TIMESTAMP,
    ChangeSet,
    ColumnDescriptor,
    ColumnType,
    IntrospectedColumn,
    ModelDescriptor,
    Relation,
    TableSyncResult,
)
from ledger_db.schema.sync import TableSynchronizer, sync_database

__all__ = [
    "ddl",
    "diff_columns",
    "column_needs_update",
    "SchemaIntrospector",
    "CURRENT_TIMESTAMP",
    "ChangeSet",
    "ColumnDescriptor",
    "ColumnType",
    "IntrospectedColumn",
    "ModelDescriptor",
    "Relation",
    "TableSyncResult",
    "TableSynchronizer",
    "sync_database",
]
