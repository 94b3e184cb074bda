"""Migration recording for table synchronization passes.

Every non-empty ``ChangeSet`` produced by the table synchronizer becomes one
migration group plus one migration entry per added or removed column.  The
group carries the forward (``up``) statements in the order they were
recorded and the reverse (``down``) statements as a stack, so replaying
``down`` undoes the changes last-first.

Updated columns are applied live by the synchronizer but produce no entries
and no statements in the group; they only appear in the aggregate log record.

Recording is a log of schema history, not a gate: failures are logged and
never undo the structural change that was already applied.

Usage:
    from ledger_db.migrations.recorder import MigrationRecorder
    from ledger_db.migrations.store import MigrationStore

    recorder = MigrationRecorder(MigrationStore(client))
    group_id = await recorder.record("account", changes, model.columns)
"""

from collections.abc import Iterable, Sequence
from datetime import datetime, timezone

from ledger_db.logs import LogCategory, LogSink, LogType, Operation, create_log
from ledger_db.migrations.models import MigrationEntry
from ledger_db.migrations.store import MigrationStore
from ledger_db.schema.ddl import add_column_sql, column_definition, drop_column_sql
from ledger_db.schema.models import ChangeSet, ColumnDescriptor

DEFAULT_IGNORED_COLUMNS = ("updated_at",)

# Definition used when the declared column is unknown to the recorder.
FALLBACK_ADD_DEFINITION = "TEXT DEFAULT NULL"

# The original type of a dropped column is not recoverable from the change
# set, so its down-migration re-adds a generic column.
RESTORED_COLUMN_DEFINITION = "VARCHAR(255) DEFAULT NULL"


def _timestamp() -> str:
    return datetime.now(timezone.utc).strftime("%Y%m%d%H%M%S%f")[:-3]


class MigrationRecorder:
    """Persists what a table synchronization pass changed.

    Args:
        store: Migration table persistence.
        ignored_columns: Column names whose changes alone do not justify a
            migration group (e.g. ``updated_at`` trigger churn).
        log: Log sink.
    """

    def __init__(
        self,
        store: MigrationStore,
        ignored_columns: Iterable[str] = DEFAULT_IGNORED_COLUMNS,
        log: LogSink = create_log,
    ) -> None:
        self._store = store
        self._ignored = frozenset(ignored_columns)
        self._log = log

    async def record(
        self,
        table_name: str,
        changes: ChangeSet,
        columns: Sequence[ColumnDescriptor] | None = None,
    ) -> int | None:
        """Record one table's change set as a migration group.

        Args:
            table_name: Table the changes were applied to.
            changes: Added, updated, and removed column names.
            columns: Declared columns; used to render the real definition of
                added columns in their ``up`` statement.

        Returns:
            The migration group id, or ``None`` if nothing was recorded.
        """
        significant = changes.without(self._ignored)
        if significant.is_empty:
            self._log(
                LogType.DEBUG,
                Operation.SEARCH,
                LogCategory.DATABASE,
                f"No real schema changes for table '{table_name}'.",
            )
            return None

        self._log(
            LogType.SUCCESS,
            Operation.UPDATE,
            LogCategory.DATABASE,
            {"table": table_name, "action": Operation.UPDATE.value, "changes": changes.model_dump()},
        )

        timestamp = _timestamp()
        group_name = f"group--{table_name}--{timestamp}"
        definitions = {col.name: column_definition(col) for col in columns or ()}

        try:
            group_id = await self._store.insert_group(group_name)
        except Exception as e:
            self._log(
                LogType.ERROR,
                Operation.CREATE,
                LogCategory.MIGRATION_GROUP,
                {"message": f"Error creating migration group for {table_name}: {e}"},
            )
            return None

        up_queries: list[str] = []
        down_queries: list[str] = []

        for column_name in changes.added:
            definition = definitions.get(column_name, f"{column_name} {FALLBACK_ADD_DEFINITION}")
            await self._save_entry(
                MigrationEntry(
                    name=f"{table_name}--{Operation.CREATE.value}--{column_name}--{timestamp}",
                    table_name=table_name,
                    column_name=column_name,
                    operation=Operation.CREATE,
                    up=add_column_sql(table_name, definition),
                    down=drop_column_sql(table_name, column_name),
                    migration_group_id=group_id,
                ),
                up_queries,
                down_queries,
            )

        for column_name in changes.removed:
            await self._save_entry(
                MigrationEntry(
                    name=f"{table_name}--{Operation.DELETE.value}--{column_name}--{timestamp}",
                    table_name=table_name,
                    column_name=column_name,
                    operation=Operation.DELETE,
                    up=drop_column_sql(table_name, column_name),
                    down=add_column_sql(table_name, f"{column_name} {RESTORED_COLUMN_DEFINITION}"),
                    migration_group_id=group_id,
                ),
                up_queries,
                down_queries,
            )

        try:
            await self._store.update_group_queries(group_id, up_queries, down_queries)
        except Exception as e:
            self._log(
                LogType.ERROR,
                Operation.UPDATE,
                LogCategory.MIGRATION_GROUP,
                {"message": f"Error completing migration group {group_id} for {table_name}: {e}"},
            )
            return group_id

        self._log(
            LogType.SUCCESS,
            Operation.CREATE,
            LogCategory.MIGRATION_GROUP,
            {
                "migration_group": group_name,
                "total_alterations": len(significant.added) + len(significant.removed),
            },
            group_id,
        )
        return group_id

    async def _save_entry(
        self,
        entry: MigrationEntry,
        up_queries: list[str],
        down_queries: list[str],
    ) -> None:
        """Stack the entry's statements onto the group and persist it."""
        up_queries.append(entry.up)
        down_queries.insert(0, entry.down)

        try:
            await self._store.insert_entry(entry)
        except Exception as e:
            self._log(
                LogType.ERROR,
                entry.operation,
                LogCategory.MIGRATION,
                {
                    "message": (
                        f"Error saving migration for {entry.table_name}.{entry.column_name}: {e}"
                    )
                },
            )
            return

        self._log(
            LogType.SUCCESS,
            entry.operation,
            LogCategory.MIGRATION,
            {"migration": entry.name},
        )
