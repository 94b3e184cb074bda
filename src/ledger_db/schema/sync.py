"""Table synchronization: converge the live schema on the declared models.

For each declared model, in declaration order:

1. If the table is absent, issue one ``CREATE TABLE`` (not recorded as a
   migration).
2. Otherwise, for every declared column except ``id``: apply its unique/index
   constraint (errors swallowed, constraints are meant to be idempotent), add
   it if missing, or ``MODIFY`` it if it drifted.  Then drop every live column
   that is neither declared, ``id``, nor part of a foreign key.
3. Hand the change set to the migration recorder.

After every table has been synchronized, many-to-one relations are
synchronized in the same order so that referenced tables exist.

Nothing here runs in a transaction: a failure part-way through a table leaves
it partially altered.  Tables are processed strictly one after another.

Usage:
    from ledger_db.registry import MODELS
    from ledger_db.schema.sync import sync_database

    results = await sync_database(client, MODELS)
    for result in results:
        print(result.table, result.changes)
"""

from collections.abc import Iterable, Sequence

from ledger_db.adapters.base import DatabaseClient
from ledger_db.logs import LogCategory, LogSink, LogType, Operation, create_log
from ledger_db.migrations.recorder import DEFAULT_IGNORED_COLUMNS, MigrationRecorder
from ledger_db.migrations.store import MigrationStore
from ledger_db.schema import ddl
from ledger_db.schema.comparator import diff_columns
from ledger_db.schema.introspector import SchemaIntrospector
from ledger_db.schema.models import (
    ChangeSet,
    ColumnDescriptor,
    ModelDescriptor,
    TableSyncResult,
)


class TableSynchronizer:
    """Applies declared models to the live database one table at a time.

    Args:
        client: Database client; the only path DDL takes to the database.
        recorder: Migration recorder for change sets (defaults to one backed
            by a ``MigrationStore`` over *client*).
        log: Log sink.
    """

    def __init__(
        self,
        client: DatabaseClient,
        recorder: MigrationRecorder | None = None,
        log: LogSink = create_log,
    ) -> None:
        self._client = client
        self._introspector = SchemaIntrospector(client)
        self._recorder = recorder or MigrationRecorder(MigrationStore(client), log=log)
        self._log = log

    async def sync_table(self, model: ModelDescriptor) -> TableSyncResult:
        """Run one table's full synchronization pass.

        Raises:
            Exception: Introspection errors and failures creating the table or
                adding a column propagate unchanged.
        """
        table = model.table_name
        columns = model.with_id_column()
        self._log(LogType.DEBUG, Operation.SEARCH, LogCategory.DATABASE, f"Checking table: '{table}'")

        if not await self._introspector.table_exists(table):
            await self._create_table(model)
            return TableSyncResult(table=table, created=True)

        changes = await self._update_existing_table(table, columns)
        group_id = await self._recorder.record(table, changes, columns)
        return TableSyncResult(table=table, changes=changes, migration_group_id=group_id)

    async def sync_relationships(self, model: ModelDescriptor) -> list[str]:
        """Add missing many-to-one foreign key columns and constraints.

        Returns:
            Names of the foreign key columns that were added.
        """
        table = model.table_name
        if not model.relations:
            return []

        existing = {col.name for col in await self._introspector.list_columns(table)}
        added: list[str] = []

        for relation in model.relations:
            if not await self._introspector.table_exists(relation.target):
                self._log(
                    LogType.ERROR,
                    Operation.UPDATE,
                    LogCategory.DATABASE,
                    {
                        "message": (
                            f"Cannot add foreign key to '{table}'. "
                            f"Table '{relation.target}' does not exist."
                        )
                    },
                )
                continue

            if relation.column_name in existing:
                continue

            await self._client.execute(ddl.add_column_sql(table, f"{relation.column_name} INT"))
            await self._client.execute(ddl.foreign_key_sql(table, relation))
            added.append(relation.column_name)
            self._log(
                LogType.SUCCESS,
                Operation.UPDATE,
                LogCategory.DATABASE,
                {
                    "table": table,
                    "action": "foreign_key_added",
                    "column": relation.column_name,
                    "references": relation.target,
                },
            )

        return added

    # ------------------------------------------------------------------
    # Table passes
    # ------------------------------------------------------------------

    async def _create_table(self, model: ModelDescriptor) -> None:
        await self._client.execute(ddl.create_table_sql(model))
        self._log(
            LogType.SUCCESS,
            Operation.CREATE,
            LogCategory.DATABASE,
            {"table": model.table_name, "columns": model.column_names},
        )

    async def _update_existing_table(
        self, table: str, columns: Sequence[ColumnDescriptor]
    ) -> ChangeSet:
        introspected = await self._introspector.list_columns(table)
        fk_columns = await self._introspector.list_foreign_key_columns(table)
        changes = diff_columns(columns, introspected, fk_columns)
        added = set(changes.added)
        updated = set(changes.updated)

        for col in columns:
            if col.name == "id":
                continue
            await self._apply_constraints(table, col)
            if col.name in added:
                await self._client.execute(ddl.add_column_sql(table, ddl.column_definition(col)))
            elif col.name in updated:
                await self._client.execute(ddl.modify_column_sql(table, col))

        for column_name in changes.removed:
            await self._remove_column(table, column_name)

        return changes

    async def _apply_constraints(self, table: str, col: ColumnDescriptor) -> None:
        if col.unique:
            sql = ddl.unique_constraint_sql(table, col.name)
        elif col.index:
            sql = ddl.index_sql(table, col.name)
        else:
            return

        try:
            await self._client.execute(sql)
        except Exception:
            # Constraint already present (or column not yet added).
            pass

    async def _remove_column(self, table: str, column_name: str) -> None:
        try:
            await self._client.execute(ddl.drop_column_sql(table, column_name))
        except Exception as e:
            self._log(
                LogType.ERROR,
                Operation.DELETE,
                LogCategory.DATABASE,
                {"message": f"Error removing column {column_name} from {table}: {e}"},
            )


async def sync_database(
    client: DatabaseClient,
    models: Iterable[ModelDescriptor],
    ignored_columns: Iterable[str] = DEFAULT_IGNORED_COLUMNS,
    log: LogSink = create_log,
) -> list[TableSyncResult]:
    """Synchronize every model's table, then every model's relations.

    Models are processed sequentially in the given order.  The first error
    that propagates out of a table pass aborts the run.

    Args:
        client: Database client.
        models: Declared models in dependency order.
        ignored_columns: Column names whose changes alone are not recorded.
        log: Log sink.

    Returns:
        One ``TableSyncResult`` per model, in order.
    """
    models = list(models)
    recorder = MigrationRecorder(MigrationStore(client), ignored_columns=ignored_columns, log=log)
    synchronizer = TableSynchronizer(client, recorder=recorder, log=log)

    log(LogType.DEBUG, Operation.UPDATE, LogCategory.DATABASE, "Starting database synchronization...")

    results = [await synchronizer.sync_table(model) for model in models]
    for model, result in zip(models, results):
        result.foreign_keys_added = await synchronizer.sync_relationships(model)

    log(
        LogType.DEBUG,
        Operation.UPDATE,
        LogCategory.DATABASE,
        "Database synchronization completed successfully.",
    )
    return results
