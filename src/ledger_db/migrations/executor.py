"""Transactional replay of recorded migration groups.

The executor performs no diffing: it loads a group's stored ``up`` or
``down`` statements and runs them inside one explicit transaction on a
single pinned connection.  Any failing statement rolls the whole replay back.

There is no record of which direction a group last ran in; re-applying an
already applied group fails at the database level (e.g. duplicate column)
and is rolled back like any other failure.

Note that MySQL commits implicitly around most DDL statements, so on a real
server a rolled-back replay of DDL only undoes statements that support
transactions.  The executor still issues ``ROLLBACK`` and reports failure.

Usage:
    from ledger_db.migrations.executor import MigrationExecutor
    from ledger_db.migrations.models import MigrationDirection

    executor = MigrationExecutor(client)
    result = await executor.execute_migration_group(9, MigrationDirection.ROLLBACK)
    if not result.success:
        print(result.error)
"""

from datetime import datetime, timezone

from ledger_db.adapters.base import DatabaseClient
from ledger_db.logs import LogCategory, LogSink, LogType, Operation, create_log
from ledger_db.migrations.models import MigrationDirection, MigrationGroup, ReplayResult
from ledger_db.migrations.store import MigrationStore


class MigrationExecutor:
    """Creates migration groups and replays them transactionally.

    Args:
        client: Database client; its ``connection()`` provides the pinned
            connection the transaction runs on.
        store: Migration table persistence (defaults to one over *client*).
        log: Log sink.
    """

    def __init__(
        self,
        client: DatabaseClient,
        store: MigrationStore | None = None,
        log: LogSink = create_log,
    ) -> None:
        self._client = client
        self._store = store or MigrationStore(client)
        self._log = log

    async def create_migration_group(
        self,
        up_queries: list[str],
        down_queries: list[str],
        name: str | None = None,
    ) -> int:
        """Store a new group of statements and return its id.

        Args:
            up_queries: Statements that apply the change, in order.
            down_queries: Statements that revert it, in order.
            name: Group name; generated from the current time if omitted.
        """
        group_name = name or f"group-{datetime.now(timezone.utc).strftime('%Y%m%d%H%M%S%f')}"
        return await self._store.insert_group(group_name, up_queries, down_queries)

    async def get_migration_group(self, group_id: int) -> MigrationGroup | None:
        return await self._store.get_group(group_id)

    async def list_migration_groups(self) -> list[MigrationGroup]:
        return await self._store.list_groups()

    async def execute_migration_group(
        self,
        group_id: int,
        direction: MigrationDirection | str,
    ) -> ReplayResult:
        """Replay a group's ``up`` (APPLY) or ``down`` (ROLLBACK) statements.

        Args:
            group_id: Migration group to replay.
            direction: ``MigrationDirection.APPLY`` or ``ROLLBACK`` (or their
                string values).

        Returns:
            ``ReplayResult``; ``success`` is False when the direction is
            invalid, the group does not exist, or a statement failed and the
            transaction was rolled back.
        """
        try:
            mode = MigrationDirection(direction)
        except ValueError:
            message = f"Invalid migration operation: {direction}"
            self._log(LogType.ERROR, Operation.SEARCH, LogCategory.MIGRATION, message)
            return ReplayResult(group_id=group_id, direction=str(direction), error=message)

        operation = Operation.APPLY if mode == MigrationDirection.APPLY else Operation.ROLLBACK

        try:
            group = await self._store.get_group(group_id)
        except Exception as e:
            self._log(
                LogType.ERROR,
                operation,
                LogCategory.MIGRATION_GROUP,
                {"action": mode.value, "group": group_id, "error": str(e)},
            )
            return ReplayResult(group_id=group_id, direction=mode.value, error=str(e))

        if group is None:
            self._log(
                LogType.ERROR,
                Operation.SEARCH,
                LogCategory.MIGRATION,
                {"action": "search", "group": group_id, "error": "Migration group not found"},
            )
            return ReplayResult(
                group_id=group_id, direction=mode.value, error="Migration group not found"
            )

        queries = group.queries_for(mode)
        self._log(
            LogType.DEBUG,
            Operation.SEARCH,
            LogCategory.MIGRATION,
            {"action": mode.value, "group": group_id, "steps": len(queries)},
        )

        async with self._client.connection() as conn:
            try:
                await conn.execute("START TRANSACTION")
                for query in queries:
                    await conn.execute(query)
                await conn.execute("COMMIT")
            except Exception as e:
                await self._rollback(conn, operation, group_id)
                self._log(
                    LogType.ERROR,
                    operation,
                    LogCategory.MIGRATION_GROUP,
                    {"action": mode.value, "group": group_id, "error": str(e)},
                )
                return ReplayResult(
                    group_id=group_id, direction=mode.value, steps=len(queries), error=str(e)
                )

        self._log(
            LogType.SUCCESS,
            operation,
            LogCategory.MIGRATION_GROUP,
            {"action": mode.value, "group": group_id},
        )
        return ReplayResult(
            success=True, group_id=group_id, direction=mode.value, steps=len(queries)
        )

    async def _rollback(self, conn, operation: Operation, group_id: int) -> None:
        # The replay's own error is the one reported.
        try:
            await conn.execute("ROLLBACK")
        except Exception as e:
            self._log(
                LogType.ERROR,
                operation,
                LogCategory.MIGRATION_GROUP,
                {"action": "rollback", "group": group_id, "error": str(e)},
            )
