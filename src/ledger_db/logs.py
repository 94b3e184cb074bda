"""Structured log sink used by the schema synchronization engine.

Every structural change, migration record, and failure is reported through a
``LogSink`` call ``log(log_type, operation, category, detail, subject_id)``.
The default sink, ``create_log``, writes to the standard ``logging`` module;
callers (and tests) can inject any callable with the same signature.

Usage:
    from ledger_db.logs import LogCategory, LogType, Operation, create_log

    create_log(
        LogType.SUCCESS,
        Operation.CREATE,
        LogCategory.DATABASE,
        {"table": "account"},
    )
"""

import json
import logging
from enum import Enum
from typing import Any, Protocol

logger = logging.getLogger("ledger_db")


class LogType(str, Enum):
    """Severity of a log record."""

    ALERT = "alert"
    DEBUG = "debug"
    ERROR = "error"
    SUCCESS = "success"


class Operation(str, Enum):
    """Operation a log record (or migration entry) describes."""

    CREATE = "create"
    DELETE = "delete"
    SEARCH = "search"
    UPDATE = "update"
    APPLY = "apply"
    ROLLBACK = "rollback"


class LogCategory(str, Enum):
    """Subsystem a log record belongs to."""

    DATABASE = "database"
    MIGRATION = "migration"
    MIGRATION_GROUP = "migration_group"


_LEVELS: dict[LogType, int] = {
    LogType.ERROR: logging.ERROR,
    LogType.ALERT: logging.WARNING,
    LogType.SUCCESS: logging.INFO,
    LogType.DEBUG: logging.DEBUG,
}


class LogSink(Protocol):
    """Callable that receives structured log records."""

    def __call__(
        self,
        log_type: LogType,
        operation: Operation,
        category: LogCategory,
        detail: Any,
        subject_id: int | None = None,
    ) -> None: ...


def format_detail(detail: Any) -> str:
    """Render a log detail as text (dicts and lists as JSON)."""
    if isinstance(detail, (dict, list)):
        return json.dumps(detail, default=str)
    return str(detail)


def create_log(
    log_type: LogType,
    operation: Operation,
    category: LogCategory,
    detail: Any,
    subject_id: int | None = None,
) -> None:
    """Write one structured record to the ``ledger_db`` logger.

    Args:
        log_type: Severity; mapped to a ``logging`` level.
        operation: Operation being reported.
        category: Subsystem the record belongs to.
        detail: Message string or JSON-serializable object.
        subject_id: Optional id of the user or record the log refers to.
    """
    message = f"[{Operation(operation).value}][{LogCategory(category).value}]: {format_detail(detail)}"
    if subject_id is not None:
        message = f"{message} (subject={subject_id})"
    logger.log(_LEVELS[LogType(log_type)], message)
