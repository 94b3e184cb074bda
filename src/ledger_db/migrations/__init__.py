"""Migration recording and replay.

Provides migration record persistence (``MigrationStore``), recording of
table synchronization passes (``MigrationRecorder``), and transactional
replay (``MigrationExecutor``).

Usage:
    from ledger_db.migrations import MigrationExecutor, MigrationDirection
    from ledger_db.migrations import MigrationRecorder, MigrationStore
"""

from ledger_db.migrations.executor import MigrationExecutor
from ledger_db.migrations.models import (
    MigrationDirection,
    MigrationEntry,
    MigrationGroup,
    ReplayResult,
)
from ledger_db.migrations.recorder import MigrationRecorder
from ledger_db.migrations.store import MigrationStore

__all__ = [
    "MigrationExecutor",
    "MigrationRecorder",
    "MigrationStore",
    "MigrationDirection",
    "MigrationEntry",
    "MigrationGroup",
    "ReplayResult",
]
