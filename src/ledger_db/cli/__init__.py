"""CLI module for schema synchronization and migration replay.

Provides commands for database profile management, startup synchronization
of the registered models, and inspection/replay of recorded migration groups.

Usage:
    DB_PROFILE=local ledger-db connect
    ledger-db status
    ledger-db disconnect
    ledger-db profiles
    ledger-db sync
    ledger-db migrations
    ledger-db migrations --group 12
    ledger-db apply 12
    ledger-db rollback 12

Commands:
    connect     - Connect to database (optionally synchronize) and lock profile
    disconnect  - Remove the profile lock
    status      - Show current connection status
    profiles    - List available profiles
    sync        - Synchronize registered models with the current profile
    migrations  - List recorded migration groups (or one group's entries)
    apply       - Replay a migration group's up statements
    rollback    - Replay a migration group's down statements
"""

import argparse
import asyncio
import logging
import sys

from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from ledger_db.config.loader import load_db_config
from ledger_db.factory import (
    ProfileNotFoundError,
    clear_profile_lock,
    connect_and_sync,
    get_adapter,
    read_profile_lock,
)
from ledger_db.migrations.executor import MigrationExecutor
from ledger_db.migrations.models import MigrationDirection
from ledger_db.migrations.store import MigrationStore
from ledger_db.registry import MODELS
from ledger_db.schema.models import TableSyncResult
from ledger_db.schema.sync import sync_database

console = Console()


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, show_path=False)],
    )


def _print_sync_results(results: list[TableSyncResult]) -> None:
    table = Table(title="Synchronization", show_header=True, header_style="bold")
    table.add_column("Table")
    table.add_column("Created")
    table.add_column("Added")
    table.add_column("Updated")
    table.add_column("Removed")
    table.add_column("Foreign keys")
    table.add_column("Group")

    for result in results:
        changes = result.changes
        table.add_row(
            result.table,
            "[green]yes[/green]" if result.created else "",
            ", ".join(changes.added),
            ", ".join(changes.updated),
            ", ".join(changes.removed),
            ", ".join(result.foreign_keys_added),
            str(result.migration_group_id) if result.migration_group_id else "",
        )

    console.print(table)


# ============================================================================
# Async command implementations
# ============================================================================


async def _async_connect(args: argparse.Namespace) -> int:
    """Async implementation for connect command.

    Args:
        args: Parsed arguments with env_prefix and sync.

    Returns:
        0 on success, 1 on failure.
    """
    env_prefix = getattr(args, "env_prefix", "")
    sync = True if getattr(args, "sync", False) else None

    previous_profile = read_profile_lock()

    console.print("Connecting to database...", style="dim")

    result = await connect_and_sync(env_prefix=env_prefix, sync=sync)

    if not result.success:
        console.print()
        console.print(f"[bold red]x[/bold red] {result.error}")
        return 1

    console.print()
    console.print(
        f"[bold green]v[/bold green] Connected to profile: "
        f"[bold cyan]{result.profile_name}[/bold cyan]"
    )
    if result.sync_results:
        _print_sync_results(result.sync_results)

    # Show profile switch notice
    if previous_profile and previous_profile != result.profile_name:
        console.print(
            f"\n[dim]Switched from[/dim] [bold]{previous_profile}[/bold] "
            f"[dim]to[/dim] [bold cyan]{result.profile_name}[/bold cyan]"
        )

    return 0


async def _async_sync(args: argparse.Namespace) -> int:
    """Async implementation for sync command.

    Returns:
        0 on success, 1 on failure.
    """
    env_prefix = getattr(args, "env_prefix", "")

    try:
        config = load_db_config()
        adapter = await get_adapter(env_prefix=env_prefix)
    except (ProfileNotFoundError, FileNotFoundError, KeyError) as e:
        console.print(f"[red]Error: {e}[/red]")
        return 1

    try:
        results = await sync_database(
            adapter, MODELS, ignored_columns=config.sync.ignored_columns
        )
    except Exception as e:
        console.print(f"[bold red]x[/bold red] Synchronization failed: {e}")
        return 1
    finally:
        await adapter.close()

    _print_sync_results(results)
    return 0


async def _async_migrations(args: argparse.Namespace) -> int:
    """Async implementation for migrations command.

    Returns:
        0 on success, 1 on failure.
    """
    env_prefix = getattr(args, "env_prefix", "")
    group_id = getattr(args, "group", None)

    try:
        adapter = await get_adapter(env_prefix=env_prefix)
    except (ProfileNotFoundError, FileNotFoundError, KeyError) as e:
        console.print(f"[red]Error: {e}[/red]")
        return 1

    store = MigrationStore(adapter)
    try:
        if group_id is None:
            groups = await store.list_groups()
            entries = None
        else:
            groups = []
            entries = await store.list_entries(group_id)
    except Exception as e:
        console.print(f"[bold red]x[/bold red] Could not read migrations: {e}")
        return 1
    finally:
        await adapter.close()

    if entries is not None:
        table = Table(
            title=f"Migration group {group_id}", show_header=True, header_style="bold"
        )
        table.add_column("Id")
        table.add_column("Table")
        table.add_column("Column")
        table.add_column("Operation")
        table.add_column("Up")
        table.add_column("Down")
        for entry in entries:
            table.add_row(
                str(entry.id),
                entry.table_name,
                entry.column_name,
                entry.operation.value,
                entry.up,
                entry.down,
            )
        console.print(table)
        return 0

    if not groups:
        console.print("[dim]No migration groups recorded.[/dim]")
        return 0

    table = Table(title="Migration Groups", show_header=True, header_style="bold")
    table.add_column("Id")
    table.add_column("Name")
    table.add_column("Up", justify="right")
    table.add_column("Down", justify="right")
    table.add_column("Created")
    for group in groups:
        table.add_row(
            str(group.id),
            group.name,
            str(len(group.up_queries)),
            str(len(group.down_queries)),
            group.created_at or "",
        )
    console.print(table)
    return 0


async def _async_replay(args: argparse.Namespace, direction: MigrationDirection) -> int:
    """Async implementation for apply and rollback commands.

    Returns:
        0 if the replay committed, 1 otherwise.
    """
    env_prefix = getattr(args, "env_prefix", "")

    try:
        adapter = await get_adapter(env_prefix=env_prefix)
    except (ProfileNotFoundError, FileNotFoundError, KeyError) as e:
        console.print(f"[red]Error: {e}[/red]")
        return 1

    try:
        result = await MigrationExecutor(adapter).execute_migration_group(
            args.group_id, direction
        )
    except Exception as e:
        console.print(
            f"[bold red]x[/bold red] Migration group {args.group_id}: "
            f"{direction.value} failed: {e}"
        )
        return 1
    finally:
        await adapter.close()

    if result.success:
        console.print(
            f"[bold green]v[/bold green] Migration group {result.group_id}: "
            f"{result.direction} committed ({result.steps} statements)"
        )
        return 0

    console.print(
        f"[bold red]x[/bold red] Migration group {result.group_id}: "
        f"{result.direction} failed: {result.error}"
    )
    return 1


# ============================================================================
# Sync command wrappers (cmd_status, cmd_profiles read local files only)
# ============================================================================


def cmd_connect(args: argparse.Namespace) -> int:
    """Connect to database and lock in the profile.

    Wraps the async implementation with ``asyncio.run()``.
    """
    return asyncio.run(_async_connect(args))


def cmd_disconnect(args: argparse.Namespace) -> int:
    """Forget the connected profile by removing the lock file.

    Returns:
        0 always.
    """
    profile = read_profile_lock()
    clear_profile_lock()
    if profile:
        console.print(
            f"[bold green]v[/bold green] Disconnected from profile: [bold]{profile}[/bold]"
        )
    else:
        console.print("[dim]No connected profile.[/dim]")
    return 0


def cmd_status(args: argparse.Namespace) -> int:
    """Show current connection status.

    Reads only local files (lock file and TOML config) -- no database calls.

    Returns:
        0 always (informational command).
    """
    profile = read_profile_lock()

    if profile:
        table = Table(title="Connection Status", show_header=False)
        table.add_column("Key", style="dim")
        table.add_column("Value")

        table.add_row("Current profile", f"[bold cyan]{profile}[/bold cyan]")
        table.add_row("Profile source", ".db-profile")

        try:
            config = load_db_config()
            if profile in config.profiles:
                p = config.profiles[profile]
                table.add_row("Provider", p.provider)
                if p.description:
                    table.add_row("Description", p.description)
            table.add_row("Ignored columns", ", ".join(config.sync.ignored_columns))
            table.add_row("Sync on connect", "yes" if config.sync.sync_on_connect else "no")
        except FileNotFoundError:
            table.add_row("Warning", "[yellow]db.toml not found[/yellow]")

        console.print(table)
    else:
        console.print("[yellow]No connected profile.[/yellow]")
        console.print("[dim]Run:[/dim] [cyan]DB_PROFILE=<name> ledger-db connect[/cyan]")

    return 0


def cmd_profiles(args: argparse.Namespace) -> int:
    """List available profiles from db.toml.

    Reads only local TOML config -- no database calls.

    Returns:
        0 on success, 1 if db.toml not found.
    """
    try:
        config = load_db_config()
    except FileNotFoundError as e:
        console.print(f"[red]Error: {e}[/red]")
        return 1

    current = read_profile_lock()

    table = Table(title="Database Profiles", show_header=True, header_style="bold")
    table.add_column("", width=2)
    table.add_column("Profile")
    table.add_column("Provider")
    table.add_column("Description")

    for name, profile in config.profiles.items():
        marker = "[bold green]*[/bold green]" if name == current else " "
        name_style = "bold cyan" if name == current else ""
        table.add_row(
            marker,
            f"[{name_style}]{name}[/{name_style}]" if name_style else name,
            profile.provider,
            profile.description or "",
        )

    console.print(table)

    if current:
        console.print("\n[bold green]*[/bold green] = current profile")

    return 0


def cmd_sync(args: argparse.Namespace) -> int:
    """Synchronize the registered models with the current profile."""
    return asyncio.run(_async_sync(args))


def cmd_migrations(args: argparse.Namespace) -> int:
    """List migration groups, or the entries of one group."""
    return asyncio.run(_async_migrations(args))


def cmd_apply(args: argparse.Namespace) -> int:
    """Replay a migration group's up statements."""
    return asyncio.run(_async_replay(args, MigrationDirection.APPLY))


def cmd_rollback(args: argparse.Namespace) -> int:
    """Replay a migration group's down statements."""
    return asyncio.run(_async_replay(args, MigrationDirection.ROLLBACK))


# ============================================================================
# Main entry point
# ============================================================================


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ledger-db",
        description="Schema synchronization and migration replay toolkit",
    )

    # Global options
    parser.add_argument(
        "--env-prefix",
        default="",
        help=(
            "Prefix for environment variable lookup "
            "(e.g., --env-prefix APP_ reads APP_DB_PROFILE)"
        ),
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Show debug log records",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    # connect command
    p_connect = subparsers.add_parser(
        "connect",
        help="Connect to database and lock in the profile",
    )
    p_connect.add_argument(
        "--sync",
        action="store_true",
        help="Synchronize registered models after connecting",
    )
    p_connect.set_defaults(func=cmd_connect)

    # disconnect command
    p_disconnect = subparsers.add_parser(
        "disconnect",
        help="Remove the profile lock file",
    )
    p_disconnect.set_defaults(func=cmd_disconnect)

    # status command
    p_status = subparsers.add_parser("status", help="Show current connection status")
    p_status.set_defaults(func=cmd_status)

    # profiles command
    p_profiles = subparsers.add_parser("profiles", help="List available profiles")
    p_profiles.set_defaults(func=cmd_profiles)

    # sync command
    p_sync = subparsers.add_parser(
        "sync",
        help="Synchronize registered models with the current profile",
    )
    p_sync.set_defaults(func=cmd_sync)

    # migrations command
    p_migrations = subparsers.add_parser(
        "migrations",
        help="List recorded migration groups",
    )
    p_migrations.add_argument(
        "--group",
        type=int,
        default=None,
        help="Show the column-level entries of one group",
    )
    p_migrations.set_defaults(func=cmd_migrations)

    # apply / rollback commands
    p_apply = subparsers.add_parser("apply", help="Replay a group's up statements")
    p_apply.add_argument("group_id", type=int, help="Migration group id")
    p_apply.set_defaults(func=cmd_apply)

    p_rollback = subparsers.add_parser("rollback", help="Replay a group's down statements")
    p_rollback.add_argument("group_id", type=int, help="Migration group id")
    p_rollback.set_defaults(func=cmd_rollback)

    return parser


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point.

    Parses command line arguments and dispatches to appropriate handler.

    Returns:
        Exit code (0 for success, non-zero for errors).
    """
    args = build_parser().parse_args(argv)
    _configure_logging(args.verbose)
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
