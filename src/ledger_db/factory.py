"""Database client factory.

Resolves the active profile (``<PREFIX>DB_PROFILE`` env var, then the
``.db-profile`` lock file), builds an ``AsyncMySQLAdapter`` for it, and
optionally runs startup synchronization on connect.

Usage:
    from ledger_db.factory import connect_and_sync, get_adapter

    result = await connect_and_sync(profile_name="local", sync=True)
    adapter = await get_adapter()
"""

import logging
import os
from pathlib import Path
from urllib.parse import quote

from ledger_db.adapters.mysql import AsyncMySQLAdapter
from ledger_db.config.loader import load_db_config
from ledger_db.config.models import DatabaseProfile
from ledger_db.registry import MODELS
from ledger_db.schema.models import ConnectionResult
from ledger_db.schema.sync import sync_database

logger = logging.getLogger(__name__)

# Profile lock file path
_PROFILE_LOCK_FILE = Path.cwd() / ".db-profile"


# ============================================================================
# Profile Lock File Operations
# ============================================================================


class ProfileNotFoundError(Exception):
    """Raised when no database profile is configured."""

    pass


def read_profile_lock() -> str | None:
    """Read profile name from lock file.

    Returns:
        Profile name if lock file exists, None otherwise
    """
    if _PROFILE_LOCK_FILE.exists():
        return _PROFILE_LOCK_FILE.read_text().strip()
    return None


def write_profile_lock(profile_name: str) -> None:
    """Write profile name to lock file.

    Only call this after a successful connection.

    Args:
        profile_name: Name of the connected profile
    """
    _PROFILE_LOCK_FILE.write_text(profile_name)


def clear_profile_lock() -> None:
    """Remove profile lock file."""
    if _PROFILE_LOCK_FILE.exists():
        _PROFILE_LOCK_FILE.unlink()


def get_active_profile_name(env_prefix: str = "") -> str:
    """Get active profile name from env var or lock file.

    Priority:
    1. ``{env_prefix}DB_PROFILE`` env var (for initial connect or CI/CD)
    2. .db-profile file (profile from previous connect)
    3. Raise ProfileNotFoundError

    Args:
        env_prefix: Prefix for the environment variable name.

    Returns:
        Profile name

    Raises:
        ProfileNotFoundError: If no profile is configured
    """
    env_var = f"{env_prefix}DB_PROFILE"
    env_profile = os.environ.get(env_var)
    if env_profile:
        return env_profile

    lock_profile = read_profile_lock()
    if lock_profile:
        return lock_profile

    raise ProfileNotFoundError(
        "No database profile configured.\n"
        f"Run: {env_var}=<name> ledger-db connect\n"
        "Profiles are defined in db.toml under [profiles.<name>]."
    )


def get_active_profile(env_prefix: str = "") -> tuple[str, DatabaseProfile]:
    """Get active profile name and configuration.

    Returns:
        Tuple of (profile_name, DatabaseProfile)

    Raises:
        ProfileNotFoundError: If no profile configured
        KeyError: If profile not found in db.toml
    """
    profile_name = get_active_profile_name(env_prefix)
    return profile_name, _lookup_profile(profile_name)


def _lookup_profile(profile_name: str) -> DatabaseProfile:
    config = load_db_config()
    if profile_name not in config.profiles:
        raise KeyError(
            f"Profile '{profile_name}' not found in db.toml.\n"
            f"Available profiles: {', '.join(config.profiles.keys())}"
        )
    return config.profiles[profile_name]


def resolve_url(profile: DatabaseProfile) -> str:
    """Resolve profile URL with password substitution.

    Example:
        >>> p = DatabaseProfile(url="mysql://root:[YOUR-PASSWORD]@db/ledger", db_password="p@ss")
        >>> resolve_url(p)
        'mysql://root:p%40ss@db/ledger'
    """
    url = profile.url
    if profile.db_password and "[YOUR-PASSWORD]" in url:
        url = url.replace("[YOUR-PASSWORD]", quote(profile.db_password, safe=""))
    return url


# ============================================================================
# Adapter construction
# ============================================================================


async def get_adapter(
    profile_name: str | None = None,
    env_prefix: str = "",
    database_url: str | None = None,
) -> AsyncMySQLAdapter:
    """Build an adapter for an explicit URL, a named profile, or the active one.

    No caching: every call returns a new adapter, which the caller closes.

    Raises:
        ProfileNotFoundError: If no URL or profile is given and none is active.
        KeyError: If the profile is not defined in db.toml.
    """
    if database_url:
        return AsyncMySQLAdapter(database_url)

    if profile_name is None:
        _, profile = get_active_profile(env_prefix)
    else:
        profile = _lookup_profile(profile_name)

    return AsyncMySQLAdapter(resolve_url(profile))


async def connect_and_sync(
    profile_name: str | None = None,
    env_prefix: str = "",
    sync: bool | None = None,
) -> ConnectionResult:
    """Connect to a profile, optionally synchronize it, and lock it in.

    Args:
        profile_name: Profile to connect to (default: active profile).
        env_prefix: Prefix for the ``DB_PROFILE`` environment variable.
        sync: Run ``sync_database`` over the registered models.  ``None``
            defers to ``[sync] sync_on_connect`` in db.toml.

    Returns:
        ConnectionResult.  The lock file is written only on success.
    """
    try:
        if profile_name is None:
            profile_name = get_active_profile_name(env_prefix)
        config = load_db_config()
        if profile_name not in config.profiles:
            raise KeyError(
                f"Profile '{profile_name}' not found in db.toml. "
                f"Available profiles: {', '.join(config.profiles.keys())}"
            )
    except (ProfileNotFoundError, FileNotFoundError, KeyError, ValueError) as e:
        return ConnectionResult(success=False, profile_name=profile_name, error=str(e))

    profile = config.profiles[profile_name]
    if sync is None:
        sync = config.sync.sync_on_connect

    adapter = AsyncMySQLAdapter(resolve_url(profile))
    try:
        await adapter.test_connection()
        sync_results = []
        if sync:
            sync_results = await sync_database(
                adapter, MODELS, ignored_columns=config.sync.ignored_columns
            )
    except Exception as e:
        logger.error("Connection to profile '%s' failed: %s", profile_name, e)
        return ConnectionResult(
            success=False,
            profile_name=profile_name,
            error=f"Connection failed: {e}",
        )
    finally:
        await adapter.close()

    write_profile_lock(profile_name)
    return ConnectionResult(
        success=True, profile_name=profile_name, sync_results=sync_results
    )
