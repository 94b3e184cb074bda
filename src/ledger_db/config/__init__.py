"""Configuration management: profiles, TOML loading, and config models.

Usage:
    >>> from ledger_db.config import load_db_config, DatabaseProfile, DatabaseConfig
"""

from ledger_db.config.loader import load_db_config
from ledger_db.config.models import DatabaseConfig, DatabaseProfile, SyncSettings

__all__ = ["load_db_config", "DatabaseConfig", "DatabaseProfile", "SyncSettings"]
