"""Pydantic models for database configuration."""

from pydantic import BaseModel, Field


# ============================================================================
# Configuration Models
# ============================================================================


class DatabaseProfile(BaseModel):
    """Database connection profile from db.toml."""

    url: str
    description: str = ""
    db_password: str | None = None  # For [YOUR-PASSWORD] placeholder substitution
    provider: str = "mysql"


class SyncSettings(BaseModel):
    """Schema synchronization settings from the ``[sync]`` table."""

    ignored_columns: list[str] = Field(default_factory=lambda: ["updated_at"])
    sync_on_connect: bool = False


class DatabaseConfig(BaseModel):
    """Complete database configuration from db.toml."""

    profiles: dict[str, DatabaseProfile]
    sync: SyncSettings = Field(default_factory=SyncSettings)
