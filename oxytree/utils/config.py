"""Application configuration.

Settings are read from .env and OXYTREE_* environment variables.
"""
from __future__ import annotations

from enum import Enum

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class BuilderMode(str, Enum):
    """Which page builder owns the stored documents."""

    OXYGEN = "oxygen"
    BREAKDANCE = "breakdance"

    @property
    def meta_prefix(self) -> str:
        return "_breakdance_" if self is BuilderMode.BREAKDANCE else "_oxygen_"

    @property
    def tree_meta_key(self) -> str:
        return f"{self.meta_prefix}data"


class Settings(BaseSettings):
    """Runtime settings loaded from .env and environment variables."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", env_prefix="OXYTREE_", extra="ignore")

    builder_mode: BuilderMode = BuilderMode.OXYGEN
    database_url: str = Field(
        default="sqlite+pysqlite:///oxytree.db",
        validation_alias=AliasChoices("OXYTREE_DATABASE_URL", "DATABASE_URL"),
    )
    max_tree_depth: int = 50
    log_level: str = "INFO"


settings = Settings()
