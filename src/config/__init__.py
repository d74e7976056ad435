"""Session server settings, read from the environment and an optional `.env` file."""

from __future__ import annotations

from enum import Enum
from functools import lru_cache
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Environment(str, Enum):
    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"


class EntryTotalPolicy(str, Enum):
    """How a detail entry's total is derived when an evaluation is recorded.

    ``SUBMITTED`` sums only the criteria carried by the current submission, so a
    partial resubmission drops omitted criteria from the total while their
    records stay stored. ``STORED`` sums every criterion held by the entry.
    """

    SUBMITTED = "submitted"
    STORED = "stored"


class Settings(BaseSettings):
    """Server, dataset and scoring settings; every field maps to an env var of the same name."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # App
    app_env: Environment = Environment.DEVELOPMENT
    log_level: str = "INFO"

    # Server
    host: str = "0.0.0.0"
    port: int = Field(default=3009, gt=0, lt=65536)
    cors_origins: list[str] = Field(default_factory=lambda: ["*"])

    # Dataset
    data_dir: Path = Path("database")
    members_file: str = "member.json"
    members_default_file: str = "member_default.json"
    criteria_file: str = Field(
        default="criteria.yaml",
        description="Criteria catalogue, relative to data_dir. JSON files are accepted as well.",
    )

    # Scoring
    entry_total_policy: EntryTotalPolicy = EntryTotalPolicy.SUBMITTED

    @property
    def members_path(self) -> Path:
        return self.data_dir / self.members_file

    @property
    def members_default_path(self) -> Path:
        return self.data_dir / self.members_default_file

    @property
    def criteria_path(self) -> Path:
        return self.data_dir / self.criteria_file


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return the process-wide settings.

    Returns:
        Settings built on first use from the environment and `.env`;
        later calls return the same instance.
    """
    return Settings()
