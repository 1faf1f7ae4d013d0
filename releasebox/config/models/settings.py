"""Orchestrator settings with environment variable support."""

import os
from enum import Enum
from pathlib import Path
from typing import Any

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class FailurePolicy(str, Enum):
    """What happens to sibling entries when one matrix entry fails."""

    FAIL_FAST = "fail-fast"
    BEST_EFFORT = "best-effort"


def _default_cache_dir() -> Path:
    if "XDG_CACHE_HOME" in os.environ:
        return Path(os.environ["XDG_CACHE_HOME"]) / "releasebox"
    return Path.home() / ".cache" / "releasebox"


class OrchestratorSettings(BaseSettings):
    """Settings that control how a release run is executed.

    Precedence order (highest to lowest):
    1. Environment variables (RELEASEBOX_*)
    2. Constructor arguments (config file data)
    3. Default values
    """

    model_config = SettingsConfigDict(
        env_prefix="RELEASEBOX_",
        case_sensitive=False,
        extra="ignore",
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: Any,
        env_settings: Any,
        dotenv_settings: Any,
        file_secret_settings: Any,
    ) -> tuple[Any, ...]:
        """Environment variables override file configuration."""
        return (env_settings, init_settings, dotenv_settings, file_secret_settings)

    failure_policy: FailurePolicy = Field(
        default=FailurePolicy.FAIL_FAST,
        description="'fail-fast' cancels siblings on first failure, 'best-effort' runs all",
    )
    max_workers: int | None = Field(
        default=None,
        ge=1,
        description="Parallel workers; defaults to one per matrix entry",
    )
    project_dir: Path = Field(default_factory=Path.cwd)
    staging_dir: Path = Field(default=Path("staging"))
    output_dir: Path = Field(default=Path("dist"))
    publish_dir: Path = Field(default=Path("dist") / "published")
    cache_dir: Path = Field(default_factory=_default_cache_dir)
    cache_enabled: bool = True
    lockfile_glob: str = "**/Cargo.lock"
    log_level: str = "WARNING"

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is a recognized value."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        upper_v = v.strip().upper()
        if upper_v not in valid_levels:
            raise ValueError(f"Log level must be one of {valid_levels}")
        return upper_v

    def resolve(self, path: Path) -> Path:
        """Resolve a configured path against the project directory."""
        return path if path.is_absolute() else self.project_dir / path

    @property
    def staging_root(self) -> Path:
        return self.resolve(self.staging_dir)

    @property
    def output_root(self) -> Path:
        return self.resolve(self.output_dir)

    @property
    def publish_root(self) -> Path:
        return self.resolve(self.publish_dir)
