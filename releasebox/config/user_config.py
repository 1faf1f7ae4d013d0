"""
Release file discovery and loading for Releasebox.

Configuration comes from several sources:
1. Environment variables (highest precedence, settings only)
2. Command-line provided config file
3. Config file in current directory
4. User's XDG config directory
5. Default values (lowest precedence)
"""

import logging
import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import Field, ValidationError

from releasebox.config.models import (
    DEFAULT_RELEASE_TAG,
    OrchestratorSettings,
    ReleaseConfig,
)
from releasebox.core.errors import ConfigError
from releasebox.models.base import ReleaseboxBaseModel
from releasebox.release.configuration import MatrixExpander
from releasebox.release.models import BuildMatrixEntry


logger = logging.getLogger(__name__)

ENV_PREFIX = "RELEASEBOX_"


class ReleaseFileData(ReleaseboxBaseModel):
    """Raw sections of a release file."""

    release: dict[str, Any] = Field(default_factory=dict)
    settings: dict[str, Any] = Field(default_factory=dict)
    matrix: list[Any] | None = None


def generate_config_paths(cli_config_path: str | Path | None = None) -> list[Path]:
    """List the config paths to search, in order of precedence."""
    config_paths: list[Path] = []

    if cli_config_path:
        config_paths.append(Path(cli_config_path).expanduser().resolve())

    config_paths.extend([Path.cwd() / "releasebox.yaml", Path.cwd() / ".releasebox.yml"])

    xdg_config_home = os.environ.get("XDG_CONFIG_HOME")
    config_root = (
        Path(xdg_config_home) if xdg_config_home else Path.home() / ".config"
    ) / "releasebox"
    config_paths.extend([config_root / "config.yaml", config_root / "config.yml"])

    return config_paths


class UserConfig:
    """
    Resolves the release configuration, orchestrator settings and build matrix.

    The first release file found wins. An explicit ``cli_config_path`` that
    does not exist is an error rather than silently falling back.
    """

    def __init__(
        self,
        cli_config_path: str | Path | None = None,
        expander: MatrixExpander | None = None,
    ):
        """
        Initialize the configuration handler.

        Args:
            cli_config_path: Optional config file path provided via CLI
            expander: Matrix expander used to validate a file-provided matrix
        """
        self._expander = expander or MatrixExpander()
        self._config_paths = generate_config_paths(cli_config_path)
        self.config_path: Path | None = None

        if cli_config_path and not self._config_paths[0].is_file():
            raise ConfigError(
                "Config file not found", {"path": str(self._config_paths[0])}
            )

        self._data = self._load()

    def _load(self) -> ReleaseFileData:
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug(
                "Config search paths: %s", [str(p) for p in self._config_paths]
            )
            env_vars = sorted(k for k in os.environ if k.startswith(ENV_PREFIX))
            if env_vars:
                logger.debug("Releasebox environment variables: %s", env_vars)

        for path in self._config_paths:
            if path.is_file():
                self.config_path = path
                return self._read(path)

        logger.info("No release file found. Using defaults with environment variables.")
        return ReleaseFileData()

    def _read(self, path: Path) -> ReleaseFileData:
        try:
            with path.open(encoding="utf-8") as f:
                raw = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            raise ConfigError(
                f"Failed to read config file: {e}", {"path": str(path)}
            ) from e

        if not isinstance(raw, dict):
            raise ConfigError("Config file must be a mapping", {"path": str(path)})

        try:
            data = ReleaseFileData.model_validate(raw)
        except ValidationError as e:
            raise ConfigError(
                f"Invalid config file: {e}", {"path": str(path)}
            ) from e

        if "release_tag" in data.release:
            raise ConfigError(
                "release_tag cannot be set in the config file; pass it to 'build'",
                {"path": str(path)},
            )

        logger.debug("Loaded release file from %s", path)
        return data

    def release_config(self, release_tag: str | None = None) -> ReleaseConfig:
        """Build the release configuration for ``release_tag``.

        Raises:
            ConfigError: If the release section or tag is invalid
        """
        try:
            return ReleaseConfig(
                **self._data.release, release_tag=release_tag or DEFAULT_RELEASE_TAG
            )
        except ValidationError as e:
            raise ConfigError(f"Invalid release configuration: {e}") from e

    def settings(self, **overrides: Any) -> OrchestratorSettings:
        """Build orchestrator settings.

        File values are overridden by environment variables; ``overrides``
        (command-line options) are applied last. ``None`` overrides are
        ignored.

        Raises:
            ConfigError: If the settings section is invalid
        """
        try:
            settings = OrchestratorSettings(**self._data.settings)
            update = {k: v for k, v in overrides.items() if v is not None}
            if update:
                settings = OrchestratorSettings.model_validate(
                    {**settings.model_dump(), **update}
                )
        except ValidationError as e:
            raise ConfigError(f"Invalid settings: {e}") from e
        return settings

    def matrix(self) -> tuple[BuildMatrixEntry, ...]:
        """Return the validated build matrix (the built-in table by default).

        Raises:
            ConfigError: If the file-provided matrix is invalid
        """
        if self._data.matrix is None:
            return self._expander.expand()
        return self._expander.expand(self._expander.parse_entries(self._data.matrix))


def create_user_config(cli_config_path: str | Path | None = None) -> UserConfig:
    """Create user configuration, searching the default locations."""
    return UserConfig(cli_config_path=cli_config_path)
