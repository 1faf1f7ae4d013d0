"""Build matrix expansion and validation."""

import logging
from collections import Counter
from collections.abc import Iterable, Sequence
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from releasebox.core.errors import ConfigError
from releasebox.release.models.build_matrix import (
    DEFAULT_BUILD_MATRIX,
    BuildMatrixEntry,
)


logger = logging.getLogger(__name__)


class MatrixExpander:
    """Turn a hand-authored matrix table into independent work items.

    The table is returned unchanged once it passes validation: artifact
    suffixes must be pairwise distinct and each binary extension must match
    its operating system.
    """

    def __init__(self) -> None:
        """Initialize matrix expander."""
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

    def expand(
        self, entries: Sequence[BuildMatrixEntry] | None = None
    ) -> tuple[BuildMatrixEntry, ...]:
        """Validate the matrix and return it as a tuple of work items.

        Args:
            entries: Matrix table; the built-in four-entry table when None

        Returns:
            tuple[BuildMatrixEntry, ...]: The same entries, in order

        Raises:
            ConfigError: If the matrix violates an invariant
        """
        table = tuple(DEFAULT_BUILD_MATRIX if entries is None else entries)
        self.validate(table)
        self.logger.info("Expanded build matrix into %d work items", len(table))
        return table

    def validate(self, entries: Sequence[BuildMatrixEntry]) -> None:
        """Check matrix invariants without side effects.

        Raises:
            ConfigError: On an empty matrix, duplicate artifact suffixes or an
                extension inconsistent with the entry's operating system
        """
        if not entries:
            raise ConfigError("Build matrix is empty")

        suffix_counts = Counter(entry.artifact_suffix for entry in entries)
        duplicates = sorted(s for s, count in suffix_counts.items() if count > 1)
        if duplicates:
            raise ConfigError(
                "Duplicate artifact suffix in build matrix",
                {"suffixes": ", ".join(duplicates)},
            )

        for entry in entries:
            expected = entry.os.binary_extension
            if entry.binary_extension != expected:
                raise ConfigError(
                    f"Binary extension '{entry.binary_extension}' is inconsistent "
                    f"with os '{entry.os.value}' (expected '{expected}')",
                    entry.identity,
                )

    def select(
        self, entries: Sequence[BuildMatrixEntry], suffixes: Iterable[str] | None
    ) -> tuple[BuildMatrixEntry, ...]:
        """Restrict a validated matrix to the given artifact suffixes.

        Args:
            entries: Validated matrix
            suffixes: Suffixes to keep; all entries are kept when empty/None

        Returns:
            tuple[BuildMatrixEntry, ...]: Selected entries in matrix order

        Raises:
            ConfigError: If a requested suffix is not in the matrix
        """
        wanted = list(dict.fromkeys(suffixes or []))
        if not wanted:
            return tuple(entries)

        known = {entry.artifact_suffix for entry in entries}
        unknown = [suffix for suffix in wanted if suffix not in known]
        if unknown:
            raise ConfigError(
                f"Unknown artifact suffix: {', '.join(unknown)}",
                {"available": ", ".join(sorted(known))},
            )

        selected = tuple(e for e in entries if e.artifact_suffix in wanted)
        self.logger.debug("Selected %d of %d matrix entries", len(selected), len(entries))
        return selected

    def parse_entries(self, raw_entries: Any) -> tuple[BuildMatrixEntry, ...]:
        """Build matrix entries from plain data (e.g. a YAML ``matrix:`` list).

        Raises:
            ConfigError: If the data is not a list of valid entries
        """
        if not isinstance(raw_entries, list):
            raise ConfigError("Build matrix must be a list of entries")

        entries: list[BuildMatrixEntry] = []
        for index, raw in enumerate(raw_entries):
            try:
                entries.append(BuildMatrixEntry.model_validate(raw))
            except ValidationError as e:
                raise ConfigError(
                    f"Invalid build matrix entry #{index + 1}: {e}",
                    {"entry": str(raw)},
                ) from e
        return tuple(entries)

    def load_from_yaml(self, matrix_yaml_path: Path) -> tuple[BuildMatrixEntry, ...]:
        """Load and validate the ``matrix:`` list of a YAML file.

        Raises:
            ConfigError: If the file cannot be read or the matrix is invalid
        """
        try:
            self.logger.debug("Parsing build matrix from %s", matrix_yaml_path)
            with matrix_yaml_path.open(encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            msg = f"Failed to parse build matrix file: {e}"
            self.logger.error(msg)
            raise ConfigError(msg, {"path": str(matrix_yaml_path)}) from e

        raw_entries = data.get("matrix") if isinstance(data, dict) else data
        return self.expand(self.parse_entries(raw_entries))


def create_matrix_expander() -> MatrixExpander:
    """Create matrix expander instance.

    Returns:
        MatrixExpander: New matrix expander
    """
    return MatrixExpander()
