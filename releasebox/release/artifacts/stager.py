"""Stage built binaries into a per-entry directory for archiving."""

import logging
from collections.abc import Sequence
from pathlib import Path
from typing import Any

from releasebox.adapters import create_file_adapter
from releasebox.core.errors import FileSystemError, MissingBinaryError, StagingError
from releasebox.protocols import FileAdapterProtocol


logger = logging.getLogger(__name__)


class ArtifactStager:
    """Copy the required binaries of one entry into its staging directory.

    Staging is strict: the first missing binary aborts the entry, so a
    release is never archived with a silently absent binary.
    """

    def __init__(self, file_adapter: FileAdapterProtocol | None = None) -> None:
        """Initialize artifact stager.

        Args:
            file_adapter: File operations adapter
        """
        self.file_adapter = file_adapter or create_file_adapter()

    def stage(
        self,
        output_directory: Path,
        required_binary_names: Sequence[str],
        binary_extension: str,
        staging_directory: Path,
        context: dict[str, Any] | None = None,
    ) -> list[Path]:
        """Copy ``{name}{binary_extension}`` for each name into the staging dir.

        The staging directory (and its parents) is created if absent. Files
        left over from an earlier run are removed first so the directory
        holds exactly the required binaries.

        Args:
            output_directory: Build output directory
            required_binary_names: Binary names without extension
            binary_extension: Extension for the entry's OS ("" or ".exe")
            staging_directory: Per-entry staging directory
            context: Entry identity attached to raised errors

        Returns:
            list[Path]: Staged files in ``required_binary_names`` order

        Raises:
            MissingBinaryError: On the first binary missing from the output dir
            StagingError: If the staging directory cannot be prepared or written
        """
        try:
            if self.file_adapter.exists(staging_directory):
                self.file_adapter.remove_dir(staging_directory)
            self.file_adapter.mkdir(staging_directory)
        except FileSystemError as e:
            raise StagingError(
                f"Cannot prepare staging directory: {e.message}",
                {**(context or {}), "staging_directory": str(staging_directory)},
            ) from e

        staged: list[Path] = []
        for name in required_binary_names:
            filename = f"{name}{binary_extension}"
            source = output_directory / filename
            if not self.file_adapter.is_file(source):
                logger.error("Required binary missing: %s", source)
                raise MissingBinaryError(name, source, context)

            destination = staging_directory / filename
            try:
                self.file_adapter.copy_file(source, destination)
            except FileSystemError as e:
                raise StagingError(
                    f"Failed to stage {filename}: {e.message}",
                    {**(context or {}), "source": str(source)},
                ) from e
            staged.append(destination)

        listing = self.file_adapter.list_files(staging_directory, "**/*")
        logger.info(
            "Staged %d binaries in %s: %s",
            len(staged),
            staging_directory,
            ", ".join(path.relative_to(staging_directory).as_posix() for path in listing),
        )
        return staged


def create_artifact_stager(
    file_adapter: FileAdapterProtocol | None = None,
) -> ArtifactStager:
    """Create artifact stager instance."""
    return ArtifactStager(file_adapter)
