"""Archive staged binaries into a single compressed file.

The two formats lay out their contents differently and downstream
consumers rely on it:

- zip: the staged files sit at the top level of the archive.
- tar.gz: the archive holds one top-level directory named after the
  archive basename, containing the staged files.
"""

import hashlib
import logging
import os
import tarfile
import tempfile
import zipfile
from pathlib import Path
from typing import Any, Protocol

from releasebox.core.errors import ArchiveEmptyInputError, ArchiveToolFailure
from releasebox.release.models.archive import Archive, ArchiveFormat, archive_format_for
from releasebox.release.models.build_matrix import OperatingSystem


logger = logging.getLogger(__name__)


class ArchiveStrategy(Protocol):
    """Writes one archive format."""

    format: ArchiveFormat

    def write(self, staging_directory: Path, basename: str, destination: Path) -> None:
        """Write the archive of ``staging_directory`` to ``destination``."""
        ...


class ZipArchiveStrategy:
    """Zip with the staged files at the archive root."""

    format = ArchiveFormat.ZIP

    def write(self, staging_directory: Path, basename: str, destination: Path) -> None:
        with zipfile.ZipFile(destination, "w", compression=zipfile.ZIP_DEFLATED) as zf:
            for path in _iter_files(staging_directory):
                zf.write(path, arcname=path.relative_to(staging_directory).as_posix())


class TarGzArchiveStrategy:
    """Gzip'd tarball with the staging directory as its single top-level entry."""

    format = ArchiveFormat.TAR_GZ

    def write(self, staging_directory: Path, basename: str, destination: Path) -> None:
        with tarfile.open(destination, "w:gz") as tf:
            tf.add(staging_directory, arcname=basename, recursive=True)


ARCHIVE_STRATEGIES: dict[ArchiveFormat, ArchiveStrategy] = {
    ArchiveFormat.ZIP: ZipArchiveStrategy(),
    ArchiveFormat.TAR_GZ: TarGzArchiveStrategy(),
}


def _iter_files(directory: Path) -> list[Path]:
    return sorted(path for path in directory.rglob("*") if path.is_file())


def file_sha256(path: Path) -> str:
    """SHA-256 hex digest of a file."""
    digest = hashlib.sha256()
    with path.open("rb") as f:
        for chunk in iter(lambda: f.read(65536), b""):
            digest.update(chunk)
    return digest.hexdigest()


class Archiver:
    """Package a staging directory, choosing the format by target OS."""

    def __init__(self, strategies: dict[ArchiveFormat, ArchiveStrategy] | None = None):
        self.strategies = strategies or ARCHIVE_STRATEGIES

    def archive(
        self,
        staging_directory: Path,
        basename: str,
        target_os: OperatingSystem,
        output_directory: Path,
        context: dict[str, Any] | None = None,
    ) -> Archive:
        """Create ``{basename}.zip`` or ``{basename}.tar.gz`` in ``output_directory``.

        The archive is written to a temporary file and renamed into place, so
        a failure never leaves a partial archive at the final path.

        Returns:
            Archive: Basename, format, final path and SHA-256 digest

        Raises:
            ArchiveEmptyInputError: If the staging directory holds no files
            ArchiveToolFailure: If compression fails
        """
        archive_format = archive_format_for(target_os)
        strategy = self.strategies[archive_format]

        if not staging_directory.is_dir() or not _iter_files(staging_directory):
            raise ArchiveEmptyInputError(
                "Staging directory contains no files",
                {**(context or {}), "staging_directory": str(staging_directory)},
            )

        destination = output_directory / f"{basename}{archive_format.extension}"
        logger.info(
            "Creating %s archive %s from %s",
            archive_format.value,
            destination,
            staging_directory,
        )

        tmp_path: Path | None = None
        try:
            output_directory.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{basename}.", suffix=".partial", dir=output_directory
            )
            os.close(fd)
            tmp_path = Path(tmp_name)
            strategy.write(staging_directory, basename, tmp_path)
            os.chmod(tmp_path, 0o644)
            os.replace(tmp_path, destination)
            tmp_path = None
        except (OSError, tarfile.TarError, zipfile.BadZipFile, zipfile.LargeZipFile) as e:
            raise ArchiveToolFailure(
                f"Failed to create {archive_format.value} archive: {e}",
                {**(context or {}), "archive": str(destination)},
            ) from e
        finally:
            if tmp_path is not None:
                tmp_path.unlink(missing_ok=True)

        archive = Archive(
            basename=basename,
            format=archive_format,
            path=destination,
            sha256=file_sha256(destination),
        )
        logger.info("Archive created: %s (sha256 %s)", destination, archive.sha256)
        return archive


def create_archiver() -> Archiver:
    """Create archiver with the default zip/tar.gz strategies."""
    return Archiver()
