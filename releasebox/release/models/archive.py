"""Archive and published artifact models."""

from enum import Enum
from pathlib import Path

from releasebox.models.base import FrozenModel
from releasebox.release.models.build_matrix import OperatingSystem


class ArchiveFormat(str, Enum):
    """Compression format of a release archive."""

    ZIP = "zip"
    TAR_GZ = "tar.gz"

    @property
    def extension(self) -> str:
        return f".{self.value}"


def archive_format_for(os: OperatingSystem) -> ArchiveFormat:
    """Zip for Windows, gzip'd tarball everywhere else."""
    if os is OperatingSystem.WINDOWS:
        return ArchiveFormat.ZIP
    return ArchiveFormat.TAR_GZ


class Archive(FrozenModel):
    """A compressed release archive on local disk."""

    basename: str
    format: ArchiveFormat
    path: Path
    sha256: str | None = None

    @property
    def filename(self) -> str:
        return f"{self.basename}{self.format.extension}"


class PublishedArtifact(FrozenModel):
    """An archive recorded under its deterministic artifact name."""

    name: str
    source_path: Path
    location: str | None = None
