"""Staging and archiving of build artifacts."""

from .archiver import (
    ARCHIVE_STRATEGIES,
    Archiver,
    TarGzArchiveStrategy,
    ZipArchiveStrategy,
    create_archiver,
    file_sha256,
)
from .stager import ArtifactStager, create_artifact_stager


__all__ = [
    "ARCHIVE_STRATEGIES",
    "Archiver",
    "TarGzArchiveStrategy",
    "ZipArchiveStrategy",
    "create_archiver",
    "file_sha256",
    "ArtifactStager",
    "create_artifact_stager",
]
