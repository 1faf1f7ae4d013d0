"""Release domain models."""

from .archive import Archive, ArchiveFormat, PublishedArtifact, archive_format_for
from .build_matrix import (
    DEFAULT_BUILD_MATRIX,
    BuildMatrixEntry,
    OperatingSystem,
)
from .cache_key import CacheKey, CacheRestoreResult
from .naming import archive_basename, artifact_name
from .results import EntryResult, EntryStatus, ReleaseResult


__all__ = [
    "Archive",
    "ArchiveFormat",
    "PublishedArtifact",
    "archive_format_for",
    "DEFAULT_BUILD_MATRIX",
    "BuildMatrixEntry",
    "OperatingSystem",
    "CacheKey",
    "CacheRestoreResult",
    "archive_basename",
    "artifact_name",
    "EntryResult",
    "EntryStatus",
    "ReleaseResult",
]
