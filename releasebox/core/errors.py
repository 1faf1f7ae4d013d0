"""Exception hierarchy for Releasebox.

Every per-entry error carries the identity of the matrix entry it belongs to
(os/target/suffix) in its ``context`` so that one failing work item can be
told apart from its parallel siblings.
"""

from typing import Any


class ReleaseboxError(Exception):
    """Base exception for all Releasebox errors."""

    def __init__(self, message: str, context: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.context: dict[str, Any] = dict(context or {})

    def __str__(self) -> str:
        if not self.context:
            return self.message
        details = ", ".join(f"{key}={value}" for key, value in self.context.items())
        return f"{self.message} ({details})"


class FileSystemError(ReleaseboxError):
    """File system operation failed."""


class ConfigError(ReleaseboxError):
    """Matrix or release configuration invariant violated."""


class BuildError(ReleaseboxError):
    """Compilation for a target failed or did not produce an expected binary."""


class CacheError(ReleaseboxError):
    """Build cache could not be restored or saved."""


class StagingError(ReleaseboxError):
    """Binaries could not be staged for archiving."""


class MissingBinaryError(StagingError):
    """A required binary was absent from the build output directory."""

    def __init__(
        self, binary_name: str, source: Any, context: dict[str, Any] | None = None
    ) -> None:
        super().__init__(
            f"Missing binary '{binary_name}' (expected at {source})", context
        )
        self.binary_name = binary_name
        self.source = source


class ArchiveError(ReleaseboxError):
    """Archive creation failed."""


class ArchiveToolFailure(ArchiveError):
    """The compression step reported a failure."""


class ArchiveEmptyInputError(ArchiveError):
    """The staging directory contained nothing to compress."""


class PublishError(ReleaseboxError):
    """Publishing an archive failed."""


class NoFilesFoundError(PublishError):
    """Nothing exists at the expected archive path."""


class EntryCancelledError(ReleaseboxError):
    """Work item was cancelled because a sibling entry failed (fail-fast)."""


__all__ = [
    "ReleaseboxError",
    "FileSystemError",
    "ConfigError",
    "BuildError",
    "CacheError",
    "StagingError",
    "MissingBinaryError",
    "ArchiveError",
    "ArchiveToolFailure",
    "ArchiveEmptyInputError",
    "PublishError",
    "NoFilesFoundError",
    "EntryCancelledError",
]
