"""Result models for release runs."""

from enum import Enum

from pydantic import Field

from releasebox.config.models import FailurePolicy
from releasebox.models.results import BaseResult
from releasebox.release.models.archive import Archive, PublishedArtifact
from releasebox.release.models.build_matrix import BuildMatrixEntry
from releasebox.release.models.cache_key import CacheKey


class EntryStatus(str, Enum):
    """Final state of one matrix entry."""

    PUBLISHED = "published"
    FAILED = "failed"
    CANCELLED = "cancelled"


class EntryResult(BaseResult):
    """Outcome of the build -> stage -> archive -> publish pipeline for one entry."""

    entry: BuildMatrixEntry
    status: EntryStatus
    cache_key: CacheKey | None = None
    cache_hit: str | None = None
    archive: Archive | None = None
    artifact: PublishedArtifact | None = None
    error_type: str | None = None
    duration_seconds: float | None = None


class ReleaseResult(BaseResult):
    """Union of all entry results for one release tag."""

    release_tag: str
    failure_policy: FailurePolicy
    entries: list[EntryResult] = Field(default_factory=list)

    def _with_status(self, status: EntryStatus) -> list[EntryResult]:
        return [result for result in self.entries if result.status == status]

    @property
    def published(self) -> list[EntryResult]:
        return self._with_status(EntryStatus.PUBLISHED)

    @property
    def failed(self) -> list[EntryResult]:
        return self._with_status(EntryStatus.FAILED)

    @property
    def cancelled(self) -> list[EntryResult]:
        return self._with_status(EntryStatus.CANCELLED)
