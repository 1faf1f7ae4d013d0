"""Release orchestrator: runs every matrix entry through the release pipeline.

Each entry runs cache-key derivation, cache restore, build, stage, archive
and publish strictly in sequence on its own worker thread. Entries share no
mutable state; the only cross-entry signal is the cancellation event used
by the fail-fast policy.
"""

import logging
import threading
import time
from collections.abc import Callable, Sequence
from concurrent.futures import Future, ThreadPoolExecutor, as_completed
from pathlib import Path

from structlog.stdlib import BoundLogger

from releasebox.config.models import FailurePolicy, OrchestratorSettings, ReleaseConfig
from releasebox.core.errors import CacheError, EntryCancelledError, ReleaseboxError
from releasebox.core.structlog_logger import (
    get_struct_logger,
    get_struct_logger_with_context,
)
from releasebox.release.artifacts import (
    Archiver,
    ArtifactStager,
    create_archiver,
    create_artifact_stager,
)
from releasebox.release.cache import BuildCache, CacheKeyBuilder, hash_lockfiles
from releasebox.release.configuration import MatrixExpander
from releasebox.release.models import (
    BuildMatrixEntry,
    CacheKey,
    EntryResult,
    EntryStatus,
    ReleaseResult,
    archive_basename,
    artifact_name,
)
from releasebox.release.protocols import BuilderProtocol, PublisherProtocol


logger = get_struct_logger(__name__)


class ReleaseOrchestrator:
    """Dispatch matrix entries to parallel workers and gather their results."""

    def __init__(
        self,
        builder: BuilderProtocol,
        publisher: PublisherProtocol,
        settings: OrchestratorSettings,
        stager: ArtifactStager | None = None,
        archiver: Archiver | None = None,
        cache_key_builder: CacheKeyBuilder | None = None,
        build_cache: BuildCache | None = None,
        cache_path_for: Callable[[BuildMatrixEntry], Path] | None = None,
    ) -> None:
        """Initialize release orchestrator.

        Args:
            builder: Compiles binaries for one target
            publisher: Records finished archives
            settings: Directories, failure policy and worker count
            stager: Stages binaries (default implementation when None)
            archiver: Creates archives (default implementation when None)
            cache_key_builder: Derives cache keys
            build_cache: Build cache; caching is skipped when None
            cache_path_for: Directory restored/saved for an entry's build cache
        """
        self.builder = builder
        self.publisher = publisher
        self.settings = settings
        self.stager = stager or create_artifact_stager()
        self.archiver = archiver or create_archiver()
        self.cache_key_builder = cache_key_builder or CacheKeyBuilder()
        self.build_cache = build_cache
        self.cache_path_for = cache_path_for or self._default_cache_path
        self.expander = MatrixExpander()

    def _default_cache_path(self, entry: BuildMatrixEntry) -> Path:
        return self.settings.project_dir / "target" / entry.target_triple

    def run(
        self,
        config: ReleaseConfig,
        entries: Sequence[BuildMatrixEntry],
        lockfile_hash: str | None = None,
        cancel_event: threading.Event | None = None,
    ) -> ReleaseResult:
        """Run the release pipeline for every entry.

        Args:
            config: Release configuration shared by all entries
            entries: Matrix entries to process
            lockfile_hash: Digest of the locked dependencies; computed from
                the project directory when None
            cancel_event: Setting it cancels the remaining work; a fresh
                event is used when None

        Returns:
            ReleaseResult: One EntryResult per entry, in matrix order

        Raises:
            ConfigError: If the matrix is invalid (before any work starts)
        """
        self.expander.validate(entries)
        policy = FailurePolicy(self.settings.failure_policy)

        if lockfile_hash is None:
            lockfile_hash = hash_lockfiles(
                self.settings.project_dir, self.settings.lockfile_glob
            )

        logger.info(
            "release_started",
            release_tag=config.release_tag,
            entries=len(entries),
            policy=policy.value,
        )

        cancel_event = cancel_event or threading.Event()
        results: dict[BuildMatrixEntry, EntryResult] = {}
        max_workers = self.settings.max_workers or len(entries)

        with ThreadPoolExecutor(
            max_workers=max_workers, thread_name_prefix="releasebox-entry"
        ) as executor:
            futures: dict[Future[EntryResult], BuildMatrixEntry] = {
                executor.submit(
                    self.process_entry, config, entry, lockfile_hash, cancel_event
                ): entry
                for entry in entries
            }

            for future in as_completed(futures):
                entry = futures[future]
                if future.cancelled():
                    continue
                result = future.result()
                results[entry] = result

                if (
                    result.status == EntryStatus.FAILED
                    and policy == FailurePolicy.FAIL_FAST
                    and not cancel_event.is_set()
                ):
                    logger.warning(
                        "fail_fast_triggered",
                        failed_suffix=entry.artifact_suffix,
                        error=result.errors[0] if result.errors else None,
                    )
                    cancel_event.set()
                    for pending in futures:
                        pending.cancel()

        for entry in entries:
            if entry not in results:
                results[entry] = self._cancelled_result(entry, None)

        ordered = [results[entry] for entry in entries]
        release_result = ReleaseResult(
            success=all(r.status == EntryStatus.PUBLISHED for r in ordered),
            release_tag=config.release_tag,
            failure_policy=policy,
            entries=ordered,
        )
        for result in ordered:
            if result.status != EntryStatus.PUBLISHED:
                release_result.add_error(
                    f"{result.entry.artifact_suffix}: {result.status.value}"
                    + (f" - {result.errors[0]}" if result.errors else "")
                )

        logger.info(
            "release_finished",
            release_tag=config.release_tag,
            published=len(release_result.published),
            failed=len(release_result.failed),
            cancelled=len(release_result.cancelled),
        )
        return release_result

    def process_entry(
        self,
        config: ReleaseConfig,
        entry: BuildMatrixEntry,
        lockfile_hash: str,
        cancel_event: threading.Event | None = None,
    ) -> EntryResult:
        """Run one entry through the full pipeline.

        Either every step completes and the artifact is published, or the
        entry ends failed/cancelled and nothing is published for it.
        """
        cancel_event = cancel_event or threading.Event()
        entry_logger = get_struct_logger_with_context(__name__, **entry.identity)
        started = time.monotonic()
        cache_key: CacheKey | None = None
        cache_hit: str | None = None

        def checkpoint(step: str) -> None:
            if cancel_event.is_set():
                raise EntryCancelledError(
                    f"Cancelled before {step}", {**entry.identity, "step": step}
                )

        try:
            checkpoint("cache")
            cache_key = self.cache_key_builder.build(
                entry.os, entry.target_triple, config.profile_name, lockfile_hash
            )
            entry_logger.debug("cache_key_derived", primary=cache_key.primary)
            cache_hit = self._restore_cache(entry, cache_key, entry_logger)

            checkpoint("build")
            output_dir = self.builder.build(
                entry.target_triple,
                config.profile_name,
                config.binary_names,
                entry.binary_extension,
            )
            if cache_hit != cache_key.primary:
                self._save_cache(entry, cache_key, entry_logger)

            checkpoint("stage")
            basename = archive_basename(config, entry)
            staging_directory = self.settings.staging_root / basename
            self.stager.stage(
                output_dir,
                config.binary_names,
                entry.binary_extension,
                staging_directory,
                context=entry.identity,
            )

            checkpoint("archive")
            archive = self.archiver.archive(
                staging_directory,
                basename,
                entry.os,
                self.settings.output_root,
                context=entry.identity,
            )

            checkpoint("publish")
            artifact = self.publisher.publish(artifact_name(config, entry), archive.path)

        except EntryCancelledError as e:
            entry_logger.info("entry_cancelled", reason=str(e))
            return self._cancelled_result(
                entry, e, cache_key, cache_hit, time.monotonic() - started
            )
        except ReleaseboxError as e:
            entry_logger.error("entry_failed", error=str(e), error_type=type(e).__name__)
            return self._failed_result(
                entry, e, cache_key, cache_hit, time.monotonic() - started
            )
        except Exception as e:
            exc_info = logging.getLogger(__name__).isEnabledFor(logging.DEBUG)
            entry_logger.error("entry_failed_unexpectedly", error=str(e), exc_info=exc_info)
            return self._failed_result(
                entry, e, cache_key, cache_hit, time.monotonic() - started
            )

        duration = time.monotonic() - started
        entry_logger.info(
            "entry_published",
            artifact=artifact.name,
            archive=str(archive.path),
            duration_seconds=round(duration, 3),
        )
        result = EntryResult(
            success=True,
            entry=entry,
            status=EntryStatus.PUBLISHED,
            cache_key=cache_key,
            cache_hit=cache_hit,
            archive=archive,
            artifact=artifact,
            duration_seconds=duration,
        )
        result.add_message(f"Published {artifact.name} to {artifact.location}")
        return result

    def _restore_cache(
        self, entry: BuildMatrixEntry, cache_key: CacheKey, entry_logger: BoundLogger
    ) -> str | None:
        if self.build_cache is None:
            return None
        try:
            restored = self.build_cache.restore(cache_key, self.cache_path_for(entry))
        except CacheError as e:
            entry_logger.warning("cache_restore_failed", error=str(e))
            return None
        return restored.matched_key

    def _save_cache(
        self, entry: BuildMatrixEntry, cache_key: CacheKey, entry_logger: BoundLogger
    ) -> None:
        if self.build_cache is None:
            return
        try:
            self.build_cache.save(cache_key.primary, self.cache_path_for(entry))
        except CacheError as e:
            entry_logger.warning("cache_save_failed", error=str(e))

    def _failed_result(
        self,
        entry: BuildMatrixEntry,
        error: Exception,
        cache_key: CacheKey | None,
        cache_hit: str | None,
        duration: float,
    ) -> EntryResult:
        return EntryResult(
            success=False,
            entry=entry,
            status=EntryStatus.FAILED,
            cache_key=cache_key,
            cache_hit=cache_hit,
            error_type=type(error).__name__,
            errors=[str(error)],
            duration_seconds=duration,
        )

    def _cancelled_result(
        self,
        entry: BuildMatrixEntry,
        error: Exception | None,
        cache_key: CacheKey | None = None,
        cache_hit: str | None = None,
        duration: float | None = None,
    ) -> EntryResult:
        reason = str(error) if error else "Cancelled before start"
        return EntryResult(
            success=False,
            entry=entry,
            status=EntryStatus.CANCELLED,
            cache_key=cache_key,
            cache_hit=cache_hit,
            error_type=EntryCancelledError.__name__,
            errors=[reason],
            duration_seconds=duration,
        )


def create_release_orchestrator(
    builder: BuilderProtocol,
    publisher: PublisherProtocol,
    settings: OrchestratorSettings,
    build_cache: BuildCache | None = None,
) -> ReleaseOrchestrator:
    """Create release orchestrator with default stager, archiver and key builder."""
    return ReleaseOrchestrator(
        builder=builder,
        publisher=publisher,
        settings=settings,
        build_cache=build_cache,
    )
