"""Tests for the release orchestrator."""

import tarfile
import threading
import zipfile
from collections.abc import Collection
from pathlib import Path
from unittest.mock import Mock

import pytest

from releasebox.config.models import FailurePolicy, OrchestratorSettings
from releasebox.core.errors import BuildError, CacheError, ConfigError, PublishError
from releasebox.release.cache import BuildCache, CacheKeyBuilder
from releasebox.release.models import (
    DEFAULT_BUILD_MATRIX,
    BuildMatrixEntry,
    CacheRestoreResult,
    EntryStatus,
)
from releasebox.release.publishers import DirectoryPublisher
from releasebox.release.services import ReleaseOrchestrator, create_release_orchestrator


class FakeBuilder:
    """Builder that writes placeholder binaries instead of compiling."""

    def __init__(self, root: Path):
        self.root = root
        self.failures: dict[str, Exception] = {}
        self.omit: dict[str, str] = {}
        self.wait_for: dict[str, threading.Event] = {}
        self.calls: list[str] = []
        self._lock = threading.Lock()

    def check_available(self) -> bool:
        return True

    def build(
        self,
        target_triple: str,
        profile_name: str,
        binary_names: Collection[str],
        binary_extension: str = "",
    ) -> Path:
        with self._lock:
            self.calls.append(target_triple)
        if target_triple in self.wait_for:
            assert self.wait_for[target_triple].wait(timeout=10)
        if target_triple in self.failures:
            raise self.failures[target_triple]

        output_dir = self.root / target_triple / profile_name
        output_dir.mkdir(parents=True, exist_ok=True)
        for name in binary_names:
            if self.omit.get(target_triple) == name:
                continue
            (output_dir / f"{name}{binary_extension}").write_bytes(name.encode())
        return output_dir


def _entry(suffix: str) -> BuildMatrixEntry:
    return next(e for e in DEFAULT_BUILD_MATRIX if e.artifact_suffix == suffix)


class TestReleaseOrchestrator:
    """Test the per-entry pipeline and parallel dispatch."""

    @pytest.fixture(autouse=True)
    def _setup(self, tmp_path, project_dir, release_config):
        self.tmp_path = tmp_path
        self.config = release_config
        self.builder = FakeBuilder(tmp_path / "build-out")
        self.settings = OrchestratorSettings(
            project_dir=project_dir, failure_policy=FailurePolicy.BEST_EFFORT
        )
        self.publisher = DirectoryPublisher(self.settings.publish_root)

    def _orchestrator(self, **kwargs) -> ReleaseOrchestrator:
        settings = kwargs.pop("settings", self.settings)
        return ReleaseOrchestrator(
            builder=self.builder, publisher=self.publisher, settings=settings, **kwargs
        )

    def test_publishes_every_entry(self):
        result = self._orchestrator().run(self.config, DEFAULT_BUILD_MATRIX)

        assert result.success
        assert [r.status for r in result.entries] == [EntryStatus.PUBLISHED] * 4
        assert [r.entry for r in result.entries] == list(DEFAULT_BUILD_MATRIX)
        assert sorted(self.builder.calls) == sorted(
            e.target_triple for e in DEFAULT_BUILD_MATRIX
        )
        published = sorted(p.name for p in self.settings.publish_root.iterdir())
        assert published == [
            "serval-v1.2.3-linux-amd64",
            "serval-v1.2.3-macos-amd64",
            "serval-v1.2.3-macos-arm64",
            "serval-v1.2.3-windows-amd64",
        ]

    def test_windows_entry_end_to_end(self):
        result = self._orchestrator().run(self.config, [_entry("windows-amd64")])

        (entry_result,) = result.entries
        assert entry_result.artifact.name == "serval-v1.2.3-windows-amd64"
        assert entry_result.archive.path.name == "serval-v1.2.3-windows-amd64.zip"
        with zipfile.ZipFile(entry_result.archive.path) as zf:
            assert sorted(zf.namelist()) == [
                "serval-check.exe",
                "serval-xmp-extract.exe",
                "serval.exe",
            ]
        assert Path(entry_result.artifact.location).is_file()

    def test_linux_entry_end_to_end(self):
        result = self._orchestrator().run(self.config, [_entry("linux-amd64")])

        (entry_result,) = result.entries
        assert entry_result.archive.path.name == "serval-v1.2.3-linux-amd64.tar.gz"
        with tarfile.open(entry_result.archive.path, "r:gz") as tf:
            names = sorted(m.name for m in tf.getmembers() if m.isfile())
        assert names == [
            "serval-v1.2.3-linux-amd64/serval",
            "serval-v1.2.3-linux-amd64/serval-check",
            "serval-v1.2.3-linux-amd64/serval-xmp-extract",
        ]

    def test_invalid_matrix_fails_before_any_work(self):
        duplicate = BuildMatrixEntry(
            os="linux", target_triple="aarch64-unknown-linux-gnu", artifact_suffix="linux-amd64"
        )
        with pytest.raises(ConfigError):
            self._orchestrator().run(self.config, [_entry("linux-amd64"), duplicate])
        assert self.builder.calls == []

    def test_missing_binary_best_effort_siblings_unaffected(self):
        linux = _entry("linux-amd64")
        self.builder.omit[linux.target_triple] = "serval-check"

        result = self._orchestrator().run(self.config, DEFAULT_BUILD_MATRIX)

        assert not result.success
        failed = result.failed
        assert [r.entry for r in failed] == [linux]
        assert failed[0].error_type == "MissingBinaryError"
        assert "serval-check" in failed[0].errors[0]
        assert "suffix=linux-amd64" in failed[0].errors[0]
        assert failed[0].archive is None
        assert len(result.published) == 3
        assert not (self.settings.publish_root / "serval-v1.2.3-linux-amd64").exists()
        assert not (self.settings.output_root / "serval-v1.2.3-linux-amd64.tar.gz").exists()

    def test_fail_fast_cancels_in_flight_siblings(self):
        settings = OrchestratorSettings(
            project_dir=self.settings.project_dir, failure_policy=FailurePolicy.FAIL_FAST
        )
        linux, windows = _entry("linux-amd64"), _entry("windows-amd64")
        cancel_event = threading.Event()
        self.builder.failures[linux.target_triple] = BuildError("linker exploded")
        self.builder.wait_for[windows.target_triple] = cancel_event

        result = self._orchestrator(settings=settings).run(
            self.config, [linux, windows], cancel_event=cancel_event
        )

        assert [r.status for r in result.entries] == [
            EntryStatus.FAILED,
            EntryStatus.CANCELLED,
        ]
        assert result.entries[0].error_type == "BuildError"
        assert result.entries[1].error_type == "EntryCancelledError"
        assert not settings.publish_root.exists()
        assert len(result.errors) == 2

    def test_fail_fast_cancels_entries_not_yet_started(self):
        settings = OrchestratorSettings(
            project_dir=self.settings.project_dir,
            failure_policy=FailurePolicy.FAIL_FAST,
            max_workers=1,
        )
        linux = _entry("linux-amd64")
        cancel_event = threading.Event()
        self.builder.failures[linux.target_triple] = BuildError("boom")
        for entry in DEFAULT_BUILD_MATRIX[1:]:
            self.builder.wait_for[entry.target_triple] = cancel_event

        result = self._orchestrator(settings=settings).run(
            self.config, DEFAULT_BUILD_MATRIX, cancel_event=cancel_event
        )

        assert result.entries[0].status == EntryStatus.FAILED
        assert all(r.status == EntryStatus.CANCELLED for r in result.entries[1:])
        assert result.published == []

    def test_best_effort_runs_everything(self):
        linux = _entry("linux-amd64")
        self.builder.failures[linux.target_triple] = BuildError("boom")

        result = self._orchestrator().run(self.config, DEFAULT_BUILD_MATRIX)

        assert len(result.failed) == 1
        assert len(result.published) == 3
        assert result.cancelled == []

    def test_publish_failure_is_per_entry(self):
        publisher = Mock()
        publisher.publish.side_effect = PublishError("upload rejected")
        orchestrator = ReleaseOrchestrator(self.builder, publisher, self.settings)

        result = orchestrator.run(self.config, [_entry("macos-arm64")])

        (entry_result,) = result.entries
        assert entry_result.status == EntryStatus.FAILED
        assert entry_result.error_type == "PublishError"

    def test_unexpected_exception_becomes_failed_entry(self):
        macos = _entry("macos-amd64")
        self.builder.failures[macos.target_triple] = RuntimeError("surprise")

        result = self._orchestrator().run(self.config, [macos])

        assert result.entries[0].status == EntryStatus.FAILED
        assert result.entries[0].error_type == "RuntimeError"

    def test_precancelled_entry_does_nothing(self):
        cancel_event = threading.Event()
        cancel_event.set()

        entry_result = self._orchestrator().process_entry(
            self.config, _entry("linux-amd64"), "hash", cancel_event
        )

        assert entry_result.status == EntryStatus.CANCELLED
        assert self.builder.calls == []

    def test_cache_key_uses_lockfile_hash(self):
        result = self._orchestrator().run(
            self.config, [_entry("linux-amd64")], lockfile_hash="abc"
        )
        expected = CacheKeyBuilder().build(
            _entry("linux-amd64").os, "x86_64-unknown-linux-gnu", "release-lto", "abc"
        )
        assert result.entries[0].cache_key == expected

    def test_summary_is_serializable(self):
        result = self._orchestrator().run(self.config, [_entry("linux-amd64")])
        summary = result.to_dict_full()
        assert summary["release_tag"] == "v1.2.3"
        assert summary["failure_policy"] == "best-effort"
        assert summary["entries"][0]["status"] == "published"


class TestReleaseOrchestratorCache:
    """Test build cache integration."""

    @pytest.fixture(autouse=True)
    def _setup(self, tmp_path, project_dir, release_config):
        self.config = release_config
        self.builder = FakeBuilder(tmp_path / "build-out")
        self.settings = OrchestratorSettings(project_dir=project_dir)
        self.publisher = DirectoryPublisher(self.settings.publish_root)
        self.entry = _entry("linux-amd64")

    def test_exact_hit_skips_save(self):
        cache = Mock(spec=BuildCache)
        cache.restore.side_effect = lambda key, dest: CacheRestoreResult(
            requested_key=key.primary, matched_key=key.primary, exact=True
        )
        orchestrator = create_release_orchestrator(
            self.builder, self.publisher, self.settings, build_cache=cache
        )

        result = orchestrator.run(self.config, [self.entry], lockfile_hash="h")

        assert result.entries[0].cache_hit == result.entries[0].cache_key.primary
        cache.save.assert_not_called()

    def test_miss_saves_under_primary_key(self):
        cache = Mock(spec=BuildCache)
        cache.restore.side_effect = lambda key, dest: CacheRestoreResult(
            requested_key=key.primary
        )
        orchestrator = create_release_orchestrator(
            self.builder, self.publisher, self.settings, build_cache=cache
        )

        result = orchestrator.run(self.config, [self.entry], lockfile_hash="h")

        primary = result.entries[0].cache_key.primary
        cache.save.assert_called_once_with(
            primary, self.settings.project_dir / "target" / self.entry.target_triple
        )
        assert result.entries[0].cache_hit is None

    def test_cache_errors_only_warn(self):
        cache = Mock(spec=BuildCache)
        cache.restore.side_effect = CacheError("index locked")
        cache.save.side_effect = CacheError("disk full")
        orchestrator = create_release_orchestrator(
            self.builder, self.publisher, self.settings, build_cache=cache
        )

        result = orchestrator.run(self.config, [self.entry], lockfile_hash="h")

        assert result.entries[0].status == EntryStatus.PUBLISHED

    def test_real_cache_round_trip(self, tmp_path):
        target_dir = tmp_path / "cargo-target"
        (target_dir / "release-lto").mkdir(parents=True)
        (target_dir / "release-lto" / "dep.rlib").write_text("compiled")
        cache = BuildCache(tmp_path / "cache")
        try:
            orchestrator = ReleaseOrchestrator(
                self.builder,
                self.publisher,
                self.settings,
                build_cache=cache,
                cache_path_for=lambda entry: target_dir,
            )
            first = orchestrator.run(self.config, [self.entry], lockfile_hash="h")
            second = orchestrator.run(self.config, [self.entry], lockfile_hash="h")
        finally:
            cache.close()

        assert first.entries[0].cache_hit is None
        assert second.entries[0].cache_hit == second.entries[0].cache_key.primary


UNEXPECTED_FAILURE_SCRIPT = """
import sys
from pathlib import Path
from unittest.mock import Mock

from releasebox.config.models import FailurePolicy, OrchestratorSettings, ReleaseConfig
from releasebox.release.models import DEFAULT_BUILD_MATRIX
from releasebox.release.services import create_release_orchestrator

builder = Mock()
builder.build.side_effect = RuntimeError("surprise")
settings = OrchestratorSettings(
    project_dir=Path(sys.argv[1]), failure_policy=FailurePolicy.BEST_EFFORT
)
orchestrator = create_release_orchestrator(builder, Mock(), settings)
result = orchestrator.run(ReleaseConfig(release_tag="v1.0.0"), DEFAULT_BUILD_MATRIX[:2])
print("statuses=" + ",".join(r.status.value for r in result.entries))
"""


def test_unexpected_exception_without_logging_setup(fresh_python, project_dir):
    """Unconfigured logging still yields one failed result per entry."""
    result = fresh_python("-c", UNEXPECTED_FAILURE_SCRIPT, str(project_dir))

    assert result.returncode == 0, result.stderr
    assert "statuses=failed,failed" in result.stdout.splitlines()
