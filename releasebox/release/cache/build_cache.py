"""Local build cache keyed by CacheKey.

Snapshots of a build directory are stored on disk under the cache root;
a DiskCache index maps each key to its snapshot metadata. DiskCache is
SQLite-backed, so concurrently running entries can share one index.
Entries are only ever added or updated, never deleted, so one entry's save
cannot invalidate another entry's fallback lookup.
"""

import hashlib
import logging
import shutil
import tempfile
import time
from pathlib import Path
from typing import Any

import diskcache  # type: ignore[import-untyped]

from releasebox.core.errors import CacheError
from releasebox.release.models.cache_key import CacheKey, CacheRestoreResult


logger = logging.getLogger(__name__)


class BuildCache:
    """Restore and save build directories by cache key."""

    def __init__(self, cache_dir: Path) -> None:
        """Initialize build cache.

        Args:
            cache_dir: Root directory for the index and snapshots
        """
        self.cache_dir = cache_dir
        self.snapshots_dir = cache_dir / "snapshots"
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

        try:
            self.snapshots_dir.mkdir(parents=True, exist_ok=True)
            self._index = diskcache.Cache(directory=str(cache_dir / "index"))
        except OSError as e:
            raise CacheError(
                f"Cannot initialize build cache: {e}", {"cache_dir": str(cache_dir)}
            ) from e

        self.logger.debug("Build cache initialized at %s", cache_dir)

    def _snapshot_path(self, key: str) -> Path:
        digest = hashlib.sha256(key.encode("utf-8")).hexdigest()[:32]
        return self.snapshots_dir / digest

    def _lookup(self, key: str) -> dict[str, Any] | None:
        metadata = self._index.get(key)
        if metadata is None:
            return None
        if not Path(metadata["snapshot"]).is_dir():
            self.logger.warning("Snapshot for cache key %s is missing on disk", key)
            return None
        return dict(metadata)

    def find(self, cache_key: CacheKey) -> tuple[str, dict[str, Any], bool] | None:
        """Find the best matching entry for ``cache_key``.

        Tries the exact primary key first, then each fallback as a prefix;
        among several prefix matches the most recently saved entry wins.

        Returns:
            (matched key, metadata, exact) or None on a cold cache
        """
        metadata = self._lookup(cache_key.primary)
        if metadata is not None:
            return cache_key.primary, metadata, True

        known_keys = [k for k in self._index.iterkeys() if isinstance(k, str)]
        for prefix in cache_key.fallbacks:
            candidates: list[tuple[float, str, dict[str, Any]]] = []
            for key in known_keys:
                if not key.startswith(prefix):
                    continue
                found = self._lookup(key)
                if found is not None:
                    candidates.append((found.get("saved_at", 0.0), key, found))
            if candidates:
                _saved_at, key, found = max(candidates, key=lambda c: (c[0], c[1]))
                return key, found, False

        return None

    def restore(self, cache_key: CacheKey, destination: Path) -> CacheRestoreResult:
        """Copy the best matching snapshot into ``destination``.

        Existing files in ``destination`` are overwritten; nothing is deleted.

        Raises:
            CacheError: If a matched snapshot cannot be copied
        """
        match = self.find(cache_key)
        if match is None:
            self.logger.info("Cache miss for %s; starting cold", cache_key.primary)
            return CacheRestoreResult(requested_key=cache_key.primary)

        matched_key, metadata, exact = match
        snapshot = Path(metadata["snapshot"])
        try:
            destination.mkdir(parents=True, exist_ok=True)
            shutil.copytree(snapshot, destination, dirs_exist_ok=True)
        except OSError as e:
            raise CacheError(
                f"Failed to restore cache entry: {e}",
                {"key": matched_key, "destination": str(destination)},
            ) from e

        self.logger.info(
            "Restored %s cache entry %s into %s",
            "exact" if exact else "fallback",
            matched_key,
            destination,
        )
        return CacheRestoreResult(
            requested_key=cache_key.primary,
            matched_key=matched_key,
            exact=exact,
            restored_path=destination,
        )

    def save(self, key: str, source: Path) -> Path:
        """Store ``source`` under ``key``, replacing an older snapshot of that key.

        The snapshot is written to a temporary directory first and then moved
        into place, so a reader never observes a half-written snapshot.

        Returns:
            Path to the stored snapshot

        Raises:
            CacheError: If the snapshot cannot be written
        """
        if not source.is_dir():
            raise CacheError(
                "Cannot cache a missing directory", {"key": key, "source": str(source)}
            )

        snapshot = self._snapshot_path(key)
        staging = Path(tempfile.mkdtemp(prefix=".tmp-", dir=self.snapshots_dir))
        try:
            shutil.copytree(source, staging, dirs_exist_ok=True)
            if snapshot.exists():
                retired = snapshot.with_name(f"{snapshot.name}.old-{time.time_ns()}")
                snapshot.rename(retired)
                staging.rename(snapshot)
                shutil.rmtree(retired, ignore_errors=True)
            else:
                staging.rename(snapshot)
        except OSError as e:
            shutil.rmtree(staging, ignore_errors=True)
            raise CacheError(
                f"Failed to save cache entry: {e}", {"key": key, "source": str(source)}
            ) from e

        self._index.set(
            key,
            {"snapshot": str(snapshot), "source": str(source), "saved_at": time.time()},
        )
        self.logger.info("Saved cache entry %s from %s", key, source)
        return snapshot

    def keys(self) -> list[str]:
        """All keys currently in the index."""
        return sorted(k for k in self._index.iterkeys() if isinstance(k, str))

    def close(self) -> None:
        self._index.close()


def create_build_cache(cache_dir: Path) -> BuildCache:
    """Create build cache rooted at ``cache_dir``."""
    return BuildCache(cache_dir)
