"""Cache key derivation for per-entry build caches."""

import hashlib
import logging
from pathlib import Path

from releasebox.release.models.build_matrix import OperatingSystem
from releasebox.release.models.cache_key import CacheKey


logger = logging.getLogger(__name__)

CACHE_KEY_DELIMITER = "-"
CACHE_NAMESPACE = "cargo"

# Smallest fallback keeps (os, target triple)
_MIN_FALLBACK_PARTS = 2


def hash_lockfiles(project_dir: Path, pattern: str = "**/Cargo.lock") -> str:
    """Hash every lockfile under ``project_dir`` matching ``pattern``.

    The digest covers each file's relative path and content, in sorted path
    order, so it only changes when the locked dependency set changes. Build
    output directories are skipped.

    Returns:
        Hex SHA-256 digest, or an empty string when no lockfile matches
    """
    lockfiles = sorted(
        path
        for path in project_dir.glob(pattern)
        if path.is_file() and "target" not in path.relative_to(project_dir).parts
    )
    if not lockfiles:
        logger.warning("No lockfiles matching '%s' in %s", pattern, project_dir)
        return ""

    digest = hashlib.sha256()
    for lockfile in lockfiles:
        digest.update(lockfile.relative_to(project_dir).as_posix().encode("utf-8"))
        digest.update(b"\0")
        with lockfile.open("rb") as f:
            for chunk in iter(lambda: f.read(65536), b""):
                digest.update(chunk)
        digest.update(b"\0")

    logger.debug("Hashed %d lockfile(s) under %s", len(lockfiles), project_dir)
    return digest.hexdigest()


class CacheKeyBuilder:
    """Derive a cache key and its fallback prefixes.

    ``primary`` joins ``{RunnerOS}-{target}-cargo-{profile}-{lockfile_hash}``.
    Fallbacks drop trailing components one at a time, each ending with the
    delimiter, down to ``{RunnerOS}-{target}-``. Pure and deterministic.
    """

    def __init__(
        self,
        delimiter: str = CACHE_KEY_DELIMITER,
        namespace: str | None = CACHE_NAMESPACE,
    ) -> None:
        self.delimiter = delimiter
        self.namespace = namespace

    def build(
        self,
        os: OperatingSystem,
        target_triple: str,
        profile_name: str,
        lockfile_hash: str,
    ) -> CacheKey:
        """Build the cache key for one matrix entry.

        Args:
            os: Operating system of the entry
            target_triple: Compilation target
            profile_name: Build profile name
            lockfile_hash: Digest of the locked dependency set

        Returns:
            CacheKey: Primary key plus fallbacks, most specific first
        """
        parts = [os.runner_name, target_triple]
        if self.namespace:
            parts.append(self.namespace)
        parts.extend([profile_name, lockfile_hash])

        primary = self.delimiter.join(parts)
        fallbacks = tuple(
            self.delimiter.join(parts[:count]) + self.delimiter
            for count in range(len(parts) - 1, _MIN_FALLBACK_PARTS - 1, -1)
        )
        # An empty lockfile hash makes the first fallback equal to the primary key
        fallbacks = tuple(f for f in fallbacks if f != primary)

        return CacheKey(primary=primary, fallbacks=fallbacks)


def create_cache_key_builder() -> CacheKeyBuilder:
    """Create cache key builder with the default key layout."""
    return CacheKeyBuilder()
