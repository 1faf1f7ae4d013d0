"""Deterministic names derived from the release configuration."""

from releasebox.config.models import ReleaseConfig
from releasebox.release.models.build_matrix import BuildMatrixEntry


def archive_basename(config: ReleaseConfig, entry: BuildMatrixEntry) -> str:
    """``{main_binary}-{tag}-{suffix}``; also names the staging directory."""
    return f"{config.main_binary_name}-{config.release_tag}-{entry.artifact_suffix}"


def artifact_name(config: ReleaseConfig, entry: BuildMatrixEntry) -> str:
    """Published artifact name; identical to the archive basename."""
    return archive_basename(config, entry)
