"""Configuration loading for Releasebox."""

from releasebox.config.models import (
    DEFAULT_RELEASE_TAG,
    FailurePolicy,
    OrchestratorSettings,
    ReleaseConfig,
)


__all__ = [
    "DEFAULT_RELEASE_TAG",
    "FailurePolicy",
    "OrchestratorSettings",
    "ReleaseConfig",
]
