"""Configuration models for Releasebox."""

from .release import DEFAULT_RELEASE_TAG, ReleaseConfig
from .settings import FailurePolicy, OrchestratorSettings


__all__ = [
    "DEFAULT_RELEASE_TAG",
    "ReleaseConfig",
    "FailurePolicy",
    "OrchestratorSettings",
]
