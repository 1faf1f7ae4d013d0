"""Release services."""

from .release_orchestrator import ReleaseOrchestrator, create_release_orchestrator


__all__ = ["ReleaseOrchestrator", "create_release_orchestrator"]
