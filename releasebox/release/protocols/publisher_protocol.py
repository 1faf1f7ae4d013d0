"""Protocol for the publish step."""

from pathlib import Path
from typing import Protocol, runtime_checkable

from releasebox.release.models.archive import PublishedArtifact


@runtime_checkable
class PublisherProtocol(Protocol):
    """Records an archive under a deterministic artifact name."""

    def publish(self, artifact_name: str, archive_path: Path) -> PublishedArtifact:
        """Publish ``archive_path`` as ``artifact_name``.

        Raises:
            NoFilesFoundError: If ``archive_path`` does not exist or is empty
            PublishError: If the upload/record step fails
        """
        ...
