"""Publisher that records archives in a local publish directory."""

import logging
import tempfile
from pathlib import Path

from releasebox.adapters import create_file_adapter
from releasebox.core.errors import FileSystemError, NoFilesFoundError, PublishError
from releasebox.protocols import FileAdapterProtocol
from releasebox.release.models.archive import PublishedArtifact
from releasebox.release.protocols import PublisherProtocol


logger = logging.getLogger(__name__)


def ensure_archive_present(artifact_name: str, archive_path: Path) -> None:
    """Raise NoFilesFoundError unless ``archive_path`` holds something to publish.

    A missing path, an empty file and an empty directory all count as
    "no files found"; this is always a hard error.
    """
    if archive_path.is_file() and archive_path.stat().st_size > 0:
        return
    if archive_path.is_dir() and any(p.is_file() for p in archive_path.rglob("*")):
        return
    raise NoFilesFoundError(
        f"No files were found with the provided path: {archive_path}. "
        "No artifacts will be uploaded.",
        {"artifact": artifact_name, "path": str(archive_path)},
    )


class DirectoryPublisher:
    """Copy each archive to ``<publish_root>/<artifact name>/<archive file>``.

    The copy lands under a temporary name and is renamed into place, so a
    failed publish leaves nothing under the artifact name. Publishing the
    same artifact again replaces the earlier copy.
    """

    def __init__(
        self,
        publish_root: Path,
        file_adapter: FileAdapterProtocol | None = None,
    ) -> None:
        """Initialize directory publisher.

        Args:
            publish_root: Directory that receives published artifacts
            file_adapter: File operations adapter
        """
        self.publish_root = publish_root
        self.file_adapter = file_adapter or create_file_adapter()

    def publish(self, artifact_name: str, archive_path: Path) -> PublishedArtifact:
        """Publish ``archive_path`` under ``artifact_name``.

        Raises:
            NoFilesFoundError: If there is nothing at ``archive_path``
            PublishError: If the archive cannot be copied into place
        """
        ensure_archive_present(artifact_name, archive_path)
        if not archive_path.is_file():
            raise PublishError(
                "Only single archive files can be published",
                {"artifact": artifact_name, "path": str(archive_path)},
            )

        artifact_dir = self.publish_root / artifact_name
        destination = artifact_dir / archive_path.name
        created_dir = not self.file_adapter.exists(artifact_dir)

        try:
            self.file_adapter.mkdir(artifact_dir)
            with tempfile.NamedTemporaryFile(
                dir=artifact_dir, prefix=f".{archive_path.name}.", delete=False
            ) as tmp:
                tmp_path = Path(tmp.name)
            try:
                self.file_adapter.copy_file(archive_path, tmp_path)
                self.file_adapter.move(tmp_path, destination)
            finally:
                self.file_adapter.remove_file(tmp_path)
        except (FileSystemError, OSError) as e:
            if created_dir:
                self._discard_artifact_dir(artifact_dir)
            raise PublishError(
                f"Failed to publish artifact: {e}",
                {"artifact": artifact_name, "path": str(archive_path)},
            ) from e

        logger.info("Published artifact %s -> %s", artifact_name, destination)
        return PublishedArtifact(
            name=artifact_name, source_path=archive_path, location=str(destination)
        )

    def _discard_artifact_dir(self, artifact_dir: Path) -> None:
        """Remove an artifact directory created by a publish that failed."""
        try:
            self.file_adapter.remove_dir(artifact_dir, recursive=False)
        except FileSystemError as e:
            logger.warning("Could not remove %s after failed publish: %s", artifact_dir, e)


def create_directory_publisher(
    publish_root: Path, file_adapter: FileAdapterProtocol | None = None
) -> PublisherProtocol:
    """Create directory publisher instance."""
    return DirectoryPublisher(publish_root, file_adapter)
