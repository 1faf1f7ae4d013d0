"""File adapter for abstracting file system operations."""

import json
import logging
import os
import shutil
from pathlib import Path
from typing import Any

from releasebox.core.errors import FileSystemError
from releasebox.protocols import FileAdapterProtocol
from releasebox.utils.error_utils import create_file_error
from releasebox.utils.serialization import ReleaseboxJSONEncoder


logger = logging.getLogger(__name__)


class FileSystemAdapter:
    """File system adapter implementation."""

    def exists(self, path: Path) -> bool:
        """Check if a path exists."""
        return path.exists()

    def is_file(self, path: Path) -> bool:
        """Check if a path is a file."""
        return path.is_file()

    def is_dir(self, path: Path) -> bool:
        """Check if a path is a directory."""
        return path.is_dir()

    def mkdir(self, path: Path, parents: bool = True, exist_ok: bool = True) -> None:
        """Create a directory."""
        try:
            logger.debug("Creating directory: %s", path)
            path.mkdir(parents=parents, exist_ok=exist_ok)
        except PermissionError as e:
            error = create_file_error(
                path, "mkdir", e, {"parents": parents, "exist_ok": exist_ok}
            )
            logger.error("Permission denied creating directory: %s", path)
            raise error from e
        except OSError as e:
            error = create_file_error(
                path, "mkdir", e, {"parents": parents, "exist_ok": exist_ok}
            )
            logger.error("Error creating directory %s: %s", path, e)
            raise error from e

    def copy_file(self, src: Path, dst: Path) -> None:
        """Copy a file from source to destination."""
        try:
            # Ensure destination directory exists
            self.mkdir(dst.parent)

            logger.debug("Copying file: %s -> %s", src, dst)
            shutil.copy2(src, dst)
        except FileNotFoundError as e:
            error = create_file_error(
                src, "copy_file", e, {"source": str(src), "destination": str(dst)}
            )
            logger.error("Source file not found: %s", src)
            raise error from e
        except PermissionError as e:
            error = create_file_error(
                src, "copy_file", e, {"source": str(src), "destination": str(dst)}
            )
            logger.error("Permission denied copying file: %s -> %s", src, dst)
            raise error from e
        except FileSystemError:
            # Let FileSystemError from mkdir pass through
            raise
        except OSError as e:
            error = create_file_error(
                src, "copy_file", e, {"source": str(src), "destination": str(dst)}
            )
            logger.error("Error copying file %s to %s: %s", src, dst, e)
            raise error from e

    def move(self, src: Path, dst: Path) -> None:
        """Atomically replace ``dst`` with ``src`` (same file system)."""
        try:
            self.mkdir(dst.parent)
            logger.debug("Moving file: %s -> %s", src, dst)
            os.replace(src, dst)
        except FileSystemError:
            raise
        except OSError as e:
            error = create_file_error(
                src, "move", e, {"source": str(src), "destination": str(dst)}
            )
            logger.error("Error moving file %s to %s: %s", src, dst, e)
            raise error from e

    def list_files(self, path: Path, pattern: str = "*") -> list[Path]:
        """List files in a directory matching a pattern."""
        if not self.is_dir(path):
            error = create_file_error(
                path, "list_files", ValueError("Not a directory"), {"pattern": pattern}
            )
            logger.error("Path is not a directory: %s", path)
            raise error

        try:
            files = sorted(f for f in path.glob(pattern) if f.is_file())
        except OSError as e:
            error = create_file_error(path, "list_files", e, {"pattern": pattern})
            logger.error("Error listing files in %s: %s", path, e)
            raise error from e

        logger.debug(
            "Found %d files matching pattern '%s' in %s", len(files), pattern, path
        )
        return files

    def remove_file(self, path: Path) -> None:
        """Remove a file. Does not raise error if file not found."""
        try:
            logger.debug("Removing file: %s", path)
            path.unlink(missing_ok=True)
        except OSError as e:
            error = create_file_error(path, "remove_file", e, {})
            logger.error("Error removing file %s: %s", path, e)
            raise error from e

    def remove_dir(self, path: Path, recursive: bool = True) -> None:
        """Remove a directory and optionally its contents."""
        if not self.exists(path):
            logger.debug("Directory does not exist, nothing to remove: %s", path)
            return

        if not self.is_dir(path):
            error = create_file_error(
                path,
                "remove_dir",
                ValueError("Not a directory"),
                {"recursive": recursive},
            )
            logger.error("Path is not a directory: %s", path)
            raise error

        try:
            if recursive:
                shutil.rmtree(path)
            else:
                # Only works if the directory is empty
                path.rmdir()
            logger.debug("Removed directory: %s (recursive=%s)", path, recursive)
        except OSError as e:
            error = create_file_error(path, "remove_dir", e, {"recursive": recursive})
            logger.error("Error removing directory %s: %s", path, e)
            raise error from e

    def write_json(
        self,
        path: Path,
        data: dict[str, Any],
        encoding: str = "utf-8",
        indent: int = 2,
    ) -> None:
        """Write data as JSON to a file."""
        try:
            content = json.dumps(
                data, indent=indent, ensure_ascii=False, cls=ReleaseboxJSONEncoder
            )
        except TypeError as e:
            error = create_file_error(
                path, "write_json", e, {"data_type": type(data).__name__}
            )
            logger.error("Cannot serialize data to JSON for file %s: %s", path, e)
            raise error from e

        try:
            self.mkdir(path.parent)
            logger.debug("Writing JSON file: %s", path)
            path.write_text(content + "\n", encoding=encoding)
        except FileSystemError:
            raise
        except OSError as e:
            error = create_file_error(path, "write_json", e, {"encoding": encoding})
            logger.error("Error writing JSON file %s: %s", path, e)
            raise error from e


def create_file_adapter() -> FileAdapterProtocol:
    """Create a file adapter with default implementation."""
    return FileSystemAdapter()
