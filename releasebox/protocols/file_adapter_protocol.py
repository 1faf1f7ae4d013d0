"""Protocol definition for file system operations."""

from pathlib import Path
from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class FileAdapterProtocol(Protocol):
    """Protocol for file system operations."""

    def exists(self, path: Path) -> bool:
        """Check if a path exists."""
        ...

    def is_file(self, path: Path) -> bool:
        """Check if a path is a file."""
        ...

    def is_dir(self, path: Path) -> bool:
        """Check if a path is a directory."""
        ...

    def mkdir(self, path: Path, parents: bool = True, exist_ok: bool = True) -> None:
        """Create a directory.

        Raises:
            FileSystemError: If directory cannot be created
        """
        ...

    def copy_file(self, src: Path, dst: Path) -> None:
        """Copy a file from source to destination, preserving metadata.

        Raises:
            FileSystemError: If file cannot be copied
        """
        ...

    def move(self, src: Path, dst: Path) -> None:
        """Atomically move ``src`` onto ``dst``, replacing ``dst`` if present.

        Raises:
            FileSystemError: If the file cannot be moved
        """
        ...

    def list_files(self, path: Path, pattern: str = "*") -> list[Path]:
        """List files in a directory matching a glob pattern.

        Raises:
            FileSystemError: If directory cannot be accessed
        """
        ...

    def remove_file(self, path: Path) -> None:
        """Remove a file. Does not raise if the file does not exist."""
        ...

    def remove_dir(self, path: Path, recursive: bool = True) -> None:
        """Remove a directory and optionally its contents."""
        ...

    def write_json(
        self, path: Path, data: dict[str, Any], encoding: str = "utf-8", indent: int = 2
    ) -> None:
        """Write data as JSON to a file.

        Raises:
            FileSystemError: If file cannot be written or data cannot be serialized
        """
        ...
