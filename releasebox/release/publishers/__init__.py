"""Publisher implementations."""

from .directory_publisher import (
    DirectoryPublisher,
    create_directory_publisher,
    ensure_archive_present,
)


__all__ = ["DirectoryPublisher", "create_directory_publisher", "ensure_archive_present"]
