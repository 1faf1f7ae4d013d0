"""Adapters package for external system interfaces."""

from releasebox.protocols import FileAdapterProtocol

from .file_adapter import FileSystemAdapter, create_file_adapter


__all__ = [
    "FileAdapterProtocol",
    "FileSystemAdapter",
    "create_file_adapter",
]
