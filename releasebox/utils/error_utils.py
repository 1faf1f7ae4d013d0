"""Helpers for building errors with consistent context."""

from pathlib import Path
from typing import Any

from releasebox.core.errors import FileSystemError, ReleaseboxError


def create_file_error(
    path: Path,
    operation: str,
    original_error: Exception,
    additional_context: dict[str, Any] | None = None,
) -> FileSystemError:
    """Create a FileSystemError describing a failed file operation.

    Args:
        path: Path the operation was applied to
        operation: Name of the failed operation (e.g. "copy_file")
        original_error: The underlying exception
        additional_context: Extra context merged into the error context

    Returns:
        FileSystemError ready to be raised
    """
    context: dict[str, Any] = {
        "path": str(path),
        "operation": operation,
        "error_type": type(original_error).__name__,
    }
    if additional_context:
        context.update(additional_context)
    return FileSystemError(
        f"File operation '{operation}' failed on {path}: {original_error}", context
    )


def create_process_error(
    error_cls: type[ReleaseboxError],
    message: str,
    command: str,
    return_code: int | None = None,
    additional_context: dict[str, Any] | None = None,
) -> ReleaseboxError:
    """Create an error of ``error_cls`` for a failed external command.

    Args:
        error_cls: ReleaseboxError subclass to instantiate
        message: Human readable message
        command: Command line that was executed
        return_code: Exit status of the command, if it ran
        additional_context: Extra context merged into the error context

    Returns:
        Instance of ``error_cls``
    """
    context: dict[str, Any] = {"command": command}
    if return_code is not None:
        context["return_code"] = return_code
    if additional_context:
        context.update(additional_context)
    return error_cls(message, context)
