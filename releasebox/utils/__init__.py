"""Utility helpers shared across Releasebox."""

from releasebox.utils.error_utils import create_file_error, create_process_error


__all__ = ["create_file_error", "create_process_error"]
