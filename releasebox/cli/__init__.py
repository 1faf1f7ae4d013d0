"""Command-line interface for Releasebox."""

from releasebox.cli.app import app, main


__all__ = ["app", "main"]
