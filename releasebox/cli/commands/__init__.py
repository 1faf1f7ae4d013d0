"""CLI command modules."""

import typer

from releasebox.cli.commands.build import register_commands as register_build_commands
from releasebox.cli.commands.matrix import (
    register_commands as register_matrix_commands,
)


def register_all_commands(app: typer.Typer) -> None:
    """Register all CLI commands with the main app.

    Calling this again for an app that already has the commands is a no-op.

    Args:
        app: The main Typer app
    """
    if any(command.name == "build" for command in app.registered_commands):
        return
    register_build_commands(app)
    register_matrix_commands(app)
