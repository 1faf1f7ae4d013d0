"""Matrix inspection commands."""

from typing import Annotated

import typer
from rich.console import Console
from rich.table import Table

from releasebox.cli.app import AppContext
from releasebox.cli.decorators import handle_errors
from releasebox.release.cache import create_cache_key_builder, hash_lockfiles
from releasebox.release.configuration import create_matrix_expander
from releasebox.release.models import archive_basename, archive_format_for


@handle_errors
def matrix_command(
    ctx: typer.Context,
    release_tag: Annotated[
        str | None,
        typer.Argument(help="Release tag used for the archive names shown"),
    ] = None,
) -> None:
    """Show the validated build matrix."""
    app_ctx: AppContext = ctx.obj
    config = app_ctx.user_config.release_config(release_tag)
    entries = app_ctx.user_config.matrix()

    table = Table(title="Build matrix")
    table.add_column("Suffix", style="cyan")
    table.add_column("OS")
    table.add_column("Target")
    table.add_column("Ext")
    table.add_column("Archive")
    for entry in entries:
        archive_format = archive_format_for(entry.os)
        table.add_row(
            entry.artifact_suffix,
            entry.os.value,
            entry.target_triple,
            entry.binary_extension or "-",
            f"{archive_basename(config, entry)}{archive_format.extension}",
        )
    Console().print(table)


@handle_errors
def cache_key_command(
    ctx: typer.Context,
    suffix: Annotated[str, typer.Argument(help="Artifact suffix of the entry")],
    profile: Annotated[
        str | None,
        typer.Option("--profile", help="Build profile (defaults to configured one)"),
    ] = None,
) -> None:
    """Print the primary cache key and its fallbacks for one entry."""
    app_ctx: AppContext = ctx.obj
    config = app_ctx.user_config.release_config()
    settings = app_ctx.user_config.settings()
    (entry,) = create_matrix_expander().select(app_ctx.user_config.matrix(), [suffix])

    lockfile_hash = hash_lockfiles(settings.project_dir, settings.lockfile_glob)
    cache_key = create_cache_key_builder().build(
        entry.os, entry.target_triple, profile or config.profile_name, lockfile_hash
    )

    print(cache_key.primary)
    for fallback in cache_key.fallbacks:
        print(fallback)


def register_commands(app: typer.Typer) -> None:
    """Register matrix commands with the main app.

    Args:
        app: The main Typer app
    """
    app.command(name="matrix")(matrix_command)
    app.command(name="cache-key")(cache_key_command)
