"""Build command: run the release pipeline for the build matrix."""

import logging
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from releasebox.adapters import create_file_adapter
from releasebox.cli.app import AppContext
from releasebox.cli.decorators import handle_errors
from releasebox.config.models import FailurePolicy
from releasebox.core.errors import BuildError
from releasebox.release.builders import create_cargo_builder
from releasebox.release.cache import create_build_cache
from releasebox.release.configuration import create_matrix_expander
from releasebox.release.models import EntryStatus, ReleaseResult
from releasebox.release.publishers import create_directory_publisher
from releasebox.release.services import create_release_orchestrator


logger = logging.getLogger(__name__)

_STATUS_STYLES = {
    EntryStatus.PUBLISHED: "green",
    EntryStatus.FAILED: "red",
    EntryStatus.CANCELLED: "yellow",
}


def print_release_summary(result: ReleaseResult, console: Console | None = None) -> None:
    """Render one row per matrix entry."""
    console = console or Console()
    table = Table(title=f"Release {result.release_tag} ({result.failure_policy.value})")
    table.add_column("Suffix", style="cyan")
    table.add_column("Target")
    table.add_column("Status")
    table.add_column("Cache")
    table.add_column("Archive / Error")

    for entry_result in result.entries:
        style = _STATUS_STYLES[entry_result.status]
        if entry_result.cache_hit is None:
            cache = "miss"
        elif entry_result.cache_key and entry_result.cache_hit == entry_result.cache_key.primary:
            cache = "hit"
        else:
            cache = "partial"

        if entry_result.archive is not None:
            detail = entry_result.archive.filename
        else:
            detail = entry_result.errors[0] if entry_result.errors else ""

        table.add_row(
            entry_result.entry.artifact_suffix,
            entry_result.entry.target_triple,
            f"[{style}]{entry_result.status.value}[/{style}]",
            cache,
            escape(detail),
        )

    console.print(table)
    console.print(
        f"{len(result.published)} published, {len(result.failed)} failed, "
        f"{len(result.cancelled)} cancelled"
    )


@handle_errors
def build_command(
    ctx: typer.Context,
    release_tag: Annotated[
        str | None,
        typer.Argument(help="Release tag embedded in archive names"),
    ] = None,
    policy: Annotated[
        FailurePolicy | None,
        typer.Option("--policy", help="Failure policy for sibling entries"),
    ] = None,
    jobs: Annotated[
        int | None,
        typer.Option("-j", "--jobs", min=1, help="Number of parallel workers"),
    ] = None,
    only: Annotated[
        list[str] | None,
        typer.Option("--only", help="Only build these artifact suffixes"),
    ] = None,
    project_dir: Annotated[
        Path | None,
        typer.Option("--project-dir", help="Directory containing Cargo.toml"),
    ] = None,
    no_cache: Annotated[
        bool, typer.Option("--no-cache", help="Skip build cache restore/save")
    ] = False,
    summary_json: Annotated[
        Path | None,
        typer.Option("--summary-json", help="Write the release summary as JSON"),
    ] = None,
) -> None:
    """Build, archive and publish every matrix entry."""
    app_ctx: AppContext = ctx.obj
    user_config = app_ctx.user_config

    config = user_config.release_config(release_tag)
    settings = user_config.settings(
        failure_policy=policy,
        max_workers=jobs,
        project_dir=project_dir.resolve() if project_dir else None,
        cache_enabled=False if no_cache else None,
    )
    entries = create_matrix_expander().select(user_config.matrix(), only)

    builder = create_cargo_builder(settings.project_dir)
    if not builder.check_available():
        raise BuildError("cargo is not available", {"project_dir": str(settings.project_dir)})

    publisher = create_directory_publisher(settings.publish_root)
    build_cache = create_build_cache(settings.cache_dir) if settings.cache_enabled else None

    orchestrator = create_release_orchestrator(builder, publisher, settings, build_cache)
    try:
        result = orchestrator.run(config, entries)
    finally:
        if build_cache is not None:
            build_cache.close()

    print_release_summary(result)

    if summary_json is not None:
        create_file_adapter().write_json(summary_json, result.to_dict_full())
        logger.info("Release summary written to %s", summary_json)

    if not result.success:
        raise typer.Exit(1)


def register_commands(app: typer.Typer) -> None:
    """Register build command with the main app.

    Args:
        app: The main Typer app
    """
    app.command(name="build")(build_command)
