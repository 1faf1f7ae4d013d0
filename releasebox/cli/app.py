"""Main CLI application for Releasebox."""

import logging
import sys
from importlib.metadata import distribution
from typing import Annotated

import typer

from releasebox.cli.decorators.error_handling import print_stack_trace_if_verbose
from releasebox.config.user_config import UserConfig, create_user_config
from releasebox.core.errors import ConfigError
from releasebox.core.logging import setup_logging


__all__ = ["app", "main", "__version__", "setup_logging"]


__version__ = distribution("releasebox").version

logger = logging.getLogger(__name__)


class AppContext:
    """Application context for storing shared state."""

    def __init__(
        self,
        verbose: int = 0,
        log_file: str | None = None,
        config_file: str | None = None,
    ):
        """Initialize AppContext.

        Args:
            verbose: Verbosity level
            log_file: Path to log file
            config_file: Path to configuration file
        """
        self.verbose = verbose
        self.log_file = log_file
        self.config_file = config_file
        self._user_config: UserConfig | None = None

    @property
    def user_config(self) -> UserConfig:
        """Release file configuration, loaded on first use.

        Raises:
            ConfigError: If the config file is missing or invalid
        """
        if self._user_config is None:
            self._user_config = create_user_config(cli_config_path=self.config_file)
        return self._user_config

    def configured_log_level(self) -> str:
        """Log level from the config file/environment, WARNING if unreadable."""
        try:
            return self.user_config.settings().log_level
        except ConfigError:
            # The command reports the config error itself
            return "WARNING"


app = typer.Typer(
    name="releasebox",
    help=f"""Releasebox v{__version__}

Builds a cargo project for every entry of a build matrix in parallel and
publishes one archive per target:

  Matrix → Cache → Build → Stage → Archive → Publish

Common workflows:
  • Release a tag:       releasebox build v1.2.3
  • Windows only:        releasebox build v1.2.3 --only windows-amd64
  • Show the matrix:     releasebox matrix
  • Inspect cache keys:  releasebox cache-key linux-amd64""",
    no_args_is_help=True,
    context_settings={"help_option_names": ["-h", "--help"]},
)


@app.callback(invoke_without_command=True)
def main_callback(
    ctx: typer.Context,
    verbose: Annotated[
        int,
        typer.Option(
            "-v",
            "--verbose",
            count=True,
            help="Increase verbosity (-v=INFO, -vv=DEBUG)",
        ),
    ] = 0,
    debug: Annotated[
        bool,
        typer.Option("--debug", help="Enable debug logging (equivalent to -vv)"),
    ] = False,
    log_file: Annotated[
        str | None, typer.Option("--log-file", help="Log to file (JSON lines)")
    ] = None,
    config_file: Annotated[
        str | None,
        typer.Option("-c", "--config", help="Path to release configuration file"),
    ] = None,
    version: Annotated[
        bool, typer.Option("--version", help="Show version and exit")
    ] = False,
) -> None:
    """Releasebox multi-target release tool."""
    if version:
        print(f"Releasebox v{__version__}")
        raise typer.Exit()

    if ctx.invoked_subcommand is None:
        print(ctx.get_help())
        raise typer.Exit()

    app_context = AppContext(verbose=verbose, log_file=log_file, config_file=config_file)
    ctx.obj = app_context

    log_level: int | str = logging.WARNING
    if debug:
        log_level = logging.DEBUG
    elif verbose == 1:
        log_level = logging.INFO
    elif verbose >= 2:
        log_level = logging.DEBUG
    else:
        log_level = app_context.configured_log_level()

    setup_logging(level=log_level, log_file=log_file)


def main() -> int:
    """Main CLI entry point."""
    try:
        from releasebox.cli.commands import register_all_commands

        register_all_commands(app)

        app()
        return 0

    except SystemExit as e:
        return e.code if isinstance(e.code, int) else 0

    except Exception as e:
        logger.exception("Unexpected error: %s", e)
        print_stack_trace_if_verbose()
        return 1


if __name__ == "__main__":
    sys.exit(main())
