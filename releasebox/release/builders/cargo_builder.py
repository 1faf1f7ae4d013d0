"""Builder adapter that compiles binaries with cargo."""

import logging
import os
import shlex
import subprocess
from collections.abc import Collection
from pathlib import Path

from releasebox.core.errors import BuildError
from releasebox.release.protocols import BuilderProtocol
from releasebox.utils.error_utils import create_process_error
from releasebox.utils.stream_process import LoggerOutputMiddleware, run_command


logger = logging.getLogger(__name__)

# cargo writes these built-in profiles to differently named directories
_PROFILE_DIRS = {"dev": "debug", "test": "debug", "bench": "release"}


def profile_output_dir(project_dir: Path, target_triple: str, profile_name: str) -> Path:
    """Directory cargo writes ``--profile`` output to for an explicit target."""
    return (
        project_dir
        / "target"
        / target_triple
        / _PROFILE_DIRS.get(profile_name, profile_name)
    )


class CargoBuilder:
    """Compile every binary of a cargo project for one target triple."""

    def __init__(
        self,
        project_dir: Path,
        cargo_executable: str = "cargo",
        extra_args: list[str] | None = None,
    ) -> None:
        """Initialize cargo builder.

        Args:
            project_dir: Directory containing Cargo.toml
            cargo_executable: cargo command to invoke
            extra_args: Extra arguments appended to ``cargo build``
        """
        self.project_dir = project_dir
        self.cargo_executable = cargo_executable
        self.extra_args = list(extra_args or [])
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

    def check_available(self) -> bool:
        """Check if cargo is available on the system."""
        try:
            result = subprocess.run(
                [self.cargo_executable, "--version"],
                check=True,
                capture_output=True,
                text=True,
            )
            self.logger.debug("cargo is available: %s", result.stdout.strip())
            return True
        except FileNotFoundError:
            self.logger.warning("cargo executable not found in PATH")
            return False
        except subprocess.CalledProcessError as e:
            self.logger.warning("cargo --version failed: %s", e.stderr or e)
            return False

    def build_command(self, target_triple: str, profile_name: str) -> list[str]:
        return [
            self.cargo_executable,
            "build",
            "--profile",
            profile_name,
            "--bins",
            "--target",
            target_triple,
            *self.extra_args,
        ]

    def build(
        self,
        target_triple: str,
        profile_name: str,
        binary_names: Collection[str],
        binary_extension: str = "",
    ) -> Path:
        """Run ``cargo build`` and verify the expected binaries exist.

        Returns:
            Path: ``target/<triple>/<profile>`` under the project directory

        Raises:
            BuildError: If cargo fails or an expected binary was not produced
        """
        cmd = self.build_command(target_triple, profile_name)
        cmd_str = " ".join(shlex.quote(arg) for arg in cmd)
        self.logger.info("Building %s: %s", target_triple, cmd_str)

        env = dict(os.environ)
        env.setdefault("CARGO_TERM_COLOR", "never")

        try:
            return_code, _stdout, stderr = run_command(
                cmd,
                middleware=LoggerOutputMiddleware(
                    self.logger, stderr_prefix=f"[{target_triple}] "
                ),
                cwd=self.project_dir,
                env=env,
            )
        except FileNotFoundError as e:
            raise create_process_error(
                BuildError, f"cargo executable not found: {e}", cmd_str
            ) from e
        except (OSError, subprocess.SubprocessError) as e:
            raise create_process_error(
                BuildError, f"cargo could not be started: {e}", cmd_str
            ) from e

        if return_code != 0:
            tail = "\n".join(stderr[-20:])
            self.logger.error("cargo exited with %d for %s", return_code, target_triple)
            raise create_process_error(
                BuildError,
                f"cargo build failed for {target_triple} (exit {return_code})",
                cmd_str,
                return_code,
                {"stderr_tail": tail} if tail else None,
            )

        output_dir = profile_output_dir(self.project_dir, target_triple, profile_name)
        missing = [
            name
            for name in binary_names
            if not (output_dir / f"{name}{binary_extension}").is_file()
        ]
        if missing:
            raise BuildError(
                f"Build did not produce expected binaries: {', '.join(missing)}",
                {"target": target_triple, "output_dir": str(output_dir)},
            )

        self.logger.info("Build for %s finished: %s", target_triple, output_dir)
        return output_dir


def create_cargo_builder(
    project_dir: Path, extra_args: list[str] | None = None
) -> BuilderProtocol:
    """Create cargo builder for ``project_dir``."""
    return CargoBuilder(project_dir, extra_args=extra_args)
