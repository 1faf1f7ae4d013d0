"""Core test fixtures for the releasebox project."""

import os
import subprocess
import sys
from collections.abc import Callable, Collection, Generator
from pathlib import Path
from unittest.mock import Mock

import pytest
from typer.testing import CliRunner

from releasebox.config.models import OrchestratorSettings, ReleaseConfig
from releasebox.protocols import FileAdapterProtocol
from releasebox.release.models import BuildMatrixEntry, OperatingSystem


REPO_ROOT = Path(__file__).resolve().parent.parent


# ---- Base Fixtures ----


@pytest.fixture
def cli_runner() -> CliRunner:
    """Return a Typer CLI test runner."""
    return CliRunner()


@pytest.fixture
def mock_file_adapter() -> Mock:
    """Create a mock file adapter for testing."""
    return Mock(spec=FileAdapterProtocol)


# ---- Test Isolation Fixtures ----


@pytest.fixture(autouse=True)
def isolated_environment(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> Generator[Path, None, None]:
    """Keep tests away from the user's config files and RELEASEBOX_ variables."""
    for key in list(os.environ):
        if key.startswith("RELEASEBOX_"):
            monkeypatch.delenv(key)
    config_home = tmp_path / "xdg-config"
    monkeypatch.setenv("XDG_CONFIG_HOME", str(config_home))
    monkeypatch.setenv("XDG_CACHE_HOME", str(tmp_path / "xdg-cache"))
    workdir = tmp_path / "cwd"
    workdir.mkdir()
    monkeypatch.chdir(workdir)
    yield workdir


@pytest.fixture
def fresh_python(
    isolated_environment: Path,
) -> Callable[..., subprocess.CompletedProcess[str]]:
    """Run python code in a new interpreter, before any logging is configured."""

    def _run(*args: str) -> subprocess.CompletedProcess[str]:
        env = {**os.environ, "PYTHONPATH": str(REPO_ROOT), "COLUMNS": "200"}
        return subprocess.run(
            [sys.executable, *args],
            cwd=isolated_environment,
            env=env,
            capture_output=True,
            text=True,
            timeout=60,
        )

    return _run


# ---- Release Fixtures ----


@pytest.fixture
def release_config() -> ReleaseConfig:
    """Release configuration with the default serval binaries."""
    return ReleaseConfig(release_tag="v1.2.3")


@pytest.fixture
def linux_entry() -> BuildMatrixEntry:
    return BuildMatrixEntry(
        os=OperatingSystem.LINUX,
        target_triple="x86_64-unknown-linux-gnu",
        artifact_suffix="linux-amd64",
        binary_extension="",
    )


@pytest.fixture
def windows_entry() -> BuildMatrixEntry:
    return BuildMatrixEntry(
        os=OperatingSystem.WINDOWS,
        target_triple="x86_64-pc-windows-msvc",
        artifact_suffix="windows-amd64",
        binary_extension=".exe",
    )


@pytest.fixture
def project_dir(tmp_path: Path) -> Path:
    """A project directory with a single Cargo.lock."""
    project = tmp_path / "project"
    project.mkdir()
    (project / "Cargo.lock").write_text("# lock\n[[package]]\nname = \"serval\"\n")
    return project


@pytest.fixture
def orchestrator_settings(project_dir: Path) -> OrchestratorSettings:
    return OrchestratorSettings(project_dir=project_dir)


@pytest.fixture
def write_binaries() -> Callable[[Path, Collection[str], str], Path]:
    """Return a helper that creates fake binaries in a build output directory."""

    def _write(output_dir: Path, names: Collection[str], extension: str = "") -> Path:
        output_dir.mkdir(parents=True, exist_ok=True)
        for name in names:
            (output_dir / f"{name}{extension}").write_bytes(f"binary:{name}".encode())
        return output_dir

    return _write
