"""Tests for the cargo builder adapter."""

import subprocess
from unittest.mock import patch

import pytest

from releasebox.core.errors import BuildError
from releasebox.release.builders import CargoBuilder, create_cargo_builder, profile_output_dir
from releasebox.release.protocols import BuilderProtocol


BINARIES = ("serval", "serval-check", "serval-xmp-extract")
TARGET = "x86_64-unknown-linux-gnu"


class TestProfileOutputDir:
    """Test cargo profile directory mapping."""

    @pytest.mark.parametrize(
        "profile, directory",
        [("release-lto", "release-lto"), ("release", "release"), ("dev", "debug"), ("bench", "release")],
    )
    def test_mapping(self, tmp_path, profile, directory):
        assert profile_output_dir(tmp_path, TARGET, profile) == tmp_path / "target" / TARGET / directory


class TestCargoBuilder:
    """Test CargoBuilder with a patched process runner."""

    def test_implements_protocol(self, tmp_path):
        assert isinstance(create_cargo_builder(tmp_path), BuilderProtocol)

    def test_build_command(self, tmp_path):
        builder = CargoBuilder(tmp_path, extra_args=["--locked"])
        assert builder.build_command(TARGET, "release-lto") == [
            "cargo",
            "build",
            "--profile",
            "release-lto",
            "--bins",
            "--target",
            TARGET,
            "--locked",
        ]

    def test_successful_build(self, tmp_path, write_binaries):
        builder = CargoBuilder(tmp_path)
        output_dir = tmp_path / "target" / TARGET / "release-lto"
        write_binaries(output_dir, BINARIES, "")

        with patch(
            "releasebox.release.builders.cargo_builder.run_command",
            return_value=(0, [], []),
        ) as mock_run:
            result = builder.build(TARGET, "release-lto", BINARIES)

        assert result == output_dir
        args, kwargs = mock_run.call_args
        assert args[0][:2] == ["cargo", "build"]
        assert kwargs["cwd"] == tmp_path
        assert kwargs["env"]["CARGO_TERM_COLOR"] == "never"

    def test_nonzero_exit(self, tmp_path):
        builder = CargoBuilder(tmp_path)

        with (
            patch(
                "releasebox.release.builders.cargo_builder.run_command",
                return_value=(101, [], ["error[E0425]: cannot find value"]),
            ),
            pytest.raises(BuildError, match="exit 101") as exc_info,
        ):
            builder.build(TARGET, "release-lto", BINARIES)

        assert exc_info.value.context["return_code"] == 101
        assert "E0425" in exc_info.value.context["stderr_tail"]

    def test_missing_expected_binary(self, tmp_path, write_binaries):
        builder = CargoBuilder(tmp_path)
        write_binaries(tmp_path / "target" / TARGET / "release-lto", ("serval",), ".exe")

        with (
            patch(
                "releasebox.release.builders.cargo_builder.run_command",
                return_value=(0, [], []),
            ),
            pytest.raises(BuildError, match="serval-check.*serval-xmp-extract"),
        ):
            builder.build(TARGET, "release-lto", BINARIES, ".exe")

    def test_cargo_not_installed(self, tmp_path):
        builder = CargoBuilder(tmp_path, cargo_executable="cargo-does-not-exist")

        with (
            patch(
                "releasebox.release.builders.cargo_builder.run_command",
                side_effect=FileNotFoundError("cargo-does-not-exist"),
            ),
            pytest.raises(BuildError, match="not found"),
        ):
            builder.build(TARGET, "release-lto", BINARIES)

    def test_check_available(self, tmp_path):
        builder = CargoBuilder(tmp_path)
        completed = subprocess.CompletedProcess(["cargo"], 0, stdout="cargo 1.80.0\n")
        with patch("subprocess.run", return_value=completed):
            assert builder.check_available() is True

    def test_check_unavailable(self, tmp_path):
        builder = CargoBuilder(tmp_path)
        with patch("subprocess.run", side_effect=FileNotFoundError()):
            assert builder.check_available() is False
