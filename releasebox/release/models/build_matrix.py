"""Build matrix models for release builds."""

from enum import Enum
from typing import Any

from pydantic import Field, model_validator

from releasebox.models.base import FrozenModel


class OperatingSystem(str, Enum):
    """Target operating system of a matrix entry."""

    LINUX = "linux"
    MACOS = "macos"
    WINDOWS = "windows"

    @property
    def binary_extension(self) -> str:
        """Executable file extension for this OS."""
        return ".exe" if self is OperatingSystem.WINDOWS else ""

    @property
    def runner_name(self) -> str:
        """Display name used as the leading cache key component."""
        return {
            OperatingSystem.LINUX: "Linux",
            OperatingSystem.MACOS: "macOS",
            OperatingSystem.WINDOWS: "Windows",
        }[self]


class BuildMatrixEntry(FrozenModel):
    """One (os, target triple) combination to build and publish.

    ``binary_extension`` may be omitted, in which case it is derived from
    ``os``. An explicitly given value is kept as-is so the matrix expander
    can reject inconsistent tables.
    """

    os: OperatingSystem
    target_triple: str = Field(min_length=1)
    artifact_suffix: str = Field(min_length=1)
    binary_extension: str = ""

    @model_validator(mode="before")
    @classmethod
    def derive_binary_extension(cls, data: Any) -> Any:
        if isinstance(data, dict) and data.get("binary_extension") is None:
            data = dict(data)
            data.pop("binary_extension", None)
            os_value = data.get("os")
            try:
                data["binary_extension"] = OperatingSystem(os_value).binary_extension
            except ValueError:
                # Let field validation report the bad os value
                pass
        return data

    @property
    def identity(self) -> dict[str, str]:
        """Context identifying this entry in logs and errors."""
        return {
            "os": self.os.value,
            "target": self.target_triple,
            "suffix": self.artifact_suffix,
        }


DEFAULT_BUILD_MATRIX: tuple[BuildMatrixEntry, ...] = (
    BuildMatrixEntry(
        os=OperatingSystem.LINUX,
        target_triple="x86_64-unknown-linux-gnu",
        artifact_suffix="linux-amd64",
        binary_extension="",
    ),
    BuildMatrixEntry(
        os=OperatingSystem.MACOS,
        target_triple="x86_64-apple-darwin",
        artifact_suffix="macos-amd64",
        binary_extension="",
    ),
    BuildMatrixEntry(
        os=OperatingSystem.MACOS,
        target_triple="aarch64-apple-darwin",
        artifact_suffix="macos-arm64",
        binary_extension="",
    ),
    BuildMatrixEntry(
        os=OperatingSystem.WINDOWS,
        target_triple="x86_64-pc-windows-msvc",
        artifact_suffix="windows-amd64",
        binary_extension=".exe",
    ),
)
