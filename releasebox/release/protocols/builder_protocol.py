"""Protocol for the compile step."""

from collections.abc import Collection
from pathlib import Path
from typing import Protocol, runtime_checkable


@runtime_checkable
class BuilderProtocol(Protocol):
    """Compiles a fixed set of named binaries for one target."""

    def build(
        self,
        target_triple: str,
        profile_name: str,
        binary_names: Collection[str],
        binary_extension: str = "",
    ) -> Path:
        """Build ``binary_names`` for ``target_triple`` under ``profile_name``.

        On success every name exists as ``{name}{binary_extension}`` directly
        under the returned output directory. No promise is made about which
        binaries exist after a failure.

        Returns:
            Path: Output directory containing the binaries

        Raises:
            BuildError: If compilation fails or an expected binary is missing
        """
        ...

    def check_available(self) -> bool:
        """Check if the build toolchain is available."""
        ...
