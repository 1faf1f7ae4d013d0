"""Release configuration model."""

import re

from pydantic import Field, field_validator

from releasebox.models.base import FrozenModel


DEFAULT_RELEASE_TAG = "v0.0.0-snapshot"

# The tag becomes part of file and directory names
_TAG_FORBIDDEN = re.compile(r"[\s/\\]")


class ReleaseConfig(FrozenModel):
    """Named configuration for a single release run.

    Immutable for the duration of a run and threaded explicitly through
    every component call.
    """

    release_tag: str = Field(
        default=DEFAULT_RELEASE_TAG,
        description="Release tag embedded in every archive name (e.g. 'v1.0.0')",
    )
    main_binary_name: str = Field(
        default="serval",
        description="Primary binary; anchors the archive basename",
    )
    check_binary_name: str = Field(default="serval-check")
    xmp_extract_binary_name: str = Field(default="serval-xmp-extract")
    profile_name: str = Field(
        default="release-lto",
        description="Build optimization profile passed to the builder",
    )

    @field_validator("release_tag")
    @classmethod
    def validate_release_tag(cls, v: str) -> str:
        """Reject tags that cannot be embedded in a file name."""
        if not v:
            raise ValueError("Release tag must not be empty")
        if _TAG_FORBIDDEN.search(v):
            raise ValueError(
                f"Release tag '{v}' must not contain whitespace or path separators"
            )
        return v

    @field_validator(
        "main_binary_name", "check_binary_name", "xmp_extract_binary_name", "profile_name"
    )
    @classmethod
    def validate_name(cls, v: str) -> str:
        if not v or _TAG_FORBIDDEN.search(v):
            raise ValueError(f"Invalid name '{v}'")
        return v

    @property
    def binary_names(self) -> tuple[str, ...]:
        """Binaries bundled into every archive, main binary first."""
        return (
            self.main_binary_name,
            self.check_binary_name,
            self.xmp_extract_binary_name,
        )
