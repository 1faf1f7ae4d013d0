"""Base model for all Releasebox Pydantic models.

This module provides a base model class that enforces consistent serialization
behavior across all Releasebox models.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict


class ReleaseboxBaseModel(BaseModel):
    """Base model class for all Releasebox Pydantic models.

    Serialization helpers use JSON-compatible output so results can be
    written straight to summary files.
    """

    model_config = ConfigDict(
        # Strip whitespace from string fields
        str_strip_whitespace=True,
        # Validate assignment after model creation
        validate_assignment=True,
    )

    def to_dict(self) -> dict[str, Any]:
        """Convert model to dictionary with consistent serialization parameters.

        Returns:
            Dictionary representation using JSON-compatible serialization
        """
        return self.model_dump(by_alias=True, exclude_unset=True, mode="json")

    def to_dict_full(self) -> dict[str, Any]:
        """Convert model to dictionary including all fields (even unset ones).

        Returns:
            Dictionary representation including all fields
        """
        return self.model_dump(by_alias=True, exclude_unset=False, mode="json")


class FrozenModel(ReleaseboxBaseModel):
    """Immutable variant used for configuration records."""

    model_config = ConfigDict(
        str_strip_whitespace=True,
        frozen=True,
    )
