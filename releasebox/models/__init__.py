"""Shared model base classes."""

from .base import ReleaseboxBaseModel
from .results import BaseResult


__all__ = ["ReleaseboxBaseModel", "BaseResult"]
