"""Cache key models."""

from pathlib import Path

from pydantic import Field, model_validator

from releasebox.models.base import FrozenModel


class CacheKey(FrozenModel):
    """Exact cache key plus ordered fallback prefixes.

    Every fallback is a strict prefix of ``primary``; fallbacks are ordered
    from most to least specific.
    """

    primary: str = Field(min_length=1)
    fallbacks: tuple[str, ...] = ()

    @model_validator(mode="after")
    def validate_fallbacks(self) -> "CacheKey":
        previous = self.primary
        for fallback in self.fallbacks:
            if not (previous.startswith(fallback) and len(fallback) < len(previous)):
                raise ValueError(
                    f"Fallback '{fallback}' is not a strict prefix of '{previous}'"
                )
            previous = fallback
        return self

    def candidates(self) -> tuple[str, ...]:
        """Lookup order: the exact key, then each fallback."""
        return (self.primary, *self.fallbacks)


class CacheRestoreResult(FrozenModel):
    """Outcome of a cache restore attempt."""

    requested_key: str
    matched_key: str | None = None
    exact: bool = False
    restored_path: Path | None = None

    @property
    def hit(self) -> bool:
        return self.matched_key is not None
