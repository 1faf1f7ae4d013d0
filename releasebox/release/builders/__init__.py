"""Builder implementations."""

from .cargo_builder import CargoBuilder, create_cargo_builder, profile_output_dir


__all__ = ["CargoBuilder", "create_cargo_builder", "profile_output_dir"]
