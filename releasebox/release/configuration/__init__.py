"""Matrix configuration for release builds."""

from .matrix_expander import MatrixExpander, create_matrix_expander


__all__ = ["MatrixExpander", "create_matrix_expander"]
