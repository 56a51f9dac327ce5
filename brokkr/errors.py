"""Exception menu card.

Every error here marks a programming mistake on the caller's side: a shape
that does not fit, an index out of range, a backend that does not exist.
Nothing in brokkr catches them.
"""
from __future__ import annotations

from typing import Optional


class BrokkrError(Exception):
    """Base exception for everything brokkr raises."""


class DimensionError(BrokkrError, ValueError):
    """Matrix shapes do not fit the requested operation.

    Attributes:
        operation: Name of the operation that was refused.
        left: Shape of the left operand, if there is one.
        right: Shape of the right operand, if there is one.
    """

    def __init__(
        self,
        message: str,
        operation: Optional[str] = None,
        left: Optional[tuple[int, ...]] = None,
        right: Optional[tuple[int, ...]] = None,
    ) -> None:
        super().__init__(message)
        self.operation = operation
        self.left = left
        self.right = right


class RaggedRowsError(DimensionError):
    """Rows handed to a matrix do not share one length.

    Attributes:
        row: Index of the first row with the wrong length.
        expected: Length of the first row.
        actual: Length of the offending row.
    """

    def __init__(self, row: int, expected: int, actual: int) -> None:
        super().__init__(
            f"row {row} has {actual} elements, expected {expected}",
            operation="from_rows",
        )
        self.row = row
        self.expected = expected
        self.actual = actual


class MatrixIndexError(BrokkrError, IndexError):
    """A row or element index lies outside the matrix."""

    def __init__(self, index, shape: tuple[int, int]) -> None:
        super().__init__(f"index {index} out of range for matrix of shape {shape}")
        self.index = index
        self.shape = shape


class BackendError(BrokkrError, ValueError):
    """Unknown arithmetic backend, or a data-type the backend cannot handle."""


class ConfigError(BrokkrError, ValueError):
    """An environment setting holds a value brokkr does not understand."""
