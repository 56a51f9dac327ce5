"""
pytest configuration and shared fixtures.
"""

import numpy as np
import pytest

from brokkr import Matrix


@pytest.fixture
def rng():
    """Seeded random number generator for reproducible tests."""
    return np.random.default_rng(42)


@pytest.fixture
def random_matrix(rng):
    """Factory for small integer matrices of a given shape."""

    def build(rows: int, cols: int) -> Matrix:
        return Matrix(rng.integers(-9, 10, size=(rows, cols)).tolist())

    return build
