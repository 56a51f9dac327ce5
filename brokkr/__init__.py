from . import compiler, config, errors
from .errors import BrokkrError, DimensionError, MatrixIndexError, RaggedRowsError
from .matrix import Matrix

__all__ = [
    "compiler",
    "config",
    "errors",
    "Matrix",
    "BrokkrError",
    "DimensionError",
    "MatrixIndexError",
    "RaggedRowsError",
]
