"""A module containing flat native buffers handed to compiled kernels."""
import ctypes
import math
from typing import Iterable

import numpy as np

from brokkr.compiler.types import DataType
from brokkr.errors import BackendError
from brokkr.log import get_logger

logger = get_logger(__name__)


class Buffer:
    """Contiguous row-major storage that compiled kernels read and write.

    Content is converted to ``dtype`` only where numpy calls the cast
    ``same_kind``; floats into an integer buffer are refused.
    """

    def __init__(self, content: Iterable, dtype: DataType) -> None:
        content = np.asarray(content)

        if content.size and not np.can_cast(content.dtype, dtype.numpy, casting="same_kind"):
            error = BackendError(f"cannot convert {content.dtype} elements to {dtype.name}")
            logger.debug("%s: %s", type(error).__name__, error)
            raise error

        self.dtype = dtype
        self.array: np.ndarray = np.ascontiguousarray(content, dtype=dtype.numpy)
        self.shape: tuple[int, ...] = self.array.shape

    @classmethod
    def empty(cls, shape: tuple[int, ...], dtype: DataType) -> "Buffer":
        return cls(np.zeros(shape, dtype=dtype.numpy), dtype)

    @property
    def size(self) -> int:
        return math.prod(self.shape)

    @property
    def pointer(self):
        return self.array.ctypes.data_as(ctypes.POINTER(self.dtype.ctypes))

    def to_numpy(self) -> np.ndarray:
        return self.array.copy()

    def __repr__(self) -> str:
        return f"Buffer<{self.shape}, {self.dtype.name}>"
