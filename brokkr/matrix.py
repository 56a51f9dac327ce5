"""A module for the dense, row-major matrix."""
from __future__ import annotations

import copy
from typing import Any, Callable, Generic, Iterable, Iterator, Optional, TypeVar, Union

import numpy as np

from brokkr.compiler import compiler
from brokkr.compiler.types import DataType, Float64, Int64
from brokkr.config import BACKENDS, settings
from brokkr.errors import BackendError, DimensionError, MatrixIndexError, RaggedRowsError
from brokkr.log import get_logger

logger = get_logger(__name__)

E = TypeVar("E")

DataTypeLike = Union[DataType, type[DataType]]

_DTYPES: dict[Callable, type[DataType]] = {float: Float64, int: Int64}


def _raise(error: Exception):
    logger.debug("%s: %s", type(error).__name__, error)
    raise error


def _resolve_dtype(dtype: DataTypeLike) -> DataType:
    dtype = dtype() if isinstance(dtype, type) else dtype

    if not isinstance(dtype, DataType):
        _raise(BackendError(f"not a brokkr data-type: {dtype!r}"))

    return dtype


class Matrix(Generic[E]):
    """The Matrix.

    A dense ``rows x cols`` grid of elements of any type supporting ``+=``,
    ``*`` and a zero-argument constructor that yields the additive identity
    (``int``, ``float``, ``Fraction``, ``Decimal`` and friends).

    Rows handed in through :meth:`from_rows` are adopted without copying;
    everything that builds a new matrix out of an existing one copies the
    elements it takes.
    """

    def __init__(
        self,
        content: Iterable[Iterable[E]] = (),
        element_type: Optional[Callable[[], E]] = None,
        validate: bool = True,
    ) -> None:
        data = content
        if not isinstance(data, list) or not all(isinstance(row, list) for row in data):
            data = [row if isinstance(row, list) else list(row) for row in content]

        if validate:
            for index, row in enumerate(data[1:], start=1):
                if len(row) != len(data[0]):
                    _raise(RaggedRowsError(index, len(data[0]), len(row)))

        self._data: list[list[E]] = data
        self.rows: int = len(data)
        self.cols: int = len(data[0]) if data else 0

        if element_type is None:
            element_type = type(data[0][0]) if self.rows and self.cols else int

        self.element_type: Callable[[], E] = element_type

    @classmethod
    def from_rows(
        cls,
        rows: Iterable[Iterable[E]],
        element_type: Optional[Callable[[], E]] = None,
        validate: bool = True,
    ) -> Matrix[E]:
        """Build a matrix out of a sequence of rows.

        Args:
            rows: Row-major content. Lists are adopted as-is, other iterables
                are turned into lists first.
            element_type: Factory for the element default value, inferred from
                the first element when omitted.
            validate: Check that every row is as long as the first one. With
                ``False`` the caller vouches for it.

        Raises:
            RaggedRowsError: If ``validate`` is set and the rows are ragged.
        """
        return cls(rows, element_type=element_type, validate=validate)

    @classmethod
    def new(cls, rows: int, cols: int, element_type: Callable[[], E] = int) -> Matrix[E]:
        if rows < 0 or cols < 0:
            _raise(DimensionError(f"negative dimensions ({rows}, {cols})", operation="new"))

        out = cls(
            [[element_type() for _ in range(cols)] for _ in range(rows)],
            element_type=element_type,
            validate=False,
        )
        out.cols = cols

        return out

    zeros = new

    @classmethod
    def identity(cls, n: int, element_type: Callable[[], E] = int) -> Matrix[E]:
        out = cls.new(n, n, element_type)

        for i in range(n):
            out._data[i][i] = element_type() + 1

        return out

    @classmethod
    def from_numpy(cls, array: np.ndarray) -> Matrix:
        if array.ndim != 2:
            _raise(
                DimensionError(
                    f"expected a 2-D array, got shape {array.shape}",
                    operation="from_numpy",
                    left=array.shape,
                )
            )

        element_type = type(array.dtype.type(0).item())
        out = cls(array.tolist(), element_type=element_type, validate=False)
        # tolist() drops the column count of arrays without rows.
        out.cols = array.shape[1]

        return out

    @property
    def shape(self) -> tuple[int, int]:
        return self.rows, self.cols

    @property
    def T(self) -> Matrix[E]:
        out = self.copy()
        out.transpose()

        return out

    def copy(self) -> Matrix[E]:
        out = type(self)(
            [[copy.copy(x) for x in row] for row in self._data],
            element_type=self.element_type,
            validate=False,
        )
        out.cols = self.cols

        return out

    def transpose(self) -> None:
        """Transpose in place, swapping ``rows`` and ``cols``."""
        logger.debug("transposing %s", self)

        self._data = [
            [copy.copy(self._data[j][i]) for j in range(self.rows)]
            for i in range(self.cols)
        ]
        self.rows, self.cols = self.cols, self.rows

    def slice(self, indices: Iterable[int]) -> Matrix[E]:
        """Copy the rows named by ``indices``, in that order.

        Indices may repeat or come out of order. The result takes its column
        count from the first selected row.

        Raises:
            MatrixIndexError: If an index is not a row of this matrix.
        """
        selected = []

        for i in indices:
            self._check_row(i)
            selected.append([copy.copy(x) for x in self._data[i]])

        return type(self).from_rows(selected, element_type=self.element_type, validate=False)

    def at(self, row: int, col: int) -> E:
        self._check_row(row, (row, col))
        self._check_col(col, (row, col))

        return self._data[row][col]

    def row(self, i: int) -> list[E]:
        self._check_row(i)

        return [copy.copy(x) for x in self._data[i]]

    def column(self, j: int) -> list[E]:
        self._check_col(j)

        return [copy.copy(row[j]) for row in self._data]

    def add(
        self,
        other: Matrix[E],
        inplace: bool = False,
        backend: Optional[str] = None,
        dtype: Optional[DataTypeLike] = None,
    ) -> Matrix:
        """Element-wise sum.

        Args:
            other: Matrix of the same shape.
            inplace: Accumulate into this matrix's own storage and return it.
            backend: ``"python"`` or ``"llvm"``. When omitted, ``settings.backend``
                decides, and only for matrices of Python floats.
            dtype: Element data-type for ``backend="llvm"``, taken from
                ``element_type`` (``int`` or ``float``) when omitted.

        Raises:
            DimensionError: If the shapes differ.
            BackendError: If the elements have no compiled data-type, or would
                not survive conversion to ``dtype`` (floats to integers).
        """
        if self.shape != other.shape:
            _raise(
                DimensionError(
                    f"cannot add {self.shape} and {other.shape}",
                    operation="add",
                    left=self.shape,
                    right=other.shape,
                )
            )

        logger.debug("adding %s and %s", self, other)

        compiled_dtype = self._compiled_dtype(other, backend, dtype)
        if compiled_dtype is not None:
            out = self._compiled("add", other, compiled_dtype)

            if inplace:
                for row, values in zip(self._data, out._data):
                    row[:] = values
                self.element_type = out.element_type
                return self

            return out

        out = self if inplace else self.copy()

        for i in range(self.rows):
            for j in range(self.cols):
                out._data[i][j] += other._data[i][j]

        return out

    def multiply(
        self,
        other: Matrix[E],
        backend: Optional[str] = None,
        dtype: Optional[DataTypeLike] = None,
    ) -> Matrix:
        """Matrix product, using the naive triple loop.

        Each entry starts from ``element_type()`` and accumulates the
        products of row ``i`` of ``self`` and column ``j`` of ``other``.
        ``backend`` and ``dtype`` behave as in :meth:`add`.

        Raises:
            DimensionError: If ``self.cols != other.rows``.
            BackendError: As in :meth:`add`.
        """
        if self.cols != other.rows:
            _raise(
                DimensionError(
                    f"cannot multiply {self.shape} by {other.shape}",
                    operation="multiply",
                    left=self.shape,
                    right=other.shape,
                )
            )

        logger.debug("multiplying %s by %s", self, other)

        compiled_dtype = self._compiled_dtype(other, backend, dtype)
        if compiled_dtype is not None:
            return self._compiled("matmul", other, compiled_dtype)

        out = type(self).new(self.rows, other.cols, self.element_type)

        for i in range(self.rows):
            for j in range(other.cols):
                entry = self.element_type()
                for k in range(self.cols):
                    entry += self._data[i][k] * other._data[k][j]
                out._data[i][j] = entry

        return out

    def into_rows(self) -> list[list[E]]:
        """Hand over the backing rows without copying, leaving a 0x0 matrix."""
        data = self._data
        self._data, self.rows, self.cols = [], 0, 0

        return data

    def to_list(self) -> list[list[E]]:
        return [[copy.copy(x) for x in row] for row in self._data]

    def to_numpy(self, dtype: Any = None) -> np.ndarray:
        if not self.rows:
            return np.empty((0, self.cols), dtype=dtype)

        return np.array(self._data, dtype=dtype).reshape(self.shape)

    def _check_row(self, i: int, index: Any = None) -> None:
        if not 0 <= i < self.rows:
            _raise(MatrixIndexError(i if index is None else index, self.shape))

    def _check_col(self, j: int, index: Any = None) -> None:
        if not 0 <= j < self.cols:
            _raise(MatrixIndexError(j if index is None else index, self.shape))

    def _all_floats(self) -> bool:
        return all(type(x) is float for row in self._data for x in row)

    def _compiled_dtype(
        self, other: Matrix, backend: Optional[str], dtype: Optional[DataTypeLike]
    ) -> Optional[DataType]:
        """Data-type to run the compiled kernels with, ``None`` for the python loops.

        The ``settings.backend`` default only applies to matrices holding
        nothing but Python floats, where the kernels compute the same values.
        """
        if backend is None:
            if settings.backend == "llvm" and self._all_floats() and other._all_floats():
                return Float64()

            return None

        if backend not in BACKENDS:
            _raise(BackendError(f"unknown backend {backend!r}, expected one of {BACKENDS}"))

        if backend == "python":
            return None

        if dtype is None:
            dtype = _DTYPES.get(self.element_type)

            if dtype is None:
                _raise(
                    BackendError(
                        f"no compiled data-type for elements of {self.element_type!r}"
                    )
                )

        return _resolve_dtype(dtype)

    def _compiled(self, op: str, other: Matrix, dtype: DataType) -> Matrix:
        result = compiler.run(op, self.to_numpy(), other.to_numpy(), dtype)

        out = type(self).from_numpy(result)
        out.element_type = dtype.python

        return out

    def __getitem__(self, index: tuple[int, int]) -> E:
        if not isinstance(index, tuple) or len(index) != 2:
            raise TypeError(f"matrix indices must be (row, col) pairs, not {index!r}")

        return self.at(*index)

    def __add__(self, other: Matrix[E]) -> Matrix[E]:
        if not isinstance(other, Matrix):
            return NotImplemented

        return self.add(other)

    def __iadd__(self, other: Matrix[E]) -> Matrix[E]:
        if not isinstance(other, Matrix):
            return NotImplemented

        return self.add(other, inplace=True)

    def __matmul__(self, other: Matrix[E]) -> Matrix[E]:
        if not isinstance(other, Matrix):
            return NotImplemented

        return self.multiply(other)

    __mul__ = __matmul__

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Matrix):
            return NotImplemented

        return self.shape == other.shape and self._data == other._data

    __hash__ = None

    def __len__(self) -> int:
        return self.rows

    def __iter__(self) -> Iterator[list[E]]:
        return (self.row(i) for i in range(self.rows))

    def __repr__(self) -> str:
        return f"Matrix<{self.shape}>"
