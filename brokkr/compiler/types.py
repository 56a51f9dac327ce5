"""Internal type menu card."""
from __future__ import annotations

import ctypes
from abc import ABC, abstractmethod

import numpy as np
from llvmlite.ir import types as ir_types
from llvmlite.ir.types import Type


class DataType(ABC):
    """Generic data-type class."""

    @property
    @abstractmethod
    def llvm(self) -> Type:
        """Get corresponding LLVM type.

        Returns:
            Type: LLVMLite IR type.
        """

    @property
    @abstractmethod
    def numpy(self) -> type[np.generic]:
        """Get corresponding NumPy type.

        Returns:
            np.dtype: NumPy data-type.
        """

    @property
    @abstractmethod
    def ctypes(self) -> type:
        """Get corresponding ctypes scalar type."""

    @property
    @abstractmethod
    def python(self) -> type:
        """Python scalar type elements come back as."""

    @property
    def is_float(self) -> bool:
        return isinstance(self.llvm, (ir_types.FloatType, ir_types.DoubleType))

    @property
    def name(self) -> str:
        return type(self).__name__

    def __eq__(self, other) -> bool:
        return type(self) is type(other)

    def __hash__(self) -> int:
        return hash(type(self))

    def __repr__(self) -> str:
        return f"{self.name}()"


class Float32(DataType):
    llvm = ir_types.FloatType()
    numpy = np.float32
    ctypes = ctypes.c_float
    python = float


class Float64(DataType):
    llvm = ir_types.DoubleType()
    numpy = np.float64
    ctypes = ctypes.c_double
    python = float


class Int32(DataType):
    llvm = ir_types.IntType(32)
    numpy = np.int32
    ctypes = ctypes.c_int32
    python = int


class Int64(DataType):
    llvm = ir_types.IntType(64)
    numpy = np.int64
    ctypes = ctypes.c_int64
    python = int
