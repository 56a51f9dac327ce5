"""The compiler."""
from __future__ import annotations

import ctypes
import threading
from typing import Callable

import llvmlite.binding as llvm
import numpy as np
from llvmlite import ir

from brokkr.compiler import kernels
from brokkr.compiler.buffer import Buffer
from brokkr.compiler.types import DataType
from brokkr.config import settings
from brokkr.errors import BackendError
from brokkr.log import get_logger

logger = get_logger(__name__)

llvm.initialize_native_target()
llvm.initialize_native_asmprinter()

_target: llvm.Target = llvm.Target.from_default_triple()

target_machine: llvm.TargetMachine = _target.create_target_machine(
    opt=settings.llvm_opt_level
)
engine: llvm.ExecutionEngine = llvm.create_mcjit_compiler(
    llvm.parse_assembly(""), target_machine
)

_cache: dict[tuple[str, DataType], Callable[..., None]] = {}
_lock = threading.Lock()

# Number of trailing i64 arguments each kernel takes.
_ARITY = {"add": 1, "matmul": 3}


def compile_module(module: ir.Module) -> llvm.ModuleRef:
    llvm_module = llvm.parse_assembly(str(module))
    llvm_module.verify()

    engine.add_module(llvm_module)
    engine.finalize_object()
    engine.run_static_constructors()

    return llvm_module


def kernel(op: str, dtype: DataType):
    """Get the compiled ``op`` kernel for ``dtype``, compiling it on first use."""
    if op not in kernels.BUILDERS:
        raise BackendError(f"no compiled kernel for {op!r}")

    key = (op, dtype)

    with _lock:
        if key in _cache:
            logger.debug("kernel cache hit for %s", kernels.kernel_name(op, dtype))
            return _cache[key]

        name = kernels.kernel_name(op, dtype)
        logger.debug("compiling kernel %s", name)

        module = ir.Module(name=name)
        module.triple = target_machine.triple
        kernels.BUILDERS[op](module, dtype)
        compile_module(module)

        pointer = ctypes.POINTER(dtype.ctypes)
        c_func = ctypes.CFUNCTYPE(
            None, pointer, pointer, pointer, *[ctypes.c_int64] * _ARITY[op]
        )(engine.get_function_address(name))

        _cache[key] = c_func

        return c_func


def add(a: Buffer, b: Buffer) -> Buffer:
    """Element-wise sum of two equally shaped buffers."""
    result = Buffer.empty(a.shape, a.dtype)

    kernel("add", a.dtype)(result.pointer, a.pointer, b.pointer, a.size)

    return result


def matmul(a: Buffer, b: Buffer) -> Buffer:
    """Matrix product of an ``(m, n)`` and an ``(n, p)`` buffer."""
    (m, n), (_, p) = a.shape, b.shape
    result = Buffer.empty((m, p), a.dtype)

    kernel("matmul", a.dtype)(result.pointer, a.pointer, b.pointer, m, n, p)

    return result


def run(op: str, left: np.ndarray, right: np.ndarray, dtype: DataType) -> np.ndarray:
    """Run ``op`` on two arrays converted to ``dtype``, returning a fresh array."""
    a, b = Buffer(left, dtype), Buffer(right, dtype)

    if op == "add":
        return add(a, b).to_numpy()

    if op == "matmul":
        return matmul(a, b).to_numpy()

    raise BackendError(f"no compiled kernel for {op!r}")
