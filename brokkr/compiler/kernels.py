"""IR builders for the element-wise add and matrix product kernels."""
from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator

from llvmlite import ir

from brokkr.compiler import ops
from brokkr.compiler.types import DataType

INDEX = ir.IntType(64)


@contextmanager
def for_range(builder: ir.IRBuilder, count: ir.Value, name: str) -> Iterator[ir.Value]:
    """Emit ``for name in range(count)`` and position the builder in its body.

    On exit the builder sits at the end of the block after the loop.
    """
    preheader = builder.block
    header = builder.append_basic_block(name=f"{name}.header")
    body = builder.append_basic_block(name=f"{name}.body")
    after = builder.append_basic_block(name=f"{name}.after")

    builder.branch(header)

    builder.position_at_end(header)
    index = builder.phi(INDEX, name=name)
    index.add_incoming(ir.Constant(INDEX, 0), preheader)
    builder.cbranch(builder.icmp_signed("<", index, count), body, after)

    builder.position_at_end(body)
    yield index

    latch = builder.block
    incremented = builder.add(index, ir.Constant(INDEX, 1), name=f"{name}.next")
    builder.branch(header)
    index.add_incoming(incremented, latch)

    builder.position_at_end(after)


def element(builder: ir.IRBuilder, base: ir.Value, offset: ir.Value, dtype: DataType):
    return builder.gep(base, [offset], source_etype=dtype.llvm)


def load(builder: ir.IRBuilder, base: ir.Value, offset: ir.Value, dtype: DataType):
    return builder.load(element(builder, base, offset, dtype), typ=dtype.llvm)


def kernel_name(op: str, dtype: DataType) -> str:
    return f"{op}_{dtype.name.lower()}"


def build_add(module: ir.Module, dtype: DataType) -> ir.Function:
    """``add(target, a, b, length)``: ``target[i] = a[i] + b[i]``."""
    pointer = ir.PointerType(dtype.llvm)
    fn = ir.Function(
        module,
        ir.FunctionType(ir.VoidType(), [pointer, pointer, pointer, INDEX]),
        name=kernel_name("add", dtype),
    )
    target, a, b, length = fn.args

    builder = ir.IRBuilder(fn.append_basic_block(name="entry"))
    add = ops.lookup("+", dtype.is_float)

    with for_range(builder, length, "i") as i:
        total = add(builder, load(builder, a, i, dtype), load(builder, b, i, dtype))
        builder.store(total, element(builder, target, i, dtype))

    builder.ret_void()

    return fn


def build_matmul(module: ir.Module, dtype: DataType) -> ir.Function:
    """``matmul(target, a, b, m, n, p)`` for row-major ``(m, n) @ (n, p)``."""
    pointer = ir.PointerType(dtype.llvm)
    fn = ir.Function(
        module,
        ir.FunctionType(
            ir.VoidType(), [pointer, pointer, pointer, INDEX, INDEX, INDEX]
        ),
        name=kernel_name("matmul", dtype),
    )
    target, a, b, m, n, p = fn.args

    builder = ir.IRBuilder(fn.append_basic_block(name="entry"))
    add = ops.lookup("+", dtype.is_float)
    mul = ops.lookup("*", dtype.is_float)

    accumulator = builder.alloca(dtype.llvm, name="accumulator")

    with for_range(builder, m, "i") as i:
        with for_range(builder, p, "j") as j:
            builder.store(ir.Constant(dtype.llvm, 0), accumulator)

            with for_range(builder, n, "k") as k:
                left = load(builder, a, builder.add(builder.mul(i, n), k), dtype)
                right = load(builder, b, builder.add(builder.mul(k, p), j), dtype)
                partial = builder.load(accumulator, typ=dtype.llvm)
                builder.store(add(builder, partial, mul(builder, left, right)), accumulator)

            builder.store(
                builder.load(accumulator, typ=dtype.llvm),
                element(builder, target, builder.add(builder.mul(i, p), j), dtype),
            )

    builder.ret_void()

    return fn


BUILDERS = {"add": build_add, "matmul": build_matmul}
