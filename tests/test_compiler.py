import logging
from fractions import Fraction

import pytest
from llvmlite import ir

import brokkr.matrix
from brokkr import Matrix
from brokkr.compiler import compiler, kernels
from brokkr.compiler.buffer import Buffer
from brokkr.compiler.types import Float32, Float64, Int32, Int64
from brokkr.config import Settings
from brokkr.errors import BackendError

DTYPES = [Float32, Float64, Int32, Int64]

a = Matrix([[1, 2, 3], [4, 5, 6]])
b = Matrix([[-1, 0, 2], [7, -3, 1]])
c = Matrix([[2, 1], [0, -1], [3, 4]])


@pytest.mark.parametrize("dtype", DTYPES)
def test_compiled_addition(dtype):
    result = a.add(b, backend="llvm", dtype=dtype)

    assert result.shape == a.shape, "Shape is loco."
    assert result == a + b, "Content is not the same."
    assert result.element_type is dtype.python


@pytest.mark.parametrize("dtype", DTYPES)
def test_compiled_product(dtype):
    result = a.multiply(c, backend="llvm", dtype=dtype)

    assert result.shape == (2, 2), "Shape is loco."
    assert result == a @ c, "Content is not the same."


def test_compiled_product_against_python(random_matrix):
    left, right = random_matrix(4, 6), random_matrix(6, 3)

    assert left.multiply(right, backend="llvm", dtype=Int64) == left @ right


def test_compiled_inplace_addition():
    m = a.copy()
    original = m

    m.add(b, inplace=True, backend="llvm", dtype=Int64)

    assert m is original
    assert m == a + b


def test_compiled_empty():
    assert Matrix().add(Matrix(), backend="llvm").shape == (0, 0)
    assert Matrix.new(2, 0).multiply(Matrix.new(0, 3), backend="llvm").to_list() == [
        [0.0, 0.0, 0.0],
        [0.0, 0.0, 0.0],
    ]


def test_compiled_dimension_mismatch():
    with pytest.raises(ValueError):
        a.multiply(a, backend="llvm")


def test_kernel_cache():
    assert compiler.kernel("add", Float64()) is compiler.kernel("add", Float64())


def test_unknown_kernel():
    with pytest.raises(BackendError):
        compiler.kernel("sub", Float64())


def test_unknown_backend():
    with pytest.raises(BackendError):
        a.add(b, backend="cuda")


def test_unknown_dtype():
    with pytest.raises(BackendError):
        a.add(b, backend="llvm", dtype=float)


def test_integer_kernels_use_integer_instructions():
    module = ir.Module(name="test")
    kernels.build_matmul(module, Int64())
    kernels.build_matmul(module, Float64())
    text = str(module)

    assert "matmul_int64" in text
    assert "matmul_float64" in text
    assert text.count("fmul") == 1, "Only the float kernel multiplies floats."


def test_buffer():
    buffer = Buffer([[1, 2], [3, 4]], Float32())

    assert buffer.shape == (2, 2)
    assert buffer.size == 4
    assert buffer.to_numpy().dtype == Float32.numpy


@pytest.fixture
def llvm_by_default(monkeypatch, caplog):
    monkeypatch.setattr(brokkr.matrix, "settings", Settings(backend="llvm"))
    caplog.set_level(logging.DEBUG, logger="brokkr")

    return caplog


def test_default_backend_keeps_fractions_exact(llvm_by_default):
    m = Matrix([[Fraction(1, 3)]])
    total = m + m

    assert total.to_list() == [[Fraction(2, 3)]]
    assert (m @ m).to_list() == [[Fraction(1, 9)]]

    m += m

    assert m.to_list() == [[Fraction(2, 3)]]
    assert "kernel" not in llvm_by_default.text, "Fractions went through a kernel."


def test_default_backend_keeps_large_ints_exact(llvm_by_default):
    big = 2**60 + 1

    assert (Matrix([[big]]) @ Matrix([[1]])).to_list() == [[big]]
    assert (Matrix([[2**62]]) + Matrix([[2**62]])).to_list() == [[2**63]]


def test_default_backend_keeps_list_elements(llvm_by_default):
    m = Matrix([[[1], [2]]], element_type=list)
    n = Matrix([[[3], [4]]], element_type=list)

    assert (m + n).to_list() == [[[1, 3], [2, 4]]]


def test_default_backend_compiles_float_matrices(llvm_by_default):
    m = Matrix([[0.5, 1.5], [2.0, -1.0]])

    assert m + m == Matrix([[1.0, 3.0], [4.0, -2.0]])
    assert "add_float64" in llvm_by_default.text


def test_explicit_backend_needs_compiled_dtype():
    m = Matrix([[Fraction(1, 2)]])

    with pytest.raises(BackendError):
        m.add(m, backend="llvm")


def test_explicit_backend_infers_dtype():
    result = Matrix([[1, 2]]).add(Matrix([[3, 4]]), backend="llvm")

    assert result.to_list() == [[4, 6]]
    assert result.element_type is int


def test_compiled_refuses_lossy_cast():
    with pytest.raises(BackendError):
        Matrix([[1.5]]).add(Matrix([[1.0]]), backend="llvm", dtype=Int64)


def test_compiled_inplace_addition_writes_into_adopted_rows():
    rows = [[1.0, 2.0], [3.0, 4.0]]
    m = Matrix.from_rows(rows)

    m.add(Matrix([[1.0, 1.0], [1.0, 1.0]]), inplace=True, backend="llvm")

    assert rows == [[2.0, 3.0], [4.0, 5.0]]
    assert m.into_rows() is rows


def test_compiled_result_keeps_subclass():
    class Grid(Matrix):
        pass

    g = Grid([[1, 2], [3, 4]])

    assert type(g.add(g, backend="llvm")) is Grid
    assert type(g.multiply(g, backend="llvm")) is Grid
