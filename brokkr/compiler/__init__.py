"""The compiler module, containing LLVM compilation functionality."""

from . import buffer, types, kernels, compiler

__all__: list[str] = ["buffer", "types", "kernels", "compiler"]
