"""
toylang Backend
===============

Adapter between the toylang code generator and LLVM (via llvmlite).

The code generator depends only on the interface of BackendModule:
declare_function, lookup_function, begin_function, emit_constant,
emit_binop, emit_call, finalize_function, erase_function and dump.
"""

from toylang.backend.module import (
    BackendModule,
    FunctionHandle,
    BINARY_OPERATORS,
    INT_TYPE,
)

__all__ = [
    "BackendModule",
    "FunctionHandle",
    "BINARY_OPERATORS",
    "INT_TYPE",
]
