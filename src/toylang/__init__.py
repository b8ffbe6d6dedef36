"""
toylang - Compiler Front End for a Minimal Expression Language
==============================================================

toylang compiles a tiny language of integer expressions and functions
into LLVM IR, optimizes every function as it is defined, and can run the
result through LLVM's JIT.

Main Components
---------------
- **frontend**: lexer, parser, AST, code generator and driver
- **backend**: llvmlite adapter holding the generated module
- **cli**: the `toyc` command

Quick Start
-----------
    >>> from toylang import compile_source
    >>> result = compile_source("def f(x) x * 2; f(21)")
    >>> result.module.execute(result.anonymous[0])
    42

Or from the command line:
    $ toyc program.toy > program.ll
"""

__version__ = "1.0.0"

from toylang.errors import ToyError, SourceLocation
from toylang.frontend import Compiler, CompilerOptions, CompileResult, compile_source
from toylang.backend import BackendModule

__all__ = [
    "__version__",
    "ToyError",
    "SourceLocation",
    "Compiler",
    "CompilerOptions",
    "CompileResult",
    "compile_source",
    "BackendModule",
]
