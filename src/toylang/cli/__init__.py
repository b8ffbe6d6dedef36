"""
toylang Command-Line Interface
==============================

This package provides the command-line tool of the toolchain:

- **toyc**: compile a toylang source file and print its LLVM IR

The tool is a Click-based CLI application.
"""

__all__ = ["toyc"]
