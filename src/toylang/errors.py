"""
toylang Error Hierarchy
=======================

This module defines the root of the exception hierarchy for the toylang
toolchain. All exceptions inherit from ToyError, allowing callers to catch
every toolchain error with a single except clause.

Exception Hierarchy
-------------------
ToyError (base)
└── CompileError (toylang.frontend.errors)
    ├── ToySyntaxError - malformed statement
    ├── CodeGenError - name resolution and lowering failures
    ├── VerificationError - function rejected by the backend verifier
    └── NestingDepthError - statement nested too deeply to compile

Error messages follow this format:
    filename:line:column: error: description
    hint: suggestion for fixing (when available)
"""

from dataclasses import dataclass


# =============================================================================
# Base Exception Class
# =============================================================================

class ToyError(Exception):
    """
    Base exception for all toylang errors.

    Example:
        try:
            compile_file("program.toy")
        except ToyError as e:
            print(f"Error: {e}")
    """
    pass


# =============================================================================
# Source Location Tracking
# =============================================================================

@dataclass(frozen=True)
class SourceLocation:
    """
    Represents a location in source code for error reporting.

    Tokens and AST nodes carry one of these so that diagnostics can
    point back at the offending statement.

    Attributes:
        filename: Name of the source file (or "<input>" for string input)
        line: Line number (1-indexed)
        column: Column number (1-indexed)
    """
    filename: str
    line: int
    column: int

    def __str__(self) -> str:
        """Format as 'filename:line:column' for error messages."""
        return f"{self.filename}:{self.line}:{self.column}"
