"""
Compiler Error Hierarchy
========================

This module defines the exceptions raised by the toylang front end.
All of them inherit from CompileError, which itself inherits from
ToyError for consistent error handling across the toolchain.

Exception Hierarchy
-------------------
CompileError (base for all front end errors)
├── ToySyntaxError - parser could not build a node
├── CodeGenError - code generation errors
│   ├── UnboundVariableError - name is not a parameter of the function
│   ├── UnknownFunctionError - call to a function never declared
│   ├── ArgumentCountError - call arity differs from the declaration
│   ├── SignatureConflictError - redeclaration with a different arity
│   └── UnsupportedOperatorError - operator outside + - * /
├── VerificationError - backend verifier rejected the function
└── NestingDepthError - statement nested beyond the recursion limit

There is no lexical error kind: the lexer forwards any unknown
character as a single-character token and the parser rejects it.

Error Message Format
--------------------
    prog.toy:3:9: error: unbound variable 'x'
    hint: 'x' is not a parameter of 'f'
"""

from typing import Optional, List

from toylang.errors import ToyError, SourceLocation


# =============================================================================
# Base Compiler Exception
# =============================================================================

class CompileError(ToyError):
    """
    Base exception for all compiler errors.

    Attributes:
        message: The error description
        location: Where in the source the error occurred
        hint: A suggestion for fixing the error
    """

    def __init__(
        self,
        message: str,
        location: Optional[SourceLocation] = None,
        hint: Optional[str] = None,
    ):
        self.message = message
        self.location = location
        self.hint = hint
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """
        Format the error message with location and hint.

        Example:

            prog.toy:1:9: error: unknown function 'foo'
            hint: functions must be defined with 'def' before they are called
        """
        parts = []

        if self.location:
            parts.append(f"{self.location}: error: {self.message}")
        else:
            parts.append(f"error: {self.message}")

        if self.hint:
            parts.append(f"hint: {self.hint}")

        return "\n".join(parts)


# =============================================================================
# Syntax Errors
# =============================================================================

class ToySyntaxError(CompileError):
    """
    Syntax error in a statement.

    Raised by the parser for a malformed primary expression, signature,
    call argument list or parenthesized expression. The token that could
    not be used is kept in `found`.
    """

    def __init__(
        self,
        message: str,
        location: Optional[SourceLocation] = None,
        found: Optional[str] = None,
        hint: Optional[str] = None,
    ):
        self.found = found
        super().__init__(message, location=location, hint=hint)


# =============================================================================
# Code Generation Errors
# =============================================================================

class CodeGenError(CompileError):
    """
    Error during lowering of the AST into the backend module.
    """
    pass


class UnboundVariableError(CodeGenError):
    """Reference to a name that is not a parameter of the current function."""

    def __init__(
        self,
        name: str,
        function_name: Optional[str] = None,
        location: Optional[SourceLocation] = None,
    ):
        self.name = name
        self.function_name = function_name
        hint = None
        if function_name:
            hint = f"'{name}' is not a parameter of '{function_name}'"
        super().__init__(f"unbound variable '{name}'", location=location, hint=hint)


class UnknownFunctionError(CodeGenError):
    """Call to a function that has not been declared in the module."""

    def __init__(self, name: str, location: Optional[SourceLocation] = None):
        self.name = name
        super().__init__(
            f"unknown function '{name}'",
            location=location,
            hint="functions must be defined with 'def' before they are called",
        )


class ArgumentCountError(CodeGenError):
    """
    Wrong number of arguments in function call.

    Raised when a function is called with a different number
    of arguments than its declaration has parameters.
    """

    def __init__(
        self,
        function_name: str,
        expected: int,
        actual: int,
        location: Optional[SourceLocation] = None,
    ):
        self.function_name = function_name
        self.expected = expected
        self.actual = actual

        word = "argument" if expected == 1 else "arguments"
        super().__init__(
            f"'{function_name}' expects {expected} {word}, got {actual}",
            location=location,
        )


class SignatureConflictError(CodeGenError):
    """
    Redeclaration of a function with a different number of parameters.
    """

    def __init__(
        self,
        name: str,
        existing_arity: int,
        new_arity: int,
        location: Optional[SourceLocation] = None,
    ):
        self.name = name
        self.existing_arity = existing_arity
        self.new_arity = new_arity
        super().__init__(
            f"conflicting declaration of '{name}'",
            location=location,
            hint=f"'{name}' was declared with {existing_arity} parameter(s), "
                 f"not {new_arity}",
        )


class UnsupportedOperatorError(CodeGenError):
    """Binary operator outside the fixed arithmetic set."""

    def __init__(self, operator: str, location: Optional[SourceLocation] = None):
        self.operator = operator
        super().__init__(
            f"unsupported binary operator '{operator}'",
            location=location,
            hint="supported operators are + - * /",
        )


# =============================================================================
# Backend Errors
# =============================================================================

class VerificationError(CompileError):
    """
    The backend verifier rejected a finalized function.

    Attributes:
        function_name: Function that failed verification
        details: Verifier output
    """

    def __init__(
        self,
        function_name: str,
        details: str = "",
        location: Optional[SourceLocation] = None,
    ):
        self.function_name = function_name
        self.details = details
        super().__init__(
            f"verification of '{function_name}' failed",
            location=location,
            hint=details.strip() or None,
        )


# =============================================================================
# Limit Errors
# =============================================================================

class NestingDepthError(CompileError):
    """
    A statement nests too deeply for the recursive parser or code generator.

    Raised by the driver when a statement exhausts the interpreter's
    recursion limit, for example thousands of nested parentheses.
    """

    def __init__(self, location: Optional[SourceLocation] = None):
        super().__init__(
            "statement is nested too deeply",
            location=location,
            hint="split the expression across several functions",
        )


# =============================================================================
# Error Collection
# =============================================================================

class ErrorCollector:
    """
    Collects the errors and warnings of a compilation run.

    The driver recovers from every statement-level error, so a single
    run can produce many diagnostics. They are gathered here in source
    order and copied into the CompileResult at the end of the run.
    """

    def __init__(self):
        self.errors: List[CompileError] = []
        self.warnings: List[str] = []

    def add(self, error: CompileError) -> None:
        """Add an error to the collection."""
        self.errors.append(error)

    def add_warning(self, message: str, location: Optional[SourceLocation] = None) -> None:
        """Add a warning message."""
        if location:
            self.warnings.append(f"{location}: warning: {message}")
        else:
            self.warnings.append(f"warning: {message}")

    def error_count(self) -> int:
        """Return the number of collected errors."""
        return len(self.errors)

