"""
LLVM Code Generator for toylang
===============================

This module lowers toylang AST nodes into the backend module. It walks
one function definition at a time and emits instructions through the
BackendModule interface; it never touches LLVM directly.

Generation State
----------------
All mutable state lives in a GenerationContext passed to the generator:

- `module`: the backend module receiving the functions
- `symbols`: the Symbol Table, mapping each parameter name of the function
  being generated to its backend argument value. It is cleared and
  refilled at the start of every function; there are no nested scopes.
- `collector`: receives warnings (duplicate parameter names)

Lowering Rules
--------------
| Node               | Emitted                                        |
|--------------------|------------------------------------------------|
| NumberLiteral      | i32 constant                                   |
| VariableRef        | the bound argument value                       |
| BinaryExpr         | add / sub / mul / udiv, left operand first     |
| CallExpr           | call, arguments left to right                  |
| FunctionSignature  | function declaration, Symbol Table rebuilt     |
| FunctionDefinition | entry block, body, ret, verify, optimize       |

A definition that fails anywhere after its declaration is erased from the
backend module before the error propagates.

Usage
-----
>>> from toylang.backend import BackendModule
>>> from toylang.frontend.parser import Parser
>>> context = GenerationContext(BackendModule())
>>> gen = CodeGenerator(context)
>>> _ = gen.generate(Parser.from_string("def twice(x) x + x").parse_definition())
>>> context.module.execute("twice", 21)
42
"""

from dataclasses import dataclass, field
from typing import Optional, Iterator
import logging

from toylang.backend import BackendModule, FunctionHandle, BINARY_OPERATORS
from toylang.frontend.ast import (
    ASTNode,
    ASTVisitor,
    NumberLiteral,
    VariableRef,
    BinaryExpr,
    CallExpr,
    FunctionSignature,
    FunctionDefinition,
)
from toylang.frontend.errors import (
    CodeGenError,
    UnboundVariableError,
    UnknownFunctionError,
    ArgumentCountError,
    UnsupportedOperatorError,
    ErrorCollector,
)

logger = logging.getLogger(__name__)


# =============================================================================
# Symbol Table
# =============================================================================

class SymbolTable:
    """
    Parameter bindings of the function being generated.
    """

    def __init__(self):
        self._bindings: dict[str, object] = {}

    def clear(self) -> None:
        self._bindings.clear()

    def bind(self, name: str, value) -> bool:
        """Bind `name` to `value`. Returns True if an earlier binding was replaced."""
        replaced = name in self._bindings
        self._bindings[name] = value
        return replaced

    def lookup(self, name: str):
        """Return the value bound to `name`, or None."""
        return self._bindings.get(name)

    def __contains__(self, name: str) -> bool:
        return name in self._bindings

    def __len__(self) -> int:
        return len(self._bindings)

    def __iter__(self) -> Iterator[str]:
        return iter(self._bindings)


@dataclass
class GenerationContext:
    """
    Mutable state shared by one compilation run.

    Attributes:
        module: Backend module receiving generated functions
        symbols: Symbol Table of the current function
        collector: Receives warnings raised during generation
        function_name: Name of the function being generated, if any
    """
    module: BackendModule
    symbols: SymbolTable = field(default_factory=SymbolTable)
    collector: ErrorCollector = field(default_factory=ErrorCollector)
    function_name: Optional[str] = None


# =============================================================================
# Code Generator Class
# =============================================================================

class CodeGenerator(ASTVisitor):
    """
    Lowers toylang AST nodes into a backend module.

    Expression visits return a backend value; signature and definition
    visits return the FunctionHandle. Every failure is raised as a
    CodeGenError subclass (or VerificationError from the backend).

    Attributes:
        context: The generation state
    """

    def __init__(self, context: GenerationContext):
        self.context = context

    @property
    def module(self) -> BackendModule:
        return self.context.module

    def generate(self, definition: FunctionDefinition) -> FunctionHandle:
        """Generate one function definition into the backend module."""
        return self.visit(definition)

    def generic_visit(self, node: ASTNode):
        raise CodeGenError(
            f"cannot generate code for {node.__class__.__name__}",
            location=getattr(node, "location", None),
        )

    # =========================================================================
    # Expressions
    # =========================================================================

    def visit_NumberLiteral(self, node: NumberLiteral):
        return self.module.emit_constant(node.value)

    def visit_VariableRef(self, node: VariableRef):
        value = self.context.symbols.lookup(node.name)
        if value is None:
            raise UnboundVariableError(
                node.name, self.context.function_name, node.location
            )
        return value

    def visit_BinaryExpr(self, node: BinaryExpr):
        # Left-associative chains nest along the left operand; walk that
        # spine with a loop so 1+1+...+1 does not recurse per operator.
        chain = []
        while isinstance(node, BinaryExpr):
            chain.append(node)
            node = node.left

        lhs = self.visit(node)
        for binary in reversed(chain):
            rhs = self.visit(binary.right)

            if binary.op not in BINARY_OPERATORS:
                raise UnsupportedOperatorError(binary.op, binary.location)

            lhs = self.module.emit_binop(binary.op, lhs, rhs)
        return lhs

    def visit_CallExpr(self, node: CallExpr):
        callee = self.module.lookup_function(node.callee)
        if callee is None:
            raise UnknownFunctionError(node.callee, node.location)

        if len(node.args) != callee.arity:
            raise ArgumentCountError(
                node.callee, callee.arity, len(node.args), node.location
            )

        args = [self.visit(arg) for arg in node.args]
        return self.module.emit_call(callee, args)

    # =========================================================================
    # Declarations
    # =========================================================================

    def visit_FunctionSignature(self, node: FunctionSignature) -> FunctionHandle:
        handle = self.module.declare_function(
            node.name, node.arity, node.params, node.location
        )

        symbols = self.context.symbols
        symbols.clear()
        for param, arg in zip(node.params, handle.arguments):
            if symbols.bind(param, arg):
                message = f"duplicate parameter '{param}' in '{node.name}'; last one wins"
                logger.warning(message)
                self.context.collector.add_warning(message, node.location)

        self.context.function_name = node.name
        return handle

    def visit_FunctionDefinition(self, node: FunctionDefinition) -> FunctionHandle:
        handle = self.visit(node.signature)
        try:
            self.module.begin_function(handle)
            body = self.visit(node.body)
            self.module.finalize_function(handle, body, node.location)
        except Exception:
            self.module.erase_function(handle)
            raise
        finally:
            self.context.function_name = None

        verb = "Redefined" if handle.redefinition else "Generated"
        logger.debug(f"{verb} function '{handle.name}'")
        return handle
