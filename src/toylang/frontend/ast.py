"""
toylang Abstract Syntax Tree (AST) Definitions
==============================================

This module defines the AST node types produced by the parser and
consumed by the code generator.

Node Hierarchy
--------------
ASTNode (base)
├── Expressions
│   ├── NumberLiteral - integer constant
│   ├── VariableRef - parameter reference
│   ├── BinaryExpr - + - * /
│   └── CallExpr - function call
└── Declarations
    ├── FunctionSignature - name and parameter names
    └── FunctionDefinition - signature plus one body expression

Design Notes
------------
- The set of node classes is closed; the code generator dispatches on
  exactly these classes.
- Children are held directly by their parent (tuples for sequences), so
  every node has a single owner and the tree is acyclic.
- Nodes are frozen dataclasses: read-only once built.
"""

from dataclasses import dataclass
from typing import Union

from toylang.errors import SourceLocation


# =============================================================================
# AST Node Base Class
# =============================================================================

@dataclass(frozen=True)
class ASTNode:
    """
    Base class for all AST nodes.

    Attributes:
        location: Source location where this node starts
    """
    location: SourceLocation


# =============================================================================
# Expression Nodes
# =============================================================================

@dataclass(frozen=True)
class NumberLiteral(ASTNode):
    """Integer constant, e.g. `42`."""
    value: int

    def __repr__(self) -> str:
        return f"NumberLiteral({self.value})"


@dataclass(frozen=True)
class VariableRef(ASTNode):
    """Reference to a parameter of the enclosing function."""
    name: str

    def __repr__(self) -> str:
        return f"VariableRef({self.name!r})"


@dataclass(frozen=True)
class BinaryExpr(ASTNode):
    """
    Binary arithmetic expression.

    Attributes:
        op: One of '+', '-', '*', '/'
        left: Left operand
        right: Right operand
    """
    op: str
    left: "Expr"
    right: "Expr"

    def __repr__(self) -> str:
        return f"BinaryExpr({self.op!r}, {self.left!r}, {self.right!r})"


@dataclass(frozen=True)
class CallExpr(ASTNode):
    """
    Function call.

    Attributes:
        callee: Name of the called function
        args: Argument expressions in call order
    """
    callee: str
    args: tuple["Expr", ...] = ()

    def __repr__(self) -> str:
        args = ", ".join(repr(a) for a in self.args)
        return f"CallExpr({self.callee!r}, [{args}])"


Expr = Union[NumberLiteral, VariableRef, BinaryExpr, CallExpr]


# =============================================================================
# Declaration Nodes
# =============================================================================

@dataclass(frozen=True)
class FunctionSignature(ASTNode):
    """
    Function name and parameter names.

    Parameter names are not required to be unique; the code generator
    binds them in order, so the last occurrence of a name wins.
    """
    name: str
    params: tuple[str, ...] = ()

    @property
    def arity(self) -> int:
        return len(self.params)

    def __repr__(self) -> str:
        return f"FunctionSignature({self.name!r}, {list(self.params)!r})"


@dataclass(frozen=True)
class FunctionDefinition(ASTNode):
    """
    Function definition: a signature and exactly one body expression.

    Top-level expressions are wrapped in a definition with an anonymous
    zero-parameter signature; `is_anonymous` marks those.
    """
    signature: FunctionSignature
    body: Expr
    is_anonymous: bool = False

    @property
    def name(self) -> str:
        return self.signature.name

    def __repr__(self) -> str:
        return f"FunctionDefinition({self.signature!r}, {self.body!r})"


# =============================================================================
# Visitor
# =============================================================================

class ASTVisitor:
    """
    Base class for AST visitors.

    Dispatches each node to the visit_<ClassName> method of the subclass.
    Node classes without a visit method go to generic_visit.

    Usage:
        class MyVisitor(ASTVisitor):
            def visit_CallExpr(self, node):
                ...

        MyVisitor().visit(definition)
    """

    def visit(self, node: ASTNode):
        method_name = f"visit_{node.__class__.__name__}"
        visitor = getattr(self, method_name, self.generic_visit)
        return visitor(node)

    def generic_visit(self, node: ASTNode):
        raise NotImplementedError(
            f"{self.__class__.__name__} has no visit method for {node.__class__.__name__}"
        )
