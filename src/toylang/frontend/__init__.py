"""
toylang Front End
=================

This package implements the front end of the toylang compiler:

- A lexer reading a character stream into tokens
- A recursive descent parser with precedence climbing for binary operators
- An immutable AST
- A code generator lowering the AST into an LLVM backend module
- A driver running the statement loop with one-token error recovery

Pipeline
--------
    Source → Lexer → Parser → AST → Code Generator → Backend Module

Usage
-----
>>> from toylang.frontend import compile_source
>>> result = compile_source("def add(a b) a + b; add(2, 3)")
>>> result.defined
['add']
>>> result.module.execute(result.anonymous[0])
5

Language
--------
- One value type: 32-bit integer
- Operators: + - * / (division is unsigned)
- Functions: `def name(param ...) expression`
- Top-level expressions become anonymous zero-parameter functions
- Comments: `#` to end of line
"""

from toylang.frontend.driver import (
    Compiler,
    CompilerOptions,
    CompileResult,
    Driver,
    compile_source,
)
from toylang.frontend.errors import (
    CompileError,
    ToySyntaxError,
    CodeGenError,
    UnboundVariableError,
    UnknownFunctionError,
    ArgumentCountError,
    SignatureConflictError,
    UnsupportedOperatorError,
    VerificationError,
    NestingDepthError,
    ErrorCollector,
)
from toylang.frontend.lexer import Lexer, Token, TokenType
from toylang.frontend.parser import Parser, BINARY_PRECEDENCE
from toylang.frontend.codegen import CodeGenerator, GenerationContext, SymbolTable
from toylang.frontend.ast import (
    ASTNode,
    NumberLiteral,
    VariableRef,
    BinaryExpr,
    CallExpr,
    FunctionSignature,
    FunctionDefinition,
)

__all__ = [
    # Main API
    "Compiler",
    "CompilerOptions",
    "CompileResult",
    "Driver",
    "compile_source",
    # Errors
    "CompileError",
    "ToySyntaxError",
    "CodeGenError",
    "UnboundVariableError",
    "UnknownFunctionError",
    "ArgumentCountError",
    "SignatureConflictError",
    "UnsupportedOperatorError",
    "VerificationError",
    "NestingDepthError",
    "ErrorCollector",
    # Lexer
    "Lexer",
    "Token",
    "TokenType",
    # Parser
    "Parser",
    "BINARY_PRECEDENCE",
    # Code Generator
    "CodeGenerator",
    "GenerationContext",
    "SymbolTable",
    # AST Nodes
    "ASTNode",
    "NumberLiteral",
    "VariableRef",
    "BinaryExpr",
    "CallExpr",
    "FunctionSignature",
    "FunctionDefinition",
]
