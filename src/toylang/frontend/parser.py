"""
toylang Recursive Descent Parser
================================

This module implements the parser for the toylang language. It pulls
tokens from a Lexer with a single token of lookahead and builds AST
nodes one statement at a time.

Grammar (EBNF)
--------------
program    ::= (def_stmt | expr_stmt | ';')* EOF
def_stmt   ::= 'def' signature expr
signature  ::= IDENT '(' IDENT* ')'
expr_stmt  ::= expr
expr       ::= primary (binop primary)*
primary    ::= NUMBER | IDENT ('(' (expr (',' expr)*)? ')')? | '(' expr ')'
binop      ::= '+' | '-' | '*' | '/'

Binary Operator Precedence
--------------------------
Binary expressions are parsed by precedence climbing with this table
(higher binds tighter):

| Operator | Precedence |
|----------|------------|
| -        | 1          |
| +        | 2          |
| /        | 3          |
| *        | 4          |

Note that `+` binds tighter than `-`, so `5-2+1` parses as `5-(2+1)`.

Example Usage
-------------
>>> from toylang.frontend.parser import Parser
>>> parser = Parser.from_string("def f(x) x * 2")
>>> parser.parse_definition()
FunctionDefinition(FunctionSignature('f', ['x']), BinaryExpr('*', VariableRef('x'), NumberLiteral(2)))
"""

from typing import Optional
import logging

from toylang.frontend.lexer import Lexer, Token, TokenType
from toylang.frontend.ast import (
    Expr,
    NumberLiteral,
    VariableRef,
    BinaryExpr,
    CallExpr,
    FunctionSignature,
    FunctionDefinition,
)
from toylang.frontend.errors import ToySyntaxError

logger = logging.getLogger(__name__)


# Binary operator precedence table (higher binds tighter)
BINARY_PRECEDENCE: dict[str, int] = {
    "-": 1,
    "+": 2,
    "/": 3,
    "*": 4,
}

# Name given to the first anonymous top-level function; later ones get
# a numeric suffix.
ANONYMOUS_PREFIX = "__anon_expr"


class Parser:
    """
    Recursive descent parser for toylang.

    The parser owns the lexer and the current lookahead token. Each
    parse_* method consumes the tokens of one construct and returns its
    node, or raises ToySyntaxError. A failed parse never returns a
    partially built node.

    Attributes:
        lexer: Token source
        current: The lookahead token
    """

    def __init__(self, lexer: Lexer, anonymous_prefix: str = ANONYMOUS_PREFIX):
        self.lexer = lexer
        self.anonymous_prefix = anonymous_prefix
        self._anonymous_count = 0
        self.current: Token = lexer.next_token()

    @classmethod
    def from_string(cls, source: str, filename: str = "<input>") -> "Parser":
        """Create a parser over an in-memory source string."""
        return cls(Lexer.from_string(source, filename))

    # =========================================================================
    # Token Access Methods
    # =========================================================================

    def advance(self) -> Token:
        """Consume the current token and return it."""
        token = self.current
        self.current = self.lexer.next_token()
        return token

    def at_end(self) -> bool:
        """Check if the lookahead token is EOF."""
        return self.current.type == TokenType.EOF

    def _check_char(self, char: str) -> bool:
        return self.current.is_char(char)

    def _expect_char(self, char: str, context: str) -> Token:
        """Consume the single-character token `char` or raise."""
        if self._check_char(char):
            return self.advance()
        raise self._error(f"expected '{char}' {context}")

    def _expect_identifier(self, context: str) -> Token:
        if self.current.type == TokenType.IDENTIFIER:
            return self.advance()
        raise self._error(f"expected identifier {context}")

    def _error(self, message: str, hint: Optional[str] = None) -> ToySyntaxError:
        """Create a syntax error located at the lookahead token."""
        found = self.current.describe()
        return ToySyntaxError(
            f"{message}, found '{found}'",
            location=self.current.location,
            found=found,
            hint=hint,
        )

    def _precedence(self) -> int:
        """Precedence of the lookahead token, or -1 if it is not an operator."""
        if self.current.type != TokenType.CHAR:
            return -1
        return BINARY_PRECEDENCE.get(self.current.value, -1)

    # =========================================================================
    # Expressions
    # =========================================================================

    def parse_expression(self) -> Expr:
        """Parse a primary followed by any number of binary operations."""
        lhs = self.parse_primary()
        return self.parse_binary(0, lhs)

    def parse_primary(self) -> Expr:
        """
        Parse a number, a variable reference, a call or a parenthesized
        expression.
        """
        token = self.current

        if token.type == TokenType.NUMBER:
            self.advance()
            return NumberLiteral(token.location, token.value)

        if token.type == TokenType.IDENTIFIER:
            return self._parse_identifier()

        if token.is_char("("):
            return self._parse_parenthesized()

        raise self._error("expected expression")

    def _parse_identifier(self) -> Expr:
        """Parse a variable reference or, if followed by '(', a call."""
        name_token = self.advance()

        if not self._check_char("("):
            return VariableRef(name_token.location, name_token.value)

        self.advance()  # consume '('
        args: list[Expr] = []
        if not self._check_char(")"):
            while True:
                args.append(self.parse_expression())

                if self._check_char(")"):
                    break

                if not self._check_char(","):
                    raise self._error(
                        f"expected ')' or ',' in call to '{name_token.value}'"
                    )
                self.advance()
        self.advance()  # consume ')'

        return CallExpr(name_token.location, name_token.value, tuple(args))

    def _parse_parenthesized(self) -> Expr:
        self.advance()  # consume '('
        expr = self.parse_expression()
        self._expect_char(")", "to close parenthesized expression")
        return expr

    def parse_binary(self, min_precedence: int, lhs: Expr) -> Expr:
        """
        Fold binary operators into `lhs` by precedence climbing.

        Operators binding less tightly than `min_precedence` are left for
        the caller. When the operator after the right operand binds
        strictly tighter than the current one, the right operand is
        folded first.
        """
        while True:
            precedence = self._precedence()
            if precedence < min_precedence:
                return lhs

            op_token = self.advance()
            rhs = self.parse_primary()

            if precedence < self._precedence():
                rhs = self.parse_binary(precedence + 1, rhs)

            lhs = BinaryExpr(op_token.location, op_token.value, lhs, rhs)

    # =========================================================================
    # Declarations
    # =========================================================================

    def parse_signature(self) -> FunctionSignature:
        """Parse `IDENT '(' IDENT* ')'`."""
        name_token = self._expect_identifier("for function name")
        self._expect_char("(", f"after function name '{name_token.value}'")

        params: list[str] = []
        while self.current.type == TokenType.IDENTIFIER:
            params.append(self.advance().value)

        self._expect_char(")", "to close parameter list")

        return FunctionSignature(name_token.location, name_token.value, tuple(params))

    def parse_definition(self) -> FunctionDefinition:
        """Parse `'def' signature expr`."""
        def_token = self.advance()  # consume 'def'
        signature = self.parse_signature()
        body = self.parse_expression()
        logger.debug(f"Parsed definition of '{signature.name}'")
        return FunctionDefinition(def_token.location, signature, body)

    def parse_top_level_expression(self) -> FunctionDefinition:
        """
        Parse a bare expression and wrap it in an anonymous,
        zero-parameter function definition.
        """
        location = self.current.location
        body = self.parse_expression()
        signature = FunctionSignature(location, self._next_anonymous_name(), ())
        return FunctionDefinition(location, signature, body, is_anonymous=True)

    def _next_anonymous_name(self) -> str:
        count = self._anonymous_count
        self._anonymous_count += 1
        if count == 0:
            return self.anonymous_prefix
        return f"{self.anonymous_prefix}.{count}"


def parse_expression(source: str, filename: str = "<input>") -> Expr:
    """Parse a single expression from a source string."""
    parser = Parser.from_string(source, filename)
    expr = parser.parse_expression()
    if not parser.at_end():
        raise parser._error("expected end of input")
    return expr
