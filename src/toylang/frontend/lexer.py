"""
toylang Lexer (Tokenizer)
=========================

This module implements the lexer for the toylang expression language.
It reads a character stream one character at a time and produces one
token per call, keeping a single character of pushback between calls.

Token Categories
----------------
- Keyword: def
- Identifiers: [A-Za-z][A-Za-z0-9]*
- Numbers: decimal digit runs (no sign, no fraction)
- Characters: any other single character, returned verbatim
  (operators, parentheses, commas, semicolons, and also characters the
  language has no use for; the parser rejects those)

Comments
--------
- `#` to end of line. A comment produces no token of its own.

There is no lexical error: every input is tokenizable.

Example Usage
-------------
>>> from toylang.frontend.lexer import Lexer
>>> lexer = Lexer.from_string("def add(a b) a + b", "test.toy")
>>> for token in lexer.tokenize():
...     print(token)
Token(DEF, 'def', 1:1)
Token(IDENTIFIER, 'add', 1:5)
Token(CHAR, '(', 1:8)
Token(IDENTIFIER, 'a', 1:9)
Token(IDENTIFIER, 'b', 1:11)
Token(CHAR, ')', 1:12)
Token(IDENTIFIER, 'a', 1:14)
Token(CHAR, '+', 1:16)
Token(IDENTIFIER, 'b', 1:18)
Token(EOF, 1:19)
"""

from dataclasses import dataclass
from enum import Enum, auto
from typing import Iterator, TextIO
import io
import logging
import string

from toylang.errors import SourceLocation

logger = logging.getLogger(__name__)


# =============================================================================
# Token Type Enumeration
# =============================================================================

class TokenType(Enum):
    """Token kinds of the toylang language."""

    EOF = auto()            # End of input (repeated on every later call)
    NUMBER = auto()         # Integer literal
    IDENTIFIER = auto()     # Function or parameter name
    DEF = auto()            # def keyword
    CHAR = auto()           # Any other single character


# Map keyword strings to their token types
KEYWORDS: dict[str, TokenType] = {
    "def": TokenType.DEF,
}


# =============================================================================
# Token Data Class
# =============================================================================

@dataclass(frozen=True)
class Token:
    """
    A single token read from the input.

    Attributes:
        type: The TokenType classification
        value: Identifier text, integer value, or the character itself
        line: Line number in source (1-indexed)
        column: Column number in source (1-indexed)
        filename: Name of the source file
    """
    type: TokenType
    value: str | int | None
    line: int
    column: int
    filename: str

    def __repr__(self) -> str:
        """Format token for debugging output."""
        if self.value is not None:
            if isinstance(self.value, int):
                return f"Token({self.type.name}, {self.value}, {self.line}:{self.column})"
            return f"Token({self.type.name}, {self.value!r}, {self.line}:{self.column})"
        return f"Token({self.type.name}, {self.line}:{self.column})"

    @property
    def location(self) -> SourceLocation:
        """Return a SourceLocation for error reporting."""
        return SourceLocation(self.filename, self.line, self.column)

    def is_char(self, char: str) -> bool:
        """Return True if this is the single-character token `char`."""
        return self.type == TokenType.CHAR and self.value == char

    def describe(self) -> str:
        """Human readable form used in diagnostics."""
        if self.type == TokenType.EOF:
            return "end of input"
        return str(self.value)


# =============================================================================
# Lexer Implementation
# =============================================================================

class Lexer:
    """
    Tokenizes toylang source read from a text stream.

    The lexer pulls characters from the stream on demand, so it can be
    driven directly from an open file. The character that ended the
    previous token is held back and becomes the first character examined
    by the next call.

    Usage:
        with open("prog.toy") as f:
            lexer = Lexer(f, "prog.toy")
            token = lexer.next_token()

    Attributes:
        stream: The character stream being tokenized
        filename: Name of the source (for error reporting)
    """

    # Characters that can start an identifier
    IDENT_START = string.ascii_letters

    # Characters that can continue an identifier
    IDENT_CHARS = string.ascii_letters + string.digits

    DIGITS = string.digits

    WHITESPACE = " \t\n\r\v\f"

    def __init__(self, stream: TextIO, filename: str = "<input>"):
        self.stream = stream
        self.filename = filename

        # Position of the next character to be read
        self._line = 1
        self._column = 1

        # Pushback buffer: the last character read but not yet consumed.
        # Starts as a space so the first call reads from the stream.
        self._last_char = " "
        self._last_line = 1
        self._last_column = 0

    @classmethod
    def from_string(cls, source: str, filename: str = "<input>") -> "Lexer":
        """Create a lexer reading from an in-memory string."""
        return cls(io.StringIO(source), filename)

    def tokenize(self) -> Iterator[Token]:
        """
        Generate tokens up to and including the first EOF token.

        Yields:
            Token objects in source order
        """
        while True:
            token = self.next_token()
            yield token
            if token.type == TokenType.EOF:
                return

    # =========================================================================
    # Character Access
    # =========================================================================

    def _read(self) -> str:
        """
        Read the next character into the pushback buffer.

        Returns "" once the stream is exhausted, and keeps returning ""
        on every later call.
        """
        char = self.stream.read(1)
        self._last_char = char
        self._last_line = self._line
        self._last_column = self._column

        if char == "\n":
            self._line += 1
            self._column = 1
        elif char:
            self._column += 1

        return char

    def _make_token(
        self,
        token_type: TokenType,
        value: str | int | None,
        line: int,
        column: int,
    ) -> Token:
        return Token(
            type=token_type,
            value=value,
            line=line,
            column=column,
            filename=self.filename,
        )

    # =========================================================================
    # Scanning
    # =========================================================================

    def next_token(self) -> Token:
        """
        Read and return the next token from the stream.

        Returns:
            The next Token; an EOF token once input is exhausted
        """
        while True:
            while self._last_char and self._last_char in self.WHITESPACE:
                self._read()

            char = self._last_char
            line, column = self._last_line, self._last_column

            if not char:
                return self._make_token(TokenType.EOF, None, line, column)

            if char == "#":
                self._skip_comment()
                continue

            if char in self.IDENT_START:
                return self._scan_identifier(line, column)

            if char in self.DIGITS:
                return self._scan_number(line, column)

            # Anything else is returned verbatim
            self._read()
            return self._make_token(TokenType.CHAR, char, line, column)

    def _skip_comment(self) -> None:
        """Discard characters through the end of the current line."""
        while True:
            char = self._read()
            if not char or char in "\n\r":
                return

    def _scan_identifier(self, line: int, column: int) -> Token:
        """Scan an identifier or keyword starting at the pushback character."""
        text = self._last_char
        while True:
            char = self._read()
            if not char or char not in self.IDENT_CHARS:
                break
            text += char

        token_type = KEYWORDS.get(text, TokenType.IDENTIFIER)
        token = self._make_token(token_type, text, line, column)
        logger.debug(f"Scanned {token!r}")
        return token

    def _scan_number(self, line: int, column: int) -> Token:
        """Scan a maximal run of decimal digits."""
        digits = self._last_char
        while True:
            char = self._read()
            if not char or char not in self.DIGITS:
                break
            digits += char

        return self._make_token(TokenType.NUMBER, int(digits), line, column)


def tokenize_source(source: str, filename: str = "<input>") -> list[Token]:
    """
    Tokenize a source string completely.

    Returns:
        List of tokens ending with a single EOF token
    """
    return list(Lexer.from_string(source, filename).tokenize())
