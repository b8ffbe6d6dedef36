"""
toylang Compiler Driver
=======================

This module ties the front end together. The Driver reads statements
from the parser and hands each one to the code generator:

    Source → Lexer → Parser → AST → Code Generator → Backend Module

Statement Loop
--------------
| Lookahead token | Action                                         |
|-----------------|------------------------------------------------|
| EOF             | stop                                           |
| ';'             | consume (statement separator)                  |
| 'def'           | parse a definition and generate it             |
| anything else   | parse a top-level expression and generate it   |

Error Recovery
--------------
A statement that fails to parse or generate is abandoned: the error is
recorded, exactly one token is skipped, and the loop resumes. Only the
end of input stops a run.

A statement nested deeply enough to exhaust the recursion limit is
reported as a NestingDepthError and recovered from the same way.

Usage
-----
>>> from toylang.frontend.driver import compile_source
>>> result = compile_source("def sq(x) x * x; sq(7)")
>>> result.module.execute(result.anonymous[0])
49
>>> print(result.ir)  # LLVM assembly of the whole module
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Optional, TextIO
import io
import logging

from toylang.backend import BackendModule
from toylang.backend.module import DEFAULT_MODULE_NAME
from toylang.frontend.ast import FunctionDefinition
from toylang.frontend.codegen import CodeGenerator, GenerationContext
from toylang.frontend.errors import CompileError, ErrorCollector, NestingDepthError
from toylang.frontend.lexer import Lexer, TokenType
from toylang.frontend.parser import Parser, ANONYMOUS_PREFIX

logger = logging.getLogger(__name__)


@dataclass
class CompilerOptions:
    """
    Compiler configuration options.

    Attributes:
        module_name: Identifier of the generated module
        optimize: Run the optimization pipeline after every definition
        speed_level: Optimization level used by the pipeline (0-3)
        anonymous_prefix: Name of the functions wrapping top-level
                          expressions (later ones get a ".N" suffix)
    """
    module_name: str = DEFAULT_MODULE_NAME
    optimize: bool = True
    speed_level: int = 2
    anonymous_prefix: str = ANONYMOUS_PREFIX


@dataclass
class CompileResult:
    """
    Outcome of a compilation run.

    Attributes:
        filename: Name of the compiled source
        module: The backend module holding every generated function
        defined: Names of named functions generated successfully, in order
        anonymous: Names of generated top-level expression functions
        errors: Statement errors, in source order
        warnings: Formatted warning messages
    """
    filename: str
    module: BackendModule
    defined: list[str] = field(default_factory=list)
    anonymous: list[str] = field(default_factory=list)
    errors: list[CompileError] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return not self.errors

    @property
    def ir(self) -> str:
        """LLVM assembly of the whole module."""
        return self.module.dump()


class Driver:
    """
    Top-level statement loop.

    Attributes:
        parser: Statement source
        generator: Code generator bound to the backend module
        collector: Errors and warnings of the run
    """

    def __init__(self, parser: Parser, context: GenerationContext):
        self.parser = parser
        self.context = context
        self.generator = CodeGenerator(context)
        self.collector: ErrorCollector = context.collector
        self.defined: list[str] = []
        self.anonymous: list[str] = []

    def run(self) -> None:
        """Process statements until the end of input."""
        while True:
            token = self.parser.current

            if token.type == TokenType.EOF:
                return

            if token.is_char(";"):
                self.parser.advance()
            elif token.type == TokenType.DEF:
                self._handle(self.parser.parse_definition)
            else:
                self._handle(self.parser.parse_top_level_expression)

    def _handle(self, parse: Callable[[], FunctionDefinition]) -> None:
        """Parse and generate one statement, recovering on failure."""
        start = self.parser.current.location
        try:
            definition = parse()
            self.generator.generate(definition)
        except RecursionError:
            self._recover(NestingDepthError(start))
            return
        except CompileError as e:
            self._recover(e)
            return

        if definition.is_anonymous:
            self.anonymous.append(definition.name)
        elif definition.name not in self.defined:
            self.defined.append(definition.name)

    def _recover(self, error: CompileError) -> None:
        self.collector.add(error)
        logger.debug(f"Dropped statement: {error.message}")
        # Resynchronize by skipping one token
        self.parser.advance()


class Compiler:
    """
    Compiles toylang source into a backend module.

    Example:
        compiler = Compiler()
        result = compiler.compile_file("prog.toy")
        print(result.ir)

    Attributes:
        options: Compiler configuration options
    """

    def __init__(self, options: Optional[CompilerOptions] = None):
        self.options = options or CompilerOptions()

    def compile_stream(self, stream: TextIO, filename: str = "<input>") -> CompileResult:
        """
        Compile source read from a text stream.

        Statement errors do not raise; they are returned in the result.
        """
        module = BackendModule(
            name=self.options.module_name,
            optimize=self.options.optimize,
            speed_level=self.options.speed_level,
        )
        context = GenerationContext(module)
        parser = Parser(Lexer(stream, filename), self.options.anonymous_prefix)

        driver = Driver(parser, context)
        driver.run()

        collector = context.collector
        logger.debug(
            f"Compiled {filename}: {len(module)} function(s), "
            f"{collector.error_count()} error(s)"
        )
        return CompileResult(
            filename=filename,
            module=module,
            defined=driver.defined,
            anonymous=driver.anonymous,
            errors=list(collector.errors),
            warnings=list(collector.warnings),
        )

    def compile_source(self, source: str, filename: str = "<input>") -> CompileResult:
        """Compile a source string."""
        return self.compile_stream(io.StringIO(source), filename)

    def compile_file(self, filepath: str | Path) -> CompileResult:
        """
        Compile a source file.

        Raises:
            OSError: If the file cannot be opened
        """
        path = Path(filepath)
        with path.open("r", encoding="utf-8") as stream:
            return self.compile_stream(stream, str(path))


def compile_source(
    source: str,
    filename: str = "<input>",
    options: Optional[CompilerOptions] = None,
) -> CompileResult:
    """Compile a source string with the given options."""
    return Compiler(options).compile_source(source, filename)
