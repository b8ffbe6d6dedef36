# =============================================================================
# test_driver.py - Compiler Driver Tests
# =============================================================================
# End-to-end tests: source text in, backend module and errors out.
#
# Test coverage includes:
#   - Statement loop: definitions, top-level expressions, separators
#   - Error recovery and resynchronization
#   - Compile results, options and file input
# =============================================================================

import pytest
from toylang import compile_source, Compiler, CompilerOptions
from toylang.frontend.errors import (
    ToySyntaxError,
    UnboundVariableError,
    UnknownFunctionError,
    SignatureConflictError,
    NestingDepthError,
)


# =============================================================================
# Helper Functions
# =============================================================================

def value_of(source: str, index: int = -1) -> int:
    """Compile `source` and run one of its top-level expressions."""
    result = compile_source(source)
    assert result.success, [str(e) for e in result.errors]
    return result.module.execute(result.anonymous[index])


# =============================================================================
# Statement Loop Tests
# =============================================================================

class TestStatements:
    """Tests for the statement loop."""

    def test_top_level_expression(self):
        """A bare expression becomes a callable anonymous function."""
        assert value_of("2+3*4") == 14

    def test_precedence_asymmetry(self):
        assert value_of("5-2+1") == 2

    def test_definition_and_call(self):
        assert value_of("def sq(x) x * x; sq(7)") == 49

    def test_comment_and_separator(self):
        """A comment line followed by an expression."""
        result = compile_source("# note\n42;")
        assert result.success
        assert result.anonymous == ["__anon_expr"]
        assert result.module.execute("__anon_expr") == 42
        assert "ret i32 42" in result.ir

    def test_separators_are_optional(self):
        """Statements may follow each other without ';'."""
        result = compile_source("def a() 1 def b() 2 a()")
        assert result.defined == ["a", "b"]
        assert len(result.anonymous) == 1

    def test_empty_source(self):
        result = compile_source("")
        assert result.success
        assert len(result.module) == 0

    def test_function_count(self):
        """Every successful statement adds exactly one function."""
        result = compile_source("def f(x) x; def g() 1; 3; 4")
        assert len(result.module) == 4
        assert result.anonymous == ["__anon_expr", "__anon_expr.1"]

    def test_later_definition_calls_earlier(self):
        assert value_of("def one() 1; def two() one() + one(); two()") == 2


# =============================================================================
# Error Recovery Tests
# =============================================================================

class TestRecovery:
    """Tests for error reporting and resynchronization."""

    def test_unbound_variable_drops_function(self):
        """A body referencing a non-parameter leaves no function behind."""
        result = compile_source("def f() x")
        assert len(result.errors) == 1
        assert isinstance(result.errors[0], UnboundVariableError)
        assert "f" not in result.module
        assert "@f(" not in result.ir

    def test_unknown_function_continues(self):
        """The run continues after a failed call."""
        result = compile_source("foo(1,2); 7")
        assert isinstance(result.errors[0], UnknownFunctionError)
        assert result.module.execute(result.anonymous[-1]) == 7

    def test_syntax_error_resynchronizes(self):
        """After a syntax error one token is skipped and parsing resumes."""
        result = compile_source("def (x) 1; def g() 5")
        assert isinstance(result.errors[0], ToySyntaxError)
        assert "g" in result.defined
        assert result.module.execute("g") == 5

    def test_errors_in_source_order(self):
        result = compile_source("a; 1; b", "prog.toy")
        assert [str(e.location) for e in result.errors] == ["prog.toy:1:1", "prog.toy:1:7"]
        assert result.anonymous == ["__anon_expr.1"]

    def test_failed_anonymous_name_is_not_reused(self):
        """Names of failed top-level expressions are consumed."""
        result = compile_source("x; 1")
        assert result.anonymous == ["__anon_expr.1"]

    def test_conflicting_redefinition(self):
        result = compile_source("def f(x) x; def f(x y) x; f(4)")
        assert isinstance(result.errors[0], SignatureConflictError)
        assert result.module.execute(result.anonymous[0]) == 4

    def test_redefinition_replaces_body(self):
        result = compile_source("def f() 1; def f() 2; f()")
        assert result.success
        assert result.defined == ["f"]
        assert result.module.execute(result.anonymous[0]) == 2

    def test_duplicate_parameter_warning(self):
        result = compile_source("def f(x x) x")
        assert result.success
        assert len(result.warnings) == 1
        assert "duplicate parameter 'x'" in result.warnings[0]

    def test_unknown_character(self):
        result = compile_source("@; 1")
        assert not result.success
        assert result.errors[0].found == "@"
        assert len(result.anonymous) == 1


# =============================================================================
# Long and Deep Statement Tests
# =============================================================================

class TestStatementSize:
    """Tests for statements that are very long or very deeply nested."""

    def test_long_sum_definition(self):
        """A thousand-term sum compiles like any other definition."""
        body = "+".join(["x"] * 1000)
        assert value_of(f"def s(x) {body}; s(2)") == 2000

    def test_long_top_level_sum(self):
        """A long sum of literals as a top-level expression."""
        assert value_of("+".join(["1"] * 1000)) == 1000

    def test_deep_parentheses_are_a_statement_error(self):
        """Nesting past the recursion limit is reported and the run goes on."""
        source = "(" * 5000 + "1" + ")" * 5000 + "; def g() 7"
        result = compile_source(source, "deep.toy")
        assert isinstance(result.errors[0], NestingDepthError)
        assert str(result.errors[0].location) == "deep.toy:1:1"
        assert "g" in result.defined
        assert result.module.execute("g") == 7
        assert "@g(" in result.ir

    def test_deep_calls_are_a_statement_error(self):
        """Deeply nested calls are reported and leave no function behind."""
        source = "def f(x) x; def h(x) " + "f(" * 3000 + "x" + ")" * 3000 + "; h"
        result = compile_source(source)
        assert any(isinstance(e, NestingDepthError) for e in result.errors)
        assert "h" not in result.module
        assert result.defined == ["f"]


# =============================================================================
# Compiler and Options Tests
# =============================================================================

class TestCompiler:
    """Tests for the Compiler class and its options."""

    def test_module_name(self):
        result = Compiler(CompilerOptions(module_name="demo")).compile_source("1")
        assert "demo" in result.ir

    def test_anonymous_prefix(self):
        result = compile_source("1; 2", options=CompilerOptions(anonymous_prefix="main"))
        assert result.anonymous == ["main", "main.1"]

    def test_optimization_disabled(self):
        result = compile_source("def f(x) x + 0", options=CompilerOptions(optimize=False))
        assert "addtmp" in result.module.function_ir("f")

    def test_compile_file(self, tmp_path):
        source = tmp_path / "prog.toy"
        source.write_text("def f() 3\n")
        result = Compiler().compile_file(source)
        assert result.filename == str(source)
        assert result.defined == ["f"]

    def test_missing_file(self, tmp_path):
        with pytest.raises(OSError):
            Compiler().compile_file(tmp_path / "missing.toy")
