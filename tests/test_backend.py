# =============================================================================
# test_backend.py - LLVM Backend Module Tests
# =============================================================================
# Tests for the emission interface over llvmlite.
#
# Test coverage includes:
#   - Declaration, reuse and conflicting arity
#   - Instruction emission, finalization and JIT execution
#   - Erasing partial definitions
#   - Optimization and module dump
# =============================================================================

import pytest
from toylang.backend import BackendModule, BINARY_OPERATORS
from toylang.frontend.errors import SignatureConflictError


# =============================================================================
# Helper Functions
# =============================================================================

@pytest.fixture
def module():
    return BackendModule()


def build_constant(module: BackendModule, name: str, value: int) -> None:
    """Define `name()` returning a constant."""
    handle = module.declare_function(name, 0)
    module.begin_function(handle)
    module.finalize_function(handle, module.emit_constant(value))


def build_binop(module: BackendModule, name: str, op: str) -> None:
    """Define `name(a b)` returning `a op b`."""
    handle = module.declare_function(name, 2, ("a", "b"))
    module.begin_function(handle)
    a, b = handle.arguments
    module.finalize_function(handle, module.emit_binop(op, a, b))


# =============================================================================
# Declaration Tests
# =============================================================================

class TestDeclaration:
    """Tests for function declaration and lookup."""

    def test_declared_function_is_not_committed(self, module):
        """A declaration alone does not add a function."""
        module.declare_function("f", 1)
        assert "f" not in module
        assert len(module) == 0

    def test_handle(self, module):
        """The handle records name and arity; arguments follow the params."""
        handle = module.declare_function("f", 2, ("x", "y"))
        assert handle.name == "f"
        assert handle.arity == 2
        assert len(handle.arguments) == 2
        assert not handle.redefinition

    def test_reuse_same_arity(self, module):
        """Redeclaring a committed function with the same arity is allowed."""
        build_constant(module, "f", 1)
        handle = module.declare_function("f", 0)
        assert handle.redefinition

    def test_conflicting_arity(self, module):
        """Redeclaring with a different arity raises."""
        build_constant(module, "f", 1)
        with pytest.raises(SignatureConflictError, match="conflicting declaration of 'f'"):
            module.declare_function("f", 3)

    def test_lookup(self, module):
        """Lookup sees committed functions and the one being defined."""
        build_constant(module, "g", 1)
        handle = module.declare_function("f", 1)
        assert module.lookup_function("f") is handle
        assert module.lookup_function("g").arity == 0
        assert module.lookup_function("missing") is None

    def test_arity_of(self, module):
        build_constant(module, "f", 1)
        assert module.arity_of("f") == 0
        assert module.arity_of("g") is None


# =============================================================================
# Emission and Execution Tests
# =============================================================================

class TestEmission:
    """Tests for emitting and running functions."""

    def test_operator_table(self):
        """Division maps to unsigned division."""
        assert BINARY_OPERATORS["/"][0] == "udiv"
        assert set(BINARY_OPERATORS) == {"+", "-", "*", "/"}

    def test_constant(self, module):
        build_constant(module, "answer", 42)
        assert module.execute("answer") == 42

    @pytest.mark.parametrize("op,expected", [
        ("+", 13),
        ("-", 7),
        ("*", 30),
        ("/", 3),
    ])
    def test_binary_operators(self, module, op, expected):
        """Each operator computes on 32-bit integers."""
        build_binop(module, "f", op)
        assert module.execute("f", 10, 3) == expected

    def test_constant_wraps_to_32_bits(self, module):
        """Literals wider than 32 bits wrap."""
        build_constant(module, "f", 2**32 + 5)
        assert module.execute("f") == 5

    def test_call(self, module):
        """Calls resolve to committed functions."""
        build_binop(module, "sub", "-")
        handle = module.declare_function("f", 0)
        module.begin_function(handle)
        callee = module.lookup_function("sub")
        result = module.emit_call(
            callee, [module.emit_constant(9), module.emit_constant(4)]
        )
        module.finalize_function(handle, result)
        assert module.execute("f") == 5

    def test_execute_checks_argument_count(self, module):
        build_binop(module, "f", "+")
        with pytest.raises(TypeError):
            module.execute("f", 1)

    def test_execute_unknown_function(self, module):
        with pytest.raises(KeyError):
            module.execute("nope")

    def test_emit_without_body(self, module):
        """Instructions need an open function body."""
        module.declare_function("f", 0)
        with pytest.raises(RuntimeError):
            module.emit_binop("+", module.emit_constant(1), module.emit_constant(2))


# =============================================================================
# Erase Tests
# =============================================================================

class TestErase:
    """Tests for discarding partial definitions."""

    def test_erase_new_function(self, module):
        """An erased function leaves no trace."""
        handle = module.declare_function("f", 0)
        module.begin_function(handle)
        module.erase_function(handle)
        assert "f" not in module
        assert "@f(" not in module.dump()

    def test_erase_keeps_committed_body(self, module):
        """Erasing a redefinition keeps the earlier body."""
        build_constant(module, "f", 1)
        handle = module.declare_function("f", 0)
        module.begin_function(handle)
        module.erase_function(handle)
        assert module.execute("f") == 1

    def test_redefinition_replaces_body(self, module):
        build_constant(module, "f", 1)
        build_constant(module, "f", 2)
        assert module.execute("f") == 2
        assert module.function_names == ["f"]


# =============================================================================
# Optimization and Dump Tests
# =============================================================================

class TestOptimization:
    """Tests for the optimization pipeline and the dump."""

    def test_constant_folding(self, module):
        """The pipeline folds arithmetic on constants."""
        handle = module.declare_function("f", 0)
        module.begin_function(handle)
        value = module.emit_binop(
            "*", module.emit_constant(6), module.emit_constant(7)
        )
        module.finalize_function(handle, value)
        assert "ret i32 42" in module.function_ir("f")

    def test_reoptimize_is_stable(self, module):
        """Running the pipeline again on an optimized function changes nothing."""
        build_binop(module, "f", "+")
        before = module.function_ir("f")
        module.optimize_function("f")
        assert module.function_ir("f") == before

    def test_without_optimization(self):
        """With optimization disabled the instructions are kept as emitted."""
        module = BackendModule(optimize=False)
        handle = module.declare_function("f", 1, ("x",))
        module.begin_function(handle)
        (x,) = handle.arguments
        module.finalize_function(handle, module.emit_binop("+", x, module.emit_constant(0)))
        assert "addtmp" in module.function_ir("f")

    def test_dump_contains_all_functions(self, module):
        build_constant(module, "a", 1)
        build_binop(module, "b", "*")
        ir_text = module.dump()
        assert "@a(" in ir_text
        assert "@b(" in ir_text

    def test_empty_dump(self, module):
        """An empty module still prints."""
        assert "define" not in module.dump()

    @pytest.mark.parametrize("speed_level", [0, 1, 2, 3])
    def test_pipeline_runs_at_every_speed_level(self, speed_level):
        """Definitions finalize and run at every optimization level."""
        module = BackendModule(speed_level=speed_level)
        build_binop(module, "f", "+")
        build_constant(module, "g", 7)
        assert module.execute("f", 2, 3) == 5
        assert module.execute("g") == 7
