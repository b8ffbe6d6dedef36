"""
LLVM Backend Module
===================

This module adapts llvmlite to the narrow emission interface used by the
toylang code generator. The code generator only declares functions,
emits instructions into the current one, and finalizes or erases it;
everything about the instruction representation, verification,
optimization and textual form belongs to LLVM.

Module Model
------------
Every definition is built in its own staging `llvmlite.ir.Module` that
also declares all functions already committed, so calls (including
recursive ones) resolve. Finalizing a definition:

1. emits the return instruction
2. parses the staging module with the LLVM binding and verifies it
3. runs the function optimization pipeline on the new function, once
4. commits the optimized module, replacing any earlier body of the
   same function

Erasing simply drops the staging module, so a failed definition never
changes what was committed before it started.

`dump()` links every committed definition into one module and returns
its LLVM assembly.

Value Type
----------
All values are 32-bit integers. Literals wider than 32 bits wrap.

Usage
-----
>>> module = BackendModule()
>>> handle = module.declare_function("answer", 0)
>>> builder = module.begin_function(handle)
>>> module.finalize_function(handle, module.emit_constant(42))
>>> module.execute("answer")
42
"""

from dataclasses import dataclass
from typing import Optional, Sequence
import ctypes
import logging

from llvmlite import binding as llvm
from llvmlite import ir

from toylang.errors import SourceLocation
from toylang.frontend.errors import SignatureConflictError, VerificationError

logger = logging.getLogger(__name__)


# The single value type of the language
INT_TYPE = ir.IntType(32)

# Binary operator -> (IRBuilder method, result name)
BINARY_OPERATORS: dict[str, tuple[str, str]] = {
    "+": ("add", "addtmp"),
    "-": ("sub", "subtmp"),
    "*": ("mul", "multmp"),
    "/": ("udiv", "divtmp"),
}

DEFAULT_MODULE_NAME = "my compiler"

_llvm_initialized = False


def _initialize_llvm() -> None:
    """Initialize the native target once per process."""
    global _llvm_initialized
    if not _llvm_initialized:
        llvm.initialize_native_target()
        llvm.initialize_native_asmprinter()
        _llvm_initialized = True


def _wrap_int32(value: int) -> int:
    """Wrap an arbitrary integer into the signed 32-bit range."""
    return ((value + 2**31) % 2**32) - 2**31


@dataclass
class FunctionHandle:
    """
    A function declared in the backend module.

    Attributes:
        name: Function name
        arity: Number of integer parameters
        function: The llvmlite function in the staging module
        redefinition: True if a body for this name was already committed
    """
    name: str
    arity: int
    function: ir.Function
    redefinition: bool = False

    @property
    def arguments(self) -> tuple:
        """Backend argument values, in parameter order."""
        return self.function.args


class BackendModule:
    """
    Collection of compiled functions backed by LLVM.

    Attributes:
        name: Module identifier printed in the dump
        optimize: Run the optimization pipeline after each definition
        speed_level: Optimization level of the pipeline (0-3)
        triple: Target triple of the host
    """

    def __init__(
        self,
        name: str = DEFAULT_MODULE_NAME,
        optimize: bool = True,
        speed_level: int = 2,
    ):
        _initialize_llvm()

        self.name = name
        self.optimize = optimize
        self.speed_level = speed_level
        self.triple = llvm.get_default_triple()
        self._target = llvm.Target.from_triple(self.triple)
        self._target_machine = self._target.create_target_machine()

        # Committed functions, in first-definition order
        self._arities: dict[str, int] = {}
        self._definitions: dict[str, llvm.ModuleRef] = {}

        # Definition in progress
        self._staging: Optional[ir.Module] = None
        self._current: Optional[FunctionHandle] = None
        self._builder: Optional[ir.IRBuilder] = None

    # =========================================================================
    # Inspection
    # =========================================================================

    @property
    def function_names(self) -> list[str]:
        """Names of all committed functions, in definition order."""
        return list(self._definitions)

    def __contains__(self, name: str) -> bool:
        return name in self._definitions

    def __len__(self) -> int:
        return len(self._definitions)

    def arity_of(self, name: str) -> Optional[int]:
        """Return the arity of a committed function, or None."""
        return self._arities.get(name)

    # =========================================================================
    # Declaration
    # =========================================================================

    def _function_type(self, arity: int) -> ir.FunctionType:
        return ir.FunctionType(INT_TYPE, [INT_TYPE] * arity)

    def _new_ir_module(self) -> ir.Module:
        module = ir.Module(name=self.name)
        module.triple = self.triple
        return module

    def declare_function(
        self,
        name: str,
        arity: int,
        params: Sequence[str] = (),
        location: Optional[SourceLocation] = None,
    ) -> FunctionHandle:
        """
        Declare a function returning an integer and taking `arity`
        integer parameters.

        A function already committed under the same name and arity is
        reused; the next definition replaces its body.

        Args:
            name: Function name
            arity: Number of parameters
            params: Optional parameter names, used to name the arguments
            location: Source location for diagnostics

        Raises:
            SignatureConflictError: If `name` exists with another arity
        """
        existing = self._arities.get(name)
        if existing is not None and existing != arity:
            raise SignatureConflictError(name, existing, arity, location)

        staging = self._new_ir_module()
        for other, other_arity in self._arities.items():
            if other != name:
                ir.Function(staging, self._function_type(other_arity), other)

        function = ir.Function(staging, self._function_type(arity), name)
        for arg, param in zip(function.args, params):
            arg.name = param

        self._staging = staging
        self._builder = None
        self._current = FunctionHandle(
            name=name,
            arity=arity,
            function=function,
            redefinition=existing is not None,
        )
        handle = self._current
        logger.debug(
            f"Declared '{name}' with {arity} parameter(s)"
            f"{' (reusing existing declaration)' if handle.redefinition else ''}"
        )
        return handle

    def lookup_function(self, name: str) -> Optional[FunctionHandle]:
        """
        Resolve a function by name.

        Only valid while a definition is in progress; it sees every
        committed function and the function being defined. Returns None
        for unknown names.
        """
        if self._current is not None and name == self._current.name:
            return self._current

        arity = self._arities.get(name)
        if arity is None or self._staging is None:
            return None

        function = self._staging.globals[name]
        return FunctionHandle(name=name, arity=arity, function=function, redefinition=True)

    # =========================================================================
    # Emission
    # =========================================================================

    def begin_function(self, handle: FunctionHandle) -> ir.IRBuilder:
        """Open the entry block of `handle` and return its builder."""
        if handle is not self._current:
            raise RuntimeError(f"function '{handle.name}' is not being defined")
        block = handle.function.append_basic_block("entry")
        self._builder = ir.IRBuilder(block)
        return self._builder

    def _require_builder(self) -> ir.IRBuilder:
        if self._builder is None:
            raise RuntimeError("no function body is open")
        return self._builder

    def emit_constant(self, value: int) -> ir.Constant:
        """Return an integer constant."""
        return ir.Constant(INT_TYPE, _wrap_int32(value))

    def emit_binop(self, op: str, lhs: ir.Value, rhs: ir.Value) -> ir.Value:
        """
        Emit a binary arithmetic instruction.

        Division is unsigned. `op` must be a key of BINARY_OPERATORS.
        """
        method, result_name = BINARY_OPERATORS[op]
        return getattr(self._require_builder(), method)(lhs, rhs, result_name)

    def emit_call(self, handle: FunctionHandle, args: Sequence[ir.Value]) -> ir.Value:
        """Emit a call to `handle` with the given argument values."""
        return self._require_builder().call(handle.function, list(args), "calltmp")

    # =========================================================================
    # Completion
    # =========================================================================

    def finalize_function(
        self,
        handle: FunctionHandle,
        return_value: ir.Value,
        location: Optional[SourceLocation] = None,
    ) -> None:
        """
        Return `return_value` from the function, verify it, optimize it
        and commit it to the module.

        Raises:
            VerificationError: If LLVM rejects the function
        """
        self._require_builder().ret(return_value)

        try:
            compiled = llvm.parse_assembly(str(self._staging))
            compiled.verify()
        except RuntimeError as e:
            logger.debug(f"Verification of '{handle.name}' failed: {e}")
            raise VerificationError(handle.name, str(e), location) from e

        if self.optimize:
            self._run_pipeline(compiled, handle.name)

        self._arities[handle.name] = handle.arity
        self._definitions[handle.name] = compiled
        self._reset_staging()
        logger.debug(f"Committed '{handle.name}'")

    def erase_function(self, handle: FunctionHandle) -> None:
        """
        Discard the function being defined.

        The module is left exactly as it was before `handle` was
        declared; an earlier committed body of the same name survives.
        """
        if handle is self._current:
            self._reset_staging()
        logger.debug(f"Erased partial definition of '{handle.name}'")

    def _reset_staging(self) -> None:
        self._staging = None
        self._current = None
        self._builder = None

    # =========================================================================
    # Optimization
    # =========================================================================

    def _run_pipeline(self, compiled: llvm.ModuleRef, name: str) -> None:
        """
        Run the LLVM function simplification pipeline on one function.

        At speed level 2 this includes alias analysis, instruction
        combining, reassociation and global value numbering.
        """
        pto = llvm.create_pipeline_tuning_options(speed_level=self.speed_level)
        pass_builder = llvm.create_pass_builder(self._target_machine, pto)
        function_passes = pass_builder.getFunctionPassManager()
        function_passes.run(compiled.get_function(name), pass_builder)

    def optimize_function(self, name: str) -> None:
        """
        Run the optimization pipeline again on a committed function.

        Raises:
            KeyError: If no function named `name` is committed
        """
        self._run_pipeline(self._definitions[name], name)

    def function_ir(self, name: str) -> str:
        """Return the LLVM assembly of one committed function."""
        return str(self._definitions[name].get_function(name))

    # =========================================================================
    # Output and Execution
    # =========================================================================

    def _link(self) -> llvm.ModuleRef:
        """Link every committed definition into a fresh module."""
        linked = llvm.parse_assembly(str(self._new_ir_module()))
        linked.name = self.name
        for compiled in self._definitions.values():
            linked.link_in(compiled, preserve=True)
        linked.verify()
        return linked

    def dump(self) -> str:
        """Return the LLVM assembly of the whole module."""
        return str(self._link())

    def execute(self, name: str, *args: int) -> int:
        """
        JIT-compile the module and call function `name`.

        Args:
            name: A committed function
            args: Integer arguments, one per parameter

        Returns:
            The function result as a signed 32-bit integer

        Raises:
            KeyError: If no function named `name` is committed
            TypeError: If the argument count does not match the arity
        """
        arity = self._arities[name]
        if len(args) != arity:
            raise TypeError(f"'{name}' expects {arity} argument(s), got {len(args)}")

        # The engine takes ownership of both the module and the target machine
        engine = llvm.create_mcjit_compiler(
            self._link(), self._target.create_target_machine()
        )
        engine.finalize_object()
        engine.run_static_constructors()

        address = engine.get_function_address(name)
        prototype = ctypes.CFUNCTYPE(ctypes.c_int32, *([ctypes.c_int32] * arity))
        result = prototype(address)(*(_wrap_int32(a) for a in args))
        logger.debug(f"Executed '{name}'{args} -> {result}")
        return result
