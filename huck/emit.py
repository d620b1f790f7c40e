"""Huck LLVM back end.

Checked AST → LLVM IR via llvmlite. The program becomes a single
``i64 @main()`` returning the value of the root expression. Machine code
generation and optimisation are left to LLVM.
"""

from __future__ import annotations

import ctypes
import logging
from typing import Any, Optional

from llvmlite import ir as llvm_ir
from llvmlite import binding as llvm_binding

from huck.ast_nodes import (
    Expr, ExprVisitor, NumberLiteral, BooleanLiteral, BinaryOp, BinOpKind,
    Let, VariableReference, Block, Conditional, binary_chain,
)
from huck.types import ResolvedType, BOOL, INT64

logger = logging.getLogger(__name__)

I64 = llvm_ir.IntType(64)
I1 = llvm_ir.IntType(1)


# ---------------------------------------------------------------------------
# LLVM type mapping
# ---------------------------------------------------------------------------

def _get_llvm_type(typ: ResolvedType) -> Any:
    """Map a resolved type to its llvmlite IR type."""
    mapping = {
        INT64: I64,
        BOOL: I1,
    }
    if typ not in mapping:
        raise ValueError(f"No LLVM representation for type {typ}")
    return mapping[typ]


class LLVMEmitter(ExprVisitor[Any]):
    """Emits LLVM IR from a checked expression tree."""

    def __init__(self) -> None:
        self.module: Optional[Any] = None
        self._builder: Optional[Any] = None
        self._named_values: list[dict[str, Any]] = []

    def emit_module(self, expr: Expr, module_name: str = "huck") -> str:
        """Emit LLVM IR for a whole program. Returns LLVM IR string."""
        self.module = llvm_ir.Module(name=module_name)
        self.module.triple = llvm_binding.get_default_triple()

        fn_type = llvm_ir.FunctionType(I64, [])
        func = llvm_ir.Function(self.module, fn_type, name="main")
        block = func.append_basic_block(name="entry")
        self._builder = llvm_ir.IRBuilder(block)
        self._named_values = [{}]

        value = self.visit(expr)
        if expr.meta == BOOL:
            value = self._builder.zext(value, I64, name="ret")
        self._builder.ret(value)

        logger.debug("emitted module %s", module_name)
        return str(self.module)

    def visit_NumberLiteral(self, expr: NumberLiteral) -> Any:
        # i64 constants are printed signed; keep the same bit pattern.
        value = expr.value
        if value >= 2 ** 63:
            value -= 2 ** 64
        return llvm_ir.Constant(I64, value)

    def visit_BooleanLiteral(self, expr: BooleanLiteral) -> Any:
        return llvm_ir.Constant(I1, 1 if expr.value else 0)

    def visit_BinaryOp(self, expr: BinaryOp) -> Any:
        base, chain = binary_chain(expr)
        value = self.visit(base)
        for node in chain:
            value = self._emit_binary(node, value, self.visit(node.right))
        return value

    def _emit_binary(self, expr: BinaryOp, left: Any, right: Any) -> Any:
        if expr.op == BinOpKind.ADD:
            return self._builder.add(left, right, name="add")
        if expr.op == BinOpKind.SUB:
            return self._builder.sub(left, right, name="sub")
        if expr.op == BinOpKind.MUL:
            return self._builder.mul(left, right, name="mul")
        return self._builder.udiv(left, right, name="div")

    def visit_Let(self, expr: Let) -> Any:
        value = self.visit(expr.initializer)
        self._named_values[-1][expr.name] = value
        return value

    def visit_VariableReference(self, expr: VariableReference) -> Any:
        for scope in reversed(self._named_values):
            if expr.name in scope:
                return scope[expr.name]
        raise KeyError(expr.name)

    def visit_Block(self, expr: Block) -> Any:
        self._named_values.append({})
        try:
            value = None
            for e in expr.body:
                value = self.visit(e)
            return value
        finally:
            self._named_values.pop()

    def visit_Conditional(self, expr: Conditional) -> Any:
        cond = self.visit(expr.test)
        with self._builder.if_else(cond) as (then, otherwise):
            with then:
                then_value = self.visit(expr.then_branch)
                then_block = self._builder.block
            with otherwise:
                else_value = self.visit(expr.else_branch)
                else_block = self._builder.block
        phi = self._builder.phi(_get_llvm_type(expr.meta), name="ifval")
        phi.add_incoming(then_value, then_block)
        phi.add_incoming(else_value, else_block)
        return phi


# ---------------------------------------------------------------------------
# Native code generation
# ---------------------------------------------------------------------------

def _initialize_llvm() -> None:
    """Initialize LLVM target machinery."""
    llvm_binding.initialize_native_target()
    llvm_binding.initialize_native_asmprinter()


def _create_target_machine(opt_level: int) -> Any:
    target = llvm_binding.Target.from_default_triple()
    return target.create_target_machine(opt=opt_level)


def _parse_and_verify(llvm_ir_str: str) -> Any:
    _initialize_llvm()
    mod = llvm_binding.parse_assembly(llvm_ir_str)
    mod.verify()
    return mod


def compile_to_object(llvm_ir_str: str, opt_level: int = 2) -> bytes:
    """Compile LLVM IR string to native object code."""
    mod = _parse_and_verify(llvm_ir_str)
    return _create_target_machine(opt_level).emit_object(mod)


def compile_to_assembly(llvm_ir_str: str, opt_level: int = 2) -> str:
    """Compile LLVM IR string to native assembly."""
    mod = _parse_and_verify(llvm_ir_str)
    return _create_target_machine(opt_level).emit_assembly(mod)


def run_jit(llvm_ir_str: str) -> int:
    """JIT-compile the module and return the result of ``main``.

    Runs native code in this process. The emitted ``udiv`` has no zero check,
    so a program that divides by zero traps and takes the interpreter down
    with it. Screen programs with ``huck.evaluate.evaluate`` first when that
    matters.
    """
    mod = _parse_and_verify(llvm_ir_str)
    with llvm_binding.create_mcjit_compiler(mod, _create_target_machine(0)) as engine:
        engine.finalize_object()
        engine.run_static_constructors()
        address = engine.get_function_address("main")
        main = ctypes.CFUNCTYPE(ctypes.c_uint64)(address)
        return main()


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def emit(expr: Expr, module_name: str = "huck") -> str:
    """Emit LLVM IR for a checked expression. Returns LLVM IR string."""
    return LLVMEmitter().emit_module(expr, module_name)
