"""Huck LLVM Back End Tests — EMIT-001 through EMIT-003.

P1 tests must pass before any external demo.
"""

import pytest

from huck.emit import emit, compile_to_assembly, compile_to_object, run_jit
from huck.parser import parse
from huck.typecheck import check_source


def ir_for(source):
    return emit(check_source(source), "test")


class TestEMIT001:
    """EMIT-001: Checked programs lower to a main function.
    Priority: P1
    """

    def test_number_emits_main(self):
        """priority_p1: A literal becomes a returned i64 constant."""
        llvm_ir = ir_for("42")
        assert "define i64 @\"main\"()" in llvm_ir or "define i64 @main()" in llvm_ir
        assert "ret i64 42" in llvm_ir

    def test_arithmetic_instructions(self):
        """priority_p1: Operators map to integer instructions."""
        llvm_ir = ir_for("{let a = 6; let b = 3; a + b - a * b / b}")
        for instr in ("add i64", "sub i64", "mul i64", "udiv i64"):
            assert instr in llvm_ir

    def test_bool_result_is_widened(self):
        """priority_p1: A Bool program returns its value zero-extended."""
        llvm_ir = ir_for("true")
        assert "zext i1" in llvm_ir

    def test_conditional_uses_phi(self):
        """priority_p1: Conditionals lower to branches joined by a phi."""
        llvm_ir = ir_for("if true { 1 } else { 2 }")
        assert "br i1" in llvm_ir
        assert "phi i64" in llvm_ir

    def test_unchecked_conditional_rejected(self):
        """priority_p1: The back end needs resolved types."""
        with pytest.raises(ValueError):
            emit(parse("if true { 1 } else { 2 }"))


class TestEMIT002:
    """EMIT-002: JIT execution agrees with the evaluator.
    Priority: P1
    """

    @pytest.mark.parametrize("source, expected", [
        ("{let x = 42; x + 1}", 43),
        ("1 - 2 * 3", 2 ** 64 - 5),
        ("(1 + 2) / 3", 1),
        ("{let x = 1; {let x = 10; x}; x}", 1),
        ("if false { 1 } else { if true { 20 } else { 30 } }", 20),
        ("{let t = true; t}", 1),
        ("18446744073709551615", 2 ** 64 - 1),
    ])
    def test_run(self, source, expected):
        """priority_p1: JIT-compiled main returns the program's value."""
        assert run_jit(ir_for(source)) == expected


class TestEMIT003:
    """EMIT-003: Native assembly.
    Priority: P2
    """

    def test_assembly(self):
        """priority_p2: IR compiles to non-empty native assembly."""
        asm = compile_to_assembly(ir_for("{let x = 2; x * 21}"))
        assert "main" in asm

    def test_object_code(self):
        """priority_p2: IR compiles to a non-empty native object file."""
        obj = compile_to_object(ir_for("if true { 6 * 7 } else { 0 }"), opt_level=0)
        assert isinstance(obj, bytes)
        assert len(obj) > 0

    def test_long_chain_runs(self):
        """priority_p2: Long operator chains lower without exhausting the stack."""
        assert run_jit(ir_for(" + ".join(["1"] * 3000))) == 3000
