"""Reference evaluator for checked Huck expressions.

Integers are unsigned 64-bit values with wrapping ``+``, ``-`` and ``*`` and
truncating unsigned ``/``. Division by zero raises ``EvaluationError``.
"""

from __future__ import annotations

from typing import Union

from huck.ast_nodes import (
    Expr, ExprVisitor, NumberLiteral, BooleanLiteral, BinaryOp, BinOpKind,
    Let, VariableReference, Block, Conditional, binary_chain,
)
from huck.errors import (
    EvaluationError, division_by_zero, nesting_too_deep, unbound_identifier,
)

Value = Union[int, bool]

_MASK = 2 ** 64 - 1


class Evaluator(ExprVisitor[Value]):

    def __init__(self) -> None:
        self._frames: list[dict[str, Value]] = [{}]

    def visit_NumberLiteral(self, expr: NumberLiteral) -> Value:
        return expr.value

    def visit_BooleanLiteral(self, expr: BooleanLiteral) -> Value:
        return expr.value

    def visit_BinaryOp(self, expr: BinaryOp) -> Value:
        base, chain = binary_chain(expr)
        value = self.visit(base)
        for node in chain:
            value = self._combine(node, value, self.visit(node.right))
        return value

    def _combine(self, expr: BinaryOp, left: Value, right: Value) -> Value:
        if isinstance(left, bool):
            # i1 arithmetic, matching what the LLVM back end emits
            left, right = int(left), int(right)
            return bool(_apply(expr, left, right) & 1)
        return _apply(expr, left, right)

    def visit_Let(self, expr: Let) -> Value:
        value = self.visit(expr.initializer)
        self._frames[-1][expr.name] = value
        return value

    def visit_VariableReference(self, expr: VariableReference) -> Value:
        for frame in reversed(self._frames):
            if expr.name in frame:
                return frame[expr.name]
        raise EvaluationError(unbound_identifier(expr.name, expr.location))

    def visit_Block(self, expr: Block) -> Value:
        self._frames.append({})
        try:
            value: Value = 0
            for e in expr.body:
                value = self.visit(e)
            return value
        finally:
            self._frames.pop()

    def visit_Conditional(self, expr: Conditional) -> Value:
        if self.visit(expr.test):
            return self.visit(expr.then_branch)
        return self.visit(expr.else_branch)


def _apply(expr: BinaryOp, left: int, right: int) -> int:
    if expr.op == BinOpKind.ADD:
        return (left + right) & _MASK
    if expr.op == BinOpKind.SUB:
        return (left - right) & _MASK
    if expr.op == BinOpKind.MUL:
        return (left * right) & _MASK
    if right == 0:
        raise EvaluationError(division_by_zero(expr.location))
    return left // right


def evaluate(expr: Expr) -> Value:
    """Evaluate a checked expression and return its value."""
    try:
        return Evaluator().visit(expr)
    except RecursionError:
        raise EvaluationError(nesting_too_deep("evaluate", expr.location)) from None
