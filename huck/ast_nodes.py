"""Huck AST Node definitions.

One tree shape serves both stages of the front end. Every node carries a
``meta`` slot: the parser leaves it as ``None`` and the type checker builds a
new, isomorphic tree whose ``meta`` holds the node's ``ResolvedType``.

Expressions: number and boolean literals, arithmetic, let bindings, variable
references, blocks and two-armed conditionals.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Generic, Optional, TypeVar

from huck.errors import SourceLocation

M = TypeVar("M")
R = TypeVar("R")


class BinOpKind(Enum):
    ADD = "+"
    SUB = "-"
    MUL = "*"
    DIV = "/"

    def __str__(self) -> str:
        return self.value


# ---------------------------------------------------------------------------
# Expressions
# ---------------------------------------------------------------------------

@dataclass(kw_only=True)
class Expr(Generic[M]):
    meta: Optional[M] = None
    location: Optional[SourceLocation] = field(default=None, compare=False, repr=False)

    def to_dict(self) -> dict[str, Any]:
        return _DictBuilder().visit(self)

    def __str__(self) -> str:
        return format_expr(self)


@dataclass(kw_only=True)
class NumberLiteral(Expr[M]):
    value: int = 0


@dataclass(kw_only=True)
class BooleanLiteral(Expr[M]):
    value: bool = False


@dataclass(kw_only=True)
class BinaryOp(Expr[M]):
    op: BinOpKind = BinOpKind.ADD
    left: Expr[M] = field(default_factory=Expr)
    right: Expr[M] = field(default_factory=Expr)


@dataclass(kw_only=True)
class Let(Expr[M]):
    name: str = ""
    initializer: Expr[M] = field(default_factory=Expr)


@dataclass(kw_only=True)
class VariableReference(Expr[M]):
    name: str = ""


@dataclass(kw_only=True)
class Block(Expr[M]):
    """Sequence of expressions; its value is the value of the last one."""
    body: list[Expr[M]] = field(default_factory=list)


@dataclass(kw_only=True)
class Conditional(Expr[M]):
    """if test { then_branch } else { else_branch }"""
    test: Expr[M] = field(default_factory=Expr)
    then_branch: Expr[M] = field(default_factory=Expr)
    else_branch: Expr[M] = field(default_factory=Expr)


# ---------------------------------------------------------------------------
# Traversal
# ---------------------------------------------------------------------------

class ExprVisitor(Generic[R]):
    """Dispatches each node to ``visit_<NodeClass>``."""

    def visit(self, expr: Expr) -> R:
        method = getattr(self, f"visit_{type(expr).__name__}", None)
        if method is None:
            raise TypeError(f"{type(self).__name__} cannot visit {type(expr).__name__}")
        return method(expr)


def binary_chain(expr: Expr) -> tuple[Expr, list[BinaryOp]]:
    """Split a left-nested operator chain such as ``1 + 2 + 3``.

    Returns the leftmost non-operator operand and the ``BinaryOp`` nodes
    ordered innermost first, so passes can fold long chains in a loop
    instead of recursing once per operator.
    """
    chain: list[BinaryOp] = []
    while isinstance(expr, BinaryOp):
        chain.append(expr)
        expr = expr.left
    chain.reverse()
    return expr, chain


class _Formatter(ExprVisitor[str]):

    def visit_NumberLiteral(self, expr: NumberLiteral) -> str:
        return str(expr.value)

    def visit_BooleanLiteral(self, expr: BooleanLiteral) -> str:
        return "true" if expr.value else "false"

    def visit_BinaryOp(self, expr: BinaryOp) -> str:
        base, chain = binary_chain(expr)
        text = self.visit(base)
        for node in chain:
            text = f"({node.op} {text} {self.visit(node.right)})"
        return text

    def visit_Let(self, expr: Let) -> str:
        return f"(let {expr.name} {self.visit(expr.initializer)})"

    def visit_VariableReference(self, expr: VariableReference) -> str:
        return expr.name

    def visit_Block(self, expr: Block) -> str:
        inner = " ".join(self.visit(e) for e in expr.body)
        return f"{{{inner}}}"

    def visit_Conditional(self, expr: Conditional) -> str:
        return (
            f"(if {self.visit(expr.test)} "
            f"{self.visit(expr.then_branch)} {self.visit(expr.else_branch)})"
        )


class _DictBuilder(ExprVisitor[dict]):

    def _node(self, expr: Expr, **fields: Any) -> dict[str, Any]:
        d: dict[str, Any] = {"node": type(expr).__name__}
        d.update(fields)
        if expr.meta is not None:
            d["type"] = str(expr.meta)
        return d

    def visit_NumberLiteral(self, expr: NumberLiteral) -> dict:
        return self._node(expr, value=expr.value)

    def visit_BooleanLiteral(self, expr: BooleanLiteral) -> dict:
        return self._node(expr, value=expr.value)

    def visit_BinaryOp(self, expr: BinaryOp) -> dict:
        return self._node(expr, op=expr.op.value, left=self.visit(expr.left), right=self.visit(expr.right))

    def visit_Let(self, expr: Let) -> dict:
        return self._node(expr, name=expr.name, initializer=self.visit(expr.initializer))

    def visit_VariableReference(self, expr: VariableReference) -> dict:
        return self._node(expr, name=expr.name)

    def visit_Block(self, expr: Block) -> dict:
        return self._node(expr, body=[self.visit(e) for e in expr.body])

    def visit_Conditional(self, expr: Conditional) -> dict:
        return self._node(
            expr,
            test=self.visit(expr.test),
            then_branch=self.visit(expr.then_branch),
            else_branch=self.visit(expr.else_branch),
        )


def format_expr(expr: Expr) -> str:
    """Render an expression as an s-expression, e.g. ``(- 1 (* 2 3))``."""
    return _Formatter().visit(expr)
