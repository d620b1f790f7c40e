"""Huck Type Checker.

Walks an unchecked AST depth-first and rebuilds it as an isomorphic tree whose
nodes carry their ``ResolvedType``. The input tree is never mutated. Checking
stops at the first error.
"""

from __future__ import annotations

import logging
from typing import Optional

from huck.ast_nodes import (
    Expr, ExprVisitor, NumberLiteral, BooleanLiteral, BinaryOp,
    Let, VariableReference, Block, Conditional, binary_chain, format_expr,
)
from huck.errors import (
    TypeCheckError, nesting_too_deep, type_mismatch, unbound_identifier,
)
from huck.parser import parse
from huck.types import ResolvedType, ScopeStack, UNIT, BOOL, INT64

logger = logging.getLogger(__name__)


class TypeChecker(ExprVisitor[Expr]):
    """Type checks a Huck expression tree."""

    def __init__(self, scopes: Optional[ScopeStack] = None):
        self.scopes = scopes if scopes is not None else ScopeStack()

    def check(self, expr: Expr) -> Expr:
        """Return a checked copy of ``expr`` or raise ``TypeCheckError``."""
        depth = self.scopes.depth
        try:
            checked = self.visit(expr)
        except RecursionError:
            self.scopes.unwind(depth)
            raise TypeCheckError(nesting_too_deep("check", expr.location)) from None
        logger.debug("checked expression of type %s", checked.meta)
        return checked

    # -------------------------------------------------------------------
    # Literals
    # -------------------------------------------------------------------

    def visit_NumberLiteral(self, expr: NumberLiteral) -> Expr:
        return NumberLiteral(value=expr.value, meta=INT64, location=expr.location)

    def visit_BooleanLiteral(self, expr: BooleanLiteral) -> Expr:
        return BooleanLiteral(value=expr.value, meta=BOOL, location=expr.location)

    # -------------------------------------------------------------------
    # Operators
    # -------------------------------------------------------------------

    def visit_BinaryOp(self, expr: BinaryOp) -> Expr:
        base, chain = binary_chain(expr)
        left = self.visit(base)
        for node in chain:
            left = self._check_binary(node, left)
        return left

    def _check_binary(self, expr: BinaryOp, left: Expr) -> Expr:
        right = self.visit(expr.right)
        if left.meta != right.meta:
            raise TypeCheckError(type_mismatch(
                expected_type=str(left.meta),
                actual_type=str(right.meta),
                message=(
                    f"Cannot typecheck expressions {format_expr(expr.left)} "
                    f"and {format_expr(expr.right)}: {left.meta} vs {right.meta}"
                ),
                location=expr.location,
                node="binary_op",
                left=format_expr(expr.left),
                right=format_expr(expr.right),
            ))
        return BinaryOp(op=expr.op, left=left, right=right, meta=left.meta, location=expr.location)

    # -------------------------------------------------------------------
    # Bindings
    # -------------------------------------------------------------------

    def visit_Let(self, expr: Let) -> Expr:
        # The name is not in scope for its own initializer.
        initializer = self.visit(expr.initializer)
        self.scopes.define(expr.name, initializer.meta)
        return Let(name=expr.name, initializer=initializer, meta=initializer.meta, location=expr.location)

    def visit_VariableReference(self, expr: VariableReference) -> Expr:
        typ = self.scopes.lookup(expr.name)
        if typ is None:
            raise TypeCheckError(unbound_identifier(expr.name, expr.location))
        return VariableReference(name=expr.name, meta=typ, location=expr.location)

    # -------------------------------------------------------------------
    # Control flow
    # -------------------------------------------------------------------

    def visit_Block(self, expr: Block) -> Expr:
        body: list[Expr] = []
        last_type: ResolvedType = UNIT
        with self.scopes.scope():
            for e in expr.body:
                checked = self.visit(e)
                body.append(checked)
                last_type = checked.meta
        return Block(body=body, meta=last_type, location=expr.location)

    def visit_Conditional(self, expr: Conditional) -> Expr:
        test = self.visit(expr.test)
        if test.meta != BOOL:
            raise TypeCheckError(type_mismatch(
                expected_type=str(BOOL),
                actual_type=str(test.meta),
                message=f"Condition {format_expr(expr.test)} must be Bool, got {test.meta}",
                location=expr.location,
                node="if_condition",
            ))
        then_branch = self.visit(expr.then_branch)
        else_branch = self.visit(expr.else_branch)
        if then_branch.meta != else_branch.meta:
            raise TypeCheckError(type_mismatch(
                expected_type=str(then_branch.meta),
                actual_type=str(else_branch.meta),
                message=(
                    f"Branches of conditional have different types: "
                    f"{then_branch.meta} vs {else_branch.meta}"
                ),
                location=expr.location,
                node="if_branches",
                then_branch=format_expr(expr.then_branch),
                else_branch=format_expr(expr.else_branch),
            ))
        return Conditional(
            test=test, then_branch=then_branch, else_branch=else_branch,
            meta=then_branch.meta, location=expr.location,
        )


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def check(expr: Expr, scopes: Optional[ScopeStack] = None) -> Expr:
    """Type check an unchecked expression, returning the checked tree."""
    return TypeChecker(scopes).check(expr)


def check_source(source: str, filename: str = "<stdin>") -> Expr:
    """Scan, parse and type check Huck source code."""
    return check(parse(source, filename))
