"""Huck Type System.

Resolved types: Unit, Bool, Int64.
Scope stack for identifier resolution during checking.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from enum import Enum
from typing import Iterator, Optional

logger = logging.getLogger(__name__)


class ResolvedType(Enum):
    # Only produced for a block with no elements, which the parser rejects.
    UNIT = "Unit"
    BOOL = "Bool"
    INT64 = "Int64"

    def __str__(self) -> str:
        return self.value


UNIT = ResolvedType.UNIT
BOOL = ResolvedType.BOOL
INT64 = ResolvedType.INT64


class ScopeStack:
    """Stack of lexical scopes mapping names to resolved types.

    Lookup walks from the innermost scope outward; the first hit wins.
    """

    def __init__(self) -> None:
        self._scopes: list[dict[str, ResolvedType]] = [{}]

    @property
    def depth(self) -> int:
        return len(self._scopes)

    def push(self) -> None:
        self._scopes.append({})
        logger.debug("push scope (depth %d)", len(self._scopes))

    def pop(self) -> dict[str, ResolvedType]:
        if len(self._scopes) == 1:
            raise RuntimeError("Cannot pop the outermost scope")
        scope = self._scopes.pop()
        logger.debug("pop scope (depth %d)", len(self._scopes) + 1)
        return scope

    def unwind(self, depth: int) -> None:
        """Drop every scope above ``depth``; the outermost scope always stays."""
        del self._scopes[max(depth, 1):]
        logger.debug("unwound scopes (depth %d)", len(self._scopes))

    @contextmanager
    def scope(self) -> Iterator[None]:
        """Push a scope for the duration of the ``with`` body, popping it on any exit."""
        depth = len(self._scopes)
        try:
            self.push()
            yield
        finally:
            self.unwind(depth)

    def define(self, name: str, typ: ResolvedType) -> None:
        self._scopes[-1][name] = typ

    def lookup(self, name: str) -> Optional[ResolvedType]:
        for scope in reversed(self._scopes):
            if name in scope:
                return scope[name]
        return None
