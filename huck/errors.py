"""Structured error objects for the Huck front end.

Every stage fails fast with a single machine-readable error record wrapped in
an exception. Records serialise to JSON so the CLI (or any other caller) can
report them without parsing message strings.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional


class ErrorKind(Enum):
    INVALID_CHARACTER = "invalid_character"
    UNEXPECTED_EOF = "unexpected_eof"
    UNEXPECTED_TOKEN = "unexpected_token"
    NO_PARSE_RULE = "no_parse_rule"
    TYPE_MISMATCH = "type_mismatch"
    UNBOUND_IDENTIFIER = "unbound_identifier"
    DIVISION_BY_ZERO = "division_by_zero"
    NESTING_TOO_DEEP = "nesting_too_deep"


@dataclass(frozen=True)
class SourceLocation:
    line: int
    column: int
    file: str = "<stdin>"

    def __str__(self) -> str:
        return f"{self.file}:{self.line}:{self.column}"


@dataclass
class HuckError:
    kind: ErrorKind
    message: str
    location: Optional[SourceLocation] = None
    details: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {
            "kind": self.kind.value,
            "message": self.message,
        }
        if self.location:
            d["location"] = {
                "file": self.location.file,
                "line": self.location.line,
                "column": self.location.column,
            }
        if self.details:
            d["details"] = self.details
        return d

    def __str__(self) -> str:
        loc = f" at {self.location}" if self.location else ""
        return f"[{self.kind.value}]{loc}: {self.message}"


# ---------------------------------------------------------------------------
# Factories
# ---------------------------------------------------------------------------

def invalid_character(
    char: str,
    location: Optional[SourceLocation] = None,
) -> HuckError:
    return HuckError(
        kind=ErrorKind.INVALID_CHARACTER,
        message=f"Unexpected character {char!r}",
        location=location,
        details={"character": char},
    )


def unexpected_eof(
    expected: str,
    location: Optional[SourceLocation] = None,
) -> HuckError:
    return HuckError(
        kind=ErrorKind.UNEXPECTED_EOF,
        message=f"Unexpected end of input, expected {expected}",
        location=location,
        details={"expected": expected},
    )


def unexpected_token(
    message: str,
    found: str,
    location: Optional[SourceLocation] = None,
) -> HuckError:
    return HuckError(
        kind=ErrorKind.UNEXPECTED_TOKEN,
        message=message,
        location=location,
        details={"found": found},
    )


def no_parse_rule(
    rule: str,
    token_type: str,
    location: Optional[SourceLocation] = None,
) -> HuckError:
    """A token whose kind has no prefix (or infix) rule at all."""
    return HuckError(
        kind=ErrorKind.NO_PARSE_RULE,
        message=f"No {rule} rule for token type {token_type}",
        location=location,
        details={"rule": rule, "token_type": token_type},
    )


def type_mismatch(
    expected_type: str,
    actual_type: str,
    message: str,
    location: Optional[SourceLocation] = None,
    **details: Any,
) -> HuckError:
    all_details: dict[str, Any] = {
        "expected_type": expected_type,
        "actual_type": actual_type,
    }
    all_details.update(details)
    return HuckError(
        kind=ErrorKind.TYPE_MISMATCH,
        message=message,
        location=location,
        details=all_details,
    )


def unbound_identifier(
    name: str,
    location: Optional[SourceLocation] = None,
) -> HuckError:
    return HuckError(
        kind=ErrorKind.UNBOUND_IDENTIFIER,
        message=f"Undefined name '{name}'",
        location=location,
        details={"name": name},
    )


def division_by_zero(location: Optional[SourceLocation] = None) -> HuckError:
    return HuckError(
        kind=ErrorKind.DIVISION_BY_ZERO,
        message="Division by zero",
        location=location,
    )


def nesting_too_deep(
    stage: str,
    location: Optional[SourceLocation] = None,
) -> HuckError:
    return HuckError(
        kind=ErrorKind.NESTING_TOO_DEEP,
        message=f"Expression is nested too deeply to {stage}",
        location=location,
        details={"stage": stage},
    )


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------

class CompileError(Exception):
    """Exception wrapping one or more HuckErrors."""

    def __init__(self, errors: list[HuckError] | HuckError):
        if isinstance(errors, HuckError):
            errors = [errors]
        self.errors = errors
        super().__init__(self._format())

    @property
    def error(self) -> HuckError:
        return self.errors[0]

    @property
    def kind(self) -> ErrorKind:
        return self.errors[0].kind

    def _format(self) -> str:
        return "\n".join(str(e) for e in self.errors)

    def to_json(self, indent: int = 2) -> str:
        return json.dumps([e.to_dict() for e in self.errors], indent=indent)


class ScanError(CompileError):
    pass


class ParseError(CompileError):
    pass


class TypeCheckError(CompileError):
    pass


class EvaluationError(CompileError):
    pass
