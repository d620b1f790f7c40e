"""Huck Lexer — lazy tokenizer with line/column tracking.

The scanner is an iterator: each call to ``next()`` skips whitespace and
produces exactly one token. Iteration stops at end of input; a character the
language does not recognise raises ``ScanError``. A scanner is not restartable,
scanning the same text again needs a fresh ``Scanner``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Iterator, Optional

from huck.errors import SourceLocation, ScanError, invalid_character

logger = logging.getLogger(__name__)


class TokenType(Enum):
    # Keywords
    LET = auto()
    IF = auto()
    ELSE = auto()
    TRUE = auto()
    FALSE = auto()

    # Literals
    NUMBER = auto()

    # Identifier
    IDENT = auto()

    # Operators
    PLUS = auto()
    MINUS = auto()
    STAR = auto()
    SLASH = auto()
    ASSIGN = auto()

    # Delimiters
    LPAREN = auto()
    RPAREN = auto()
    LBRACE = auto()
    RBRACE = auto()
    SEMICOLON = auto()


KEYWORDS: dict[str, TokenType] = {
    "let": TokenType.LET,
    "if": TokenType.IF,
    "else": TokenType.ELSE,
    "true": TokenType.TRUE,
    "false": TokenType.FALSE,
}

PUNCTUATION: dict[str, TokenType] = {
    "+": TokenType.PLUS,
    "-": TokenType.MINUS,
    "*": TokenType.STAR,
    "/": TokenType.SLASH,
    "=": TokenType.ASSIGN,
    "(": TokenType.LPAREN,
    ")": TokenType.RPAREN,
    "{": TokenType.LBRACE,
    "}": TokenType.RBRACE,
    ";": TokenType.SEMICOLON,
}

WHITESPACE = " \t\r\n"
DIGITS = "0123456789"


@dataclass(frozen=True)
class Token:
    type: TokenType
    value: str
    location: Optional[SourceLocation] = field(default=None, compare=False)

    def __repr__(self) -> str:
        return f"Token({self.type.name}, {self.value!r})"


class Scanner:
    """Lazy tokenizer for Huck source code."""

    def __init__(self, source: str, filename: str = "<stdin>"):
        self.source = source
        self.filename = filename
        self.pos = 0
        self.line = 1
        self.column = 1

    def __iter__(self) -> Iterator[Token]:
        return self

    def __next__(self) -> Token:
        self._skip_whitespace()
        ch = self._peek()
        if ch is None:
            raise StopIteration

        loc = self._loc()
        if ch in DIGITS:
            return self._read_number(loc)
        if ch.isalpha() or ch == "_":
            return self._read_identifier(loc)
        if ch in PUNCTUATION:
            self._advance()
            return Token(PUNCTUATION[ch], ch, loc)

        logger.debug("invalid character %r at %s", ch, loc)
        raise ScanError(invalid_character(ch, loc))

    def _loc(self) -> SourceLocation:
        return SourceLocation(self.line, self.column, self.filename)

    def _peek(self) -> Optional[str]:
        if self.pos < len(self.source):
            return self.source[self.pos]
        return None

    def _advance(self) -> str:
        ch = self.source[self.pos]
        self.pos += 1
        if ch == "\n":
            self.line += 1
            self.column = 1
        else:
            self.column += 1
        return ch

    def _skip_whitespace(self) -> None:
        while self.pos < len(self.source) and self.source[self.pos] in WHITESPACE:
            self._advance()

    def _read_number(self, loc: SourceLocation) -> Token:
        start = self.pos
        while self.pos < len(self.source) and self.source[self.pos] in DIGITS:
            self._advance()
        return Token(TokenType.NUMBER, self.source[start:self.pos], loc)

    def _read_identifier(self, loc: SourceLocation) -> Token:
        start = self.pos
        while self.pos < len(self.source) and (self.source[self.pos].isalnum() or self.source[self.pos] == "_"):
            self._advance()
        value = self.source[start:self.pos]
        token_type = KEYWORDS.get(value, TokenType.IDENT)
        return Token(token_type, value, loc)


def tokenize(source: str, filename: str = "<stdin>") -> list[Token]:
    """Convenience function to tokenize Huck source code."""
    tokens = list(Scanner(source, filename))
    logger.debug("scanned %d tokens from %s", len(tokens), filename)
    return tokens
