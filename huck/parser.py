"""Huck Parser — precedence-climbing (Pratt) parser.

Consumes a token stream with one token of lookahead and builds an unchecked
AST. Each token type may have a prefix rule (how to start an expression) and
an infix rule with a binding precedence (how to extend an already parsed
left-hand side). The first error aborts the parse.

Precedence ladder, lowest to highest:
  BOTTOM < EXPR < ADD_SUB < MULT_DIV < TOP
"""

from __future__ import annotations

import logging
from enum import IntEnum
from typing import Callable, Iterable, Iterator, Optional

from huck.lexer import Scanner, Token, TokenType
from huck.ast_nodes import (
    Expr, NumberLiteral, BooleanLiteral, BinaryOp, BinOpKind,
    Let, VariableReference, Block, Conditional,
)
from huck.errors import (
    SourceLocation, ParseError,
    unexpected_eof, unexpected_token, no_parse_rule, nesting_too_deep,
)

logger = logging.getLogger(__name__)

U64_MAX = 2 ** 64 - 1
U64_DIGITS = len(str(U64_MAX))


class Prec(IntEnum):
    BOTTOM = 0
    EXPR = 1
    ADD_SUB = 2
    MULT_DIV = 3
    TOP = 4

    def next(self) -> Prec:
        if self is Prec.TOP:
            return Prec.TOP
        return Prec(self + 1)


class Parser:
    """Precedence-climbing parser for Huck."""

    def __init__(self, tokens: Iterable[Token], filename: str = "<stdin>"):
        self._tokens: Iterator[Token] = iter(tokens)
        self._lookahead: Optional[Token] = None
        self._peeked = False
        self._last_location = SourceLocation(1, 1, filename)
        self.filename = filename

    # -------------------------------------------------------------------
    # Token stream
    # -------------------------------------------------------------------

    def _peek(self) -> Optional[Token]:
        if not self._peeked:
            self._lookahead = next(self._tokens, None)
            self._peeked = True
        return self._lookahead

    def _next(self) -> Optional[Token]:
        tok = self._peek()
        self._peeked = False
        self._lookahead = None
        if tok is not None and tok.location is not None:
            self._last_location = tok.location
        return tok

    def _expect(self, tt: TokenType, what: str) -> Token:
        tok = self._peek()
        if tok is None:
            raise ParseError(unexpected_eof(what, self._last_location))
        if tok.type != tt:
            raise ParseError(unexpected_token(
                f"Expected {what}, got {tok.type.name} ('{tok.value}')",
                tok.value,
                tok.location,
            ))
        return self._next()

    def _match(self, tt: TokenType) -> Optional[Token]:
        tok = self._peek()
        if tok is not None and tok.type == tt:
            return self._next()
        return None

    # -------------------------------------------------------------------
    # Top-level
    # -------------------------------------------------------------------

    def parse(self) -> Expr:
        """Parse the whole token stream as a single expression."""
        try:
            expr = self.parse_precedence(Prec.BOTTOM)
        except RecursionError:
            raise ParseError(nesting_too_deep("parse", self._last_location)) from None
        logger.debug("parsed %s", self.filename)
        return expr

    def parse_precedence(self, min_prec: Prec) -> Expr:
        tok = self._next()
        if tok is None:
            raise ParseError(unexpected_eof("expression", self._last_location))

        prefix_rule = PREFIX_RULES.get(tok.type)
        if prefix_rule is None:
            raise ParseError(no_parse_rule("prefix", tok.type.name, tok.location))
        lhs = prefix_rule(self, tok)

        while True:
            nxt = self._peek()
            if nxt is None or precedence_of(nxt.type) < min_prec:
                break
            tok = self._next()
            infix = INFIX_RULES.get(tok.type)
            if infix is None:
                raise ParseError(no_parse_rule("infix", tok.type.name, tok.location))
            infix_rule, _ = infix
            lhs = infix_rule(self, tok, lhs)

        return lhs

    # -------------------------------------------------------------------
    # Prefix rules
    # -------------------------------------------------------------------

    def _number(self, tok: Token) -> Expr:
        digits = tok.value.lstrip("0") or "0"
        value = int(digits) if len(digits) <= U64_DIGITS else U64_MAX + 1
        if value > U64_MAX:
            raise ParseError(unexpected_token(
                f"Failed to parse number {tok.value}: out of range for a 64-bit unsigned integer",
                tok.value,
                tok.location,
            ))
        return NumberLiteral(value=value, location=tok.location)

    def _boolean(self, tok: Token) -> Expr:
        return BooleanLiteral(value=tok.type == TokenType.TRUE, location=tok.location)

    def _variable(self, tok: Token) -> Expr:
        return VariableReference(name=tok.value, location=tok.location)

    def _grouping(self, tok: Token) -> Expr:
        expr = self.parse_precedence(Prec.EXPR)
        self._expect(TokenType.RPAREN, "')'")
        return expr

    def _block(self, tok: Token) -> Block:
        """Parse the rest of a block whose ``{`` has been consumed."""
        nxt = self._peek()
        if nxt is None:
            raise ParseError(unexpected_eof("expression", self._last_location))
        if nxt.type == TokenType.RBRACE:
            raise ParseError(unexpected_token(
                "Empty block: a block must contain at least one expression",
                nxt.value,
                nxt.location,
            ))
        body: list[Expr] = [self.parse_precedence(Prec.EXPR)]
        while self._match(TokenType.SEMICOLON):
            body.append(self.parse_precedence(Prec.EXPR))
        self._expect(TokenType.RBRACE, "'}'")
        return Block(body=body, location=tok.location)

    def _let(self, tok: Token) -> Expr:
        name = self._expect(TokenType.IDENT, "identifier").value
        self._expect(TokenType.ASSIGN, "'='")
        initializer = self.parse_precedence(Prec.EXPR)
        return Let(name=name, initializer=initializer, location=tok.location)

    def _conditional(self, tok: Token) -> Expr:
        test = self.parse_precedence(Prec.EXPR)
        then_branch = self._block(self._expect(TokenType.LBRACE, "'{'"))
        self._expect(TokenType.ELSE, "'else'")
        else_branch = self._block(self._expect(TokenType.LBRACE, "'{'"))
        return Conditional(
            test=test, then_branch=then_branch, else_branch=else_branch,
            location=tok.location,
        )

    # -------------------------------------------------------------------
    # Infix rules
    # -------------------------------------------------------------------

    def _binary(self, tok: Token, lhs: Expr) -> Expr:
        op = BINARY_OPS[tok.type]
        rhs = self.parse_precedence(precedence_of(tok.type).next())
        return BinaryOp(op=op, left=lhs, right=rhs, location=tok.location)


# ---------------------------------------------------------------------------
# Rule tables
# ---------------------------------------------------------------------------

PrefixRule = Callable[[Parser, Token], Expr]
InfixRule = Callable[[Parser, Token, Expr], Expr]

PREFIX_RULES: dict[TokenType, PrefixRule] = {
    TokenType.NUMBER: Parser._number,
    TokenType.TRUE: Parser._boolean,
    TokenType.FALSE: Parser._boolean,
    TokenType.IDENT: Parser._variable,
    TokenType.LPAREN: Parser._grouping,
    TokenType.LBRACE: Parser._block,
    TokenType.LET: Parser._let,
    TokenType.IF: Parser._conditional,
}

INFIX_RULES: dict[TokenType, tuple[InfixRule, Prec]] = {
    TokenType.PLUS: (Parser._binary, Prec.ADD_SUB),
    TokenType.MINUS: (Parser._binary, Prec.ADD_SUB),
    TokenType.STAR: (Parser._binary, Prec.MULT_DIV),
    TokenType.SLASH: (Parser._binary, Prec.MULT_DIV),
}

BINARY_OPS: dict[TokenType, BinOpKind] = {
    TokenType.PLUS: BinOpKind.ADD,
    TokenType.MINUS: BinOpKind.SUB,
    TokenType.STAR: BinOpKind.MUL,
    TokenType.SLASH: BinOpKind.DIV,
}


def precedence_of(tt: TokenType) -> Prec:
    """Binding precedence of a token; tokens without an infix rule bind at BOTTOM."""
    infix = INFIX_RULES.get(tt)
    if infix is None:
        return Prec.BOTTOM
    return infix[1]


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def parse(source: str, filename: str = "<stdin>") -> Expr:
    """Parse Huck source code into an unchecked AST."""
    parser = Parser(Scanner(source, filename), filename)
    return parser.parse()
