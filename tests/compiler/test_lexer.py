"""Huck Scanner Tests — LEX-001 through LEX-005.

P0 tests must pass before any code ships.
"""

import pytest

from huck.errors import ErrorKind, ScanError, SourceLocation
from huck.lexer import Scanner, Token, TokenType, tokenize


def _types(source):
    return [t.type for t in tokenize(source)]


class TestLEX001:
    """LEX-001: Whitespace and end of input.
    Priority: P0
    """

    def test_empty_source(self):
        """priority_p0: Empty source yields no tokens."""
        assert tokenize("") == []

    def test_whitespace_only(self):
        """priority_p0: Whitespace-only source yields no tokens."""
        assert tokenize(" \t      \n\n  \n") == []

    def test_crlf_is_whitespace(self):
        """priority_p1: Carriage returns are skipped like newlines."""
        assert _types("1\r\n+\r\n2") == [TokenType.NUMBER, TokenType.PLUS, TokenType.NUMBER]


class TestLEX002:
    """LEX-002: Numbers and operators.
    Priority: P0
    """

    def test_number(self):
        """priority_p0: A run of digits is a single number token."""
        assert tokenize("1124\n") == [Token(TokenType.NUMBER, "1124")]

    def test_operators(self):
        """priority_p0: Every single-character operator is recognised."""
        assert _types("* - + / ( ) { } = ;") == [
            TokenType.STAR, TokenType.MINUS, TokenType.PLUS, TokenType.SLASH,
            TokenType.LPAREN, TokenType.RPAREN, TokenType.LBRACE, TokenType.RBRACE,
            TokenType.ASSIGN, TokenType.SEMICOLON,
        ]

    def test_operators_need_no_spaces(self):
        """priority_p0: Tokens are split without intervening whitespace."""
        assert tokenize("(1+22)*3") == [
            Token(TokenType.LPAREN, "("),
            Token(TokenType.NUMBER, "1"),
            Token(TokenType.PLUS, "+"),
            Token(TokenType.NUMBER, "22"),
            Token(TokenType.RPAREN, ")"),
            Token(TokenType.STAR, "*"),
            Token(TokenType.NUMBER, "3"),
        ]

    def test_number_followed_by_identifier(self):
        """priority_p1: Digits stop at the first non-digit."""
        assert tokenize("12ab") == [
            Token(TokenType.NUMBER, "12"),
            Token(TokenType.IDENT, "ab"),
        ]


class TestLEX003:
    """LEX-003: Keywords and identifiers.
    Priority: P0
    """

    def test_keywords(self):
        """priority_p0: Keywords are classified after reading the whole word."""
        assert _types("let if else true false") == [
            TokenType.LET, TokenType.IF, TokenType.ELSE, TokenType.TRUE, TokenType.FALSE,
        ]

    def test_identifiers(self):
        """priority_p0: Words that are not keywords become identifiers."""
        assert tokenize("x _tmp letter if2 else_") == [
            Token(TokenType.IDENT, "x"),
            Token(TokenType.IDENT, "_tmp"),
            Token(TokenType.IDENT, "letter"),
            Token(TokenType.IDENT, "if2"),
            Token(TokenType.IDENT, "else_"),
        ]

    def test_let_binding(self):
        """priority_p0: A let binding scans to its five tokens."""
        assert tokenize("let x = 42;") == [
            Token(TokenType.LET, "let"),
            Token(TokenType.IDENT, "x"),
            Token(TokenType.ASSIGN, "="),
            Token(TokenType.NUMBER, "42"),
            Token(TokenType.SEMICOLON, ";"),
        ]


class TestLEX004:
    """LEX-004: Invalid characters are errors, distinct from end of input.
    Priority: P0
    """

    def test_invalid_character_raises(self):
        """priority_p0: An unrecognised character raises ScanError."""
        with pytest.raises(ScanError) as exc_info:
            tokenize("1 + $")
        err = exc_info.value.error
        assert err.kind == ErrorKind.INVALID_CHARACTER
        assert err.details["character"] == "$"
        assert err.location == SourceLocation(1, 5)

    def test_tokens_before_error_are_produced(self):
        """priority_p1: The scanner is lazy; tokens before the bad character are yielded."""
        scanner = Scanner("7 # 8")
        assert next(scanner) == Token(TokenType.NUMBER, "7")
        with pytest.raises(ScanError):
            next(scanner)

    def test_error_serialises(self):
        """priority_p1: Scan errors serialise to structured JSON."""
        with pytest.raises(ScanError) as exc_info:
            tokenize("@")
        d = exc_info.value.error.to_dict()
        assert d["kind"] == "invalid_character"
        assert d["location"]["line"] == 1
        assert d["location"]["column"] == 1


class TestLEX005:
    """LEX-005: Laziness, locations and token identity.
    Priority: P1
    """

    def test_scanner_is_lazy_iterator(self):
        """priority_p1: Tokens are produced one at a time and iteration terminates."""
        scanner = Scanner("1 2")
        assert iter(scanner) is scanner
        assert next(scanner).value == "1"
        assert next(scanner).value == "2"
        with pytest.raises(StopIteration):
            next(scanner)

    def test_exhausted_scanner_stays_exhausted(self):
        """priority_p1: A finished scanner does not restart."""
        scanner = Scanner("1")
        assert list(scanner) == [Token(TokenType.NUMBER, "1")]
        assert list(scanner) == []

    def test_locations(self):
        """priority_p1: Tokens carry line and column of their first character."""
        tokens = tokenize("let x =\n  10", filename="main.huck")
        assert tokens[0].location == SourceLocation(1, 1, "main.huck")
        assert tokens[1].location == SourceLocation(1, 5, "main.huck")
        assert tokens[3].location == SourceLocation(2, 3, "main.huck")

    def test_equality_ignores_location(self):
        """priority_p1: Two tokens of the same kind and text are interchangeable."""
        a = Token(TokenType.NUMBER, "5", SourceLocation(1, 1))
        b = Token(TokenType.NUMBER, "5", SourceLocation(9, 9))
        assert a == b
        assert hash(a) == hash(b)
