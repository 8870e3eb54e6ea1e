"""Shared test fixtures and helpers."""

from __future__ import annotations

import pytest

from ctiw.ast import Document, Element
from ctiw.errors import ErrorKind, ParseError
from ctiw.lexer import tokenize
from ctiw.parser import ParseResult, parse
from ctiw.tokens import INDENT_WIDTH, Token, TokenType

MARKER = "==CTIW=="
LEVEL = "." * INDENT_WIDTH


def wrap(*lines: str) -> str:
    """Surround body lines with the document start and end markers."""
    return "\n".join((MARKER, *lines, MARKER))


@pytest.fixture
def lex():
    """Return a helper that tokenizes source and returns tokens (excluding EOF)."""

    def _lex(source: str) -> list[Token]:
        tokens, _ = tokenize(source)
        # Strip trailing EOF for convenience
        return [t for t in tokens if t.type != TokenType.EOF]

    return _lex


@pytest.fixture
def parse_body():
    """Return a helper that parses body lines inside the document markers."""

    def _parse(*lines: str) -> ParseResult:
        return parse(wrap(*lines))

    return _parse


def assert_types(tokens: list[Token], expected: list[TokenType]) -> None:
    """Assert that the token types match the expected list."""
    actual = [t.type for t in tokens]
    assert actual == expected, f"Expected {expected}, got {actual}"


def find_tokens(tokens: list[Token], tt: TokenType) -> list[Token]:
    """Return all tokens of the given type."""
    return [t for t in tokens if t.type == tt]


def element(doc: Document | Element, *path: int) -> Element:
    """Follow child indexes from *doc* and return the Element found there."""
    node: Document | Element = doc
    for idx in path:
        node = node.children[idx]
    assert isinstance(node, Element), f"Expected Element, got {type(node).__name__}"
    return node


def kinds(errors: tuple[ParseError, ...]) -> list[ErrorKind]:
    """Return the kinds of a result's errors, in order."""
    return [e.kind for e in errors]
