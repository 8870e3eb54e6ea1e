"""Token types, data structures, and character classification helpers."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto

# Document start and end share the same literal; order decides which is which.
DOC_MARKER = "==CTIW=="

# Number of leading dots that make up one nesting level.
INDENT_WIDTH = 4


class TokenType(Enum):
    # Document markers
    DOC_START = auto()  # first ==CTIW==
    DOC_END = auto()  # any later ==CTIW==

    # Structural
    EQUALS = auto()  # =
    DOUBLE_EQUALS = auto()  # ==
    COLON = auto()  # :
    DOT = auto()  # . (indentation)
    LPAREN = auto()  # (
    RPAREN = auto()  # )

    # Values
    IDENTIFIER = auto()  # letters, digits, - and _
    NUMBER = auto()  # all-digit run (not exactly 6 long)
    HEX_COLOR = auto()  # exactly 6 hex digits, no '#'
    STRING = auto()  # statement content between markers

    NEWLINE = auto()  # \n or \r\n
    EOF = auto()


@dataclass(frozen=True, slots=True)
class Position:
    """Source position, 1-based line and column, 0-based offset."""

    line: int
    column: int
    offset: int


@dataclass(frozen=True, slots=True)
class Span:
    """Source range from start to end position."""

    start: Position
    end: Position


@dataclass(frozen=True, slots=True)
class Token:
    """A single lexer token."""

    type: TokenType
    value: str
    span: Span

    @property
    def line(self) -> int:
        return self.span.start.line

    @property
    def column(self) -> int:
        return self.span.start.column


def is_alpha(ch: str) -> bool:
    """Return True if ch is an ASCII letter."""
    return ("a" <= ch <= "z") or ("A" <= ch <= "Z")


def is_digit(ch: str) -> bool:
    """Return True if ch is an ASCII digit."""
    return "0" <= ch <= "9"


def is_ident_char(ch: str) -> bool:
    """Return True if ch may appear in an identifier."""
    return is_alpha(ch) or is_digit(ch) or ch in "-_"


def is_hex_digit(ch: str) -> bool:
    """Return True if ch is a hexadecimal digit."""
    return ch != "" and ch in "0123456789abcdefABCDEF"


def is_hex_color(text: str) -> bool:
    """Return True if text is exactly six hex digits."""
    return len(text) == 6 and all(is_hex_digit(ch) for ch in text)


def indent_level(dots: int) -> int:
    """Convert a count of leading dots into a nesting depth."""
    return dots // INDENT_WIDTH
