"""CTIW lexer: converts source text into a flat token stream."""

from __future__ import annotations

from enum import Enum, auto

from ctiw.errors import LexError
from ctiw.tokens import (
    DOC_MARKER,
    INDENT_WIDTH,
    Position,
    Span,
    Token,
    TokenType,
    is_alpha,
    is_digit,
    is_hex_color,
    is_ident_char,
)


class _State(Enum):
    STATEMENT_START = auto()  # line start, after indentation or the doc marker
    AFTER_OPEN = auto()  # opening marker seen at statement start
    AFTER_KEYWORD = auto()  # marker + identifier seen
    VALUE = auto()  # marker + identifier + marker: content may follow
    ATTRIBUTE = auto()  # rest of the statement


# ----------------------------------------------------------------------
# Value scanning
# ----------------------------------------------------------------------


def _skip_blanks(text: str, pos: int) -> int:
    while pos < len(text) and text[pos] in " \t":
        pos += 1
    return pos


def looks_like_attribute(text: str, pos: int) -> bool:
    """Return True if an attribute (``name:value`` or ``name=value=``) starts at *pos*.

    ``name:`` is always an attribute. ``name=`` is an attribute only when
    something other than ``=`` or the end of the line follows it; otherwise
    the ``=`` is the closing marker of a value such as ``Hello=``.
    """
    if pos >= len(text) or not is_alpha(text[pos]):
        return False

    i = pos
    while i < len(text) and is_ident_char(text[i]):
        i += 1
    if i >= len(text):
        return False

    if text[i] == ":":
        return True

    if text[i] == "=":
        j = _skip_blanks(text, i + 1)
        return j < len(text) and text[j] not in "=\r\n"

    return False


def scan_value(text: str, pos: int) -> int:
    """Return the end index of the statement value starting at *pos*.

    The value runs up to the next ``=`` or end of line, but stops early at
    a blank that is followed by an attribute.
    """
    i = pos
    while i < len(text) and text[i] not in "=\r\n":
        if text[i] in " \t" and looks_like_attribute(text, _skip_blanks(text, i)):
            break
        i += 1
    return i


# ----------------------------------------------------------------------
# Lexer
# ----------------------------------------------------------------------


class Lexer:
    """Tokenize CTIW source text into a stream of Token objects.

    A Lexer holds the state of a single run; create a new one per source.
    """

    def __init__(self, source: str) -> None:
        self._source = source
        self._pos = 0
        self._line = 1
        self._col = 1
        self._tokens: list[Token] = []
        self._errors: list[LexError] = []
        self._state = _State.STATEMENT_START
        self._seen_start = False

    def tokenize(self) -> tuple[list[Token], list[LexError]]:
        """Tokenize the full source and return (tokens, errors)."""
        while self._pos < len(self._source):
            self._scan_token()

        self._emit(TokenType.EOF, "", self._current_pos())
        return self._tokens, self._errors

    # ------------------------------------------------------------------
    # Position helpers
    # ------------------------------------------------------------------

    def _current_pos(self) -> Position:
        return Position(self._line, self._col, self._pos)

    def _peek(self, offset: int = 0) -> str:
        idx = self._pos + offset
        if idx < len(self._source):
            return self._source[idx]
        return ""

    def _advance(self) -> str:
        ch = self._source[self._pos]
        self._pos += 1
        if ch == "\n":
            self._line += 1
            self._col = 1
        else:
            self._col += 1
        return ch

    def _emit(self, tt: TokenType, value: str, start: Position) -> Token:
        tok = Token(tt, value, Span(start, self._current_pos()))
        self._tokens.append(tok)
        return tok

    def _error(self, message: str) -> None:
        self._errors.append(LexError(message, self._line, self._col, self._source))

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------

    def _scan_token(self) -> None:
        ch = self._peek()

        if ch in " \t":
            self._advance()
            return

        if ch == "\n" or (ch == "\r" and self._peek(1) == "\n"):
            start = self._current_pos()
            if ch == "\r":
                self._advance()
            self._advance()
            self._emit(TokenType.NEWLINE, "\n", start)
            self._state = _State.STATEMENT_START
            return

        if self._source.startswith(DOC_MARKER, self._pos):
            start = self._current_pos()
            for _ in DOC_MARKER:
                self._advance()
            tt = TokenType.DOC_END if self._seen_start else TokenType.DOC_START
            self._seen_start = True
            self._emit(tt, DOC_MARKER, start)
            self._state = _State.STATEMENT_START
            return

        if ch == "=":
            self._lex_marker()
            return

        if self._state is _State.VALUE:
            if looks_like_attribute(self._source, self._pos):
                self._state = _State.ATTRIBUTE
            else:
                self._lex_value()
                return

        if ch == ".":
            self._lex_dots()
            return

        if ch == ":":
            self._single(TokenType.COLON)
            return

        if ch == "(":
            self._single(TokenType.LPAREN)
            return

        if ch == ")":
            self._single(TokenType.RPAREN)
            return

        if is_ident_char(ch):
            self._lex_word()
            return

        self._error(f"unexpected character {ch!r}")
        self._advance()

    def _single(self, tt: TokenType) -> None:
        start = self._current_pos()
        ch = self._advance()
        self._emit(tt, ch, start)
        self._state = _State.ATTRIBUTE

    # ------------------------------------------------------------------
    # Markers and indentation
    # ------------------------------------------------------------------

    def _lex_marker(self) -> None:
        start = self._current_pos()
        if self._peek(1) == "=":
            self._advance()
            self._advance()
            self._emit(TokenType.DOUBLE_EQUALS, "==", start)
        else:
            self._advance()
            self._emit(TokenType.EQUALS, "=", start)

        if self._state is _State.STATEMENT_START:
            self._state = _State.AFTER_OPEN
        elif self._state is _State.AFTER_KEYWORD:
            self._state = _State.VALUE
        else:
            self._state = _State.ATTRIBUTE

    def _lex_dots(self) -> None:
        if self._state is not _State.STATEMENT_START:
            self._single(TokenType.DOT)
            return

        # Group an indentation run into one token per level plus the remainder
        while self._peek() == ".":
            start = self._current_pos()
            chars = []
            while self._peek() == "." and len(chars) < INDENT_WIDTH:
                chars.append(self._advance())
            self._emit(TokenType.DOT, "".join(chars), start)

    # ------------------------------------------------------------------
    # Words and values
    # ------------------------------------------------------------------

    def _lex_word(self) -> None:
        start = self._current_pos()
        chars = []
        while self._pos < len(self._source) and is_ident_char(self._peek()):
            chars.append(self._advance())
        text = "".join(chars)

        if is_hex_color(text):
            self._emit(TokenType.HEX_COLOR, text, start)
        elif all(is_digit(c) for c in text):
            self._emit(TokenType.NUMBER, text, start)
        else:
            self._emit(TokenType.IDENTIFIER, text, start)

        if self._state is _State.AFTER_OPEN:
            self._state = _State.AFTER_KEYWORD
        else:
            self._state = _State.ATTRIBUTE

    def _lex_value(self) -> None:
        start = self._current_pos()
        end = scan_value(self._source, self._pos)
        chars = []
        while self._pos < end:
            chars.append(self._advance())
        value = "".join(chars).strip()
        if value:
            self._emit(TokenType.STRING, value, start)
        self._state = _State.ATTRIBUTE


def tokenize(source: str) -> tuple[list[Token], list[LexError]]:
    """Convenience function: tokenize source text and return (tokens, errors)."""
    return Lexer(source).tokenize()
