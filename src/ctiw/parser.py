"""CTIW parser: converts source lines into an AST.

The grammar is line oriented: every body line is one statement, nesting is
given by a run of leading dots, and a ``divide`` block is closed by a bare
``=divide=`` line rather than by dedenting.
"""

from __future__ import annotations

import difflib
import math
import re
from dataclasses import dataclass, field

from ctiw.ast import (
    CONTAINER_TYPES,
    DOC_PROPERTIES,
    ELEMENT_TYPES,
    SPECIAL_TYPES,
    Document,
    Element,
    ErrorNode,
    Metadata,
    Node,
    Property,
    Special,
)
from ctiw.errors import ErrorKind, ParseError
from ctiw.tokens import DOC_MARKER, Position, Span, indent_level, is_ident_char

_SPECIAL_RE = re.compile(r"^={1,2}\(\s*([A-Za-z][\w-]*)\s*\)={1,2}$")


@dataclass(frozen=True, slots=True)
class ParseResult:
    """A best-effort document plus every problem found while building it."""

    document: Document
    errors: tuple[ParseError, ...]

    @property
    def ok(self) -> bool:
        return not self.errors


@dataclass(slots=True)
class _Pending:
    """Mutable stand-in for an Element until the tree is frozen."""

    kind: str
    properties: dict[str, str]
    content: str | None
    depth: int
    span: Span
    children: list[_Pending | Node] = field(default_factory=list)

    def freeze(self) -> Element:
        return Element(
            self.kind,
            self.properties,
            tuple(_freeze(c) for c in self.children),
            self.content,
            self.depth,
            self.span,
        )


def _freeze(node: _Pending | Node) -> Node:
    if isinstance(node, _Pending):
        return node.freeze()
    return node


@dataclass(slots=True)
class _Frame:
    """An open container and the depth it was opened at."""

    element: _Pending
    depth: int


class Parser:
    """Line-based, stack-driven parser for CTIW source."""

    def __init__(self, source: str) -> None:
        self._source = source
        self._lines = source.split("\n")
        self._errors: list[ParseError] = []
        self._body: list[_Pending | Node] = []
        self._stack: list[_Frame] = []
        self._title: str | None = None
        self._language: str | None = None
        self._font_size: float | None = None

    # ------------------------------------------------------------------
    # Document level
    # ------------------------------------------------------------------

    def parse(self) -> ParseResult:
        nonblank = [i for i, line in enumerate(self._lines) if line.strip()]

        # A lone marker is read as the footer of a document with no header.
        if nonblank and self._is_marker(nonblank[0]) and len(nonblank) > 1:
            body_start = nonblank[0] + 1
        else:
            body_start = 0
            self._error(
                ErrorKind.MISSING_HEADER,
                f"document must start with {DOC_MARKER}",
                nonblank[0] + 1 if nonblank else 1,
            )

        body_end = len(self._lines)
        for idx in range(body_start, len(self._lines)):
            if self._is_marker(idx):
                body_end = idx
                break
        else:
            self._error(
                ErrorKind.MISSING_FOOTER,
                f"document must end with {DOC_MARKER}",
                nonblank[-1] + 1 if nonblank else 1,
            )

        for idx in range(body_start, body_end):
            if self._lines[idx].strip():
                self._parse_line(idx)

        trailing = [i for i in nonblank if i > body_end]
        if trailing:
            self._error(
                ErrorKind.TRAILING_CONTENT,
                f"text after the closing {DOC_MARKER} is ignored",
                trailing[0] + 1,
            )

        for frame in self._stack:
            self._error(
                ErrorKind.UNMATCHED_CONTAINER,
                f"'{frame.element.kind}' opened here is never closed",
                frame.element.span.start.line,
            )

        metadata = Metadata(self._title, self._language, self._font_size)
        last = len(self._lines)
        span = Span(
            Position(1, 1, 0),
            Position(last, len(self._lines[-1]) + 1, len(self._source)),
        )
        document = Document(tuple(_freeze(n) for n in self._body), metadata, span)
        return ParseResult(document, tuple(self._errors))

    def _is_marker(self, idx: int) -> bool:
        return self._lines[idx].strip() == DOC_MARKER

    # ------------------------------------------------------------------
    # Statements
    # ------------------------------------------------------------------

    def _parse_line(self, idx: int) -> None:
        raw = self._lines[idx].rstrip("\r")
        line_no = idx + 1

        text = raw.lstrip(" \t")
        dots = len(text) - len(text.lstrip("."))
        depth = indent_level(dots)
        content = text[dots:].strip()
        column = len(raw) - len(text[dots:].lstrip()) + 1
        span = self._line_span(idx, column, raw)

        if self._is_bare_close(content) and self._stack:
            self._stack.pop()
            return

        node = self._parse_statement(content, line_no, depth, span)

        parent = self._attach(node, depth)
        if isinstance(node, _Pending) and node.kind in CONTAINER_TYPES:
            self._stack.append(_Frame(node, depth))
        if isinstance(node, _Pending) and node.kind == "title" and parent is None:
            # First top-level title names the page
            if self._title is None and node.content:
                self._title = node.content

    def _line_span(self, idx: int, column: int, raw: str) -> Span:
        offset = sum(len(line) + 1 for line in self._lines[:idx])
        end_col = len(raw.rstrip()) + 1
        return Span(
            Position(idx + 1, column, offset + column - 1),
            Position(idx + 1, end_col, offset + end_col - 1),
        )

    def _attach(self, node: _Pending | Node, depth: int) -> _Pending | None:
        """Attach *node* under the innermost open container shallower than *depth*."""
        if depth > 0 and not isinstance(node, Property):
            for frame in reversed(self._stack):
                if frame.depth < depth:
                    frame.element.children.append(node)
                    return frame.element
        self._body.append(node)
        return None

    @staticmethod
    def _is_bare_close(content: str) -> bool:
        return (
            content.startswith("=")
            and content.endswith("=")
            and content.strip("=").lower() in CONTAINER_TYPES
        )

    def _parse_statement(
        self, content: str, line_no: int, depth: int, span: Span
    ) -> _Pending | Node:
        if not content.startswith("="):
            self._error(
                ErrorKind.UNKNOWN_STATEMENT,
                "statements must start with '='",
                line_no,
            )
            return ErrorNode("statements must start with '='", content, span)

        if content.lstrip("=").startswith("("):
            return self._parse_special(content, line_no, span)

        # Opening marker, keyword, closing marker
        pos = 0
        while pos < len(content) and content[pos] == "=":
            pos += 1
        name_start = pos
        end = content.find("=", name_start)
        if end == -1:
            message = "expected '=' after the element name"
            self._error(ErrorKind.UNKNOWN_STATEMENT, message, line_no)
            return ErrorNode(message, content, span)

        name = content[name_start:end].strip().lower()
        pos = end
        while pos < len(content) and content[pos] == "=":
            pos += 1
        rest = content[pos:]

        if name in DOC_PROPERTIES:
            return self._parse_property(name, rest, line_no, span)

        if name in ELEMENT_TYPES:
            return self._parse_element(name, rest, depth, span)

        return self._unknown_element(name, content, line_no, span)

    def _parse_special(self, content: str, line_no: int, span: Span) -> Special | ErrorNode:
        match = _SPECIAL_RE.match(content)
        if match is None:
            message = "special statements look like =(name)="
            self._error(ErrorKind.UNKNOWN_SPECIAL_KIND, message, line_no)
            return ErrorNode(message, content, span)

        kind = match.group(1).lower()
        if kind not in SPECIAL_TYPES:
            self._error(
                ErrorKind.UNKNOWN_SPECIAL_KIND,
                f"unknown special '{kind}'",
                line_no,
                suggestion=_suggest(kind, sorted(SPECIAL_TYPES)),
            )
        return Special(kind, span)

    def _parse_property(self, name: str, rest: str, line_no: int, span: Span) -> Property:
        value = rest.split("=", 1)[0].strip()

        if name == "language":
            self._language = value.lower() or None
        elif name == "font-size":
            try:
                size = float(value)
            except ValueError:
                size = math.nan
            if math.isfinite(size):
                self._font_size = size
            else:
                self._error(
                    ErrorKind.INVALID_VALUE,
                    f"font-size must be a number, got '{value}'",
                    line_no,
                )

        return Property(name, value, span)

    def _parse_element(self, kind: str, rest: str, depth: int, span: Span) -> _Pending:
        # A blank right after the keyword marker means attributes only
        pos = 0
        content: str | None = None

        if rest and rest[0] not in " \t":
            end = _content_end(rest, 0)
            content = rest[:end].strip() or None
            pos = end
            while pos < len(rest) and rest[pos] == "=":
                pos += 1

        properties: dict[str, str] = {}
        for part in rest[pos:].split():
            attr = _parse_attribute(part)
            if attr is not None:
                properties[attr[0]] = attr[1]

        return _Pending(kind, properties, content, depth, span)

    def _unknown_element(self, name: str, content: str, line_no: int, span: Span) -> ErrorNode:
        suggestion = _suggest(name, ELEMENT_TYPES)
        message = f"unknown element '{name}'"
        self._error(ErrorKind.UNKNOWN_ELEMENT_KIND, message, line_no, suggestion=suggestion)
        return ErrorNode(message, content, span)

    # ------------------------------------------------------------------
    # Errors
    # ------------------------------------------------------------------

    def _error(
        self,
        kind: ErrorKind,
        message: str,
        line: int,
        column: int | None = None,
        suggestion: str | None = None,
    ) -> None:
        self._errors.append(ParseError(kind, message, line, column, suggestion, self._source))


def _content_end(text: str, pos: int) -> int:
    """Return the index of the marker run closing the content at *pos*.

    Content ends at the first ``=`` run followed by a blank or the end of
    the line, so ``Click Me= color=blue=`` keeps ``Click Me`` whole and
    ``a=b`` inside content survives.
    """
    i = pos
    while i < len(text):
        if text[i] == "=":
            j = i
            while j < len(text) and text[j] == "=":
                j += 1
            if j >= len(text) or text[j] in " \t":
                return i
            i = j
        else:
            i += 1
    return len(text)


def _parse_attribute(part: str) -> tuple[str, str] | None:
    """Split ``name:value`` or ``name=value=`` into (name, value)."""
    part = part.rstrip("=")
    seps = [i for i in (part.find(":"), part.find("=")) if i != -1]
    if not seps:
        return None
    cut = min(seps)
    name = part[:cut].lower()
    if not name or not all(is_ident_char(c) for c in name):
        return None
    return name, part[cut + 1 :]


def _suggest(name: str, choices: tuple[str, ...] | list[str]) -> str | None:
    matches = difflib.get_close_matches(name, choices, n=1, cutoff=0.6)
    return matches[0] if matches else None


def parse(source: str) -> ParseResult:
    """Parse CTIW source text into a Document and a list of errors."""
    return Parser(source).parse()
