"""--debug AST dump and --tokens listing, written to stderr."""

from __future__ import annotations

import sys
from typing import TextIO

from ctiw.ast import Document, Element, ErrorNode, Node, Property, Special
from ctiw.errors import LexError
from ctiw.tokens import Token


def dump_ast(doc: Document, *, file: TextIO = sys.stderr) -> None:
    """Print a human-readable AST tree to *file*."""
    meta = doc.metadata
    file.write(
        f"Document title={meta.title!r} language={meta.language!r} "
        f"font_size={meta.font_size!r}\n"
    )
    for child in doc.children:
        _dump_node(child, 1, file)


def dump_tokens(tokens: list[Token], errors: list[LexError], *, file: TextIO = sys.stderr) -> None:
    """Print one line per token, followed by any lex errors."""
    for tok in tokens:
        file.write(f"{tok.line}:{tok.column} {tok.type.name} {tok.value!r}\n")
    for err in errors:
        file.write(f"{err.line}:{err.column} error: {err.message}\n")


def _indent(depth: int) -> str:
    return "  " * depth


def _dump_node(node: Node, depth: int, f: TextIO) -> None:
    if isinstance(node, Element):
        f.write(f"{_indent(depth)}Element<{node.kind}> depth={node.depth}")
        if node.content is not None:
            f.write(f" content={node.content!r}")
        if node.properties:
            f.write(f" {dict(node.properties)!r}")
        f.write("\n")
        for child in node.children:
            _dump_node(child, depth + 1, f)
    elif isinstance(node, Property):
        f.write(f"{_indent(depth)}Property {node.name}={node.value!r}\n")
    elif isinstance(node, Special):
        f.write(f"{_indent(depth)}Special<{node.kind}>\n")
    elif isinstance(node, ErrorNode):
        f.write(f"{_indent(depth)}Error {node.message!r} source={node.source_text!r}\n")
