"""CTIW markup language compiler."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ctiw.errors import LexError, ParseError

__version__ = "0.1.0"


@dataclass(frozen=True, slots=True)
class CompileResult:
    """Output of one compiler run: page, stylesheet, and diagnostics.

    ``lex_errors`` are characters the lexer could not classify. They never
    change the generated page.
    """

    html: str
    css: str
    errors: tuple[ParseError, ...]
    lex_errors: tuple[LexError, ...] = ()


def compile(source: str) -> CompileResult:
    """Parse CTIW source and render it to HTML and CSS."""
    from ctiw.lexer import tokenize
    from ctiw.parser import parse
    from ctiw.render import generate_css, generate_html

    _, lex_errors = tokenize(source)
    result = parse(source)
    doc = result.document
    return CompileResult(
        generate_html(doc),
        generate_css(doc.children),
        result.errors,
        tuple(lex_errors),
    )
