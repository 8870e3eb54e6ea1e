"""Error records with formatted source context.

Nothing here is raised: the lexer and parser collect these records and return
them next to whatever they managed to build.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class ErrorKind(Enum):
    LEX_ERROR = "lex-error"
    MISSING_HEADER = "missing-header"
    MISSING_FOOTER = "missing-footer"
    UNKNOWN_STATEMENT = "unknown-statement"
    UNKNOWN_ELEMENT_KIND = "unknown-element-kind"
    UNKNOWN_SPECIAL_KIND = "unknown-special-kind"
    UNMATCHED_CONTAINER = "unmatched-container"
    INVALID_VALUE = "invalid-value"
    TRAILING_CONTENT = "trailing-content"


def _format_context(
    message: str,
    line: int,
    column: int,
    width: int,
    source: str,
    filename: str,
    level: str = "error",
) -> str:
    lines = source.splitlines()
    line_idx = line - 1

    if 0 <= line_idx < len(lines):
        source_line = lines[line_idx]
    else:
        source_line = ""

    pad = " " * (column - 1)
    carets = "^" * max(1, width)

    line_num = str(line)
    gutter_width = len(line_num) + 1

    blank_gutter = " " * gutter_width + "|"
    line_gutter = f"{line_num:>{gutter_width - 1}} |"

    return (
        f"{level}: {message}\n"
        f"{' ' * gutter_width}--> {filename}:{line}:{column}\n"
        f"{blank_gutter}\n"
        f"{line_gutter} {source_line}\n"
        f"{blank_gutter} {pad}{carets}"
    )


@dataclass(frozen=True, slots=True)
class LexError:
    """An unrecognized character, skipped by the lexer."""

    message: str
    line: int
    column: int
    source: str = field(default="", repr=False, compare=False)

    @property
    def kind(self) -> ErrorKind:
        return ErrorKind.LEX_ERROR

    def format(self, filename: str = "input.ctiw", level: str = "error") -> str:
        return _format_context(
            self.message, self.line, self.column, 1, self.source, filename, level
        )

    def __str__(self) -> str:
        return f"{self.line}:{self.column}: {self.message}"


@dataclass(frozen=True, slots=True)
class ParseError:
    """A recoverable parse problem tied to a source line."""

    kind: ErrorKind
    message: str
    line: int
    column: int | None = None
    suggestion: str | None = None
    source: str = field(default="", repr=False, compare=False)

    def format(self, filename: str = "input.ctiw") -> str:
        lines = self.source.splitlines()
        if self.column is not None:
            col = self.column
            width = 1
        else:
            # Underline the statement itself, skipping indentation
            text = lines[self.line - 1] if 0 < self.line <= len(lines) else ""
            stripped = text.lstrip(" \t.")
            col = len(text) - len(stripped) + 1
            width = len(stripped.rstrip())
        result = _format_context(self.message, self.line, col, width, self.source, filename)
        if self.suggestion:
            result += f"\n  help: did you mean '{self.suggestion}'?"
        return result

    def __str__(self) -> str:
        if self.column is not None:
            return f"{self.line}:{self.column}: {self.message}"
        return f"{self.line}: {self.message}"
