"""Minimal LSP server for CTIW, diagnostics only."""

from __future__ import annotations

from lsprotocol.types import (
    TEXT_DOCUMENT_DID_CHANGE,
    TEXT_DOCUMENT_DID_OPEN,
    Diagnostic,
    DiagnosticSeverity,
    DidChangeTextDocumentParams,
    DidOpenTextDocumentParams,
    Position,
    PublishDiagnosticsParams,
    Range,
    TextDocumentSyncKind,
)
from pygls.lsp.server import LanguageServer

from ctiw.errors import LexError, ParseError
from ctiw.lexer import tokenize
from ctiw.parser import parse

server = LanguageServer("ctiw-lsp", "0.1.0", text_document_sync_kind=TextDocumentSyncKind.Full)


def _line_range(source_lines: list[str], line: int, column: int | None) -> Range:
    """Convert a 1-based error location to an LSP range (0-based)."""
    idx = max(line - 1, 0)
    text = source_lines[idx] if idx < len(source_lines) else ""
    if column is not None:
        start = column - 1
        return Range(
            start=Position(line=idx, character=start),
            end=Position(line=idx, character=start + 1),
        )
    # Whole statement, skipping indentation
    start = len(text) - len(text.lstrip(" \t."))
    end = max(len(text.rstrip()), start)
    return Range(
        start=Position(line=idx, character=start),
        end=Position(line=idx, character=end),
    )


def _parse_diagnostic(err: ParseError, lines: list[str]) -> Diagnostic:
    message = err.message
    if err.suggestion:
        message += f" (did you mean '{err.suggestion}'?)"
    return Diagnostic(
        range=_line_range(lines, err.line, err.column),
        message=message,
        severity=DiagnosticSeverity.Error,
        source="ctiw",
        code=err.kind.value,
    )


def _lex_diagnostic(err: LexError, lines: list[str]) -> Diagnostic:
    return Diagnostic(
        range=_line_range(lines, err.line, err.column),
        message=err.message,
        severity=DiagnosticSeverity.Warning,
        source="ctiw",
        code=err.kind.value,
    )


def _validate(ls: LanguageServer, uri: str) -> None:
    """Run the lexer and parser and publish diagnostics."""
    doc = ls.workspace.get_text_document(uri)
    source = doc.source
    lines = source.splitlines()

    diagnostics: list[Diagnostic] = [_parse_diagnostic(e, lines) for e in parse(source).errors]
    _, lex_errors = tokenize(source)
    diagnostics.extend(_lex_diagnostic(e, lines) for e in lex_errors)

    ls.text_document_publish_diagnostics(
        PublishDiagnosticsParams(uri=uri, diagnostics=diagnostics)
    )


@server.feature(TEXT_DOCUMENT_DID_OPEN)
def did_open(ls: LanguageServer, params: DidOpenTextDocumentParams) -> None:
    _validate(ls, params.text_document.uri)


@server.feature(TEXT_DOCUMENT_DID_CHANGE)
def did_change(ls: LanguageServer, params: DidChangeTextDocumentParams) -> None:
    _validate(ls, params.text_document.uri)


def main() -> None:
    server.start_io()
