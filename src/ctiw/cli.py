"""Command-line interface for CTIW."""

from __future__ import annotations

import argparse
import sys
import time
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any


class ConfigError(Exception):
    """Raised when ctiw.toml cannot be read or has the wrong shape."""


@dataclass(frozen=True, slots=True)
class CliOptions:
    """Parsed CLI options."""

    input_file: Path
    output_file: Path | None
    css_file: Path | None
    strict: bool
    watch: bool
    debug: bool
    tokens: bool


@dataclass(frozen=True, slots=True)
class CompileOutcome:
    """What one compile pass produced, before anything is written."""

    html: str
    css: str
    diagnostics: list[str]
    warnings: list[str]


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser (separate function for testability)."""
    p = argparse.ArgumentParser(
        prog="ctiw",
        description="CTIW markup language compiler",
    )
    p.add_argument("input", help="Input .ctiw file")
    p.add_argument("-o", "--output", help="Output HTML file (default: stdout)")
    p.add_argument(
        "--css-out",
        metavar="FILE",
        help="Also write the id-selector stylesheet to FILE",
    )
    p.add_argument(
        "--strict",
        action="store_true",
        default=None,
        help="Exit with status 1 if the document has any errors",
    )
    p.add_argument(
        "--config",
        metavar="FILE",
        help="Config file (default: auto-discover ctiw.toml)",
    )
    p.add_argument("--watch", action="store_true", help="Watch for changes and recompile")
    p.add_argument("--debug", action="store_true", help="Dump AST to stderr")
    p.add_argument("--tokens", action="store_true", help="Dump lexer tokens to stderr")
    return p


def load_config(config_path: Path | None, input_dir: Path) -> dict[str, Any]:
    """Load a TOML config file, returning an empty dict on missing/absent file."""
    path = config_path if config_path is not None else input_dir / "ctiw.toml"

    if not path.is_file():
        return {}

    try:
        with open(path, "rb") as f:
            return tomllib.load(f)
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(f"{path}: {exc}") from exc


def resolve_options(args: argparse.Namespace) -> CliOptions:
    """Merge config file and CLI args into CliOptions.

    Precedence: config file < CLI flags.
    """
    input_file = Path(args.input)
    input_dir = input_file.parent
    if not input_dir.parts:
        input_dir = Path(".")

    config_path = Path(args.config) if args.config else None
    config = load_config(config_path, input_dir)

    # Strict mode: config < CLI
    strict = False
    cfg_strict = config.get("strict")
    if cfg_strict is not None:
        if not isinstance(cfg_strict, bool):
            raise ConfigError("'strict' must be true or false")
        strict = cfg_strict
    if args.strict is not None:
        strict = args.strict

    # Stylesheet output: config < CLI
    css_file: Path | None = None
    cfg_output = config.get("output")
    if isinstance(cfg_output, dict):
        cfg_css = cfg_output.get("css")
        if isinstance(cfg_css, str):
            css_file = input_dir / cfg_css
        elif cfg_css is not None:
            raise ConfigError("'output.css' must be a path string")
    if args.css_out:
        css_file = Path(args.css_out)

    output_file = Path(args.output) if args.output else None

    return CliOptions(
        input_file=input_file,
        output_file=output_file,
        css_file=css_file,
        strict=strict,
        watch=args.watch,
        debug=args.debug,
        tokens=args.tokens,
    )


def compile_file(options: CliOptions) -> CompileOutcome:
    """Read and compile a CTIW file; diagnostics are returned, not printed."""
    from ctiw.debug import dump_ast, dump_tokens
    from ctiw.lexer import tokenize
    from ctiw.parser import parse
    from ctiw.render import generate_css, generate_html

    source = options.input_file.read_text(encoding="utf-8")
    filename = str(options.input_file)

    tokens, lex_errors = tokenize(source)
    if options.tokens:
        dump_tokens(tokens, lex_errors)

    result = parse(source)

    if options.debug:
        dump_ast(result.document)

    return CompileOutcome(
        html=generate_html(result.document),
        css=generate_css(result.document.children),
        diagnostics=[err.format(filename) for err in result.errors],
        warnings=[err.format(filename, "warning") for err in lex_errors],
    )


def _write_outputs(options: CliOptions, outcome: CompileOutcome) -> None:
    if options.output_file:
        options.output_file.write_text(outcome.html, encoding="utf-8")
    else:
        sys.stdout.write(outcome.html)
        sys.stdout.flush()
    if options.css_file:
        options.css_file.write_text(outcome.css + "\n" if outcome.css else "", encoding="utf-8")


def watch_loop(options: CliOptions) -> None:
    """Poll input file for changes, recompile on each modification."""
    last_mtime = 0.0
    print(f"Watching {options.input_file} for changes...", file=sys.stderr)
    try:
        while True:
            try:
                mtime = options.input_file.stat().st_mtime
            except OSError:
                time.sleep(0.5)
                continue
            if mtime != last_mtime:
                last_mtime = mtime
                try:
                    outcome = compile_file(options)
                except (OSError, UnicodeDecodeError) as exc:
                    print(f"error: {exc}", file=sys.stderr)
                else:
                    for message in outcome.diagnostics + outcome.warnings:
                        print(message, file=sys.stderr)
                    _write_outputs(options, outcome)
                    print(f"Compiled {options.input_file}", file=sys.stderr)
            time.sleep(0.5)
    except KeyboardInterrupt:
        pass


def main(argv: list[str] | None = None) -> int:
    """CLI entry point. Returns exit code (0/1/2). Does not call sys.exit()."""
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        options = resolve_options(args)
    except ConfigError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2

    if options.watch:
        watch_loop(options)
        return 0

    try:
        outcome = compile_file(options)
    except (OSError, UnicodeDecodeError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2

    for message in outcome.diagnostics + outcome.warnings:
        print(message, file=sys.stderr)

    _write_outputs(options, outcome)

    # Lex warnings never fail a strict build
    if options.strict and outcome.diagnostics:
        return 1
    return 0
