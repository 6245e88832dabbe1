#!/usr/bin/env python3
"""
file_converter.cli.cli

Typer-based CLI for converting documents and data files by extension.

Examples
--------
Convert a Markdown table to TSV, keeping the header row:

    file-converter convert notes.md table.tsv --param tableIndex=0

Flatten a nested JSON array with a custom separator:

    file-converter convert data.json data.csv --param arrayPath=payload.items \
        --param flattenSeparator=_

List every supported conversion path:

    file-converter formats
"""

from __future__ import annotations

import logging
import signal
import sys
import traceback
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

import typer

from file_converter.application import (
    CancellationToken,
    ConversionParameters,
    ConversionProgress,
)
from file_converter.errors import ConversionError, ConverterLoadError

app = typer.Typer(
    name="file-converter",
    help="Convert documents and data files (TXT, CSV, TSV, HTML, MD, JSON, XML, DOCX, PDF, RTF).",
    no_args_is_help=True,
)

PARAM_HELP = "Converter parameter KEY=VALUE (repeatable). Example: --param csvDelimiter=;"
MODULE_HELP = "Import path or file path of an extra converter module (repeatable)."


def _print_conversion_error(exc: BaseException, debug: bool) -> int:
    """Print a user-friendly conversion error.

    Parameters
    ----------
    exc : BaseException
        Error carried by a failed result or raised during conversion.
    debug : bool
        Whether to include traceback details.

    Returns
    -------
    int
        Process exit code.
    """
    typer.echo(f"[red]✗ {type(exc).__name__}:[/red] {exc}", err=True)
    if debug:
        typer.echo("\n[dim]Traceback:[/dim]", err=True)
        typer.echo("".join(traceback.format_exception(type(exc), exc, exc.__traceback__)), err=True)
    code = getattr(exc, "exit_code", None)
    if isinstance(code, int) and code > 0:
        return code
    return 1


def _coerce_option_value(raw: str) -> object:
    """Best-effort coercion for CLI key/value options."""
    lowered = raw.lower()
    if lowered in {"true", "false"}:
        return lowered == "true"
    try:
        if "." in raw:
            return float(raw)
        return int(raw)
    except ValueError:
        return raw


def _parse_params(param_items: list[str] | None) -> ConversionParameters:
    """Parse repeatable KEY=VALUE converter parameters."""
    parsed = ConversionParameters()
    for item in param_items or []:
        if "=" not in item:
            raise typer.BadParameter(f"Invalid parameter entry '{item}'. Use KEY=VALUE format.")
        key, raw_value = item.split("=", 1)
        key = key.strip()
        if not key:
            raise typer.BadParameter("Parameter key cannot be empty.")
        parsed.add_parameter(key, _coerce_option_value(raw_value))
    return parsed


def _echo_progress(tick: ConversionProgress) -> None:
    typer.echo(f"[{tick.percent_complete:5.1f}%] {tick.status_message}")


@contextmanager
def _cancel_on_interrupt(token: CancellationToken) -> Iterator[None]:
    """Turn Ctrl+C into a cooperative cancellation request."""

    def _handler(signum: int, frame: object) -> None:
        typer.echo("Cancellation requested, finishing current step...", err=True)
        token.cancel()

    previous = signal.signal(signal.SIGINT, _handler)
    try:
        yield
    finally:
        signal.signal(signal.SIGINT, previous)


def _build_engine(converter_modules: list[str] | None):
    from file_converter.engine import create_default_engine

    try:
        return create_default_engine(converter_modules)
    except ConverterLoadError as exc:
        raise typer.BadParameter(str(exc)) from exc


# -----------------------------
# Global options
# -----------------------------
@app.callback()
def _main(
    ctx: typer.Context,
    debug: bool = typer.Option(False, "--debug", help="Show full tracebacks on error."),
    verbose: bool = typer.Option(False, "--verbose", help="Enable debug logging."),
) -> None:
    """Initialize shared CLI state.

    Parameters
    ----------
    ctx : typer.Context
        Typer context object used to store shared state.
    debug : bool, default=False
        Whether to enable debug error output.
    verbose : bool, default=False
        Whether to configure DEBUG-level logging.
    """
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        )
    ctx.obj = {"debug": debug}


# -----------------------------
# Commands
# -----------------------------
@app.command("convert")
def convert_cmd(
    ctx: typer.Context,
    input_path: Path = typer.Argument(..., help="File to convert; its extension selects the input format."),
    output_path: Path = typer.Argument(..., help="Destination file; its extension selects the output format."),
    params: list[str] | None = typer.Option(None, "--param", help=PARAM_HELP),
    converter_modules: list[str] | None = typer.Option(
        None, "--converter-module", help=MODULE_HELP
    ),
    show_progress: bool = typer.Option(
        True, "--progress/--no-progress", help="Print progress ticks."
    ),
) -> None:
    """Convert INPUT_PATH into OUTPUT_PATH.

    Notes
    -----
    - Press Ctrl+C to cancel; the conversion stops at the next checkpoint.
    - Exit codes: 2 missing input, 3 unknown format, 4 unsupported pair,
      130 cancelled, 1 any other failure.
    """
    import asyncio

    debug: bool = bool(ctx.obj.get("debug", False))
    parameters = _parse_params(params)
    engine = _build_engine(converter_modules)
    token = CancellationToken()

    try:
        with _cancel_on_interrupt(token):
            result = asyncio.run(
                engine.convert_file(
                    input_path,
                    output_path,
                    parameters,
                    _echo_progress if show_progress else None,
                    token,
                )
            )
    except (ValueError, ConversionError) as exc:
        raise typer.Exit(code=_print_conversion_error(exc, debug))

    if result.success:
        typer.echo(
            f"[green]✓ Saved:[/green] {result.output_path} "
            f"({result.input_format.label} -> {result.output_format.label}, "
            f"{result.elapsed_time.total_seconds():.2f}s)"
        )
        return
    assert result.error is not None
    raise typer.Exit(code=_print_conversion_error(result.error, debug))


@app.command("formats")
def formats_cmd(
    converter_modules: list[str] | None = typer.Option(
        None, "--converter-module", help=MODULE_HELP
    ),
) -> None:
    """List every supported input -> output conversion path."""
    engine = _build_engine(converter_modules)
    paths = sorted(engine.supported_conversion_paths())
    for source, target in paths:
        typer.echo(f"{source.label} -> {target.label}")
    typer.echo(f"{len(paths)} conversion paths")


@app.command("doctor")
def doctor_cmd() -> None:
    """Print installed library versions and registered converters."""
    import importlib.metadata as metadata

    modules = [
        "pydantic",
        "typer",
        "pdfplumber",
        "python-docx",
        "markdown-it-py",
        "fastapi",
        "uvicorn",
    ]

    typer.echo(f"Python: {sys.version.split()[0]}")
    for module in modules:
        try:
            version = metadata.version(module)
            typer.echo(f"{module}: {version}")
        except metadata.PackageNotFoundError:
            typer.echo(f"{module}: <not installed>")

    engine = _build_engine(None)
    names = [getattr(c, "name", type(c).__name__) for c in engine.converters]
    typer.echo(f"converters ({len(names)}): {', '.join(names)}")
    ambiguous = engine.ambiguous_conversion_paths()
    if ambiguous:
        typer.echo(
            "[yellow]Note:[/yellow] overlapping converters for "
            + ", ".join(f"{s.label}->{t.label}" for s, t in sorted(ambiguous))
        )


if __name__ == "__main__":
    app()
