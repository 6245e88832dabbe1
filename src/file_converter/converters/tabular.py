"""Delimited-text escaping and table selection helpers."""

from __future__ import annotations

import asyncio
import csv
from collections.abc import Callable, Iterable, Sequence
from pathlib import Path

from file_converter.application.cancellation import CancellationToken
from file_converter.application.parameters import ConversionParameters
from file_converter.application.progress import ProgressReporter
from file_converter.converters.base import join_lines, write_text
from file_converter.errors import TableNotFoundError
from file_converter.types import Row, Table

DEFAULT_CSV_DELIMITER = ","
DEFAULT_CSV_QUOTE = '"'


def escape_tsv(field: str) -> str:
    """Escape a field for TSV output.

    TSV has no quoting, so embedded tabs are replaced by single spaces. This
    is lossy: a tab inside a field does not survive a round trip.
    """
    return field.replace("\t", " ")


def escape_csv(field: str, delimiter: str = ",", quote: str = '"') -> str:
    """Escape a field for CSV output.

    Fields containing the delimiter, the quote character or a line terminator
    are wrapped in quotes with embedded quotes doubled. Anything else is
    returned unchanged.
    """
    if not any(token in field for token in (delimiter, quote, "\n", "\r")):
        return field
    return quote + field.replace(quote, quote * 2) + quote


def format_tsv_row(cells: Iterable[str]) -> str:
    return "\t".join(escape_tsv(cell) for cell in cells)


def format_csv_row(cells: Iterable[str], delimiter: str = ",", quote: str = '"') -> str:
    return delimiter.join(escape_csv(cell, delimiter, quote) for cell in cells)


def parse_csv_line(line: str, delimiter: str = ",", quote: str = '"') -> Row:
    """Split one CSV line into unescaped fields."""
    reader = csv.reader([line], delimiter=delimiter, quotechar=quote, strict=False)
    return next(reader, [""])


def get_char_parameter(parameters: ConversionParameters, name: str, default: str) -> str:
    """Read a single-character parameter such as ``csvDelimiter``.

    Values that are not exactly one character long fall back to ``default``.
    """
    value = parameters.get_parameter(name, default)
    if len(value) != 1:
        return default
    return value


class DelimitedWriter:
    """Row formatter for a CSV or TSV target.

    Parameters
    ----------
    tsv : bool
        Emit TSV rows when true, CSV rows otherwise.
    parameters : ConversionParameters
        Source of ``csvDelimiter`` and ``csvQuote`` for CSV targets.
    """

    def __init__(self, tsv: bool, parameters: ConversionParameters) -> None:
        self.tsv = tsv
        self.delimiter = "\t" if tsv else get_char_parameter(
            parameters, "csvDelimiter", DEFAULT_CSV_DELIMITER
        )
        self.quote = get_char_parameter(parameters, "csvQuote", DEFAULT_CSV_QUOTE)

    @property
    def label(self) -> str:
        return "TSV" if self.tsv else "CSV"

    def format_row(self, cells: Iterable[str]) -> str:
        if self.tsv:
            return format_tsv_row(cells)
        return format_csv_row(cells, self.delimiter, self.quote)


def select_table(tables: Sequence[Table], index: int, source: str) -> Table:
    """Return the table at zero-based ``index``.

    Raises
    ------
    TableNotFoundError
        If ``tables`` is empty or ``index`` is out of range.
    """
    if not tables:
        raise TableNotFoundError(f"No tables found in the {source} file.")
    if index < 0 or index >= len(tables):
        raise TableNotFoundError(
            f"Table index {index} is out of range. Only {len(tables)} tables found."
        )
    return tables[index]


def apply_header_policy(table: Table, include_headers: bool) -> Table:
    """Drop the first (header) row unless ``include_headers`` is set."""
    return table if include_headers else table[1:]


async def write_line_rows(
    lines: Sequence[str],
    to_row: Callable[[str], Row | None],
    output_path: Path,
    writer: DelimitedWriter,
    reporter: ProgressReporter,
    cancel_token: CancellationToken,
) -> None:
    """Convert ``lines`` and write the delimited result.

    ``to_row`` returns ``None`` for lines that should be skipped. Lines are
    converted in a worker thread, a tenth of the input at a time; progress
    between 40% and 95% is reported from the calling task after each chunk.
    """
    total = len(lines)
    chunk_size = max(1, total // 10)

    def build(chunk: Sequence[str]) -> list[str]:
        rows: list[str] = []
        for line in chunk:
            cancel_token.raise_if_cancelled()
            row = to_row(line)
            if row is not None:
                rows.append(writer.format_row(row))
        return rows

    rows: list[str] = []
    for start in range(0, total, chunk_size):
        rows.extend(await asyncio.to_thread(build, lines[start : start + chunk_size]))
        cancel_token.raise_if_cancelled()
        done = min(start + chunk_size, total)
        reporter.report(40 + done * 55 / total, f"Converting line {done} of {total}...")

    content = join_lines(rows)
    await write_text(output_path, content, cancel_token)


async def write_table(
    table: Table,
    output_path: Path,
    writer: DelimitedWriter,
    reporter: ProgressReporter,
    cancel_token: CancellationToken,
    start: float = 60,
) -> None:
    """Write an extracted table, reporting per-row progress up to 80%."""
    total = len(table)
    rows: list[str] = []
    for index, cells in enumerate(table):
        cancel_token.raise_if_cancelled()
        rows.append(writer.format_row(cells))
        reporter.report_step(
            index, total, start, 80 - start, f"Converting row {index + 1} of {total}..."
        )
    reporter.report(80, f"Writing {writer.label} file...")
    await write_text(output_path, join_lines(rows), cancel_token)
