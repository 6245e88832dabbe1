"""PDF text and table extraction from pdfplumber word boxes."""

from __future__ import annotations

import asyncio
from collections import Counter
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from pathlib import Path

import pdfplumber

from file_converter.application.cancellation import CancellationToken
from file_converter.application.parameters import ConversionParameters
from file_converter.application.progress import ProgressReporter
from file_converter.converters.base import BaseConverter, join_lines, write_text
from file_converter.converters.tabular import (
    DelimitedWriter,
    apply_header_policy,
    select_table,
    write_table,
)
from file_converter.errors import TableNotFoundError
from file_converter.formats import FileFormat
from file_converter.types import Table

DEFAULT_TABLE_THRESHOLD = 10.0
TEXT_LINE_THRESHOLD = 5.0
PAGE_SEPARATOR = "=" * 42


@dataclass(frozen=True)
class PdfWord:
    """One word box in page coordinates (origin at the top-left corner)."""

    text: str
    x0: float
    x1: float
    top: float
    bottom: float

    @property
    def center(self) -> float:
        return (self.x0 + self.x1) / 2


def read_pdf_words(path: Path) -> list[list[PdfWord]]:
    """Return the words of every page, in pdfplumber extraction order."""
    pages: list[list[PdfWord]] = []
    with pdfplumber.open(path) as pdf:
        for page in pdf.pages:
            pages.append(
                [
                    PdfWord(
                        text=word["text"],
                        x0=float(word["x0"]),
                        x1=float(word["x1"]),
                        top=float(word["top"]),
                        bottom=float(word["bottom"]),
                    )
                    for word in page.extract_words()
                ]
            )
    return pages


def group_lines(
    words: Sequence[PdfWord],
    threshold: float,
    key: Callable[[PdfWord], float],
) -> list[list[PdfWord]]:
    """Cluster words into lines by vertical proximity.

    Words are visited top to bottom; a word joins the current line when its
    ``key`` coordinate is within ``threshold`` of the line's first word.
    Each resulting line is sorted left to right.
    """
    lines: list[list[PdfWord]] = []
    current: list[PdfWord] = []
    current_y = 0.0
    for word in sorted(words, key=lambda w: (key(w), w.x0)):
        if current and abs(key(word) - current_y) <= threshold:
            current.append(word)
            continue
        if current:
            lines.append(sorted(current, key=lambda w: w.x0))
        current = [word]
        current_y = key(word)
    if current:
        lines.append(sorted(current, key=lambda w: w.x0))
    return lines


def column_boundaries(lines: Sequence[Sequence[PdfWord]], threshold: float) -> list[float]:
    """Infer column band edges from horizontal gaps across all lines.

    The horizontal extents of all words are merged into occupied spans;
    every empty gap of at least ``threshold`` between two spans yields a
    boundary at its midpoint. With fewer than two columns the horizontal
    extent is split into thirds.
    """
    extents = sorted((word.x0, word.x1) for line in lines for word in line)
    if not extents:
        return []
    boundaries = [0.0]
    span_end = extents[0][1]
    for x0, x1 in extents[1:]:
        if x0 - span_end >= threshold:
            boundaries.append((span_end + x0) / 2)
        span_end = max(span_end, x1)
    boundaries.append(span_end + 1)
    if len(boundaries) < 3:
        low, high = extents[0][0], span_end
        width = high - low
        boundaries = [low, low + width / 3, low + 2 * width / 3, high + 1]
    return boundaries


def _column_index(word: PdfWord, boundaries: Sequence[float]) -> int:
    for index in range(len(boundaries) - 1):
        if boundaries[index] <= word.center < boundaries[index + 1]:
            return index
    return len(boundaries) - 2


def detect_table(words: Sequence[PdfWord], threshold: float = DEFAULT_TABLE_THRESHOLD) -> Table:
    """Reconstruct a table from the words of a single page.

    Lines with fewer than two words are ignored. Rows whose number of filled
    cells differs from the most common count are discarded as noise.
    """
    lines = group_lines(words, threshold, key=lambda w: w.bottom)
    boundaries = column_boundaries(lines, threshold)
    table: Table = []
    for line in lines:
        if len(line) < 2:
            continue
        cells: list[list[str]] = [[] for _ in range(len(boundaries) - 1)]
        for word in line:
            cells[_column_index(word, boundaries)].append(word.text)
        table.append([" ".join(cell) for cell in cells])
    if not table:
        return table

    filled = [sum(1 for cell in row if cell) for row in table]
    majority, _ = Counter(filled).most_common(1)[0]
    return [row for row, count in zip(table, filled) if count == majority]


def extract_pdf_tables(
    path: Path,
    page_number: int = 1,
    threshold: float = DEFAULT_TABLE_THRESHOLD,
) -> list[Table]:
    """Return the tables detected on 1-based ``page_number``.

    Raises
    ------
    TableNotFoundError
        If ``page_number`` is outside the document.
    """
    pages = read_pdf_words(path)
    if page_number < 1 or page_number > len(pages):
        raise TableNotFoundError(
            f"Page number {page_number} is out of range. PDF has {len(pages)} pages."
        )
    table = detect_table(pages[page_number - 1], threshold)
    return [table] if table else []


def extract_pdf_text(
    path: Path,
    preserve_page_breaks: bool = True,
    include_page_numbers: bool = False,
    order_by_position: bool = True,
) -> str:
    pages = read_pdf_words(path)
    lines: list[str] = []
    for number, words in enumerate(pages, start=1):
        if include_page_numbers:
            lines.append(f"--- Page {number} ---")
        if order_by_position:
            for line in group_lines(words, TEXT_LINE_THRESHOLD, key=lambda w: w.top):
                lines.append(" ".join(word.text for word in line))
        else:
            lines.append(" ".join(word.text for word in words))
        if preserve_page_breaks and number < len(pages):
            lines.extend(["", PAGE_SEPARATOR, ""])
    return join_lines(lines)


class PdfToTxtConverter(BaseConverter):
    """Extract PDF text line by line.

    Parameters read: ``preservePageBreaks`` (default true),
    ``includePageNumbers`` (default false) and ``orderByPosition``
    (default true).
    """

    input_format = FileFormat.PDF
    output_format = FileFormat.TXT
    description = "PDF to text"

    async def run(
        self,
        input_path: Path,
        output_path: Path,
        parameters: ConversionParameters,
        reporter: ProgressReporter,
        cancel_token: CancellationToken,
    ) -> None:
        reporter.report(20, "Reading PDF file...")
        text = await asyncio.to_thread(
            extract_pdf_text,
            input_path,
            parameters.get_parameter("preservePageBreaks", True),
            parameters.get_parameter("includePageNumbers", False),
            parameters.get_parameter("orderByPosition", True),
        )
        cancel_token.raise_if_cancelled()

        reporter.report(80, "Writing text file...")
        await write_text(output_path, text, cancel_token)


class _PdfTableConverter(BaseConverter):
    input_format = FileFormat.PDF
    tsv: bool

    async def run(
        self,
        input_path: Path,
        output_path: Path,
        parameters: ConversionParameters,
        reporter: ProgressReporter,
        cancel_token: CancellationToken,
    ) -> None:
        writer = DelimitedWriter(self.tsv, parameters)

        reporter.report(20, "Reading PDF file...")
        tables = await asyncio.to_thread(
            extract_pdf_tables,
            input_path,
            parameters.get_parameter("pageNumber", 1),
            parameters.get_parameter("tableDetectionThreshold", DEFAULT_TABLE_THRESHOLD),
        )
        if not tables:
            raise TableNotFoundError(
                "No tables found in the PDF file. Try adjusting the table detection threshold."
            )
        table = select_table(tables, parameters.get_parameter("tableIndex", 0), "PDF")
        cancel_token.raise_if_cancelled()

        reporter.report(60, f"Converting table to {writer.label} format...")
        await write_table(
            apply_header_policy(table, parameters.get_parameter("includeHeaders", True)),
            output_path,
            writer,
            reporter,
            cancel_token,
        )


class PdfToCsvConverter(_PdfTableConverter):
    """Reconstruct a PDF table as CSV.

    Parameters read: ``pageNumber`` (1-based), ``tableIndex``,
    ``includeHeaders``, ``tableDetectionThreshold`` (default 10.0),
    ``csvDelimiter`` and ``csvQuote``.
    """

    output_format = FileFormat.CSV
    description = "PDF to CSV"
    tsv = False


class PdfToTsvConverter(_PdfTableConverter):
    output_format = FileFormat.TSV
    description = "PDF to TSV"
    tsv = True
