"""Table extraction from HTML and Markdown sources."""

from __future__ import annotations

import asyncio
import html
import re
from collections.abc import Callable
from pathlib import Path

from file_converter.application.cancellation import CancellationToken
from file_converter.application.parameters import ConversionParameters
from file_converter.application.progress import ProgressReporter
from file_converter.converters.base import BaseConverter, read_text
from file_converter.converters.tabular import (
    DelimitedWriter,
    apply_header_policy,
    select_table,
    write_table,
)
from file_converter.formats import FileFormat
from file_converter.types import Row, Table

_TABLE_RE = re.compile(r"<table[^>]*>(.*?)</table>", re.IGNORECASE | re.DOTALL)
_ROW_RE = re.compile(r"<tr[^>]*>(.*?)</tr>", re.IGNORECASE | re.DOTALL)
_CELL_RE = re.compile(r"<t[hd][^>]*>(.*?)</t[hd]>", re.IGNORECASE | re.DOTALL)
_TAG_RE = re.compile(r"<[^>]+>")
_WHITESPACE_RE = re.compile(r"\s+")
_ALIGNMENT_CELL_RE = re.compile(r"^:?-+:?$")


def clean_html_cell(fragment: str) -> str:
    """Strip tags, decode entities and collapse whitespace."""
    text = html.unescape(_TAG_RE.sub("", fragment))
    return _WHITESPACE_RE.sub(" ", text).strip()


def extract_html_tables(content: str) -> list[Table]:
    """Extract every ``<table>`` as a list of rows of cleaned cell text.

    Matching is regex based and non-greedy, so nested tables are not
    supported. Rows without cells and tables without rows are dropped.
    """
    tables: list[Table] = []
    for table_match in _TABLE_RE.finditer(content):
        table: Table = []
        for row_match in _ROW_RE.finditer(table_match.group(1)):
            row = [clean_html_cell(cell) for cell in _CELL_RE.findall(row_match.group(1))]
            if row:
                table.append(row)
        if table:
            tables.append(table)
    return tables


def _is_alignment_row(row: Row) -> bool:
    return bool(row) and all(_ALIGNMENT_CELL_RE.match(cell.replace(" ", "")) for cell in row)


def extract_markdown_tables(content: str) -> list[Table]:
    """Extract pipe tables from Markdown.

    A table is a run of consecutive lines that start and end with ``|``.
    Separator rows such as ``|---|:--:|`` are removed.
    """
    tables: list[Table] = []
    current: Table = []
    for line in content.splitlines():
        stripped = line.strip()
        if len(stripped) >= 2 and stripped.startswith("|") and stripped.endswith("|"):
            row = [cell.strip() for cell in stripped[1:-1].split("|")]
            if not _is_alignment_row(row):
                current.append(row)
        elif current:
            tables.append(current)
            current = []
    if current:
        tables.append(current)
    return tables


class _MarkupTableConverter(BaseConverter):
    output_format = FileFormat.TSV
    source_label: str
    extract: Callable[[str], list[Table]]

    async def run(
        self,
        input_path: Path,
        output_path: Path,
        parameters: ConversionParameters,
        reporter: ProgressReporter,
        cancel_token: CancellationToken,
    ) -> None:
        table_index = parameters.get_parameter("tableIndex", 0)
        include_headers = parameters.get_parameter("includeHeaders", True)

        reporter.report(20, f"Reading {self.source_label} file...")
        content = await read_text(input_path)
        cancel_token.raise_if_cancelled()

        reporter.report(40, f"Extracting tables from {self.source_label}...")
        tables = await asyncio.to_thread(self.extract, content)
        table = select_table(tables, table_index, self.source_label)
        cancel_token.raise_if_cancelled()

        reporter.report(60, "Converting table to TSV format...")
        await write_table(
            apply_header_policy(table, include_headers),
            output_path,
            DelimitedWriter(True, parameters),
            reporter,
            cancel_token,
        )


class HtmlToTsvConverter(_MarkupTableConverter):
    """Extract one HTML table to TSV (``tableIndex``, ``includeHeaders``)."""

    input_format = FileFormat.HTML
    description = "HTML to TSV"
    source_label = "HTML"
    extract = staticmethod(extract_html_tables)


class MarkdownToTsvConverter(_MarkupTableConverter):
    """Extract one Markdown pipe table to TSV (``tableIndex``, ``includeHeaders``)."""

    input_format = FileFormat.MD
    description = "Markdown to TSV"
    source_label = "Markdown"
    extract = staticmethod(extract_markdown_tables)
