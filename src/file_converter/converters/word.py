"""DOCX text and table extraction with python-docx."""

from __future__ import annotations

import asyncio
from pathlib import Path

from docx import Document
from docx.document import Document as DocxDocument
from docx.table import Table as DocxTable
from docx.text.paragraph import Paragraph

from file_converter.application.cancellation import CancellationToken
from file_converter.application.parameters import ConversionParameters
from file_converter.application.progress import ProgressReporter
from file_converter.converters.base import BaseConverter, write_text
from file_converter.converters.tabular import (
    DelimitedWriter,
    apply_header_policy,
    select_table,
    write_table,
)
from file_converter.formats import FileFormat
from file_converter.types import Table


def _table_text(table: DocxTable, line_end: str) -> str:
    lines = []
    for row in table.rows:
        cells = [cell.text for cell in row.cells if cell.text]
        if cells:
            lines.append("\t".join(cells) + line_end)
    return "".join(lines)


def _block_text(blocks: list[Paragraph | DocxTable], line_end: str) -> str:
    parts = []
    for block in blocks:
        if isinstance(block, Paragraph):
            parts.append(block.text + line_end)
        else:
            parts.append(_table_text(block, line_end))
    return "".join(parts)


def _unique_section_texts(document: DocxDocument, attribute: str, line_end: str) -> list[str]:
    texts: list[str] = []
    for section in document.sections:
        part = getattr(section, attribute)
        if part.is_linked_to_previous:
            continue
        text = _block_text(list(part.iter_inner_content()), line_end)
        if text.strip() and text not in texts:
            texts.append(text)
    return texts


def extract_docx_text(
    path: Path,
    preserve_line_breaks: bool = True,
    preserve_headers_footers: bool = True,
    include_comments: bool = False,
) -> str:
    """Extract body text, optionally followed by headers, footers and comments.

    Paragraphs and tables are emitted in document order; table rows become
    tab-joined lines of their non-empty cells.
    """
    document = Document(str(path))
    line_end = "\n" if preserve_line_breaks else " "
    text = _block_text(list(document.iter_inner_content()), line_end)

    if preserve_headers_footers:
        text += "\n--- HEADERS ---\n"
        text += "".join(_unique_section_texts(document, "header", line_end))
        text += "\n--- FOOTERS ---\n"
        text += "".join(_unique_section_texts(document, "footer", line_end))

    if include_comments:
        comments = list(document.comments)
        if comments:
            text += "\n--- COMMENTS ---\n"
            for comment in comments:
                text += f"Comment by {comment.author} ({comment.timestamp}):\n"
                body = line_end.join(paragraph.text for paragraph in comment.paragraphs)
                text += body + line_end + "\n"
    return text


def extract_docx_tables(path: Path) -> list[Table]:
    """Return every top-level DOCX table as rows of cell text."""
    document = Document(str(path))
    tables: list[Table] = []
    for table in document.tables:
        rows = [[cell.text for cell in row.cells] for row in table.rows]
        tables.append([row for row in rows if row])
    return tables


class DocxToTxtConverter(BaseConverter):
    """Extract DOCX text.

    Parameters read: ``preserveLineBreaks`` (default true),
    ``preserveHeadersFooters`` (default true) and ``includeComments``
    (default false).
    """

    input_format = FileFormat.DOCX
    output_format = FileFormat.TXT
    description = "DOCX to text"

    async def run(
        self,
        input_path: Path,
        output_path: Path,
        parameters: ConversionParameters,
        reporter: ProgressReporter,
        cancel_token: CancellationToken,
    ) -> None:
        reporter.report(20, "Reading DOCX file...")
        text = await asyncio.to_thread(
            extract_docx_text,
            input_path,
            parameters.get_parameter("preserveLineBreaks", True),
            parameters.get_parameter("preserveHeadersFooters", True),
            parameters.get_parameter("includeComments", False),
        )
        cancel_token.raise_if_cancelled()

        reporter.report(80, "Writing text file...")
        await write_text(output_path, text, cancel_token)


class _DocxTableConverter(BaseConverter):
    input_format = FileFormat.DOCX
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

        reporter.report(20, "Reading DOCX file...")
        tables = await asyncio.to_thread(extract_docx_tables, input_path)
        table = select_table(tables, parameters.get_parameter("tableIndex", 0), "DOCX")
        cancel_token.raise_if_cancelled()

        reporter.report(60, f"Converting table to {writer.label} format...")
        await write_table(
            apply_header_policy(table, parameters.get_parameter("includeHeaders", True)),
            output_path,
            writer,
            reporter,
            cancel_token,
        )


class DocxToCsvConverter(_DocxTableConverter):
    """Extract one DOCX table to CSV (``tableIndex``, ``includeHeaders``, ``csvDelimiter``, ``csvQuote``)."""

    output_format = FileFormat.CSV
    description = "DOCX to CSV"
    tsv = False


class DocxToTsvConverter(_DocxTableConverter):
    """Extract one DOCX table to TSV (``tableIndex``, ``includeHeaders``)."""

    output_format = FileFormat.TSV
    description = "DOCX to TSV"
    tsv = True
