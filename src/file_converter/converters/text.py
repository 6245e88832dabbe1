"""Plain-text converters."""

from __future__ import annotations

import html
from collections.abc import Callable
from pathlib import Path

from file_converter.application.cancellation import CancellationToken
from file_converter.application.parameters import ConversionParameters
from file_converter.application.progress import ProgressReporter
from file_converter.converters.base import BaseConverter, read_lines, read_text, write_text
from file_converter.converters.tabular import DelimitedWriter, write_line_rows
from file_converter.formats import FileFormat
from file_converter.types import Row

DEFAULT_TITLE = "Converted Document"

TEXT_CSS = """
    body {
        font-family: Arial, sans-serif;
        line-height: 1.6;
        padding: 20px;
        color: #333;
        max-width: 800px;
        margin: 0 auto;
    }
    .content {
        background-color: #fff;
        padding: 20px;
        border-radius: 5px;
        box-shadow: 0 2px 5px rgba(0,0,0,0.1);
    }
"""


def render_html_document(title: str, css: str, body: str) -> str:
    """Wrap an already-rendered HTML fragment in a standalone page.

    ``title`` is escaped; ``css`` and ``body`` are inserted verbatim.
    """
    return (
        "<!DOCTYPE html>\n"
        '<html lang="en">\n'
        "<head>\n"
        '  <meta charset="UTF-8">\n'
        '  <meta name="viewport" content="width=device-width, initial-scale=1.0">\n'
        f"  <title>{html.escape(title)}</title>\n"
        "  <style>\n"
        f"    {css}\n"
        "  </style>\n"
        "</head>\n"
        "<body>\n"
        '  <div class="content">\n'
        f"    {body}\n"
        "  </div>\n"
        "</body>\n"
        "</html>\n"
    )


def text_to_html_fragment(text: str, preserve_line_breaks: bool = True) -> str:
    escaped = html.escape(text)
    if preserve_line_breaks:
        escaped = escaped.replace("\r\n", "<br>").replace("\n", "<br>").replace("\r", "<br>")
    return escaped


def line_splitter(line_delimiter: str) -> Callable[[str], Row | None]:
    """Build a line-to-row function for free-form text.

    Blank lines are skipped. With a non-empty ``line_delimiter`` each line is
    split on it and every field trimmed; otherwise the whole line is a single
    field.
    """

    def to_row(line: str) -> Row | None:
        if not line.strip():
            return None
        if line_delimiter:
            return [field.strip() for field in line.split(line_delimiter)]
        return [line]

    return to_row


class TxtToHtmlConverter(BaseConverter):
    """Render a text file as an HTML page.

    Parameters read: ``title`` (default ``"Converted Document"``), ``css``
    and ``preserveLineBreaks`` (default true).
    """

    input_format = FileFormat.TXT
    output_format = FileFormat.HTML
    description = "TXT to HTML"

    async def run(
        self,
        input_path: Path,
        output_path: Path,
        parameters: ConversionParameters,
        reporter: ProgressReporter,
        cancel_token: CancellationToken,
    ) -> None:
        reporter.report(20, "Reading text file...")
        cancel_token.raise_if_cancelled()
        content = await read_text(input_path)

        reporter.report(50, "Converting to HTML format...")
        cancel_token.raise_if_cancelled()
        fragment = text_to_html_fragment(
            content, parameters.get_parameter("preserveLineBreaks", True)
        )
        document = render_html_document(
            parameters.get_parameter("title", DEFAULT_TITLE),
            parameters.get_parameter("css", TEXT_CSS),
            fragment,
        )

        reporter.report(80, "Writing HTML file...")
        cancel_token.raise_if_cancelled()
        await write_text(output_path, document, cancel_token)


class _TxtToDelimitedConverter(BaseConverter):
    input_format = FileFormat.TXT
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
        reporter.report(20, "Reading text file...")
        lines = await read_lines(input_path)
        cancel_token.raise_if_cancelled()
        if not lines:
            await write_text(output_path, "", cancel_token)
            return

        reporter.report(40, f"Converting to {writer.label} format...")
        await write_line_rows(
            lines,
            line_splitter(parameters.get_parameter("lineDelimiter", "")),
            output_path,
            writer,
            reporter,
            cancel_token,
        )


class TxtToCsvConverter(_TxtToDelimitedConverter):
    """Split text lines into CSV rows (``lineDelimiter``, ``csvDelimiter``, ``csvQuote``)."""

    output_format = FileFormat.CSV
    description = "TXT to CSV"
    tsv = False


class TxtToTsvConverter(_TxtToDelimitedConverter):
    """Split text lines into TSV rows (``lineDelimiter``)."""

    output_format = FileFormat.TSV
    description = "TXT to TSV"
    tsv = True
