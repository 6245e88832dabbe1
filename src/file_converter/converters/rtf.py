"""RTF text extraction and RTF converters."""

from __future__ import annotations

import asyncio
import re
from pathlib import Path

from file_converter.application.cancellation import CancellationToken
from file_converter.application.parameters import ConversionParameters
from file_converter.application.progress import ProgressReporter
from file_converter.converters.base import BaseConverter, read_text, write_text
from file_converter.converters.tabular import DelimitedWriter, write_line_rows
from file_converter.converters.text import line_splitter
from file_converter.formats import FileFormat

_TOKEN_RE = re.compile(
    r"\\(?P<word>[a-zA-Z]+)(?P<param>-?\d+)? ?"
    r"|\\'(?P<hex>[0-9a-fA-F]{2})"
    r"|\\(?P<symbol>.)"
    r"|(?P<group>[{}])"
    r"|(?P<newline>[\r\n])"
    r"|(?P<char>.)",
    re.DOTALL,
)

# Groups whose content is formatting metadata rather than document text.
_DESTINATIONS = frozenset({"fonttbl", "colortbl", "stylesheet", "info", "pict"})

_WORD_TEXT = {"par": "\n", "line": "\n", "tab": "\t", "emdash": "\u2014", "endash": "\u2013"}
_SYMBOL_TEXT = {"\\": "\\", "{": "{", "}": "}", "~": "\u00a0", "_": "-", "\n": "\n", "\r": "\n"}


def strip_rtf(content: str) -> str:
    """Extract plain text from an RTF document.

    Content that does not start with ``{\\rtf`` is returned unchanged.
    Control words are dropped, ``\\par`` and ``\\line`` become newlines,
    ``\\'hh`` and ``\\uN`` escapes are decoded and ignorable destinations
    (``{\\*...}``, font/color tables, stylesheets, info, pictures) are skipped.
    The result is stripped of surrounding whitespace.
    """
    if not content.startswith("{\\rtf"):
        return content

    out: list[str] = []
    stack: list[tuple[bool, int]] = []
    skipping = False
    unicode_fallback = 1
    pending_fallback = 0

    def emit(text: str) -> None:
        nonlocal pending_fallback
        if pending_fallback:
            pending_fallback -= 1
            return
        if not skipping:
            out.append(text)

    for token in _TOKEN_RE.finditer(content):
        kind = token.lastgroup
        if kind == "group":
            if token.group("group") == "{":
                stack.append((skipping, unicode_fallback))
            elif stack:
                skipping, unicode_fallback = stack.pop()
            pending_fallback = 0
        elif kind == "word":
            word = token.group("word")
            param = token.group("param")
            if word in _DESTINATIONS:
                skipping = True
            elif word == "uc" and param is not None:
                unicode_fallback = int(param)
            elif word == "u" and param is not None:
                code = int(param)
                if not skipping:
                    out.append(chr(code + 65536 if code < 0 else code))
                pending_fallback = unicode_fallback
            elif word in _WORD_TEXT:
                emit(_WORD_TEXT[word])
        elif kind == "hex":
            emit(bytes([int(token.group("hex"), 16)]).decode("cp1252", errors="replace"))
        elif kind == "symbol":
            symbol = token.group("symbol")
            if symbol == "*":
                skipping = True
            elif symbol in _SYMBOL_TEXT:
                emit(_SYMBOL_TEXT[symbol])
        elif kind == "char":
            emit(token.group("char"))
        # Raw line breaks in RTF source are not part of the text.
    return "".join(out).strip()


def flatten_line_breaks(text: str) -> str:
    """Replace line breaks with spaces and collapse runs of spaces."""
    text = text.replace("\r", " ").replace("\n", " ")
    return re.sub(r" {2,}", " ", text)


async def extract_rtf_text(path: Path) -> str:
    return await asyncio.to_thread(strip_rtf, await read_text(path))


class RtfToTxtConverter(BaseConverter):
    """Extract plain text from RTF (``preserveLineBreaks``, default true)."""

    input_format = FileFormat.RTF
    output_format = FileFormat.TXT
    description = "RTF to text"

    async def run(
        self,
        input_path: Path,
        output_path: Path,
        parameters: ConversionParameters,
        reporter: ProgressReporter,
        cancel_token: CancellationToken,
    ) -> None:
        reporter.report(20, "Reading RTF file...")
        text = await extract_rtf_text(input_path)
        if not parameters.get_parameter("preserveLineBreaks", True):
            text = flatten_line_breaks(text)
        cancel_token.raise_if_cancelled()

        reporter.report(80, "Writing text file...")
        await write_text(output_path, text, cancel_token)


class _RtfToDelimitedConverter(BaseConverter):
    input_format = FileFormat.RTF
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
        reporter.report(20, "Reading RTF file...")
        text = await extract_rtf_text(input_path)
        cancel_token.raise_if_cancelled()

        reporter.report(40, f"Converting to {writer.label} format...")
        await write_line_rows(
            text.splitlines(),
            line_splitter(parameters.get_parameter("lineDelimiter", "")),
            output_path,
            writer,
            reporter,
            cancel_token,
        )


class RtfToCsvConverter(_RtfToDelimitedConverter):
    """Split extracted RTF text into CSV rows (``lineDelimiter``, ``csvDelimiter``, ``csvQuote``)."""

    output_format = FileFormat.CSV
    description = "RTF to CSV"
    tsv = False


class RtfToTsvConverter(_RtfToDelimitedConverter):
    """Split extracted RTF text into TSV rows (``lineDelimiter``)."""

    output_format = FileFormat.TSV
    description = "RTF to TSV"
    tsv = True
