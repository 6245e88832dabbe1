"""Unit tests for RTF text extraction and converters."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import pytest

from file_converter.application import ConversionResult
from file_converter.converters.rtf import (
    RtfToCsvConverter,
    RtfToTsvConverter,
    RtfToTxtConverter,
    flatten_line_breaks,
    strip_rtf,
)

RunConverter = Callable[..., ConversionResult]

DOCUMENT = (
    r"{\rtf1\ansi\deff0{\fonttbl{\f0 Arial;}}{\colortbl;\red0\green0\blue0;}"
    "\n"
    r"{\*\generator Riched20 10.0;}\f0\fs24 Hello {\b bold} world\par"
    "\n"
    r"Second line\par}"
)


def test_strip_rtf_skips_destinations_and_keeps_group_text() -> None:
    """Drop font tables and ignorable groups; keep text inside formatting groups."""
    assert strip_rtf(DOCUMENT) == "Hello bold world\nSecond line"


@pytest.mark.parametrize(
    ("content", "expected"),
    [
        (r"{\rtf1 caf\u233?}", "café"),
        (r"{\rtf1\uc2 x\u8364ab y}", "x€ y"),
        (r"{\rtf1 na\'efve}", "naïve"),
        (r"{\rtf1 a\tab b}", "a\tb"),
        (r"{\rtf1 a\{b\}c\\d}", "a{b}c\\d"),
        (r"{\rtf1 one\line two}", "one\ntwo"),
    ],
)
def test_strip_rtf_escapes(content: str, expected: str) -> None:
    """Decode unicode, hex and symbol escapes."""
    assert strip_rtf(content) == expected


def test_strip_rtf_returns_non_rtf_unchanged() -> None:
    """Leave plain text alone."""
    assert strip_rtf("just text\n") == "just text\n"


def test_flatten_line_breaks() -> None:
    """Replace newlines with spaces and collapse runs."""
    assert flatten_line_breaks("a\n\nb  c\r\nd") == "a b c d"


def test_rtf_to_txt(tmp_path: Path, run_converter: RunConverter) -> None:
    """Write the extracted text as-is by default."""
    source = tmp_path / "doc.rtf"
    source.write_text(DOCUMENT, encoding="utf-8")
    target = tmp_path / "doc.txt"

    result = run_converter(RtfToTxtConverter(), source, target)

    assert result.success, result.error_message
    assert target.read_text(encoding="utf-8") == "Hello bold world\nSecond line"


def test_rtf_to_txt_flattened(tmp_path: Path, run_converter: RunConverter) -> None:
    """Join lines with spaces when preserveLineBreaks is false."""
    source = tmp_path / "doc.rtf"
    source.write_text(r"{\rtf1 one\par two}", encoding="utf-8")
    target = tmp_path / "doc.txt"

    result = run_converter(RtfToTxtConverter(), source, target, {"preserveLineBreaks": False})

    assert result.success
    assert target.read_text(encoding="utf-8") == "one two"


def test_rtf_to_tsv_and_csv(tmp_path: Path, run_converter: RunConverter) -> None:
    """Split extracted lines on lineDelimiter."""
    source = tmp_path / "doc.rtf"
    source.write_text(r"{\rtf1 a;b\par c;d e\par}", encoding="utf-8")

    tsv = tmp_path / "doc.tsv"
    csv = tmp_path / "doc.csv"
    assert run_converter(RtfToTsvConverter(), source, tsv, {"lineDelimiter": ";"}).success
    assert run_converter(RtfToCsvConverter(), source, csv).success

    assert tsv.read_text(encoding="utf-8") == "a\tb\nc\td e\n"
    assert csv.read_text(encoding="utf-8") == "a;b\nc;d e\n"
