"""Unit tests for the shared converter protocol."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from pathlib import Path

import pytest

from file_converter.application import (
    CancellationToken,
    ConversionParameters,
    ConversionProgress,
    ConversionResult,
    Converter,
    ProgressReporter,
)
from file_converter.converters import BUILTIN_CONVERTERS, builtin_converters
from file_converter.converters.base import BaseConverter, write_text_atomic
from file_converter.converters.text import TxtToCsvConverter, TxtToHtmlConverter
from file_converter.errors import ConversionCancelledError, InputFileNotFoundError
from file_converter.formats import FileFormat

RunConverter = Callable[..., ConversionResult]


class ExplodingConverter(BaseConverter):
    input_format = FileFormat.TXT
    output_format = FileFormat.MD
    description = "exploding"

    async def run(
        self,
        input_path: Path,
        output_path: Path,
        parameters: ConversionParameters,
        reporter: ProgressReporter,
        cancel_token: CancellationToken,
    ) -> None:
        reporter.report(30, "About to fail...")
        raise ValueError("parser exploded")


def test_builtin_registration_order_and_protocol() -> None:
    """Register 21 converters, each satisfying the converter port."""
    converters = builtin_converters()
    assert len(converters) == len(BUILTIN_CONVERTERS) == 21
    assert converters[0].name == "TxtToHtmlConverter"
    assert converters[-1].name == "RtfToTsvConverter"
    assert all(isinstance(converter, Converter) for converter in converters)


def test_supported_formats_and_repr() -> None:
    """Expose single-format capability sets."""
    converter = TxtToHtmlConverter()
    assert converter.supported_input_formats == frozenset({FileFormat.TXT})
    assert converter.supported_output_formats == frozenset({FileFormat.HTML})
    assert repr(converter) == "TxtToHtmlConverter(TXT -> HTML)"


def test_missing_input_is_a_failed_result(tmp_path: Path, run_converter: RunConverter) -> None:
    """Return a not-found failure instead of raising."""
    result = run_converter(TxtToHtmlConverter(), tmp_path / "nope.txt", tmp_path / "out.html")

    assert not result.success
    assert isinstance(result.error, InputFileNotFoundError)
    assert result.input_format is FileFormat.TXT


def test_run_failure_is_captured_and_logged(
    tmp_path: Path,
    run_converter: RunConverter,
    progress_log,
    caplog: pytest.LogCaptureFixture,
) -> None:
    """Capture exceptions from run() into the result and log a warning."""
    source = tmp_path / "in.txt"
    source.write_text("x", encoding="utf-8")

    with caplog.at_level(logging.WARNING, logger="file_converter.converters.base"):
        result = run_converter(
            ExplodingConverter(), source, tmp_path / "out.md", progress=progress_log
        )

    assert not result.success
    assert isinstance(result.error, ValueError)
    assert result.elapsed_time.total_seconds() >= 0
    assert progress_log.messages[-1] == "Error: parser exploded"
    assert "ExplodingConverter failed" in caplog.text


def test_cancellation_propagates(tmp_path: Path, progress_log) -> None:
    """Re-raise token cancellation after reporting it."""
    source = tmp_path / "in.txt"
    source.write_text("x", encoding="utf-8")
    token = CancellationToken()
    token.cancel()

    with pytest.raises(ConversionCancelledError):
        asyncio.run(
            TxtToHtmlConverter().convert(
                source, tmp_path / "out.html", ConversionParameters(), progress_log, token
            )
        )

    assert progress_log.messages[-1] == "Conversion canceled."
    assert not (tmp_path / "out.html").exists()


def test_atomic_write_replaces_and_cleans_up(tmp_path: Path) -> None:
    """Replace existing content and leave no temporary siblings."""
    target = tmp_path / "out.txt"
    target.write_text("old", encoding="utf-8")

    write_text_atomic(target, "new\r\ncontent")

    assert target.read_bytes() == b"new\r\ncontent"
    assert [p.name for p in tmp_path.iterdir()] == ["out.txt"]


def test_atomic_write_failure_leaves_no_output(tmp_path: Path) -> None:
    """Remove the temporary file when writing fails."""
    target = tmp_path / "out.txt"

    with pytest.raises(UnicodeEncodeError):
        write_text_atomic(target, "bad \udc80 surrogate")

    assert list(tmp_path.iterdir()) == []


class UncheckedWriteConverter(BaseConverter):
    """Writes after its last tick without polling the token itself."""

    input_format = FileFormat.TXT
    output_format = FileFormat.HTML
    description = "unchecked"

    async def run(
        self,
        input_path: Path,
        output_path: Path,
        parameters: ConversionParameters,
        reporter: ProgressReporter,
        cancel_token: CancellationToken,
    ) -> None:
        reporter.report(80, "Writing HTML file...")
        output_path.write_text("<p>done</p>", encoding="utf-8")


def test_cancel_at_last_tick_is_not_success(tmp_path: Path) -> None:
    """Check the token once more after run() returns."""
    source = tmp_path / "in.txt"
    source.write_text("x", encoding="utf-8")
    token = CancellationToken()
    messages: list[str] = []

    def on_progress(tick: ConversionProgress) -> None:
        messages.append(tick.status_message)
        if tick.status_message.startswith("Writing"):
            token.cancel()

    with pytest.raises(ConversionCancelledError):
        asyncio.run(
            UncheckedWriteConverter().convert(
                source, tmp_path / "out.html", ConversionParameters(), on_progress, token
            )
        )

    assert "Conversion complete!" not in messages
    assert messages[-1] == "Conversion canceled."


def test_atomic_write_cancelled_leaves_no_output(tmp_path: Path) -> None:
    """Keep the previous file and drop the temporary one when cancelled."""
    target = tmp_path / "out.txt"
    target.write_text("old", encoding="utf-8")
    token = CancellationToken()
    token.cancel()

    with pytest.raises(ConversionCancelledError):
        write_text_atomic(target, "new", token)

    assert target.read_text(encoding="utf-8") == "old"
    assert [p.name for p in tmp_path.iterdir()] == ["out.txt"]


def test_non_utf8_input_is_decoded_with_replacement(
    tmp_path: Path, run_converter: RunConverter
) -> None:
    """Decode cp1252 bytes leniently instead of failing the conversion."""
    source = tmp_path / "legacy.txt"
    source.write_bytes("caf\u00e9,na\u00efve\n".encode("cp1252"))
    target = tmp_path / "legacy.csv"

    result = run_converter(TxtToCsvConverter(), source, target, {"lineDelimiter": ","})

    assert result.success, result.error_message
    assert target.read_text(encoding="utf-8") == "caf\ufffd,na\ufffdve\n"


def test_utf8_bom_is_dropped(tmp_path: Path, run_converter: RunConverter) -> None:
    """Strip a leading byte order mark from text input."""
    source = tmp_path / "bom.txt"
    source.write_bytes(b"\xef\xbb\xbfhead\n")
    target = tmp_path / "bom.csv"

    assert run_converter(TxtToCsvConverter(), source, target).success
    assert target.read_text(encoding="utf-8") == "head\n"
