"""Integration tests for the blocking convert_file entry point."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

import file_converter
from file_converter import CancellationToken, ConversionProgress, FileFormat
from file_converter.errors import ConversionCancelledError


@pytest.mark.parametrize(
    ("name", "content", "target", "parameters", "expected"),
    [
        ("a.tsv", "x\ty\n", "a.csv", {}, "x,y\n"),
        ("a.csv", '"1,5",b\n', "a.tsv", {}, "1,5\tb\n"),
        ("a.txt", "k=v\n", "a.csv", {"lineDelimiter": "="}, "k,v\n"),
        ("a.md", "|h|\n|-|\n|v|\n", "a.tsv", {"includeHeaders": False}, "v\n"),
        ("a.json", json.dumps([{"n": {"m": 1}}]), "a.tsv", {"flattenSeparator": "/"}, "n/m\n1\n"),
        ("a.xml", "<r><i v='1'/><i v='2'/></r>", "a.csv", {}, "v\n1\n2\n"),
        ("a.rtf", r"{\rtf1 one\par two}", "a.txt", {}, "one\ntwo"),
    ],
)
def test_convert_file_across_formats(
    tmp_path: Path,
    name: str,
    content: str,
    target: str,
    parameters: dict[str, object],
    expected: str,
) -> None:
    """Route by extension through the default engine."""
    source = tmp_path / name
    source.write_text(content, encoding="utf-8")
    output = tmp_path / "out" / target

    result = file_converter.convert_file(source, output, parameters)

    assert result.success, result.error_message
    assert output.read_text(encoding="utf-8") == expected


def test_convert_file_with_external_module(tmp_path: Path) -> None:
    """Load an extra converter module that overrides a built-in pair."""
    plugin = tmp_path / "upper_plugin.py"
    plugin.write_text(
        "from file_converter.converters.base import BaseConverter, read_text, write_text\n"
        "from file_converter.formats import FileFormat\n"
        "\n"
        "class Upper(BaseConverter):\n"
        "    input_format = FileFormat.TXT\n"
        "    output_format = FileFormat.HTML\n"
        "    description = 'upper'\n"
        "\n"
        "    async def run(self, input_path, output_path, parameters, reporter, cancel_token):\n"
        "        await write_text(output_path, (await read_text(input_path)).upper())\n"
        "\n"
        "CONVERTER = Upper()\n",
        encoding="utf-8",
    )
    source = tmp_path / "in.txt"
    source.write_text("shout", encoding="utf-8")

    result = file_converter.convert_file(
        source, tmp_path / "out.html", converter_modules=[str(plugin)]
    )

    assert result.success, result.error_message
    assert (tmp_path / "out.html").read_text(encoding="utf-8") == "SHOUT"


def test_cancel_from_progress_callback(tmp_path: Path) -> None:
    """Cancel from the progress callback while rows are being produced."""
    source = tmp_path / "big.txt"
    source.write_text("".join(f"line {i}\n" for i in range(2000)), encoding="utf-8")
    output = tmp_path / "big.csv"
    token = CancellationToken()
    ticks: list[ConversionProgress] = []

    def on_progress(tick: ConversionProgress) -> None:
        ticks.append(tick)
        if tick.status_message.startswith("Converting line"):
            token.cancel()

    result = file_converter.convert_file(source, output, None, on_progress, token)

    assert not result.success
    assert isinstance(result.error, ConversionCancelledError)
    assert result.input_format is FileFormat.TXT
    assert ticks[-1].status_message == "Operation canceled."
    assert not output.exists()
