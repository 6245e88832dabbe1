#!/usr/bin/env python3
"""Example converter module adding a CSV -> JSON conversion path.

Load it with::

    file-converter convert data.csv data.json \
        --converter-module examples/csv_to_json_plugin.py
"""

from __future__ import annotations

import json
from pathlib import Path

from file_converter.application import CancellationToken, ConversionParameters
from file_converter.application.progress import ProgressReporter
from file_converter.converters.base import BaseConverter, read_lines, write_text
from file_converter.converters.tabular import (
    DEFAULT_CSV_DELIMITER,
    DEFAULT_CSV_QUOTE,
    get_char_parameter,
    parse_csv_line,
)
from file_converter.errors import InvalidStructureError
from file_converter.formats import FileFormat


class CsvToJsonConverter(BaseConverter):
    """Write CSV rows as a JSON array of objects keyed by the header row.

    Parameters read: ``csvDelimiter``, ``csvQuote`` and ``indent``
    (default 2).
    """

    input_format = FileFormat.CSV
    output_format = FileFormat.JSON
    description = "CSV to JSON"

    async def run(
        self,
        input_path: Path,
        output_path: Path,
        parameters: ConversionParameters,
        reporter: ProgressReporter,
        cancel_token: CancellationToken,
    ) -> None:
        delimiter = get_char_parameter(parameters, "csvDelimiter", DEFAULT_CSV_DELIMITER)
        quote = get_char_parameter(parameters, "csvQuote", DEFAULT_CSV_QUOTE)

        reporter.report(20, "Reading CSV file...")
        lines = [line for line in await read_lines(input_path) if line.strip()]
        if not lines:
            raise InvalidStructureError("CSV file has no header row.")
        header = parse_csv_line(lines[0], delimiter, quote)

        records: list[dict[str, str]] = []
        total = len(lines) - 1
        for index, line in enumerate(lines[1:]):
            cancel_token.raise_if_cancelled()
            cells = parse_csv_line(line, delimiter, quote)
            records.append(
                {name: cells[i] if i < len(cells) else "" for i, name in enumerate(header)}
            )
            reporter.report_step(index, total, 40, 40, f"Converting row {index + 1} of {total}...")

        reporter.report(80, "Writing JSON file...")
        indent = parameters.get_parameter("indent", 2)
        content = json.dumps(records, indent=indent, ensure_ascii=False) + "\n"
        await write_text(output_path, content, cancel_token)


def register_converters(converters: list[object]) -> None:
    """Registry hook used by ``--converter-module``."""
    converters.append(CsvToJsonConverter())
