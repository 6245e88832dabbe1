"""CSV and TSV cross-conversion."""

from __future__ import annotations

from pathlib import Path

from file_converter.application.cancellation import CancellationToken
from file_converter.application.parameters import ConversionParameters
from file_converter.application.progress import ProgressReporter
from file_converter.converters.base import BaseConverter, read_lines, write_text
from file_converter.converters.tabular import (
    DEFAULT_CSV_DELIMITER,
    DEFAULT_CSV_QUOTE,
    DelimitedWriter,
    get_char_parameter,
    parse_csv_line,
    write_line_rows,
)
from file_converter.formats import FileFormat


class CsvToTsvConverter(BaseConverter):
    """Re-delimit a CSV file as TSV.

    Each physical line is parsed independently with ``csvDelimiter`` and
    ``csvQuote``, so quoted fields spanning several lines are not joined.
    """

    input_format = FileFormat.CSV
    output_format = FileFormat.TSV
    description = "CSV to TSV"

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

        reporter.report(10, "Reading CSV file...")
        lines = await read_lines(input_path)
        cancel_token.raise_if_cancelled()
        if not lines:
            await write_text(output_path, "", cancel_token)
            return

        reporter.report(40, "Converting to TSV format...")
        await write_line_rows(
            lines,
            lambda line: parse_csv_line(line, delimiter, quote),
            output_path,
            DelimitedWriter(True, parameters),
            reporter,
            cancel_token,
        )


class TsvToCsvConverter(BaseConverter):
    """Re-delimit a TSV file as CSV, quoting fields as needed."""

    input_format = FileFormat.TSV
    output_format = FileFormat.CSV
    description = "TSV to CSV"

    async def run(
        self,
        input_path: Path,
        output_path: Path,
        parameters: ConversionParameters,
        reporter: ProgressReporter,
        cancel_token: CancellationToken,
    ) -> None:
        reporter.report(10, "Reading TSV file...")
        lines = await read_lines(input_path)
        cancel_token.raise_if_cancelled()
        if not lines:
            await write_text(output_path, "", cancel_token)
            return

        reporter.report(40, "Converting to CSV format...")
        await write_line_rows(
            lines,
            lambda line: line.split("\t"),
            output_path,
            DelimitedWriter(False, parameters),
            reporter,
            cancel_token,
        )
