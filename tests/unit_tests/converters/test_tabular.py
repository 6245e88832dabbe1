"""Unit tests for CSV/TSV escaping and table helpers."""

from __future__ import annotations

import asyncio
import threading
from pathlib import Path

import pytest
from hypothesis import given
from hypothesis import strategies as st

from file_converter.application import (
    CancellationToken,
    ConversionParameters,
    ConversionProgress,
    ProgressReporter,
)
from file_converter.converters.tabular import (
    DelimitedWriter,
    apply_header_policy,
    escape_csv,
    escape_tsv,
    format_csv_row,
    get_char_parameter,
    parse_csv_line,
    select_table,
    write_line_rows,
)
from file_converter.errors import TableNotFoundError

# Single-line fields: CSV lines are parsed one physical line at a time.
fields = st.text(
    alphabet=st.characters(exclude_categories=("Cs", "Cc")),
    min_size=1,
    max_size=30,
)


@pytest.mark.parametrize(
    ("field", "expected"),
    [
        ("plain", "plain"),
        ("a,b", '"a,b"'),
        ('say "hi"', '"say ""hi"""'),
        ("two\nlines", '"two\nlines"'),
        ("cr\rhere", '"cr\rhere"'),
        ("", ""),
    ],
)
def test_escape_csv(field: str, expected: str) -> None:
    """Quote only fields containing delimiter, quote or line terminators."""
    assert escape_csv(field) == expected


def test_escape_csv_custom_delimiter_and_quote() -> None:
    """Use the configured delimiter and quote characters."""
    assert escape_csv("a,b", delimiter=";") == "a,b"
    assert escape_csv("a;b", delimiter=";", quote="'") == "'a;b'"
    assert escape_csv("it's", quote="'") == "'it''s'"


def test_escape_tsv_replaces_tabs() -> None:
    """Replace embedded tabs with spaces."""
    assert escape_tsv("a\tb\tc") == "a b c"
    assert escape_tsv('quote " and , stay') == 'quote " and , stay'


@given(st.lists(fields, min_size=1, max_size=6))
def test_csv_row_survives_parse(cells: list[str]) -> None:
    """Parsing a formatted row yields the original cells."""
    assert parse_csv_line(format_csv_row(cells)) == cells


@given(st.lists(fields, min_size=1, max_size=6))
def test_csv_row_survives_parse_with_semicolon(cells: list[str]) -> None:
    """Round trip also holds for a non-default delimiter and quote."""
    line = format_csv_row(cells, delimiter=";", quote="'")
    assert parse_csv_line(line, delimiter=";", quote="'") == cells


def test_get_char_parameter_requires_single_character() -> None:
    """Fall back to the default for empty, long or mistyped values."""
    params = ConversionParameters({"a": ";", "b": "", "c": "::", "d": 9})
    assert get_char_parameter(params, "a", ",") == ";"
    assert get_char_parameter(params, "b", ",") == ","
    assert get_char_parameter(params, "c", ",") == ","
    assert get_char_parameter(params, "d", ",") == ","


def test_delimited_writer_ignores_csv_delimiter_for_tsv() -> None:
    """TSV rows always use tabs; CSV rows honour csvDelimiter."""
    params = ConversionParameters({"csvDelimiter": ";"})
    assert DelimitedWriter(True, params).format_row(["a;b", "c\td"]) == "a;b\tc d"
    assert DelimitedWriter(False, params).format_row(["a;b", "c"]) == '"a;b";c'
    assert DelimitedWriter(False, params).label == "CSV"


def test_select_table_errors() -> None:
    """Report missing tables and out-of-range indexes."""
    with pytest.raises(TableNotFoundError, match="No tables found in the HTML file."):
        select_table([], 0, "HTML")
    with pytest.raises(TableNotFoundError, match="Table index 2 is out of range. Only 1 tables found."):
        select_table([[["a"]]], 2, "HTML")
    with pytest.raises(TableNotFoundError, match="Table index -1"):
        select_table([[["a"]]], -1, "HTML")


def test_header_policy_drops_first_row_only_when_excluded() -> None:
    """Keep every row by default; drop exactly the first otherwise."""
    table = [["h1", "h2"], ["a", "b"]]
    assert apply_header_policy(table, True) == table
    assert apply_header_policy(table, False) == [["a", "b"]]
    assert apply_header_policy([["only"]], False) == []


def test_write_line_rows_reports_from_event_loop_thread(tmp_path: Path) -> None:
    """Emit line progress from the calling thread, not the worker thread."""
    lines = [f"row {index}" for index in range(25)]
    target = tmp_path / "out.tsv"
    loop_thread = threading.get_ident()
    seen: list[tuple[int, ConversionProgress]] = []
    reporter = ProgressReporter(
        tmp_path / "in.txt", lambda tick: seen.append((threading.get_ident(), tick))
    )

    asyncio.run(
        write_line_rows(
            lines,
            lambda line: line.split(" "),
            target,
            DelimitedWriter(True, ConversionParameters()),
            reporter,
            CancellationToken(),
        )
    )

    assert target.read_text(encoding="utf-8").splitlines()[-1] == "row\t24"
    assert seen
    assert {thread for thread, _ in seen} == {loop_thread}
    percents = [tick.percent_complete for _, tick in seen]
    assert percents == sorted(percents)
    assert seen[-1][1].status_message == "Converting line 25 of 25..."
