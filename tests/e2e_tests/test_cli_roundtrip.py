"""End-to-end tests for the public converter CLI."""

from __future__ import annotations

import subprocess
from pathlib import Path


def _run(*args: str) -> subprocess.CompletedProcess[str]:
    return subprocess.run(
        ["file-converter", *args],
        capture_output=True,
        text=True,
        check=False,
    )


def test_cli_csv_tsv_roundtrip(tmp_path: Path) -> None:
    """Run CSV -> TSV -> CSV through the public CLI."""
    source = tmp_path / "people.csv"
    source.write_text('name,city\n"Doe, Jane",Lisbon\nBob,Porto\n', encoding="utf-8")
    tsv_path = tmp_path / "people.tsv"
    back_path = tmp_path / "back" / "people.csv"

    first = _run("convert", str(source), str(tsv_path), "--no-progress")
    second = _run("convert", str(tsv_path), str(back_path), "--no-progress")

    assert first.returncode == 0, first.stderr
    assert second.returncode == 0, second.stderr
    assert tsv_path.read_text(encoding="utf-8") == "name\tcity\nDoe, Jane\tLisbon\nBob\tPorto\n"
    assert back_path.read_text(encoding="utf-8") == source.read_text(encoding="utf-8")


def test_cli_markdown_to_html_with_title(tmp_path: Path) -> None:
    """Render Markdown through the CLI with a custom page title."""
    source = tmp_path / "notes.md"
    source.write_text("# Notes\n\n- one\n- two\n", encoding="utf-8")
    target = tmp_path / "notes.html"

    result = _run("convert", str(source), str(target), "--param", "title=Team Notes")

    assert result.returncode == 0, result.stderr
    assert "Saved:" in result.stdout
    page = target.read_text(encoding="utf-8")
    assert "<title>Team Notes</title>" in page
    assert "<li>one</li>" in page


def test_cli_formats_lists_every_path() -> None:
    """List the built-in conversion matrix."""
    result = _run("formats")

    assert result.returncode == 0, result.stderr
    assert "PDF -> CSV" in result.stdout
    assert result.stdout.strip().endswith("21 conversion paths")
