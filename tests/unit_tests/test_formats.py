"""Unit tests for extension-based format detection."""

from __future__ import annotations

from pathlib import Path

import pytest

from file_converter.formats import FileFormat, FormatCategory, detect_format, extensions_for


@pytest.mark.parametrize(
    ("path", "expected"),
    [
        ("report.pdf", FileFormat.PDF),
        ("REPORT.PDF", FileFormat.PDF),
        ("page.htm", FileFormat.HTML),
        ("notes.markdown", FileFormat.MD),
        ("photo.JPG", FileFormat.JPEG),
        ("scan.tif", FileFormat.TIFF),
        ("config.yml", FileFormat.YAML),
        ("backup.gzip", FileFormat.GZ),
        ("bundle.7z", FileFormat.SEVEN_Z),
        (Path("/data/table.tsv"), FileFormat.TSV),
        ("archive.tar.gz", FileFormat.GZ),
    ],
)
def test_detect_format_known_extensions(path: str | Path, expected: FileFormat) -> None:
    """Map known extensions case-insensitively, using the last suffix only."""
    assert detect_format(path) is expected


@pytest.mark.parametrize("path", ["", None, "README", "data.unknown", "trailing."])
def test_detect_format_unknown(path: str | None) -> None:
    """Return UNKNOWN for empty, suffix-less or unrecognized paths."""
    assert detect_format(path) is FileFormat.UNKNOWN


def test_detect_format_does_not_touch_filesystem(tmp_path: Path) -> None:
    """Detect formats for paths that do not exist."""
    assert detect_format(tmp_path / "missing" / "out.csv") is FileFormat.CSV


@pytest.mark.parametrize(
    ("file_format", "category"),
    [
        (FileFormat.UNKNOWN, FormatCategory.UNKNOWN),
        (FileFormat.MD, FormatCategory.DOCUMENT),
        (FileFormat.TSV, FormatCategory.SPREADSHEET),
        (FileFormat.WEBP, FormatCategory.IMAGE),
        (FileFormat.TOML, FormatCategory.DATA),
        (FileFormat.SEVEN_Z, FormatCategory.ARCHIVE),
    ],
)
def test_format_category(file_format: FileFormat, category: FormatCategory) -> None:
    """Derive the category from the identifier block."""
    assert file_format.category is category


def test_labels_and_extension_lookup() -> None:
    """Expose display labels and reverse extension lookup."""
    assert FileFormat.CSV.label == "CSV"
    assert FileFormat.SEVEN_Z.label == "7Z"
    assert sorted(extensions_for(FileFormat.JPEG)) == ["jpeg", "jpg"]
    assert extensions_for(FileFormat.UNKNOWN) == []
