#!/usr/bin/env python3
"""Layer boundary checks for the file converter package."""

from __future__ import annotations

from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
PACKAGE = ROOT / "src/file_converter"

FRONTEND_IMPORTS = ["import typer", "from typer", "import fastapi", "from fastapi", "import uvicorn"]
PARSER_IMPORTS = ["import pdfplumber", "import docx", "from docx", "import markdown_it", "from markdown_it"]


def _read(path: Path) -> str:
    return path.read_text(encoding="utf-8")


def _assert_no_imports(path: Path, banned: list[str]) -> None:
    text = _read(path)
    for token in banned:
        if token in text:
            raise SystemExit(f"Architecture violation in {path}: found '{token}'")


def main() -> None:
    """Run repository architecture boundary checks."""
    # Application and engine layers stay free of front ends and parser libraries.
    for layer in ("application", "engine"):
        for path in (PACKAGE / layer).glob("*.py"):
            _assert_no_imports(path, FRONTEND_IMPORTS + PARSER_IMPORTS)

    for path in (PACKAGE / "converters").glob("*.py"):
        _assert_no_imports(path, FRONTEND_IMPORTS)

    for name in ("formats.py", "types.py", "errors.py"):
        _assert_no_imports(PACKAGE / name, FRONTEND_IMPORTS + PARSER_IMPORTS)

    _assert_no_imports(PACKAGE / "cli/cli.py", PARSER_IMPORTS)

    print("Architecture checks passed.")


if __name__ == "__main__":
    main()
