"""Exception hierarchy for file conversion failures."""

from __future__ import annotations

from pathlib import Path


class ConversionError(Exception):
    """Base error for conversion failures.

    Attributes
    ----------
    exit_code : int
        Process exit code used by the CLI when this error ends a command.
    """

    exit_code = 1


class InputFileNotFoundError(ConversionError, FileNotFoundError):
    """Raised when the conversion input file does not exist."""

    exit_code = 2

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path)
        super().__init__(f"Input file not found: {self.path}")


class UnknownFormatError(ConversionError):
    """Raised when a path extension does not map to a known format."""

    exit_code = 3


class NoConverterError(ConversionError):
    """Raised when no registered converter supports a format pair."""

    exit_code = 4


class ConversionCancelledError(ConversionError):
    """Raised when a cancellation token has been triggered."""

    exit_code = 130

    def __init__(self, message: str = "Conversion was canceled") -> None:
        super().__init__(message)


class TableNotFoundError(ConversionError):
    """Raised when a requested table cannot be located in the input."""


class InvalidStructureError(ConversionError):
    """Raised when structured input does not contain convertible records."""


class ConverterLoadError(ConversionError):
    """Raised when an external converter module cannot be loaded."""
