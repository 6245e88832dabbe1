"""Progress and result value objects."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta
from pathlib import Path

from file_converter.formats import FileFormat


@dataclass(frozen=True)
class ConversionProgress:
    """Single progress tick emitted during a conversion."""

    percent_complete: float
    status_message: str = ""


@dataclass(frozen=True)
class ConversionResult:
    """Structured outcome of one conversion attempt.

    ``success`` is true exactly when ``error`` is ``None``; cancelled
    conversions carry a :class:`~file_converter.errors.ConversionCancelledError`.
    """

    success: bool
    input_path: Path
    output_path: Path
    input_format: FileFormat = FileFormat.UNKNOWN
    output_format: FileFormat = FileFormat.UNKNOWN
    elapsed_time: timedelta = timedelta(0)
    error: BaseException | None = None

    def __post_init__(self) -> None:
        if self.success and self.error is not None:
            raise ValueError("A successful result cannot carry an error.")
        if not self.success and self.error is None:
            raise ValueError("A failed result must carry an error.")

    @property
    def error_message(self) -> str | None:
        """Return the human-readable error message, if any."""
        return None if self.error is None else str(self.error)
