"""Shared conversion protocol for built-in converters."""

from __future__ import annotations

import asyncio
import logging
import os
import tempfile
import time
from abc import ABC, abstractmethod
from collections.abc import Set
from datetime import timedelta
from pathlib import Path
from typing import ClassVar

from file_converter.application.cancellation import CancellationToken
from file_converter.application.parameters import ConversionParameters
from file_converter.application.progress import ProgressReporter
from file_converter.application.results import ConversionResult
from file_converter.errors import ConversionCancelledError, InputFileNotFoundError
from file_converter.formats import FileFormat
from file_converter.types import ProgressSink

logger = logging.getLogger(__name__)

COMPLETE_MESSAGE = "Conversion complete!"
CANCELED_MESSAGE = "Conversion canceled."


class BaseConverter(ABC):
    """Template for converters handling a single input/output format pair.

    Subclasses set ``input_format``, ``output_format`` and ``description`` and
    implement :meth:`run`. This base class provides the common protocol:
    initial and terminal progress ticks, the input existence check, failure
    capture into a :class:`ConversionResult`, and cancellation propagation.
    """

    input_format: ClassVar[FileFormat]
    output_format: ClassVar[FileFormat]
    description: ClassVar[str]

    @property
    def name(self) -> str:
        """Converter display name."""
        return type(self).__name__

    @property
    def supported_input_formats(self) -> Set[FileFormat]:
        """Formats accepted as input."""
        return frozenset({self.input_format})

    @property
    def supported_output_formats(self) -> Set[FileFormat]:
        """Formats produced as output."""
        return frozenset({self.output_format})

    async def convert(
        self,
        input_path: Path,
        output_path: Path,
        parameters: ConversionParameters,
        progress: ProgressSink | None,
        cancel_token: CancellationToken,
    ) -> ConversionResult:
        """Run the conversion and capture its outcome.

        Returns
        -------
        ConversionResult
            Success or failure result. Elapsed time is measured from this
            converter's own start.

        Raises
        ------
        ConversionCancelledError
            If ``cancel_token`` is triggered before the conversion completes.
        """
        input_path = Path(input_path)
        output_path = Path(output_path)
        reporter = ProgressReporter(input_path, progress)
        started = time.perf_counter()
        try:
            reporter.report(0, f"Starting {self.description} conversion...")
            if not input_path.is_file():
                raise InputFileNotFoundError(input_path)
            await self.run(input_path, output_path, parameters, reporter, cancel_token)
            cancel_token.raise_if_cancelled()
            reporter.report(100, COMPLETE_MESSAGE)
            return self._result(input_path, output_path, started)
        except ConversionCancelledError:
            reporter.report(0, CANCELED_MESSAGE)
            raise
        except Exception as exc:
            logger.warning("%s failed for %s: %s", self.name, input_path, exc)
            reporter.report(0, f"Error: {exc}")
            return self._result(input_path, output_path, started, error=exc)

    @abstractmethod
    async def run(
        self,
        input_path: Path,
        output_path: Path,
        parameters: ConversionParameters,
        reporter: ProgressReporter,
        cancel_token: CancellationToken,
    ) -> None:
        """Perform the format-specific work.

        Implementations report intermediate progress through ``reporter``,
        call ``cancel_token.raise_if_cancelled()`` after each phase and raise
        on failure.
        """

    def _result(
        self,
        input_path: Path,
        output_path: Path,
        started: float,
        error: Exception | None = None,
    ) -> ConversionResult:
        return ConversionResult(
            success=error is None,
            input_path=input_path,
            output_path=output_path,
            input_format=self.input_format,
            output_format=self.output_format,
            elapsed_time=timedelta(seconds=time.perf_counter() - started),
            error=error,
        )

    def __repr__(self) -> str:
        return f"{self.name}({self.input_format.label} -> {self.output_format.label})"


async def read_text(path: Path) -> str:
    """Read a UTF-8 text file off the event loop.

    A leading BOM is dropped and undecodable bytes become U+FFFD.
    """
    return await asyncio.to_thread(path.read_text, encoding="utf-8-sig", errors="replace")


async def read_lines(path: Path) -> list[str]:
    """Read a text file as a list of lines without terminators."""
    return (await read_text(path)).splitlines()


def write_text_atomic(
    path: Path,
    content: str,
    cancel_token: CancellationToken | None = None,
) -> None:
    """Write ``content`` to ``path`` through a temporary sibling file.

    The destination only appears once the full content is on disk, so a
    failed or cancelled conversion never leaves a truncated output behind.
    ``cancel_token`` is checked once more before the file is moved into place.
    """
    fd, tmp_name = tempfile.mkstemp(
        prefix=f".{path.name}.", suffix=".tmp", dir=path.parent
    )
    try:
        with os.fdopen(fd, "w", encoding="utf-8", newline="") as handle:
            handle.write(content)
        if cancel_token is not None:
            cancel_token.raise_if_cancelled()
        os.replace(tmp_name, path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise


async def write_text(
    path: Path,
    content: str,
    cancel_token: CancellationToken | None = None,
) -> None:
    """Atomically write ``content`` off the event loop."""
    await asyncio.to_thread(write_text_atomic, path, content, cancel_token)


def join_lines(lines: list[str]) -> str:
    """Join output lines, terminating each with a newline."""
    return "".join(f"{line}\n" for line in lines)
