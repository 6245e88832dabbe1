"""Converter capability port shared by the engine and all converters."""

from __future__ import annotations

from collections.abc import Set
from pathlib import Path
from typing import Protocol, runtime_checkable

from file_converter.application.cancellation import CancellationToken
from file_converter.application.parameters import ConversionParameters
from file_converter.application.results import ConversionResult
from file_converter.formats import FileFormat
from file_converter.types import ProgressSink


@runtime_checkable
class Converter(Protocol):
    """Protocol implemented by every converter.

    A converter declares input and output format sets; it is considered
    able to convert every pair in their cross product.
    """

    @property
    def supported_input_formats(self) -> Set[FileFormat]:
        """Formats accepted as input."""
        ...

    @property
    def supported_output_formats(self) -> Set[FileFormat]:
        """Formats produced as output."""
        ...

    async def convert(
        self,
        input_path: Path,
        output_path: Path,
        parameters: ConversionParameters,
        progress: ProgressSink | None,
        cancel_token: CancellationToken,
    ) -> ConversionResult:
        """Convert ``input_path`` into ``output_path``.

        Parameters
        ----------
        input_path : Path
            Existing input file.
        output_path : Path
            Destination file; its parent directory exists.
        parameters : ConversionParameters
            Converter-specific settings.
        progress : ProgressSink | None
            Optional progress sink.
        cancel_token : CancellationToken
            Token polled at each phase boundary.

        Returns
        -------
        ConversionResult
            Structured outcome. Failures are returned, not raised; only
            ``ConversionCancelledError`` propagates.
        """
        ...
