"""Conversion engine: converter resolution and dispatch."""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Iterable, Mapping
from dataclasses import replace
from datetime import timedelta
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from file_converter.application.cancellation import CancellationToken
from file_converter.application.parameters import ConversionParameters
from file_converter.application.ports import Converter
from file_converter.application.progress import ProgressReporter
from file_converter.application.results import ConversionResult
from file_converter.errors import (
    ConversionCancelledError,
    InputFileNotFoundError,
    NoConverterError,
    UnknownFormatError,
)
from file_converter.formats import FileFormat, detect_format
from file_converter.schemas import ConversionRequestConfig
from file_converter.types import PathLikeStr, ProgressSink

logger = logging.getLogger(__name__)

type ConversionPath = tuple[FileFormat, FileFormat]


def _conversion_paths(converter: Converter) -> set[ConversionPath]:
    return {
        (source, target)
        for source in converter.supported_input_formats
        for target in converter.supported_output_formats
    }


class ConversionEngine:
    """Route conversion requests to the first converter supporting the pair.

    Parameters
    ----------
    converters : Iterable[Converter]
        Converters in priority order. The collection is copied and cannot be
        changed after construction, so one engine may serve concurrent calls.
    """

    def __init__(self, converters: Iterable[Converter]) -> None:
        self._converters: tuple[Converter, ...] = tuple(converters)
        self._ambiguous = self._detect_ambiguous_paths()
        if self._ambiguous:
            logger.warning(
                "Multiple converters claim %d conversion path(s); "
                "the first registered converter wins: %s",
                len(self._ambiguous),
                ", ".join(
                    f"{source.label}->{target.label}"
                    for source, target in sorted(self._ambiguous)
                ),
            )

    @property
    def converters(self) -> tuple[Converter, ...]:
        """Registered converters in resolution order."""
        return self._converters

    def find_converter(
        self,
        input_format: FileFormat,
        output_format: FileFormat,
    ) -> Converter | None:
        """Return the first converter supporting ``input_format -> output_format``."""
        for converter in self._converters:
            if (
                input_format in converter.supported_input_formats
                and output_format in converter.supported_output_formats
            ):
                return converter
        return None

    def supported_conversion_paths(self) -> frozenset[ConversionPath]:
        """Return every (input, output) pair some converter supports."""
        paths: set[ConversionPath] = set()
        for converter in self._converters:
            paths |= _conversion_paths(converter)
        return frozenset(paths)

    def ambiguous_conversion_paths(self) -> frozenset[ConversionPath]:
        """Return pairs claimed by more than one converter."""
        return self._ambiguous

    def _detect_ambiguous_paths(self) -> frozenset[ConversionPath]:
        seen: set[ConversionPath] = set()
        overlaps: set[ConversionPath] = set()
        for converter in self._converters:
            paths = _conversion_paths(converter)
            overlaps |= paths & seen
            seen |= paths
        return frozenset(overlaps)

    async def convert_file(
        self,
        input_path: PathLikeStr,
        output_path: PathLikeStr,
        parameters: ConversionParameters | Mapping[str, Any] | None = None,
        progress: ProgressSink | None = None,
        cancel_token: CancellationToken | None = None,
    ) -> ConversionResult:
        """Convert one file, choosing the converter from the path extensions.

        Parameters
        ----------
        input_path : str | os.PathLike[str]
            Existing input file.
        output_path : str | os.PathLike[str]
            Destination file. Missing parent directories are created.
        parameters : ConversionParameters | Mapping[str, Any] | None, optional
            Converter-specific settings.
        progress : ProgressSink | None, optional
            Callable receiving progress ticks.
        cancel_token : CancellationToken | None, optional
            Token used to request cooperative cancellation.

        Returns
        -------
        ConversionResult
            Outcome of the conversion. Missing input, unknown formats,
            unsupported pairs, converter failures and cancellation are all
            reported here rather than raised.

        Raises
        ------
        ValueError
            If either path is empty.
        """
        try:
            request = ConversionRequestConfig(input_path=input_path, output_path=output_path)
        except ValidationError as exc:
            raise ValueError(f"Invalid conversion request: {exc}") from exc

        source, target = request.input_path, request.output_path
        if not isinstance(parameters, ConversionParameters):
            parameters = ConversionParameters(parameters)
        token = cancel_token if cancel_token is not None else CancellationToken()
        reporter = ProgressReporter(source, progress)
        started = time.perf_counter()
        logger.info("Starting conversion %s -> %s", source, target)

        try:
            if not source.is_file():
                raise InputFileNotFoundError(source)
            input_format = detect_format(source)
            output_format = detect_format(target)
            if input_format is FileFormat.UNKNOWN:
                raise UnknownFormatError(f"Unknown input format: {source.suffix}")
            if output_format is FileFormat.UNKNOWN:
                raise UnknownFormatError(f"Unknown output format: {target.suffix}")

            converter = self.find_converter(input_format, output_format)
            if converter is None:
                raise NoConverterError(
                    f"No converter found for {input_format.label} to "
                    f"{output_format.label} conversion"
                )

            reporter.report(0, "Starting conversion...")
            await asyncio.to_thread(target.parent.mkdir, parents=True, exist_ok=True)
            result = await converter.convert(source, target, parameters, progress, token)
            result = replace(result, elapsed_time=_elapsed(started))
        except ConversionCancelledError as exc:
            reporter.report(0, "Operation canceled.")
            result = self._failure(source, target, started, exc)
        except Exception as exc:
            reporter.report(0, f"Error: {exc}")
            result = self._failure(source, target, started, exc)

        if result.success:
            logger.info(
                "Converted %s -> %s in %.3fs",
                source,
                target,
                result.elapsed_time.total_seconds(),
            )
        else:
            logger.info(
                "Conversion %s -> %s failed after %.3fs: %s",
                source,
                target,
                result.elapsed_time.total_seconds(),
                result.error_message,
            )
        return result

    @staticmethod
    def _failure(
        source: Path,
        target: Path,
        started: float,
        error: Exception,
    ) -> ConversionResult:
        return ConversionResult(
            success=False,
            input_path=source,
            output_path=target,
            input_format=detect_format(source),
            output_format=detect_format(target),
            elapsed_time=_elapsed(started),
            error=error,
        )


def _elapsed(started: float) -> timedelta:
    return timedelta(seconds=time.perf_counter() - started)
