"""Top-level API for document and data file conversion."""

from __future__ import annotations

import asyncio
from collections.abc import Iterable, Mapping
from typing import Any

from file_converter.application import (
    CancellationToken,
    ConversionParameters,
    ConversionProgress,
    ConversionResult,
)
from file_converter.formats import FileFormat, detect_format
from file_converter.types import PathLikeStr, ProgressSink

__version__ = "0.1.0"


def convert_file(
    input_path: PathLikeStr,
    output_path: PathLikeStr,
    parameters: ConversionParameters | Mapping[str, Any] | None = None,
    progress: ProgressSink | None = None,
    cancel_token: CancellationToken | None = None,
    *,
    converter_modules: Iterable[str] | None = None,
) -> ConversionResult:
    """Convert a file with the default engine, blocking until done.

    Parameters
    ----------
    input_path : str | os.PathLike[str]
        Existing input file; its extension selects the input format.
    output_path : str | os.PathLike[str]
        Destination file; its extension selects the output format.
    parameters : ConversionParameters | Mapping[str, Any] | None, optional
        Converter-specific settings such as ``csvDelimiter`` or ``tableIndex``.
    progress : ProgressSink | None, optional
        Callable receiving :class:`ConversionProgress` ticks.
    cancel_token : CancellationToken | None, optional
        Token that can be cancelled from another thread.
    converter_modules : Iterable[str] | None, optional
        Extra converter modules registered ahead of the built-ins.

    Returns
    -------
    ConversionResult
        Structured outcome of the conversion.
    """
    from .engine import create_default_engine

    engine = create_default_engine(converter_modules)
    return asyncio.run(
        engine.convert_file(input_path, output_path, parameters, progress, cancel_token)
    )


__all__ = [
    "CancellationToken",
    "ConversionParameters",
    "ConversionProgress",
    "ConversionResult",
    "FileFormat",
    "__version__",
    "convert_file",
    "detect_format",
]
