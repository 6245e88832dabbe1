"""Application-layer value objects, ports and helpers."""

from file_converter.application.cancellation import CancellationToken
from file_converter.application.parameters import ConversionParameters
from file_converter.application.ports import Converter
from file_converter.application.progress import ProgressReporter
from file_converter.application.results import ConversionProgress, ConversionResult

__all__ = [
    "CancellationToken",
    "ConversionParameters",
    "ConversionProgress",
    "ConversionResult",
    "Converter",
    "ProgressReporter",
]
