"""Conversion engine and factory."""

from file_converter.engine.engine import ConversionEngine, ConversionPath
from file_converter.engine.factory import (
    create_default_engine,
    create_engine,
    load_converters,
)

__all__ = [
    "ConversionEngine",
    "ConversionPath",
    "create_default_engine",
    "create_engine",
    "load_converters",
]
