"""Built-in converters, in registration order."""

from file_converter.converters.base import BaseConverter
from file_converter.converters.delimited import CsvToTsvConverter, TsvToCsvConverter
from file_converter.converters.markdown import MarkdownToHtmlConverter
from file_converter.converters.markup_tables import HtmlToTsvConverter, MarkdownToTsvConverter
from file_converter.converters.pdf import PdfToCsvConverter, PdfToTsvConverter, PdfToTxtConverter
from file_converter.converters.rtf import RtfToCsvConverter, RtfToTsvConverter, RtfToTxtConverter
from file_converter.converters.structured import (
    JsonToCsvConverter,
    JsonToTsvConverter,
    XmlToCsvConverter,
    XmlToTsvConverter,
)
from file_converter.converters.text import TxtToCsvConverter, TxtToHtmlConverter, TxtToTsvConverter
from file_converter.converters.word import DocxToCsvConverter, DocxToTsvConverter, DocxToTxtConverter

BUILTIN_CONVERTERS: tuple[type[BaseConverter], ...] = (
    TxtToHtmlConverter,
    TsvToCsvConverter,
    CsvToTsvConverter,
    HtmlToTsvConverter,
    MarkdownToTsvConverter,
    TxtToTsvConverter,
    TxtToCsvConverter,
    JsonToCsvConverter,
    XmlToCsvConverter,
    XmlToTsvConverter,
    JsonToTsvConverter,
    DocxToCsvConverter,
    DocxToTsvConverter,
    PdfToCsvConverter,
    PdfToTsvConverter,
    MarkdownToHtmlConverter,
    PdfToTxtConverter,
    DocxToTxtConverter,
    RtfToTxtConverter,
    RtfToCsvConverter,
    RtfToTsvConverter,
)


def builtin_converters() -> list[BaseConverter]:
    """Instantiate every built-in converter in registration order."""
    return [converter_type() for converter_type in BUILTIN_CONVERTERS]


__all__ = [
    "BUILTIN_CONVERTERS",
    "BaseConverter",
    "CsvToTsvConverter",
    "DocxToCsvConverter",
    "DocxToTsvConverter",
    "DocxToTxtConverter",
    "HtmlToTsvConverter",
    "JsonToCsvConverter",
    "JsonToTsvConverter",
    "MarkdownToHtmlConverter",
    "MarkdownToTsvConverter",
    "PdfToCsvConverter",
    "PdfToTsvConverter",
    "PdfToTxtConverter",
    "RtfToCsvConverter",
    "RtfToTsvConverter",
    "RtfToTxtConverter",
    "TsvToCsvConverter",
    "TxtToCsvConverter",
    "TxtToHtmlConverter",
    "TxtToTsvConverter",
    "XmlToCsvConverter",
    "XmlToTsvConverter",
    "builtin_converters",
]
