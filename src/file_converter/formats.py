"""File format identifiers and extension-based format detection."""

from __future__ import annotations

from enum import IntEnum, StrEnum
from pathlib import PurePath

from file_converter.types import PathLikeStr


class FormatCategory(StrEnum):
    """Broad family a file format belongs to."""

    UNKNOWN = "unknown"
    DOCUMENT = "document"
    SPREADSHEET = "spreadsheet"
    IMAGE = "image"
    DATA = "data"
    ARCHIVE = "archive"


class FileFormat(IntEnum):
    """Closed set of recognized file formats.

    Values are stable identifiers grouped by category in blocks of twenty.
    """

    UNKNOWN = 0

    PDF = 1
    DOC = 2
    DOCX = 3
    RTF = 4
    ODT = 5
    TXT = 6
    HTML = 7
    MD = 8

    XLSX = 20
    XLS = 21
    CSV = 22
    TSV = 23

    JPEG = 40
    PNG = 41
    BMP = 42
    GIF = 43
    TIFF = 44
    WEBP = 45

    JSON = 60
    XML = 61
    YAML = 62
    INI = 63
    TOML = 64

    ZIP = 80
    TAR = 81
    GZ = 82
    SEVEN_Z = 83

    @property
    def category(self) -> FormatCategory:
        """Return the category this format belongs to."""
        if self is FileFormat.UNKNOWN:
            return FormatCategory.UNKNOWN
        return _CATEGORY_BY_BLOCK[self.value // 20]

    @property
    def label(self) -> str:
        """Return a short display label, e.g. ``"CSV"``."""
        return "7Z" if self is FileFormat.SEVEN_Z else self.name


_CATEGORY_BY_BLOCK = {
    0: FormatCategory.DOCUMENT,
    1: FormatCategory.SPREADSHEET,
    2: FormatCategory.IMAGE,
    3: FormatCategory.DATA,
    4: FormatCategory.ARCHIVE,
}

_EXTENSION_MAP: dict[str, FileFormat] = {
    "pdf": FileFormat.PDF,
    "doc": FileFormat.DOC,
    "docx": FileFormat.DOCX,
    "rtf": FileFormat.RTF,
    "odt": FileFormat.ODT,
    "txt": FileFormat.TXT,
    "html": FileFormat.HTML,
    "htm": FileFormat.HTML,
    "md": FileFormat.MD,
    "markdown": FileFormat.MD,
    "xlsx": FileFormat.XLSX,
    "xls": FileFormat.XLS,
    "csv": FileFormat.CSV,
    "tsv": FileFormat.TSV,
    "jpg": FileFormat.JPEG,
    "jpeg": FileFormat.JPEG,
    "png": FileFormat.PNG,
    "bmp": FileFormat.BMP,
    "gif": FileFormat.GIF,
    "tiff": FileFormat.TIFF,
    "tif": FileFormat.TIFF,
    "webp": FileFormat.WEBP,
    "json": FileFormat.JSON,
    "xml": FileFormat.XML,
    "yaml": FileFormat.YAML,
    "yml": FileFormat.YAML,
    "ini": FileFormat.INI,
    "toml": FileFormat.TOML,
    "zip": FileFormat.ZIP,
    "tar": FileFormat.TAR,
    "gz": FileFormat.GZ,
    "gzip": FileFormat.GZ,
    "7z": FileFormat.SEVEN_Z,
}


def detect_format(path: PathLikeStr | None) -> FileFormat:
    """Detect a file format from the path extension.

    Parameters
    ----------
    path : str | os.PathLike[str] | None
        File path to inspect. The file does not need to exist.

    Returns
    -------
    FileFormat
        Detected format, or ``FileFormat.UNKNOWN`` when the path is empty or
        its extension is not recognized.
    """
    if not path:
        return FileFormat.UNKNOWN
    extension = PurePath(path).suffix.lower().lstrip(".")
    return _EXTENSION_MAP.get(extension, FileFormat.UNKNOWN)


def extensions_for(file_format: FileFormat) -> list[str]:
    """Return every extension (without dot) that maps to ``file_format``."""
    return [ext for ext, fmt in _EXTENSION_MAP.items() if fmt is file_format]
