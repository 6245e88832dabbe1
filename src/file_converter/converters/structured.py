"""JSON and XML record flattening into CSV/TSV."""

from __future__ import annotations

import asyncio
import json
import xml.etree.ElementTree as ET
from collections import Counter
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from file_converter.application.cancellation import CancellationToken
from file_converter.application.parameters import ConversionParameters
from file_converter.application.progress import ProgressReporter
from file_converter.converters.base import BaseConverter, read_text
from file_converter.converters.tabular import DelimitedWriter, apply_header_policy, write_table
from file_converter.errors import InvalidStructureError
from file_converter.formats import FileFormat
from file_converter.types import Table

DEFAULT_MAX_DEPTH = 5
DEFAULT_FLATTEN_SEPARATOR = "."

type JsonRecord = dict[str, Any]


def render_json_value(value: Any) -> str:
    """Render a JSON value as cell text.

    Strings are emitted verbatim, ``null`` as an empty cell, and every other
    value as compact JSON (``true``, ``12.5``, ``[1,2]``).
    """
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    return json.dumps(value, ensure_ascii=False, separators=(",", ":"))


def _records_from(node: Any) -> list[JsonRecord]:
    if isinstance(node, list):
        return [item for item in node if isinstance(item, dict)]
    if isinstance(node, dict):
        return [node]
    raise InvalidStructureError("The specified path does not point to an array or object.")


def find_json_records(document: Any, array_path: str = "") -> list[JsonRecord]:
    """Locate the records to convert.

    With ``array_path`` (dot separated) the path is followed from the root and
    must end at an array or object. Without it, a root array is used as is;
    for a root object the first non-empty array property is used, falling
    back to the object itself as a single record.

    Raises
    ------
    InvalidStructureError
        If the path cannot be followed or does not end at an array or object.
    """
    if array_path.strip():
        current = document
        for segment in array_path.split("."):
            if not isinstance(current, dict):
                raise InvalidStructureError(
                    f"Cannot navigate to '{segment}' because parent is not an object."
                )
            if segment not in current:
                raise InvalidStructureError(f"Path segment '{segment}' not found in JSON.")
            current = current[segment]
        return _records_from(current)

    if isinstance(document, list):
        return _records_from(document)
    if isinstance(document, dict):
        for value in document.values():
            if isinstance(value, list) and value:
                return _records_from(value)
        return [document]
    raise InvalidStructureError("No array found in the JSON file for conversion.")


def flatten_record(
    record: Mapping[str, Any],
    max_depth: int = DEFAULT_MAX_DEPTH,
    separator: str = DEFAULT_FLATTEN_SEPARATOR,
) -> dict[str, str]:
    """Flatten nested objects into ``parent<sep>child`` keys.

    Objects nested ``max_depth`` levels deep are kept as JSON text in a single
    cell; arrays are always kept as JSON text.
    """
    flat: dict[str, str] = {}

    def visit(node: Mapping[str, Any], prefix: str, depth: int) -> None:
        for key, value in node.items():
            name = f"{prefix}{separator}{key}" if prefix else key
            if isinstance(value, dict) and depth + 1 < max_depth:
                visit(value, name, depth + 1)
            else:
                flat[name] = render_json_value(value)

    visit(record, "", 0)
    return flat


def json_to_table(
    document: Any,
    array_path: str = "",
    max_depth: int = DEFAULT_MAX_DEPTH,
    separator: str = DEFAULT_FLATTEN_SEPARATOR,
) -> Table:
    """Build a header row plus one row per record.

    Columns are the union of flattened keys in first-seen order; records
    missing a column get an empty cell.
    """
    rows = [
        flatten_record(record, max_depth, separator)
        for record in find_json_records(document, array_path)
    ]
    columns: dict[str, None] = {}
    for row in rows:
        columns.update(dict.fromkeys(row))
    if not columns:
        raise InvalidStructureError("No properties found to convert to columns.")
    header = list(columns)
    return [header, *([row.get(column, "") for column in header] for row in rows)]


def _local_name(tag: str) -> str:
    return tag.rsplit("}", 1)[-1]


def find_xml_elements(root: ET.Element, element_path: str = "") -> list[ET.Element]:
    """Select the elements that become rows.

    ``element_path`` is a slash separated list of element names below the
    document root. Without it, the most frequent first-level element name is
    used, or the root itself when it has no children.
    """
    if element_path.strip():
        current = [root]
        for part in (p for p in element_path.split("/") if p.strip()):
            current = [
                child
                for element in current
                for child in element
                if _local_name(child.tag) == part
            ]
        return current

    children = list(root)
    if not children:
        return [root]
    most_common, _ = Counter(_local_name(child.tag) for child in children).most_common(1)[0]
    return [child for child in children if _local_name(child.tag) == most_common]


def xml_to_table(root: ET.Element, element_path: str = "") -> Table:
    """Build a header row plus one row per selected element.

    Columns are attribute names plus names of child elements without
    children of their own, in first-seen order.
    """
    elements = find_xml_elements(root, element_path)
    if not elements:
        raise InvalidStructureError(
            f"No elements found at path '{element_path}'. Please specify a valid element path."
        )

    records: list[dict[str, str]] = []
    columns: dict[str, None] = {}
    for element in elements:
        record: dict[str, str] = {}
        for name, value in element.attrib.items():
            record.setdefault(_local_name(name), value)
        for child in element:
            if len(child) == 0:
                record.setdefault(_local_name(child.tag), (child.text or "").strip())
        columns.update(dict.fromkeys(record))
        records.append(record)

    if not columns:
        raise InvalidStructureError("No attributes or child elements found to convert to columns.")
    header = list(columns)
    return [header, *([record.get(column, "") for column in header] for record in records)]


def _parse_json(content: str) -> Any:
    try:
        return json.loads(content)
    except json.JSONDecodeError as exc:
        raise InvalidStructureError(f"Invalid JSON: {exc}") from exc


def _parse_xml(content: str) -> ET.Element:
    try:
        return ET.fromstring(content)
    except ET.ParseError as exc:
        raise InvalidStructureError(f"Invalid XML: {exc}") from exc


class _JsonConverter(BaseConverter):
    input_format = FileFormat.JSON
    tsv: bool

    async def run(
        self,
        input_path: Path,
        output_path: Path,
        parameters: ConversionParameters,
        reporter: ProgressReporter,
        cancel_token: CancellationToken,
    ) -> None:
        array_path = parameters.get_parameter("arrayPath", "") or parameters.get_parameter(
            "rootElement", ""
        )
        writer = DelimitedWriter(self.tsv, parameters)

        reporter.report(20, "Reading JSON file...")
        content = await read_text(input_path)
        cancel_token.raise_if_cancelled()

        reporter.report(40, "Parsing JSON data...")
        document = await asyncio.to_thread(_parse_json, content)
        table = await asyncio.to_thread(
            json_to_table,
            document,
            array_path,
            parameters.get_parameter("maxDepth", DEFAULT_MAX_DEPTH),
            parameters.get_parameter("flattenSeparator", DEFAULT_FLATTEN_SEPARATOR),
        )
        cancel_token.raise_if_cancelled()

        reporter.report(60, f"Converting to {writer.label} format...")
        await write_table(
            apply_header_policy(table, parameters.get_parameter("includeHeaders", True)),
            output_path,
            writer,
            reporter,
            cancel_token,
        )


class JsonToCsvConverter(_JsonConverter):
    """Flatten JSON records to CSV.

    Parameters read: ``arrayPath`` (or ``rootElement``), ``includeHeaders``,
    ``maxDepth``, ``flattenSeparator``, ``csvDelimiter`` and ``csvQuote``.
    """

    output_format = FileFormat.CSV
    description = "JSON to CSV"
    tsv = False


class JsonToTsvConverter(_JsonConverter):
    """Flatten JSON records to TSV."""

    output_format = FileFormat.TSV
    description = "JSON to TSV"
    tsv = True


class _XmlConverter(BaseConverter):
    input_format = FileFormat.XML
    tsv: bool

    async def run(
        self,
        input_path: Path,
        output_path: Path,
        parameters: ConversionParameters,
        reporter: ProgressReporter,
        cancel_token: CancellationToken,
    ) -> None:
        writer = DelimitedWriter(self.tsv, parameters)

        reporter.report(20, "Reading XML file...")
        content = await read_text(input_path)
        cancel_token.raise_if_cancelled()

        reporter.report(40, "Analyzing XML structure...")
        root = await asyncio.to_thread(_parse_xml, content)
        table = xml_to_table(root, parameters.get_parameter("rootElementPath", ""))
        cancel_token.raise_if_cancelled()

        reporter.report(60, f"Converting to {writer.label} format...")
        await write_table(
            apply_header_policy(table, parameters.get_parameter("includeHeaders", True)),
            output_path,
            writer,
            reporter,
            cancel_token,
        )


class XmlToCsvConverter(_XmlConverter):
    """Flatten repeated XML elements to CSV (``rootElementPath``, ``includeHeaders``)."""

    output_format = FileFormat.CSV
    description = "XML to CSV"
    tsv = False


class XmlToTsvConverter(_XmlConverter):
    output_format = FileFormat.TSV
    description = "XML to TSV"
    tsv = True
