"""Shared conversion-service core utilities."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from hashlib import sha256
from pathlib import Path
from tempfile import TemporaryDirectory

from file_converter.engine import ConversionEngine
from file_converter.errors import ConversionError
from file_converter.schemas import UploadConversionConfig


@dataclass(frozen=True)
class UploadOutcome:
    """Converted payload and its integrity metadata."""

    output_bytes: bytes
    output_filename: str
    output_sha256: str
    output_size_bytes: int


def digest_bytes(data: bytes) -> str:
    """Compute SHA-256 digest for byte payload."""
    return sha256(data).hexdigest()


def write_bytes_to_file(path: Path, data: bytes) -> str:
    """Write bytes to file and return SHA-256 digest."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(data)
    return digest_bytes(data)


def safe_input_filename(filename: str) -> str:
    """Return a filesystem-safe upload filename for temp-dir writes."""
    raw = filename.strip()
    if not raw:
        return "upload.bin"
    # Normalize Windows-style separators before basename extraction.
    normalized = raw.replace("\\", "/")
    candidate = Path(normalized).name
    if candidate in {"", ".", ".."}:
        return "upload.bin"
    return candidate


async def convert_upload_bytes(
    data: bytes,
    config: UploadConversionConfig,
    engine: ConversionEngine,
) -> tuple[str, UploadOutcome]:
    """Convert uploaded bytes and return input/output integrity metadata.

    The upload is written to a private temporary directory under its
    sanitized filename, so the filename extension selects the input format
    and ``config.target_format`` selects the output format.

    Raises
    ------
    ValueError
        If the payload does not match ``config.expected_sha256``.
    ConversionError
        If the engine reports a failed conversion.
    """
    with TemporaryDirectory(prefix="file-converter-") as tmp:
        tmp_dir = Path(tmp)
        input_path = tmp_dir / safe_input_filename(config.filename)
        input_sha = await asyncio.to_thread(write_bytes_to_file, input_path, data)
        if config.expected_sha256 is not None and input_sha != config.expected_sha256:
            raise ValueError("input SHA-256 mismatch")

        output_path = tmp_dir / "out" / f"{input_path.stem}.{config.target_format}"
        result = await engine.convert_file(input_path, output_path, config.parameters)
        if not result.success:
            error = result.error
            if isinstance(error, ConversionError):
                raise error
            raise ConversionError(result.error_message or "conversion failed") from error

        output_bytes = await asyncio.to_thread(output_path.read_bytes)
        outcome = UploadOutcome(
            output_bytes=output_bytes,
            output_filename=output_path.name,
            output_sha256=digest_bytes(output_bytes),
            output_size_bytes=len(output_bytes),
        )
        return input_sha, outcome
