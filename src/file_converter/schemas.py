"""Pydantic schemas for runtime validation of conversion inputs."""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, field_validator

from file_converter.formats import FileFormat, detect_format


class ConversionRequestConfig(BaseModel):
    """Validated input/output paths for a single engine conversion."""

    model_config = ConfigDict(extra="forbid")

    input_path: Path
    output_path: Path

    @field_validator("input_path", "output_path", mode="before")
    @classmethod
    def _validate_path(cls, value: object) -> object:
        if value is None or not str(value).strip():
            raise ValueError("path cannot be empty.")
        return value


class UploadConversionConfig(BaseModel):
    """Validated input for upload-based conversion in the HTTP service."""

    model_config = ConfigDict(extra="forbid")

    filename: str
    target_format: str
    parameters: dict[str, object] = Field(default_factory=dict)
    expected_sha256: str | None = None

    @field_validator("target_format")
    @classmethod
    def _validate_target_format(cls, value: str) -> str:
        normalized = value.strip().lower().lstrip(".")
        if detect_format(f"output.{normalized}") is FileFormat.UNKNOWN:
            raise ValueError(f"Unknown output format: {value}")
        return normalized

    @field_validator("expected_sha256")
    @classmethod
    def _normalize_sha256(cls, value: str | None) -> str | None:
        if value is None:
            return None
        normalized = value.strip().lower()
        if not normalized:
            return None
        if len(normalized) != 64 or any(ch not in "0123456789abcdef" for ch in normalized):
            raise ValueError("expected_sha256 must be a 64-character hex digest")
        return normalized


class HealthResponse(BaseModel):
    """Health response payload."""

    model_config = ConfigDict(extra="forbid")

    status: str


class ReadyResponse(BaseModel):
    """Readiness response payload."""

    model_config = ConfigDict(extra="forbid")

    status: str
    converters: int


class ConversionPathModel(BaseModel):
    """One supported input/output format pair."""

    model_config = ConfigDict(extra="forbid")

    input_format: str
    output_format: str


class FormatsResponse(BaseModel):
    """Supported conversion paths payload."""

    model_config = ConfigDict(extra="forbid")

    paths: list[ConversionPathModel]
