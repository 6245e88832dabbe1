"""HTTP server for file upload/download conversion."""

from __future__ import annotations

import argparse
import importlib
import json
import logging
import os
from types import ModuleType
from typing import TYPE_CHECKING, Protocol, cast

from pydantic import ValidationError

from file_converter.engine import ConversionEngine, create_default_engine
from file_converter.errors import ConversionError
from file_converter.schemas import (
    ConversionPathModel,
    FormatsResponse,
    HealthResponse,
    ReadyResponse,
    UploadConversionConfig,
)
from file_converter.service.core import convert_upload_bytes

logger = logging.getLogger(__name__)

MODULES_ENV = "CONVERTER_MODULES"

if TYPE_CHECKING:
    from fastapi import FastAPI, UploadFile
    from fastapi.responses import Response
else:

    class UploadFile:
        """Fallback UploadFile type used when FastAPI is not installed."""

        filename: str | None = None

        async def read(self) -> bytes:
            """Read uploaded content bytes."""
            return b""


class _FastapiStatusLike(Protocol):
    HTTP_400_BAD_REQUEST: int
    HTTP_500_INTERNAL_SERVER_ERROR: int


class _FastapiModuleLike(Protocol):
    """Subset of fastapi module API used by HTTP transport."""

    status: _FastapiStatusLike

    class HTTPException(Exception):
        def __init__(self, *, status_code: int, detail: str) -> None: ...

    def File(self, default: object) -> object: ...

    def Form(self, default: object = ..., **kwargs: object) -> object: ...

    def FastAPI(self, **kwargs: object) -> object: ...


class _ResponsesModuleLike(Protocol):
    """Subset of fastapi.responses module API used by this module."""

    def Response(
        self,
        *,
        content: bytes,
        media_type: str,
        headers: dict[str, str],
    ) -> object: ...


_fastapi_module: ModuleType | None = None
_fastapi_responses_module: ModuleType | None = None
try:
    _fastapi_module = importlib.import_module("fastapi")
    _fastapi_responses_module = importlib.import_module("fastapi.responses")
except ModuleNotFoundError:  # pragma: no cover
    pass

if _fastapi_module is not None and not TYPE_CHECKING:
    UploadFile = cast(type[UploadFile], _fastapi_module.UploadFile)

fastapi = cast(_FastapiModuleLike | None, _fastapi_module)
responses = _fastapi_responses_module

try:
    import uvicorn as _uvicorn_imported

    _uvicorn_module: ModuleType | None = _uvicorn_imported
except ModuleNotFoundError:  # pragma: no cover
    _uvicorn_module = None

uvicorn: ModuleType | None = _uvicorn_module


def _require_http_runtime() -> None:
    """Ensure HTTP server runtime dependencies are available."""
    if _fastapi_module is None or _fastapi_responses_module is None:
        raise RuntimeError(
            "fastapi is required to run file-converter-http. Install with extra: .[server]"
        )


def _parse_parameters(value: str | None) -> dict[str, object]:
    """Parse the JSON object carried by the ``parameters`` form field."""
    if value is None or not value.strip():
        return {}
    try:
        parsed = json.loads(value)
    except json.JSONDecodeError as exc:
        raise ValueError(f"parameters must be a JSON object: {exc.msg}") from exc
    if not isinstance(parsed, dict):
        raise ValueError("parameters must be a JSON object")
    return parsed


def _modules_from_env() -> list[str]:
    raw = os.getenv(MODULES_ENV, "")
    return [part.strip() for part in raw.split(",") if part.strip()]


def create_app(engine: ConversionEngine | None = None) -> FastAPI:
    """Create the conversion HTTP application.

    Parameters
    ----------
    engine : ConversionEngine | None, optional
        Engine serving every request. Defaults to the built-in converters
        plus any modules listed in ``CONVERTER_MODULES``.
    """
    _require_http_runtime()
    if fastapi is None:
        raise RuntimeError("fastapi module is unavailable")
    fastapi_module = fastapi
    responses_module = cast(_ResponsesModuleLike, responses)
    shared_engine = engine if engine is not None else create_default_engine(_modules_from_env())
    app = cast(
        "FastAPI",
        fastapi_module.FastAPI(
            title="File Converter Service",
            version="0.1.0",
            description=(
                "Upload documents or data files and download the converted file "
                "with integrity checks."
            ),
        ),
    )
    artifact_param = cast(UploadFile, fastapi_module.File(...))
    target_format_param = cast(str, fastapi_module.Form(...))
    parameters_param = cast(str | None, fastapi_module.Form(default=None))
    expected_sha256_param = cast(str | None, fastapi_module.Form(default=None))

    @app.get("/healthz", response_model=HealthResponse)
    async def healthz() -> HealthResponse:
        return HealthResponse(status="ok")

    @app.get("/readyz", response_model=ReadyResponse)
    async def readyz() -> ReadyResponse:
        return ReadyResponse(status="ready", converters=len(shared_engine.converters))

    @app.get("/v1/formats", response_model=FormatsResponse)
    async def formats() -> FormatsResponse:
        paths = [
            ConversionPathModel(input_format=source.label, output_format=target.label)
            for source, target in sorted(shared_engine.supported_conversion_paths())
        ]
        return FormatsResponse(paths=paths)

    @app.post("/v1/convert/upload")
    async def convert_upload(
        artifact: UploadFile = artifact_param,
        target_format: str = target_format_param,
        parameters: str | None = parameters_param,
        expected_sha256: str | None = expected_sha256_param,
    ) -> Response:
        """Convert an uploaded file and return the converted bytes."""
        payload = await artifact.read()
        if not payload:
            raise fastapi_module.HTTPException(
                status_code=fastapi_module.status.HTTP_400_BAD_REQUEST,
                detail="uploaded file is empty",
            )
        try:
            config = UploadConversionConfig(
                filename=artifact.filename or "",
                target_format=target_format,
                parameters=_parse_parameters(parameters),
                expected_sha256=expected_sha256,
            )
            input_sha, outcome = await convert_upload_bytes(payload, config, shared_engine)
        except ValidationError as exc:
            raise fastapi_module.HTTPException(
                status_code=fastapi_module.status.HTTP_400_BAD_REQUEST,
                detail="; ".join(str(error["msg"]) for error in exc.errors()),
            ) from exc
        except (ValueError, ConversionError) as exc:
            raise fastapi_module.HTTPException(
                status_code=fastapi_module.status.HTTP_400_BAD_REQUEST,
                detail=str(exc),
            ) from exc
        except Exception as exc:  # pragma: no cover
            logger.exception("unexpected error during HTTP conversion upload")
            raise fastapi_module.HTTPException(
                status_code=fastapi_module.status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="internal server error",
            ) from exc

        headers = {
            "X-Input-SHA256": input_sha,
            "X-Output-SHA256": outcome.output_sha256,
            "X-Output-Filename": outcome.output_filename,
            "Content-Disposition": f'attachment; filename="{outcome.output_filename}"',
        }
        return cast(
            "Response",
            responses_module.Response(
                content=outcome.output_bytes,
                media_type="application/octet-stream",
                headers=headers,
            ),
        )

    return app


if TYPE_CHECKING:
    app: FastAPI | None

if _fastapi_module is not None:
    app = create_app()
else:  # pragma: no cover
    app = None


def main() -> None:
    """Run the conversion HTTP entrypoint."""
    _require_http_runtime()
    if uvicorn is None:
        raise RuntimeError("uvicorn is required to run file-converter-http")
    parser = argparse.ArgumentParser(description="File converter HTTP server.")
    parser.add_argument(
        "--host",
        default=os.getenv("CONVERTER_HTTP_HOST", "0.0.0.0"),
    )
    parser.add_argument(
        "--port",
        type=int,
        default=int(os.getenv("CONVERTER_HTTP_PORT", "8090")),
    )
    args = parser.parse_args()
    uvicorn.run(
        "file_converter.service.http_server:app",
        host=args.host,
        port=args.port,
        reload=False,
    )


if __name__ == "__main__":
    main()
