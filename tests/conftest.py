"""Shared pytest configuration, marker assignment and conversion helpers."""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Mapping
from pathlib import Path
from typing import Any

import pytest

from file_converter.application import (
    CancellationToken,
    ConversionParameters,
    ConversionProgress,
    ConversionResult,
    Converter,
)


def pytest_collection_modifyitems(
    config: pytest.Config, items: list[pytest.Item]
) -> None:
    """Attach suite markers based on test file path."""
    del config
    for item in items:
        path = Path(str(item.fspath))
        parts = set(path.parts)
        if "e2e_tests" in parts:
            item.add_marker(pytest.mark.e2e)
        elif "integration_tests" in parts:
            item.add_marker(pytest.mark.integration)
        elif "unit_tests" in parts:
            item.add_marker(pytest.mark.unit)


class ProgressLog:
    """Progress sink that records every tick."""

    def __init__(self) -> None:
        self.ticks: list[ConversionProgress] = []

    def __call__(self, tick: ConversionProgress) -> None:
        self.ticks.append(tick)

    @property
    def messages(self) -> list[str]:
        return [tick.status_message for tick in self.ticks]


type RunConverter = Callable[..., ConversionResult]


@pytest.fixture
def progress_log() -> ProgressLog:
    """Return a fresh recording progress sink."""
    return ProgressLog()


@pytest.fixture
def run_converter() -> RunConverter:
    """Return a helper driving ``Converter.convert`` to completion."""

    def _run(
        converter: Converter,
        input_path: Path,
        output_path: Path,
        parameters: Mapping[str, Any] | None = None,
        progress: ProgressLog | None = None,
        cancel_token: CancellationToken | None = None,
    ) -> ConversionResult:
        return asyncio.run(
            converter.convert(
                input_path,
                output_path,
                ConversionParameters(parameters),
                progress,
                cancel_token or CancellationToken(),
            )
        )

    return _run
