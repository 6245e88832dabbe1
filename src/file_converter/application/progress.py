"""Progress forwarding helper."""

from __future__ import annotations

import logging
from pathlib import Path

from file_converter.application.results import ConversionProgress
from file_converter.types import ProgressSink

logger = logging.getLogger(__name__)


class ProgressReporter:
    """Forward progress ticks to an optional sink and log them.

    Parameters
    ----------
    input_path : Path
        Input file of the conversion, used for log context.
    sink : ProgressSink | None, default=None
        Callable receiving each :class:`ConversionProgress`. ``None`` is a no-op.
    """

    def __init__(self, input_path: Path, sink: ProgressSink | None = None) -> None:
        self._input_name = input_path.name
        self._sink = sink

    def report(self, percent_complete: float, status_message: str) -> None:
        """Emit one progress tick."""
        tick = ConversionProgress(
            percent_complete=float(percent_complete),
            status_message=status_message,
        )
        if self._sink is not None:
            self._sink(tick)
        logger.debug(
            "Progress (%s): %.0f%% - %s",
            self._input_name,
            tick.percent_complete,
            tick.status_message,
        )

    def report_step(
        self,
        index: int,
        total: int,
        start: float,
        span: float,
        message: str,
    ) -> None:
        """Emit a tick roughly every tenth of ``total`` items and on the last.

        The percentage is interpolated between ``start`` and ``start + span``.
        """
        if total <= 0:
            return
        if index % max(1, total // 10) == 0 or index == total - 1:
            self.report(start + (index * span / total), message)
