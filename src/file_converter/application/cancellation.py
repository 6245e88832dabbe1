"""Cooperative cancellation token shared by a conversion call chain."""

from __future__ import annotations

import threading

from file_converter.errors import ConversionCancelledError


class CancellationToken:
    """Thread-safe cancellation flag.

    The token is checked by converters at phase boundaries and inside long
    row loops, including from worker threads started with
    ``asyncio.to_thread``.
    """

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        """Request cancellation."""
        self._event.set()

    @property
    def cancelled(self) -> bool:
        """Whether cancellation has been requested."""
        return self._event.is_set()

    def raise_if_cancelled(self) -> None:
        """Raise ``ConversionCancelledError`` when cancellation was requested."""
        if self._event.is_set():
            raise ConversionCancelledError()
