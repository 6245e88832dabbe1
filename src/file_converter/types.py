"""Shared type aliases for converter modules."""

from __future__ import annotations

from collections.abc import Callable
from os import PathLike
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from file_converter.application.results import ConversionProgress

type PathLikeStr = str | PathLike[str]
type ProgressSink = Callable[["ConversionProgress"], None]
type Row = list[str]
type Table = list[Row]
