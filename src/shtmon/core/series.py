from __future__ import annotations

import math
from collections.abc import Iterator
from typing import Dict

import numpy as np

from .models import FIXED_POINT_SCALE, SERIES_NAMES, SamplePair
from .ringbuffer import RingBuffer

# series name -> (n, 2) float64 array of (index, display value), oldest first
PlotData = Dict[str, np.ndarray]


def calculate_capacity(window_seconds: float, sample_period_s: float) -> int:
    """
    Compute how many pairs are needed to cover ``window_seconds`` when one
    pair arrives every ``sample_period_s``.
    """
    if sample_period_s <= 0:
        raise ValueError("sample_period_s must be positive")
    return max(1, int(math.ceil(window_seconds / sample_period_s)))


def to_plot_points(values: list[int], scale: int = FIXED_POINT_SCALE) -> np.ndarray:
    """Convert oldest-first fixed-point ``values`` into ``(index, value / scale)`` rows."""
    count = len(values)
    points = np.empty((count, 2), dtype=np.float64)
    if count == 0:
        return points
    points[:, 0] = np.arange(count, dtype=np.float64)
    points[:, 1] = np.fromiter(values, dtype=np.int64, count=count) / float(scale)
    return points


class SeriesBuffers:
    """
    One :class:`RingBuffer` per tracked series (two modes x two quantities).

    Values are kept as fixed-point integers; :meth:`plot_data` is the only
    place where they become floats.
    """

    __slots__ = ("_buffers",)

    def __init__(self, capacity: int) -> None:
        self._buffers: Dict[str, RingBuffer[int]] = {
            name: RingBuffer(capacity) for name in SERIES_NAMES
        }

    @property
    def capacity(self) -> int:
        return self._buffers[SERIES_NAMES[0]].capacity

    def apply(self, pair: SamplePair) -> None:
        """Push the four values derived from ``pair``."""
        for name, value in pair.series_values():
            self._buffers[name].push(int(value))

    def snapshot(self, name: str, *, oldest_first: bool = False) -> list[int]:
        return self._buffers[name].snapshot(oldest_first=oldest_first)

    def __getitem__(self, name: str) -> RingBuffer[int]:
        return self._buffers[name]

    def __iter__(self) -> Iterator[str]:
        return iter(SERIES_NAMES)

    def __len__(self) -> int:
        # all series grow together, so any one of them gives the length
        return len(self._buffers[SERIES_NAMES[0]])

    def plot_data(self) -> PlotData:
        """Return every series oldest-first, converted to display scale."""
        return {
            name: to_plot_points(self._buffers[name].snapshot(oldest_first=True))
            for name in SERIES_NAMES
        }


__all__ = ["PlotData", "SeriesBuffers", "calculate_capacity", "to_plot_points"]
