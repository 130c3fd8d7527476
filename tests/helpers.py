"""Test doubles for the sensor and display collaborators."""

from __future__ import annotations

from typing import Callable, List, Optional

from shtmon.core.errors import DriverError
from shtmon.core.models import Measurement, PowerMode, SamplePair
from shtmon.core.series import PlotData


def make_pair(value: int) -> SamplePair:
    """Pair whose four series values are derived from ``value``."""
    return SamplePair(
        normal=Measurement(temperature=value, humidity=value + 1),
        low_power=Measurement(temperature=value + 2, humidity=value + 3),
    )


class FakeSource:
    """
    Returns increasing readings; the temperature of the N-th read is N * 1000.

    ``fail_on`` lists read numbers (1-based) that raise :class:`DriverError`.
    """

    def __init__(self, fail_on: Optional[set[int]] = None) -> None:
        self.fail_on = fail_on or set()
        self.reads: List[PowerMode] = []
        self.closed = 0

    def measure(self, mode: PowerMode) -> Measurement:
        self.reads.append(mode)
        n = len(self.reads)
        if n in self.fail_on:
            raise DriverError(f"read {n} failed", mode)
        return Measurement(temperature=n * 1000, humidity=n * 10)

    def close(self) -> None:
        self.closed += 1


class RecordingRenderer:
    """Keeps every frame; optional hook runs inside ``draw``."""

    def __init__(self, on_draw: Optional[Callable[[int, PlotData], None]] = None) -> None:
        self.frames: List[PlotData] = []
        self.on_draw = on_draw
        self.closed = 0

    def draw(self, data: PlotData) -> None:
        self.frames.append(data)
        if self.on_draw is not None:
            self.on_draw(len(self.frames), data)

    def close(self) -> None:
        self.closed += 1


class FailingRenderer(RecordingRenderer):
    def __init__(self, fail_on_frame: int = 1, exc: Optional[Exception] = None) -> None:
        super().__init__()
        self.fail_on_frame = fail_on_frame
        self.exc = exc or RuntimeError("display lost")

    def draw(self, data: PlotData) -> None:
        super().draw(data)
        if len(self.frames) >= self.fail_on_frame:
            raise self.exc
