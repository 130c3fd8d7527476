"""Shared dataclasses for SHTC3 measurements and sample pairs."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Iterator

# Fixed-point scale for every stored quantity (milli-units).
FIXED_POINT_SCALE = 1000

SERIES_NAMES: tuple[str, ...] = (
    "temp_normal",
    "temp_lowpwr",
    "humi_normal",
    "humi_lowpwr",
)


class PowerMode(enum.Enum):
    """Operating mode of a single sensor read."""

    NORMAL = "normal"
    LOW_POWER = "low_power"


@dataclass(frozen=True, slots=True)
class Measurement:
    """One sensor reading.

    ``temperature`` is in millidegrees Celsius and ``humidity`` in
    millipercent relative humidity.
    """

    temperature: int
    humidity: int


@dataclass(frozen=True, slots=True)
class SamplePair:
    """Both readings of one producer cycle (normal mode first)."""

    normal: Measurement
    low_power: Measurement

    def series_values(self) -> Iterator[tuple[str, int]]:
        """Yield ``(series_name, value)`` in :data:`SERIES_NAMES` order."""
        yield "temp_normal", self.normal.temperature
        yield "temp_lowpwr", self.low_power.temperature
        yield "humi_normal", self.normal.humidity
        yield "humi_lowpwr", self.low_power.humidity


__all__ = [
    "FIXED_POINT_SCALE",
    "SERIES_NAMES",
    "PowerMode",
    "Measurement",
    "SamplePair",
]
