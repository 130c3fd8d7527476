"""Simulated SampleSource for running the monitor without hardware."""

from __future__ import annotations

import logging
import math
import time
from typing import Callable, Optional

import numpy as np

from ..core.errors import DriverError
from ..core.models import FIXED_POINT_SCALE, Measurement, PowerMode

logger = logging.getLogger(__name__)


class SyntheticSource:
    """
    Produce slowly drifting temperature/humidity readings.

    Values follow a sine around ``base_temperature`` / ``base_humidity`` with
    Gaussian noise; low-power reads get ``low_power_noise`` times more noise,
    mimicking the reduced repeatability of the sensor's low-power mode.
    ``fail_after`` raises :class:`DriverError` on that read number, which
    makes it easy to exercise the failure path from the command line.
    """

    def __init__(
        self,
        *,
        seed: Optional[int] = None,
        base_temperature: float = 23.0,
        base_humidity: float = 45.0,
        amplitude: float = 2.0,
        period_s: float = 20.0,
        noise: float = 0.05,
        low_power_noise: float = 4.0,
        fail_after: Optional[int] = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._rng = np.random.default_rng(seed)
        self.base_temperature = base_temperature
        self.base_humidity = base_humidity
        self.amplitude = amplitude
        self.period_s = max(1e-3, float(period_s))
        self.noise = noise
        self.low_power_noise = low_power_noise
        self.fail_after = fail_after
        self._clock = clock
        self._t0 = clock()
        self.reads = 0

    def measure(self, mode: PowerMode) -> Measurement:
        self.reads += 1
        if self.fail_after is not None and self.reads >= self.fail_after:
            raise DriverError(f"simulated read failure on read {self.reads}", mode)

        phase = 2.0 * math.pi * (self._clock() - self._t0) / self.period_s
        sigma = self.noise * (self.low_power_noise if mode is PowerMode.LOW_POWER else 1.0)
        t_noise, rh_noise = self._rng.normal(0.0, sigma, size=2)
        temperature = self.base_temperature + self.amplitude * math.sin(phase) + t_noise
        humidity = self.base_humidity - 2.0 * self.amplitude * math.sin(phase) + 5.0 * rh_noise
        humidity = min(100.0, max(0.0, humidity))
        return Measurement(
            temperature=int(round(temperature * FIXED_POINT_SCALE)),
            humidity=int(round(humidity * FIXED_POINT_SCALE)),
        )

    def close(self) -> None:  # pragma: no cover - nothing to release
        logger.debug("SyntheticSource closed after %d reads", self.reads)


__all__ = ["SyntheticSource"]
