"""Periodic acquisition of sample pairs from the sensor."""

from __future__ import annotations

import logging
from typing import Protocol, runtime_checkable

from .channel import SampleChannel
from .errors import AcquisitionError, DriverError
from .models import Measurement, PowerMode, SamplePair
from .ticker import Ticker

logger = logging.getLogger(__name__)


@runtime_checkable
class SampleSource(Protocol):  # pragma: no cover - protocol
    """Blocking sensor driver used by :class:`Producer`."""

    def measure(self, mode: PowerMode) -> Measurement:
        ...


class Producer:
    """
    Read one :class:`SamplePair` per tick and publish it on the channel.

    Reads are synchronous calls made from the coroutine, so a read in flight
    always completes before a cancellation can be delivered at the next
    suspension point (the tick sleep).
    """

    def __init__(self, source: SampleSource, channel: SampleChannel, period_s: float) -> None:
        self.source = source
        self.channel = channel
        self.ticker = Ticker(period_s, name="producer")
        self.cycles = 0

    def acquire(self) -> SamplePair:
        """
        Take both readings of one cycle.

        A failure on either read abandons the cycle; the reading that did
        succeed is discarded with it.
        """
        try:
            normal = self.source.measure(PowerMode.NORMAL)
            low_power = self.source.measure(PowerMode.LOW_POWER)
        except (DriverError, OSError) as exc:
            raise AcquisitionError(f"sensor read failed: {exc}") from exc
        return SamplePair(normal=normal, low_power=low_power)

    def cycle(self) -> SamplePair:
        """Acquire and publish one pair."""
        pair = self.acquire()
        self.channel.publish(pair)
        self.cycles += 1
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug(
                "Producer cycle %d: normal=%s low_power=%s pending=%d",
                self.cycles,
                pair.normal,
                pair.low_power,
                self.channel.pending,
            )
        return pair

    async def run(self) -> None:
        """Acquire forever; returns only by raising or being cancelled."""
        logger.info("Producer started (period=%.3f s)", self.ticker.period_s)
        self.ticker.reset()
        while True:
            self.cycle()
            await self.ticker.wait()


__all__ = ["Producer", "SampleSource"]
