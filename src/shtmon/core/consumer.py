"""Periodic drain of the channel into the series buffers, followed by a render."""

from __future__ import annotations

import logging
from typing import Protocol, runtime_checkable

from ..tools.debug import time_block
from .channel import SampleChannel
from .errors import RenderError
from .series import PlotData, SeriesBuffers
from .ticker import Ticker

logger = logging.getLogger(__name__)


@runtime_checkable
class Renderer(Protocol):  # pragma: no cover - protocol
    """Display collaborator driven by :class:`RenderLoop`."""

    def draw(self, data: PlotData) -> None:
        ...

    def close(self) -> None:
        ...


class RenderLoop:
    """
    Drain every pending pair, apply it to the buffers, then draw.

    The buffers are owned by this loop alone. The render cadence is
    independent of the sampling cadence, so a tick can see zero, one or many
    pairs.
    """

    def __init__(
        self,
        channel: SampleChannel,
        buffers: SeriesBuffers,
        renderer: Renderer,
        period_s: float,
    ) -> None:
        self.channel = channel
        self.buffers = buffers
        self.renderer = renderer
        self.ticker = Ticker(period_s, name="render")
        self.frames = 0
        self.applied = 0

    def tick(self) -> int:
        """Run one drain/apply/draw step and return the number of pairs applied."""
        pairs = self.channel.drain()
        for pair in pairs:
            self.buffers.apply(pair)
        self.applied += len(pairs)

        with time_block(f"render frame {self.frames}"):
            try:
                self.renderer.draw(self.buffers.plot_data())
            except RenderError:
                raise
            except Exception as exc:
                raise RenderError(f"renderer failed: {exc}") from exc
        self.frames += 1
        return len(pairs)

    async def run(self) -> None:
        """Render forever; returns only by raising or being cancelled."""
        logger.info(
            "Render loop started (period=%.3f s, capacity=%d)",
            self.ticker.period_s,
            self.buffers.capacity,
        )
        self.ticker.reset()
        while True:
            self.tick()
            await self.ticker.wait()


__all__ = ["RenderLoop", "Renderer"]
