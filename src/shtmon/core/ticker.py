from __future__ import annotations

import asyncio
import logging
import time
from typing import Callable, Optional

logger = logging.getLogger(__name__)


class Ticker:
    """Fixed-period async scheduler.

    Each deadline adds ``period_s`` to the *previous deadline*, which keeps
    the long-term rate stable and avoids drift from small sleep() errors.
    When an iteration runs late the ticker counts an overrun, yields once to
    the event loop and re-anchors on the current time instead of bursting.
    """

    def __init__(
        self,
        period_s: float,
        *,
        clock: Callable[[], float] = time.monotonic,
        name: str = "ticker",
    ) -> None:
        if period_s <= 0:
            raise ValueError("period_s must be positive")
        self.period_s = float(period_s)
        self.name = name
        self._clock = clock
        self._next: Optional[float] = None
        self.overruns = 0

    def reset(self) -> None:
        """Anchor the schedule on the current time."""
        self._next = self._clock()

    async def wait(self) -> None:
        """Sleep until the next tick."""
        if self._next is None:
            self.reset()
        assert self._next is not None
        self._next += self.period_s
        delay = self._next - self._clock()
        if delay > 0:
            await asyncio.sleep(delay)
            return

        self.overruns += 1
        if self.overruns == 1 or self.overruns % 50 == 0:
            logger.debug(
                "%s overrun: behind by %.3f ms (count=%d)",
                self.name,
                -delay * 1000.0,
                self.overruns,
            )
        self._next = self._clock()
        await asyncio.sleep(0)


__all__ = ["Ticker"]
