"""Headless renderer that reports the newest values through logging."""

from __future__ import annotations

import logging
import time
from typing import Callable, Dict, Optional

from ..core.models import SERIES_NAMES
from ..core.series import PlotData

logger = logging.getLogger(__name__)


class ConsoleRenderer:
    """Log the newest value of each series at most every ``log_every_s`` seconds."""

    def __init__(
        self,
        *,
        log_every_s: float = 1.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.log_every_s = max(0.0, float(log_every_s))
        self._clock = clock
        self._last_emit: Optional[float] = None
        self.latest: Dict[str, float] = {}
        self.lines_emitted = 0

    def draw(self, data: PlotData) -> None:
        for name in SERIES_NAMES:
            points = data.get(name)
            if points is not None and len(points):
                self.latest[name] = float(points[-1, 1])
        if not self.latest:
            return

        now = self._clock()
        if self._last_emit is not None and now - self._last_emit < self.log_every_s:
            return
        self._last_emit = now
        self.lines_emitted += 1
        logger.info(
            "T normal=%.2f °C lowpwr=%.2f °C | RH normal=%.2f %% lowpwr=%.2f %%",
            self.latest.get("temp_normal", float("nan")),
            self.latest.get("temp_lowpwr", float("nan")),
            self.latest.get("humi_normal", float("nan")),
            self.latest.get("humi_lowpwr", float("nan")),
        )

    def close(self) -> None:  # pragma: no cover - nothing to restore
        return


__all__ = ["ConsoleRenderer"]
