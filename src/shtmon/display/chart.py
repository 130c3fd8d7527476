"""Matplotlib renderer: temperature and humidity charts, normal vs low-power mode."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Dict, Optional, Tuple

import matplotlib as mpl
import matplotlib.pyplot as plt
import numpy as np
from matplotlib.lines import Line2D

from ..core.errors import RenderError
from ..core.series import PlotData

log = logging.getLogger(__name__)

_MPL_CONFIGURED = False


@dataclass(frozen=True)
class SeriesStyle:
    axis: str
    label: str
    color: str
    marker: str


SERIES_STYLES: Dict[str, SeriesStyle] = {
    "temp_normal": SeriesStyle("temperature", "Normal mode", "red", "."),
    "temp_lowpwr": SeriesStyle("temperature", "Low power mode", "magenta", ","),
    "humi_normal": SeriesStyle("humidity", "Normal mode", "blue", "."),
    "humi_lowpwr": SeriesStyle("humidity", "Low power mode", "cyan", ","),
}


def configure_matplotlib_for_realtime() -> None:
    """
    Apply global Matplotlib tweaks that improve interactive / real-time performance.

    This should be called once before any figures are created.
    """
    global _MPL_CONFIGURED
    if _MPL_CONFIGURED:
        return

    try:
        mpl.style.use("fast")
    except (OSError, ValueError):
        log.debug("Matplotlib 'fast' style unavailable")

    rc = mpl.rcParams
    rc["path.simplify"] = True
    rc["path.simplify_threshold"] = 0.2
    rc["axes.grid"] = True

    _MPL_CONFIGURED = True


class ChartRenderer:
    """
    Two stacked charts redrawn from the series buffers on every render tick.

    The x axis spans ``[0, capacity]`` so the newest value sits at the right
    edge once the buffers are full. ``on_close`` is called when the user
    closes the window, which the app wires to the cancellation watcher.
    """

    def __init__(
        self,
        capacity: int,
        *,
        temperature_max: float = 50.0,
        humidity_max: float = 100.0,
        on_close: Optional[Callable[[str], None]] = None,
        show: bool = True,
    ) -> None:
        configure_matplotlib_for_realtime()
        self.capacity = int(capacity)
        self.on_close = on_close
        self._closed = False

        if show:
            plt.ion()
        self.fig, (self.ax_temp, self.ax_humi) = plt.subplots(2, 1, sharex=True)
        self._axes = {"temperature": self.ax_temp, "humidity": self.ax_humi}
        self._setup_axis(self.ax_temp, "Temperature", "°C", temperature_max)
        self._setup_axis(self.ax_humi, "Humidity", "%RH", humidity_max)
        self.ax_humi.set_xlabel("Sample")

        self._lines: Dict[str, Line2D] = {}
        for name, style in SERIES_STYLES.items():
            (line,) = self._axes[style.axis].plot(
                [], [], color=style.color, marker=style.marker, lw=1.0, label=style.label
            )
            self._lines[name] = line
        for ax in self._axes.values():
            ax.legend(loc="upper left")

        self.fig.canvas.mpl_connect("close_event", self._handle_close)
        if show:
            plt.show(block=False)

    def _setup_axis(self, ax: plt.Axes, title: str, unit: str, y_max: float) -> None:
        ax.set_title(title)
        ax.set_ylabel(unit)
        ax.set_xlim(0.0, float(self.capacity))
        ax.set_ylim(0.0, float(y_max))

    def _handle_close(self, _event: object) -> None:
        # close() during cleanup also fires close_event; only the user closing
        # the window is a stop request
        if self._closed:
            return
        self._closed = True
        if self.on_close is not None:
            self.on_close("window closed")

    @property
    def closed(self) -> bool:
        return self._closed

    def line_data(self, name: str) -> Tuple[np.ndarray, np.ndarray]:
        """Return the ``(x, y)`` arrays currently shown for series ``name``."""
        line = self._lines[name]
        return np.asarray(line.get_xdata()), np.asarray(line.get_ydata())

    def draw(self, data: PlotData) -> None:
        if self._closed:
            raise RenderError("chart window is closed")
        for name, line in self._lines.items():
            points = data.get(name)
            if points is None or len(points) == 0:
                line.set_data([], [])
            else:
                line.set_data(points[:, 0], points[:, 1])
        self.fig.canvas.draw_idle()
        self.fig.canvas.flush_events()

    def close(self) -> None:
        """Close the figure; safe to call more than once."""
        if self._closed:
            return
        self._closed = True
        plt.close(self.fig)


__all__ = ["ChartRenderer", "SERIES_STYLES", "configure_matplotlib_for_realtime"]
