"""Error types raised inside the sampling/display pipeline.

Every in-loop error is fatal: it ends the loop that raised it, which in turn
stops the whole pipeline through the supervisor.
"""

from __future__ import annotations

from typing import Optional

from .models import PowerMode


class MonitorError(Exception):
    """Base class for pipeline failures."""


class DriverError(MonitorError):
    """A SampleSource read failed (bus I/O error, CRC mismatch, ...)."""

    def __init__(self, message: str, mode: Optional[PowerMode] = None) -> None:
        super().__init__(message)
        self.mode = mode


class AcquisitionError(MonitorError):
    """A producer cycle was abandoned because one of its reads failed."""


class PublishError(MonitorError):
    """The channel was closed when the producer tried to publish."""


class ChannelClosed(MonitorError):
    """The consumer found the channel closed while draining."""


class RenderError(MonitorError):
    """The renderer failed to draw the current buffers."""


__all__ = [
    "MonitorError",
    "DriverError",
    "AcquisitionError",
    "PublishError",
    "ChannelClosed",
    "RenderError",
]
