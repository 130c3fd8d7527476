"""Core sampling/display pipeline: buffers, loops and supervision.

A producer task reads sample pairs from the sensor on a fixed period and
hands them to a render task through a FIFO channel. The render task drains
the channel into per-series ring buffers and redraws. A supervisor races
both loops against a cancellation watcher and tears everything down as soon
as the first of the three finishes.
"""

# Data structures
from .models import FIXED_POINT_SCALE, SERIES_NAMES, Measurement, PowerMode, SamplePair
from .ringbuffer import RingBuffer
from .series import PlotData, SeriesBuffers
from .channel import SampleChannel

# Errors
from .errors import (
    AcquisitionError,
    ChannelClosed,
    DriverError,
    MonitorError,
    PublishError,
    RenderError,
)

# Loops, supervision and wiring
from .producer import Producer, SampleSource
from .consumer import Renderer, RenderLoop
from .watcher import CancellationWatcher
from .supervisor import RunOutcome, Supervisor, SupervisorState
from .wiring import PipelineHandles, build_pipeline, run_pipeline

__all__ = [
    "FIXED_POINT_SCALE",
    "SERIES_NAMES",
    "Measurement",
    "PowerMode",
    "SamplePair",
    "RingBuffer",
    "PlotData",
    "SeriesBuffers",
    "SampleChannel",
    "AcquisitionError",
    "ChannelClosed",
    "DriverError",
    "MonitorError",
    "PublishError",
    "RenderError",
    "Producer",
    "SampleSource",
    "Renderer",
    "RenderLoop",
    "CancellationWatcher",
    "RunOutcome",
    "Supervisor",
    "SupervisorState",
    "PipelineHandles",
    "build_pipeline",
    "run_pipeline",
]
