"""Factory helpers that wire the monitor pipeline from configuration."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Optional

from ..config import MonitorConfig
from .channel import SampleChannel
from .consumer import Renderer, RenderLoop
from .errors import RenderError
from .producer import Producer, SampleSource
from .series import SeriesBuffers
from .supervisor import RunOutcome, Supervisor
from .watcher import CancellationWatcher

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class PipelineHandles:
    """Return value from :func:`build_pipeline` containing ready-to-use pieces."""

    config: MonitorConfig
    source: SampleSource
    renderer: Renderer
    channel: SampleChannel
    buffers: SeriesBuffers
    producer: Producer
    consumer: RenderLoop
    watcher: CancellationWatcher
    supervisor: Supervisor


def build_source(cfg: MonitorConfig) -> SampleSource:
    """Create the sample source named by ``cfg.source``."""
    if cfg.source == "synthetic":
        from ..sensors.synthetic import SyntheticSource

        return SyntheticSource()
    from ..sensors.shtc3 import open_shtc3

    return open_shtc3(cfg.i2c_device, cfg.i2c_address)


def build_renderer(cfg: MonitorConfig, watcher: CancellationWatcher) -> Renderer:
    """Create the renderer named by ``cfg.renderer``."""
    if cfg.renderer == "console":
        from ..display.console import ConsoleRenderer

        return ConsoleRenderer()
    from ..display.chart import ChartRenderer

    return ChartRenderer(
        cfg.capacity,
        temperature_max=cfg.temperature_max,
        humidity_max=cfg.humidity_max,
        on_close=watcher.notify,
    )


def build_pipeline(
    cfg: MonitorConfig,
    *,
    source: Optional[SampleSource] = None,
    renderer: Optional[Renderer] = None,
    watcher: Optional[CancellationWatcher] = None,
) -> PipelineHandles:
    """
    Build every pipeline component from ``cfg``.

    Parameters
    ----------
    cfg:
        Runtime configuration (usually loaded from YAML).
    source:
        Injected sample source. When omitted the one named by
        ``cfg.source`` is opened.
    renderer:
        Injected renderer. When omitted the one named by ``cfg.renderer``
        is created; a chart window closing notifies the watcher.
    watcher:
        Injected cancellation watcher (a new one by default).
    """

    normalized = cfg.sanitized()
    watcher = watcher or CancellationWatcher()
    source = source if source is not None else build_source(normalized)
    if renderer is None:
        try:
            renderer = build_renderer(normalized, watcher)
        except Exception as exc:
            close_source = getattr(source, "close", None)
            if callable(close_source):
                close_source()
            raise RenderError(f"Could not create {normalized.renderer} renderer: {exc}") from exc

    channel = SampleChannel(normalized.channel_size)
    buffers = SeriesBuffers(normalized.capacity)
    producer = Producer(source, channel, normalized.sample_period_s)
    consumer = RenderLoop(channel, buffers, renderer, normalized.render_period_s)
    supervisor = Supervisor(producer, consumer, watcher)

    # Restore the display first, then release the sensor.
    supervisor.add_cleanup(renderer.close)
    close_source = getattr(source, "close", None)
    if callable(close_source):
        supervisor.add_cleanup(close_source)
    supervisor.add_cleanup(channel.close)

    return PipelineHandles(
        config=normalized,
        source=source,
        renderer=renderer,
        channel=channel,
        buffers=buffers,
        producer=producer,
        consumer=consumer,
        watcher=watcher,
        supervisor=supervisor,
    )


async def run_pipeline(
    handles: PipelineHandles,
    *,
    install_signals: bool = True,
    duration_s: Optional[float] = None,
) -> RunOutcome:
    """Run the supervisor with signal handling and an optional time limit."""
    loop = asyncio.get_running_loop()
    if install_signals:
        handles.watcher.install_signal_handlers(loop)
    timer: Optional[asyncio.TimerHandle] = None
    if duration_s is not None and duration_s > 0:
        timer = loop.call_later(duration_s, handles.watcher.notify, "duration")
    try:
        return await handles.supervisor.run()
    finally:
        if timer is not None:
            timer.cancel()
        if install_signals:
            handles.watcher.remove_signal_handlers()


__all__ = ["PipelineHandles", "build_pipeline", "build_renderer", "build_source", "run_pipeline"]
