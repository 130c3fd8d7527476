import asyncio

import pytest

from shtmon.config import MonitorConfig
from shtmon.core import wiring
from shtmon.core.errors import AcquisitionError, RenderError
from shtmon.core.supervisor import SupervisorState
from shtmon.core.wiring import build_pipeline, run_pipeline
from shtmon.display.console import ConsoleRenderer
from shtmon.sensors.synthetic import SyntheticSource

from helpers import FakeSource, RecordingRenderer


def _config(**overrides) -> MonitorConfig:
    base = MonitorConfig(
        source="synthetic",
        renderer="console",
        sample_period_s=0.01,
        render_period_s=0.005,
        capacity=5,
    )
    return base.with_overrides(**overrides)


def test_build_pipeline_creates_configured_collaborators() -> None:
    handles = build_pipeline(_config(channel_size=7))
    assert isinstance(handles.source, SyntheticSource)
    assert isinstance(handles.renderer, ConsoleRenderer)
    assert handles.channel.maxsize == 7
    assert handles.buffers.capacity == 5
    assert handles.producer.ticker.period_s == 0.01
    assert handles.consumer.ticker.period_s == 0.005


def test_duration_stops_pipeline_cleanly_and_releases_resources() -> None:
    source = FakeSource()
    renderer = RecordingRenderer()
    handles = build_pipeline(_config(), source=source, renderer=renderer)

    outcome = asyncio.run(run_pipeline(handles, install_signals=False, duration_s=0.1))

    assert outcome.exit_code == 0
    assert outcome.reason == "duration"
    assert handles.supervisor.state is SupervisorState.STOPPED
    assert renderer.closed == 1
    assert source.closed == 1
    assert handles.channel.closed
    # the window never holds more than the configured capacity
    assert len(handles.buffers) == 5


def test_buffers_hold_the_newest_values_in_publish_order() -> None:
    source = FakeSource()
    handles = build_pipeline(_config(), source=source, renderer=RecordingRenderer())
    asyncio.run(run_pipeline(handles, install_signals=False, duration_s=0.1))

    temps = handles.buffers.snapshot("temp_normal", oldest_first=True)
    # normal-mode reads are the odd read numbers, so consecutive cycles differ by 2000
    assert all(b - a == 2000 for a, b in zip(temps, temps[1:]))


def test_sensor_failure_gives_failure_exit_code() -> None:
    handles = build_pipeline(
        _config(),
        source=SyntheticSource(seed=1, fail_after=3),
        renderer=RecordingRenderer(),
    )
    outcome = asyncio.run(run_pipeline(handles, install_signals=False, duration_s=5.0))
    assert outcome.exit_code == 1
    assert isinstance(outcome.error, AcquisitionError)


def test_signal_handlers_are_installed_for_the_run() -> None:
    handles = build_pipeline(_config(), source=FakeSource(), renderer=RecordingRenderer())
    outcome = asyncio.run(run_pipeline(handles, duration_s=0.05))
    assert outcome.exit_code == 0


def test_renderer_failure_releases_the_opened_source(monkeypatch) -> None:
    source = FakeSource()
    monkeypatch.setattr(wiring, "build_source", lambda cfg: source)

    def _broken(cfg, watcher):
        raise RuntimeError("no display")

    monkeypatch.setattr(wiring, "build_renderer", _broken)
    with pytest.raises(RenderError):
        build_pipeline(_config(renderer="chart"))
    assert source.closed == 1
