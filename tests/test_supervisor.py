import asyncio

import pytest

from shtmon.core.channel import SampleChannel
from shtmon.core.consumer import RenderLoop
from shtmon.core.errors import AcquisitionError, RenderError
from shtmon.core.models import SERIES_NAMES
from shtmon.core.producer import Producer
from shtmon.core.series import SeriesBuffers
from shtmon.core.supervisor import RunOutcome, Supervisor, SupervisorState
from shtmon.core.watcher import CancellationWatcher

from helpers import FailingRenderer, FakeSource, RecordingRenderer


def _supervisor(source=None, renderer=None, *, sample_s=0.01, render_s=0.005, capacity=100):
    channel = SampleChannel()
    source = source or FakeSource()
    renderer = renderer or RecordingRenderer()
    watcher = CancellationWatcher()
    producer = Producer(source, channel, sample_s)
    consumer = RenderLoop(channel, SeriesBuffers(capacity), renderer, render_s)
    supervisor = Supervisor(producer, consumer, watcher)
    supervisor.add_cleanup(renderer.close)
    return supervisor, source, renderer


def test_watcher_completion_stops_cleanly() -> None:
    supervisor, source, renderer = _supervisor()

    async def scenario():
        asyncio.get_running_loop().call_later(0.05, supervisor.watcher.notify, "SIGINT")
        return await supervisor.run()

    outcome = asyncio.run(scenario())

    assert outcome.winner == "watcher"
    assert outcome.error is None
    assert outcome.reason == "SIGINT"
    assert outcome.exit_code == 0
    assert supervisor.state_history == [
        SupervisorState.STARTING,
        SupervisorState.RUNNING,
        SupervisorState.STOPPING,
        SupervisorState.STOPPED,
    ]
    assert renderer.closed == 1
    assert supervisor.producer.cycles >= 2


def test_no_new_cycle_starts_after_the_watcher_fires() -> None:
    at_stop = {}

    def stop_on_frame(frame, _data):
        if frame == 5:
            at_stop["cycles"] = supervisor.producer.cycles
            supervisor.watcher.notify("test")
            at_stop["state"] = supervisor.state

    supervisor, _, renderer = _supervisor(
        renderer=RecordingRenderer(on_draw=stop_on_frame), sample_s=0.004, render_s=0.004
    )
    outcome = asyncio.run(supervisor.run())

    assert outcome.exit_code == 0
    assert at_stop["state"] is SupervisorState.STOPPING
    assert supervisor.producer.cycles == at_stop["cycles"]
    assert supervisor.consumer.frames == 5
    assert len(renderer.frames) == 5


def test_acquisition_error_stops_pipeline_with_failure() -> None:
    supervisor, source, renderer = _supervisor(source=FakeSource(fail_on={6}))
    outcome = asyncio.run(supervisor.run())

    assert outcome.winner == "producer"
    assert isinstance(outcome.error, AcquisitionError)
    assert outcome.exit_code == 1
    assert supervisor.state is SupervisorState.STOPPED
    assert renderer.closed == 1
    assert not supervisor.watcher.fired


def test_failed_cycle_never_reaches_the_buffers() -> None:
    # Read 4 is the low-power read of the second cycle; read 3 succeeded.
    supervisor, source, _ = _supervisor(source=FakeSource(fail_on={4}), render_s=0.001)
    outcome = asyncio.run(supervisor.run())

    assert isinstance(outcome.error, AcquisitionError)
    buffers = supervisor.consumer.buffers
    assert 3000 not in buffers.snapshot("temp_normal")
    # whatever was rendered came only from the first, complete cycle
    for name in SERIES_NAMES:
        assert len(buffers.snapshot(name)) <= 1


def test_render_error_stops_pipeline_with_failure() -> None:
    supervisor, _, renderer = _supervisor(renderer=FailingRenderer(fail_on_frame=3))
    outcome = asyncio.run(supervisor.run())

    assert outcome.winner == "render"
    assert isinstance(outcome.error, RenderError)
    assert outcome.exit_code == 1
    assert renderer.closed == 1


def test_cleanup_failures_are_swallowed_and_cleanup_is_repeatable() -> None:
    supervisor, _, renderer = _supervisor()
    calls = []

    def broken():
        calls.append("broken")
        raise OSError("terminal already gone")

    supervisor.add_cleanup(broken)
    supervisor.add_cleanup(lambda: calls.append("after"))

    async def scenario():
        supervisor.watcher.notify("early")
        return await supervisor.run()

    outcome = asyncio.run(scenario())
    assert outcome.exit_code == 0
    assert calls == ["broken", "after"]

    supervisor.cleanup()
    assert calls == ["broken", "after", "broken", "after"]
    assert renderer.closed == 2


def test_cancelling_the_supervisor_still_cleans_up() -> None:
    supervisor, _, renderer = _supervisor()

    async def scenario():
        task = asyncio.create_task(supervisor.run())
        await asyncio.sleep(0.03)
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            return "cancelled"
        return "finished"

    assert asyncio.run(scenario()) == "cancelled"
    assert supervisor.state is SupervisorState.STOPPED
    assert renderer.closed == 1


def test_run_only_once() -> None:
    supervisor, _, _ = _supervisor()
    supervisor.watcher.notify("x")
    asyncio.run(supervisor.run())

    async def again():
        return await supervisor.run()

    with pytest.raises(RuntimeError, match="once"):
        asyncio.run(again())


def test_outcome_exit_codes() -> None:
    assert RunOutcome(winner="watcher").exit_code == 0
    assert RunOutcome(winner="render", error=RenderError("x")).exit_code == 1
    assert RunOutcome(winner="producer").exit_code == 2
    assert RunOutcome(winner="watcher").ok
