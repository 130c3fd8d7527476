"""
Race-to-first-completion supervision of the producer, render and watcher tasks.

The supervisor starts all three concurrently. The first one to finish, by a
clean watcher completion or by a fatal loop error, moves it to STOPPING:
the others are cancelled at their next suspension point, external resources
are restored on a best-effort basis and the outcome decides the exit status.
"""

from __future__ import annotations

import asyncio
import enum
import functools
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

from .consumer import RenderLoop
from .producer import Producer
from .watcher import CancellationWatcher

logger = logging.getLogger(__name__)

CleanupFn = Callable[[], Any]

TASK_NAMES = ("producer", "render", "watcher")


class SupervisorState(enum.Enum):
    STARTING = "starting"
    RUNNING = "running"
    STOPPING = "stopping"
    STOPPED = "stopped"


@dataclass(slots=True)
class RunOutcome:
    """How the pipeline ended."""

    winner: Optional[str]
    error: Optional[BaseException] = None
    reason: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.winner == "watcher"

    @property
    def exit_code(self) -> int:
        if self.error is not None:
            return 1
        if self.winner == "watcher":
            return 0
        # a loop returned without raising: only possible with a broken collaborator
        return 2


@dataclass
class Supervisor:
    producer: Producer
    consumer: RenderLoop
    watcher: CancellationWatcher
    cleanup_callbacks: List[CleanupFn] = field(default_factory=list)

    state: SupervisorState = field(init=False, default=SupervisorState.STARTING)
    state_history: List[SupervisorState] = field(init=False, default_factory=list)
    winner: Optional[str] = field(init=False, default=None)

    _tasks: Dict[str, asyncio.Task] = field(init=False, default_factory=dict, repr=False)
    _completed: List[str] = field(init=False, default_factory=list, repr=False)

    def __post_init__(self) -> None:
        self.state_history.append(self.state)

    def add_cleanup(self, callback: CleanupFn) -> None:
        self.cleanup_callbacks.append(callback)

    def _set_state(self, state: SupervisorState) -> None:
        if state is self.state:
            return
        logger.debug("Supervisor %s -> %s", self.state.value, state.value)
        self.state = state
        self.state_history.append(state)

    # ------------------------------------------------------------ stopping
    def _begin_stopping(self, winner: Optional[str]) -> None:
        """Enter STOPPING (once) and cancel every task except ``winner``."""
        if self.state is not SupervisorState.RUNNING:
            return
        self.winner = winner
        self._set_state(SupervisorState.STOPPING)
        for name, task in self._tasks.items():
            if name != winner and not task.done():
                task.cancel()

    def _on_task_done(self, name: str, task: asyncio.Task) -> None:
        self._completed.append(name)
        if not task.cancelled() and task.exception() is not None:
            logger.debug("Task %s failed: %r", name, task.exception())
        self._begin_stopping(name)

    def _on_watcher_fired(self, reason: str) -> None:
        # Runs inside notify(), before either loop can be scheduled again.
        self._begin_stopping("watcher")

    # ------------------------------------------------------------- cleanup
    def cleanup(self) -> None:
        """Run every cleanup callback; failures are logged and never raised."""
        for callback in list(self.cleanup_callbacks):
            try:
                callback()
            except Exception:
                logger.exception("Cleanup step %r failed (ignored)", callback)

    # ----------------------------------------------------------------- run
    def _outcome(self) -> RunOutcome:
        error: Optional[BaseException] = None
        ordered = self._completed + [n for n in TASK_NAMES if n not in self._completed]
        for name in ordered:
            task = self._tasks[name]
            if task.cancelled():
                continue
            exc = task.exception()
            if exc is not None:
                error = exc
                break
        reason = self.watcher.reason if self.winner == "watcher" else None
        return RunOutcome(winner=self.winner, error=error, reason=reason)

    async def run(self) -> RunOutcome:
        if self.state is not SupervisorState.STARTING:
            raise RuntimeError("Supervisor.run() can only be called once")

        coros = {
            "producer": self.producer.run(),
            "render": self.consumer.run(),
            "watcher": self.watcher.wait(),
        }
        for name in TASK_NAMES:
            task = asyncio.create_task(coros[name], name=f"shtmon-{name}")
            task.add_done_callback(functools.partial(self._on_task_done, name))
            self._tasks[name] = task
        self._set_state(SupervisorState.RUNNING)
        self.watcher.add_listener(self._on_watcher_fired)

        try:
            await asyncio.wait(self._tasks.values(), return_when=asyncio.FIRST_COMPLETED)
        finally:
            # Also reached when run() itself is cancelled.
            winner = self.winner
            if winner is None:
                winner = next((n for n, t in self._tasks.items() if t.done()), None)
            self._begin_stopping(winner)
            self.watcher.remove_listener(self._on_watcher_fired)
            await asyncio.wait(self._tasks.values())
            self.cleanup()
            self._set_state(SupervisorState.STOPPED)

        outcome = self._outcome()
        if outcome.error is not None:
            logger.error(
                "Pipeline stopped by %s: %s",
                outcome.winner,
                outcome.error,
                exc_info=outcome.error,
            )
        else:
            logger.info("Pipeline stopped by %s (%s)", outcome.winner, outcome.reason)
        return outcome


__all__ = ["RunOutcome", "Supervisor", "SupervisorState", "TASK_NAMES"]
