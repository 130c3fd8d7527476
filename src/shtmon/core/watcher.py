"""One-shot interrupt notification used to stop the pipeline."""

from __future__ import annotations

import asyncio
import logging
import signal
from typing import Any, Callable, Dict, Iterable, Optional

logger = logging.getLogger(__name__)

DEFAULT_SIGNALS = (signal.SIGINT, signal.SIGTERM)


class CancellationWatcher:
    """
    Completes exactly once, after the first :meth:`notify`.

    Anything that wants the monitor to stop (OS signals, a closed plot window,
    a duration timer) calls :meth:`notify` or :meth:`notify_threadsafe`; later
    notifications are ignored.
    """

    def __init__(self) -> None:
        self._event = asyncio.Event()
        self._reason: Optional[str] = None
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._loop_signals: list[int] = []
        self._previous_handlers: Dict[int, Any] = {}
        self._listeners: list[Callable[[str], None]] = []

    @property
    def fired(self) -> bool:
        return self._event.is_set()

    @property
    def reason(self) -> Optional[str]:
        return self._reason

    def notify(self, reason: str = "interrupt") -> None:
        if self._event.is_set():
            return
        self._reason = reason
        logger.info("Stop requested (%s)", reason)
        self._event.set()
        for listener in list(self._listeners):
            listener(reason)

    def add_listener(self, callback: Callable[[str], None]) -> None:
        """Call ``callback(reason)`` synchronously when the watcher fires."""
        if self._event.is_set():
            callback(self._reason or "interrupt")
            return
        self._listeners.append(callback)

    def remove_listener(self, callback: Callable[[str], None]) -> None:
        if callback in self._listeners:
            self._listeners.remove(callback)

    def notify_threadsafe(self, reason: str = "interrupt") -> None:
        """Like :meth:`notify`, for callers outside the event loop thread."""
        loop = self._loop
        if loop is None or loop.is_closed():
            self.notify(reason)
            return
        loop.call_soon_threadsafe(self.notify, reason)

    async def wait(self) -> Optional[str]:
        """Block until notified and return the reason."""
        self._loop = asyncio.get_running_loop()
        await self._event.wait()
        return self._reason

    # ------------------------------------------------------------- signals
    def install_signal_handlers(
        self,
        loop: Optional[asyncio.AbstractEventLoop] = None,
        signals: Iterable[int] = DEFAULT_SIGNALS,
    ) -> None:
        """Route ``signals`` to :meth:`notify`."""
        self._loop = loop or asyncio.get_running_loop()
        for sig in signals:
            name = signal.Signals(sig).name
            try:
                self._loop.add_signal_handler(sig, self.notify, name)
                self._loop_signals.append(sig)
            except (NotImplementedError, RuntimeError):
                # e.g. Windows event loops, or not running in the main thread
                self._previous_handlers[sig] = signal.signal(
                    sig, lambda signum, _frame: self.notify_threadsafe(signal.Signals(signum).name)
                )
        logger.debug(
            "Signal handlers installed (loop=%s, fallback=%s)",
            self._loop_signals,
            list(self._previous_handlers),
        )

    def remove_signal_handlers(self) -> None:
        """Undo :meth:`install_signal_handlers`; safe to call more than once."""
        loop = self._loop
        while self._loop_signals:
            sig = self._loop_signals.pop()
            if loop is not None and not loop.is_closed():
                loop.remove_signal_handler(sig)
        for sig, previous in list(self._previous_handlers.items()):
            signal.signal(sig, previous)
            del self._previous_handlers[sig]


__all__ = ["CancellationWatcher", "DEFAULT_SIGNALS"]
