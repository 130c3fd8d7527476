"""Single-producer/single-consumer hand-off between the two loops."""

from __future__ import annotations

import asyncio
import logging

from .errors import ChannelClosed, PublishError
from .models import SamplePair

logger = logging.getLogger(__name__)

DEFAULT_CHANNEL_SIZE = 1000


class SampleChannel:
    """
    FIFO of :class:`SamplePair` objects.

    ``publish`` never waits: when a bounded channel is full the oldest
    pending pair is dropped so the producer keeps its cadence. ``maxsize=0``
    gives an unbounded channel.
    """

    def __init__(self, maxsize: int = DEFAULT_CHANNEL_SIZE) -> None:
        if maxsize < 0:
            raise ValueError("maxsize must be >= 0")
        self._queue: asyncio.Queue[SamplePair] = asyncio.Queue(maxsize=maxsize)
        self._closed = False
        self.published = 0
        self.dropped = 0

    @property
    def maxsize(self) -> int:
        return self._queue.maxsize

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def pending(self) -> int:
        return self._queue.qsize()

    def close(self) -> None:
        """Mark the channel closed; pairs already queued can still be drained."""
        if not self._closed:
            self._closed = True
            logger.debug("SampleChannel closed with %d pending pairs", self.pending)

    def publish(self, pair: SamplePair) -> None:
        if self._closed:
            raise PublishError("channel closed: consumer has gone away")
        try:
            self._queue.put_nowait(pair)
        except asyncio.QueueFull:
            try:
                self._queue.get_nowait()
            except asyncio.QueueEmpty:
                pass
            self._queue.put_nowait(pair)
            self.dropped += 1
            if self.dropped == 1 or self.dropped % 100 == 0:
                logger.warning(
                    "SampleChannel full (maxsize=%d); dropped oldest pair (count=%d)",
                    self.maxsize,
                    self.dropped,
                )
        self.published += 1

    def drain(self) -> list[SamplePair]:
        """Return every pending pair in publish order without waiting."""
        items: list[SamplePair] = []
        while True:
            try:
                items.append(self._queue.get_nowait())
            except asyncio.QueueEmpty:
                break
        if not items and self._closed:
            raise ChannelClosed("channel closed: producer has gone away")
        return items


__all__ = ["DEFAULT_CHANNEL_SIZE", "SampleChannel"]
