"""Opt-in timing instrumentation, switched on with ``SHTMON_DEBUG=1``."""

from __future__ import annotations

import logging
import os
import time
from contextlib import contextmanager
from typing import Iterator

logger = logging.getLogger(__name__)

_TRUTHY = {"1", "true", "yes", "on"}


def debug_enabled() -> bool:
    return os.getenv("SHTMON_DEBUG", "").lower() in _TRUTHY


@contextmanager
def time_block(label: str) -> Iterator[None]:
    """Log at DEBUG how long the body took, when instrumentation is on.

    The environment is checked on entry so it can be toggled while running.
    """
    enabled = debug_enabled()
    start = time.perf_counter() if enabled else 0.0
    try:
        yield
    finally:
        if enabled:
            logger.debug("%s took %.3f ms", label, (time.perf_counter() - start) * 1000.0)
