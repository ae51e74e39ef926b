"""Wall-clock timing of shuffle passes."""

from __future__ import annotations

import logging
import time
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Callable, Iterator

LOGGER = logging.getLogger(__name__)


@dataclass
class Stopwatch:
    """Start time of a timed block and, once it exits, its duration."""

    start: float
    elapsed: float | None = None


@contextmanager
def time_block(description: str, log: Callable[[str], None] | None = None) -> Iterator[Stopwatch]:
    """Time the enclosed block and report ``"<description>: <seconds> s"``.

    The report goes to *log* (``LOGGER.debug`` by default) only when the block
    finishes normally; the yielded :class:`Stopwatch` carries the duration.
    """
    watch = Stopwatch(time.perf_counter())
    yield watch
    watch.elapsed = time.perf_counter() - watch.start
    (log or LOGGER.debug)(f"{description}: {watch.elapsed:.6f} s")


__all__ = ["Stopwatch", "time_block"]
