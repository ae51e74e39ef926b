# src/shufflestore/utils/__init__.py
"""Utility subpackage for shufflestore.

Small helpers shared by the mapped deck and the external shuffler: random
generators and the Fisher-Yates walk, the reader/writer lock, logging setup
and timing.
"""

from __future__ import annotations

from .logging import configure_logging
from .random import MAX_UINT32, fisher_yates, make_rng, resolve_rng, time_seed
from .rwlock import ReadWriteLock
from .timing import Stopwatch, time_block

__all__ = [
    "configure_logging",
    "MAX_UINT32",
    "fisher_yates",
    "make_rng",
    "resolve_rng",
    "time_seed",
    "ReadWriteLock",
    "Stopwatch",
    "time_block",
]
