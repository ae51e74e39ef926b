# src/shufflestore/baseline.py
"""Whole-file shuffle: read everything, permute in memory, write it back.

Kept as the reference point for :meth:`MappedDeck.shuffle
<shufflestore.store.MappedDeck.shuffle>`. Both run the same backward
Fisher-Yates walk over the same bytes, so they produce the same distribution;
this one simply pays for a full copy of the file in memory.
"""

from __future__ import annotations

import logging
from pathlib import Path

import numpy as np

from shufflestore.utils.random import fisher_yates, resolve_rng
from shufflestore.utils.timing import time_block

LOGGER = logging.getLogger(__name__)


def shuffle_file(
    path: str | Path,
    *,
    rng: np.random.Generator | None = None,
    seed: int | None = None,
) -> int:
    """Shuffle the bytes of *path* in place and return how many there were."""
    path = Path(path)
    rng = resolve_rng(rng, seed)

    with path.open("r+b") as fh:
        data = bytearray(fh.read())
        with time_block(f"in-memory shuffle of {len(data)} bytes from {path.name}"):
            fisher_yates(data, rng)
        fh.seek(0)
        fh.write(data)
        fh.truncate()

    LOGGER.debug("rewrote %s (%d bytes)", path, len(data))
    return len(data)


__all__ = ["shuffle_file"]
