# src/shufflestore/utils/random.py
"""Random number generator helpers."""

from __future__ import annotations

import time
from typing import MutableSequence, TypeVar

import numpy as np

# Max unsigned 32-bit integer for random seed generation.
MAX_UINT32 = 2**32 - 1

# Swap indices are drawn in blocks so long shuffles avoid one Generator call
# per element without materialising the whole index vector.
_DRAW_BLOCK = 65_536

SeqT = TypeVar("SeqT", bound=MutableSequence)


def time_seed() -> int:
    """Return a seed derived from the wall clock (nanoseconds, folded to 32 bits)."""

    return time.time_ns() & MAX_UINT32


def make_rng(seed: int | None = None) -> np.random.Generator:
    """Return a :class:`numpy.random.Generator` seeded with *seed*.

    ``None`` seeds from :func:`time_seed`, so every owner gets its own
    generator instance rather than sharing module-level state.
    """

    if seed is None:
        seed = time_seed()
    return np.random.default_rng(seed)


def resolve_rng(rng: np.random.Generator | None = None, seed: int | None = None) -> np.random.Generator:
    """Use *rng* when given, otherwise build one from *seed*."""

    if rng is not None and seed is not None:
        raise ValueError("pass either rng or seed, not both")
    return rng if rng is not None else make_rng(seed)


def fisher_yates(seq: SeqT, rng: np.random.Generator, *, stop: int | None = None) -> SeqT:
    """Shuffle ``seq[:stop]`` in place with the backward Fisher-Yates walk.

    Positions are visited from ``stop - 1`` down to ``1``; position ``i`` is
    swapped with ``j`` drawn uniformly from ``[0, i]``. Works for NumPy
    arrays (including memmaps), lists and bytearrays. Returns *seq*.
    """

    n = len(seq) if stop is None else stop
    if n < 0 or n > len(seq):
        raise ValueError(f"stop must lie in [0, {len(seq)}], got {n}")

    i = n - 1
    while i > 0:
        block = min(_DRAW_BLOCK, i)
        # highs i+1, i, ..., i-block+2 -> j_k uniform in [0, i-k]
        highs = np.arange(i + 1, i + 1 - block, -1)
        draws = rng.integers(0, highs)
        for j in draws:
            j = int(j)
            if j != i:
                seq[i], seq[j] = seq[j], seq[i]
            i -= 1
    return seq


__all__ = ["MAX_UINT32", "time_seed", "make_rng", "resolve_rng", "fisher_yates"]
