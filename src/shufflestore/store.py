# src/shufflestore/store.py
"""Memory-mapped deck of single-byte card records.

The deck lives in an ephemeral file mapped read/write as a NumPy ``uint8``
memmap of ``iterations * 52`` bytes. Indices ``0..top`` are "in the deck";
``draw`` reads from ``top`` and moves the cursor down without touching the
byte, ``give_back`` moves it up and overwrites. ``shuffle`` permutes
``0..top`` in place through the mapping, so no copy of the deck is ever held
in memory.

All state is guarded by one :class:`~shufflestore.utils.rwlock.ReadWriteLock`:
queries take it shared, mutations exclusive.
"""

from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path

import numpy as np

from shufflestore.cards import DECK_SIZE, Card, decode, encode, standard_sequence
from shufflestore.config import StoreConfig
from shufflestore.errors import (
    EmptyStoreError,
    InvalidRecordError,
    StoreClosedError,
    StoreConstructionError,
    StoreError,
    StoreOverflowError,
    StoreTeardownError,
)
from shufflestore.utils.random import fisher_yates, resolve_rng
from shufflestore.utils.rwlock import ReadWriteLock
from shufflestore.utils.timing import time_block

LOGGER = logging.getLogger(__name__)

# one ordered deck as raw bytes; the region is this pattern tiled
_BASE_DECK = np.fromiter((card.value for card in standard_sequence()), dtype=np.uint8, count=DECK_SIZE)


def _create_region(path: Path, iterations: int) -> np.memmap:
    """Size *path*, map it read/write and fill it with ordered decks."""
    cards = np.memmap(path, dtype=np.uint8, mode="w+", shape=(iterations * DECK_SIZE,))
    cards[:] = np.tile(_BASE_DECK, iterations)
    cards.flush()
    return cards


class MappedDeck:
    """A deck of ``iterations`` ordered 52-card packs backed by a mapped file.

    Parameters
    ----------
    iterations:
        Number of concatenated 52-card packs; ``0`` gives an empty deck that
        can never accept cards.
    rng, seed:
        Generator used by :meth:`shuffle`. At most one may be given; with
        neither, the deck builds its own generator from a time-derived seed.
    tmp_dir:
        Directory for the backing file (system default when ``None``).
    """

    def __init__(
        self,
        iterations: int,
        *,
        rng: np.random.Generator | None = None,
        seed: int | None = None,
        tmp_dir: str | Path | None = None,
    ) -> None:
        if iterations < 0:
            raise ValueError(f"iterations must be >= 0, got {iterations}")

        self._lock = ReadWriteLock()
        self._rng = resolve_rng(rng, seed)
        self._iterations = int(iterations)
        self._capacity = self._iterations * DECK_SIZE
        self._cards: np.memmap | None = None
        self._closed = False

        try:
            fd, name = tempfile.mkstemp(prefix="deck-", dir=tmp_dir)
            os.close(fd)
        except OSError as exc:
            raise StoreConstructionError(f"create deck file in {tmp_dir or tempfile.gettempdir()} failed") from exc
        self._path = Path(name)

        try:
            # an empty file cannot be mapped; a zero-capacity deck keeps no region
            if self._capacity:
                self._cards = _create_region(self._path, self._iterations)
        except (OSError, ValueError) as exc:
            self._path.unlink(missing_ok=True)
            raise StoreConstructionError(f"initialise deck file {self._path} failed: {exc}") from exc

        self._top = self._capacity - 1
        LOGGER.info(
            "Deck opened",
            extra={"path": str(self._path), "iterations": self._iterations, "capacity": self._capacity},
        )

    @classmethod
    def from_config(cls, cfg: StoreConfig, *, rng: np.random.Generator | None = None) -> "MappedDeck":
        seed = None if rng is not None else cfg.seed
        return cls(cfg.iterations, rng=rng, seed=seed, tmp_dir=cfg.tmp_dir)

    # ------------------------------------------------------------------
    # properties
    # ------------------------------------------------------------------
    @property
    def path(self) -> Path:
        return self._path

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def iterations(self) -> int:
        return self._iterations

    @property
    def closed(self) -> bool:
        return self._closed

    # ------------------------------------------------------------------
    # queries (shared lock)
    # ------------------------------------------------------------------
    def size(self) -> int:
        """Number of cards currently in the deck."""
        with self._lock.read_locked():
            self._require_open()
            return self._top + 1

    def __len__(self) -> int:
        return self.size()

    def snapshot(self) -> np.ndarray:
        """Return a copy of the in-deck bytes, bottom card first."""
        with self._lock.read_locked():
            self._require_open()
            if self._cards is None:
                return np.empty(0, dtype=np.uint8)
            return np.array(self._cards[: self._top + 1])

    def cards(self) -> list[Card]:
        """Decode the in-deck records, bottom card first."""
        return [decode(value) for value in self.snapshot().tolist()]

    # ------------------------------------------------------------------
    # mutations (exclusive lock)
    # ------------------------------------------------------------------
    def draw(self) -> Card:
        """Take the top card. Raises :class:`EmptyStoreError` when empty."""
        with self._lock.write_locked():
            self._require_open()
            if self._top < 0:
                raise EmptyStoreError()
            assert self._cards is not None
            card = decode(self._cards[self._top])
            self._top -= 1
        LOGGER.debug("draw %s", card)
        return card

    def give_back(self, card: Card) -> None:
        """Put *card* on top of the deck."""
        with self._lock.write_locked():
            self._require_open()
            if not isinstance(card, Card):
                raise InvalidRecordError(f"cannot return {card!r} to the deck")
            try:
                value = encode(card.rank, card.suit)
            except ValueError as exc:
                raise InvalidRecordError(f"{card!r} is not a card of the deck: {exc}") from exc
            if self._top + 1 >= self._capacity:
                raise StoreOverflowError(f"deck is full ({self._capacity} cards)")
            assert self._cards is not None
            self._top += 1
            self._cards[self._top] = value
        LOGGER.debug("give_back %s", card)

    def shuffle(self) -> None:
        """Permute the in-deck cards in place (backward Fisher-Yates)."""
        with self._lock.write_locked():
            self._require_open()
            n = self._top + 1
            if n < 2:
                return
            assert self._cards is not None
            with time_block(f"shuffle {n} cards in {self._path.name}"):
                fisher_yates(self._cards, self._rng, stop=n)
            self._flush()

    # ------------------------------------------------------------------
    # lifecycle
    # ------------------------------------------------------------------
    def close(self) -> None:
        """Flush, unmap and delete the backing file. Repeated calls are no-ops.

        The deck is marked closed before any step runs, so a failure leaves it
        unusable rather than half-open; the first failure is re-raised as
        :class:`StoreTeardownError`.
        """
        with self._lock.write_locked():
            if self._closed:
                return
            self._closed = True
            cards, self._cards = self._cards, None
            failures: list[BaseException] = []
            if cards is not None:
                try:
                    cards.flush()
                except (OSError, ValueError) as exc:
                    failures.append(exc)
                # dropping the last reference unmaps the region
                del cards
            try:
                self._path.unlink(missing_ok=True)
            except OSError as exc:
                failures.append(exc)

        if failures:
            raise StoreTeardownError(f"closing deck file {self._path} failed: {failures[0]}") from failures[0]
        LOGGER.info("Deck closed", extra={"path": str(self._path)})

    def __enter__(self) -> "MappedDeck":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def __repr__(self) -> str:
        state = "closed" if self._closed else f"size={self._top + 1}"
        return f"MappedDeck({state}, capacity={self._capacity}, path={str(self._path)!r})"

    # ------------------------------------------------------------------
    # internals
    # ------------------------------------------------------------------
    def _require_open(self) -> None:
        if self._closed:
            raise StoreClosedError()

    def _flush(self) -> None:
        assert self._cards is not None
        try:
            self._cards.flush()
        except OSError as exc:
            raise StoreError(f"flush of deck file {self._path} failed") from exc


__all__ = ["MappedDeck"]
