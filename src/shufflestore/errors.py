# src/shufflestore/errors.py
"""Exception types raised by the store and the external shuffler."""

from __future__ import annotations

from pathlib import Path


class StoreError(RuntimeError):
    """Base class for :class:`~shufflestore.store.MappedDeck` failures."""


class StoreConstructionError(StoreError):
    """The backing file could not be created, sized, mapped or filled."""


class EmptyStoreError(StoreError, LookupError):
    """``draw`` was called with no cards left."""

    def __init__(self, message: str = "draw called on an empty deck") -> None:
        super().__init__(message)


class InvalidRecordError(StoreError, ValueError):
    """A value handed back to the store is not a :class:`~shufflestore.cards.Card`."""


class StoreOverflowError(StoreError, OverflowError):
    """Giving a card back would write past the mapped region."""


class StoreTeardownError(StoreError):
    """Flushing, unmapping or deleting the backing file failed during close."""


class StoreClosedError(StoreError, ValueError):
    """Operation attempted on a store that has already been closed."""

    def __init__(self, message: str = "operation on a closed deck") -> None:
        super().__init__(message)


class ShuffleError(RuntimeError):
    """Base class for :class:`~shufflestore.external.ExternalShuffler` failures."""


class ShuffleStateError(ShuffleError):
    """A pass was run out of order, twice, or after close."""


class ShuffleIOError(ShuffleError):
    """Reading, writing or seeking a stream failed.

    ``operation`` names what was being attempted and ``path`` the file it was
    attempted on; the underlying :class:`OSError` is chained as ``__cause__``.
    """

    def __init__(self, operation: str, path: str | Path, detail: object = None) -> None:
        self.operation = operation
        self.path = Path(path)
        message = f"{operation} failed for {self.path}"
        if detail is not None:
            message = f"{message}: {detail}"
        super().__init__(message)


__all__ = [
    "StoreError",
    "StoreConstructionError",
    "EmptyStoreError",
    "InvalidRecordError",
    "StoreOverflowError",
    "StoreTeardownError",
    "StoreClosedError",
    "ShuffleError",
    "ShuffleStateError",
    "ShuffleIOError",
]
