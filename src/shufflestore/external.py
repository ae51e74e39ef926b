# src/shufflestore/external.py
"""Two-pass out-of-core shuffle of newline-delimited records.

Distribution pass
    Stream the input once and append every line to one of ``n_piles``
    temporary files chosen uniformly at random. Only one line is resident at a
    time.

Consolidation pass
    For each pile in creation order, load it, Fisher-Yates it in memory and
    append it to the output. Peak memory is one pile, roughly
    ``input_size / n_piles``.

The result is *not* a uniform permutation of the whole input: every line of
pile 0 precedes every line of pile 1 in the output, and so on. Lines are
randomised across piles by assignment and within piles by the shuffle, but
the pile boundaries themselves are fixed.
"""

from __future__ import annotations

import contextlib
import logging
import os
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import BinaryIO, Iterator

import numpy as np

from shufflestore.config import ShufflerConfig
from shufflestore.errors import ShuffleIOError, ShuffleStateError
from shufflestore.utils.random import fisher_yates, resolve_rng
from shufflestore.utils.timing import time_block

LOGGER = logging.getLogger(__name__)

DEFAULT_PILES = 6
DEFAULT_BUFFER_SIZE = 1_048_576
_CHOICE_BLOCK = 8_192


@dataclass
class Pile:
    """One temporary partition: its path, open handle and line count."""

    path: Path
    handle: BinaryIO = field(repr=False)
    count: int = 0

    def close(self) -> None:
        if not self.handle.closed:
            self.handle.close()


def write_sequence_file(path: str | Path, n_lines: int, *, start: int = 0) -> Path:
    """Write the integers ``start .. start+n_lines-1`` to *path*, one per line."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8", newline="\n") as fh:
        for i in range(start, start + n_lines):
            fh.write(f"{i}\n")
    return path


class ExternalShuffler:
    """Shuffle *in_path* into *out_path* using temporary on-disk piles.

    The input is opened for reading and the output created/truncated at
    construction. Call :meth:`distribute` then :meth:`consolidate` (or
    :meth:`run`), and always :meth:`close`, which also deletes the piles. The
    shuffler is a context manager.
    """

    def __init__(
        self,
        in_path: str | Path,
        out_path: str | Path,
        *,
        n_piles: int = DEFAULT_PILES,
        tmp_dir: str | Path | None = None,
        buffer_size: int = DEFAULT_BUFFER_SIZE,
        rng: np.random.Generator | None = None,
        seed: int | None = None,
    ) -> None:
        if n_piles < 1:
            raise ValueError(f"n_piles must be >= 1, got {n_piles}")
        if buffer_size < 1:
            raise ValueError(f"buffer_size must be >= 1, got {buffer_size}")

        self.in_path = Path(in_path)
        self.out_path = Path(out_path)
        self.n_piles = n_piles
        self.tmp_dir = None if tmp_dir is None else Path(tmp_dir)
        self.buffer_size = buffer_size
        self._rng = resolve_rng(rng, seed)
        self._piles: list[Pile] = []
        self._distributed = False
        self._consolidated = False
        self._closed = False

        try:
            self._in: BinaryIO = self.in_path.open("rb", buffering=buffer_size)
        except OSError as exc:
            raise ShuffleIOError("open input", self.in_path, exc) from exc
        try:
            self._out: BinaryIO = self.out_path.open("wb", buffering=buffer_size)
        except OSError as exc:
            self._in.close()
            raise ShuffleIOError("create output", self.out_path, exc) from exc

    @classmethod
    def from_config(
        cls,
        in_path: str | Path,
        out_path: str | Path,
        cfg: ShufflerConfig,
        *,
        rng: np.random.Generator | None = None,
    ) -> "ExternalShuffler":
        return cls(
            in_path,
            out_path,
            n_piles=cfg.n_piles,
            tmp_dir=cfg.tmp_dir,
            buffer_size=cfg.buffer_size,
            rng=rng,
            seed=None if rng is not None else cfg.seed,
        )

    # ------------------------------------------------------------------
    @property
    def pile_paths(self) -> list[Path]:
        return [pile.path for pile in self._piles]

    @property
    def pile_counts(self) -> list[int]:
        return [pile.count for pile in self._piles]

    @property
    def closed(self) -> bool:
        return self._closed

    # ------------------------------------------------------------------
    # pass 1
    # ------------------------------------------------------------------
    def _open_piles(self) -> None:
        for _ in range(self.n_piles):
            try:
                fd, name = tempfile.mkstemp(prefix="pile-", dir=self.tmp_dir)
            except OSError as exc:
                raise ShuffleIOError("create pile", self.tmp_dir or tempfile.gettempdir(), exc) from exc
            try:
                handle = os.fdopen(fd, "w+b", buffering=self.buffer_size)
            except (OSError, ValueError) as exc:
                # fdopen may already have released the descriptor
                with contextlib.suppress(OSError):
                    os.close(fd)
                Path(name).unlink(missing_ok=True)
                raise ShuffleIOError("open pile", name, exc) from exc
            self._piles.append(Pile(Path(name), handle))

    def _pile_choices(self) -> Iterator[int]:
        # uniform pile indices, drawn a block at a time
        while True:
            yield from self._rng.integers(self.n_piles, size=_CHOICE_BLOCK).tolist()

    def distribute(self) -> list[int]:
        """Scatter input lines over fresh piles; return the per-pile counts."""
        self._require_open()
        if self._distributed:
            raise ShuffleStateError("distribute already ran for this shuffler")
        self._distributed = True

        self._open_piles()
        piles = self._piles
        choices = self._pile_choices()
        with time_block(f"distribute {self.in_path} over {len(piles)} piles", LOGGER.info):
            try:
                for line in self._in:
                    if not line.endswith(b"\n"):
                        line += b"\n"
                    pile = piles[next(choices)]
                    try:
                        pile.handle.write(line)
                    except OSError as exc:
                        raise ShuffleIOError("write pile", pile.path, exc) from exc
                    pile.count += 1
            except OSError as exc:
                raise ShuffleIOError("read input", self.in_path, exc) from exc

            for pile in piles:
                try:
                    pile.handle.flush()
                    pile.handle.seek(0)
                except OSError as exc:
                    raise ShuffleIOError("flush pile", pile.path, exc) from exc

        counts = self.pile_counts
        LOGGER.info(
            "Distribution pass complete",
            extra={"stage": "distribute", "lines": sum(counts), "piles": len(counts)},
        )
        return counts

    # ------------------------------------------------------------------
    # pass 2
    # ------------------------------------------------------------------
    def consolidate(self) -> int:
        """Shuffle each pile in memory and append it to the output."""
        self._require_open()
        if not self._distributed:
            raise ShuffleStateError("consolidate called before distribute")
        if self._consolidated:
            raise ShuffleStateError("consolidate already ran for this shuffler")
        self._consolidated = True

        written = 0
        with time_block(f"consolidate {len(self._piles)} piles into {self.out_path}", LOGGER.info):
            for pile in self._piles:
                try:
                    lines = pile.handle.readlines()
                except OSError as exc:
                    raise ShuffleIOError("read pile", pile.path, exc) from exc
                fisher_yates(lines, self._rng)
                try:
                    self._out.writelines(lines)
                except OSError as exc:
                    raise ShuffleIOError("write output", self.out_path, exc) from exc
                written += len(lines)
                LOGGER.debug("pile %s: %d lines emitted", pile.path.name, len(lines))
            try:
                self._out.flush()
            except OSError as exc:
                raise ShuffleIOError("flush output", self.out_path, exc) from exc

        LOGGER.info("Consolidation pass complete", extra={"stage": "consolidate", "lines": written})
        return written

    def run(self) -> int:
        """Run both passes; return the number of lines written."""
        self.distribute()
        return self.consolidate()

    # ------------------------------------------------------------------
    # teardown
    # ------------------------------------------------------------------
    def close(self) -> list[tuple[Path, OSError]]:
        """Close every stream and delete every pile, best effort.

        Returns the ``(path, error)`` pairs for piles that could not be
        removed; an empty list means cleanup was complete. Errors closing the
        input or output streams are raised after all piles were handled.
        """
        if self._closed:
            return []
        self._closed = True

        stream_error: ShuffleIOError | None = None
        for label, path, handle in (("close input", self.in_path, self._in), ("close output", self.out_path, self._out)):
            try:
                handle.close()
            except OSError as exc:
                if stream_error is None:
                    stream_error = ShuffleIOError(label, path, exc)
                    stream_error.__cause__ = exc

        failures: list[tuple[Path, OSError]] = []
        for pile in self._piles:
            try:
                pile.close()
            except OSError as exc:
                LOGGER.warning("could not close pile %s: %s", pile.path, exc)
                failures.append((pile.path, exc))
            try:
                pile.path.unlink()
            except OSError as exc:
                LOGGER.warning("could not remove pile %s: %s", pile.path, exc)
                failures.append((pile.path, exc))

        if stream_error is not None:
            raise stream_error
        return failures

    def __enter__(self) -> "ExternalShuffler":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def _require_open(self) -> None:
        if self._closed:
            raise ShuffleStateError("shuffler is closed")


__all__ = ["DEFAULT_PILES", "DEFAULT_BUFFER_SIZE", "Pile", "ExternalShuffler", "write_sequence_file"]
