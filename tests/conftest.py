import sys
from pathlib import Path
from typing import Generator

import numpy as np
import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[1]
SRC_PATH = PROJECT_ROOT / "src"
if SRC_PATH.exists():
    sys.path.insert(0, str(SRC_PATH))

from shufflestore.external import write_sequence_file  # noqa: E402
from shufflestore.store import MappedDeck  # noqa: E402


@pytest.fixture
def rng() -> np.random.Generator:
    return np.random.default_rng(1234)


@pytest.fixture
def deck(tmp_path: Path, rng: np.random.Generator) -> Generator[MappedDeck, None, None]:
    """A single-pack deck backed by a file under ``tmp_path``."""
    d = MappedDeck(1, rng=rng, tmp_dir=tmp_path)
    yield d
    d.close()


@pytest.fixture
def sequence_file(tmp_path: Path) -> Path:
    """1 000 lines ``0..999``."""
    return write_sequence_file(tmp_path / "in.txt", 1_000)
