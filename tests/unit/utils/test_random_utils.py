from collections import Counter

import numpy as np
import pytest

from shufflestore.utils import random as random_utils
from shufflestore.utils.random import MAX_UINT32, fisher_yates, make_rng, resolve_rng, time_seed


def test_make_rng_respects_seed():
    rng1 = make_rng(5)
    rng2 = make_rng(5)
    assert rng1.random() == rng2.random()


def test_make_rng_without_seed_uses_clock(monkeypatch):
    monkeypatch.setattr(random_utils, "time_seed", lambda: 99)
    assert make_rng().random() == np.random.default_rng(99).random()


def test_time_seed_fits_uint32():
    assert 0 <= time_seed() <= MAX_UINT32


def test_resolve_rng():
    gen = np.random.default_rng(1)
    assert resolve_rng(gen) is gen
    assert isinstance(resolve_rng(seed=3), np.random.Generator)
    with pytest.raises(ValueError):
        resolve_rng(gen, 3)


@pytest.mark.parametrize("container", [list, bytearray, np.array])
def test_fisher_yates_permutes_in_place(container):
    data = container(range(200))
    out = fisher_yates(data, np.random.default_rng(0))
    assert out is data
    assert sorted(int(x) for x in data) == list(range(200))
    assert [int(x) for x in data] != list(range(200))


def test_fisher_yates_stop_leaves_tail():
    data = list(range(50))
    fisher_yates(data, np.random.default_rng(2), stop=20)
    assert sorted(data[:20]) == list(range(20))
    assert data[20:] == list(range(20, 50))


@pytest.mark.parametrize("stop", [-1, 11])
def test_fisher_yates_bad_stop(stop):
    with pytest.raises(ValueError):
        fisher_yates(list(range(10)), np.random.default_rng(0), stop=stop)


def test_fisher_yates_trivial_lengths():
    rng = np.random.default_rng(0)
    assert fisher_yates([], rng) == []
    assert fisher_yates([7], rng) == [7]


def test_fisher_yates_spans_block_boundary(monkeypatch):
    monkeypatch.setattr(random_utils, "_DRAW_BLOCK", 7)
    data = list(range(100))
    fisher_yates(data, np.random.default_rng(11))
    assert sorted(data) == list(range(100))


def test_fisher_yates_is_uniform_over_three():
    # 3! orderings, each should appear ~1/6 of the time
    rng = np.random.default_rng(2024)
    trials = 12_000
    counts = Counter(tuple(fisher_yates([0, 1, 2], rng)) for _ in range(trials))
    assert len(counts) == 6
    for n in counts.values():
        assert abs(n - trials / 6) < 0.1 * trials / 6


def test_fisher_yates_same_seed_same_order():
    a = fisher_yates(list(range(64)), np.random.default_rng(8))
    b = fisher_yates(list(range(64)), np.random.default_rng(8))
    assert a == b
