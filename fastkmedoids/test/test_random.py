import pytest

import numpy as np
from numpy.testing import assert_array_equal

from ..exception import InvalidParameter
from ..util import (RandomSource, check_random_source, auto_nprocs,
                    resolve_n_jobs)


def test_same_seed_same_stream():
    a = RandomSource(42)
    b = RandomSource(42)

    assert [a.next_u64() for _ in range(5)] == \
        [b.next_u64() for _ in range(5)]
    assert [a.integers(17) for _ in range(20)] == \
        [b.integers(17) for _ in range(20)]
    assert a.uniform() == b.uniform()


def test_different_seeds_differ():
    a = RandomSource(1)
    b = RandomSource(2)

    assert [a.next_u64() for _ in range(5)] != \
        [b.next_u64() for _ in range(5)]


def test_draws_in_range():
    rs = RandomSource(0)

    draws = [rs.integers(5) for _ in range(200)]
    assert min(draws) == 0
    assert max(draws) == 4

    for _ in range(100):
        assert 0 <= rs.uniform() < 1

    assert 0 <= rs.next_u64() < 2**64


def test_shuffle_prefix():
    rs = RandomSource(9)
    indices = np.arange(20)

    out = rs.shuffle_prefix(indices, 6)

    assert out is indices
    assert_array_equal(np.sort(indices), np.arange(20))
    assert len(np.unique(indices[:6])) == 6

    again = RandomSource(9).shuffle_prefix(np.arange(20), 6)
    assert_array_equal(again, indices)


def test_shuffle_prefix_view():
    rs = RandomSource(11)
    pool = np.arange(10)

    rs.shuffle_prefix(pool[:5], 3)

    assert_array_equal(np.sort(pool[:5]), np.arange(5))
    assert_array_equal(pool[5:], np.arange(5, 10))


def test_shuffle_prefix_too_many():
    with pytest.raises(InvalidParameter):
        RandomSource(0).shuffle_prefix(np.arange(3), 4)


def test_spawn_is_deterministic():
    a = RandomSource(5).spawn()
    b = RandomSource(5).spawn()

    assert a.seed == b.seed
    assert a.next_u64() == b.next_u64()


def test_invalid_seeds():
    for seed in [None, -1, 1.5, 'abc', True]:
        with pytest.raises(InvalidParameter):
            RandomSource(seed)

    with pytest.raises(InvalidParameter):
        RandomSource(0).integers(0)


def test_check_random_source():
    rs = RandomSource(3)

    assert check_random_source(rs) is rs
    assert check_random_source(3).next_u64() == RandomSource(3).next_u64()

    with pytest.raises(InvalidParameter):
        check_random_source(None)


def test_resolve_n_jobs(monkeypatch):
    monkeypatch.setenv('OMP_NUM_THREADS', '3')

    assert auto_nprocs() == 3
    assert resolve_n_jobs(-1) == 3
    assert resolve_n_jobs(None) == 1
    assert resolve_n_jobs(4) == 4

    for bad in [0, -2, 1.5]:
        with pytest.raises(InvalidParameter):
            resolve_n_jobs(bad)
