from __future__ import annotations

import pytest

from benchrun.prng import bench_factorial, bench_permutation, bench_prng


def test_prng_known_sequence():
    value, state = bench_prng(1)
    assert value == state == 270369
    assert bench_prng(state)[0] != value


def test_prng_zero_seed_is_remapped():
    assert bench_prng(0) == bench_prng(0xFFFFFFFF)
    assert bench_prng(0) != bench_prng(1)


def test_prng_stays_32_bit():
    state = 12345
    for _ in range(1000):
        value, state = bench_prng(state)
        assert 0 < value <= 0xFFFFFFFF


@pytest.mark.parametrize("x, expected", [(0, 1), (1, 1), (5, 120), (10, 3628800)])
def test_factorial(x, expected):
    assert bench_factorial(x) == expected


def test_permutation_covers_every_ordering():
    size = 4
    perms = {tuple(bench_permutation(i, size)) for i in range(bench_factorial(size))}
    assert len(perms) == bench_factorial(size)
    assert all(sorted(p) == list(range(size)) for p in perms)
    assert bench_permutation(0, size) == [0, 1, 2, 3]
