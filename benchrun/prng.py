"""Deterministic helpers for bench bodies.

Determinism matters far more than randomness quality here: a permutation
identity must reproduce the exact same workload when replayed.
"""

from __future__ import annotations

from typing import List, Tuple

_MASK32 = 0xFFFFFFFF


def bench_prng(state: int) -> Tuple[int, int]:
    """Advance a xorshift32 generator.

    A zero state is replaced by ``0xffffffff`` so that seed 0 differs from
    seed 1 and ``SEED=range(n)`` behaves sensibly.

    Returns:
        ``(value, new_state)``; both are the same 32-bit number.
    """
    x = state & _MASK32
    if x == 0:
        x = _MASK32
    x ^= (x << 13) & _MASK32
    x ^= x >> 17
    x ^= (x << 5) & _MASK32
    return x, x


def bench_factorial(x: int) -> int:
    y = 1
    for i in range(2, x + 1):
        y *= i
    return y


def bench_permutation(i: int, size: int) -> List[int]:
    """Return the ``i``-th permutation of ``range(size)``.

    Runs in O(n) by swapping each position with the digit of ``i`` in
    factorial base; the resulting order is not lexicographic.
    """
    buffer = list(range(size))
    for j in range(size):
        k = j + (i % (size - j))
        buffer[j], buffer[k] = buffer[k], buffer[j]
        i //= size - j
    return buffer
