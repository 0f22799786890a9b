"""Enumeration of every permutation a bench case runs under.

Order is part of the contract: case rows outermost, flat permutation index
innermost, slot 0 least significant within the flat index. Ordinary
enumeration deduplicates identical resolved tuples across rows; replaying an
explicit layer enumerates without deduplication.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, Optional, Sequence

from benchrun.defines import DefineCache, DefineRegistry
from benchrun.leb16 import format_identity
from benchrun.models import BenchCase, BenchSuite, Define
from benchrun.seen import SeenTrie, permutation_key


@dataclass(frozen=True)
class Permutation:
    """One yielded permutation.

    ``defines`` is the registry cache and only reflects this permutation
    until the generator is advanced.
    """

    suite: str
    case: str
    row: int
    index: int
    identity: str
    defines: DefineCache


def case_permutations(
    registry: DefineRegistry,
    suite: BenchSuite,
    case: BenchCase,
    explicit: Optional[Sequence[Optional[Define]]] = None,
) -> Iterator[Permutation]:
    """Yield the distinct permutations of ``case``.

    The suite must already be installed with ``registry.define_suite``.

    Args:
        registry: Registry holding implicit and override layers.
        suite: Suite owning the case.
        case: Case to enumerate.
        explicit: Explicit layer decoded from an identity. When given the
            case rows are ignored and nothing is deduplicated.
    """
    if explicit is not None:
        registry.clear_case()
        registry.define_explicit(explicit)
        try:
            permutations = registry.total_permutation_count()
            for p in range(permutations):
                registry.select_permutation(p)
                yield _permutation(registry, suite, case, 0, p)
        finally:
            registry.clear_explicit()
        return

    seen = SeenTrie()
    for k in range(case.permutations or 1):
        registry.define_case(suite, case, k)
        permutations = registry.total_permutation_count()
        for p in range(permutations):
            registry.select_permutation(p)
            was_seen = seen.insert(permutation_key(registry))
            if was_seen and not (k == 0 and p == 0):
                continue
            yield _permutation(registry, suite, case, k, p)


def _permutation(
    registry: DefineRegistry,
    suite: BenchSuite,
    case: BenchCase,
    row: int,
    index: int,
) -> Permutation:
    return Permutation(
        suite=suite.name,
        case=case.name,
        row=row,
        index=index,
        identity=format_identity(case.name, registry),
        defines=registry.cache,
    )

