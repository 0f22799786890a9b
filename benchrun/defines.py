"""Layered define resolution and the lazy per-permutation cache.

A slot is looked up through four layers in fixed priority order:

    override  -- ``-D NAME=...`` requests, re-mapped by name for every suite
    explicit  -- layer decoded from an identity when replaying a permutation
    case      -- the current static row of the case being enumerated
    implicit  -- built-in defaults (see ``benchrun.implicit``)

The first layer with a non-None define for the slot owns it; layers are never
merged per slot. Selecting a flat permutation index decomposes it in mixed
radix over the owned slots (slot 0 least significant) and leaves every slot
*pending*. A pending slot is evaluated on first read and memoized, which lets
define callbacks read each other in any order.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, List, Optional, Sequence, Tuple

from benchrun.errors import ConfigurationError
from benchrun.implicit import IMPLICIT_DEFINE_NAMES, IMPLICIT_DEFINES
from benchrun.models import BenchCase, BenchSuite, Define

logger = logging.getLogger("benchrun.defines")

OVERRIDE = 0
EXPLICIT = 1
CASE = 2
IMPLICIT = 3
LAYER_NAMES = ("override", "explicit", "case", "implicit")

NAMES_SUITE = 0
NAMES_IMPLICIT = 1

Layer = Sequence[Optional[Define]]


@dataclass(slots=True)
class _CacheEntry:
    define: Optional[Define]
    index: int
    resolved: bool = False
    value: int = 0


class DefineCache:
    """Per-permutation view of the registry handed to define callbacks.

    Supports ``cache.value(slot)``, ``cache[slot]``, ``cache["NAME"]`` and
    ``cache.NAME``. Entries are rebuilt by every ``select_permutation`` and
    are read-only until the next one.
    """

    def __init__(self, registry: "DefineRegistry") -> None:
        self._registry = registry
        self._entries: List[_CacheEntry] = []

    def select_permutation(self, perm: int) -> None:
        registry = self._registry
        entries: List[_CacheEntry] = []
        for d in range(registry.count):
            define = registry.resolve(d)
            if define is None:
                entries.append(_CacheEntry(define=None, index=0))
                continue
            # can't precompute values here, defines may be mutually recursive
            permutations = define.permutations or 1
            entries.append(_CacheEntry(define=define, index=perm % permutations))
            perm //= permutations
        self._entries = entries

    def value(self, slot: int) -> int:
        entry = self._entries[slot] if 0 <= slot < len(self._entries) else None
        if entry is not None and entry.resolved:
            return entry.value
        if entry is None or entry.define is None:
            name = self._registry.name(slot)
            raise ConfigurationError(
                f"undefined define {name if name else '(unknown)'} ({slot})"
            )
        entry.value = entry.define.fn(self, entry.index)
        entry.resolved = True
        return entry.value

    def selection(self) -> List[Optional[int]]:
        """Sub-index chosen for each slot by the last selection (None if unowned)."""
        return [e.index if e.define is not None else None for e in self._entries]

    def __len__(self) -> int:
        return len(self._entries)

    def __getitem__(self, key: Any) -> int:
        if isinstance(key, str):
            slot = self._registry.slot(key)
            if slot is None:
                raise ConfigurationError(f"undefined define {key}")
            return self.value(slot)
        return self.value(key)

    def __getattr__(self, name: str) -> int:
        if name.startswith("_") or not name.isupper():
            raise AttributeError(name)
        return self[name]


class DefineRegistry:
    """Owner of the four define layers, the name tables and the cache.

    Several registries can coexist; nothing here is process-wide.
    """

    def __init__(
        self,
        implicit: Layer = IMPLICIT_DEFINES,
        implicit_names: Sequence[Optional[str]] = IMPLICIT_DEFINE_NAMES,
    ) -> None:
        self.layers: List[Layer] = [[], [], [], list(implicit)]
        self.names: List[Sequence[Optional[str]]] = [(), tuple(implicit_names)]
        self.overrides: List[Tuple[str, Define]] = []
        self.implicit_count = len(implicit)
        self.count = self.implicit_count
        self.cache = DefineCache(self)

    # --- lookup ---
    def owner(self, slot: int) -> Optional[int]:
        """Index of the layer owning ``slot`` or None."""
        for i, layer in enumerate(self.layers):
            if slot < len(layer) and layer[slot] is not None:
                return i
        return None

    def resolve(self, slot: int) -> Optional[Define]:
        owner = self.owner(slot)
        return None if owner is None else self.layers[owner][slot]

    def name(self, slot: int) -> Optional[str]:
        for names in self.names:
            if slot < len(names) and names[slot]:
                return names[slot]
        return None

    def slot(self, name: str) -> Optional[int]:
        for d in range(self.count):
            if self.name(d) == name:
                return d
        return None

    def is_varying(self, slot: int) -> bool:
        owner = self.owner(slot)
        return owner is not None and owner != IMPLICIT

    def permutation_count(self, slot: int) -> int:
        define = self.resolve(slot)
        if define is None:
            return 0
        return define.permutations or 1

    def total_permutation_count(self) -> int:
        total = 1
        for d in range(self.count):
            permutations = self.permutation_count(d)
            if permutations > 0:
                total *= permutations
        return total

    # --- layer updates ---
    def define_suite(self, suite: BenchSuite) -> None:
        """Install a suite: names, slot count, and overrides re-mapped by name."""
        self.names[NAMES_SUITE] = tuple(suite.define_names)
        self.count = max(suite.define_count, self.implicit_count)
        self.layers[CASE] = []
        self._map_overrides()

    def define_case(self, suite: BenchSuite, case: BenchCase, row: int) -> None:
        if case.defines:
            self.layers[CASE] = list(case.defines[row])
        else:
            self.layers[CASE] = []

    def clear_case(self) -> None:
        self.layers[CASE] = []

    def define_explicit(self, defines: Optional[Layer]) -> None:
        self.layers[EXPLICIT] = list(defines) if defines else []

    def clear_explicit(self) -> None:
        self.layers[EXPLICIT] = []

    def set_overrides(self, overrides: Sequence[Tuple[str, Define]]) -> None:
        self.overrides = list(overrides)
        self._map_overrides()

    def clear_overrides(self) -> None:
        self.set_overrides([])

    def _map_overrides(self) -> None:
        if not self.overrides:
            self.layers[OVERRIDE] = []
            return
        layer: List[Optional[Define]] = [None] * self.count
        for d in range(self.count):
            name = self.name(d)
            if not name:
                continue
            for override_name, define in self.overrides:
                if override_name == name:
                    layer[d] = define
                    break
        unmatched = {n for n, _ in self.overrides} - {self.name(d) for d in range(self.count)}
        if unmatched:
            logger.debug("Overrides with no matching define: %s", ", ".join(sorted(unmatched)))
        self.layers[OVERRIDE] = layer

    # --- evaluation ---
    def select_permutation(self, perm: int) -> None:
        self.cache.select_permutation(perm)

    def value(self, slot: int) -> int:
        return self.cache.value(slot)

    def __getitem__(self, key: Any) -> int:
        return self.cache[key]
