"""Core data structures for bench suites and their defines.

This module defines:
    Define       -- evaluator callback plus its permutation count.
    BenchCase    -- one bench body with optional static define rows.
    BenchSuite   -- named group of cases sharing a define name table.
    BenchId      -- parsed command line selector (name and/or explicit layer).
    BenchConfig  -- resolved storage configuration handed to a bench body.
    BenchBdConfig -- block device settings resolved alongside BenchConfig.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntFlag
from typing import Any, Callable, Mapping, Optional, Sequence

DefineFn = Callable[[Any, int], int]


class BenchFlags(IntFlag):
    NONE = 0
    INTERNAL = 0x1


def flags_text(flags: int) -> str:
    """Render flags the way the listing reports show them (``i`` or ``-``)."""
    return ("i" if flags & BenchFlags.INTERNAL else "") + ("-" if not flags else "")


@dataclass(frozen=True)
class Define:
    """A lazily evaluated define.

    Attributes:
        fn: ``fn(defines, i) -> int`` where ``defines`` is the lookup used to
            read other defines and ``i`` the sub-index selected for this
            permutation.
        permutations: Number of distinct sub-indices accepted. 0 is treated
            as 1 once the define is installed in a layer.
    """

    fn: DefineFn
    permutations: int = 1

    @classmethod
    def lit(cls, value: int) -> "Define":
        return cls(lambda defines, i: value, 1)

    @classmethod
    def values(cls, values: Sequence[int]) -> "Define":
        values = tuple(values)
        return cls(lambda defines, i: values[i], len(values))


Row = Sequence[Optional[Define]]


def define_row(names: Sequence[Optional[str]], defines: Mapping[str, Any]) -> list[Optional[Define]]:
    """Build a full per-slot row from ``{name: Define | int | sequence}``.

    Plain integers become literals and sequences become value lists, so bench
    declarations can stay short.

    Raises:
        KeyError: If a name is not present in ``names``.
    """
    row: list[Optional[Define]] = [None] * len(names)
    index = {name: d for d, name in enumerate(names) if name}
    for name, value in defines.items():
        if name not in index:
            raise KeyError(f"unknown define {name}")
        if isinstance(value, Define):
            define = value
        elif isinstance(value, int):
            define = Define.lit(value)
        else:
            define = Define.values(value)
        row[index[name]] = define
    return row


@dataclass(frozen=True)
class BenchCase:
    name: str
    run: Callable[["BenchConfig"], None]
    path: Optional[str] = None
    flags: int = 0
    defines: Optional[Sequence[Row]] = None
    if_: Optional[Callable[[Any], bool]] = None

    @property
    def permutations(self) -> int:
        """Number of static rows (0 when the case declares none)."""
        return len(self.defines) if self.defines else 0


@dataclass(frozen=True)
class BenchSuite:
    name: str
    cases: Sequence[BenchCase]
    define_names: Sequence[Optional[str]] = ()
    path: Optional[str] = None
    flags: int = 0

    @property
    def define_count(self) -> int:
        return len(self.define_names)


@dataclass(frozen=True)
class BenchId:
    """Selector parsed from a positional argument.

    ``name`` of None matches every suite and case; ``defines`` is an explicit
    layer decoded from an identity, or None for ordinary row iteration.
    """

    name: Optional[str] = None
    defines: Optional[Sequence[Optional[Define]]] = None

    def matches(self, suite: BenchSuite, case: BenchCase) -> bool:
        return self.name is None or self.name in (suite.name, case.name)


@dataclass(frozen=True)
class BenchBdConfig:
    disk_path: Optional[str]
    read_sleep: float
    prog_sleep: float
    erase_sleep: float
    erase_value: int
    erase_cycles: int
    badblock_behavior: int
    powerloss_behavior: int


@dataclass
class BenchConfig:
    """Storage configuration resolved from the current permutation.

    Fields mirror the filesystem configuration a bench body mounts with;
    ``defines`` stays readable for bench-specific defines.
    """

    read_size: int
    prog_size: int
    block_size: int
    block_count: int
    block_cycles: int
    cache_size: int
    inline_size: int
    shrub_size: int
    fragment_size: int
    crystal_size: int
    lookahead_size: int
    defines: Any = None
    bd: Any = None
    bdcfg: Optional[BenchBdConfig] = None
    recorder: Any = None
