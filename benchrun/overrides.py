"""Parsers for command line define overrides, step ranges and bench ids.

Override syntax::

    NAME=1,2,0x10,range(4),range(0,32,8),range(16,0,-4)

Integers follow C ``strtoumax`` base detection: ``0x`` hex, a leading ``0``
octal, decimal otherwise (``0o``/``0b`` prefixes are accepted as well).
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional, Tuple

from benchrun.errors import MalformedOverride, MalformedStep
from benchrun.leb16 import parse_identity
from benchrun.models import BenchId, Define

_INT_RE = re.compile(
    r"[+-]?(?:0[xX][0-9a-fA-F]+|0[oO][0-7]+|0[bB][01]+|0[0-7]*|[1-9][0-9]*)"
)


def _skip_spaces(text: str, pos: int) -> int:
    while pos < len(text) and text[pos] == " ":
        pos += 1
    return pos


def _parse_int(text: str, pos: int) -> Tuple[Optional[int], int]:
    """Parse an integer at ``pos``; returns ``(None, pos)`` when there is none."""
    pos = _skip_spaces(text, pos)
    m = _INT_RE.match(text, pos)
    if not m:
        return None, pos
    token = m.group(0)
    digits = token.lstrip("+-")
    if len(digits) > 1 and digits[0] == "0" and digits[1] in "01234567":
        value = int(digits, 8)
        value = -value if token.startswith("-") else value
    else:
        value = int(token, 0)
    return value, m.end()


@dataclass(frozen=True)
class OverrideValue:
    """A single value (``step == 0``) or a ``range(start, stop, step)``."""

    start: int
    stop: int = 0
    step: int = 0

    @property
    def count(self) -> int:
        if not self.step:
            return 1
        if self.step > 0:
            count = (self.stop - 1 - self.start) // self.step + 1
        else:
            count = (self.start - 1 - self.stop) // -self.step + 1
        return max(count, 0)


@dataclass(frozen=True)
class ValueSet:
    """Union of override values, indexable by permutation sub-index."""

    values: Tuple[OverrideValue, ...]

    @property
    def permutations(self) -> int:
        return sum(v.count for v in self.values)

    def __call__(self, defines, i: int) -> int:
        for v in self.values:
            if v.step:
                if i < v.count:
                    return i * v.step + v.start
                i -= v.count
            else:
                if i == 0:
                    return v.start
                i -= 1
        raise IndexError(f"permutation {i} out of range")

    def as_define(self) -> Define:
        return Define(self, self.permutations)


def parse_value_set(text: str) -> ValueSet:
    """Parse the right-hand side of an override."""
    values = []
    pos = 0
    while True:
        pos = _skip_spaces(text, pos)
        if text.startswith("range", pos):
            pos = _skip_spaces(text, pos + len("range"))
            if pos >= len(text) or text[pos] != "(":
                raise MalformedOverride(text)
            start, pos = _parse_int(text, pos + 1)
            stop, step = -1, 1
            # allow empty string for start=0
            if start is None:
                start = 0
            pos = _skip_spaces(text, pos)
            if pos >= len(text) or text[pos] not in ",)":
                raise MalformedOverride(text)
            if text[pos] == ",":
                stop, pos = _parse_int(text, pos + 1)
                # allow empty string for stop=end
                if stop is None:
                    stop = -1
                pos = _skip_spaces(text, pos)
                if pos >= len(text) or text[pos] not in ",)":
                    raise MalformedOverride(text)
                if text[pos] == ",":
                    step, pos = _parse_int(text, pos + 1)
                    if step is None:
                        step = 1
                    pos = _skip_spaces(text, pos)
                    if step == 0:
                        raise MalformedOverride(text)
            else:
                # single value = stop only
                start, stop = 0, start
            if pos >= len(text) or text[pos] != ")":
                raise MalformedOverride(text)
            pos += 1
            values.append(OverrideValue(start, stop, step))
        elif pos < len(text):
            value, pos = _parse_int(text, pos)
            if value is None:
                raise MalformedOverride(text)
            pos = _skip_spaces(text, pos)
            values.append(OverrideValue(value))
        else:
            break

        if pos < len(text) and text[pos] == ",":
            pos += 1
    value_set = ValueSet(tuple(values))
    # an empty range leaves nothing to select
    if not value_set.permutations:
        raise MalformedOverride(text)
    return value_set


def parse_define(text: str) -> Tuple[str, Define]:
    """Parse ``NAME=value-set`` into a named override define.

    Raises:
        MalformedOverride: When ``=`` is missing or the value set is invalid.
    """
    name, sep, rest = text.partition("=")
    name = name.strip()
    if not sep or not name:
        raise MalformedOverride(text)
    return name, parse_value_set(rest).as_define()


@dataclass(frozen=True)
class StepRange:
    """Selection of global steps to run; ``stop`` of None is unbounded."""

    start: int = 0
    stop: Optional[int] = None
    step: int = 1

    def includes(self, n: int) -> bool:
        return (
            n >= self.start
            and (self.stop is None or n < self.stop)
            and (n - self.start) % self.step == 0
        )


def parse_step(text: str) -> StepRange:
    """Parse ``start,stop,step``; a single number means ``stop`` only."""
    parts = [p.strip() for p in text.split(",")]
    if len(parts) > 3:
        raise MalformedStep(text)
    try:
        nums = [_parse_whole(p) for p in parts]
    except ValueError as e:
        raise MalformedStep(text) from e
    if len(nums) == 1:
        return StepRange(0, nums[0], 1)
    start = nums[0] if nums[0] is not None else 0
    stop = nums[1]
    step = nums[2] if len(nums) > 2 and nums[2] is not None else 1
    if step <= 0 or start < 0:
        raise MalformedStep(text)
    return StepRange(start, stop, step)


def _parse_whole(text: str) -> Optional[int]:
    if not text:
        return None
    value, pos = _parse_int(text, 0)
    if value is None or _skip_spaces(text, pos) != len(text):
        raise ValueError(text)
    return value


def parse_bench_id(text: str) -> BenchId:
    """Parse ``[path/]name[.toml][:identity]`` into a BenchId."""
    name, sep, fragment = text.partition(":")
    name = name.rsplit("/", 1)[-1]
    if len(name) > 5 and name.endswith(".toml"):
        name = name[:-5]
    # an empty fragment falls back to ordinary row iteration
    defines = parse_identity(fragment) if sep else None
    return BenchId(name=name, defines=defines or None)
