"""Built-in defines every suite inherits.

These occupy the first ``IMPLICIT_DEFINE_COUNT`` slots. Several defaults are
expressed in terms of other defines (``BLOCK_COUNT`` reads ``DISK_SIZE``,
which sits after it), which is why evaluation is lazy.
"""

from __future__ import annotations

from benchrun.models import Define

READ_SIZE_i = 0
PROG_SIZE_i = 1
BLOCK_SIZE_i = 2
BLOCK_COUNT_i = 3
DISK_SIZE_i = 4
CACHE_SIZE_i = 5
INLINE_SIZE_i = 6
SHRUB_SIZE_i = 7
FRAGMENT_SIZE_i = 8
CRYSTAL_SIZE_i = 9
LOOKAHEAD_SIZE_i = 10
BLOCK_CYCLES_i = 11
ERASE_VALUE_i = 12
ERASE_CYCLES_i = 13
BADBLOCK_BEHAVIOR_i = 14
POWERLOSS_BEHAVIOR_i = 15

IMPLICIT_DEFINE_COUNT = 16

# block device behaviors
BADBLOCK_PROGERROR = 0
BADBLOCK_ERASEERROR = 1
BADBLOCK_READERROR = 2
BADBLOCK_PROGNOOP = 3
BADBLOCK_ERASENOOP = 4
POWERLOSS_NOOP = 0


def cdiv(a: int, b: int) -> int:
    """Integer division truncating toward zero."""
    q = abs(a) // abs(b)
    return q if (a < 0) == (b < 0) else -q


IMPLICIT_DEFINE_NAMES = (
    "READ_SIZE",
    "PROG_SIZE",
    "BLOCK_SIZE",
    "BLOCK_COUNT",
    "DISK_SIZE",
    "CACHE_SIZE",
    "INLINE_SIZE",
    "SHRUB_SIZE",
    "FRAGMENT_SIZE",
    "CRYSTAL_SIZE",
    "LOOKAHEAD_SIZE",
    "BLOCK_CYCLES",
    "ERASE_VALUE",
    "ERASE_CYCLES",
    "BADBLOCK_BEHAVIOR",
    "POWERLOSS_BEHAVIOR",
)

IMPLICIT_DEFINES = (
    Define(lambda d, i: 1),
    Define(lambda d, i: 1),
    Define(lambda d, i: 4096),
    Define(lambda d, i: cdiv(d[DISK_SIZE_i], d[BLOCK_SIZE_i])),
    Define(lambda d, i: 1024 * 1024),
    Define(lambda d, i: max(16, max(d[READ_SIZE_i], d[PROG_SIZE_i]))),
    Define(lambda d, i: cdiv(d[BLOCK_SIZE_i], 8)),
    Define(lambda d, i: d[INLINE_SIZE_i]),
    Define(lambda d, i: d[CACHE_SIZE_i]),
    Define(lambda d, i: cdiv(d[BLOCK_SIZE_i], 8)),
    Define(lambda d, i: 16),
    Define(lambda d, i: -1),
    Define(lambda d, i: 0xFF),
    Define(lambda d, i: 0),
    Define(lambda d, i: BADBLOCK_PROGERROR),
    Define(lambda d, i: POWERLOSS_NOOP),
)
