"""Self-terminating, text-safe varint encoding used for permutation identities.

Each character carries one nibble: 4 value bits plus a continuation bit
(0x10), rendered as ``0-9a-v``. Nibbles are emitted least significant first
and a leading ``w`` marks a negative magnitude. An identity is the case name
followed by ``:`` and ``encode(slot) + encode(value)`` for every varying slot.
"""

from __future__ import annotations

from typing import List, Optional, Tuple

from benchrun.defines import DefineRegistry
from benchrun.models import Define

ALPHABET = "0123456789abcdefghijklmnopqrstuv"
NEGATIVE = "w"


def encode(value: int) -> str:
    chars = []
    if value < 0:
        chars.append(NEGATIVE)
        value = -value
    while True:
        nibble = (value & 0xF) | (0x10 if value > 0xF else 0)
        chars.append(ALPHABET[nibble])
        if value <= 0xF:
            break
        value >>= 4
    return "".join(chars)


def decode(text: str) -> Tuple[int, str]:
    """Decode one value from the front of ``text``.

    Returns:
        ``(value, tail)``. When ``text`` does not start with a valid encoding
        the result is ``(0, text)`` so callers can detect the stop by
        comparing the tail.
    """
    negative = text.startswith(NEGATIVE)
    rest = text[1:] if negative else text
    value = 0
    i = 0
    while True:
        if i >= len(rest):
            return 0, text
        nibble = ALPHABET.find(rest[i])
        if nibble < 0:
            return 0, text
        value |= (nibble & 0xF) << (4 * i)
        i += 1
        if not nibble & 0x10:
            break
    return (-value if negative else value), rest[i:]


def format_identity(case_name: str, registry: DefineRegistry) -> str:
    """Render ``case:<slot,value>...`` for the varying slots of ``registry``.

    The registry must hold the currently selected permutation; every varying
    slot is evaluated.
    """
    parts = [case_name, ":"]
    for d in range(registry.count):
        if registry.is_varying(d):
            parts.append(encode(d))
            parts.append(encode(registry.value(d)))
    return "".join(parts)


def parse_identity(fragment: str) -> List[Optional[Define]]:
    """Decode an identity fragment (the part after ``:``) into an explicit layer.

    Decoding stops at the first pair that does not parse; the slots decoded
    so far are kept. The layer is padded with None up to a power of two above
    the highest slot seen.
    """
    layer: List[Optional[Define]] = []
    while fragment:
        slot, tail = decode(fragment)
        if len(tail) == len(fragment):
            break
        value, rest = decode(tail)
        if len(rest) == len(tail):
            break
        fragment = rest
        if slot < 0:
            break
        if slot >= len(layer):
            layer.extend([None] * ((1 << slot.bit_length()) - len(layer)))
        layer[slot] = Define.lit(value)
    return layer
