"""Tests for the nibble-tagged identity encoding."""

from __future__ import annotations

import pytest

from benchrun.defines import DefineRegistry
from benchrun.leb16 import decode, encode, format_identity, parse_identity
from benchrun.models import Define


@pytest.mark.parametrize(
    "value, text",
    [
        (0, "0"),
        (15, "f"),
        (16, "g1"),
        (255, "vf"),
        (256, "gg1"),
        (-1, "w1"),
        (-16, "wg1"),
    ],
)
def test_encode_known_values(value, text):
    assert encode(value) == text


@pytest.mark.parametrize("value", [0, 1, 17, 4096, -4096, 2**40 + 3, -(2**63)])
def test_decode_inverts_encode(value):
    assert decode(encode(value) + "tail") == (value, "tail")


@pytest.mark.parametrize("text", ["", "x", "w", "g", "wg", "-1"])
def test_decode_failure_leaves_text_unchanged(text):
    assert decode(text) == (0, text)


def test_parse_identity_builds_explicit_layer():
    layer = parse_identity(encode(17) + encode(3) + encode(2) + encode(-9))
    assert len(layer) == 32
    assert layer[17].fn(None, 0) == 3
    assert layer[2].fn(None, 0) == -9
    assert [d for d, define in enumerate(layer) if define is not None] == [2, 17]


def test_parse_identity_stops_at_malformed_pair():
    layer = parse_identity(encode(2) + encode(5) + "zz" + encode(3) + encode(1))
    assert len(layer) == 4
    assert layer[2].fn(None, 0) == 5
    assert layer[3] is None


def test_parse_identity_drops_half_pair():
    layer = parse_identity(encode(1) + encode(7) + encode(3))
    assert len(layer) == 2
    assert layer[1].fn(None, 0) == 7


def test_parse_identity_empty():
    assert parse_identity("") == []


def test_format_identity_lists_varying_slots_of_registry(make_suite):
    registry = DefineRegistry()
    registry.set_overrides([("Y", Define.lit(-3)), ("BLOCK_SIZE", Define.lit(512))])
    registry.define_suite(make_suite())
    registry.select_permutation(0)
    assert format_identity("case", registry) == "case:" + "2" + "gg2" + "h1" + "w3"
