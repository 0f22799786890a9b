from __future__ import annotations

from benchrun.defines import DefineRegistry
from benchrun.models import define_row
from benchrun.seen import SeenTrie, permutation_key
from conftest import SUITE_NAMES


def test_insert_reports_existing_paths():
    trie = SeenTrie()
    assert trie.insert([1, 2]) is False
    assert trie.insert([1, 2]) is True
    assert trie.insert([1, 3]) is False
    assert trie.insert([2, 3]) is False
    assert trie.insert([1, 3]) is True
    # root + 1 + (2, 3) + 2 + 3
    assert len(trie) == 6


def test_empty_tuple_is_always_present():
    assert SeenTrie().insert([]) is True


def test_key_uses_placeholder_for_non_varying_slots(make_suite):
    suite = make_suite(rows=[define_row(SUITE_NAMES, {"Y": 7})])
    registry = DefineRegistry()
    registry.define_suite(suite)
    registry.define_case(suite, suite.cases[0], 0)
    registry.select_permutation(0)
    key = permutation_key(registry)
    assert len(key) == len(SUITE_NAMES)
    assert key[registry.slot("Y")] == 7
    assert sum(key) == 7
