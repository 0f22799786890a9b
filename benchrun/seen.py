"""Trie of resolved define tuples already produced by one case enumeration.

Overriding defines across several case rows easily yields rows that resolve
to identical defines; the trie lets the enumerator run each distinct tuple
once. Nodes live in a flat arena and each node owns a list of
``(value, child_index)`` edges.
"""

from __future__ import annotations

from typing import Iterable, List, Tuple

from benchrun.defines import DefineRegistry


class SeenTrie:
    def __init__(self) -> None:
        self._edges: List[List[Tuple[int, int]]] = [[]]

    def insert(self, values: Iterable[int]) -> bool:
        """Insert a tuple, returning True only if the full path already existed."""
        node = 0
        was_seen = True
        for value in values:
            for key, child in self._edges[node]:
                if key == value:
                    node = child
                    break
            else:
                was_seen = False
                self._edges.append([])
                child = len(self._edges) - 1
                self._edges[node].append((value, child))
                node = child
        return was_seen

    def __len__(self) -> int:
        """Number of nodes, root included."""
        return len(self._edges)


def permutation_key(registry: DefineRegistry) -> List[int]:
    """Resolved values of the current permutation, non-varying slots as 0."""
    return [
        registry.value(d) if registry.is_varying(d) else 0
        for d in range(registry.count)
    ]
