"""Mutable matching state produced by one decode."""

from typing import Iterable


class Matches:
    """
    Partner sets of every individual.

    A fresh instance is created for every decoded candidate, so it is never
    shared between concurrent evaluations.
    """

    def __init__(self, size: int):
        self.size = size
        self._matches: list[set[int]] = [set() for _ in range(size)]

    def __len__(self) -> int:
        return self.size

    def __repr__(self) -> str:
        return f"Matches(size={self.size}, matches={self.to_list()}, left_overs={self.get_left_overs()})"

    def get_set_of(self, node: int) -> tuple[int, ...]:
        """Partners of ``node`` in ascending order."""
        return tuple(sorted(self._matches[node]))

    def count(self, node: int) -> int:
        return len(self._matches[node])

    def is_matched(self, node: int, other: int | None = None) -> bool:
        """
        With one argument, whether ``node`` has any partner; with two,
        whether the nodes are matched in either direction.
        """
        if other is None:
            return bool(self._matches[node])
        return other in self._matches[node] or node in self._matches[other]

    def is_full(self, node: int, capacity: int) -> bool:
        return len(self._matches[node]) >= capacity

    def add_match(self, node: int, node_to_add: int) -> None:
        self._matches[node].add(node_to_add)

    def add_match_bi(self, first: int, second: int) -> None:
        self._matches[first].add(second)
        self._matches[second].add(first)

    def remove_match_bi(self, first: int, second: int) -> None:
        self._matches[first].discard(second)
        self._matches[second].discard(first)

    def add_match_for_group(self, nodes: Iterable[int]) -> None:
        """Connect every node of the group to every other one."""
        nodes = list(nodes)
        for node in nodes:
            for other in nodes:
                if node != other:
                    self.add_match(node, other)

    def get_matches_and_target(self, target: int) -> set[int]:
        """``target`` together with everyone bonded to it."""
        return {target, *self._matches[target]}

    def dis_match(self, target: int, nodes_to_remove: Iterable[int]) -> None:
        self._matches[target].difference_update(nodes_to_remove)

    def get_left_overs(self) -> list[int]:
        """Individuals without any partner, ascending."""
        return [node for node in range(self.size) if not self._matches[node]]

    def to_list(self) -> list[list[int]]:
        return [sorted(partners) for partners in self._matches]
