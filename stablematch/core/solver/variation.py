"""
Variation operators for proposal-order candidates.

Operators are plain objects handed to a search driver through its
configuration; nothing is registered globally.
"""

from typing import Protocol, Sequence

import numpy as np


class Variation(Protocol):
    """An operator turning parents into offspring."""

    name: str
    arity: int

    def evolve(self, parents: Sequence[np.ndarray], rng: np.random.Generator) -> list[np.ndarray]:
        ...


class PermutationVariation:
    """
    Order-preserving half crossover followed by swap mutation.

    Crossover keeps the left half of the first parent and fills the rest
    with the values of the second parent in their order, skipping values
    already present. Mutation swaps two distinct positions.
    """

    name = "PermutationVariation"
    arity = 2

    def __init__(self, crossover_rate: float = 0.9, mutation_rate: float = 0.1):
        self.crossover_rate = crossover_rate
        self.mutation_rate = mutation_rate

    def evolve(self, parents: Sequence[np.ndarray], rng: np.random.Generator) -> list[np.ndarray]:
        if len(parents) != self.arity:
            raise ValueError(f"{self.name} requires exactly {self.arity} parents")

        first, second = (np.asarray(parent, dtype=int) for parent in parents)
        offspring = [first.copy(), second.copy()]

        if rng.random() <= self.crossover_rate:
            offspring = [self.crossover(first, second), self.crossover(second, first)]

        for child in offspring:
            if rng.random() <= self.mutation_rate:
                self.mutate(child, rng)
        return offspring

    @staticmethod
    def crossover(first: np.ndarray, second: np.ndarray) -> np.ndarray:
        size = len(first)
        crossover_point = size // 2
        child = list(first[:crossover_point])
        used = set(child)

        for value in list(second) + list(first[crossover_point:]):
            if len(child) == size:
                break
            if value not in used:
                used.add(value)
                child.append(value)

        # Parents with repeated values cannot fill every slot from unique values
        child.extend(first[len(child):])
        return np.asarray(child, dtype=int)

    @staticmethod
    def mutate(child: np.ndarray, rng: np.random.Generator) -> None:
        if len(child) < 2:
            return
        first, second = rng.choice(len(child), size=2, replace=False)
        child[first], child[second] = child[second], child[first]
