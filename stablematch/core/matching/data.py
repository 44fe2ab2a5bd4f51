"""
Matching problem input data.

``MatchingData`` is an immutable snapshot of one problem: set membership,
capacities, property values, weights, requirements and forbidden pairs. It
is validated once at construction and shared read-only by every evaluation.
"""

from dataclasses import dataclass, field, replace
from typing import Iterable, Optional, Sequence

import numpy as np

from stablematch.core.exceptions import ConfigurationError, ZeroWeightSumError
from stablematch.core.matching.requirements import Requirement


def _to_matrix(values: Sequence[Sequence[float]], name: str) -> np.ndarray:
    try:
        matrix = np.array(values, dtype=float)
    except ValueError as e:
        raise ConfigurationError(f"{name} must be a rectangular numeric matrix") from e
    if matrix.ndim != 2:
        raise ConfigurationError(f"{name} must be a rectangular numeric matrix")
    matrix.setflags(write=False)
    return matrix


def _normalize_pairs(pairs: Optional[Iterable[Sequence[int]]]) -> frozenset[tuple[int, int]]:
    normalized = set()
    for pair in pairs or ():
        if len(pair) != 2:
            raise ConfigurationError(f"Excluded pair must hold two indices, got {list(pair)}")
        first, second = int(pair[0]), int(pair[1])
        normalized.add((min(first, second), max(first, second)))
    return frozenset(normalized)


@dataclass(frozen=True, eq=False)
class MatchingData:
    """
    Input snapshot of a matching problem.

    Attributes:
        set_indices: Set of every individual, contiguous from 0
        capacities: Maximum partner count of every individual
        properties: ``size x property_count`` property values
        weights: ``size x property_count`` property weights
        requirements: ``size x property_count`` requirements
        excluded_pairs: Pairs of individuals that may never be matched
    """

    set_indices: tuple[int, ...]
    capacities: tuple[int, ...]
    properties: np.ndarray
    weights: np.ndarray
    requirements: tuple[tuple[Requirement, ...], ...]
    excluded_pairs: frozenset[tuple[int, int]] = field(default_factory=frozenset)

    def __post_init__(self) -> None:
        object.__setattr__(self, "set_indices", tuple(int(s) for s in self.set_indices))
        object.__setattr__(self, "capacities", tuple(int(c) for c in self.capacities))
        object.__setattr__(self, "properties", _to_matrix(self.properties, "Properties"))
        object.__setattr__(self, "weights", _to_matrix(self.weights, "Weights"))
        object.__setattr__(self, "requirements", tuple(tuple(row) for row in self.requirements))
        object.__setattr__(self, "excluded_pairs", _normalize_pairs(self.excluded_pairs))
        self._validate()

    @classmethod
    def create(
        cls,
        set_indices: Sequence[int],
        properties: Sequence[Sequence[float]],
        weights: Sequence[Sequence[float]],
        requirements: Sequence[Sequence[Requirement]],
        capacities: Optional[Sequence[int]] = None,
        excluded_pairs: Optional[Iterable[Sequence[int]]] = None,
    ) -> "MatchingData":
        """Build matching data, defaulting every capacity to 1."""
        if capacities is None:
            capacities = [1] * len(set_indices)
        return cls(
            set_indices=tuple(set_indices),
            capacities=tuple(capacities),
            properties=properties,
            weights=weights,
            requirements=tuple(tuple(row) for row in requirements),
            excluded_pairs=_normalize_pairs(excluded_pairs),
        )

    # ── validation ───────────────────────────────────────────────────

    def _validate(self) -> None:
        size = len(self.set_indices)
        if size < 2:
            raise ConfigurationError("A matching problem needs at least two individuals")

        if sorted(set(self.set_indices)) != list(range(len(set(self.set_indices)))):
            raise ConfigurationError(
                f"Set indices must be contiguous from 0, got {sorted(set(self.set_indices))}"
            )
        if self.set_count < 2:
            raise ConfigurationError("A matching problem needs at least two sets")

        if len(self.capacities) != size:
            raise ConfigurationError(
                f"Expected {size} capacities, got {len(self.capacities)}"
            )
        for index, capacity in enumerate(self.capacities):
            if capacity < 1:
                raise ConfigurationError(f"Capacity of individual {index} must be at least 1")

        property_count = self.properties.shape[1]
        if property_count < 1:
            raise ConfigurationError("At least one property is required")
        for name, matrix in (("Properties", self.properties), ("Weights", self.weights)):
            if matrix.shape != (size, property_count):
                raise ConfigurationError(
                    f"{name} must have shape ({size}, {property_count}), got {matrix.shape}"
                )
        if len(self.requirements) != size or any(
            len(row) != property_count for row in self.requirements
        ):
            raise ConfigurationError(
                f"Requirements must have shape ({size}, {property_count})"
            )

        for first, second in self.excluded_pairs:
            if first < 0 or second >= size:
                raise ConfigurationError(
                    f"Excluded pair ({first}, {second}) is out of range [0-{size - 1}]"
                )
            if first == second:
                raise ConfigurationError(f"Excluded pair ({first}, {second}) pairs an individual with itself")

        for index in range(size):
            if not np.any(self.weights[index]):
                raise ZeroWeightSumError(index)

    # ── accessors ────────────────────────────────────────────────────

    @property
    def size(self) -> int:
        return len(self.set_indices)

    @property
    def property_count(self) -> int:
        return self.properties.shape[1]

    @property
    def set_count(self) -> int:
        return len(set(self.set_indices))

    def get_set_of(self, individual: int) -> int:
        return self.set_indices[individual]

    def get_capacity_of(self, individual: int) -> int:
        return self.capacities[individual]

    def get_set_indices_of(self, set_index: int) -> tuple[int, ...]:
        """Individuals of one set, ascending."""
        return tuple(i for i, s in enumerate(self.set_indices) if s == set_index)

    def size_of_set(self, set_index: int) -> int:
        return sum(1 for s in self.set_indices if s == set_index)

    def is_excluded(self, first: int, second: int) -> bool:
        return (min(first, second), max(first, second)) in self.excluded_pairs

    def with_capacities(self, capacities: Sequence[int]) -> "MatchingData":
        """Copy of the data with other capacities."""
        return replace(self, capacities=tuple(capacities))
