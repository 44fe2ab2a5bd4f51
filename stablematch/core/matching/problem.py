"""
Matching problem.

``MatchingProblem`` is the black-box contract a search driver works
against: integer decision variables, one objective to minimise and no
constraints. Evaluating a candidate decodes it into a matching, collects
the satisfaction of every individual and aggregates them into a fitness.
"""

from dataclasses import dataclass
from typing import Optional, Sequence

import numpy as np

from stablematch.core.exceptions import (
    ConfigurationError,
    ExpressionError,
    InvalidCandidateError,
)
from stablematch.core.expressions import FitnessEvaluator, is_default_function
from stablematch.core.matching.algorithms import deferred_acceptance, triplet_matching
from stablematch.core.matching.data import MatchingData
from stablematch.core.matching.matches import Matches
from stablematch.core.matching.preferences import PreferenceListWrapper
from stablematch.utils.constants import MatchingProblemType
from stablematch.utils.logger import LoggerMixin


@dataclass
class MatchingEvaluation:
    """Everything produced while evaluating one candidate."""

    matches: Matches
    satisfactions: np.ndarray
    fitness: float

    @property
    def objectives(self) -> list[float]:
        return [-self.fitness]


class MatchingProblem(LoggerMixin):
    """
    A configured stable matching problem.

    The problem holds only read-only state after construction, so
    candidates may be evaluated concurrently.
    """

    number_of_objectives = 1
    number_of_constraints = 0

    def __init__(
        self,
        data: MatchingData,
        preferences: PreferenceListWrapper,
        matching_type: MatchingProblemType,
        fitness_function: Optional[str] = None,
        name: str = "",
        fitness_evaluator: Optional[FitnessEvaluator] = None,
    ):
        """
        Initialize the problem.

        Args:
            data: Problem input data
            preferences: Preference lists of every individual
            matching_type: Cardinality of the matching
            fitness_function: Custom fitness expression, blank for the sum
            name: Display name
            fitness_evaluator: Evaluator to use instead of the default one

        Raises:
            ConfigurationError: If the data does not fit the matching type
                or the fitness function is invalid
        """
        self.matching_type = MatchingProblemType(matching_type)
        self.name = name
        self.data = self._prepare_data(data, self.matching_type)
        self.preferences = preferences
        if len(preferences) != self.data.size:
            raise ConfigurationError(
                f"Expected {self.data.size} preference lists, got {len(preferences)}"
            )

        self.fitness_evaluator = fitness_evaluator or FitnessEvaluator(
            self.data.set_indices, self.data.set_count
        )
        self.fitness_function = (
            None if is_default_function(fitness_function) else fitness_function.strip()
        )
        self._check_fitness_function()

        self.logger.info(
            f"Created {self.matching_type.display_name} problem '{self.name}' "
            f"with {self.data.size} individuals"
        )

    @staticmethod
    def _prepare_data(data: MatchingData, matching_type: MatchingProblemType) -> MatchingData:
        if data.set_count != matching_type.set_count:
            raise ConfigurationError(
                f"{matching_type.display_name} needs {matching_type.set_count} sets, "
                f"got {data.set_count}"
            )

        if matching_type in (MatchingProblemType.OTO, MatchingProblemType.TRIPLET):
            return data.with_capacities([1] * data.size)

        if matching_type is MatchingProblemType.OTM:
            many_sets = {
                data.get_set_of(i) for i in range(data.size) if data.get_capacity_of(i) > 1
            }
            if len(many_sets) > 1:
                raise ConfigurationError(
                    "One-to-many matching allows capacities above 1 in one set only"
                )
        return data

    def _check_fitness_function(self) -> None:
        if self.fitness_function is None:
            return
        try:
            self.fitness_evaluator.validate(self.fitness_function)
        except ExpressionError as e:
            raise ConfigurationError(
                f"Invalid fitness function '{self.fitness_function}': {e}"
            ) from e

    # ── optimizer contract ───────────────────────────────────────────

    @property
    def number_of_variables(self) -> int:
        return self.data.size

    @property
    def bounds(self) -> list[tuple[int, int]]:
        return [(0, self.data.size - 1)] * self.data.size

    def new_candidate(self, rng: Optional[np.random.Generator] = None) -> np.ndarray:
        """A random proposal order."""
        rng = rng if rng is not None else np.random.default_rng()
        return rng.permutation(self.data.size)

    def validate_candidate(self, candidate: Sequence[int]) -> list[int]:
        """
        Convert a candidate vector into a list of individual indices.

        Raises:
            InvalidCandidateError: On wrong length, non-integer values or
                values outside the bounds
        """
        vector = np.asarray(candidate)
        if vector.ndim != 1 or len(vector) != self.data.size:
            raise InvalidCandidateError(
                f"Candidate must hold {self.data.size} values, got shape {vector.shape}"
            )
        if not np.all(np.equal(np.mod(vector, 1), 0)):
            raise InvalidCandidateError("Candidate values must be integers")
        if vector.min() < 0 or vector.max() > self.data.size - 1:
            raise InvalidCandidateError(
                f"Candidate values must lie in [0, {self.data.size - 1}]"
            )
        return [int(value) for value in vector]

    def decode(self, candidate: Sequence[int]) -> Matches:
        order = self.validate_candidate(candidate)
        if self.matching_type is MatchingProblemType.TRIPLET:
            return triplet_matching(self.data, self.preferences, order)
        return deferred_acceptance(self.data, self.preferences, order)

    def get_matches_satisfactions(self, matches: Matches) -> np.ndarray:
        return self.preferences.get_matches_satisfactions(matches)

    def get_set_satisfactions(self, satisfactions: Sequence[float]) -> list[float]:
        """Sum of satisfactions per set."""
        values = np.asarray(satisfactions, dtype=float)
        set_indices = np.asarray(self.data.set_indices)
        return [
            float(values[set_indices == set_index].sum())
            for set_index in range(self.data.set_count)
        ]

    def fitness(self, satisfactions: Sequence[float]) -> float:
        return self.fitness_evaluator.evaluate(satisfactions, self.fitness_function)

    def evaluate_candidate(self, candidate: Sequence[int]) -> MatchingEvaluation:
        matches = self.decode(candidate)
        satisfactions = self.get_matches_satisfactions(matches)
        return MatchingEvaluation(
            matches=matches,
            satisfactions=satisfactions,
            fitness=self.fitness(satisfactions),
        )

    def evaluate(self, candidate: Sequence[int]) -> list[float]:
        """Objective values of a candidate (minimisation)."""
        return self.evaluate_candidate(candidate).objectives
