"""
Preference lists.

Every individual owns one preference list over the individuals of the
other sets. A list maps candidate ids to scores and keeps a precomputed
ranking: descending score, ties by ascending candidate id. Lists are built
once by ``PreferenceProvider`` and never mutated afterwards.
"""

import re
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Iterable, Mapping, Optional, Sequence, Union

import numpy as np

from stablematch.core.exceptions import ConfigurationError, ExpressionError
from stablematch.core.expressions import (
    evaluate_expression,
    extract_variables,
    is_default_function,
)
from stablematch.core.matching.data import MatchingData
from stablematch.core.matching.matches import Matches
from stablematch.utils.constants import EVAL_VARIABLE_PREFIXES, UNIFORM_EPSILON
from stablematch.utils.logger import LoggerMixin

_VARIABLE_PATTERN = re.compile(rf"^([{''.join(EVAL_VARIABLE_PREFIXES)}])(\d+)$")


def _rank(scores: Mapping[int, float], candidates: Iterable[int]) -> tuple[int, ...]:
    return tuple(sorted(candidates, key=lambda candidate: (-scores[candidate], candidate)))


@dataclass(frozen=True, eq=False)
class TwoSetPreferenceList:
    """Preference list of an individual in a two-set problem."""

    owner: int
    scores: Mapping[int, float]
    ranking: tuple[int, ...] = field(init=False)

    def __post_init__(self) -> None:
        scores = MappingProxyType({int(k): float(v) for k, v in self.scores.items()})
        object.__setattr__(self, "scores", scores)
        object.__setattr__(self, "ranking", _rank(scores, scores))

    def size(self, set_index: Optional[int] = None) -> int:
        return len(self.get_ranking(set_index))

    def get_ranking(self, set_index: Optional[int] = None) -> tuple[int, ...]:
        return self.ranking

    def get_position_by_rank(self, rank: int, set_index: Optional[int] = None) -> int:
        return self.get_ranking(set_index)[rank]

    def get_score(self, candidate: int) -> float:
        """Score of ``candidate``; unknown candidates score 0.0."""
        return self.scores.get(candidate, 0.0)

    def is_score_greater(self, node: int, node_to_compare: int) -> bool:
        return self.get_score(node) > self.get_score(node_to_compare)

    def get_least_node(self, new_node: int, current_nodes: Iterable[int]) -> int:
        """
        Weakest node among ``current_nodes`` and ``new_node``.

        The newcomer loses every tie. Among incumbents with the same minimal
        score, the lowest id is returned.
        """
        least_node = new_node
        least_score = self.get_score(new_node)
        for node in sorted(current_nodes):
            score = self.get_score(node)
            if score < least_score:
                least_node, least_score = node, score
        return least_node

    def is_uniform_preference(self, epsilon: float = UNIFORM_EPSILON) -> bool:
        """True when at least two candidates exist and all score the same."""
        if len(self.scores) < 2:
            return False
        values = list(self.scores.values())
        return max(values) - min(values) <= epsilon


@dataclass(frozen=True, eq=False)
class TripletPreferenceList(TwoSetPreferenceList):
    """
    Preference list of an individual in a three-set problem.

    Besides the overall ranking, one ranking per target set is kept so that
    a proposer can walk each other set independently.
    """

    candidate_sets: Mapping[int, int] = field(default_factory=dict)
    rankings_by_set: Mapping[int, tuple[int, ...]] = field(init=False)

    def __post_init__(self) -> None:
        super().__post_init__()
        candidate_sets = MappingProxyType(dict(self.candidate_sets))
        object.__setattr__(self, "candidate_sets", candidate_sets)

        members: dict[int, list[int]] = {}
        for candidate, set_index in candidate_sets.items():
            members.setdefault(set_index, []).append(candidate)
        rankings = {
            set_index: _rank(self.scores, candidates) for set_index, candidates in members.items()
        }
        object.__setattr__(self, "rankings_by_set", MappingProxyType(rankings))

    def get_ranking(self, set_index: Optional[int] = None) -> tuple[int, ...]:
        if set_index is None:
            return self.ranking
        return self.rankings_by_set.get(set_index, ())


PreferenceList = Union[TwoSetPreferenceList, TripletPreferenceList]


class PreferenceListWrapper:
    """All preference lists of a problem, indexed by owner."""

    def __init__(self, lists: Sequence[PreferenceList]):
        self._lists = tuple(lists)

    def __len__(self) -> int:
        return len(self._lists)

    def __getitem__(self, index: int) -> PreferenceList:
        return self._lists[index]

    def get(self, index: int) -> PreferenceList:
        return self._lists[index]

    def get_least_score_node(
        self,
        prefer_node: int,
        propose_node: int,
        current_nodes: Iterable[int],
        prefer_node_capacity: int,
    ) -> Optional[int]:
        """
        Decide who loses a spot when ``propose_node`` proposes to a full node.

        Args:
            prefer_node: The node that judges
            propose_node: The newcomer
            current_nodes: Partners currently held by ``prefer_node``
            prefer_node_capacity: Capacity of ``prefer_node``

        Returns:
            The node that is rejected, or None when ``prefer_node`` holds no one
        """
        current_nodes = sorted(current_nodes)
        if not current_nodes:
            return None

        if prefer_node_capacity == 1:
            current_node = current_nodes[0]
            if self.is_preferred_over(propose_node, current_node, prefer_node):
                return current_node
            return propose_node

        return self._lists[prefer_node].get_least_node(propose_node, current_nodes)

    def is_preferred_over(self, propose_node: int, current_node: int, prefer_node: int) -> bool:
        """True when ``prefer_node`` strictly prefers ``propose_node`` to ``current_node``."""
        return self._lists[prefer_node].is_score_greater(propose_node, current_node)

    def get_matches_satisfactions(self, matches: Matches) -> np.ndarray:
        """Per individual, the sum of its partners' scores in its own list."""
        satisfactions = np.zeros(len(self._lists), dtype=float)
        for index, preference_list in enumerate(self._lists):
            satisfactions[index] = sum(
                preference_list.get_score(partner) for partner in matches.get_set_of(index)
            )
        return satisfactions

    def find_uniform_preferences(self, epsilon: float = UNIFORM_EPSILON) -> list[int]:
        """Owners whose lists cannot distinguish between candidates."""
        return [
            index
            for index, preference_list in enumerate(self._lists)
            if preference_list.is_uniform_preference(epsilon)
        ]


class PreferenceProvider(LoggerMixin):
    """
    Builds the preference lists of a problem.

    One evaluation function may be given per set. A blank or ``"default"``
    function scores a candidate with the weighted requirement sum of the
    evaluator; a custom function is an arithmetic expression over:

    - ``P<k>``: property ``k`` of the evaluated candidate
    - ``W<k>``: weight ``k`` of the evaluator
    - ``R<k>``: representative value of requirement ``k`` of the evaluator

    with ``k`` counted from 1.
    """

    def __init__(
        self,
        data: MatchingData,
        evaluate_functions: Optional[Sequence[Optional[str]]] = None,
    ):
        self.data = data
        functions = list(evaluate_functions or [])
        if len(functions) > data.set_count:
            raise ConfigurationError(
                f"Expected at most {data.set_count} evaluation functions, got {len(functions)}"
            )
        functions += [None] * (data.set_count - len(functions))

        self._functions: tuple[Optional[str], ...] = tuple(
            None if is_default_function(function) else function.strip() for function in functions
        )
        self._variables: tuple[dict[str, tuple[str, int]], ...] = tuple(
            self._parse_variables(function) if function else {} for function in self._functions
        )

    def _parse_variables(self, function: str) -> dict[str, tuple[str, int]]:
        try:
            names = extract_variables(function)
        except ExpressionError as e:
            raise ConfigurationError(f"Invalid evaluation function '{function}': {e}") from e

        variables = {}
        for name in sorted(names):
            match = _VARIABLE_PATTERN.match(name)
            if not match:
                raise ConfigurationError(
                    f"Unknown variable '{name}' in evaluation function '{function}'"
                )
            prefix, number = match.group(1), int(match.group(2))
            if number < 1 or number > self.data.property_count:
                raise ConfigurationError(
                    f"Variable '{name}' is out of range [1-{self.data.property_count}] "
                    f"in evaluation function '{function}'"
                )
            variables[name] = (prefix, number - 1)
        return variables

    def get_variable_values(self, set_index: int, evaluator: int, evaluated: int) -> dict[str, float]:
        values = {}
        for name, (prefix, column) in self._variables[set_index].items():
            if prefix == "P":
                values[name] = float(self.data.properties[evaluated, column])
            elif prefix == "W":
                values[name] = float(self.data.weights[evaluator, column])
            else:
                values[name] = self.data.requirements[evaluator][column].get_value_for_function()
        return values

    def default_score(self, evaluator: int, candidate: int) -> float:
        requirements = self.data.requirements[evaluator]
        weights = self.data.weights[evaluator]
        properties = self.data.properties[candidate]
        return float(
            sum(
                requirement.scale(float(value)) * float(weight)
                for requirement, value, weight in zip(requirements, properties, weights)
            )
        )

    def score(self, evaluator: int, candidate: int) -> float:
        set_index = self.data.get_set_of(evaluator)
        function = self._functions[set_index]
        if function is None:
            return self.default_score(evaluator, candidate)
        try:
            return evaluate_expression(
                function, self.get_variable_values(set_index, evaluator, candidate)
            )
        except ExpressionError as e:
            raise ConfigurationError(
                f"Evaluation function '{function}' failed for individual {evaluator}: {e}"
            ) from e

    def build_list(self, index: int) -> PreferenceList:
        own_set = self.data.get_set_of(index)
        candidates = [i for i in range(self.data.size) if self.data.get_set_of(i) != own_set]
        scores = {candidate: self.score(index, candidate) for candidate in candidates}

        if self.data.set_count == 2:
            return TwoSetPreferenceList(owner=index, scores=scores)
        return TripletPreferenceList(
            owner=index,
            scores=scores,
            candidate_sets={candidate: self.data.get_set_of(candidate) for candidate in candidates},
        )

    def to_list_wrapper(self) -> PreferenceListWrapper:
        self.logger.debug(f"Building preference lists for {self.data.size} individuals")
        return PreferenceListWrapper([self.build_list(i) for i in range(self.data.size)])
