"""
Shared test fixtures for the stablematch test suite.

Sets environment variables before any stablematch imports so settings are
built for testing, then provides factory fixtures for matching data,
problems and problem definitions.
"""

import os

# === Set environment BEFORE any stablematch imports ===
os.environ.setdefault("APP_ENVIRONMENT", "testing")
os.environ.setdefault("LOG_CONSOLE_OUTPUT", "false")

from typing import Any, Optional, Sequence

import pytest

from stablematch.core.expressions import FitnessEvaluator
from stablematch.core.matching import (
    MatchingData,
    MatchingProblem,
    PreferenceListWrapper,
    TwoSetPreferenceList,
    create_problem,
    decode_requirements,
)
from stablematch.data.models import MatchingProblemDefinition
from stablematch.utils.config import reload_settings
from stablematch.utils.constants import MatchingProblemType


# ---------------------------------------------------------------------------
# Settings
# ---------------------------------------------------------------------------


@pytest.fixture
def settings_env(monkeypatch):
    """
    Factory that sets environment variables and rebuilds the settings.

    The environment is restored and the settings rebuilt after the test.
    """

    def _apply(**env: str):
        for key, value in env.items():
            monkeypatch.setenv(key, value)
        return reload_settings()

    yield _apply
    monkeypatch.undo()
    reload_settings()


# ---------------------------------------------------------------------------
# Factory fixtures for matching data and problems
# ---------------------------------------------------------------------------


@pytest.fixture
def make_matching_data():
    """
    Factory that returns a callable to build MatchingData.

    The default is a two-set problem with individuals 0, 1 in the first set
    and 2, 3 in the second, one property valued 1..4.
    """

    def _factory(
        set_indices: Optional[Sequence[int]] = None,
        properties: Optional[Sequence[Sequence[float]]] = None,
        weights: Optional[Sequence[Sequence[float]]] = None,
        requirements: Optional[Sequence[Sequence[str]]] = None,
        capacities: Optional[Sequence[int]] = None,
        excluded_pairs: Optional[Sequence[Sequence[int]]] = None,
    ) -> MatchingData:
        if set_indices is None:
            set_indices = [0, 0, 1, 1]
        size = len(set_indices)
        if properties is None:
            properties = [[float(i + 1)] for i in range(size)]
        property_count = len(properties[0])
        if weights is None:
            weights = [[1.0] * property_count for _ in range(size)]
        if requirements is None:
            requirements = [["5"] * property_count for _ in range(size)]

        return MatchingData.create(
            set_indices=set_indices,
            properties=properties,
            weights=weights,
            requirements=decode_requirements(requirements),
            capacities=capacities,
            excluded_pairs=excluded_pairs,
        )

    return _factory


@pytest.fixture
def make_problem(make_matching_data):
    """
    Factory that returns a callable to build a MatchingProblem.

    Preferences default to the ``P1`` evaluation function, so every
    individual ranks candidates by their first property.
    """

    def _factory(
        matching_type: MatchingProblemType = MatchingProblemType.OTO,
        evaluate_functions: Optional[Sequence[str]] = None,
        fitness_function: Optional[str] = None,
        reject_uniform_preferences: bool = True,
        data: Optional[MatchingData] = None,
        **data_kwargs: Any,
    ) -> MatchingProblem:
        if data is None:
            data = make_matching_data(**data_kwargs)
        if evaluate_functions is None:
            evaluate_functions = ["P1"] * data.set_count
        return create_problem(
            data,
            matching_type,
            evaluate_functions=evaluate_functions,
            fitness_function=fitness_function,
            name="Test problem",
            reject_uniform_preferences=reject_uniform_preferences,
        )

    return _factory


@pytest.fixture
def make_preferences():
    """Factory building a PreferenceListWrapper from ``{owner: {candidate: score}}``."""

    def _factory(scores: dict[int, dict[int, float]]) -> PreferenceListWrapper:
        return PreferenceListWrapper(
            [TwoSetPreferenceList(owner=owner, scores=scores[owner]) for owner in sorted(scores)]
        )

    return _factory


@pytest.fixture
def make_definition():
    """Factory that returns a callable to build MatchingProblemDefinition documents."""

    def _factory(**overrides: Any) -> MatchingProblemDefinition:
        document: dict[str, Any] = {
            "problem_name": "Test problem",
            "matching_type": "oto",
            "number_of_sets": 2,
            "number_of_property": 1,
            "individual_set_indices": [0, 0, 1, 1],
            "individual_capacities": [1, 1, 1, 1],
            "individual_requirements": [["5"], ["5"], ["5"], ["5"]],
            "individual_weights": [[1.0], [1.0], [1.0], [1.0]],
            "individual_properties": [[1.0], [2.0], [3.0], [4.0]],
            "evaluate_functions": ["P1", "P1"],
            "fitness_function": "default",
        }
        document.update(overrides)
        return MatchingProblemDefinition.model_validate(document)

    return _factory


@pytest.fixture
def oto_problem(make_problem) -> MatchingProblem:
    """The default one-to-one problem."""
    return make_problem()


@pytest.fixture
def triplet_problem(make_problem) -> MatchingProblem:
    """Three sets of two individuals, property 1 valued 1..6."""
    return make_problem(
        matching_type=MatchingProblemType.TRIPLET,
        set_indices=[0, 0, 1, 1, 2, 2],
    )


@pytest.fixture
def fitness_evaluator() -> FitnessEvaluator:
    """Evaluator for three individuals: two in set 1, one in set 2."""
    return FitnessEvaluator(set_indices=[0, 0, 1], set_count=2)
