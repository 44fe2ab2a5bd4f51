"""
Tests for stablematch.core.matching.factory — building problems from
definitions and rejecting uniform preferences or fitness functions.
"""

import pytest

from stablematch.core.exceptions import (
    ConfigurationError,
    RequirementSyntaxError,
    UniformFitnessError,
    UniformPreferenceError,
    ZeroWeightSumError,
)
from stablematch.core.matching import OneBound, ScaleTarget, TwoBound, build_problem
from stablematch.utils.constants import MatchingProblemType


class TestBuildProblem:
    def test_builds_from_definition(self, make_definition):
        problem = build_problem(make_definition())
        assert problem.name == "Test problem"
        assert problem.matching_type is MatchingProblemType.OTO
        assert problem.data.size == 4
        assert problem.evaluate([0, 1, 2, 3]) == [-10.0]

    def test_requirements_are_decoded(self, make_definition):
        definition = make_definition(
            number_of_property=1,
            individual_requirements=[["5"], ["3++"], ["1:4"], [12]],
        )
        problem = build_problem(definition)
        assert problem.data.requirements == (
            (ScaleTarget(5),),
            (OneBound(3.0),),
            (TwoBound(1.0, 4.0),),
            (OneBound(12.0),),
        )

    def test_matching_type_override(self, make_definition):
        definition = make_definition(individual_capacities=[2, 2, 2, 2])
        problem = build_problem(definition, MatchingProblemType.MTM)
        assert problem.matching_type is MatchingProblemType.MTM
        assert problem.data.capacities == (2, 2, 2, 2)

    def test_missing_capacities_default_to_one(self, make_definition):
        definition = make_definition(
            matching_type="mtm",
            individual_capacities=None,
        )
        assert build_problem(definition).data.capacities == (1, 1, 1, 1)

    def test_excluded_pairs_pass_through(self, make_definition):
        problem = build_problem(make_definition(excluded_pairs=[[3, 1]]))
        assert problem.data.is_excluded(1, 3)
        assert not problem.decode([0, 1, 2, 3]).is_matched(1, 3)

    def test_custom_fitness_function(self, make_definition):
        problem = build_problem(make_definition(fitness_function="SIGMA{S2 * 10}"))
        assert problem.evaluate_candidate([0, 1, 2, 3]).fitness == 30.0

    def test_invalid_requirement(self, make_definition):
        definition = make_definition(individual_requirements=[["5"], ["x"], ["5"], ["5"]])
        with pytest.raises(RequirementSyntaxError):
            build_problem(definition)

    def test_zero_weights(self, make_definition):
        definition = make_definition(individual_weights=[[1.0], [1.0], [0.0], [1.0]])
        with pytest.raises(ZeroWeightSumError):
            build_problem(definition)

    def test_unknown_evaluation_variable(self, make_definition):
        with pytest.raises(ConfigurationError):
            build_problem(make_definition(evaluate_functions=["Q1", "P1"]))


class TestUniformPreferences:
    def test_uniform_lists_are_rejected(self, make_problem):
        with pytest.raises(UniformPreferenceError) as exc_info:
            make_problem(evaluate_functions=["1", "P1"])
        assert exc_info.value.individual_indices == [0, 1]
        assert "Uniform preference detected" in str(exc_info.value)

    def test_uniform_check_can_be_disabled(self, make_problem):
        problem = make_problem(evaluate_functions=["1", "P1"], reject_uniform_preferences=False)
        assert problem.data.size == 4

    def test_default_follows_settings(self, make_definition, settings_env):
        definition = make_definition(evaluate_functions=["1", "P1"])
        with pytest.raises(UniformPreferenceError):
            build_problem(definition)

        settings_env(MATCHING_REJECT_UNIFORM_PREFERENCES="false")
        assert build_problem(definition).data.size == 4


class TestUniformFitness:
    def test_constant_fitness_is_rejected(self, make_problem):
        with pytest.raises(UniformFitnessError, match="Fitness uniform detected"):
            make_problem(fitness_function="42")

    def test_check_follows_settings(self, make_problem, settings_env):
        settings_env(MATCHING_REJECT_UNIFORM_FITNESS="false")
        problem = make_problem(fitness_function="42")
        assert problem.evaluate([0, 1, 2, 3]) == [-42.0]

    def test_default_fitness_is_not_checked(self, make_problem):
        assert make_problem(fitness_function="default").fitness_function is None
