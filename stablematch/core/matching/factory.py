"""
Problem factory.

Maps a problem definition document to a ready ``MatchingProblem``:
requirements are decoded, the data snapshot is validated, preference lists
are built and checked for uniformity.
"""

from typing import Iterable, Optional, Sequence

from stablematch.core.exceptions import UniformPreferenceError
from stablematch.core.matching.data import MatchingData
from stablematch.core.matching.preferences import PreferenceProvider
from stablematch.core.matching.problem import MatchingProblem
from stablematch.core.matching.requirements import decode_requirements
from stablematch.data.models.problem import MatchingProblemDefinition
from stablematch.utils.config import get_settings
from stablematch.utils.constants import MatchingProblemType
from stablematch.utils.logger import get_logger

logger = get_logger(__name__)


def create_problem(
    data: MatchingData,
    matching_type: MatchingProblemType,
    evaluate_functions: Optional[Sequence[Optional[str]]] = None,
    fitness_function: Optional[str] = None,
    name: str = "",
    reject_uniform_preferences: Optional[bool] = None,
    reject_uniform_fitness: Optional[bool] = None,
) -> MatchingProblem:
    """
    Build a problem from already decoded data.

    Args:
        data: Validated problem data
        matching_type: Cardinality of the matching
        evaluate_functions: One evaluation function per set
        fitness_function: Fitness expression, blank for the sum
        name: Display name
        reject_uniform_preferences: Fail on indistinguishable preference
            lists, defaults to the matching settings
        reject_uniform_fitness: Fail on a fitness function that ignores
            every satisfaction, defaults to the matching settings

    Raises:
        ConfigurationError: On invalid functions or data
        UniformPreferenceError: On indistinguishable preference lists
        UniformFitnessError: On a constant fitness function
    """
    settings = get_settings().matching
    if reject_uniform_preferences is None:
        reject_uniform_preferences = settings.reject_uniform_preferences
    if reject_uniform_fitness is None:
        reject_uniform_fitness = settings.reject_uniform_fitness

    preferences = PreferenceProvider(data, evaluate_functions).to_list_wrapper()

    if reject_uniform_preferences:
        uniform = preferences.find_uniform_preferences()
        if uniform:
            raise UniformPreferenceError(uniform)

    problem = MatchingProblem(
        data=data,
        preferences=preferences,
        matching_type=matching_type,
        fitness_function=fitness_function,
        name=name,
    )

    if reject_uniform_fitness and problem.fitness_function is not None:
        problem.fitness_evaluator.validate_uniform_fitness(problem.fitness_function)

    return problem


def build_problem(
    definition: MatchingProblemDefinition,
    matching_type: Optional[MatchingProblemType] = None,
    reject_uniform_preferences: Optional[bool] = None,
) -> MatchingProblem:
    """Build a problem from a definition document."""
    matching_type = MatchingProblemType(matching_type or definition.matching_type)
    logger.info(
        f"Building {matching_type.display_name} problem '{definition.problem_name}' "
        f"({definition.number_of_individuals} individuals, "
        f"{definition.number_of_property} properties)"
    )

    data = MatchingData.create(
        set_indices=definition.individual_set_indices,
        capacities=definition.individual_capacities,
        properties=definition.individual_properties,
        weights=definition.individual_weights,
        requirements=decode_requirements(definition.individual_requirements),
        excluded_pairs=_pairs(definition.excluded_pairs),
    )
    return create_problem(
        data,
        matching_type,
        evaluate_functions=definition.evaluate_functions,
        fitness_function=definition.fitness_function,
        name=definition.problem_name,
        reject_uniform_preferences=reject_uniform_preferences,
    )


def _pairs(pairs: Iterable[Sequence[int]]) -> list[tuple[int, int]]:
    return [(int(first), int(second)) for first, second in pairs]
