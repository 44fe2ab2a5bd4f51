"""
Random sample problems.

Generates valid problem definitions for demos and benchmarks: properties on
the 0..10 scale, positive weights and requirement texts in every supported
syntax.
"""

from typing import Optional, Sequence

import numpy as np

from stablematch.data.models.problem import MatchingProblemDefinition
from stablematch.utils.constants import DEFAULT_FUNC, MatchingProblemType
from stablematch.utils.logger import get_logger

logger = get_logger(__name__)


def _random_requirement(rng: np.random.Generator) -> str:
    kind = rng.integers(0, 4)
    if kind == 0:
        return str(int(rng.integers(0, 11)))
    if kind == 1:
        return f"{int(rng.integers(1, 6))}++"
    if kind == 2:
        return f"{int(rng.integers(5, 10))}--"
    lower = int(rng.integers(0, 5))
    return f"{lower}:{lower + int(rng.integers(3, 6))}"


def _capacities(
    set_indices: Sequence[int],
    matching_type: MatchingProblemType,
    max_capacity: int,
    rng: np.random.Generator,
) -> list[int]:
    if matching_type is MatchingProblemType.MTM:
        return [int(rng.integers(1, max_capacity + 1)) for _ in set_indices]
    if matching_type is MatchingProblemType.OTM:
        return [int(rng.integers(1, max_capacity + 1)) if s == 0 else 1 for s in set_indices]
    return [1] * len(set_indices)


def generate_sample_problem(
    set_sizes: Optional[Sequence[int]] = None,
    property_count: int = 3,
    matching_type: MatchingProblemType = MatchingProblemType.OTO,
    max_capacity: int = 3,
    fitness_function: str = DEFAULT_FUNC,
    seed: Optional[int] = None,
    name: str = "Sample problem",
) -> MatchingProblemDefinition:
    """
    Generate a random problem definition.

    Args:
        set_sizes: Individuals per set, defaults to 5 per set
        property_count: Number of properties per individual
        matching_type: Cardinality of the matching
        max_capacity: Upper bound of generated capacities
        fitness_function: Fitness expression of the problem
        seed: Seed of the random generator
        name: Problem name

    Returns:
        A validated problem definition
    """
    matching_type = MatchingProblemType(matching_type)
    set_sizes = list(set_sizes or [5] * matching_type.set_count)
    if len(set_sizes) != matching_type.set_count:
        raise ValueError(
            f"{matching_type.display_name} needs {matching_type.set_count} set sizes, "
            f"got {len(set_sizes)}"
        )

    rng = np.random.default_rng(seed)
    set_indices = [set_index for set_index, count in enumerate(set_sizes) for _ in range(count)]
    size = len(set_indices)

    properties = np.round(rng.uniform(0, 10, size=(size, property_count)), 1)
    weights = rng.integers(1, 10, size=(size, property_count))
    requirements = [[_random_requirement(rng) for _ in range(property_count)] for _ in range(size)]

    logger.debug(f"Generated {matching_type.value} sample with {size} individuals")

    return MatchingProblemDefinition(
        problem_name=name,
        matching_type=matching_type,
        number_of_sets=len(set_sizes),
        number_of_property=property_count,
        individual_set_indices=set_indices,
        individual_capacities=_capacities(set_indices, matching_type, max_capacity, rng),
        individual_requirements=requirements,
        individual_weights=weights.astype(float).tolist(),
        individual_properties=properties.tolist(),
        evaluate_functions=[DEFAULT_FUNC] * len(set_sizes),
        fitness_function=fitness_function,
    )
