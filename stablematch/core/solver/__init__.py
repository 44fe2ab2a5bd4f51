"""Reference search drivers and benchmarking."""

from .algorithms import (
    ALGORITHM_REGISTRY,
    GeneticSearch,
    OptimizerConfig,
    RandomSearch,
    SearchAlgorithm,
    SearchResult,
    evaluate_population,
    get_algorithm,
)
from .solver import MatchingSolver, get_matching_solver
from .variation import PermutationVariation, Variation

__all__ = [
    "ALGORITHM_REGISTRY",
    "GeneticSearch",
    "MatchingSolver",
    "OptimizerConfig",
    "PermutationVariation",
    "RandomSearch",
    "SearchAlgorithm",
    "SearchResult",
    "Variation",
    "evaluate_population",
    "get_algorithm",
    "get_matching_solver",
]
