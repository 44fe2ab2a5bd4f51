"""
Matching solver.

Runs a search driver against a matching problem and reports the best
matching found, and benchmarks several drivers over repeated runs.
"""

import time
from typing import Optional, Sequence

import numpy as np

from stablematch.core.matching.problem import MatchingProblem
from stablematch.core.matching.results import MatchingSolution, MatchingSolutionInsights
from stablematch.core.solver.algorithms import (
    ALGORITHM_REGISTRY,
    GeneticSearch,
    OptimizerConfig,
    SearchAlgorithm,
    get_algorithm,
)
from stablematch.utils.config import get_settings
from stablematch.utils.logger import get_logger

logger = get_logger(__name__)


class MatchingSolver:
    """
    Solves matching problems with the registered search drivers.

    Usage:
        solver = MatchingSolver(OptimizerConfig.from_settings())
        solution = solver.solve(problem, "GeneticSearch")
    """

    def __init__(
        self,
        config: Optional[OptimizerConfig] = None,
        registry: Optional[dict[str, type[SearchAlgorithm]]] = None,
    ):
        self.config = config or OptimizerConfig.from_settings()
        self.registry = registry if registry is not None else dict(ALGORITHM_REGISTRY)
        self._rng = np.random.default_rng(self.config.seed)

    def solve(
        self,
        problem: MatchingProblem,
        algorithm: Optional[str] = None,
    ) -> MatchingSolution:
        """
        Search for the best matching of ``problem``.

        Args:
            problem: Problem to solve
            algorithm: Registered algorithm name, defaults to GeneticSearch

        Returns:
            The best matching with its fitness and runtime in milliseconds
        """
        algorithm = algorithm or GeneticSearch.name
        search = get_algorithm(algorithm, self.config, self.registry)

        started = time.perf_counter()
        result = search.run(problem, self._rng)
        runtime = (time.perf_counter() - started) * 1000

        evaluation = result.evaluation
        logger.info(
            f"{algorithm} finished in {runtime:.1f} ms after {result.evaluations} "
            f"evaluations, fitness {evaluation.fitness:.4f}"
        )

        return MatchingSolution(
            matches=evaluation.matches,
            fitness_value=evaluation.fitness,
            set_satisfactions=problem.get_set_satisfactions(evaluation.satisfactions),
            satisfactions=[float(value) for value in evaluation.satisfactions],
            algorithm=algorithm,
            runtime=runtime,
        )

    def get_insights(
        self,
        problem: MatchingProblem,
        algorithms: Optional[Sequence[str]] = None,
        run_count: Optional[int] = None,
    ) -> MatchingSolutionInsights:
        """Run every algorithm ``run_count`` times and collect the results."""
        settings = get_settings().solver
        algorithms = list(algorithms or settings.algorithms)
        run_count = run_count or settings.run_count

        # Fail on unknown names before any run starts
        for algorithm in algorithms:
            get_algorithm(algorithm, self.config, self.registry)

        logger.info(f"Collecting insights: {algorithms} x {run_count} runs")
        insights = MatchingSolutionInsights()
        for algorithm in algorithms:
            for run in range(run_count):
                solution = self.solve(problem, algorithm)
                insights.add_run(algorithm, solution.fitness_value, solution.runtime)
                logger.debug(f"{algorithm} run {run + 1}/{run_count} done")
        return insights


# Singleton instance
_matching_solver: Optional[MatchingSolver] = None


def get_matching_solver() -> MatchingSolver:
    """Get the matching solver singleton instance."""
    global _matching_solver
    if _matching_solver is None:
        _matching_solver = MatchingSolver()
    return _matching_solver
