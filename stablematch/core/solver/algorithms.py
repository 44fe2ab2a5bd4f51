"""
Reference search drivers.

The drivers only use the public problem contract (``new_candidate`` and
``evaluate_candidate``) and receive their variation operators and the
algorithm registry explicitly.
"""

from abc import ABC, abstractmethod
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Optional, Sequence

import numpy as np

from stablematch.core.exceptions import ConfigurationError
from stablematch.core.matching.problem import MatchingEvaluation, MatchingProblem
from stablematch.core.solver.variation import PermutationVariation, Variation
from stablematch.utils.config import SolverSettings, get_settings
from stablematch.utils.logger import LoggerMixin


@dataclass
class OptimizerConfig:
    """Search driver configuration."""

    population_size: int = 50
    generations: int = 40
    operators: list[Variation] = field(default_factory=list)
    max_workers: int = 1
    seed: Optional[int] = None
    tournament_size: int = 2
    elite_count: int = 1

    def __post_init__(self) -> None:
        if self.population_size < 1 or self.generations < 1:
            raise ConfigurationError("Population size and generations must be at least 1")
        if self.elite_count >= self.population_size:
            self.elite_count = self.population_size - 1

    @classmethod
    def from_settings(
        cls,
        settings: Optional[SolverSettings] = None,
        operators: Optional[list[Variation]] = None,
    ) -> "OptimizerConfig":
        """Build a configuration from the solver settings."""
        settings = settings or get_settings().solver
        if operators is None:
            operators = [PermutationVariation(settings.crossover_rate, settings.mutation_rate)]
        return cls(
            population_size=settings.population_size,
            generations=settings.generations,
            operators=operators,
            max_workers=settings.max_workers,
            seed=settings.seed,
        )


@dataclass
class SearchResult:
    """Best candidate of one search run."""

    candidate: np.ndarray
    evaluation: MatchingEvaluation
    evaluations: int = 0


def evaluate_population(
    problem: MatchingProblem,
    candidates: Sequence[np.ndarray],
    max_workers: int = 1,
) -> list[MatchingEvaluation]:
    """
    Evaluate candidates, concurrently when ``max_workers`` > 1.

    Results keep the order of ``candidates``. Evaluations share only
    read-only problem state.
    """
    if max_workers <= 1 or len(candidates) <= 1:
        return [problem.evaluate_candidate(candidate) for candidate in candidates]

    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        return list(executor.map(problem.evaluate_candidate, candidates))


class SearchAlgorithm(LoggerMixin, ABC):
    """Base class of the search drivers."""

    name = "SearchAlgorithm"

    def __init__(self, config: OptimizerConfig):
        self.config = config

    @abstractmethod
    def run(self, problem: MatchingProblem, rng: np.random.Generator) -> SearchResult:
        """Search for the best proposal order of ``problem``."""

    def _evaluate(
        self, problem: MatchingProblem, candidates: Sequence[np.ndarray]
    ) -> list[MatchingEvaluation]:
        return evaluate_population(problem, candidates, self.config.max_workers)


class RandomSearch(SearchAlgorithm):
    """Samples random proposal orders and keeps the best one."""

    name = "RandomSearch"

    def run(self, problem: MatchingProblem, rng: np.random.Generator) -> SearchResult:
        best: Optional[SearchResult] = None
        evaluations = 0

        for _ in range(self.config.generations):
            candidates = [problem.new_candidate(rng) for _ in range(self.config.population_size)]
            results = self._evaluate(problem, candidates)
            evaluations += len(results)

            for candidate, evaluation in zip(candidates, results):
                if best is None or evaluation.fitness > best.evaluation.fitness:
                    best = SearchResult(candidate=candidate, evaluation=evaluation)

        best.evaluations = evaluations
        return best


class GeneticSearch(SearchAlgorithm):
    """
    Generational genetic algorithm.

    Parents are picked by tournament, offspring are produced by the
    configured variation operators in turn and the best individuals of the
    previous generation survive unchanged.
    """

    name = "GeneticSearch"

    def __init__(self, config: OptimizerConfig):
        super().__init__(config)
        if not config.operators:
            raise ConfigurationError(f"{self.name} needs at least one variation operator")

    def run(self, problem: MatchingProblem, rng: np.random.Generator) -> SearchResult:
        population = [problem.new_candidate(rng) for _ in range(self.config.population_size)]
        fitness = self._evaluate(problem, population)
        evaluations = len(fitness)

        for generation in range(1, self.config.generations):
            order = np.argsort([-evaluation.fitness for evaluation in fitness], kind="stable")
            next_population = [population[i] for i in order[: self.config.elite_count]]
            next_fitness = [fitness[i] for i in order[: self.config.elite_count]]

            offspring: list[np.ndarray] = []
            operator_index = 0
            while len(next_population) + len(offspring) < self.config.population_size:
                operator = self.config.operators[operator_index % len(self.config.operators)]
                operator_index += 1
                parents = [self._tournament(population, fitness, rng) for _ in range(operator.arity)]
                offspring.extend(operator.evolve(parents, rng))

            offspring = offspring[: self.config.population_size - len(next_population)]
            offspring_fitness = self._evaluate(problem, offspring)
            evaluations += len(offspring_fitness)

            population = next_population + offspring
            fitness = next_fitness + offspring_fitness
            self.logger.debug(
                f"Generation {generation}: best fitness {max(e.fitness for e in fitness):.4f}"
            )

        best_index = int(np.argmax([evaluation.fitness for evaluation in fitness]))
        return SearchResult(
            candidate=population[best_index],
            evaluation=fitness[best_index],
            evaluations=evaluations,
        )

    def _tournament(
        self,
        population: list[np.ndarray],
        fitness: list[MatchingEvaluation],
        rng: np.random.Generator,
    ) -> np.ndarray:
        size = min(self.config.tournament_size, len(population))
        contestants = rng.choice(len(population), size=size, replace=False)
        winner = max(contestants, key=lambda i: fitness[i].fitness)
        return population[winner]


ALGORITHM_REGISTRY: dict[str, type[SearchAlgorithm]] = {
    RandomSearch.name: RandomSearch,
    GeneticSearch.name: GeneticSearch,
}


def get_algorithm(
    name: str,
    config: OptimizerConfig,
    registry: Optional[dict[str, type[SearchAlgorithm]]] = None,
) -> SearchAlgorithm:
    """
    Instantiate a registered search algorithm.

    Raises:
        ConfigurationError: If ``name`` is not registered
    """
    registry = registry if registry is not None else ALGORITHM_REGISTRY
    if name not in registry:
        raise ConfigurationError(
            f"Unknown algorithm '{name}', expected one of {sorted(registry)}"
        )
    return registry[name](config)
