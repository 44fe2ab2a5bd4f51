"""Result types reported to the presentation layer."""

from dataclasses import dataclass, field
from typing import Any

from stablematch.core.matching.matches import Matches


@dataclass
class MatchingSolution:
    """Best matching found by one search run."""

    matches: Matches
    fitness_value: float
    set_satisfactions: list[float] = field(default_factory=list)
    satisfactions: list[float] = field(default_factory=list)
    algorithm: str = ""
    runtime: float = 0.0  # milliseconds

    @property
    def left_overs(self) -> list[int]:
        return self.matches.get_left_overs()

    def to_dict(self) -> dict[str, Any]:
        return {
            "matches": self.matches.to_list(),
            "left_overs": self.left_overs,
            "fitness_value": self.fitness_value,
            "set_satisfactions": self.set_satisfactions,
            "satisfactions": self.satisfactions,
            "algorithm": self.algorithm,
            "runtime": self.runtime,
        }


@dataclass
class MatchingSolutionInsights:
    """Fitness values and runtimes of repeated runs, per algorithm."""

    fitness_values: dict[str, list[float]] = field(default_factory=dict)
    runtimes: dict[str, list[float]] = field(default_factory=dict)

    def add_run(self, algorithm: str, fitness_value: float, runtime: float) -> None:
        self.fitness_values.setdefault(algorithm, []).append(fitness_value)
        self.runtimes.setdefault(algorithm, []).append(runtime)

    def to_dict(self) -> dict[str, Any]:
        return {"fitness_values": self.fitness_values, "runtimes": self.runtimes}
