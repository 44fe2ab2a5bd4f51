"""
Error taxonomy of the matching engine.

Configuration errors are raised while a problem is being built, expression
errors while a single candidate is scored.
"""

from typing import Iterable


class MatchingError(Exception):
    """Base class of all errors raised by the matching engine."""


class ConfigurationError(MatchingError):
    """Invalid problem input detected at construction time."""


class RequirementSyntaxError(ConfigurationError):
    """A requirement string could not be decoded."""

    def __init__(self, text: str, reason: str = "unrecognised requirement syntax"):
        super().__init__(f"Invalid requirement '{text}': {reason}")
        self.text = text


class UniformPreferenceError(ConfigurationError):
    """One or more individuals score all of their candidates identically."""

    def __init__(self, individual_indices: Iterable[int]):
        self.individual_indices = sorted(individual_indices)
        super().__init__(
            f"Uniform preference detected for individuals: {self.individual_indices}"
        )


class UniformFitnessError(ConfigurationError):
    """The fitness function does not depend on any satisfaction value."""

    def __init__(self, fitness_function: str):
        super().__init__(f"Fitness uniform detected for function '{fitness_function}'")
        self.fitness_function = fitness_function


class ExpressionError(MatchingError):
    """A fitness or evaluation expression could not be expanded or evaluated."""


class ZeroWeightSumError(MatchingError):
    """All property weights of an individual are zero."""

    def __init__(self, individual_index: int):
        super().__init__(
            f"Encountered zero-sum of weights for the individual: {individual_index}, "
            "please re-check the dataset"
        )
        self.individual_index = individual_index


class InvalidCandidateError(MatchingError, ValueError):
    """A candidate vector does not fit the problem's decision variables."""
