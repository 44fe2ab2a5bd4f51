"""
Requirement variants and the requirement text decoder.

A requirement maps a raw property value to a desirability score. Three
variants exist:

- ``ScaleTarget``: bell-shaped preference around a target on the 0..10 scale
- ``OneBound``: favours values above (``++``) or below (``--``) a bound
- ``TwoBound``: favours values inside an open interval, peaking at its midpoint
"""

import re
from dataclasses import dataclass
from typing import Sequence, Union

import numpy as np

from stablematch.core.exceptions import RequirementSyntaxError
from stablematch.utils.constants import (
    DECREASING_OPERATOR,
    INCREASING_OPERATOR,
    RANGE_OPERATOR,
    SCALE_CUTOFF_DISTANCE,
    SCALE_FLAT_DISTANCE,
    SCALE_MAX,
    SCALE_MIN,
    ZERO_BOUND_BONUS,
    RequirementType,
)

_INTEGER_PATTERN = re.compile(r"^-?\d+$")
_DECIMAL_PATTERN = re.compile(r"^-?\d+\.\d+$")
_NUMBER = r"-?\d+(?:\.\d+)?"
_BOUND_PATTERN = re.compile(rf"^({_NUMBER})\s*(\+\+|--)$")
_RANGE_PATTERN = re.compile(rf"^({_NUMBER})\s*{RANGE_OPERATOR}\s*({_NUMBER})$")


def _format_number(value: float) -> str:
    return np.format_float_positional(float(value), trim="-")


@dataclass(frozen=True)
class ScaleTarget:
    """Preference for values close to ``target`` on the fixed 0..10 scale."""

    target: int

    @property
    def type(self) -> RequirementType:
        return RequirementType.SCALE_TARGET

    def get_value_for_function(self) -> float:
        return float(self.target)

    def scale(self, value: float) -> float:
        if value < SCALE_MIN or value > SCALE_MAX:
            return 0.0
        distance = abs(value - self.target)
        if distance > SCALE_CUTOFF_DISTANCE:
            return 0.0
        if distance > SCALE_FLAT_DISTANCE:
            return 1.0
        return (10 - distance) / 10 + 1

    def __str__(self) -> str:
        return f"[{self.target}]"


@dataclass(frozen=True)
class OneBound:
    """
    Preference for values on one side of ``bound``.

    The reward grows without limit as the value moves past the bound. A zero
    bound yields a flat bonus instead, since the ratio is undefined there.
    """

    bound: float
    increasing: bool = True

    @property
    def type(self) -> RequirementType:
        return RequirementType.ONE_BOUND

    def get_value_for_function(self) -> float:
        return float(self.bound)

    def scale(self, value: float) -> float:
        if self.increasing and value < self.bound:
            return 0.0
        if not self.increasing and value > self.bound:
            return 0.0
        if self.bound == 0:
            return ZERO_BOUND_BONUS
        return (self.bound + abs(value - self.bound)) / self.bound

    def __str__(self) -> str:
        operator = INCREASING_OPERATOR if self.increasing else DECREASING_OPERATOR
        return f"[{_format_number(self.bound)}, {operator}]"


@dataclass(frozen=True)
class TwoBound:
    """Preference for values strictly between ``lower`` and ``upper``."""

    lower: float
    upper: float

    @property
    def type(self) -> RequirementType:
        return RequirementType.TWO_BOUND

    @property
    def midpoint(self) -> float:
        return (self.lower + self.upper) / 2

    def get_value_for_function(self) -> float:
        return self.midpoint

    def scale(self, value: float) -> float:
        if self.lower == self.upper:
            return 0.0
        if value <= self.lower or value >= self.upper:
            return 0.0
        half_width = (self.upper - self.lower) / 2
        return (half_width - abs(self.midpoint - value)) / half_width + 1

    def __str__(self) -> str:
        return f"[{_format_number(self.lower)}, {_format_number(self.upper)}]"


Requirement = Union[ScaleTarget, OneBound, TwoBound]


def decode_requirement(text: Union[str, int, float]) -> Requirement:
    """
    Decode one requirement from its text form.

    Accepted forms: an integer 0..10 (scale target), any other integer or a
    decimal (increasing bound), ``v++`` / ``v--`` (one-sided bound) and
    ``a:b`` (interval).

    Raises:
        RequirementSyntaxError: If the text matches none of the forms
    """
    item = str(text).strip()

    if _INTEGER_PATTERN.match(item):
        number = int(item)
        if SCALE_MIN <= number <= SCALE_MAX:
            return ScaleTarget(number)
        return OneBound(float(number), increasing=True)

    if _DECIMAL_PATTERN.match(item):
        return OneBound(float(item), increasing=True)

    match = _BOUND_PATTERN.match(item)
    if match:
        return OneBound(float(match.group(1)), increasing=match.group(2) == INCREASING_OPERATOR)

    match = _RANGE_PATTERN.match(item)
    if match:
        lower, upper = float(match.group(1)), float(match.group(2))
        if lower > upper:
            raise RequirementSyntaxError(item, "lower bound is greater than upper bound")
        return TwoBound(lower, upper)

    raise RequirementSyntaxError(item)


def decode_requirements(
    rows: Sequence[Sequence[Union[str, int, float]]],
) -> tuple[tuple[Requirement, ...], ...]:
    """Decode a matrix of requirement texts, row by row."""
    return tuple(tuple(decode_requirement(item) for item in row) for row in rows)
