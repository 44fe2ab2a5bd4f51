"""
Fitness function evaluation.

A fitness function is a plain arithmetic expression that may embed three
kinds of satisfaction tokens:

- ``SIGMA{expr}``: ``expr`` evaluated once per member of the set named by
  the set variable it contains (``S1``, ``S2`` or ``S3``), summed
- ``S(<digit>)``: the sum of the satisfactions of one set
- ``M<n>``: the satisfaction of the individual at 1-based position ``n``

Tokens are expanded into numbers by a single left-to-right scan and the
resulting expression is handed to the generic evaluator.
"""

import re
from typing import Optional, Sequence

import numpy as np

from stablematch.core.exceptions import ExpressionError, UniformFitnessError
from stablematch.core.expressions.evaluator import (
    evaluate_expression,
    extract_variables,
    format_number,
    parse_expression,
)
from stablematch.utils.constants import DEFAULT_FUNC
from stablematch.utils.logger import get_logger

logger = get_logger(__name__)

SIGMA_TOKEN = "SIGMA{"
_SET_SUM_PATTERN = re.compile(r"S\((\d)\)")
_SET_VARIABLE_PATTERN = re.compile(r"(?<![A-Za-z0-9_])S(\d+)(?![A-Za-z0-9_])")
_IDENTIFIER_CHARS = frozenset("ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789_")

# Samples drawn before the uniform check gives up on a function that never evaluates
UNIFORM_CHECK_ATTEMPTS = 5


def is_default_function(function: Optional[str]) -> bool:
    """True when ``function`` selects the built-in behaviour."""
    return function is None or not function.strip() or function.strip().lower() == DEFAULT_FUNC


def _find_closing_brace(expression: str, start: int) -> int:
    depth = 1
    for position in range(start, len(expression)):
        char = expression[position]
        if char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
            if depth == 0:
                return position
    raise ExpressionError(f"Unbalanced SIGMA{{...}} in expression '{expression}'")


class FitnessEvaluator:
    """
    Aggregates a satisfaction vector into a single fitness value.

    The evaluator only holds the set membership of every individual, which
    is read-only, so one instance can serve concurrent evaluations.
    """

    def __init__(self, set_indices: Sequence[int], set_count: int):
        self._set_indices = np.asarray(set_indices, dtype=int)
        self._set_count = set_count
        self._members = tuple(
            np.flatnonzero(self._set_indices == set_index) for set_index in range(set_count)
        )

    @property
    def size(self) -> int:
        return len(self._set_indices)

    def default_fitness_evaluation(self, satisfactions: Sequence[float]) -> float:
        return float(np.sum(satisfactions))

    def with_fitness_function_evaluation(
        self,
        satisfactions: Sequence[float],
        fitness_function: str,
    ) -> float:
        """
        Expand the satisfaction tokens of ``fitness_function`` and evaluate it.

        Raises:
            ExpressionError: If expansion or evaluation fails
        """
        expression = self.expand(satisfactions, fitness_function)
        return evaluate_expression(expression)

    def evaluate(self, satisfactions: Sequence[float], fitness_function: Optional[str]) -> float:
        """Dispatch to the default sum or to the custom fitness function."""
        if is_default_function(fitness_function):
            return self.default_fitness_evaluation(satisfactions)
        return self.with_fitness_function_evaluation(satisfactions, fitness_function)

    def expand(self, satisfactions: Sequence[float], expression: str) -> str:
        """
        Replace every satisfaction token of ``expression`` by its value.

        Characters that are not part of a token are copied unchanged.
        """
        values = np.asarray(satisfactions, dtype=float)
        if len(values) != self.size:
            raise ExpressionError(
                f"Expected {self.size} satisfaction values, got {len(values)}"
            )
        return self._expand(values, expression)

    def validate(self, fitness_function: str) -> None:
        """
        Check a fitness function without evaluating its arithmetic.

        Satisfaction tokens, set references and ``SIGMA`` bodies are resolved
        against placeholder values and the result is only parsed. A function
        that fails for some satisfaction values, such as ``10 / (M1 - M2)``,
        is accepted here and reported per evaluation instead.

        Raises:
            ExpressionError: On malformed syntax, out of range positions or
                sets, and unknown variables
        """
        expression = self._expand(np.ones(self.size), fitness_function, check_only=True)
        unknown = extract_variables(expression)
        if unknown:
            raise ExpressionError(
                f"Unknown variable(s) {', '.join(sorted(unknown))} in '{fitness_function}'"
            )

    def validate_uniform_fitness(
        self,
        fitness_function: str,
        rng: Optional[np.random.Generator] = None,
    ) -> None:
        """
        Reject fitness functions that ignore every individual's satisfaction.

        A random satisfaction vector is evaluated, then each entry is flipped
        in turn. If no flip changes the outcome the function is uniform. A
        failed evaluation counts as an outcome of its own; when every
        evaluation of a sample fails, a new sample is drawn, and after
        ``UNIFORM_CHECK_ATTEMPTS`` such samples the check gives up.

        Raises:
            UniformFitnessError: If the fitness never changes
        """
        if self.size == 0:
            return
        rng = rng if rng is not None else np.random.default_rng()

        for _ in range(UNIFORM_CHECK_ATTEMPTS):
            satisfactions = rng.random(self.size)
            base_fitness = self._try_evaluate(satisfactions, fitness_function)

            for index in range(self.size):
                flipped = satisfactions.copy()
                flipped[index] = 1.0 - flipped[index]
                if self._try_evaluate(flipped, fitness_function) != base_fitness:
                    return

            if base_fitness is not None:
                raise UniformFitnessError(fitness_function)

        logger.warning(
            f"Uniform fitness check skipped: '{fitness_function}' failed on every sample"
        )

    def _try_evaluate(self, satisfactions: np.ndarray, fitness_function: str) -> Optional[float]:
        try:
            return self.evaluate(satisfactions, fitness_function)
        except ExpressionError as e:
            logger.debug(f"Sample evaluation failed: {e}")
            return None

    # ── token expansion ──────────────────────────────────────────────

    def _expand(self, values: np.ndarray, expression: str, check_only: bool = False) -> str:
        parts: list[str] = []
        position = 0
        length = len(expression)

        while position < length:
            char = expression[position]
            preceded_by_identifier = position > 0 and expression[position - 1] in _IDENTIFIER_CHARS

            if char == "S" and not preceded_by_identifier:
                if expression.startswith(SIGMA_TOKEN, position):
                    body_start = position + len(SIGMA_TOKEN)
                    body_end = _find_closing_brace(expression, body_start)
                    body = expression[body_start:body_end]
                    parts.append(format_number(self._sigma(values, body, check_only)))
                    position = body_end + 1
                    continue

                match = _SET_SUM_PATTERN.match(expression, position)
                if match:
                    set_values = self._set_values(values, int(match.group(1)), expression)
                    parts.append(format_number(float(np.sum(set_values))))
                    position = match.end()
                    continue

            elif char == "M" and not preceded_by_identifier:
                digits_end = position + 1
                while digits_end < length and expression[digits_end].isdigit():
                    digits_end += 1
                if digits_end == position + 1:
                    raise ExpressionError(
                        f"Missing position after 'M' at index {position} in '{expression}'"
                    )
                index = int(expression[position + 1:digits_end])
                if index < 1 or index > len(values):
                    raise ExpressionError(
                        f"M position out of range [1-{len(values)}]: {index}"
                    )
                parts.append(format_number(values[index - 1]))
                position = digits_end
                continue

            parts.append(char)
            position += 1

        return "".join(parts)

    def _sigma(self, values: np.ndarray, body: str, check_only: bool = False) -> float:
        inner = self._expand(values, body, check_only)
        set_numbers = {int(number) for number in _SET_VARIABLE_PATTERN.findall(inner)}
        if not set_numbers:
            return 0.0
        if len(set_numbers) > 1:
            raise ExpressionError(f"SIGMA body references more than one set: '{body}'")

        set_number = set_numbers.pop()
        set_values = self._set_values(values, set_number, body)
        variable = f"S{set_number}"

        if check_only:
            unknown = extract_variables(inner) - {variable}
            if unknown:
                raise ExpressionError(
                    f"Unknown variable(s) {', '.join(sorted(unknown))} in SIGMA body '{body}'"
                )
            return 0.0

        parse_expression(inner)
        return float(
            sum(evaluate_expression(inner, {variable: value}) for value in set_values)
        )

    def _set_values(self, values: np.ndarray, set_number: int, expression: str) -> np.ndarray:
        if set_number < 1 or set_number > self._set_count:
            raise ExpressionError(
                f"Set reference out of range [1-{self._set_count}]: {set_number} in '{expression}'"
            )
        return values[self._members[set_number - 1]]
