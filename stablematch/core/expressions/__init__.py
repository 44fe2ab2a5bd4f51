"""Arithmetic expression evaluation and fitness token expansion."""

from stablematch.core.expressions.evaluator import (
    evaluate_expression,
    extract_variables,
    format_number,
    parse_expression,
)
from stablematch.core.expressions.fitness import FitnessEvaluator, is_default_function

__all__ = [
    "FitnessEvaluator",
    "evaluate_expression",
    "extract_variables",
    "format_number",
    "is_default_function",
    "parse_expression",
]
