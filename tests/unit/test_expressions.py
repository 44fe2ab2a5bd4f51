"""
Tests for stablematch.core.expressions.evaluator — the arithmetic evaluator.
"""

import math

import pytest

from stablematch.core.exceptions import ExpressionError
from stablematch.core.expressions import (
    evaluate_expression,
    extract_variables,
    format_number,
    parse_expression,
)


# ── evaluate_expression ──────────────────────────────────────────────────────


class TestEvaluateExpression:
    def test_operator_precedence(self):
        assert evaluate_expression("2 + 3 * 4") == 14.0

    def test_caret_is_power(self):
        assert evaluate_expression("2 ^ 3") == 8.0
        assert evaluate_expression("(-2)^2") == 4.0

    def test_variables(self):
        assert evaluate_expression("x * (y + 1)", {"x": 2, "y": 3}) == 8.0

    def test_constants(self):
        assert evaluate_expression("pi") == pytest.approx(math.pi)

    def test_functions(self):
        assert evaluate_expression("abs(-3)") == 3.0
        assert evaluate_expression("max(1, 5, 3)") == 5.0
        assert evaluate_expression("sqrt(16)") == 4.0
        assert evaluate_expression("logb(2, 8)") == pytest.approx(3.0)
        assert evaluate_expression("cbrt(-27)") == pytest.approx(-3.0)

    def test_result_is_float(self):
        assert isinstance(evaluate_expression("7"), float)

    def test_division_by_zero(self):
        with pytest.raises(ExpressionError):
            evaluate_expression("1 / 0")

    def test_domain_errors(self):
        with pytest.raises(ExpressionError):
            evaluate_expression("sqrt(-1)")
        with pytest.raises(ExpressionError):
            evaluate_expression("logb(1, 8)")

    def test_unknown_variable(self):
        with pytest.raises(ExpressionError, match="Unknown variable"):
            evaluate_expression("x + 1")

    def test_wrong_argument_count(self):
        with pytest.raises(ExpressionError):
            evaluate_expression("sqrt(1, 2)")


# ── parse_expression ─────────────────────────────────────────────────────────


class TestParseExpression:
    @pytest.mark.parametrize(
        "expression",
        [
            "",
            "   ",
            "1 +",
            "__import__('os')",
            "'a'",
            "a.b",
            "[1, 2]",
            "x if y else z",
            "1 < 2",
            "lambda: 1",
            "round(1, ndigits=2)",
            "True",
        ],
    )
    def test_rejects_unsupported_input(self, expression):
        with pytest.raises(ExpressionError):
            parse_expression(expression)

    def test_unknown_function(self):
        with pytest.raises(ExpressionError, match="Unknown function"):
            parse_expression("foo(1)")


class TestExtractVariables:
    def test_collects_free_names(self):
        assert extract_variables("P1 * W1 + sqrt(R2) + pi") == {"P1", "W1", "R2"}

    def test_no_variables(self):
        assert extract_variables("1 + 2") == set()


# ── format_number ────────────────────────────────────────────────────────────


class TestFormatNumber:
    def test_integral_value(self):
        assert format_number(2.0) == "2"

    def test_decimal_value(self):
        assert format_number(2.5) == "2.5"

    def test_negative_value_is_parenthesised(self):
        assert format_number(-2.5) == "(-2.5)"

    def test_no_scientific_notation(self):
        assert format_number(1e-7) == "0.0000001"
        assert format_number(1e20) == "100000000000000000000"
