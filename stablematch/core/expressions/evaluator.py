"""
Generic arithmetic expression evaluator.

Expressions are parsed with the standard library ``ast`` module and only a
whitelisted subset of nodes is evaluated: numbers, named variables,
arithmetic operators, unary signs and calls to a fixed set of math
functions. ``^`` is accepted as the power operator.
"""

import ast
import math
import operator
from functools import lru_cache
from typing import Any, Callable, Mapping, Optional

import numpy as np

from stablematch.core.exceptions import ExpressionError


def _logb(base: float, value: float) -> float:
    if base <= 0 or value <= 0:
        raise ValueError("Logarithm base and argument must be positive")
    return math.log(value) / math.log(base)


def _sqrt(value: float) -> float:
    if value < 0:
        raise ValueError("Square root of negative number is not allowed")
    return math.sqrt(value)


_BINARY_OPERATORS: dict[type, Callable[[float, float], float]] = {
    ast.Add: operator.add,
    ast.Sub: operator.sub,
    ast.Mult: operator.mul,
    ast.Div: operator.truediv,
    ast.Mod: operator.mod,
    ast.Pow: operator.pow,
}

_UNARY_OPERATORS: dict[type, Callable[[float], float]] = {
    ast.UAdd: operator.pos,
    ast.USub: operator.neg,
}

FUNCTIONS: dict[str, Callable[..., float]] = {
    "abs": abs,
    "sqrt": _sqrt,
    "cbrt": lambda x: math.copysign(abs(x) ** (1.0 / 3.0), x),
    "exp": math.exp,
    "log": math.log,
    "log10": math.log10,
    "log2": math.log2,
    "logb": _logb,
    "ceil": math.ceil,
    "floor": math.floor,
    "round": round,
    "min": min,
    "max": max,
    "pow": math.pow,
    "sin": math.sin,
    "cos": math.cos,
    "tan": math.tan,
    "asin": math.asin,
    "acos": math.acos,
    "atan": math.atan,
    "sinh": math.sinh,
    "cosh": math.cosh,
    "tanh": math.tanh,
}

CONSTANTS: dict[str, float] = {
    "pi": math.pi,
    "e": math.e,
    "inf": math.inf,
    "nan": math.nan,
}

_ALLOWED_NODES = (
    ast.Expression,
    ast.BinOp,
    ast.UnaryOp,
    ast.Call,
    ast.Name,
    ast.Load,
    ast.Constant,
    *_BINARY_OPERATORS,
    *_UNARY_OPERATORS,
)


def format_number(value: float) -> str:
    """
    Render a number for substitution into an expression.

    The output never uses scientific notation; negative values are wrapped
    in parentheses so that they keep binding correctly next to ``^``.
    """
    text = np.format_float_positional(float(value), trim="-")
    if text.startswith("-"):
        return f"({text})"
    return text


@lru_cache(maxsize=2048)
def parse_expression(expression: str) -> ast.Expression:
    """
    Parse and validate an expression.

    The returned tree is never mutated, so cached trees are safe to share
    between threads.

    Raises:
        ExpressionError: If the expression is empty, malformed or uses
            unsupported syntax.
    """
    source = expression.strip().replace("^", "**")
    if not source:
        raise ExpressionError("Empty expression")

    try:
        tree = ast.parse(source, mode="eval")
    except SyntaxError as e:
        raise ExpressionError(f"Invalid expression '{expression}': {e.msg}") from e

    for node in ast.walk(tree):
        if not isinstance(node, _ALLOWED_NODES):
            raise ExpressionError(
                f"Unsupported syntax '{type(node).__name__}' in expression '{expression}'"
            )
        if isinstance(node, ast.Constant) and (
            isinstance(node.value, bool) or not isinstance(node.value, (int, float))
        ):
            raise ExpressionError(f"Unsupported literal {node.value!r} in expression '{expression}'")
        if isinstance(node, ast.Call):
            if not isinstance(node.func, ast.Name) or node.func.id not in FUNCTIONS:
                name = node.func.id if isinstance(node.func, ast.Name) else "<expression>"
                raise ExpressionError(f"Unknown function '{name}' in expression '{expression}'")
            if node.keywords:
                raise ExpressionError(f"Keyword arguments are not supported: '{expression}'")

    return tree


def extract_variables(expression: str) -> set[str]:
    """Return the free variable names used by an expression."""
    tree = parse_expression(expression)
    called = {
        node.func.id
        for node in ast.walk(tree)
        if isinstance(node, ast.Call) and isinstance(node.func, ast.Name)
    }
    return {
        node.id
        for node in ast.walk(tree)
        if isinstance(node, ast.Name) and node.id not in called and node.id not in CONSTANTS
    }


def evaluate_expression(
    expression: str,
    variables: Optional[Mapping[str, float]] = None,
) -> float:
    """
    Evaluate an arithmetic expression.

    Args:
        expression: Expression text, e.g. ``"2 * (x + 1) ^ 2"``
        variables: Values of the free variables

    Returns:
        The numeric result

    Raises:
        ExpressionError: On syntax errors, unknown names or arithmetic failures
    """
    tree = parse_expression(expression)
    try:
        return float(_evaluate_node(tree.body, variables or {}))
    except ExpressionError:
        raise
    except (ArithmeticError, ValueError, TypeError) as e:
        raise ExpressionError(f"Cannot evaluate '{expression}': {e}") from e


def _evaluate_node(node: ast.AST, variables: Mapping[str, float]) -> Any:
    if isinstance(node, ast.Constant):
        return float(node.value)
    if isinstance(node, ast.Name):
        if node.id in variables:
            return float(variables[node.id])
        if node.id in CONSTANTS:
            return CONSTANTS[node.id]
        raise ExpressionError(f"Unknown variable '{node.id}'")
    if isinstance(node, ast.BinOp):
        left = _evaluate_node(node.left, variables)
        right = _evaluate_node(node.right, variables)
        return _BINARY_OPERATORS[type(node.op)](left, right)
    if isinstance(node, ast.UnaryOp):
        return _UNARY_OPERATORS[type(node.op)](_evaluate_node(node.operand, variables))
    if isinstance(node, ast.Call):
        args = [_evaluate_node(arg, variables) for arg in node.args]
        return FUNCTIONS[node.func.id](*args)
    raise ExpressionError(f"Unsupported syntax '{type(node).__name__}'")
