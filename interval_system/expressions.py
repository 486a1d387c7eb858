"""
Affine Size Expressions

Rule sizes may be written as affine combinations of previously matched rule
names, e.g. "2*A + 5" or "80 - A - 10". The text is parsed with the standard
`ast` module and folded into a tiny tagged AST:

    Literal(value)            - a number
    Variable(name)            - length of the interval/space bound to `name`
    Sum(terms)                - terms added together
    Scale(factor, operand)    - operand multiplied by a constant

Anything that is not single-degree in its variables (A*B, A/B, A**2, calls,
comparisons...) is rejected at parse time with NonLinearExpressionError, so
both the matcher (evaluation) and the repair engine (coefficient extraction)
can rely on the affine shape.
"""

import ast
import functools
from dataclasses import dataclass
from typing import Tuple


class ExpressionError(ValueError):
    """Base class for malformed size expressions."""


class NonLinearExpressionError(ExpressionError):
    """The expression is not an affine combination of rule names."""


class UnboundNameError(ExpressionError, KeyError):
    """The expression references a rule name that has not been bound yet."""

    def __str__(self):
        return Exception.__str__(self)


@dataclass(frozen=True)
class Literal:
    value: float


@dataclass(frozen=True)
class Variable:
    name: str


@dataclass(frozen=True)
class Sum:
    terms: Tuple


@dataclass(frozen=True)
class Scale:
    factor: float
    operand: object


def _is_constant(node):
    if isinstance(node, Literal):
        return True
    if isinstance(node, Variable):
        return False
    if isinstance(node, Sum):
        return all(_is_constant(t) for t in node.terms)
    return _is_constant(node.operand)


def _scale(factor, node):
    if isinstance(node, Literal):
        return Literal(factor * node.value)
    if isinstance(node, Scale):
        return Scale(factor * node.factor, node.operand)
    return Scale(factor, node)


def _add(left, right):
    if isinstance(left, Literal) and isinstance(right, Literal):
        return Literal(left.value + right.value)
    left_terms = left.terms if isinstance(left, Sum) else (left,)
    right_terms = right.terms if isinstance(right, Sum) else (right,)
    return Sum(left_terms + right_terms)


def _convert(node, source):
    if isinstance(node, ast.Expression):
        return _convert(node.body, source)

    if isinstance(node, ast.Constant):
        if isinstance(node.value, bool) or not isinstance(node.value, (int, float)):
            raise NonLinearExpressionError(f"Unsupported constant {node.value!r} in '{source}'")
        return Literal(node.value)

    if isinstance(node, ast.Name):
        return Variable(node.id)

    if isinstance(node, ast.UnaryOp):
        operand = _convert(node.operand, source)
        if isinstance(node.op, ast.USub):
            return _scale(-1, operand)
        if isinstance(node.op, ast.UAdd):
            return operand

    if isinstance(node, ast.BinOp):
        left = _convert(node.left, source)
        right = _convert(node.right, source)

        if isinstance(node.op, ast.Add):
            return _add(left, right)

        if isinstance(node.op, ast.Sub):
            return _add(left, _scale(-1, right))

        if isinstance(node.op, ast.Mult):
            # One side must be constant, otherwise the term would be of degree 2
            if _is_constant(left):
                return _scale(evaluate_expression(left, {}), right)
            if _is_constant(right):
                return _scale(evaluate_expression(right, {}), left)
            raise NonLinearExpressionError(f"Product of two variable terms in '{source}'")

        if isinstance(node.op, ast.Div):
            if not _is_constant(right):
                raise NonLinearExpressionError(f"Division by a variable term in '{source}'")
            divisor = evaluate_expression(right, {})
            if divisor == 0:
                raise ExpressionError(f"Division by zero in '{source}'")
            return _scale(1 / divisor, left)

    raise NonLinearExpressionError(f"Unsupported syntax ({type(node).__name__}) in '{source}'")


@functools.lru_cache(maxsize=512)
def parse_expression(text):
    """
    Parse an affine expression over rule names.

    Args:
        text: Expression source, e.g. "2*A + 5"

    Returns:
        Expression AST node (Literal, Variable, Sum or Scale)

    Raises:
        ExpressionError: The text is not a valid expression
        NonLinearExpressionError: The expression is not affine
    """
    try:
        tree = ast.parse(text.strip(), mode="eval")
    except SyntaxError as e:
        raise ExpressionError(f"Invalid expression '{text}': {e.msg}") from e
    return _convert(tree, text)


def as_expression(size):
    """Coerce a rule size (number, text or AST node) to an AST node."""
    if isinstance(size, bool):
        raise ExpressionError(f"Invalid size {size!r}")
    if isinstance(size, (int, float)):
        return Literal(size)
    if isinstance(size, str):
        return parse_expression(size)
    if isinstance(size, (Literal, Variable, Sum, Scale)):
        return size
    raise ExpressionError(f"Invalid size {size!r}")


def evaluate_expression(expr, env):
    """
    Evaluate a size against an environment of bound lengths.

    Args:
        expr: Number, expression text or AST node
        env: Mapping of rule name -> length of the interval bound to it

    Returns:
        float value of the expression

    Raises:
        UnboundNameError: A referenced name is missing from `env`
    """
    node = as_expression(expr)

    if isinstance(node, Literal):
        return node.value
    if isinstance(node, Variable):
        if node.name not in env:
            raise UnboundNameError(f"Rule name '{node.name}' is not bound yet")
        return env[node.name]
    if isinstance(node, Sum):
        return sum(evaluate_expression(t, env) for t in node.terms)
    return node.factor * evaluate_expression(node.operand, env)


def extract_coefficients(expr):
    """
    Transform an expression like `A + 2*B + B + 5` into ({'A': 1, 'B': 3}, 5).

    Names whose coefficients cancel out are dropped.
    """
    node = as_expression(expr)
    coefficients = {}
    constant = 0

    def visit(n, factor):
        nonlocal constant
        if isinstance(n, Literal):
            constant += factor * n.value
        elif isinstance(n, Variable):
            coefficients[n.name] = coefficients.get(n.name, 0) + factor
        elif isinstance(n, Sum):
            for t in n.terms:
                visit(t, factor)
        else:
            visit(n.operand, factor * n.factor)

    visit(node, 1)
    return {name: c for name, c in coefficients.items() if c != 0}, constant
