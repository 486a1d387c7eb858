import math

import pytest

from interval_system.expressions import (
    ExpressionError,
    Literal,
    NonLinearExpressionError,
    UnboundNameError,
    Variable,
    evaluate_expression,
    extract_coefficients,
    parse_expression,
)


@pytest.mark.parametrize(
    "text, env, expected",
    [
        ("498 + (-1 * -2)", {}, 500),
        ("2*A", {"A": 160}, 320),
        ("80 - A - 10", {"A": 57}, 13),
        ("A * 0.5", {"A": 20}, 10),
        ("(A + B) / 2", {"A": 4, "B": 6}, 5),
        ("-A + 3", {"A": 1}, 2),
        ("+A", {"A": 7}, 7),
    ],
)
def test_evaluate_affine_expressions(text, env, expected):
    assert evaluate_expression(text, env) == pytest.approx(expected)


def test_numbers_are_literals():
    assert evaluate_expression(500, {}) == 500
    assert evaluate_expression(math.inf, {}) == math.inf


def test_constant_subtrees_are_folded():
    assert parse_expression("498 + (-1 * -2)") == Literal(500)
    assert parse_expression("A") == Variable("A")


@pytest.mark.parametrize("text", ["A * B", "A / B", "A ** 2", "max(A, 3)", "A < 3", "'x'"])
def test_non_affine_expressions_fail_at_parse_time(text):
    with pytest.raises(NonLinearExpressionError):
        parse_expression(text)


def test_syntax_errors_are_expression_errors():
    with pytest.raises(ExpressionError):
        parse_expression("2 * (A")


def test_division_by_zero_is_rejected():
    with pytest.raises(ExpressionError):
        parse_expression("A / (3 - 3)")


def test_unbound_name_raises():
    with pytest.raises(UnboundNameError):
        evaluate_expression("2*A + C", {"A": 1})
    # Still catchable as a plain lookup error
    with pytest.raises(KeyError):
        evaluate_expression("C", {})


def test_extract_coefficients_merges_repeated_names():
    assert extract_coefficients("2*B + C + 7 + B") == ({"B": 3, "C": 1}, 7)


def test_extract_coefficients_drops_cancelled_names():
    assert extract_coefficients("A - A + 4") == ({}, 4)


def test_extract_coefficients_of_literal():
    assert extract_coefficients(12.5) == ({}, 12.5)
    assert extract_coefficients("80 - A - 10") == ({"A": -1}, 70)
