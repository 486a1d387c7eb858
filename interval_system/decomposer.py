"""
Expression Decomposer

Rewrites an affine size expression over rule NAMES into coefficients over the
per-rule endpoint variables used by the LP model.

Example, with the rules

    [ {interval: 'A', following_space: 'B'},
      {interval: 'C', following_space: 'D'} ]

the expression `2*B + C + 7 + B` (i.e. 0A + 3B + 1C + 0D + 7) becomes

    {'rule0_to': -3, 'rule1_from': 2, 'rule1_to': 1}, constant 7

because
    B = C.from - A.to = rule1_from - rule0_to
    C = C.to - C.from = rule1_to - rule1_from
"""

from interval_system.expressions import extract_coefficients

FROM = "from"
TO = "to"


def endpoint_variable(rule_idx, side):
    """Canonical LP variable name of a rule endpoint ('rule<k>_from' / 'rule<k>_to')."""
    return f"rule{rule_idx}_{side}"


def _add_coefficient(coefficients, name, value):
    coefficients[name] = coefficients.get(name, 0) + value


def decompose(expr, pattern):
    """
    Decompose a size expression into endpoint-variable coefficients.

    Args:
        expr: Number, expression text or AST node
        pattern: List of Rule objects giving meaning to the names

    Returns:
        tuple: (coefficients dict variable -> number, constant)
    """
    by_name, constant = extract_coefficients(expr)
    result = {}

    for k, rule in enumerate(pattern):
        name = rule.interval.name
        if name != '' and by_name.get(name, 0) != 0:
            _add_coefficient(result, endpoint_variable(k, TO), by_name[name])
            _add_coefficient(result, endpoint_variable(k, FROM), -by_name[name])

        if rule.following_space is not None:
            space_name = rule.following_space.name
            if space_name != '' and by_name.get(space_name, 0) != 0:
                _add_coefficient(result, endpoint_variable(k, TO), -by_name[space_name])
                _add_coefficient(result, endpoint_variable(k + 1, FROM), by_name[space_name])

    return {name: c for name, c in result.items() if c != 0}, constant
