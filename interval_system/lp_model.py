r"""
LP Model Builder

Turns a pattern into a linear program over two variables per rule,
`rule<k>_from` and `rule<k>_to`:

    /
    |   rule0_from                        >=  rule0.interval.from.lower_bound
    |   rule0_from                        <=  rule0.interval.from.upper_bound
    |                rule0_to             >=  rule0.interval.to.lower_bound
    |                rule0_to             <=  rule0.interval.to.upper_bound
   /  - rule0_from + rule0_to - (minSize)  >=  constant(minSize)
   \  - rule0_from + rule0_to - (maxSize)  <=  constant(maxSize)
    |              - rule0_to + rule1_from - (minSize) >= constant(space minSize)
    |              - rule0_to + rule1_from - (maxSize) <= constant(space maxSize)
    |                          ....
    |              (repeat for rule1 and so on)
    \

Sizes are decomposed into endpoint coefficients first (see decomposer.py) and
moved to the left-hand side. The objective pulls endpoints towards reference
targets with an L1 distance, linearised with one auxiliary variable per term:

    min |x - target|    ==    min t,  x - t <= target,  x + t >= target,  t >= 0

Rules with a free endpoint (neither targeted nor pinned) also carry their
length in the objective, so unconstrained intervals stay as short as possible.
"""

import math
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from interval_system.decomposer import FROM, TO, decompose, endpoint_variable

LE = "<="
GE = ">="
EQ = "=="


@dataclass
class LinearConstraint:
    coefficients: Dict[str, float]
    sense: str  # one of LE, GE, EQ
    rhs: float
    name: str = ""


@dataclass
class LinearProgram:
    """Solver-neutral minimisation problem."""
    variables: Dict[str, Optional[float]] = field(default_factory=dict)  # name -> lower bound (None = free)
    objective: Dict[str, float] = field(default_factory=dict)
    constraints: List[LinearConstraint] = field(default_factory=list)
    rule_count: int = 0

    def add_variable(self, name, lower_bound=None):
        if name not in self.variables:
            self.variables[name] = lower_bound

    def add_constraint(self, coefficients, sense, rhs, name=""):
        for var in coefficients:
            self.add_variable(var)
        self.constraints.append(LinearConstraint(dict(coefficients), sense, rhs, name))

    def add_objective_term(self, var, weight):
        self.add_variable(var)
        self.objective[var] = self.objective.get(var, 0) + weight


def _merge(coefficients, extra):
    merged = dict(coefficients)
    for var, value in extra.items():
        merged[var] = merged.get(var, 0) + value
    return {var: c for var, c in merged.items() if c != 0}


def _add_size_constraints(program, pattern, size, length_terms, sense, name):
    """
    Add `length - size <= / >= constant(size)` where `length_terms` are the
    endpoint coefficients of the constrained length.
    """
    coefficients, constant = decompose(size, pattern)
    if sense == GE and constant == -math.inf:
        return
    if sense == LE and constant == math.inf:
        return
    if math.isinf(constant):
        # e.g. min_size = inf: nothing can ever satisfy it
        program.add_constraint({}, sense, constant, name)
        return

    lhs = _merge(length_terms, {var: -c for var, c in coefficients.items()})
    program.add_constraint(lhs, sense, constant, name)


def _add_bound_constraints(program, var, bound, name):
    if bound is None:
        return
    if bound.lower_bound is not None and bound.lower_bound > -math.inf:
        program.add_constraint({var: 1}, GE, bound.lower_bound, f"{name}_lower")
    if bound.upper_bound is not None and bound.upper_bound < math.inf:
        program.add_constraint({var: 1}, LE, bound.upper_bound, f"{name}_upper")


def _add_absolute_term(program, var, target, weight):
    aux = f"absDiff_{var}"
    program.add_variable(aux, lower_bound=0)
    program.add_constraint({var: 1, aux: -1}, LE, target, f"{aux}_upper")
    program.add_constraint({var: 1, aux: 1}, GE, target, f"{aux}_lower")
    program.add_objective_term(aux, weight)


def build_model(pattern, targets=None, pinned=None, ordered=False, config=None):
    """
    Build the linear program for a pattern.

    Args:
        pattern: List of Rule objects
        targets: Dict of (rule_idx, side) -> reference value the endpoint is
            pulled towards (soft, L1)
        pinned: Dict of (rule_idx, side) -> value the endpoint must equal (hard)
        ordered: If True, add `rule<k>_from - rule<k-1>_to >= 0` so generated
            intervals stay in sequence (high precision strategy)
        config: Configuration dictionary (objective weights)

    Returns:
        LinearProgram
    """
    config = config or {}
    targets = targets or {}
    pinned = pinned or {}

    FROM_WEIGHT = config.get("FROM_ENDPOINT_WEIGHT", 2.0)
    TO_WEIGHT = config.get("TO_ENDPOINT_WEIGHT", 1.0)
    LENGTH_WEIGHT = config.get("LENGTH_WEIGHT", 1.0)
    TIE_BREAK_WEIGHT = config.get("POSITION_TIE_BREAK_WEIGHT", 0.001)

    program = LinearProgram(rule_count=len(pattern))
    for k in range(len(pattern)):
        program.add_variable(endpoint_variable(k, FROM))
        program.add_variable(endpoint_variable(k, TO))

    #================================== OBJECTIVE ==================================
    for k in range(len(pattern)):
        free_endpoint = False
        for side, weight in ((FROM, FROM_WEIGHT), (TO, TO_WEIGHT)):
            var = endpoint_variable(k, side)
            if (k, side) in pinned:
                continue
            if (k, side) in targets:
                _add_absolute_term(program, var, targets[(k, side)], weight)
            else:
                free_endpoint = True

        if free_endpoint:
            # Minimise the size of the interval: rule(k)_to - rule(k)_from
            program.add_objective_term(endpoint_variable(k, TO), LENGTH_WEIGHT)
            program.add_objective_term(endpoint_variable(k, FROM), -LENGTH_WEIGHT + TIE_BREAK_WEIGHT)

    #================================== CONSTRAINTS ==================================
    for k, rule in enumerate(pattern):
        var_from = endpoint_variable(k, FROM)
        var_to = endpoint_variable(k, TO)

        _add_bound_constraints(program, var_from, rule.interval.from_bound, f"rule{k}_from_bound")
        _add_bound_constraints(program, var_to, rule.interval.to_bound, f"rule{k}_to_bound")

        length_terms = {var_from: -1, var_to: 1}
        _add_size_constraints(program, pattern, rule.interval.min_size, length_terms, GE, f"rule{k}_min_size")
        _add_size_constraints(program, pattern, rule.interval.max_size, length_terms, LE, f"rule{k}_max_size")

        if rule.following_space is not None:
            # The trailing space of the last rule is measured against rule<n>_from,
            # the start of whatever follows the pattern
            space_terms = {var_to: -1, endpoint_variable(k + 1, FROM): 1}
            _add_size_constraints(program, pattern, rule.following_space.min_size, space_terms, GE, f"space{k}_min_size")
            _add_size_constraints(program, pattern, rule.following_space.max_size, space_terms, LE, f"space{k}_max_size")

        if ordered and k >= 1:
            program.add_constraint({var_from: 1, endpoint_variable(k - 1, TO): -1}, GE, 0, f"rule{k}_order")

    # Positivity of rule(k)_from and of the interval length
    for k in range(len(pattern)):
        var_from = endpoint_variable(k, FROM)
        var_to = endpoint_variable(k, TO)
        program.add_constraint({var_from: 1}, GE, 0, f"rule{k}_from_positive")
        program.add_constraint({var_to: 1, var_from: -1}, GE, 0, f"rule{k}_length_positive")

    # Sticky endpoints
    for (k, side), value in sorted(pinned.items()):
        program.add_constraint({endpoint_variable(k, side): 1}, EQ, value, f"rule{k}_{side}_pinned")

    return program
