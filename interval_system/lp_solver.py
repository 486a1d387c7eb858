"""
Linear Solver Adapter

Solves a LinearProgram (see lp_model.py) with the OR-Tools linear solver
wrapper. GLOP is the default backend; any backend id accepted by
`pywraplp.Solver.CreateSolver` can be configured with SOLVER_BACKEND.
"""

import math

from ortools.linear_solver import pywraplp

from interval_system.lp_model import EQ, GE, LE
from utils import verbose_print


def _constant_constraint_holds(sense, rhs):
    # A constraint whose variables all cancelled out reads `0 <sense> rhs`
    if sense == LE:
        return 0 <= rhs
    if sense == GE:
        return 0 >= rhs
    return rhs == 0


def solve_program(program, config=None):
    """
    Solve a linear program.

    Args:
        program: LinearProgram to minimise
        config: Configuration dictionary (SOLVER_BACKEND, SOLUTION_DIGITS,
            SOLVE_CALLBACK, VERBOSE)

    Returns:
        dict of variable name -> value, or None if the program is infeasible

    Raises:
        RuntimeError: The configured backend is not available
    """
    config = config or {}
    backend = config.get("SOLVER_BACKEND", "GLOP")
    digits = config.get("SOLUTION_DIGITS", 9)

    for c in program.constraints:
        if not c.coefficients and not _constant_constraint_holds(c.sense, c.rhs):
            verbose_print(config, f"[LP Solver] Constraint '{c.name}' can never hold")
            return None

    solver = pywraplp.Solver.CreateSolver(backend)
    if solver is None:
        raise RuntimeError(f"Linear solver backend '{backend}' is not available")

    infinity = solver.infinity()
    variables = {}
    for name, lower_bound in program.variables.items():
        variables[name] = solver.NumVar(-infinity if lower_bound is None else lower_bound, infinity, name)

    for c in program.constraints:
        if not c.coefficients:
            continue
        if c.sense == LE:
            row = solver.Constraint(-infinity, c.rhs, c.name)
        elif c.sense == GE:
            row = solver.Constraint(c.rhs, infinity, c.name)
        elif c.sense == EQ:
            row = solver.Constraint(c.rhs, c.rhs, c.name)
        else:
            raise ValueError(f"Unknown constraint sense '{c.sense}'")
        for var, coefficient in c.coefficients.items():
            row.SetCoefficient(variables[var], coefficient)

    objective = solver.Objective()
    for var, weight in program.objective.items():
        objective.SetCoefficient(variables[var], weight)
    objective.SetMinimization()

    status = solver.Solve()

    # Driver hook, e.g. for diagnostics files: (solver, status, pass_name)
    solve_callback = config.get("SOLVE_CALLBACK")
    if solve_callback is not None:
        solve_callback(solver, status, f"{program.rule_count} rules")

    if status not in (pywraplp.Solver.OPTIMAL, pywraplp.Solver.FEASIBLE):
        verbose_print(config, f"[LP Solver] No solution (status {status})")
        return None

    values = {}
    for name, var in variables.items():
        value = round(var.solution_value(), digits)
        values[name] = 0.0 if value == 0 else value  # normalise -0.0
    return values


def extract_intervals(values, rule_count):
    """Read the (start, end) pairs of every rule from a solution."""
    pairs = []
    for k in range(rule_count):
        start = values[f"rule{k}_from"]
        end = values[f"rule{k}_to"]
        if math.isclose(start, end) and end < start:
            end = start
        pairs.append((start, end))
    return pairs
