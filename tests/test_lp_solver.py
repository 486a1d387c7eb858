import math

import pytest
from ortools.linear_solver import pywraplp

from interval_system.lp_model import GE, LinearProgram, build_model
from interval_system.lp_solver import extract_intervals, solve_program
from tests.helpers import TWICE_A_PATTERN, rule


def test_solve_returns_rounded_endpoint_values():
    values = solve_program(build_model(TWICE_A_PATTERN))
    assert extract_intervals(values, 2) == [(150, 300), (500, 800)]


def test_infeasible_program_returns_none():
    assert solve_program(build_model([rule("A", 10, 5)])) is None


def test_constant_row_short_circuits_before_solving():
    calls = []
    program = build_model([rule("A", math.inf)])
    assert solve_program(program, {"SOLVE_CALLBACK": lambda *args: calls.append(args)}) is None
    assert calls == []


def test_solve_callback_sees_every_solve():
    calls = []
    config = {"SOLVE_CALLBACK": lambda solver, status, pass_name: calls.append((status, pass_name))}
    solve_program(build_model(TWICE_A_PATTERN), config)
    solve_program(build_model([rule("A", 10, 5)]), config)
    assert [pass_name for _, pass_name in calls] == ["2 rules", "1 rules"]
    assert calls[0][0] == pywraplp.Solver.OPTIMAL
    assert calls[1][0] not in (pywraplp.Solver.OPTIMAL, pywraplp.Solver.FEASIBLE)


def test_free_variables_may_go_negative():
    program = LinearProgram()
    program.add_constraint({"x": 1}, GE, -5, "x_lower")
    program.add_objective_term("x", 1)
    assert solve_program(program) == {"x": -5}


def test_unknown_backend_raises():
    with pytest.raises(RuntimeError):
        solve_program(build_model([rule("A")]), {"SOLVER_BACKEND": "NO_SUCH_SOLVER"})
