# export_debug.py
"""
Debug and diagnostic export functions for solver analysis.
Includes linear solver diagnostics and the repair search trace.
"""

import os
from datetime import datetime
from ortools.linear_solver import pywraplp


STATUS_NAMES = {
    pywraplp.Solver.OPTIMAL: "OPTIMAL",
    pywraplp.Solver.FEASIBLE: "FEASIBLE",
    pywraplp.Solver.INFEASIBLE: "INFEASIBLE",
    pywraplp.Solver.UNBOUNDED: "UNBOUNDED",
    pywraplp.Solver.ABNORMAL: "ABNORMAL",
    pywraplp.Solver.NOT_SOLVED: "NOT_SOLVED",
}


def write_solver_diagnostics(solver, status, pass_name="", output_dir=None):
    """
    Append a diagnostics block for one linear solve to solver_diagnostics.txt.

    Args:
        solver: pywraplp.Solver instance after solving
        status: Solve status code
        pass_name: Label of the solve (e.g., "2 rules")
        output_dir: Directory to write diagnostics file (current directory if None)
    """
    diagnostics_path = os.path.join(output_dir or ".", "solver_diagnostics.txt")
    os.makedirs(os.path.dirname(diagnostics_path), exist_ok=True)

    lines = []
    lines.append("")
    lines.append("=" * 100)
    lines.append(f"SOLVER DIAGNOSTICS - {pass_name}")
    lines.append(f"Generated: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}")
    lines.append("=" * 100)

    # ==================== BASIC STATISTICS ====================
    lines.append("")
    lines.append("BASIC STATISTICS:")
    lines.append(f"   Status:              {STATUS_NAMES.get(status, status)}")
    lines.append(f"   Wall time:           {solver.wall_time()} ms")
    lines.append(f"   Iterations:          {solver.iterations():,}")

    # ==================== MODEL SIZE ====================
    lines.append("")
    lines.append("MODEL SIZE:")
    lines.append(f"   Variables:           {solver.NumVariables():,}")
    lines.append(f"   Constraints:         {solver.NumConstraints():,}")

    # ==================== OBJECTIVE INFORMATION ====================
    if status in (pywraplp.Solver.OPTIMAL, pywraplp.Solver.FEASIBLE):
        lines.append("")
        lines.append("OBJECTIVE:")
        lines.append(f"   Value:               {solver.Objective().Value():,.6f}")
        if status == pywraplp.Solver.OPTIMAL:
            lines.append("   [OPTIMAL] - Proven best solution!")
        else:
            lines.append("   [FEASIBLE] - Not proven optimal")
    elif status == pywraplp.Solver.INFEASIBLE:
        lines.append("")
        lines.append("   [INFEASIBLE] - The rules' hard bounds and sizes contradict each other")
        lines.append("   (or the pinned endpoints do)")

    lines.append("=" * 100)
    lines.append("")

    # Append mode to capture every solve of a search
    with open(diagnostics_path, "a", encoding="utf-8") as f:
        f.write("\n".join(lines))


def write_search_trace(trace, output_dir=None, pass_name=""):
    """
    Exports every candidate tried by the repair search in a scannable table.

    Args:
        trace: List of dicts appended by the suggest strategies
            (step, pinned, feasible, error, kept)
        output_dir: Directory to write file
        pass_name: Name of the strategy (e.g., "simple", "high_precision")

    Returns:
        str: Path of the written file
    """
    filename = f"search_trace_{pass_name}.txt" if pass_name else "search_trace.txt"
    filepath = os.path.join(output_dir, filename) if output_dir else filename

    with open(filepath, 'w', encoding='utf-8') as f:
        f.write("=" * 120 + "\n")
        f.write(f"REPAIR SEARCH TRACE - {pass_name.upper()}\n")
        f.write(f"Generated: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}\n")
        f.write("=" * 120 + "\n\n")

        f.write(f"{'Step':>5s} | {'Feasible':>8s} | {'Kept':>4s} | {'Error':<50s} | Pinned\n")
        f.write("-" * 120 + "\n")

        for entry in trace:
            pinned = ", ".join(f"r{k}.{side}={value:g}" for (k, side), value in sorted(entry["pinned"].items()))
            error = str(entry["error"]) if entry["error"] is not None else "-"
            f.write(f"{entry['step']:>5d} | {str(entry['feasible']):>8s} | {'*' if entry['kept'] else '':>4s} | "
                    f"{error:<50s} | {pinned or '(none)'}\n")

        f.write("\n" + "=" * 120 + "\n")
        kept = sum(1 for e in trace if e["kept"])
        infeasible = sum(1 for e in trace if not e["feasible"])
        f.write(f"Candidates: {len(trace)} | Improvements kept: {kept} | Infeasible: {infeasible}\n")

    return filepath
