# export_reports.py
"""
Report generation functions for match and suggestion results.
Includes a multi-sheet Excel export and a human-readable text report.
"""

import collections
import pandas as pd

from data_models import is_space_interval, sort_intervals
from interval_system.interval_diff import default_error_measure, non_intersecting_intervals
from interval_system.suggest import associate_references


def match_result_frame(result):
    """One row per bound group, in rule order."""
    records = []
    # Repeated names (e.g. several unnamed rules) keep only their last binding in groups
    names = {id(interval): name for name, interval in result.groups.items()}
    for position, interval in enumerate(result.ordered_result):
        records.append({
            "position": position,
            "group": names.get(id(interval), ""),
            "kind": "space" if is_space_interval(interval) else "interval",
            "start": interval.start,
            "end": interval.end,
            "length": interval.length(),
            "data": interval.data,
        })
    return pd.DataFrame(records, columns=["position", "group", "kind", "start", "end", "length", "data"])


def suggestion_frame(pattern, suggestion, references):
    """
    Compare every suggested interval with the reference it was associated with.

    Args:
        pattern: List of Rule objects
        suggestion: List of Interval objects (one per rule)
        references: Reference intervals, sorted

    Returns:
        DataFrame with one row per rule
    """
    association = associate_references(suggestion, references)
    records = []
    for k, interval in enumerate(suggestion):
        reference = association.get(k)
        records.append({
            "rule": k,
            "name": pattern[k].interval.name,
            "start": interval.start,
            "end": interval.end,
            "length": interval.length(),
            "ref_start": reference.start if reference else None,
            "ref_end": reference.end if reference else None,
            "start_shift": interval.start - reference.start if reference else None,
            "end_shift": interval.end - reference.end if reference else None,
        })
    return pd.DataFrame(records, columns=["rule", "name", "start", "end", "length",
                                          "ref_start", "ref_end", "start_shift", "end_shift"])


def error_frame(suggestion, references):
    """Regions where the suggestion and the references disagree."""
    gaps = non_intersecting_intervals(suggestion, references)
    return pd.DataFrame([{"start": g.start, "end": g.end, "length": g.length()} for g in gaps],
                        columns=["start", "end", "length"])


def write_report(filename, pattern, references, result, suggestion):
    """
    Multi-sheet Excel file: match groups, and when a suggestion exists, the
    per-rule comparison and the disagreement regions.
    """
    references = sort_intervals(references)
    sheets = collections.OrderedDict()
    sheets["match"] = match_result_frame(result)
    if suggestion is not None:
        sheets["suggestion"] = suggestion_frame(pattern, suggestion, references)
        sheets["errors"] = error_frame(suggestion, references)

    with pd.ExcelWriter(filename, engine='openpyxl') as writer:
        for sheet_name, df in sheets.items():
            df.to_excel(writer, sheet_name=sheet_name, index=False)
    return filename


def human_readable_report(output_file, pattern, references, result, suggestion):
    """
    Writes a plain text summary of the run.

    Returns:
        The default error measure of the suggestion, or None
    """
    references = sort_intervals(references)
    error = None

    with open(output_file, 'w', encoding='utf-8') as f:
        f.write("=" * 80 + "\n")
        f.write("INTERVAL MATCH REPORT\n")
        f.write("=" * 80 + "\n\n")
        f.write(f"Rules: {len(pattern)} | Intervals: {len(references)}\n")
        f.write(f"Match: {'SUCCESS' if result.success else 'FAILED'}\n\n")

        label = "Bound groups" if result.success else "Longest partial match"
        f.write(f"{label}:\n")
        if result.groups:
            f.write(match_result_frame(result).to_string(index=False) + "\n")
        else:
            f.write("   (none)\n")

        if not result.success:
            f.write("\n" + "-" * 80 + "\n")
            if suggestion is None:
                f.write("SUGGESTION: none - the rules cannot be satisfied by any interval set\n")
            else:
                error = default_error_measure(suggestion, references)
                f.write("SUGGESTION:\n")
                f.write(suggestion_frame(pattern, suggestion, references).to_string(index=False) + "\n\n")
                f.write(f"Total disagreement: {error[0]:g} over {error[1]} region(s), "
                        f"{-error[2]} exact endpoint(s)\n")

    return error
