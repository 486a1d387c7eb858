# main.py
import math
import os
import pandas as pd
from data_models import EndpointBound, Interval, IntervalRule, Rule, SpaceRule
from interval_system import choose_strategy, match, suggest
from utils import flush_print, create_output_folder, load_config
from export_reports import write_report, human_readable_report
from export_debug import write_search_trace, write_solver_diagnostics


RULE_COLUMNS = ['name', 'from_lower', 'from_upper', 'to_lower', 'to_upper',
                'min_size', 'max_size', 'space_name', 'space_min', 'space_max']
INTERVAL_COLUMNS = ['start', 'end', 'data']


def parse_size(value, default):
    """Numbers stay numbers ('inf' included); anything else is an expression."""
    if value is None or (not isinstance(value, str) and pd.isna(value)):
        return default
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return default
        try:
            return float(text)
        except ValueError:
            return text
    return float(value)


def parse_bound(lower, upper):
    lower = None if pd.isna(lower) else float(lower)
    upper = None if pd.isna(upper) else float(upper)
    if lower is None and upper is None:
        return None
    return EndpointBound(lower_bound=lower, upper_bound=upper)


def read_table(path, columns):
    """Read a CSV file; a missing or empty file yields an empty table."""
    try:
        df = pd.read_csv(path, dtype=str, keep_default_na=False, na_values=[''])
        print(f"Successfully loaded {path}")
    except FileNotFoundError:
        print(f"WARNING: {path} not found. Continuing with an empty table.")
        df = pd.DataFrame(columns=columns)
    except pd.errors.EmptyDataError:
        print(f"WARNING: {path} is empty. Continuing with an empty table.")
        df = pd.DataFrame(columns=columns)

    for column in columns:
        if column not in df.columns:
            df[column] = None
    return df


def load_data(config):
    # Data folder path (change this to switch between data sets)
    DATA_FOLDER = config.get("DATA_FOLDER", "data")

    df_rules = read_table(os.path.join(DATA_FOLDER, config.get("RULES_FILE", "rules.csv")), RULE_COLUMNS)
    df_intervals = read_table(os.path.join(DATA_FOLDER, config.get("INTERVALS_FILE", "intervals.csv")), INTERVAL_COLUMNS)

    pattern = []
    for _, row in df_rules.iterrows():
        name = row['name'] if pd.notna(row['name']) else ''

        following_space = None
        if pd.notna(row['space_name']):
            following_space = SpaceRule(
                name=row['space_name'],
                min_size=parse_size(row['space_min'], 0),
                max_size=parse_size(row['space_max'], math.inf)
            )

        pattern.append(Rule(
            interval=IntervalRule(
                name=name,
                from_bound=parse_bound(row['from_lower'], row['from_upper']),
                to_bound=parse_bound(row['to_lower'], row['to_upper']),
                min_size=parse_size(row['min_size'], 0),
                max_size=parse_size(row['max_size'], math.inf)
            ),
            following_space=following_space
        ))

    intervals = []
    for _, row in df_intervals.iterrows():
        intervals.append(Interval(
            start=float(row['start']),
            end=float(row['end']),
            data=row['data'] if pd.notna(row['data']) else None
        ))

    print(f"Loaded {len(pattern)} rules")
    print(f"Loaded {len(intervals)} intervals")
    return pattern, intervals


def run(config):
    """
    Match the configured data set and, if it does not conform, suggest a repair.

    Returns:
        tuple: (MatchResult, suggestion list or None, output folder path)
    """
    pattern, intervals = load_data(config)

    engine_config = dict(config)
    SOLVER_DIAGNOSTICS_DIR = config.get("SOLVER_DIAGNOSTICS_DIR")
    if SOLVER_DIAGNOSTICS_DIR:
        engine_config["SOLVE_CALLBACK"] = lambda solver, status, pass_name: write_solver_diagnostics(
            solver, status, pass_name=pass_name, output_dir=SOLVER_DIAGNOSTICS_DIR)

    print("\n" + "=" * 80)
    print("MATCHING")
    print("=" * 80)
    result = match(pattern, intervals, ordered=config.get("ORDERED", False), config=engine_config)
    print(f"Match success: {result.success} ({len(result.groups)} groups bound)")
    for name, interval in result.groups.items():
        print(f"   {name or '(unnamed)'}: [{interval.start:g}, {interval.end:g})")

    suggestion = None
    trace = []
    strategy = "match"
    if not result.success:
        strategy = choose_strategy(pattern, intervals, config.get("MAX_COST", 0))
        print("\n" + "=" * 80)
        print(f"SUGGESTING ({strategy})")
        print("=" * 80)
        suggestion = suggest(pattern, intervals, ordered=config.get("ORDERED", False),
                             config=engine_config, trace=trace)
        if suggestion is None:
            print("No interval set can satisfy the rules (infeasible).")
        else:
            for k, interval in enumerate(suggestion):
                print(f"   rule {k}: [{interval.start:g}, {interval.end:g})")

    output_folder = create_output_folder(len(pattern), len(intervals), strategy,
                                         base_dir=config.get("OUTPUT_ROOT"))
    write_report(os.path.join(output_folder, "report.xlsx"), pattern, intervals, result, suggestion)
    human_readable_report(os.path.join(output_folder, "report.txt"), pattern, intervals, result, suggestion)
    if trace:
        write_search_trace(trace, output_dir=output_folder, pass_name=strategy)

    flush_print(f"\nAll outputs saved to: {output_folder}")
    return result, suggestion, output_folder


if __name__ == "__main__":
    config = load_config()
    run(config)
