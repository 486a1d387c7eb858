"""
Interval System Module

Matches an ordered pattern of size/position/spacing rules against a set of
non-overlapping intervals on one numeric axis, and suggests a corrected
interval set when there is no exact match.

Architecture:
    - expressions.py: Affine size expressions over rule names (parse/evaluate)
    - matcher.py: Greedy single-pass rule matcher (full or longest partial match)
    - decomposer.py: Size expressions -> coefficients over rule endpoint variables
    - lp_model.py: Pattern (+ reference targets, pinned endpoints) -> linear program
    - lp_solver.py: OR-Tools linear solver adapter
    - interval_diff.py: Interval-set difference sweep and default error measure
    - search.py: Subset / endpoint-assignment generators with infeasibility pruning
    - suggest.py: Repair strategies (simple, high precision)
"""

from data_models import MatchResult, sort_intervals
from interval_system.interval_diff import default_error_measure, flatten, non_intersecting_intervals
from interval_system.matcher import try_match
from interval_system.search import estimate_high_precision_cost
from interval_system.suggest import suggest_high_precision, suggest_simple
from utils import verbose_print

__version__ = "1.0.0"

__all__ = [
    'match',
    'suggest',
    'suggest_simple',
    'suggest_high_precision',
    'choose_strategy',
    'try_match',
    'flatten',
    'non_intersecting_intervals',
    'default_error_measure',
    'estimate_high_precision_cost',
]


def match(pattern, intervals, ordered=False, config=None):
    """
    Match a pattern against a set of non-overlapping intervals.

    Args:
        pattern: List of Rule objects
        intervals: List of Interval objects
        ordered: Set this to True if `intervals` are already sorted by (start, end)
        config: Configuration dictionary

    Returns:
        MatchResult. An empty pattern has nothing to match and succeeds with no
        groups; an empty interval list fails.
    """
    if not pattern:
        return MatchResult(success=True)
    if not ordered:
        intervals = sort_intervals(intervals)
    return try_match(pattern, intervals, config)


def choose_strategy(pattern, intervals, max_cost):
    """Return "high_precision" when its estimated cost fits `max_cost`, else "simple"."""
    if max_cost is None or max_cost <= 0:
        return "simple"
    endpoint_count = len({value for i in intervals for value in (i.start, i.end)})
    cost = estimate_high_precision_cost(len(pattern), endpoint_count)
    return "high_precision" if cost <= max_cost else "simple"


def suggest(pattern, intervals, ordered=False, error_measure=None, max_cost=None, config=None, trace=None):
    """
    Suggest intervals satisfying `pattern`, as close as possible to `intervals`.

    Args:
        pattern: List of Rule objects
        intervals: Reference intervals (may be empty)
        ordered: Set this to True if `intervals` are already sorted by (start, end)
        error_measure: Callable (candidate, reference) -> comparable tuple
        max_cost: Budget for the high precision search (<= 0 always uses the
            simple strategy). Defaults to config MAX_COST
        config: Configuration dictionary
        trace: Optional list collecting every candidate the search tries

    Returns:
        List of Interval objects, or None if no interval set can satisfy the rules
    """
    config = config or {}
    if max_cost is None:
        max_cost = config.get("MAX_COST", 0)
    if not pattern:
        return []
    if not ordered:
        intervals = sort_intervals(intervals)

    result = try_match(pattern, intervals, config)
    if result.success:
        return result.matched_intervals()

    strategy = choose_strategy(pattern, intervals, max_cost)
    verbose_print(config, f"[Suggest] No full match, using the {strategy} strategy")
    if strategy == "high_precision":
        return suggest_high_precision(pattern, intervals, ordered=True, error_measure=error_measure,
                                      config=config, trace=trace)
    return suggest_simple(pattern, intervals, ordered=True, error_measure=error_measure,
                          config=config, trace=trace)
