"""
Repair Engine - Suggest Intervals

When a timeline does not match a pattern, build the closest interval set that
does, using linear programming.

What we try to minimise is:

    * The difference with the provided (reference) intervals
    * The length of the intervals that have nothing to be compared with

Both strategies start from the same base solve: the longest partial greedy
match gives each matched rule a reference to stay close to, the remaining
rules are kept as short as possible. If that base LP is infeasible the pattern
can never be satisfied and the result is None.

From the base candidate every rule is associated with its closest unused
reference interval, and the search then decides which reference endpoints to
make "sticky" (pinned exactly):

    Simple          - pin proposals sorted by distance; every subset when there
                      are few of them, otherwise a greedy keep-if-not-worse pass.
    High precision  - every monotone assignment of reference endpoint values to
                      rule endpoint slots, with explicit ordering constraints.

Candidates are compared with a lexicographic error measure; the retained
candidate never gets worse during the search.
"""

from typing import NamedTuple

from data_models import Interval, sort_intervals
from interval_system.decomposer import FROM, TO
from interval_system.interval_diff import default_error_measure
from interval_system.lp_model import build_model
from interval_system.lp_solver import extract_intervals, solve_program
from interval_system.matcher import try_match
from interval_system.search import FailedSubsets, iter_endpoint_assignments, iter_subsets
from utils import verbose_print


class EndpointPin(NamedTuple):
    rule_idx: int
    side: str
    value: float
    distance: float


def solve_candidate(pattern, targets=None, pinned=None, ordered=False, config=None):
    """Build and solve one LP; returns the interval list or None if infeasible."""
    program = build_model(pattern, targets=targets, pinned=pinned, ordered=ordered, config=config)
    values = solve_program(program, config)
    if values is None:
        return None
    return [Interval(start, end) for start, end in extract_intervals(values, len(pattern))]


def endpoint_targets(association):
    """Dict of (rule_idx, side) -> reference value for associated rules."""
    targets = {}
    for k, reference in association.items():
        targets[(k, FROM)] = reference.start
        targets[(k, TO)] = reference.end
    return targets


def longest_match_targets(pattern, references, config=None):
    """Targets taken from the longest partial greedy match of the references."""
    matched = try_match(pattern, references, config).matched_intervals()
    return endpoint_targets(dict(enumerate(matched[:len(pattern)])))


def associate_references(candidate, references):
    """
    Associate each rule, in rule order, with the closest unused reference.

    Distance is |start difference| + |end difference|. References are never
    reused; rules left over once the references run out stay unassociated.

    Returns:
        dict of rule_idx -> reference Interval
    """
    available = list(range(len(references)))
    association = {}
    for k, interval in enumerate(candidate):
        if not available:
            break
        best = min(available, key=lambda r: (abs(interval.start - references[r].start)
                                             + abs(interval.end - references[r].end), r))
        association[k] = references[best]
        available.remove(best)
    return association


def pin_proposals(candidate, association):
    """One proposal per associated rule endpoint, closest first."""
    proposals = []
    for k, reference in association.items():
        proposals.append(EndpointPin(k, FROM, reference.start, abs(candidate[k].start - reference.start)))
        proposals.append(EndpointPin(k, TO, reference.end, abs(candidate[k].end - reference.end)))
    return sorted(proposals, key=lambda p: (p.distance, p.rule_idx, p.side != FROM))


class RepairSearch:
    """
    Keeps the best candidate found so far and the trail of everything tried.
    """

    def __init__(self, pattern, references, targets, ordered, error_measure, config, trace=None):
        self.pattern = pattern
        self.references = references
        self.targets = targets
        self.ordered = ordered
        self.error_measure = error_measure
        self.config = config
        self.trace = trace
        self.best = None
        self.best_error = None
        self.solves = 0

    def _record(self, pinned, candidate, error, kept):
        if self.trace is not None:
            self.trace.append({
                "step": len(self.trace),
                "pinned": dict(pinned),
                "feasible": candidate is not None,
                "error": error,
                "kept": kept,
            })

    def seed(self, candidate):
        self.best = candidate
        self.best_error = self.error_measure(candidate, self.references)
        self._record({}, candidate, self.best_error, True)

    def attempt(self, pinned, accept_equal=False):
        """
        Solve with `pinned` endpoints and keep the result if it improves the best.

        Returns:
            None if infeasible, otherwise True/False for kept/discarded
        """
        self.solves += 1
        candidate = solve_candidate(self.pattern, self.targets, pinned, self.ordered, self.config)
        if candidate is None:
            self._record(pinned, None, None, False)
            return None

        error = self.error_measure(candidate, self.references)
        kept = error < self.best_error or (accept_equal and error == self.best_error)
        if kept:
            self.best = candidate
            self.best_error = error
        self._record(pinned, candidate, error, kept)
        return kept


def _base_search(pattern, intervals, ordered, error_measure, config, trace, ordering_constraints):
    references = list(intervals) if ordered else sort_intervals(intervals)
    error_measure = error_measure or default_error_measure

    base = solve_candidate(pattern, longest_match_targets(pattern, references, config),
                           ordered=ordering_constraints, config=config)
    if base is None:
        verbose_print(config, "[Suggest] Base model is infeasible; the pattern cannot be satisfied")
        return None

    association = associate_references(base, references)
    search = RepairSearch(pattern, references, endpoint_targets(association), ordering_constraints,
                          error_measure, config, trace)
    search.seed(base)
    return search, association


def suggest_simple(pattern, intervals, ordered=False, error_measure=None, config=None, trace=None):
    """
    Suggest an interval set satisfying `pattern`, close to `intervals`.

    Args:
        pattern: List of Rule objects
        intervals: Reference intervals (may be empty)
        ordered: Set to True if `intervals` are already sorted by (start, end)
        error_measure: Callable (candidate, reference) -> comparable tuple
        config: Configuration dictionary
        trace: Optional list; every candidate tried is appended to it

    Returns:
        List of Interval objects (one per rule), or None if the pattern is infeasible
    """
    config = config or {}
    if not pattern:
        return []

    started = _base_search(pattern, intervals, ordered, error_measure, config, trace, ordering_constraints=False)
    if started is None:
        return None
    search, association = started

    proposals = pin_proposals(search.best, association)
    EXHAUSTIVE_PIN_LIMIT = config.get("EXHAUSTIVE_PIN_LIMIT", 4)

    if len(proposals) <= EXHAUSTIVE_PIN_LIMIT:
        verbose_print(config, f"[Suggest] Trying every subset of {len(proposals)} pin proposals")
        failed = FailedSubsets()
        for subset in iter_subsets(proposals, is_pruned=failed.covers):
            pinned = {(p.rule_idx, p.side): p.value for p in subset}
            if search.attempt(pinned) is None:
                failed.add(subset)
    else:
        verbose_print(config, f"[Suggest] Greedy pass over {len(proposals)} pin proposals")
        pinned = {}
        search.attempt(pinned)
        for p in proposals:
            trial = dict(pinned)
            trial[(p.rule_idx, p.side)] = p.value
            if search.attempt(trial, accept_equal=True):
                pinned = trial

    verbose_print(config, f"[Suggest] {search.solves} solves, best error = {search.best_error}")
    return search.best


def suggest_high_precision(pattern, intervals, ordered=False, error_measure=None, config=None, trace=None):
    """
    Suggest an interval set satisfying `pattern` by trying every monotone
    assignment of reference endpoints to rule endpoints.

    Generated intervals are forced to stay in rule order without overlapping.
    Combinatorial in the number of rules and reference endpoints: gate it with
    `estimate_high_precision_cost`.

    Args:
        pattern: List of Rule objects
        intervals: Reference intervals (may be empty)
        ordered: Set to True if `intervals` are already sorted by (start, end)
        error_measure: Callable (candidate, reference) -> comparable tuple
        config: Configuration dictionary
        trace: Optional list; every candidate tried is appended to it

    Returns:
        List of Interval objects (one per rule), or None if the pattern is infeasible
    """
    config = config or {}
    if not pattern:
        return []

    started = _base_search(pattern, intervals, ordered, error_measure, config, trace, ordering_constraints=True)
    if started is None:
        return None
    search, _ = started

    slots = [(k, side) for k in range(len(pattern)) for side in (FROM, TO)]
    endpoints = sorted({value for i in search.references for value in (i.start, i.end)})

    failed = FailedSubsets()
    for assignment in iter_endpoint_assignments(slots, endpoints, is_pruned=failed.covers):
        if search.attempt(dict(assignment)) is None:
            failed.add(assignment)

    verbose_print(config, f"[Suggest] {search.solves} solves ({len(failed)} infeasible), "
                          f"best error = {search.best_error}")
    return search.best
