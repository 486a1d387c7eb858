"""
Combinatorial search helpers for the repair engine.

Subsets are generated in order of increasing size so that an infeasible small
subset is known before any of its supersets comes up; callers inject the
pruning predicate (usually FailedSubsets.covers) and feed failures back while
iterating.
"""

import itertools
import math


class FailedSubsets:
    """Memo of subsets that made the LP infeasible."""

    def __init__(self):
        self._failed = []

    def add(self, subset):
        self._failed.append(frozenset(subset))

    def covers(self, subset):
        """True if `subset` contains a known-infeasible subset."""
        candidate = frozenset(subset)
        return any(failed <= candidate for failed in self._failed)

    def __len__(self):
        return len(self._failed)


def iter_subsets(items, is_pruned=None):
    """
    Yield every subset of `items` as a tuple, smallest first.

    Args:
        items: Sequence of hashable items
        is_pruned: Optional predicate; subsets for which it returns True are skipped.
            It is evaluated lazily, right before each subset would be yielded.
    """
    items = list(items)
    for size in range(len(items) + 1):
        for subset in itertools.combinations(items, size):
            if is_pruned is not None and is_pruned(subset):
                continue
            yield subset


def iter_endpoint_assignments(slots, endpoints, max_size=None, is_pruned=None):
    """
    Yield monotone assignments of endpoint values to endpoint slots.

    Both `slots` and `endpoints` are expected in axis order. An assignment of
    size s picks s slots and s endpoints and pairs them in order, so the k-th
    chosen endpoint goes to the k-th chosen slot.

    Args:
        slots: Sequence of (rule_idx, side) in axis order
        endpoints: Sorted sequence of reference endpoint values
        max_size: Largest assignment size (defaults to min(len(slots), len(endpoints)))
        is_pruned: Optional predicate over the tuple of (slot, value) pairs

    Yields:
        tuple of ((rule_idx, side), value) pairs
    """
    limit = min(len(slots), len(endpoints))
    if max_size is not None:
        limit = min(limit, max_size)

    for size in range(limit + 1):
        for chosen_slots in itertools.combinations(slots, size):
            for chosen_values in itertools.combinations(endpoints, size):
                assignment = tuple(zip(chosen_slots, chosen_values))
                if is_pruned is not None and is_pruned(assignment):
                    continue
                yield assignment


def estimate_high_precision_cost(rule_count, endpoint_count):
    """
    Number of LP solves the high precision search may need.

    sum_s C(2R, s) * C(E, s) over every assignment size s, which by
    Vandermonde's identity is C(E + 2R, 2R).
    """
    return math.comb(endpoint_count + 2 * rule_count, 2 * rule_count)
