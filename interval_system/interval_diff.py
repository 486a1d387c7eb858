"""
Interval Difference / Error Measure

Scores how far a candidate interval set is from a reference set. Both sets are
flattened into sorted, non-overlapping covered runs and swept with two cursors
to collect the regions covered by exactly one of them.
"""

from data_models import Interval, sort_intervals


def flatten(intervals):
    """
    Merge overlapping or touching intervals into maximal covered runs.

    Args:
        intervals: Iterable of Interval objects (any order)

    Returns:
        List of (start, end) tuples, sorted and non-overlapping
    """
    runs = []
    for interval in sort_intervals(intervals):
        if runs and interval.start <= runs[-1][1]:
            runs[-1] = (runs[-1][0], max(runs[-1][1], interval.end))
        else:
            runs.append((interval.start, interval.end))
    return runs


def non_intersecting_intervals(a, b):
    """
    Regions covered by exactly one of the two interval sets.

    The result does not depend on argument order. Zero-length pieces are dropped.

    Args:
        a: Iterable of Interval objects
        b: Iterable of Interval objects

    Returns:
        List of Interval objects (data=None), sorted ascending
    """
    runs_a = flatten(a)
    runs_b = flatten(b)
    gaps = []

    def emit(start, end):
        if end > start:
            gaps.append(Interval(start, end))

    i = j = 0
    cur_a = runs_a[0] if runs_a else None
    cur_b = runs_b[0] if runs_b else None

    while cur_a is not None and cur_b is not None:
        if cur_a[1] <= cur_b[0]:
            # Disjoint, A entirely before B
            emit(*cur_a)
            i += 1
            cur_a = runs_a[i] if i < len(runs_a) else None
        elif cur_b[1] <= cur_a[0]:
            # Disjoint, B entirely before A
            emit(*cur_b)
            j += 1
            cur_b = runs_b[j] if j < len(runs_b) else None
        else:
            # Overlapping: whatever sticks out before the overlap is a delta
            if cur_a[0] < cur_b[0]:
                emit(cur_a[0], cur_b[0])
            elif cur_b[0] < cur_a[0]:
                emit(cur_b[0], cur_a[0])

            overlap_end = min(cur_a[1], cur_b[1])

            if cur_a[1] == overlap_end:
                i += 1
                cur_a = runs_a[i] if i < len(runs_a) else None
            else:
                cur_a = (overlap_end, cur_a[1])

            if cur_b[1] == overlap_end:
                j += 1
                cur_b = runs_b[j] if j < len(runs_b) else None
            else:
                cur_b = (overlap_end, cur_b[1])

    # Only one side can still have runs left
    while cur_a is not None:
        emit(*cur_a)
        i += 1
        cur_a = runs_a[i] if i < len(runs_a) else None
    while cur_b is not None:
        emit(*cur_b)
        j += 1
        cur_b = runs_b[j] if j < len(runs_b) else None

    return gaps


def matching_endpoints(a, b):
    """Number of endpoints of `a` that coincide with some endpoint of `b`."""
    b_endpoints = set()
    for interval in b:
        b_endpoints.add(interval.start)
        b_endpoints.add(interval.end)
    return sum((interval.start in b_endpoints) + (interval.end in b_endpoints) for interval in a)


def default_error_measure(a, b):
    """
    Lexicographic error of candidate `a` against reference `b` (lower is better).

    Returns:
        tuple: (total gap length, number of gaps, -matching endpoints,
                -average gap midpoint)
    """
    gaps = non_intersecting_intervals(a, b)
    total = sum(g.length() for g in gaps)
    average_midpoint = sum((g.start + g.end) / 2 for g in gaps) / len(gaps) if gaps else 0
    return (total, len(gaps), -matching_endpoints(a, b), -average_midpoint)
