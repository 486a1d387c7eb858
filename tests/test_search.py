import math

import pytest

from interval_system.search import (
    FailedSubsets,
    estimate_high_precision_cost,
    iter_endpoint_assignments,
    iter_subsets,
)


def test_subsets_are_generated_smallest_first():
    assert list(iter_subsets("abc")) == [
        (),
        ("a",), ("b",), ("c",),
        ("a", "b"), ("a", "c"), ("b", "c"),
        ("a", "b", "c"),
    ]


def test_failed_subsets_prune_supersets():
    failed = FailedSubsets()
    failed.add(("a", "b"))
    assert failed.covers(("a", "b", "c"))
    assert failed.covers(("b", "a"))
    assert not failed.covers(("a", "c"))
    assert len(failed) == 1


def test_pruning_feedback_while_iterating():
    failed = FailedSubsets()
    seen = []
    for subset in iter_subsets("abc", is_pruned=failed.covers):
        seen.append(subset)
        if subset == ("a",):
            failed.add(subset)
    assert seen == [(), ("a",), ("b",), ("c",), ("b", "c")]


def test_endpoint_assignments_are_monotone():
    slots = [(0, "from"), (0, "to")]
    assignments = list(iter_endpoint_assignments(slots, [1, 2, 3]))
    assert assignments[0] == ()
    assert (((0, "from"), 1), ((0, "to"), 3)) in assignments
    for assignment in assignments:
        values = [value for _, value in assignment]
        assert values == sorted(values)
        assert len(set(values)) == len(values)


def test_endpoint_assignments_respect_max_size():
    slots = [(0, "from"), (0, "to"), (1, "from"), (1, "to")]
    assignments = list(iter_endpoint_assignments(slots, [1, 2, 3], max_size=1))
    assert len(assignments) == 1 + 4 * 3


@pytest.mark.parametrize("rule_count, endpoint_count", [(1, 0), (1, 2), (1, 3), (2, 4), (3, 5)])
def test_cost_estimate_matches_enumeration(rule_count, endpoint_count):
    slots = [(k, side) for k in range(rule_count) for side in ("from", "to")]
    endpoints = list(range(endpoint_count))
    enumerated = sum(1 for _ in iter_endpoint_assignments(slots, endpoints))
    assert estimate_high_precision_cost(rule_count, endpoint_count) == enumerated


def test_cost_estimate_closed_form():
    assert estimate_high_precision_cost(2, 4) == math.comb(8, 4)
