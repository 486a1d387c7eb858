import math

import pytest

from data_models import Interval, SpaceInterval
from interval_system import match
from interval_system.expressions import UnboundNameError
from interval_system.matcher import satisfies_rule, try_match
from tests.helpers import TWICE_A_PATTERN, bound, intervals, rule

SIZE_RULE = [rule("A", 500, 1000)]
FROM_RULE = [rule("A", 0, math.inf, start=bound(100, 150))]
TWO_STEP = [
    rule("A", 1, 8, start=bound(7, 9), space=("B", 0.5, 4)),
    rule("C", 1, 8, end=bound(None, 20)),
]


@pytest.mark.parametrize(
    "pattern, pairs, expected",
    [
        (SIZE_RULE, [(0, 500)], {"A": (0, 500)}),
        (SIZE_RULE, [(0, 750)], {"A": (0, 750)}),
        (SIZE_RULE, [(0, 1000)], {"A": (0, 1000)}),
        (SIZE_RULE, [(0, 750), (10, 760)], {"A": (0, 750)}),
        (FROM_RULE, [(100, 1000)], {"A": (100, 1000)}),
        (FROM_RULE, [(120, 1000)], {"A": (120, 1000)}),
        (FROM_RULE, [(150, 1000)], {"A": (150, 1000)}),
        (TWO_STEP, [(7, 12), (15, 18)], {"A": (7, 12), "B": (12, 15), "C": (15, 18)}),
        ([rule("A", 2, 20, space=("B", 10, math.inf))], [(0, 20), (25, 30), (40, 50)],
         {"A": (25, 30), "B": (30, 40)}),
        ([rule("A", "498 + (-1 * -2)", 1000)], [(0, 500)], {"A": (0, 500)}),
        ([rule("A", space=("B", "A * 0.5", "A * 0.5"))], [(40, 60), (70, 100)],
         {"A": (40, 60), "B": (60, 70)}),
    ],
)
def test_successful_matches(pattern, pairs, expected):
    result = match(pattern, intervals(*pairs))
    assert result.success
    assert {name: (i.start, i.end) for name, i in result.groups.items()} == expected


@pytest.mark.parametrize(
    "pattern, pairs",
    [
        (SIZE_RULE, [(0, 1001)]),
        (FROM_RULE, [(80, 1000)]),
        (FROM_RULE, [(151, 1000)]),
        (TWO_STEP, [(7, 12), (17, 20)]),
        ([rule("A", "498 + (-1 * -2)", 1000)], [(0, 499)]),
        ([rule("A", space=("B", "A * 0.5", "A * 0.5"))], [(40, 60), (71, 100)]),
    ],
)
def test_failed_matches(pattern, pairs):
    assert not match(pattern, intervals(*pairs)).success


def test_space_is_synthesized_without_payload():
    pattern = [rule("A", space=("B", 5, 10))]
    result = match(pattern, intervals((50, 60), (65, 100)))
    assert result.groups["A"] == Interval(50, 60, "u")
    assert result.groups["B"] == SpaceInterval(60, 65)
    assert result.groups["B"].data is None
    assert [i.start for i in result.ordered_result] == [50, 60]
    assert result.matched_intervals() == [Interval(50, 60, "u")]


def test_expression_uses_earlier_match_length():
    # B must be at least 2 * len(A) = 320 long
    too_short = match(TWICE_A_PATTERN, intervals((190, 350), (550, 800)))
    assert not too_short.success
    long_enough = match(TWICE_A_PATTERN, intervals((190, 350), (550, 870)))
    assert long_enough.success
    assert long_enough.groups["B"] == Interval(550, 870, "u")


def test_longest_partial_match_is_returned_on_failure():
    result = try_match(TWICE_A_PATTERN, intervals((190, 350), (550, 800)))
    assert not result.success
    assert list(result.groups) == ["A", "x"]
    assert result.groups["A"] == Interval(190, 350, "u")
    assert result.groups["x"] == SpaceInterval(350, 550)


def test_later_chain_of_equal_length_wins():
    pattern = [rule("A", 1, 5), rule("B", 100, 200)]
    result = try_match(pattern, intervals((0, 2), (3, 4), (5, 7), (8, 9)))
    assert not result.success
    # (0,2) binds A, (3,4) fails B and resets; (5,7) binds A, (8,9) fails B
    assert result.groups == {"A": Interval(5, 7, "u")}


def test_partial_chain_is_not_cleared_by_restart():
    pattern = [rule("A", 1, 5), rule("B", 1, 5), rule("C", 100, 200)]
    result = try_match(pattern, intervals((0, 2), (3, 5), (6, 7), (10, 500)))
    assert not result.success
    assert list(result.groups) == ["A", "B"]
    assert result.groups["A"] == Interval(0, 2, "u")


def test_failing_interval_is_not_retried_as_new_start():
    # (2, 3) fails B; a fresh attempt would bind it to A, but the scan moves on
    pattern = [rule("A", 1, 1), rule("B", 5, 5)]
    result = try_match(pattern, intervals((0, 1), (2, 3), (4, 9)))
    assert not result.success


def test_trailing_open_space_fails_finite_max_size():
    pattern = [rule("A", space=("gap", 0, 100))]
    assert not match(pattern, intervals((0, 10))).success
    assert match([rule("A", space=("gap", 0, math.inf))], intervals((0, 10))).success


def test_input_is_sorted_unless_ordered():
    pattern = [rule("A", 0, 10, space=("gap", 0, 5)), rule("B", 0, 10)]
    shuffled = intervals((12, 17), (0, 10))
    result = match(pattern, shuffled)
    assert result.success
    assert result.groups["A"] == Interval(0, 10, "u")
    assert result.groups["B"] == Interval(12, 17, "u")
    assert not match(pattern, shuffled, ordered=True).success


def test_empty_inputs():
    assert match([], intervals((0, 1))).success
    assert match([], intervals((0, 1))).groups == {}
    assert not match(SIZE_RULE, []).success
    assert not try_match([], intervals((0, 1))).success


def test_unbound_name_is_an_input_error():
    with pytest.raises(UnboundNameError):
        match([rule("A", "2*Z")], intervals((0, 1)))


def test_satisfies_rule_checks_to_bound():
    r = rule("A", end=bound(10, 20))
    assert satisfies_rule(Interval(0, 15), None, r, {})
    assert not satisfies_rule(Interval(0, 25), None, r, {})
    assert not satisfies_rule(Interval(0, 5), None, r, {})


def test_successful_match_is_sound():
    result = match(TWICE_A_PATTERN, intervals((190, 350), (550, 1200)))
    assert result.success
    a, x, b = result.groups["A"], result.groups["x"], result.groups["B"]
    assert 150 <= a.length() <= 1000
    assert 0 <= x.length() <= 200
    assert b.length() >= 2 * a.length()
