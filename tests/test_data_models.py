import pytest

from data_models import EndpointBound, Interval, SpaceInterval, is_space_interval, sort_intervals
from tests.helpers import intervals, spans


def test_sort_intervals_by_start_then_end():
    shuffled = intervals((5, 9), (0, 4), (5, 7), (0, 2))
    assert spans(sort_intervals(shuffled)) == [(0, 2), (0, 4), (5, 7), (5, 9)]


def test_sort_key_is_start_end_pair():
    assert Interval(3, 8, "x").sort_key() == (3, 8)
    assert SpaceInterval(8, 12).sort_key() == (8, 12)


def test_interval_end_before_start_is_rejected():
    with pytest.raises(ValueError):
        Interval(10, 5)


def test_space_intervals_carry_no_payload():
    space = SpaceInterval(0, 4)
    assert space.data is None
    assert is_space_interval(space)
    assert not is_space_interval(Interval(0, 4))


def test_endpoint_bound_half_open():
    assert EndpointBound(lower_bound=5, upper_bound=None).contains(1000)
    assert not EndpointBound(lower_bound=5, upper_bound=None).contains(4)
