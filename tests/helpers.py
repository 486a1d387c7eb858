"""Shared builders for rule/interval fixtures."""

import math

from data_models import EndpointBound, Interval, IntervalRule, Rule, SpaceRule


def bound(lower=None, upper=None):
    return EndpointBound(lower_bound=lower, upper_bound=upper)


def rule(name, min_size=0, max_size=math.inf, start=None, end=None, space=None):
    """Build a Rule; `space` is a (name, min_size, max_size) tuple."""
    following_space = SpaceRule(*space) if space is not None else None
    return Rule(
        interval=IntervalRule(name=name, from_bound=start, to_bound=end, min_size=min_size, max_size=max_size),
        following_space=following_space,
    )


def intervals(*pairs, data="u"):
    return [Interval(start, end, data) for start, end in pairs]


def spans(result):
    return [(i.start, i.end) for i in result]


# Two rules where B must be at least twice as long as A
TWICE_A_PATTERN = [
    rule("A", 150, 1000, start=bound(100, 200), end=bound(300, 400), space=("x", 0, 200)),
    rule("B", "2*A", math.inf, start=bound(500, 600), end=bound(800, math.inf)),
]

# B's size depends on A's through "80 - A -/+ 10"
COMPLEMENT_PATTERN = [
    rule("A", 10, 1000, start=bound(70, 90), space=("sA", 5, 200)),
    rule("B", "80 - A - 10", "80 - A + 10", end=bound(160, 180)),
]
