"""
Greedy Rule Matcher

Scans ordered, non-overlapping intervals left to right and tries to bind each
rule of a pattern to consecutive intervals. On a failed rule the attempt
restarts from the first rule at the next interval; the longest partial chain
seen during the scan is kept for callers that need a best-effort answer
(the repair engine seeds its reference association with it).
"""

import math
from dataclasses import dataclass
from typing import Tuple

from data_models import Interval, MatchResult, SpaceInterval
from interval_system.expressions import evaluate_expression
from utils import verbose_print


@dataclass(frozen=True)
class MatchChain:
    """Immutable accumulator of (name, interval) bindings for one match attempt."""
    entries: Tuple[Tuple[str, Interval], ...] = ()

    def bind(self, name, interval):
        return MatchChain(self.entries + ((name, interval),))

    def environment(self):
        return {name: interval.length() for name, interval in self.entries}

    def __len__(self):
        return len(self.entries)

    def to_result(self, success):
        return MatchResult(
            success=success,
            groups={name: interval for name, interval in self.entries},
            ordered_result=[interval for _, interval in self.entries],
        )


def following_space(interval, next_interval):
    """Gap between `interval` and the next one; open-ended when there is none."""
    return SpaceInterval(interval.end, next_interval.start if next_interval is not None else math.inf)


def satisfies_rule(interval, next_interval, rule, env):
    """
    Determine if an interval satisfies a rule.

    Args:
        interval: The interval to check
        next_interval: The interval following `interval`, or None. Used to
            verify `rule.following_space`
        rule: The Rule to test
        env: Lengths of everything bound earlier in the same attempt (name -> length)

    Returns:
        bool: True when every gate passes
    """
    length = interval.length()

    if length < evaluate_expression(rule.interval.min_size, env):
        return False

    if length > evaluate_expression(rule.interval.max_size, env):
        return False

    if rule.interval.from_bound is not None and not rule.interval.from_bound.contains(interval.start):
        return False

    if rule.interval.to_bound is not None and not rule.interval.to_bound.contains(interval.end):
        return False

    if rule.following_space is not None:
        # The interval itself matched, so its length is visible to the space sizes
        space_env = dict(env)
        space_env[rule.interval.name] = length
        space_length = following_space(interval, next_interval).length()

        if space_length < evaluate_expression(rule.following_space.min_size, space_env):
            return False

        # An open-ended trailing gap fails any finite max size
        if space_length > evaluate_expression(rule.following_space.max_size, space_env):
            return False

    return True


def try_match(pattern, intervals, config=None):
    """
    Return the first full match, or the longest partial match on failure.

    Args:
        pattern: List of Rule objects
        intervals: List of ORDERED, non-overlapping Interval objects

    Returns:
        MatchResult: success=True with the first full match, otherwise
        success=False with the longest chain recorded during the scan
    """
    if not pattern or not intervals:
        return MatchResult(success=False)

    longest = MatchChain()
    chain = MatchChain()
    rule_idx = 0

    for i, interval in enumerate(intervals):
        next_interval = intervals[i + 1] if i + 1 < len(intervals) else None
        rule = pattern[rule_idx]

        if satisfies_rule(interval, next_interval, rule, chain.environment()):
            chain = chain.bind(rule.interval.name, interval)
            if rule.following_space is not None:
                chain = chain.bind(rule.following_space.name, following_space(interval, next_interval))

            if len(chain) >= len(longest):
                longest = chain

            if rule_idx + 1 == len(pattern):
                verbose_print(config, f"[Matcher] Full match of {len(pattern)} rules ending at interval {i}")
                return chain.to_result(success=True)
            rule_idx += 1
        else:
            # Any previous bindings were wrong; start over at the next interval
            rule_idx = 0
            chain = MatchChain()

    verbose_print(config, f"[Matcher] No full match; longest partial chain has {len(longest)} entries")
    return longest.to_result(success=False)
