# data_models.py
import math
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union

# A size is either a literal number or an affine expression over rule names
Size = Union[int, float, str]


@dataclass(frozen=True)
class Interval:
    start: float
    end: float
    data: Any = None

    def __post_init__(self):
        if self.end < self.start:
            raise ValueError(f"Interval end ({self.end}) is before its start ({self.start})")

    def length(self):
        return self.end - self.start

    def sort_key(self):
        return (self.start, self.end)


@dataclass(frozen=True)
class SpaceInterval(Interval):
    """Gap synthesized between a matched interval and the next one (no payload)"""
    data: Any = None
    is_space: bool = True


@dataclass(frozen=True)
class EndpointBound:
    """Validity range for an interval endpoint. None means unbounded on that side."""
    lower_bound: Optional[float] = None
    upper_bound: Optional[float] = None

    def contains(self, value):
        if self.lower_bound is not None and value < self.lower_bound:
            return False
        if self.upper_bound is not None and value > self.upper_bound:
            return False
        return True


@dataclass(frozen=True)
class IntervalRule:
    name: str  # Empty string means "unnamed"
    from_bound: Optional[EndpointBound] = None
    to_bound: Optional[EndpointBound] = None
    min_size: Size = 0
    max_size: Size = math.inf


@dataclass(frozen=True)
class SpaceRule:
    name: str
    min_size: Size = 0
    max_size: Size = math.inf


@dataclass(frozen=True)
class Rule:
    interval: IntervalRule
    following_space: Optional[SpaceRule] = None


@dataclass
class MatchResult:
    success: bool
    groups: Dict[str, Interval] = field(default_factory=dict)  # name -> Interval | SpaceInterval
    ordered_result: List[Interval] = field(default_factory=list)

    def matched_intervals(self):
        """Bound intervals in rule order, without the synthesized spaces."""
        return [i for i in self.ordered_result if not is_space_interval(i)]


def is_space_interval(interval):
    return getattr(interval, 'is_space', False)


def sort_intervals(intervals):
    """Sort ascending by (start, end)."""
    return sorted(intervals, key=Interval.sort_key)
