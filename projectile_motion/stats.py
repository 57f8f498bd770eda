"""
Statistics Helpers
==================
Randomized launch parameters (for repeated firing with spread) and
summary statistics over a group of landed trajectories.
"""

import numpy as np
from dataclasses import dataclass
from typing import Optional, Sequence

from .constants import Range, check_in_range
from .trajectory import Trajectory


def random_from_normal(mean: float, standard_deviation: float,
                       rng: np.random.Generator) -> float:
    """
    Normally distributed sample via the Box-Muller transform.

    Uniform draws of exactly 0 are rejected so log(u) stays finite.
    """
    u = 0.0
    v = 0.0
    while u == 0.0:
        u = rng.random()
    while v == 0.0:
        v = rng.random()
    return mean + standard_deviation * np.sqrt(-2.0 * np.log(u)) * np.cos(2.0 * np.pi * v)


class VarianceNumber:
    """
    A number with a standard deviation; ``randomized_value()`` draws a
    sample around the current value, clamped into ``value_range``.
    """

    def __init__(self, value: float, value_range: Range,
                 standard_deviation: float, deviation_range: Range,
                 name: str = 'value'):
        self.name = name
        self.value_range = value_range
        self.deviation_range = deviation_range
        self.initial_value = check_in_range(name, value, value_range)
        self.initial_standard_deviation = check_in_range(
            f'{name} standard deviation', standard_deviation, deviation_range)
        self._value = self.initial_value
        self._standard_deviation = self.initial_standard_deviation

    @property
    def value(self) -> float:
        return self._value

    @value.setter
    def value(self, value: float):
        self._value = check_in_range(self.name, value, self.value_range)

    @property
    def standard_deviation(self) -> float:
        return self._standard_deviation

    @standard_deviation.setter
    def standard_deviation(self, value: float):
        self._standard_deviation = check_in_range(
            f'{self.name} standard deviation', value, self.deviation_range)

    def randomized_value(self, rng: np.random.Generator) -> float:
        if self._standard_deviation == 0:
            return self._value
        sample = random_from_normal(self._value, self._standard_deviation, rng)
        return self.value_range.clamp(sample)

    def reset(self):
        self._value = self.initial_value
        self._standard_deviation = self.initial_standard_deviation


@dataclass
class GroupStatistics:
    """Spread of a group of landed trajectories."""
    count: int
    mean_range: float
    std_range: float
    mean_flight_time: float
    std_flight_time: float
    mean_max_height: float
    std_max_height: float
    hit_ratio: float


def summarize(trajectories: Sequence[Trajectory]) -> Optional[GroupStatistics]:
    """Statistics over the trajectories that have landed, or None if none have."""
    landed = [t for t in trajectories if t.reached_ground]
    if not landed:
        return None

    ranges = np.array([t.horizontal_displacement for t in landed])
    times = np.array([t.flight_time for t in landed])
    heights = np.array([t.max_height for t in landed])
    hits = np.array([t.has_hit_target for t in landed], dtype=float)

    return GroupStatistics(
        count=len(landed),
        mean_range=float(ranges.mean()),
        std_range=float(ranges.std()),
        mean_flight_time=float(times.mean()),
        std_flight_time=float(times.std()),
        mean_max_height=float(heights.mean()),
        std_max_height=float(heights.std()),
        hit_ratio=float(hits.mean()),
    )
