# Copyright 2025 Spencer Williams
#
# Use of this source code is governed by an MIT license:
# https://github.com/sw23/life-model/blob/main/LICENSE

"""
Period arithmetic for the simulation timeline.

A period is the atomic simulation step (usually one month). A year is
``periods_per_year`` consecutive periods starting at period 0.
"""

from dataclasses import dataclass


def is_new_year(period: int, periods_per_year: int) -> bool:
    """True when ``period`` is the first period of a simulated year."""
    return period % periods_per_year == 0


def year_start(period: int, periods_per_year: int) -> int:
    """Round ``period`` down to the first period of its year."""
    return period - (period % periods_per_year)


@dataclass(frozen=True, order=True)
class Lifespan:
    """Number of periods a simulated person lives."""
    periods: int

    def __post_init__(self):
        if self.periods < 0:
            raise ValueError(f"Lifespan cannot be negative: {self.periods}")
