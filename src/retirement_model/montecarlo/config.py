# Copyright 2025 Spencer Williams
#
# Use of this source code is governed by an MIT license:
# https://github.com/sw23/life-model/blob/main/LICENSE

"""Configuration for Monte Carlo simulations."""

from dataclasses import dataclass
from typing import Optional

from ..errors import ConfigurationError
from .random_source import validate_seed


@dataclass(frozen=True)
class MonteCarloConfig:
    """Configuration for Monte Carlo simulation parameters.

    Attributes:
        num_runs: Number of independent life trajectories. Default 500.
        seed: Optional 64-bit seed for reproducible results. When None, a seed
              is drawn from OS entropy and recorded on the results.
        periods_per_year: Simulation periods per year. Default 12 (monthly).
        retirement_offset_periods: Periods worked before withdrawals begin.
        max_workers: Threads used to execute runs. None or 1 runs sequentially.
    """
    num_runs: int = 500
    seed: Optional[int] = None
    periods_per_year: int = 12
    retirement_offset_periods: int = 0
    max_workers: Optional[int] = None

    def __post_init__(self):
        if self.num_runs < 1:
            raise ConfigurationError("num_runs must be at least 1")
        if self.periods_per_year < 1:
            raise ConfigurationError("periods_per_year must be at least 1")
        if self.retirement_offset_periods < 0:
            raise ConfigurationError("retirement_offset_periods cannot be negative")
        if self.max_workers is not None and self.max_workers < 1:
            raise ConfigurationError("max_workers must be at least 1")
        if self.seed is not None:
            try:
                validate_seed(self.seed)
            except (TypeError, ValueError) as e:
                raise ConfigurationError(str(e)) from e
