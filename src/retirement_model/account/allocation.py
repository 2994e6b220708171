# Copyright 2025 Spencer Williams
#
# Use of this source code is governed by an MIT license:
# https://github.com/sw23/life-model/blob/main/LICENSE

from dataclasses import dataclass
from typing import Optional

from ..errors import ConfigurationError


def _check_fraction(name: str, value: float):
    if not 0.0 <= value <= 1.0:
        raise ConfigurationError(f"{name} must be in [0, 1], got {value}")


@dataclass(frozen=True)
class AssetAllocation:
    """Glide path for the stock share of an account.

    The stock fraction holds at ``start_fraction`` for ``hold_periods``, moves
    linearly toward ``end_fraction`` over ``glide_periods``, then stays at
    ``floor_fraction``. The remainder is held in bonds. One allocation can be
    shared by several accounts; it is never mutated.

    Attributes:
        start_fraction: Stock fraction at the start of the glide
        end_fraction: Stock fraction the glide moves toward
        glide_periods: Number of periods the glide lasts
        floor_fraction: Stock fraction after the glide. Defaults to end_fraction.
        hold_periods: Periods to hold start_fraction before the glide begins

    Example:
        >>> glide = AssetAllocation(1.0, 0.5, glide_periods=4)
        >>> [glide.fraction_at(p) for p in range(6)]
        [1.0, 0.875, 0.75, 0.625, 0.5, 0.5]
    """
    start_fraction: float
    end_fraction: float
    glide_periods: int
    floor_fraction: Optional[float] = None
    hold_periods: int = 0

    def __post_init__(self):
        if self.floor_fraction is None:
            object.__setattr__(self, 'floor_fraction', self.end_fraction)
        _check_fraction("start_fraction", self.start_fraction)
        _check_fraction("end_fraction", self.end_fraction)
        _check_fraction("floor_fraction", self.floor_fraction)
        if self.glide_periods < 0:
            raise ConfigurationError(f"glide_periods cannot be negative: {self.glide_periods}")
        if self.hold_periods < 0:
            raise ConfigurationError(f"hold_periods cannot be negative: {self.hold_periods}")

    @classmethod
    def constant(cls, stock_fraction: float) -> 'AssetAllocation':
        """Fixed allocation that never changes."""
        return cls(stock_fraction, stock_fraction, 0)

    @classmethod
    def new_linear_glide(cls, periods_before: int, start_stocks: float,
                         periods_glide: int, end_stocks: float) -> 'AssetAllocation':
        """Hold ``start_stocks`` for ``periods_before``, then glide to ``end_stocks``."""
        return cls(start_stocks, end_stocks, periods_glide, hold_periods=periods_before)

    def fraction_at(self, period: int) -> float:
        """Stock fraction for the given period since the start of the simulation."""
        if period < self.hold_periods:
            return self.start_fraction
        elapsed = period - self.hold_periods
        if elapsed < self.glide_periods:
            return self.start_fraction + \
                (self.end_fraction - self.start_fraction) * elapsed / self.glide_periods
        return self.floor_fraction

    def stocks(self, period: int) -> float:
        return self.fraction_at(period)

    def bonds(self, period: int) -> float:
        return 1.0 - self.fraction_at(period)
