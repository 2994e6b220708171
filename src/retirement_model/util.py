# Copyright 2025 Spencer Williams
#
# Use of this source code is governed by an MIT license:
# https://github.com/sw23/life-model/blob/main/LICENSE

from dataclasses import dataclass


@dataclass(frozen=True)
class Ratio:
    """Exact ratio reported as an integer numerator and denominator.

    The ratio is never reduced, so 48 successes out of 100 runs stays 48/100.
    """
    num: int
    denom: int

    def __post_init__(self):
        if self.denom <= 0:
            raise ValueError(f"Ratio denominator must be positive, got {self.denom}")
        if self.num < 0:
            raise ValueError(f"Ratio numerator cannot be negative, got {self.num}")

    def as_ratio(self) -> str:
        return f"{self.num}/{self.denom}"

    def as_percent(self) -> str:
        return f"{float(self) * 100:.1f}%"

    def __float__(self) -> float:
        return self.num / self.denom

    def __str__(self) -> str:
        return self.as_ratio()
