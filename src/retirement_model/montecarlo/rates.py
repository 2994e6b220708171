# Copyright 2025 Spencer Williams
#
# Use of this source code is governed by an MIT license:
# https://github.com/sw23/life-model/blob/main/LICENSE

"""
Per-period market rates for Monte Carlo runs.

A RatesSource holds a series of (stock return, bond return, inflation) triples
supplied by the caller and turns it into a per-run RatesPath. All rates are
fractional per-period values, e.g. 0.01 for a 1% monthly return.
"""

from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Sequence, TYPE_CHECKING
import numpy as np

from ..errors import ConfigurationError, ExhaustedModelError

if TYPE_CHECKING:
    from .random_source import RandomSource


@dataclass(frozen=True)
class Rate:
    """Market rates for a single period.

    Attributes:
        stocks: Stock return for the period as decimal
        bonds: Bond return for the period as decimal
        inflation: Inflation for the period as decimal
    """
    stocks: float
    bonds: float
    inflation: float


class RatesSampling(Enum):
    """How a run's rate path is drawn from the source series."""
    CYCLE = "cycle"
    RANDOM_START = "random_start"
    BLOCK_BOOTSTRAP = "block_bootstrap"
    EXACT = "exact"


def _as_read_only(values) -> np.ndarray:
    arr = np.array(values, dtype=np.float64)
    arr.setflags(write=False)
    return arr


class RatesPath:
    """The rates one run experiences, indexed by period."""

    def __init__(self, stocks: np.ndarray, bonds: np.ndarray, inflation: np.ndarray):
        if not (len(stocks) == len(bonds) == len(inflation)):
            raise ConfigurationError(
                f"Rate path arrays differ in length: stocks={len(stocks)}, "
                f"bonds={len(bonds)}, inflation={len(inflation)}"
            )
        self.stocks = _as_read_only(stocks)
        self.bonds = _as_read_only(bonds)
        self.inflation = _as_read_only(inflation)
        # _cumulative[i] = product of (1 + inflation) over periods before i
        cumulative = np.ones(len(inflation) + 1)
        cumulative[1:] = np.cumprod(1.0 + self.inflation)
        cumulative.setflags(write=False)
        self._cumulative = cumulative

    def __len__(self) -> int:
        return len(self.stocks)

    def rate(self, period: int) -> Rate:
        return Rate(float(self.stocks[period]), float(self.bonds[period]),
                    float(self.inflation[period]))

    def cumulative_inflation(self, period: int) -> float:
        """Inflation factor accumulated over all periods before ``period``."""
        return float(self._cumulative[period])

    def inflation_between(self, start: int, end: int) -> float:
        """Inflation factor accumulated over periods ``start`` to ``end - 1``."""
        return float(self._cumulative[end] / self._cumulative[start])

    def __repr__(self) -> str:
        return f"RatesPath(periods={len(self)})"


def generate_block_bootstrap(random_source: 'RandomSource',
                             series_length: int,
                             block_length: int,
                             length: int) -> List[int]:
    """Sample series indices by concatenating overlapping blocks.

    Each draw ``n`` is uniform over ``[0, series_length + block_length - 1)`` and
    selects the block ending at index ``n``. Blocks at either edge of the series
    are truncated, so every entry is equally likely to appear. Blocks are
    appended until ``length`` indices have been produced.

    Args:
        random_source: Stream supplying the block draws via ``integers``
        series_length: Number of entries in the source series
        block_length: Number of consecutive entries per block
        length: Number of indices to produce

    Returns:
        List of ``length`` indices into the source series
    """
    if series_length < 1:
        raise ConfigurationError("Cannot bootstrap an empty series")
    if block_length < 1 or block_length > series_length:
        raise ConfigurationError(
            f"block_length must be in [1, {series_length}], got {block_length}"
        )

    indices: List[int] = []
    upper = series_length + block_length - 1
    while len(indices) < length:
        n = random_source.integers(upper)
        if n < block_length - 1:
            block = range(0, n + 1)
        elif n >= series_length:
            block = range(n - block_length + 1, series_length)
        else:
            block = range(n + 1 - block_length, n + 1)
        indices.extend(block[:length - len(indices)])
    return indices


class RatesSource:
    """Caller-supplied series of stock, bond and inflation rates.

    Example:
        >>> source = RatesSource.from_custom_split(
        ...     [0.01, -0.02, 0.015], [0.003, 0.004, 0.002], [0.002, 0.002, 0.003])
        >>> source.rate_at(4)
        Rate(stocks=-0.02, bonds=0.004, inflation=0.002)
    """

    def __init__(self,
                 stock_returns: Sequence[float],
                 bond_returns: Sequence[float],
                 inflation_rates: Sequence[float],
                 sampling: RatesSampling = RatesSampling.CYCLE,
                 block_length: Optional[int] = None):
        """Initialize from parallel sequences.

        Args:
            stock_returns: Per-period stock returns as decimals
            bond_returns: Per-period bond returns as decimals
            inflation_rates: Per-period inflation as decimals
            sampling: How each run's path is drawn from the series
            block_length: Block size for BLOCK_BOOTSTRAP sampling. Defaults to
                          12 periods, capped at the series length.

        Raises:
            ConfigurationError: If the sequences are empty, differ in length,
                                contain non-finite values or rates <= -100%
        """
        lengths = (len(stock_returns), len(bond_returns), len(inflation_rates))
        if len(set(lengths)) != 1:
            raise ConfigurationError(
                f"Rate sequences must have equal length, got stocks={lengths[0]}, "
                f"bonds={lengths[1]}, inflation={lengths[2]}"
            )
        if lengths[0] == 0:
            raise ConfigurationError("Rate sequences cannot be empty")

        for name, values in (("stock_returns", stock_returns),
                             ("bond_returns", bond_returns),
                             ("inflation_rates", inflation_rates)):
            arr = np.asarray(values, dtype=np.float64)
            if not np.all(np.isfinite(arr)):
                raise ConfigurationError(f"{name} contains non-finite values")
            if np.any(arr <= -1.0):
                raise ConfigurationError(f"{name} contains a rate of -100% or lower")

        if not isinstance(sampling, RatesSampling):
            raise ConfigurationError(f"Unknown rates sampling mode: {sampling!r}")

        if sampling is RatesSampling.BLOCK_BOOTSTRAP:
            if block_length is None:
                block_length = min(12, lengths[0])
            if block_length < 1 or block_length > lengths[0]:
                raise ConfigurationError(
                    f"block_length must be in [1, {lengths[0]}], got {block_length}"
                )
        elif block_length is not None:
            raise ConfigurationError("block_length only applies to BLOCK_BOOTSTRAP sampling")

        self.stocks = _as_read_only(stock_returns)
        self.bonds = _as_read_only(bond_returns)
        self.inflation = _as_read_only(inflation_rates)
        self.sampling = sampling
        self.block_length = block_length

    @classmethod
    def from_custom(cls, rates: Sequence[Rate], **kwargs) -> 'RatesSource':
        """Build a source from a sequence of Rate triples."""
        return cls([r.stocks for r in rates], [r.bonds for r in rates],
                   [r.inflation for r in rates], **kwargs)

    @classmethod
    def from_custom_split(cls, stock_returns: Sequence[float],
                          bond_returns: Sequence[float],
                          inflation_rates: Sequence[float], **kwargs) -> 'RatesSource':
        """Build a source from three parallel sequences."""
        return cls(stock_returns, bond_returns, inflation_rates, **kwargs)

    @classmethod
    def constant(cls, stocks: float, bonds: float, inflation: float) -> 'RatesSource':
        """A single-entry series repeated every period."""
        return cls([stocks], [bonds], [inflation])

    def __len__(self) -> int:
        return len(self.stocks)

    def rate_at(self, period_index: int, offset: int = 0) -> Rate:
        """Rate for ``period_index`` when cycling through the series from ``offset``."""
        i = (offset + period_index) % len(self)
        return Rate(float(self.stocks[i]), float(self.bonds[i]), float(self.inflation[i]))

    def path_for_run(self, random_source: 'RandomSource', length: int) -> RatesPath:
        """Build the rate path for one run.

        Args:
            random_source: The run's private random stream. CYCLE and EXACT
                           sampling never draw from it.
            length: Number of periods the run lasts

        Returns:
            RatesPath covering ``length`` periods

        Raises:
            ExhaustedModelError: In EXACT mode when ``length`` exceeds the series
        """
        n = len(self)
        if self.sampling is RatesSampling.CYCLE:
            indices = np.arange(length) % n
        elif self.sampling is RatesSampling.RANDOM_START:
            offset = random_source.integers(n)
            indices = (np.arange(length) + offset) % n
        elif self.sampling is RatesSampling.BLOCK_BOOTSTRAP:
            indices = np.array(
                generate_block_bootstrap(random_source, n, self.block_length, length),
                dtype=np.int64,
            )
        elif self.sampling is RatesSampling.EXACT:
            if length > n:
                raise ExhaustedModelError(
                    f"Run needs {length} periods of rates but the series only has {n}"
                )
            indices = np.arange(length)
        else:
            raise ConfigurationError(f"Unknown rates sampling mode: {self.sampling!r}")

        return RatesPath(self.stocks[indices], self.bonds[indices], self.inflation[indices])

    def __repr__(self) -> str:
        return f"RatesSource(periods={len(self)}, sampling={self.sampling.value})"
