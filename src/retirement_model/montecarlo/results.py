# Copyright 2025 Spencer Williams
#
# Use of this source code is governed by an MIT license:
# https://github.com/sw23/life-model/blob/main/LICENSE

"""
Monte Carlo simulation results aggregation and analysis.

This module provides the MonteCarloResults class for analyzing the runs of a
simulation, including success rates and per-period percentile bands of the
account balances.
"""

from typing import Dict, List, Optional, Sequence
import numpy as np
import pandas as pd

from ..util import Ratio
from .run import Run, summarize_runs


class MonteCarloResults:
    """Aggregates and analyzes the runs of a Monte Carlo simulation.

    Runs have different lifespans, so per-period views only include the runs
    still alive in that period.

    Example:
        >>> results = simulator.run()
        >>> print(f"Success rate: {results.success_rate().as_percent()}")
        >>> bands = results.get_percentile_df(account_index=0)
        >>> print(bands['Median'].head())
    """

    # Standard percentile levels for analysis
    PERCENTILES = {
        "Top 5%": 0.95,
        "Top 10%": 0.90,
        "Top 25%": 0.75,
        "Median": 0.50,
        "Bottom 25%": 0.25,
        "Bottom 10%": 0.10,
        "Bottom 5%": 0.05,
    }

    def __init__(self, runs: Sequence[Run], seed: Optional[int] = None):
        """Initialize with simulation runs.

        Args:
            runs: Completed runs, ordered by run index
            seed: Seed the runs were generated from
        """
        self.runs = tuple(runs)
        self.seed = seed
        self.num_runs = len(self.runs)
        self._max_periods = max((run.lifespan.periods for run in self.runs), default=0)

    def __len__(self) -> int:
        return self.num_runs

    def __getitem__(self, index: int) -> Run:
        return self.runs[index]

    def success_rate(self) -> Ratio:
        """Runs whose accounts covered the whole lifespan, as an exact ratio.

        Raises:
            ValueError: If there are no runs
        """
        successes, total = summarize_runs(list(self.runs))
        return Ratio(successes, total)

    def success_fraction(self) -> float:
        if self.num_runs == 0:
            return 0.0
        return float(self.success_rate())

    def get_lifespans(self) -> np.ndarray:
        return np.array([run.lifespan.periods for run in self.runs], dtype=np.int64)

    def get_assets_adequate_periods(self) -> np.ndarray:
        return np.array([run.assets_adequate_periods for run in self.runs], dtype=np.int64)

    def get_balance_df(self, account_index: Optional[int] = 0) -> pd.DataFrame:
        """Balances with one column per run and periods as index.

        Args:
            account_index: Account to report. None sums all accounts.

        Returns:
            DataFrame indexed by period. Periods after a run's death are NaN.
        """
        columns = {}
        for run in self.runs:
            if account_index is None:
                values = run.total_balance()
            else:
                values = run.account_balance(account_index)
            padded = np.full(self._max_periods, np.nan)
            padded[:len(values)] = values
            columns[run.index] = padded
        df = pd.DataFrame(columns, index=pd.RangeIndex(self._max_periods, name='Period'))
        df.columns.name = 'Run'
        return df

    def get_percentile_data(self, account_index: Optional[int] = 0) -> Dict[str, List[float]]:
        """Get percentile bands of a balance across periods.

        Args:
            account_index: Account to analyze. None sums all accounts.

        Returns:
            Dict mapping percentile names to lists of values (one per period)
        """
        if self.num_runs == 0:
            return {name: [] for name in self.PERCENTILES}

        balances = self.get_balance_df(account_index).to_numpy()
        percentile_data = {name: [] for name in self.PERCENTILES}

        for period_values in balances:
            alive = np.sort(period_values[~np.isnan(period_values)])
            for name, pct in self.PERCENTILES.items():
                idx = min(int(len(alive) * pct), len(alive) - 1)
                percentile_data[name].append(float(alive[idx]))

        return percentile_data

    def get_percentile_df(self, account_index: Optional[int] = 0) -> pd.DataFrame:
        """Get percentile data as a DataFrame with periods as index."""
        df = pd.DataFrame(self.get_percentile_data(account_index))
        df.index.name = 'Period'
        return df

    def get_final_values(self, account_index: Optional[int] = 0) -> np.ndarray:
        """Balance in the last period of each run (0.0 for runs that lived 0 periods)."""
        finals = []
        for run in self.runs:
            if account_index is None:
                values = run.total_balance()
            else:
                values = run.account_balance(account_index)
            finals.append(float(values[-1]) if len(values) else 0.0)
        return np.array(finals)

    def get_statistics(self, account_index: Optional[int] = 0) -> Dict[str, float]:
        """Summary statistics of the final balances.

        Returns:
            Dict with mean, std, min, max, and percentile values
        """
        if self.num_runs == 0:
            return {}

        values = self.get_final_values(account_index)

        return {
            'mean': float(np.mean(values)),
            'std': float(np.std(values)),
            'min': float(np.min(values)),
            'max': float(np.max(values)),
            'p5': float(np.percentile(values, 5)),
            'p25': float(np.percentile(values, 25)),
            'p50': float(np.percentile(values, 50)),
            'p75': float(np.percentile(values, 75)),
            'p95': float(np.percentile(values, 95)),
        }

    def get_summary_df(self) -> pd.DataFrame:
        """One row per run: lifespan, adequate periods, success and final balance."""
        return pd.DataFrame({
            'Lifespan': self.get_lifespans(),
            'Assets Adequate Periods': self.get_assets_adequate_periods(),
            'Succeeded': [run.succeeded for run in self.runs],
            'Final Balance': self.get_final_values(None),
        }, index=pd.Index([run.index for run in self.runs], name='Run'))

    def __repr__(self) -> str:
        return (f"MonteCarloResults(num_runs={self.num_runs}, "
                f"max_periods={self._max_periods})")
