# Copyright 2025 Spencer Williams
#
# Use of this source code is governed by an MIT license:
# https://github.com/sw23/life-model/blob/main/LICENSE

"""
Monte Carlo simulation orchestrator.

This module provides the MonteCarloSimulator class which runs many independent
lives against sampled lifespans and rate paths, and the Simulation facade
which executes a batch eagerly and answers per-run queries.
"""

from concurrent.futures import ThreadPoolExecutor
from typing import List, Optional, Tuple

import numpy as np

from ..logging_config import get_logger
from ..person import MortalityModel, PersonSettings
from ..tax import TaxSettings
from ..util import Ratio
from ..withdrawal import ReplacementRatioWithdrawal, WithdrawalStrategy
from ..work.job import JobSettings
from .config import MonteCarloConfig
from .random_source import RandomSource, fresh_seed
from .rates import RatesSource
from .results import MonteCarloResults
from .run import Run, RunInputs

logger = get_logger(__name__)


class MonteCarloSimulator:
    """Runs a batch of independent simulated lives.

    The workflow for each run index:
    1. Derive the run's private random stream from the batch seed and index
    2. Sample a lifespan from the mortality table
    3. Build the rate path for that lifespan
    4. Work and contribute until retirement, then withdraw until death

    Example:
        >>> simulator = MonteCarloSimulator(
        ...     config=MonteCarloConfig(num_runs=100, seed=1337,
        ...                             retirement_offset_periods=456),
        ...     rates_source=RatesSource.constant(0.005, 0.002, 0.002),
        ...     job_settings=job,
        ...     person_settings=person,
        ...     tax_settings=tax,
        ... )
        >>> results = simulator.run()
        >>> print(results.success_rate().as_percent())
    """

    def __init__(self,
                 config: MonteCarloConfig,
                 rates_source: RatesSource,
                 job_settings: JobSettings,
                 person_settings: PersonSettings,
                 tax_settings: TaxSettings,
                 withdrawal_strategy: Optional[WithdrawalStrategy] = None):
        """Initialize the simulator.

        Args:
            config: Batch configuration. A missing seed is drawn once here, so
                    repeated calls to run() reproduce the same batch.
            rates_source: Market and inflation series
            job_settings: Job and its account contributions
            person_settings: Person and their death table
            tax_settings: Income tax brackets and deduction
            withdrawal_strategy: Retirement withdrawal policy. If None,
                                 replaces the mean net paycheck of the final year worked,
                                 adjusted for inflation.
        """
        self.config = config
        self.seed = config.seed if config.seed is not None else fresh_seed()
        if config.seed is None:
            logger.info("No seed given, using generated seed %d", self.seed)

        self.inputs = RunInputs(
            rates_source=rates_source,
            job_settings=job_settings,
            mortality=MortalityModel(person_settings, config.periods_per_year),
            tax_settings=tax_settings,
            withdrawal_strategy=withdrawal_strategy or ReplacementRatioWithdrawal(),
            periods_per_year=config.periods_per_year,
            retirement_offset_periods=config.retirement_offset_periods,
        )

    def run_single(self, run_index: int) -> Run:
        """Execute one run of the batch.

        The result is identical to the run at the same index of run().
        """
        if not 0 <= run_index < self.config.num_runs:
            raise IndexError(f"run_index {run_index} out of range for {self.config.num_runs} runs")
        try:
            run = Run.execute(run_index, RandomSource.for_run(self.seed, run_index), self.inputs)
        except Exception:
            logger.error("Run %d failed (seed %d)", run_index, self.seed)
            raise
        logger.debug("Run %d: lifespan=%d adequate=%d", run_index,
                     run.lifespan.periods, run.assets_adequate_periods)
        return run

    def run(self) -> MonteCarloResults:
        """Run the whole batch.

        Returns:
            MonteCarloResults with runs ordered by index
        """
        num_runs = self.config.num_runs
        workers = self.config.max_workers or 1
        logger.info("Starting %d runs (seed %d, %d worker(s))", num_runs, self.seed, workers)

        if workers > 1:
            with ThreadPoolExecutor(max_workers=workers) as executor:
                runs: List[Run] = list(executor.map(self.run_single, range(num_runs)))
        else:
            runs = [self.run_single(i) for i in range(num_runs)]

        results = MonteCarloResults(runs, seed=self.seed)
        rate = results.success_rate()
        logger.info("Finished %d runs: success rate %s (%s)",
                    num_runs, rate.as_ratio(), rate.as_percent())
        return results


class Simulation:
    """A batch of runs, executed on construction.

    Example:
        >>> sim = Simulation(1337, 100, rates, 12, job, person, 456, tax)
        >>> print(sim.success_rate().as_ratio())
        >>> balances = sim.get_account_balance_for_run(0, 0)
        >>> len(balances) == sim.lifespan_for_run(0)
        True
    """

    def __init__(self, seed: int, num_runs: int, rates_source: RatesSource,
                 periods_per_year: int, job_settings: JobSettings,
                 person_settings: PersonSettings, retirement_offset_periods: int,
                 tax_settings: TaxSettings,
                 withdrawal_strategy: Optional[WithdrawalStrategy] = None,
                 max_workers: Optional[int] = None):
        self.config = MonteCarloConfig(
            num_runs=num_runs,
            seed=seed,
            periods_per_year=periods_per_year,
            retirement_offset_periods=retirement_offset_periods,
            max_workers=max_workers,
        )
        self.rates_source = rates_source
        self.job_settings = job_settings
        self.person_settings = person_settings
        self.tax_settings = tax_settings

        simulator = MonteCarloSimulator(self.config, rates_source, job_settings,
                                        person_settings, tax_settings, withdrawal_strategy)
        self.withdrawal_strategy = simulator.inputs.withdrawal_strategy
        self.results = simulator.run()

    @property
    def seed(self) -> int:
        return self.results.seed

    @property
    def num_runs(self) -> int:
        return self.config.num_runs

    @property
    def runs(self) -> Tuple[Run, ...]:
        return self.results.runs

    def success_rate(self) -> Ratio:
        return self.results.success_rate()

    def lifespan_for_run(self, run_index: int) -> int:
        return self.runs[run_index].lifespan.periods

    def assets_adequate_periods_for_run(self, run_index: int) -> int:
        return self.runs[run_index].assets_adequate_periods

    def get_account_balance_for_run(self, run_index: int, account_index: int) -> np.ndarray:
        """Read-only per-period balance of one account of one run."""
        return self.runs[run_index].account_balance(account_index)

    def __repr__(self) -> str:
        return f"Simulation(seed={self.seed}, num_runs={self.num_runs})"
