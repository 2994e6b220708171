# Copyright 2025 Spencer Williams
#
# Use of this source code is governed by an MIT license:
# https://github.com/sw23/life-model/blob/main/LICENSE

"""
A single simulated life.

A run samples a lifespan and a rate path, works until the retirement period
(or death), then withdraws from the accounts every period until death.
"""

from dataclasses import dataclass
from typing import List, Optional, Tuple
import numpy as np

from ..account.ledger import Account
from ..person import MortalityModel
from ..tax import TaxCalculator, TaxSettings
from ..timeline import Lifespan
from ..withdrawal import RetirementState, WithdrawalStrategy, distribute_withdrawal
from ..work.job import JobSettings
from .random_source import RandomSource
from .rates import RatesPath, RatesSource


@dataclass(frozen=True)
class RunInputs:
    """Read-only configuration shared by every run of a simulation."""
    rates_source: RatesSource
    job_settings: JobSettings
    mortality: MortalityModel
    tax_settings: TaxSettings
    withdrawal_strategy: WithdrawalStrategy
    periods_per_year: int
    retirement_offset_periods: int


class Run:
    """Outcome of one simulated life.

    Attributes:
        index: Position of the run in its simulation
        lifespan: Number of periods lived
        assets_adequate_periods: Periods from the start before the first
                                 withdrawal shortfall (the whole lifespan if none)
        retirement_accounts: One account per job contribution, in order
        net_income: Take-home pay per period (zero after retirement)
        rates: Rate path the run experienced
    """

    def __init__(self, index: int, lifespan: Lifespan, assets_adequate_periods: int,
                 retirement_accounts: Tuple[Account, ...], net_income: np.ndarray,
                 rates: RatesPath, first_shortfall_period: Optional[int] = None):
        self.index = index
        self.lifespan = lifespan
        self.assets_adequate_periods = assets_adequate_periods
        self.retirement_accounts = retirement_accounts
        net_income.setflags(write=False)
        self.net_income = net_income
        self.rates = rates
        self.first_shortfall_period = first_shortfall_period

    @property
    def succeeded(self) -> bool:
        """True when the accounts covered every period of the lifespan."""
        return self.assets_adequate_periods >= self.lifespan.periods

    def account_balance(self, account_index: int) -> np.ndarray:
        return self.retirement_accounts[account_index].balance()

    def total_balance(self) -> np.ndarray:
        """Combined balance of all accounts per period."""
        total = np.zeros(self.lifespan.periods)
        for account in self.retirement_accounts:
            total += account.balance()
        return total

    @classmethod
    def execute(cls, index: int, random_source: RandomSource, inputs: RunInputs) -> 'Run':
        """Simulate one life.

        Args:
            index: Position of the run in its simulation
            random_source: The run's private random stream
            inputs: Shared simulation configuration

        Returns:
            The completed Run
        """
        periods = inputs.mortality.sample_lifespan(random_source)
        lifespan = Lifespan(periods)
        rates = inputs.rates_source.path_for_run(random_source.spawn(), periods)

        job = inputs.job_settings.create_job(periods, rates, inputs.periods_per_year)
        tax = TaxCalculator(inputs.tax_settings, rates, inputs.periods_per_year)
        accounts = tuple(
            contribution.account.create_account(periods, rates)
            for contribution in job.account_contributions
        )

        retirement_period = min(inputs.retirement_offset_periods, periods)
        adequate = 0

        # Accumulation: work until retirement or death
        for period in range(retirement_period):
            income = job.calculate_income_for_period(period, tax)
            for account, amount in zip(accounts, income.contributions):
                account.invest(period, amount)
            adequate += 1

        # Withdrawal: every remaining period until death
        first_shortfall: Optional[int] = None
        if retirement_period < periods:
            state = RetirementState(
                retirement_period=retirement_period,
                pre_retirement_income=job.retire(),
                balance_at_retirement=_closing_total(accounts, retirement_period),
                periods_per_year=inputs.periods_per_year,
                rates=rates,
            )
            for period in range(retirement_period, periods):
                for account in accounts:
                    account.grow(period)
                target = inputs.withdrawal_strategy.amount_for_period(period, state)
                shortfall = distribute_withdrawal(target, accounts, period)
                if shortfall > 0 and first_shortfall is None:
                    first_shortfall = period
                if first_shortfall is None:
                    adequate += 1

        return cls(index, lifespan, adequate, accounts, job.net_income, rates, first_shortfall)

    def __repr__(self) -> str:
        return (f"Run(index={self.index}, lifespan={self.lifespan.periods}, "
                f"assets_adequate_periods={self.assets_adequate_periods})")


def _closing_total(accounts: Tuple[Account, ...], retirement_period: int) -> float:
    if retirement_period == 0:
        return sum(a.settings.initial_balance for a in accounts)
    return sum(float(a.balance()[retirement_period - 1]) for a in accounts)


def summarize_runs(runs: List[Run]) -> Tuple[int, int]:
    """Count (successful runs, total runs)."""
    return sum(1 for run in runs if run.succeeded), len(runs)
