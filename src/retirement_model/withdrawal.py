# Copyright 2025 Spencer Williams
#
# Use of this source code is governed by an MIT license:
# https://github.com/sw23/life-model/blob/main/LICENSE

"""
Withdrawal policies for the decumulation phase.

A policy turns the state at retirement into a deterministic per-period
withdrawal target. distribute_withdrawal() then takes the target from the
accounts in proportion to their balances. Withdrawals are not taxed.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Sequence, TYPE_CHECKING
import numpy as np

from .errors import ConfigurationError

if TYPE_CHECKING:
    from .account.ledger import Account
    from .montecarlo.rates import RatesPath


@dataclass(frozen=True)
class RetirementState:
    """What a withdrawal policy knows when the person retires.

    Attributes:
        retirement_period: First period of the withdrawal phase
        pre_retirement_income: Mean net take-home pay per period over the last year worked
        balance_at_retirement: Combined closing balance of the last period worked
        periods_per_year: Number of periods per year
        rates: Rate path of the run
    """
    retirement_period: int
    pre_retirement_income: float
    balance_at_retirement: float
    periods_per_year: int
    rates: 'RatesPath'

    def inflation_since_retirement(self, period: int) -> float:
        return self.rates.inflation_between(self.retirement_period, period)


class WithdrawalStrategy(ABC):
    """Per-period withdrawal target during retirement."""

    @abstractmethod
    def amount_for_period(self, period: int, state: RetirementState) -> float:
        """Withdrawal target for ``period`` (a period at or after retirement)."""


@dataclass(frozen=True)
class ReplacementRatioWithdrawal(WithdrawalStrategy):
    """Replace a share of the take-home pay of the final year worked.

    Attributes:
        ratio: Share of the mean final-year net paycheck withdrawn each period
        adjust_for_inflation: Grow the target with inflation after retirement
    """
    ratio: float = 1.0
    adjust_for_inflation: bool = True

    def __post_init__(self):
        if not np.isfinite(self.ratio) or self.ratio < 0:
            raise ConfigurationError(f"ratio must be non-negative, got {self.ratio}")

    def amount_for_period(self, period: int, state: RetirementState) -> float:
        amount = self.ratio * max(state.pre_retirement_income, 0.0)
        if self.adjust_for_inflation:
            amount *= state.inflation_since_retirement(period)
        return amount


@dataclass(frozen=True)
class FixedWithdrawal(WithdrawalStrategy):
    """Withdraw a fixed amount every period.

    Attributes:
        amount: Withdrawal per period, in dollars at retirement
        adjust_for_inflation: Grow the amount with inflation after retirement
    """
    amount: float
    adjust_for_inflation: bool = False

    def __post_init__(self):
        if not np.isfinite(self.amount) or self.amount < 0:
            raise ConfigurationError(f"amount must be non-negative, got {self.amount}")

    def amount_for_period(self, period: int, state: RetirementState) -> float:
        if self.adjust_for_inflation:
            return self.amount * state.inflation_since_retirement(period)
        return self.amount


@dataclass(frozen=True)
class PercentOfBalanceWithdrawal(WithdrawalStrategy):
    """Withdraw a fixed share of the balance at retirement each year.

    Attributes:
        annual_rate: Share of the retirement balance withdrawn per year (0.04 = 4% rule)
        adjust_for_inflation: Grow the amount with inflation after retirement.
                              Off by default, so the target stays constant.
    """
    annual_rate: float = 0.04
    adjust_for_inflation: bool = False

    def __post_init__(self):
        if not 0.0 <= self.annual_rate <= 1.0:
            raise ConfigurationError(f"annual_rate must be in [0, 1], got {self.annual_rate}")

    def amount_for_period(self, period: int, state: RetirementState) -> float:
        amount = self.annual_rate * state.balance_at_retirement / state.periods_per_year
        if self.adjust_for_inflation:
            amount *= state.inflation_since_retirement(period)
        return amount


def withdrawal_shares(amount: float, accounts: Sequence['Account'], period: int) -> np.ndarray:
    """Split ``amount`` across accounts in proportion to their balances at ``period``."""
    balances = np.array([float(a.balance()[period]) for a in accounts])
    total = balances.sum()
    if total <= 0:
        return np.zeros(len(accounts))
    return balances / total * amount


def distribute_withdrawal(amount: float, accounts: Sequence['Account'], period: int) -> float:
    """Take ``amount`` from the accounts after the period's growth.

    Args:
        amount: Withdrawal target for the period
        accounts: Accounts of the run, already grown for ``period``
        period: Period of the withdrawal

    Returns:
        Shortfall: the part of the target the accounts could not cover
    """
    if amount <= 0:
        return 0.0
    balances = [float(a.balance()[period]) for a in accounts]
    total = sum(balances)
    if total <= 0:
        return amount

    if amount >= total:
        # Not enough anywhere: empty every account
        for account, balance in zip(accounts, balances):
            account.withdraw(balance, period)
        return amount - total

    shortfall = 0.0
    for account, share in zip(accounts, withdrawal_shares(amount, accounts, period)):
        shortfall += account.withdraw(float(share), period)
    return shortfall
