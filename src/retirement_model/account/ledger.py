# Copyright 2025 Spencer Williams
#
# Use of this source code is governed by an MIT license:
# https://github.com/sw23/life-model/blob/main/LICENSE

from dataclasses import dataclass
from typing import TYPE_CHECKING
import numpy as np

from ..errors import ConfigurationError
from .allocation import AssetAllocation

if TYPE_CHECKING:
    from ..montecarlo.rates import RatesPath


@dataclass(frozen=True)
class AccountSettings:
    """Starting point of an investment account.

    Attributes:
        initial_balance: Balance before the first simulated period
        allocation: Glide path shared by reference with other accounts
    """
    initial_balance: float
    allocation: AssetAllocation

    def __post_init__(self):
        if not np.isfinite(self.initial_balance) or self.initial_balance < 0:
            raise ConfigurationError(
                f"initial_balance must be a non-negative number, got {self.initial_balance}"
            )
        if not isinstance(self.allocation, AssetAllocation):
            raise ConfigurationError("allocation must be an AssetAllocation")

    def create_account(self, lifespan_periods: int, rates: 'RatesPath') -> 'Account':
        return Account(self, lifespan_periods, rates)


class Account:
    """Balance history of one account during one run.

    The balance for every period is stored after that period's growth,
    contribution and withdrawal. Growth always applies to the previous
    period's closing balance (the initial balance for period 0).
    """

    def __init__(self, settings: AccountSettings, lifespan_periods: int, rates: 'RatesPath'):
        """Create an empty ledger.

        Args:
            settings: Account settings (initial balance and allocation)
            lifespan_periods: Number of periods the run lasts
            rates: Rate path of the run, at least lifespan_periods long
        """
        if len(rates) < lifespan_periods:
            raise ConfigurationError(
                f"Rate path covers {len(rates)} periods, account needs {lifespan_periods}"
            )
        self.settings = settings
        self.allocation = settings.allocation
        self.rates = rates
        self._balance = np.zeros(lifespan_periods)
        self.exhausted = False

    def __len__(self) -> int:
        return len(self._balance)

    def balance(self) -> np.ndarray:
        """Read-only view of the per-period balances."""
        view = self._balance.view()
        view.setflags(write=False)
        return view

    def opening_balance(self, period: int) -> float:
        if period == 0:
            return self.settings.initial_balance
        return float(self._balance[period - 1])

    def weighted_return(self, period: int) -> float:
        stocks = self.allocation.fraction_at(period)
        return stocks * self.rates.stocks[period] + (1.0 - stocks) * self.rates.bonds[period]

    def grow(self, period: int) -> float:
        """Apply the period's investment return to the opening balance.

        Returns:
            The growth amount applied (negative for a loss)
        """
        opening = self.opening_balance(period)
        closing = max(opening * (1.0 + self.weighted_return(period)), 0.0)
        self._balance[period] = closing
        return closing - opening

    def invest(self, period: int, contribution: float) -> float:
        """Grow the account and add this period's contribution.

        Returns:
            The closing balance for the period
        """
        if contribution < 0:
            raise ValueError(f"Contribution cannot be negative: {contribution}")
        self.grow(period)
        self._balance[period] += contribution
        return float(self._balance[period])

    def withdraw(self, amount: float, period: int) -> float:
        """Withdraw from the period's balance, clamping at zero.

        Growth for the period must already have been applied with grow().

        Args:
            amount: Amount requested
            period: Period of the withdrawal

        Returns:
            The shortfall: the part of the request the balance could not cover
        """
        if amount <= 0:
            return 0.0
        available = float(self._balance[period])
        if amount < available:
            self._balance[period] = available - amount
            return 0.0
        self._balance[period] = 0.0
        self.exhausted = True
        return amount - available

    def __repr__(self) -> str:
        return (f"Account(initial_balance={self.settings.initial_balance:,.2f}, "
                f"periods={len(self)})")
