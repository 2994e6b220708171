# Copyright 2025 Spencer Williams
#
# Use of this source code is governed by an MIT license:
# https://github.com/sw23/life-model/blob/main/LICENSE

from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Sequence, Tuple, TYPE_CHECKING
import numpy as np

from ..account.contribution import AccountContributionSettings
from ..errors import ConfigurationError
from ..limits import MEDICARE_RATE, MONTHS_PER_YEAR, SOCIAL_SECURITY_RATE, SOCIAL_SECURITY_WAGE_BASE
from ..timeline import is_new_year, year_start

if TYPE_CHECKING:
    from ..montecarlo.rates import RatesPath
    from ..tax import TaxCalculator


class Fica(Enum):
    """Whether the job withholds Social Security and Medicare."""
    EXEMPT = "exempt"
    SUBJECT = "subject"


@dataclass(frozen=True)
class RaiseSettings:
    """Yearly salary raise.

    Attributes:
        annual_multiplier: Salary multiplier applied at each new year (1.03 = 3% raise)
        adjust_for_inflation: Also scale the salary by the past year's inflation
    """
    annual_multiplier: float = 1.0
    adjust_for_inflation: bool = False

    def __post_init__(self):
        if not np.isfinite(self.annual_multiplier) or self.annual_multiplier <= 0:
            raise ConfigurationError(
                f"annual_multiplier must be positive, got {self.annual_multiplier}"
            )


@dataclass(frozen=True)
class JobSettings:
    """A salaried job and the contributions it makes to accounts.

    Attributes:
        monthly_salary: Gross salary per month in the first simulated year
        fica: FICA withholding policy
        raise_settings: Yearly raise policy
        contributions: Ordered account contributions. Account i of every run
                       corresponds to contributions[i].
    """
    monthly_salary: float
    fica: Fica = Fica.SUBJECT
    raise_settings: RaiseSettings = RaiseSettings()
    contributions: Tuple[AccountContributionSettings, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, 'contributions', tuple(self.contributions))
        if not np.isfinite(self.monthly_salary) or self.monthly_salary < 0:
            raise ConfigurationError(
                f"monthly_salary must be non-negative, got {self.monthly_salary}"
            )
        if not isinstance(self.fica, Fica):
            raise ConfigurationError(f"Unknown FICA policy: {self.fica!r}")
        for contribution in self.contributions:
            if not isinstance(contribution, AccountContributionSettings):
                raise ConfigurationError("contributions must be AccountContributionSettings")
        if total_contribution_rate(self.contributions) > 1.0:
            raise ConfigurationError("Employee contributions exceed 100% of salary")

    def create_job(self, lifespan_periods: int, rates: 'RatesPath',
                   periods_per_year: int = MONTHS_PER_YEAR) -> 'Job':
        return Job(self, lifespan_periods, rates, periods_per_year)


@dataclass(frozen=True)
class PeriodIncome:
    """Paycheck breakdown for one period.

    Attributes:
        gross: Gross salary
        fica: Social Security and Medicare withheld
        taxes: Income tax withheld
        net: Take-home pay after taxes and employee contributions
        contributions: Amount deposited into each account, in contribution order
    """
    gross: float
    fica: float
    taxes: float
    net: float
    contributions: Tuple[float, ...]


class Job:
    """Salary, withholding and contributions for one run."""

    def __init__(self, settings: JobSettings, lifespan_periods: int,
                 rates: 'RatesPath', periods_per_year: int = MONTHS_PER_YEAR):
        self.settings = settings
        self.rates = rates
        self.periods_per_year = periods_per_year
        self.gross_income = np.zeros(lifespan_periods)
        self.net_income = np.zeros(lifespan_periods)
        self._salary: Optional[float] = None
        self._fica_wages_year_to_date = 0.0
        self._last_period: Optional[int] = None

    @property
    def account_contributions(self) -> Tuple[AccountContributionSettings, ...]:
        return self.settings.contributions

    def _salary_for_period(self, period: int) -> float:
        if self._salary is None:
            self._salary = self.settings.monthly_salary * MONTHS_PER_YEAR / self.periods_per_year
        elif is_new_year(period, self.periods_per_year):
            raise_settings = self.settings.raise_settings
            self._salary *= raise_settings.annual_multiplier
            if raise_settings.adjust_for_inflation:
                self._salary *= self.rates.inflation_between(period - self.periods_per_year, period)
        return self._salary

    def _fica_for_period(self, period: int, gross: float) -> float:
        if self.settings.fica is Fica.EXEMPT:
            return 0.0
        if self.settings.fica is not Fica.SUBJECT:
            raise ConfigurationError(f"Unknown FICA policy: {self.settings.fica!r}")

        start = year_start(period, self.periods_per_year)
        if period == start:
            self._fica_wages_year_to_date = 0.0
        wage_base = SOCIAL_SECURITY_WAGE_BASE * self.rates.cumulative_inflation(start)
        below_base = min(gross, max(wage_base - self._fica_wages_year_to_date, 0.0))
        self._fica_wages_year_to_date += gross
        return below_base * SOCIAL_SECURITY_RATE + gross * MEDICARE_RATE

    def calculate_income_for_period(self, period: int, tax: 'TaxCalculator') -> PeriodIncome:
        """Pay one period of salary.

        Periods must be paid in order starting at 0.

        Args:
            period: Period being paid
            tax: Tax calculator of the run

        Returns:
            PeriodIncome with the amount deposited into each account
        """
        expected = 0 if self._last_period is None else self._last_period + 1
        if period != expected:
            raise ValueError(f"Income must be calculated in order: expected period {expected}, got {period}")
        self._last_period = period

        gross = self._salary_for_period(period)
        fica = self._fica_for_period(period, gross)

        taxable = gross
        take_home_deductions = 0.0
        deposits: List[float] = []
        for contribution in self.settings.contributions:
            amount = contribution.amount(gross)
            deposits.append(amount)
            if contribution.reduces_taxable_income:
                taxable -= amount
            if contribution.adds_taxable_income:
                taxable += amount
            if contribution.paid_from_take_home:
                take_home_deductions += amount

        taxes = tax.collect_income_taxes(max(taxable, 0.0), True, period).taxes
        net = gross - fica - taxes - take_home_deductions

        self.gross_income[period] = gross
        self.net_income[period] = net
        return PeriodIncome(gross=gross, fica=fica, taxes=taxes, net=net,
                            contributions=tuple(deposits))

    def retire(self) -> float:
        """Mean net take-home pay over the last year worked, or 0.0 if never paid.

        The year is the last ``periods_per_year`` periods paid, fewer if the
        job lasted less than a year.
        """
        if self._last_period is None:
            return 0.0
        start = max(self._last_period + 1 - self.periods_per_year, 0)
        return float(np.mean(self.net_income[start:self._last_period + 1]))


def total_contribution_rate(contributions: Sequence[AccountContributionSettings]) -> float:
    """Combined employee share of salary routed into accounts."""
    return sum(c.contribution_rate for c in contributions if c.paid_from_take_home)
