# Copyright 2025 Spencer Williams
#
# Use of this source code is governed by an MIT license:
# https://github.com/sw23/life-model/blob/main/LICENSE

"""
Progressive income tax.

Brackets and the standard deduction are annual amounts. When inflation
indexing is enabled they are scaled by the inflation accumulated from the start
of the simulation up to the start of the current tax year, so they only change
at year boundaries. Tax credits and capital gains rates are not modeled.
"""

from dataclasses import dataclass
from typing import Optional, Sequence, Tuple, TYPE_CHECKING
import numpy as np

from .errors import ConfigurationError
from .timeline import year_start

if TYPE_CHECKING:
    from .montecarlo.rates import RatesPath


@dataclass(frozen=True)
class TaxBracket:
    floor: float
    rate: float


@dataclass(frozen=True)
class TaxResult:
    """Outcome of withholding tax from one payment.

    Attributes:
        taxes: Tax withheld
        leftover: Amount remaining after tax
    """
    taxes: float
    leftover: float


@dataclass(frozen=True)
class TaxSettings:
    """Annual progressive tax schedule.

    Attributes:
        bracket_floors: Lower bound of each bracket. Must start at 0 and be
                        strictly increasing.
        bracket_rates: Marginal rate of each bracket, in [0, 1]
        inflation_adjust_brackets: Scale bracket floors by observed inflation
        standard_deduction: Income exempt from tax each year
        inflation_adjust_deduction: Scale the deduction by observed inflation
    """
    bracket_floors: Tuple[float, ...]
    bracket_rates: Tuple[float, ...]
    inflation_adjust_brackets: bool = False
    standard_deduction: float = 0.0
    inflation_adjust_deduction: bool = False

    def __post_init__(self):
        floors = tuple(float(f) for f in self.bracket_floors)
        rates = tuple(float(r) for r in self.bracket_rates)
        object.__setattr__(self, 'bracket_floors', floors)
        object.__setattr__(self, 'bracket_rates', rates)

        if not floors:
            raise ConfigurationError("At least one tax bracket is required")
        if len(floors) != len(rates):
            raise ConfigurationError(
                f"bracket_floors has {len(floors)} entries but bracket_rates has {len(rates)}"
            )
        if floors[0] != 0.0:
            raise ConfigurationError(f"The first bracket must start at 0, got {floors[0]}")
        for lower, upper in zip(floors, floors[1:]):
            if not upper > lower:
                raise ConfigurationError(
                    f"Bracket floors must be strictly increasing: {lower} then {upper}"
                )
        for rate in rates:
            if not 0.0 <= rate <= 1.0:
                raise ConfigurationError(f"Bracket rates must be in [0, 1], got {rate}")
        if not np.isfinite(self.standard_deduction) or self.standard_deduction < 0:
            raise ConfigurationError(
                f"standard_deduction must be non-negative, got {self.standard_deduction}"
            )

    @classmethod
    def from_brackets(cls, brackets: Sequence[TaxBracket], **kwargs) -> 'TaxSettings':
        return cls(tuple(b.floor for b in brackets), tuple(b.rate for b in brackets), **kwargs)

    @property
    def brackets(self) -> Tuple[TaxBracket, ...]:
        return tuple(TaxBracket(f, r) for f, r in zip(self.bracket_floors, self.bracket_rates))


class TaxCalculator:
    """Computes and withholds income tax for one run.

    Example:
        >>> settings = TaxSettings((0, 1000, 3000), (0.10, 0.12, 0.14),
        ...                        standard_deduction=10000)
        >>> TaxCalculator(settings).tax_owed(12000, 0)
        220.0
    """

    def __init__(self, settings: TaxSettings,
                 rates: Optional['RatesPath'] = None,
                 periods_per_year: int = 12):
        """Initialize the calculator.

        Args:
            settings: Tax schedule
            rates: Rate path of the run, used for inflation indexing. Without
                   it the schedule is never indexed.
            periods_per_year: Number of periods in a tax year
        """
        if periods_per_year < 1:
            raise ConfigurationError(f"periods_per_year must be at least 1, got {periods_per_year}")
        self.settings = settings
        self.rates = rates
        self.periods_per_year = periods_per_year
        self._floors = np.array(settings.bracket_floors)
        self._rates = np.array(settings.bracket_rates)
        self._year_start: Optional[int] = None
        self._taxable_year_to_date = 0.0

    def inflation_factor(self, period: int) -> float:
        """Inflation accumulated from period 0 to the start of the period's tax year."""
        if self.rates is None:
            return 1.0
        return self.rates.cumulative_inflation(year_start(period, self.periods_per_year))

    def tax_owed(self, taxable_income: float, period: int = 0) -> float:
        """Annual tax on ``taxable_income`` under the schedule in force at ``period``.

        Args:
            taxable_income: Income for the tax year before the standard deduction
            period: Any period within the tax year

        Returns:
            Tax owed. Zero for incomes at or below the standard deduction.
        """
        factor = self.inflation_factor(period)

        deduction = self.settings.standard_deduction
        if self.settings.inflation_adjust_deduction:
            deduction *= factor
        income = max(taxable_income - deduction, 0.0)
        if income == 0.0:
            return 0.0

        floors = self._floors * factor if self.settings.inflation_adjust_brackets else self._floors
        ceilings = np.append(floors[1:], np.inf)
        in_bracket = np.clip(np.minimum(income, ceilings) - floors, 0.0, None)
        return float(np.dot(in_bracket, self._rates))

    def collect_income_taxes(self, amount: float, taxable: bool, period: int) -> TaxResult:
        """Withhold tax from a payment received in ``period``.

        Taxable payments are taxed at the marginal cost they add to the
        year-to-date taxable income, so a year of equal payments ends up
        withholding exactly the annual tax.

        Args:
            amount: Payment amount
            taxable: Whether the payment is taxable income
            period: Period the payment is received in

        Returns:
            TaxResult with the tax withheld and the amount left over
        """
        if not taxable:
            return TaxResult(taxes=0.0, leftover=amount)

        start = year_start(period, self.periods_per_year)
        if self._year_start != start:
            self._year_start = start
            self._taxable_year_to_date = 0.0

        already_owed = self.tax_owed(self._taxable_year_to_date, period)
        self._taxable_year_to_date += amount
        taxes = self.tax_owed(self._taxable_year_to_date, period) - already_owed
        return TaxResult(taxes=taxes, leftover=amount - taxes)

    @property
    def taxable_year_to_date(self) -> float:
        return self._taxable_year_to_date
