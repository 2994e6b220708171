# Copyright 2025 Spencer Williams
#
# Use of this source code is governed by an MIT license:
# https://github.com/sw23/life-model/blob/main/LICENSE

"""
Routing of salary contributions into accounts.

Contribution source and taxability are closed enums. Code that routes money
switches over every member, so adding a member (e.g. a Roth variant) means
visiting each of those switches.
"""

from dataclasses import dataclass
from enum import Enum

from ..errors import ConfigurationError
from .ledger import AccountSettings


class AccountContributionSource(Enum):
    """Who pays the contribution."""
    EMPLOYEE = "employee"
    EMPLOYER = "employer"


class AccountContributionTaxability(Enum):
    """Whether the contribution is made before or after income tax."""
    PRE_TAX = "pre_tax"
    POST_TAX = "post_tax"


@dataclass(frozen=True)
class AccountContributionSettings:
    """A share of each paycheck routed into one account.

    Attributes:
        account: Settings of the account receiving the contribution
        contribution_rate: Fraction of gross salary contributed, in [0, 1]
        source: Employee or employer contribution
        taxability: Pre-tax or post-tax contribution
    """
    account: AccountSettings
    contribution_rate: float
    source: AccountContributionSource = AccountContributionSource.EMPLOYEE
    taxability: AccountContributionTaxability = AccountContributionTaxability.PRE_TAX

    def __post_init__(self):
        if not 0.0 <= self.contribution_rate <= 1.0:
            raise ConfigurationError(
                f"contribution_rate must be in [0, 1], got {self.contribution_rate}"
            )
        if not isinstance(self.source, AccountContributionSource):
            raise ConfigurationError(f"Unknown contribution source: {self.source!r}")
        if not isinstance(self.taxability, AccountContributionTaxability):
            raise ConfigurationError(f"Unknown contribution taxability: {self.taxability!r}")

    def amount(self, gross_income: float) -> float:
        return self.contribution_rate * gross_income

    @property
    def reduces_taxable_income(self) -> bool:
        """Employee pre-tax contributions come out of taxable wages."""
        if self.source is AccountContributionSource.EMPLOYEE:
            return self.taxability is AccountContributionTaxability.PRE_TAX
        if self.source is AccountContributionSource.EMPLOYER:
            return False
        raise ConfigurationError(f"Unknown contribution source: {self.source!r}")

    @property
    def adds_taxable_income(self) -> bool:
        """Employer post-tax contributions are taxable income to the employee."""
        if self.source is AccountContributionSource.EMPLOYEE:
            return False
        if self.source is AccountContributionSource.EMPLOYER:
            return self.taxability is AccountContributionTaxability.POST_TAX
        raise ConfigurationError(f"Unknown contribution source: {self.source!r}")

    @property
    def paid_from_take_home(self) -> bool:
        """Employee contributions reduce take-home pay; employer ones do not."""
        if self.source is AccountContributionSource.EMPLOYEE:
            return True
        if self.source is AccountContributionSource.EMPLOYER:
            return False
        raise ConfigurationError(f"Unknown contribution source: {self.source!r}")
