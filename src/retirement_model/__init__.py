# Copyright 2025 Spencer Williams
#
# Use of this source code is governed by an MIT license:
# https://github.com/sw23/life-model/blob/main/LICENSE

"""
Retirement Projection Engine

A Monte Carlo retirement-finance simulator. Each run samples a lifespan and a
sequence of market returns, pays a salary with taxes and account contributions
until retirement, then withdraws from the accounts until death.

Example usage:
    from retirement_model import (AccountContributionSettings, AccountSettings,
                                  AssetAllocation, JobSettings, PersonSettings,
                                  RatesSource, Simulation, TaxSettings)

    account = AccountSettings(initial_balance=50000,
                              allocation=AssetAllocation.new_linear_glide(0, 0.9, 480, 0.4))
    job = JobSettings(monthly_salary=6000,
                      contributions=(AccountContributionSettings(account, 0.10),))
    person = PersonSettings('Sam', 35, 0, death_rates)
    tax = TaxSettings((0.0, 1000.0, 4000.0), (0.0, 0.12, 0.22))

    sim = Simulation(1337, 100, RatesSource.constant(0.006, 0.003, 0.002), 12,
                     job, person, 360, tax)
    print(sim.success_rate().as_percent())
"""

import logging

from .__meta__ import __version__

# Errors
from .errors import ConfigurationError, ExhaustedModelError, RetirementModelError

# Core simulation
from .montecarlo.config import MonteCarloConfig
from .montecarlo.rates import Rate, RatesSampling, RatesSource
from .montecarlo.results import MonteCarloResults
from .montecarlo.simulator import MonteCarloSimulator, Simulation

# People
from .person import MortalityModel, PersonSettings

# Accounts
from .account.allocation import AssetAllocation
from .account.contribution import (AccountContributionSettings, AccountContributionSource,
                                   AccountContributionTaxability)
from .account.ledger import AccountSettings

# Work
from .work.job import Fica, JobSettings, RaiseSettings

# Taxes and withdrawals
from .tax import TaxBracket, TaxSettings
from .withdrawal import (FixedWithdrawal, PercentOfBalanceWithdrawal,
                         ReplacementRatioWithdrawal, WithdrawalStrategy)
from .util import Ratio
from .logging_config import setup_logging

logging.getLogger(__name__).addHandler(logging.NullHandler())
