# Copyright 2025 Spencer Williams
#
# Use of this source code is governed by an MIT license:
# https://github.com/sw23/life-model/blob/main/LICENSE

"""
Integration tests for Monte Carlo runs and the Simulation facade.
"""

import math
import unittest
import numpy as np

from ..account.allocation import AssetAllocation
from ..account.contribution import AccountContributionSettings, AccountContributionSource
from ..account.ledger import AccountSettings
from ..errors import ExhaustedModelError
from ..montecarlo.config import MonteCarloConfig
from ..montecarlo.random_source import RandomSource
from ..montecarlo.rates import RatesSampling, RatesSource
from ..montecarlo.run import Run, RunInputs
from ..montecarlo.simulator import MonteCarloSimulator, Simulation
from ..person import MortalityModel, PersonSettings
from ..tax import TaxSettings
from ..util import Ratio
from ..withdrawal import FixedWithdrawal, ReplacementRatioWithdrawal
from ..work.job import Fica, JobSettings, RaiseSettings


# Gompertz-style annual death rates reaching certainty at age 103
DEATH_RATES = tuple(min(1.0, 0.0001 * math.exp(0.09 * age)) for age in range(110))

RETIREMENT_PERIODS = 456


def _rates_source(sampling=RatesSampling.CYCLE):
    # Five years of alternating good and bad months
    stocks = [0.012, -0.006, 0.009, 0.004, -0.002, 0.011] * 10
    bonds = [0.003, 0.002, 0.004, 0.003, 0.002, 0.003] * 10
    inflation = [0.002, 0.003, 0.002, 0.001, 0.002, 0.003] * 10
    kwargs = {'block_length': 12} if sampling is RatesSampling.BLOCK_BOOTSTRAP else {}
    return RatesSource(stocks, bonds, inflation, sampling=sampling, **kwargs)


def _job_settings(initial_balance=25000.0):
    allocation = AssetAllocation.new_linear_glide(0, 0.9, RETIREMENT_PERIODS, 0.4)
    retirement = AccountSettings(initial_balance, allocation)
    employer_match = AccountSettings(0.0, allocation)
    brokerage = AccountSettings(5000.0, allocation)
    return JobSettings(
        monthly_salary=5000.0,
        raise_settings=RaiseSettings(annual_multiplier=1.02, adjust_for_inflation=False),
        contributions=(
            AccountContributionSettings(retirement, 0.10),
            AccountContributionSettings(employer_match, 0.04,
                                        source=AccountContributionSource.EMPLOYER),
            AccountContributionSettings(brokerage, 0.05),
        ),
    )


def _person():
    return PersonSettings("Sam", 35, 0, DEATH_RATES)


def _tax_settings():
    return TaxSettings((0, 11000, 44725, 95375), (0.10, 0.12, 0.22, 0.24),
                       standard_deduction=13850, inflation_adjust_brackets=True,
                       inflation_adjust_deduction=True)


def _simulation(seed=1337, num_runs=20, **kwargs):
    params = dict(
        seed=seed,
        num_runs=num_runs,
        rates_source=_rates_source(),
        periods_per_year=12,
        job_settings=_job_settings(),
        person_settings=_person(),
        retirement_offset_periods=RETIREMENT_PERIODS,
        tax_settings=_tax_settings(),
    )
    params.update(kwargs)
    return Simulation(**params)


def _assert_same_runs(test, first, second):
    test.assertEqual(len(first), len(second))
    for a, b in zip(first, second):
        test.assertEqual(a.index, b.index)
        test.assertEqual(a.lifespan, b.lifespan)
        test.assertEqual(a.assets_adequate_periods, b.assets_adequate_periods)
        test.assertEqual(a.first_shortfall_period, b.first_shortfall_period)
        for i in range(len(a.retirement_accounts)):
            np.testing.assert_array_equal(a.account_balance(i), b.account_balance(i))


class TestRun(unittest.TestCase):
    """Tests for a single simulated life."""

    def _inputs(self, **overrides):
        params = dict(
            rates_source=_rates_source(),
            job_settings=_job_settings(),
            mortality=MortalityModel(_person()),
            tax_settings=_tax_settings(),
            withdrawal_strategy=ReplacementRatioWithdrawal(),
            periods_per_year=12,
            retirement_offset_periods=RETIREMENT_PERIODS,
        )
        params.update(overrides)
        return RunInputs(**params)

    def test_one_account_per_contribution(self):
        run = Run.execute(0, RandomSource.for_run(1337, 0), self._inputs())

        self.assertEqual(len(run.retirement_accounts), 3)
        for i in range(3):
            self.assertEqual(len(run.account_balance(i)), run.lifespan.periods)
        self.assertEqual(len(run.net_income), run.lifespan.periods)
        self.assertEqual(len(run.rates), run.lifespan.periods)

    def test_accumulation_grows_balance(self):
        """Test that steady contributions grow the balance while working."""
        source = RatesSource.constant(0.005, 0.002, 0.001)
        run = Run.execute(0, RandomSource.for_run(1337, 0), self._inputs(rates_source=source))

        working = min(RETIREMENT_PERIODS, run.lifespan.periods)
        balance = run.account_balance(0)[:working]
        self.assertTrue(np.all(np.diff(balance) > 0))
        self.assertTrue(np.all(run.net_income[:working] > 0))
        np.testing.assert_array_equal(run.net_income[working:], 0.0)

    def test_shortfall_marks_run_inadequate(self):
        savings = AccountSettings(1000.0, AssetAllocation.constant(0.0))
        job = JobSettings(0.0, fica=Fica.EXEMPT,
                          contributions=(AccountContributionSettings(savings, 0.0),))
        inputs = self._inputs(job_settings=job,
                              withdrawal_strategy=FixedWithdrawal(300.0),
                              retirement_offset_periods=0,
                              rates_source=RatesSource.constant(0.0, 0.0, 0.0))

        for index in range(5):
            run = Run.execute(index, RandomSource.for_run(2024, index), inputs)
            if run.lifespan.periods <= 3:
                continue
            # 1000 covers three withdrawals of 300, the fourth falls short
            self.assertEqual(run.first_shortfall_period, 3)
            self.assertEqual(run.assets_adequate_periods, 3)
            self.assertFalse(run.succeeded)
            np.testing.assert_allclose(run.account_balance(0)[:4], [700.0, 400.0, 100.0, 0.0])

    def test_zero_stays_zero(self):
        """Test that an exhausted balance never recovers."""
        sim = _simulation(num_runs=30, withdrawal_strategy=ReplacementRatioWithdrawal(3.0))

        for run in sim.runs:
            total = run.total_balance()
            retired = total[RETIREMENT_PERIODS:]
            zeros = np.flatnonzero(retired == 0.0)
            if len(zeros):
                self.assertTrue(np.all(retired[zeros[0]:] == 0.0))
                self.assertFalse(run.succeeded)

    def test_success_matches_first_shortfall(self):
        sim = _simulation(num_runs=30)

        for run in sim.runs:
            if run.first_shortfall_period is None:
                self.assertTrue(run.succeeded)
                self.assertEqual(run.assets_adequate_periods, run.lifespan.periods)
            else:
                self.assertFalse(run.succeeded)
                self.assertEqual(run.assets_adequate_periods, run.first_shortfall_period)
                self.assertGreaterEqual(run.first_shortfall_period, RETIREMENT_PERIODS)

    def test_death_before_retirement_succeeds(self):
        person = PersonSettings("Sam", 35, 0, (0.3,) * 60)
        sim = _simulation(num_runs=10, person_settings=person)

        for run in sim.runs:
            if run.lifespan.periods <= RETIREMENT_PERIODS:
                self.assertTrue(run.succeeded)
                self.assertIsNone(run.first_shortfall_period)


class TestSimulation(unittest.TestCase):
    """Tests for the Simulation facade and MonteCarloSimulator."""

    def test_reproducible(self):
        """Test that the same seed and inputs reproduce identical runs."""
        _assert_same_runs(self, _simulation(seed=99).runs, _simulation(seed=99).runs)

    def test_different_seeds_differ(self):
        first = [r.lifespan.periods for r in _simulation(seed=1).runs]
        second = [r.lifespan.periods for r in _simulation(seed=2).runs]
        self.assertNotEqual(first, second)

    def test_parallel_equals_sequential(self):
        sequential = _simulation(seed=7, num_runs=16)
        parallel = _simulation(seed=7, num_runs=16, max_workers=4)
        _assert_same_runs(self, sequential.runs, parallel.runs)
        self.assertEqual(sequential.success_rate(), parallel.success_rate())

    def test_bootstrap_reproducible(self):
        source = _rates_source(RatesSampling.BLOCK_BOOTSTRAP)
        first = _simulation(seed=5, num_runs=8, rates_source=source)
        second = _simulation(seed=5, num_runs=8, rates_source=source, max_workers=3)
        _assert_same_runs(self, first.runs, second.runs)

    def test_run_single_matches_batch(self):
        config = MonteCarloConfig(num_runs=10, seed=31,
                                  retirement_offset_periods=RETIREMENT_PERIODS)
        simulator = MonteCarloSimulator(config, _rates_source(), _job_settings(),
                                        _person(), _tax_settings())
        results = simulator.run()

        _assert_same_runs(self, [results[6]], [simulator.run_single(6)])
        with self.assertRaises(IndexError):
            simulator.run_single(10)

    def test_generated_seed_is_recorded(self):
        config = MonteCarloConfig(num_runs=3, retirement_offset_periods=RETIREMENT_PERIODS)
        simulator = MonteCarloSimulator(config, _rates_source(), _job_settings(),
                                        _person(), _tax_settings())
        first = simulator.run()
        second = simulator.run()

        self.assertIsNotNone(first.seed)
        self.assertEqual(first.seed, second.seed)
        _assert_same_runs(self, first.runs, second.runs)

    def test_success_rate_bounds(self):
        sim = _simulation(num_runs=25)
        rate = sim.success_rate()

        self.assertIsInstance(rate, Ratio)
        self.assertLessEqual(rate.num, rate.denom)
        self.assertEqual(rate.denom, 25)
        self.assertEqual(rate.num, sum(1 for r in sim.runs if r.succeeded))

    def test_everything_funded(self):
        allocation = AssetAllocation.constant(0.5)
        job = JobSettings(0.0, contributions=(
            AccountContributionSettings(AccountSettings(5e6, allocation), 0.0),))
        sim = _simulation(num_runs=10, job_settings=job, retirement_offset_periods=0,
                          withdrawal_strategy=FixedWithdrawal(1000.0))

        self.assertEqual(sim.success_rate(), Ratio(10, 10))

    def test_nothing_funded(self):
        job = JobSettings(0.0, contributions=(
            AccountContributionSettings(AccountSettings(0.0, AssetAllocation.constant(0.5)), 0.0),))
        sim = _simulation(num_runs=10, job_settings=job, retirement_offset_periods=0,
                          withdrawal_strategy=FixedWithdrawal(1000.0))

        for i in range(10):
            if sim.lifespan_for_run(i) > 0:
                self.assertEqual(sim.assets_adequate_periods_for_run(i), 0)

    def test_queries(self):
        sim = _simulation(num_runs=5)

        self.assertEqual(sim.seed, 1337)
        self.assertEqual(sim.num_runs, 5)
        self.assertEqual(len(sim.runs), 5)
        balance = sim.get_account_balance_for_run(2, 1)
        self.assertEqual(len(balance), sim.lifespan_for_run(2))
        self.assertFalse(balance.flags.writeable)
        self.assertLessEqual(sim.assets_adequate_periods_for_run(2), sim.lifespan_for_run(2))
        self.assertEqual(len(sim.results.get_percentile_df(0)), max(sim.results.get_lifespans()))

    def test_exhausted_series_fails_the_batch(self):
        source = RatesSource([0.01] * 12, [0.0] * 12, [0.0] * 12, sampling=RatesSampling.EXACT)
        with self.assertLogs('retirement_model.montecarlo.simulator', level='ERROR') as logs:
            with self.assertRaises(ExhaustedModelError):
                _simulation(num_runs=3, rates_source=source)
        self.assertRegex(logs.output[0], r"Run \d+ failed")

    def test_logs_batch_progress(self):
        with self.assertLogs('retirement_model.montecarlo.simulator', level='DEBUG') as logs:
            _simulation(num_runs=2)

        messages = "\n".join(logs.output)
        self.assertIn("Starting 2 runs (seed 1337", messages)
        self.assertIn("Run 1: lifespan=", messages)
        self.assertIn("Finished 2 runs: success rate", messages)

    def test_reference_scenario(self):
        """Seed 1337, 100 monthly runs, retirement after 456 periods."""
        sim = _simulation(seed=1337, num_runs=100)
        rate = sim.success_rate()

        self.assertEqual(rate.denom, 100)
        self.assertEqual(rate.num, sum(1 for r in sim.runs if r.succeeded))
        for i, run in enumerate(sim.runs):
            self.assertEqual(run.index, i)
            balance = sim.get_account_balance_for_run(i, 0)
            self.assertEqual(len(balance), sim.lifespan_for_run(i))
            self.assertTrue(np.all(balance >= 0.0))
            if run.succeeded and run.lifespan.periods > RETIREMENT_PERIODS:
                self.assertGreater(balance[-1], 0.0)

    def test_funded_balance_declines(self):
        """Test that withdrawals larger than growth draw a funded balance down."""
        savings = AccountSettings(5e6, AssetAllocation.constant(0.0))
        job = JobSettings(0.0, fica=Fica.EXEMPT,
                          contributions=(AccountContributionSettings(savings, 0.0),))
        sim = _simulation(num_runs=10, job_settings=job, retirement_offset_periods=0,
                          rates_source=RatesSource.constant(0.004, 0.0005, 0.0),
                          withdrawal_strategy=FixedWithdrawal(5000.0))

        self.assertEqual(sim.success_rate(), Ratio(10, 10))
        for i in range(10):
            balance = sim.get_account_balance_for_run(i, 0)
            if len(balance) < 12:
                continue
            self.assertTrue(np.all(balance[-12:] > 0.0))
            self.assertTrue(np.all(np.diff(balance[-12:]) < 0))


if __name__ == '__main__':
    unittest.main()
