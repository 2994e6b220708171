# Copyright 2025 Spencer Williams
#
# Use of this source code is governed by an MIT license:
# https://github.com/sw23/life-model/blob/main/LICENSE

"""
Monte Carlo simulation module for retirement projections.

This module runs many independent lives, each with a sampled lifespan and a
sampled path of market returns and inflation, and aggregates whether the
retirement accounts lasted until death.
"""

from .config import MonteCarloConfig
from .random_source import RandomSource
from .rates import Rate, RatesPath, RatesSampling, RatesSource, generate_block_bootstrap
from .run import Run, RunInputs
from .results import MonteCarloResults
from .simulator import MonteCarloSimulator, Simulation

__all__ = [
    'MonteCarloConfig',
    'RandomSource',
    'Rate',
    'RatesPath',
    'RatesSampling',
    'RatesSource',
    'generate_block_bootstrap',
    'Run',
    'RunInputs',
    'MonteCarloResults',
    'MonteCarloSimulator',
    'Simulation',
]
