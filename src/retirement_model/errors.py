# Copyright 2025 Spencer Williams
#
# Use of this source code is governed by an MIT license:
# https://github.com/sw23/life-model/blob/main/LICENSE

"""
Error types raised by the retirement model.

Every configuration object validates itself when it is built, so a simulation
either fails before any run executes or completes every run.
"""


class RetirementModelError(Exception):
    """Base class for all errors raised by this package."""


class ConfigurationError(RetirementModelError, ValueError):
    """Malformed or inconsistent inputs detected at construction.

    Examples: misordered tax brackets, mismatched return series lengths,
    fractions outside [0, 1], or a non-positive number of periods per year.
    """


class ExhaustedModelError(RetirementModelError, RuntimeError):
    """A per-period table was consulted beyond its valid range.

    Raised when a death-rate table does not cover the person's current age, or
    when a return series sampled in exact mode is shorter than a run.
    """
