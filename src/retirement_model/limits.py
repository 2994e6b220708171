# Copyright 2025 Spencer Williams
#
# Use of this source code is governed by an MIT license:
# https://github.com/sw23/life-model/blob/main/LICENSE

"""Statutory constants used by the payroll and tax models."""

# FICA payroll taxes (employee share)
SOCIAL_SECURITY_RATE = 0.062
MEDICARE_RATE = 0.0145

# Social Security wage base for the first simulated year, indexed by inflation
# at each later year boundary
SOCIAL_SECURITY_WAGE_BASE = 160200.0

MONTHS_PER_YEAR = 12
