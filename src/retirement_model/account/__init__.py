# Copyright 2025 Spencer Williams
#
# Use of this source code is governed by an MIT license:
# https://github.com/sw23/life-model/blob/main/LICENSE

"""Retirement accounts: allocation glide paths, contributions and balances."""

from .allocation import AssetAllocation
from .contribution import (AccountContributionSettings, AccountContributionSource,
                           AccountContributionTaxability)
from .ledger import Account, AccountSettings
