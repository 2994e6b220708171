# Copyright 2025 Spencer Williams
#
# Use of this source code is governed by an MIT license:
# https://github.com/sw23/life-model/blob/main/LICENSE

from dataclasses import dataclass
from typing import Sequence, Tuple, TYPE_CHECKING
import numpy as np

from .errors import ConfigurationError, ExhaustedModelError
from .limits import MONTHS_PER_YEAR

if TYPE_CHECKING:
    from .montecarlo.random_source import RandomSource


@dataclass(frozen=True)
class PersonSettings:
    """The person being simulated.

    Attributes:
        name: Display name
        current_age: Age in whole years at the start of the simulation
        months_into_current_age: Months already lived past current_age, in [0, 12)
        death_rates: Annual probability of death indexed by age in years
    """
    name: str
    current_age: int
    months_into_current_age: int
    death_rates: Tuple[float, ...]

    def __post_init__(self):
        rates = tuple(float(q) for q in self.death_rates)
        object.__setattr__(self, 'death_rates', rates)

        if self.current_age < 0:
            raise ConfigurationError(f"current_age cannot be negative: {self.current_age}")
        if not 0 <= self.months_into_current_age < MONTHS_PER_YEAR:
            raise ConfigurationError(
                f"months_into_current_age must be in [0, 12), got {self.months_into_current_age}"
            )
        if not rates:
            raise ConfigurationError("death_rates cannot be empty")
        for age, q in enumerate(rates):
            if not 0.0 <= q <= 1.0:
                raise ConfigurationError(f"Death rate at age {age} must be in [0, 1], got {q}")
        if rates[-1] <= 0.0:
            raise ConfigurationError(
                "The last death rate must be positive, otherwise lifespans are unbounded"
            )
        if self.current_age >= len(rates):
            raise ExhaustedModelError(
                f"death_rates covers ages 0-{len(rates) - 1} but {self.name} is {self.current_age}"
            )

    @classmethod
    def new_with_custom_death_rates(cls, name: str, current_age: int,
                                    months_into_current_age: int,
                                    death_rates: Sequence[float]) -> 'PersonSettings':
        return cls(name, current_age, months_into_current_age, tuple(death_rates))


def convert_annual_death_to_period_survival(annual_death: Sequence[float],
                                            offset_periods: int,
                                            periods_per_year: int = MONTHS_PER_YEAR) -> np.ndarray:
    """Spread annual death probabilities over the periods of each year.

    The survival probability of each period in a year is
    ``(1 - q) ** (1 / periods_per_year)``, so surviving every period of the year
    matches surviving the year. The first year is shortened by ``offset_periods``.

    Args:
        annual_death: Annual death probability for each year, starting at the
                      person's current age
        offset_periods: Periods of the first year already lived
        periods_per_year: Number of periods per year

    Returns:
        Array of per-period survival probabilities
    """
    if len(annual_death) < 1:
        raise ConfigurationError("annual_death cannot be empty")
    if not 0 <= offset_periods < periods_per_year:
        raise ConfigurationError(
            f"offset_periods must be in [0, {periods_per_year}), got {offset_periods}"
        )

    survival = (1.0 - np.asarray(annual_death, dtype=np.float64)) ** (1.0 / periods_per_year)
    counts = np.full(len(survival), periods_per_year)
    counts[0] -= offset_periods
    return np.repeat(survival, counts)


class MortalityModel:
    """Samples how many periods a person lives.

    Example:
        >>> person = PersonSettings("Ann", 0, 0, (0.2,))
        >>> model = MortalityModel(person, periods_per_year=12)
        >>> len(model.survival)
        12
    """

    def __init__(self, person: PersonSettings, periods_per_year: int = MONTHS_PER_YEAR):
        """Build per-period survival probabilities from the person's current age.

        Args:
            person: Person settings, including the annual death table
            periods_per_year: Number of simulation periods per year
        """
        if periods_per_year < 1:
            raise ConfigurationError(f"periods_per_year must be at least 1, got {periods_per_year}")
        self.person = person
        self.periods_per_year = periods_per_year
        offset = person.months_into_current_age * periods_per_year // MONTHS_PER_YEAR
        self.survival = convert_annual_death_to_period_survival(
            person.death_rates[person.current_age:], offset, periods_per_year
        )
        self.survival.setflags(write=False)

    def sample_lifespan(self, random_source: 'RandomSource') -> int:
        """Walk forward until a period's survival draw fails.

        After the table ends, the last period's survival probability applies to
        every later period.

        Returns:
            Number of whole periods lived
        """
        survival = self.survival
        last = len(survival) - 1
        period = 0
        while random_source.gen_bool(survival[min(period, last)]):
            period += 1
        return period
