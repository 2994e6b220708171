# Copyright 2025 Spencer Williams
#
# Use of this source code is governed by an MIT license:
# https://github.com/sw23/life-model/blob/main/LICENSE

"""
Seeded random streams for Monte Carlo runs.

Each run draws from its own PCG64 stream. The stream for run ``i`` of a batch
seeded with ``s`` is derived from ``SeedSequence(entropy=s, spawn_key=(i,))``,
so any run can be reproduced on its own and runs can execute in any order.
"""

from typing import Optional
import numpy as np

MAX_SEED = 2 ** 64 - 1


def validate_seed(seed: int) -> int:
    """Check that ``seed`` is an unsigned 64-bit integer and return it."""
    if isinstance(seed, bool) or not isinstance(seed, (int, np.integer)):
        raise TypeError(f"Seed must be an integer, got {type(seed).__name__}")
    seed = int(seed)
    if seed < 0 or seed > MAX_SEED:
        raise ValueError(f"Seed must be in [0, 2**64 - 1], got {seed}")
    return seed


def fresh_seed() -> int:
    """Draw a new 64-bit seed from operating system entropy."""
    entropy = np.random.SeedSequence().entropy
    return int(entropy) & MAX_SEED


class RandomSource:
    """Deterministic uniform draws for a single simulation run.

    Example:
        >>> rng = RandomSource.for_run(1337, 0)
        >>> u = rng.next_uniform()
        >>> 0.0 <= u < 1.0
        True
    """

    def __init__(self, seed_sequence: np.random.SeedSequence):
        """Initialize from a numpy SeedSequence.

        Args:
            seed_sequence: Seed material for the PCG64 bit generator.
        """
        self.seed_sequence = seed_sequence
        self._generator = np.random.Generator(np.random.PCG64(seed_sequence))

    @classmethod
    def from_seed(cls, seed: int) -> 'RandomSource':
        """Create a stream seeded directly from a 64-bit integer."""
        return cls(np.random.SeedSequence(validate_seed(seed)))

    @classmethod
    def for_run(cls, base_seed: int, run_index: int) -> 'RandomSource':
        """Create the private stream of one run in a batch.

        Args:
            base_seed: Seed of the whole simulation batch
            run_index: Zero-based index of the run within the batch

        Returns:
            RandomSource independent of every other run index
        """
        if run_index < 0:
            raise ValueError(f"run_index cannot be negative: {run_index}")
        return cls(np.random.SeedSequence(entropy=validate_seed(base_seed),
                                          spawn_key=(int(run_index),)))

    def next_uniform(self) -> float:
        """Next uniform draw in [0, 1)."""
        return float(self._generator.random())

    def gen_bool(self, probability: float) -> bool:
        """Return True with the given probability."""
        return self.next_uniform() < probability

    def integers(self, high: int, low: Optional[int] = 0) -> int:
        """Uniform integer in [low, high)."""
        return int(self._generator.integers(low, high))

    def spawn(self) -> 'RandomSource':
        """Create an independent child stream."""
        return RandomSource(self.seed_sequence.spawn(1)[0])
