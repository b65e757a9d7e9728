import math
import logging
from typing import Optional

import numpy as np

from .errors import InvalidRangeError


class PRNG:
    """Base class for random sources used by the matrix generators and row shuffling.

    Subclasses provide uniform sampling; normal sampling is derived from two
    independent uniform draws with the Box-Muller transform.
    """

    _basic: Optional["PRNG"] = None

    @classmethod
    def basic(cls) -> "PRNG":
        """Returns the process-wide default source, creating an unseeded one on first use."""
        if PRNG._basic is None:
            PRNG._basic = BasicPRNG()
        return PRNG._basic

    @classmethod
    def set_basic(cls, prng: "PRNG"):
        """Replaces the process-wide default source (e.g. with a seeded one)."""
        logging.debug(f"Default PRNG replaced with {prng.__class__.__name__}")
        PRNG._basic = prng

    @classmethod
    def seed_basic(cls, seed: Optional[int]):
        """Installs a BasicPRNG seeded with ``seed`` as the default; None keeps the current one."""
        if seed is not None:
            cls.set_basic(BasicPRNG(seed))

    def uniform(self) -> float:
        """Uniform double in [0, 1)."""
        raise NotImplementedError

    def uniform_range(self, min_value: float, max_value: float) -> float:
        """Uniform double in [min_value, max_value)."""
        return min_value + self.uniform() * (max_value - min_value)

    def uniform_int(self, min_value: int, max_value: int) -> int:
        """Uniform integer in [min_value, max_value)."""
        raise NotImplementedError

    def normal(self, mean: float = 0.0, standard_deviation: float = 1.0) -> float:
        """Normal sample via Box-Muller.

        Raises:
            InvalidRangeError: If standard_deviation is not positive.
        """
        if standard_deviation <= 0.0:
            raise InvalidRangeError(f"standard_deviation must be positive, got {standard_deviation}.")
        # 1 - u keeps the log argument in (0, 1]
        u1 = 1.0 - self.uniform()
        u2 = self.uniform()
        r = math.sqrt(-2.0 * math.log(u1))
        theta = 2.0 * math.pi * u2
        return mean + standard_deviation * r * math.sin(theta)

    def uniform_array(self, min_value: float, max_value: float, size: int) -> np.ndarray:
        """`size` independent uniform draws in [min_value, max_value)."""
        return np.array([self.uniform_range(min_value, max_value) for _ in range(size)], dtype=float)

    def normal_array(self, mean: float, standard_deviation: float, size: int) -> np.ndarray:
        """`size` independent normal draws, Box-Muller applied to whole arrays."""
        if standard_deviation <= 0.0:
            raise InvalidRangeError(f"standard_deviation must be positive, got {standard_deviation}.")
        u1 = 1.0 - self.uniform_array(0.0, 1.0, size)
        u2 = self.uniform_array(0.0, 1.0, size)
        r = np.sqrt(-2.0 * np.log(u1))
        return mean + standard_deviation * r * np.sin(2.0 * np.pi * u2)


class BasicPRNG(PRNG):
    """Random source backed by a numpy ``Generator``."""

    def __init__(self, seed: Optional[int] = None):
        self.seed = seed
        self.rng = np.random.default_rng(seed)

    def uniform(self) -> float:
        return float(self.rng.random())

    def uniform_int(self, min_value: int, max_value: int) -> int:
        if min_value >= max_value:
            raise InvalidRangeError(f"min_value ({min_value}) must be less than max_value ({max_value}).")
        return int(self.rng.integers(min_value, max_value))

    def uniform_array(self, min_value: float, max_value: float, size: int) -> np.ndarray:
        return min_value + self.rng.random(size) * (max_value - min_value)

    def __repr__(self):
        return f"BasicPRNG(seed={self.seed})"
