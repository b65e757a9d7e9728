import matplotlib
import pytest

from clear_gan.prng import PRNG, BasicPRNG

# Headless image writes; the library itself leaves the backend alone
matplotlib.use("Agg")


@pytest.fixture(autouse=True)
def seeded_prng():
    """Every test starts from the same seeded default random source."""
    previous = PRNG._basic
    PRNG.set_basic(BasicPRNG(1234))
    yield PRNG.basic()
    PRNG._basic = previous


class FixedIntPRNG(PRNG):
    """Returns a fixed integer from uniform_int and records each call's bounds."""

    def __init__(self, value=0):
        self.value = value
        self.calls = []

    def uniform(self):
        return 0.5

    def uniform_int(self, min_value, max_value):
        self.calls.append((min_value, max_value))
        return self.value


class SequencePRNG(PRNG):
    """Replays a fixed sequence of uniform draws."""

    def __init__(self, values):
        self.values = list(values)

    def uniform(self):
        return self.values.pop(0)

    def uniform_int(self, min_value, max_value):
        return min_value


@pytest.fixture
def fixed_int_prng():
    return FixedIntPRNG()


@pytest.fixture
def sequence_prng():
    return SequencePRNG
