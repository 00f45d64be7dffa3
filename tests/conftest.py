import pytest

from pipeviz.config import SimulationConfig
from pipeviz.simulator import build_clock

from .helpers import fixed_random


@pytest.fixture
def no_hazard_rng():
    return fixed_random(0.99)


@pytest.fixture
def quiet_clock(no_hazard_rng):
    """Clock whose classifier never reports a hazard."""
    return build_clock(SimulationConfig(batch_size=5), rng=no_hazard_rng)


@pytest.fixture
def seeded_clock():
    return build_clock(SimulationConfig(seed=1234))
