import numpy as np
import pytest

from Foveation import Optimizer, TranscoderConfig


@pytest.fixture
def rng():
    return np.random.default_rng(1234)


@pytest.fixture
def panorama(rng):
    """360x180 RGB frame: one column per degree of azimuth, one row per degree of elevation."""
    return rng.integers(0, 256, size=(180, 360, 3), dtype=np.uint8)


@pytest.fixture
def config():
    return TranscoderConfig()


@pytest.fixture
def optimizer(config):
    return Optimizer(config)
