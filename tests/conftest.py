"""Configuration for tests.

This module provides shared fixtures for the shiftmi test suite.
"""

import numpy as np
import pytest


def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line("markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')")


@pytest.fixture(scope="session")
def sine_data():
    """1000 samples of sin(0.01 * i), about 1.6 periods."""
    return np.sin(0.01 * np.arange(1000))


@pytest.fixture
def ramp_1d():
    """Integers -500..499 as floats."""
    return np.arange(1000, dtype=np.float64) - 500.0


@pytest.fixture
def ramp_2d():
    """Two shifted ramps of 800 points: -500..299 and -400..399."""
    x = np.arange(800, dtype=np.float64) - 500.0
    y = np.arange(800, dtype=np.float64) - 400.0
    return x, y


@pytest.fixture
def lagged_pair():
    """Noisy signal y that follows x with a delay of 7 samples.

    Returns x, y and the delay.
    """
    rng = np.random.default_rng(42)
    n, delay = 2000, 7
    x = rng.normal(size=n)
    y = np.empty(n)
    y[delay:] = x[:-delay] + 0.3 * rng.normal(size=n - delay)
    y[:delay] = rng.normal(size=delay)
    return x, y, delay
