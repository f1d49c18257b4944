"""
pytest configuration and shared fixtures.
"""

import pytest
import numpy as np

from msctau.sitepattern import site_probabilities


@pytest.fixture
def rng():
    """Seeded random number generator for reproducible tests."""
    return np.random.default_rng(42)


@pytest.fixture
def reference_probabilities():
    """Site-pattern probabilities at tau0=0.002, tau1=0.001, theta=0.001."""
    return site_probabilities(0.002, 0.001, 0.001)
