"""
Shared pytest configuration and fixtures for Jolly-Seber-JAX tests.

This module provides common test fixtures, utilities, and configuration
used across the test suite.
"""

import jax

jax.config.update("jax_enable_x64", True)

import pytest
import numpy as np

from jolly_seber_jax.config.settings import ModelConfig
from jolly_seber_jax.data.histories import DataContext
from jolly_seber_jax.models.jolly_seber import JollySeberModel
from jolly_seber_jax.models.parameters import ParameterSet


@pytest.fixture
def small_scenario():
    """Three rows, two occasions: seen first, seen second, never seen."""
    data_context = DataContext.from_histories([[1, 0], [0, 1], [0, 0]])
    params = ParameterSet.create(
        mean_survival=0.5,
        mean_capture=0.5,
        inclusion=0.5,
        entry_weights=[1.0, 1.0],
    )
    return data_context, params


@pytest.fixture
def small_scenario_expected():
    """
    Hand-computed per-row likelihoods for small_scenario.

    b = [0.5, 0.5], nu = [0.5, 1], chi[:, 1] = 0.5 + 0.5 * 0.5 = 0.75.
    Row 1: psi * nu1 * p * chi1             = 0.5 * 0.25 * 0.75
    Row 2: psi * (nu1 (1-p) phi p + (1-nu1) nu2 p) = 0.5 * (0.0625 + 0.25)
    Row 3: psi nu1 (1-p) chi1 + psi (1-nu1) nu2 (1-p) + (1 - psi)
           = 0.09375 + 0.125 + 0.5
    """
    return np.log(np.array([0.09375, 0.15625, 0.71875]))


@pytest.fixture
def model():
    """Model with default priors and validation enabled."""
    return JollySeberModel(config=ModelConfig())


@pytest.fixture
def unchecked_model():
    """Model that skips parameter validation, for boundary values."""
    return JollySeberModel(config=ModelConfig(validate_parameters=False))


@pytest.fixture
def five_occasion_params():
    return ParameterSet.create(
        mean_survival=0.7,
        mean_capture=0.4,
        inclusion=0.6,
        entry_weights=[2.0, 1.0, 1.5, 0.5, 1.0],
    )


@pytest.fixture
def dipper_like_context():
    """Small five-occasion data set augmented with all-zero rows."""
    capture_histories = [
        "11110", "10101", "00111", "10010", "01001",
        "11000", "01101", "10110", "01010", "00001",
        "00000", "00000", "00000", "00000", "00000",
    ]
    return DataContext.from_histories(capture_histories)


@pytest.fixture(autouse=True)
def set_random_seed():
    """Set random seed for reproducible tests."""
    np.random.seed(42)


@pytest.fixture
def rng_key():
    return jax.random.PRNGKey(42)


# Markers for different test types
def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line(
        "markers", "unit: mark test as a unit test (fast)"
    )
    config.addinivalue_line(
        "markers", "integration: mark test as an integration test (medium speed)"
    )
    config.addinivalue_line(
        "markers", "slow: mark test as slow (may take >10 seconds)"
    )


class TestUtils:
    """Utility functions for testing."""

    @staticmethod
    def manual_chi(p, phi):
        """Plain-loop uncaptured probability for one row."""
        n_occasions = len(p)
        chi = np.ones(n_occasions)
        for t in range(n_occasions - 2, -1, -1):
            chi[t] = (1 - phi[t]) + phi[t] * (1 - p[t + 1]) * chi[t + 1]
        return chi

    @staticmethod
    def assert_no_reentry(z):
        """Every row of z is a single contiguous block of ones (or empty)."""
        z = np.asarray(z)
        entries = np.sum(np.diff(np.concatenate([np.zeros((z.shape[0], 1)), z], axis=1), axis=1) == 1, axis=1)
        assert np.all(entries <= 1)


@pytest.fixture
def test_utils():
    """Provide test utilities."""
    return TestUtils
