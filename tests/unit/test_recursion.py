"""
Tests for the backward uncaptured-probability recursion.
"""

import jax.numpy as jnp
import numpy as np
import pytest

from jolly_seber_jax.core.exceptions import ShapeMismatchError
from jolly_seber_jax.models.recursion import prob_uncaptured


class TestProbUncaptured:

    def test_last_column_is_one(self):
        p = jnp.full((4, 6), 0.3)
        phi = jnp.full((4, 5), 0.8)
        chi = prob_uncaptured(p, phi)
        assert chi.shape == (4, 6)
        np.testing.assert_allclose(np.asarray(chi[:, -1]), 1.0)

    def test_manual_values(self):
        p = jnp.array([[0.5, 0.4, 0.3]])
        phi = jnp.array([[0.8, 0.6]])
        chi = prob_uncaptured(p, phi)

        # chi3 = 1; chi2 = 0.4 + 0.6 * 0.7 = 0.82; chi1 = 0.2 + 0.8 * 0.6 * 0.82
        np.testing.assert_allclose(np.asarray(chi[0]), [0.5936, 0.82, 1.0], rtol=1e-12)

    def test_matches_plain_loop(self, test_utils):
        rng = np.random.default_rng(1)
        p = rng.uniform(0.05, 0.95, size=(3, 7))
        phi = rng.uniform(0.05, 0.95, size=(3, 6))
        chi = np.asarray(prob_uncaptured(jnp.asarray(p), jnp.asarray(phi)))

        for i in range(3):
            np.testing.assert_allclose(chi[i], test_utils.manual_chi(p[i], phi[i]), rtol=1e-12)

    def test_certain_survival_never_captured(self):
        chi = prob_uncaptured(jnp.zeros((2, 4)), jnp.ones((2, 3)))
        np.testing.assert_allclose(np.asarray(chi), 1.0)

    def test_certain_death(self):
        chi = prob_uncaptured(jnp.full((2, 4), 0.9), jnp.zeros((2, 3)))
        np.testing.assert_allclose(np.asarray(chi), 1.0)

    def test_values_are_probabilities(self):
        rng = np.random.default_rng(7)
        p = jnp.asarray(rng.uniform(size=(5, 8)))
        phi = jnp.asarray(rng.uniform(size=(5, 7)))
        chi = np.asarray(prob_uncaptured(p, phi))
        assert np.all(chi >= 0.0)
        assert np.all(chi <= 1.0)

    def test_single_occasion(self):
        chi = prob_uncaptured(jnp.full((3, 1), 0.5), jnp.zeros((3, 0)))
        np.testing.assert_allclose(np.asarray(chi), np.ones((3, 1)))

    def test_shape_mismatch(self):
        with pytest.raises(ShapeMismatchError):
            prob_uncaptured(jnp.full((2, 4), 0.5), jnp.full((2, 4), 0.5))
        with pytest.raises(ShapeMismatchError):
            prob_uncaptured(jnp.full((4,), 0.5), jnp.full((3,), 0.5))
