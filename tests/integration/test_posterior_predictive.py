"""
Integration tests for posterior-predictive simulation over stacked draws.
"""

import jax
import numpy as np
import pandas as pd
import pytest

from jolly_seber_jax import (
    ParameterSet,
    simulate_posterior_predictive,
    stack_parameter_sets,
    summarize_population,
)
from jolly_seber_jax.config.settings import ModelConfig
from jolly_seber_jax.core.exceptions import InvalidParameterError
from jolly_seber_jax.models.jolly_seber import JollySeberModel


@pytest.fixture
def draws():
    rng = np.random.default_rng(5)
    parameter_sets = [
        ParameterSet.create(
            mean_survival=rng.uniform(0.6, 0.9),
            mean_capture=rng.uniform(0.3, 0.6),
            inclusion=rng.uniform(0.4, 0.7),
            entry_weights=rng.gamma(2.0, 1.0, size=4),
        )
        for _ in range(12)
    ]
    return stack_parameter_sets(parameter_sets)


@pytest.mark.integration
class TestPosteriorPredictive:

    def test_counts_per_draw(self, model, rng_key, draws):
        states = simulate_posterior_predictive(model, rng_key, draws, n_individuals=80)

        assert states.N.shape == (12, 4)
        assert states.B.shape == (12, 4)
        assert states.n_super.shape == (12,)
        assert states.z.shape[-1] == 0

        N = np.asarray(states.N)
        B = np.asarray(states.B)
        n_super = np.asarray(states.n_super)
        assert np.all((N >= 0) & (N <= 80))
        np.testing.assert_array_equal(B.sum(axis=1), n_super)
        # first-occasion population consists of first-occasion entrants
        np.testing.assert_array_equal(N[:, 0], B[:, 0])

    def test_keep_trajectories(self, model, rng_key, draws):
        states = simulate_posterior_predictive(
            model, rng_key, draws, n_individuals=40, keep_trajectories=True
        )
        assert states.z.shape == (12, 40, 4)
        assert states.w.shape == (12, 40)
        np.testing.assert_array_equal(np.asarray(states.N), np.asarray(states.u).sum(axis=1))

    def test_draw_matches_single_simulation(self, model, rng_key, draws):
        states = simulate_posterior_predictive(
            model, rng_key, draws, n_individuals=30, keep_trajectories=True
        )
        keys = jax.random.split(rng_key, draws.n_draws)
        first_draw = jax.tree_util.tree_map(lambda leaf: leaf[0], draws)
        single = model.simulate(keys[0], first_draw, 30)
        np.testing.assert_array_equal(np.asarray(states.z[0]), np.asarray(single.z))

    def test_unstacked_draws_rejected(self, model, rng_key, five_occasion_params):
        with pytest.raises(ValueError):
            simulate_posterior_predictive(model, rng_key, five_occasion_params, n_individuals=10)

    def test_invalid_draw_rejected(self, model, rng_key):
        draws = stack_parameter_sets([
            ParameterSet.create(0.5, 0.5, 0.5, [1.0, 1.0]),
            ParameterSet.create(0.5, 1.0, 0.5, [1.0, 1.0]),
        ])
        with pytest.raises(InvalidParameterError):
            simulate_posterior_predictive(model, rng_key, draws, n_individuals=10)

    def test_unchecked_model_accepts_boundary_draws(self, rng_key):
        model = JollySeberModel(config=ModelConfig(validate_parameters=False))
        draws = stack_parameter_sets([
            ParameterSet.create(0.5, 0.5, 0.0, [1.0, 1.0]),
            ParameterSet.create(0.5, 0.5, 0.0, [2.0, 1.0]),
        ])
        states = simulate_posterior_predictive(model, rng_key, draws, n_individuals=10)
        np.testing.assert_array_equal(np.asarray(states.n_super), 0)


@pytest.mark.integration
class TestSummaries:

    def test_summary_table(self, model, rng_key, draws):
        states = simulate_posterior_predictive(model, rng_key, draws, n_individuals=80)
        summary = summarize_population(states)

        assert isinstance(summary, pd.DataFrame)
        assert summary.index.name == "quantity"
        assert list(summary.index) == [
            "N[1]", "N[2]", "N[3]", "N[4]",
            "B[1]", "B[2]", "B[3]", "B[4]",
            "Nsuper",
        ]
        assert list(summary.columns) == ["mean", "sd", "q2.5", "q50", "q97.5"]

        assert summary.loc["Nsuper", "mean"] == pytest.approx(float(np.mean(np.asarray(states.n_super))))
        assert np.all(summary["q2.5"] <= summary["q50"])
        assert np.all(summary["q50"] <= summary["q97.5"])

    def test_custom_quantiles(self, model, rng_key, draws):
        states = simulate_posterior_predictive(model, rng_key, draws, n_individuals=20)
        summary = summarize_population(states, quantiles=[0.1, 0.9])
        assert list(summary.columns) == ["mean", "sd", "q10", "q90"]

    def test_requires_draw_axis(self, model, rng_key, five_occasion_params):
        single = model.simulate(rng_key, five_occasion_params, 10)
        with pytest.raises(ValueError):
            summarize_population(single)
