"""
Posterior-predictive population summaries.

Runs the latent-state simulator once per retained parameter draw and reduces
the derived counts to per-occasion summary tables.
"""

from typing import Optional, Sequence

import jax
import jax.numpy as jnp
import numpy as np
import pandas as pd

from ..config.settings import get_default_config
from ..utils.logging import get_logger, log_performance
from .latent import LatentStates


logger = get_logger(__name__)


@log_performance
def simulate_posterior_predictive(
    model,
    key: jax.Array,
    draws,
    n_individuals: int,
    keep_trajectories: bool = False,
) -> LatentStates:
    """
    Simulate one latent population per posterior draw.

    Args:
        model: Model exposing simulate() and config, e.g. JollySeberModel
        key: JAX random key, split into one key per draw
        draws: ParameterSet whose leaves carry a leading draw axis
        n_individuals: Augmented sample size M
        keep_trajectories: Keep w, z, u and recruit for every draw; when
            False those fields are empty and only N, B and n_super are
            returned, which keeps memory proportional to n_draws * T

    Returns:
        LatentStates with a leading draw axis on every field
    """
    n_draws = draws.n_draws
    if n_draws == 0:
        raise ValueError("draws must carry a leading draw axis; use stack_parameter_sets()")

    if model.config.validate_parameters:
        draws.validate()

    def one_draw(draw_key, params):
        states = model.simulate(draw_key, params, n_individuals)
        if keep_trajectories:
            return states
        empty = jnp.zeros((0,), dtype=jnp.int32)
        return states._replace(w=empty, z=empty, u=empty, recruit=empty)

    keys = jax.random.split(key, n_draws)
    logger.debug(
        "Simulating posterior predictive",
        n_draws=n_draws,
        n_individuals=n_individuals,
        keep_trajectories=keep_trajectories,
    )
    return jax.vmap(one_draw)(keys, draws)


def summarize_population(
    states: LatentStates,
    quantiles: Optional[Sequence[float]] = None,
) -> pd.DataFrame:
    """
    Summarize N[t], B[t] and Nsuper across draws.

    Args:
        states: Output of simulate_posterior_predictive()
        quantiles: Quantiles to report (defaults to the simulation config)

    Returns:
        DataFrame indexed by quantity ("N[1]", ..., "B[1]", ..., "Nsuper")
        with mean, sd and one column per quantile
    """
    if quantiles is None:
        quantiles = get_default_config().simulation.quantiles

    N = np.asarray(states.N, dtype=float)
    B = np.asarray(states.B, dtype=float)
    n_super = np.asarray(states.n_super, dtype=float)
    if N.ndim != 2:
        raise ValueError("states must carry a leading draw axis")

    n_occasions = N.shape[1]
    columns = {f"N[{t + 1}]": N[:, t] for t in range(n_occasions)}
    columns.update({f"B[{t + 1}]": B[:, t] for t in range(n_occasions)})
    columns["Nsuper"] = n_super
    samples = pd.DataFrame(columns)

    summary = pd.DataFrame({
        "mean": samples.mean(),
        "sd": samples.std(ddof=1) if len(samples) > 1 else 0.0,
    })
    for q in quantiles:
        summary[f"q{q * 100:g}"] = samples.quantile(q)

    summary.index.name = "quantity"
    return summary
