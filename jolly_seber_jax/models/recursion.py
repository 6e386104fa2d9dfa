"""
Probability of never being captured again.

chi[i, t] is the probability that individual i, alive at occasion t, is not
captured at any later occasion, either because it dies or because it
survives undetected. It is computed backwards from chi[i, T] = 1.
"""

import jax
import jax.numpy as jnp

from ..core.exceptions import ShapeMismatchError


def prob_uncaptured(p: jnp.ndarray, phi: jnp.ndarray) -> jnp.ndarray:
    """
    Backward recursion for the uncaptured probability.

        chi[:, T]   = 1
        chi[:, t]   = (1 - phi[:, t]) + phi[:, t] * (1 - p[:, t + 1]) * chi[:, t + 1]

    Args:
        p: Capture probabilities, shape (M, T)
        phi: Survival probabilities between occasions, shape (M, T - 1)

    Returns:
        chi with shape (M, T)

    Raises:
        ShapeMismatchError: If phi does not have one column fewer than p
    """
    p = jnp.asarray(p)
    phi = jnp.asarray(phi)

    if p.ndim != 2:
        raise ShapeMismatchError(specific_issue=f"p must be 2-d, got shape {p.shape}")
    n_individuals, n_occasions = p.shape
    if phi.shape != (n_individuals, n_occasions - 1):
        raise ShapeMismatchError(
            name="phi", expected=(n_individuals, n_occasions - 1), actual=phi.shape
        )

    def step(chi_next, inputs):
        phi_t, p_next = inputs
        chi_t = (1.0 - phi_t) + phi_t * (1.0 - p_next) * chi_next
        return chi_t, chi_t

    last = jnp.ones(n_individuals, dtype=jnp.result_type(p, phi))
    _, earlier = jax.lax.scan(step, last, (phi.T, p[:, 1:].T), reverse=True)

    return jnp.concatenate([earlier.T, last[:, None]], axis=1)
