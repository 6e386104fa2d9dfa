"""
Entry probabilities from raw positive weights.

b[t] is the probability that a member of the superpopulation enters at
occasion t. nu[t] is the same event conditional on not having entered
before t, the hazard form of a stick-breaking process. nu[T] is fixed at 1
so that every member has entered by the last occasion.
"""

from typing import NamedTuple

import jax.numpy as jnp

from ..core.exceptions import ShapeMismatchError


class EntryProbabilities(NamedTuple):
    """Normalized and conditional entry probabilities."""
    b: jnp.ndarray
    nu: jnp.ndarray
    remaining: jnp.ndarray
    degenerate: jnp.ndarray


def entry_probabilities(weights: jnp.ndarray, mass_floor: float = 1e-12) -> EntryProbabilities:
    """
    Normalize weights and convert them to conditional entry probabilities.

        b[t]  = w[t] / sum(w)
        nu[1] = b[1]
        nu[t] = b[t] / (1 - sum_{s<t} b[s])     t = 2 .. T-1
        nu[T] = 1

    The remaining mass 1 - sum_{s<t} b[s] is computed as the suffix sum
    sum_{s>=t} b[s], which is equal but does not cancel. When it falls to
    mass_floor or below the division uses mass_floor, nu is clipped into
    [0, 1], and the degenerate flag is set.

    Args:
        weights: Positive weights, shape (T,)
        mass_floor: Smallest remaining mass used as a divisor

    Returns:
        EntryProbabilities with b, nu, the remaining mass before each
        occasion, and a scalar boolean degenerate flag
    """
    weights = jnp.asarray(weights)
    if weights.ndim != 1 or weights.shape[0] < 1:
        raise ShapeMismatchError(
            specific_issue=f"entry weights must be a non-empty vector, got shape {weights.shape}"
        )

    b = weights / jnp.sum(weights)
    remaining = jnp.cumsum(b[::-1])[::-1]

    # only occasions 2 .. T-1 divide by the remaining mass
    interior = remaining[1:-1]
    degenerate = jnp.any(interior <= mass_floor)

    nu = jnp.clip(b / jnp.maximum(remaining, mass_floor), 0.0, 1.0)
    nu = nu.at[0].set(b[0])
    nu = nu.at[-1].set(1.0)

    return EntryProbabilities(b=b, nu=nu, remaining=remaining, degenerate=degenerate)
