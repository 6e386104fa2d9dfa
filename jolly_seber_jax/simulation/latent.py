"""
Latent-state simulation for the Jolly-Seber superpopulation model.

Given one parameter draw, every augmented row gets an inclusion indicator w
and an alive-and-entered trajectory z. Population size, recruitment, and
superpopulation size are derived from u = z * w.
"""

from typing import NamedTuple

import jax
import jax.numpy as jnp

from ..core.exceptions import ShapeMismatchError


class LatentStates(NamedTuple):
    """One realization of the latent population."""
    w: jnp.ndarray          # (M,) inclusion in the superpopulation
    z: jnp.ndarray          # (M, T) alive and entered, zero when not included
    u: jnp.ndarray          # (M, T) z * w
    recruit: jnp.ndarray    # (M, T) entered at this occasion
    N: jnp.ndarray          # (T,) population size per occasion
    B: jnp.ndarray          # (T,) number of entrants per occasion
    n_super: jnp.ndarray    # () realized superpopulation size


def derive_recruits(u: jnp.ndarray) -> jnp.ndarray:
    """recruit[:, 1] = u[:, 1]; recruit[:, t] = (1 - u[:, t-1]) * u[:, t]."""
    return jnp.concatenate([u[:, :1], (1 - u[:, :-1]) * u[:, 1:]], axis=1)


def simulate_latent_states(
    key: jax.Array,
    inclusion: jnp.ndarray,
    nu: jnp.ndarray,
    phi: jnp.ndarray,
) -> LatentStates:
    """
    Draw inclusion and alive-state indicators for every row.

        w[i]    ~ Bernoulli(psi)
        z[i, 1] ~ Bernoulli(nu[1])
        z[i, t] ~ Bernoulli(z[i, t-1] * phi[i, t-1] + q[i, t] * nu[t])

    where q[i, t] = prod_{s<t} (1 - z[i, s]) is 1 only while the individual
    has not yet entered. Once entered, an individual can die but never
    re-enter.

    Args:
        key: JAX random key
        inclusion: Inclusion probability psi
        nu: Conditional entry probabilities, shape (T,)
        phi: Survival probabilities, shape (M, T - 1)

    Returns:
        LatentStates with integer indicators and derived counts
    """
    nu = jnp.asarray(nu)
    phi = jnp.asarray(phi)
    n_occasions = nu.shape[0]
    if phi.ndim != 2 or phi.shape[1] != n_occasions - 1:
        raise ShapeMismatchError(
            name="phi", expected=(None, n_occasions - 1), actual=phi.shape
        )
    n_individuals = phi.shape[0]

    key_w, key_first, key_rest = jax.random.split(key, 3)
    w = jax.random.bernoulli(key_w, inclusion, shape=(n_individuals,)).astype(jnp.int32)

    z_first = jax.random.bernoulli(key_first, nu[0], shape=(n_individuals,)).astype(phi.dtype)

    def step(carry, inputs):
        z_prev, not_entered = carry
        step_key, phi_prev, nu_t = inputs
        prob = z_prev * phi_prev + not_entered * nu_t
        z_t = jax.random.bernoulli(step_key, prob).astype(phi.dtype)
        return (z_t, not_entered * (1.0 - z_t)), z_t

    step_keys = jax.random.split(key_rest, max(n_occasions - 1, 1))[: n_occasions - 1]
    _, z_rest = jax.lax.scan(
        step,
        (z_first, 1.0 - z_first),
        (step_keys, phi.T, nu[1:]),
    )

    z = jnp.concatenate([z_first[:, None], z_rest.T], axis=1).astype(jnp.int32)
    z = z * w[:, None]
    u = z * w[:, None]
    recruit = derive_recruits(u)

    return LatentStates(
        w=w,
        z=z,
        u=u,
        recruit=recruit,
        N=jnp.sum(u, axis=0),
        B=jnp.sum(recruit, axis=0),
        n_super=jnp.sum(jnp.any(u > 0, axis=1)),
    )
