"""Latent-state simulation and posterior-predictive summaries."""

from .latent import LatentStates, derive_recruits, simulate_latent_states
from .summaries import simulate_posterior_predictive, summarize_population

__all__ = [
    "LatentStates",
    "derive_recruits",
    "simulate_latent_states",
    "simulate_posterior_predictive",
    "summarize_population",
]
