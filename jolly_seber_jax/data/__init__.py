"""Capture history handling for jolly-seber-jax."""

from .histories import (
    NEVER_CAPTURED,
    DataContext,
    IndividualIndex,
    capture_indices,
    history_index,
    parse_histories,
)
from .synthetic import SimulatedData, augment, simulate_capture_histories

__all__ = [
    "NEVER_CAPTURED",
    "DataContext",
    "IndividualIndex",
    "capture_indices",
    "history_index",
    "parse_histories",
    "SimulatedData",
    "augment",
    "simulate_capture_histories",
]
