"""
Synthetic Jolly-Seber data.

Forward simulation of observed capture histories from known parameters
(POPAN/JSSA form, after Kery and Schaub 2012, chapter 10) and padding of an
observed capture matrix with all-zero pseudo-individuals.
"""

from dataclasses import dataclass
from typing import Optional, Sequence

import numpy as np

from ..core.exceptions import InvalidParameterError, ShapeMismatchError
from ..utils.logging import get_logger
from ..utils.validation import validate_probability


logger = get_logger(__name__)


@dataclass
class SimulatedData:
    """Observed histories and the true latent quantities behind them."""
    capture_history: np.ndarray   # (n, T) observed rows, augmented if requested
    z: np.ndarray                 # (n_super, T) alive and entered
    N: np.ndarray                 # (T,) true population size
    B: np.ndarray                 # (T,) true number of entrants
    n_super: int
    n_observed: int


def augment(capture_matrix: np.ndarray, n_individuals: int) -> np.ndarray:
    """
    Pad a capture matrix with all-zero rows up to n_individuals rows.

    Raises:
        ShapeMismatchError: If n_individuals is smaller than the number of
            rows already present
    """
    capture_matrix = np.asarray(capture_matrix, dtype=np.int32)
    n_rows, n_occasions = capture_matrix.shape
    if n_individuals < n_rows:
        raise ShapeMismatchError(
            specific_issue=f"cannot augment {n_rows} histories down to {n_individuals} rows"
        )
    all_zero_history = np.zeros((n_individuals - n_rows, n_occasions), dtype=np.int32)
    return np.vstack([capture_matrix, all_zero_history])


def simulate_capture_histories(
    n_super: int,
    mean_survival: float,
    mean_capture: float,
    entry_probabilities: Sequence[float],
    n_individuals: Optional[int] = None,
    seed: Optional[int] = None,
    rng: Optional[np.random.Generator] = None,
) -> SimulatedData:
    """
    Simulate capture histories for a superpopulation of known size.

    Args:
        n_super: Superpopulation size
        mean_survival: Survival probability between occasions
        mean_capture: Capture probability at each occasion
        entry_probabilities: Probability of entering at each occasion, sums to 1
        n_individuals: If given, augment the observed rows with all-zero
            rows up to this many
        seed: Seed for a new numpy Generator when rng is not given
        rng: Existing numpy Generator

    Returns:
        SimulatedData with the never-seen rows removed before augmentation
    """
    validate_probability(mean_survival, name="mean_survival", open_interval=False)
    validate_probability(mean_capture, name="mean_capture", open_interval=False)
    b = np.asarray(entry_probabilities, dtype=float)
    validate_probability(b, name="entry_probabilities", open_interval=False)
    if not np.isclose(b.sum(), 1.0):
        raise InvalidParameterError(
            parameter="entry_probabilities", value=float(b.sum()), domain="the simplex (sum to 1)"
        )

    rng = rng or np.random.default_rng(seed)
    n_occasions = len(b)

    # which occasion did the animal enter in?
    entry_occasion = rng.choice(n_occasions, size=n_super, p=b / b.sum())
    B = np.bincount(entry_occasion, minlength=n_occasions)
    entered = np.arange(n_occasions)[None, :] >= entry_occasion[:, None]

    # survival between t and t+1 implies alive at t+1
    survival_draws = rng.binomial(1, mean_survival, (n_super, n_occasions - 1))
    survival_draws = np.column_stack([np.ones(n_super, dtype=int), survival_draws])

    # no death before or at entry; once a draw is 0 the rest of the row stays 0
    survival_draws[np.arange(n_occasions)[None, :] <= entry_occasion[:, None]] = 1
    alive = np.cumprod(survival_draws, axis=1)

    z = (entered * alive).astype(np.int32)

    capture = rng.binomial(1, mean_capture, (n_super, n_occasions))
    capture_history = z * capture
    was_captured = capture_history.sum(axis=1) > 0
    capture_history = capture_history[was_captured].astype(np.int32)
    n_observed = int(was_captured.sum())

    if n_individuals is not None:
        capture_history = augment(capture_history, n_individuals)

    logger.debug(
        "Simulated capture histories",
        n_super=n_super,
        n_observed=n_observed,
        n_rows=capture_history.shape[0],
    )

    return SimulatedData(
        capture_history=capture_history,
        z=z,
        N=z.sum(axis=0),
        B=B,
        n_super=n_super,
        n_observed=n_observed,
    )
