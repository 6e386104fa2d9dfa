"""
Per-individual, per-occasion survival and capture rates.

A rate function answers one question, the probability for individual i at
column t, so that heterogeneous rates can be added without touching the
likelihood or the recursion. Indices are 0-based array positions.
"""

from abc import ABC, abstractmethod
from typing import Any

import jax
import jax.numpy as jnp

from ..core.exceptions import ShapeMismatchError, ValidationError
from ..utils.validation import is_traced, validate_probability
from .parameters import ParameterSet


class RateFunction(ABC):
    """Capability producing a probability for each (individual, column) cell."""

    @abstractmethod
    def rate(self, i: Any, t: Any, params: ParameterSet) -> jnp.ndarray:
        """
        Probability for individual i at column t.

        Args:
            i: Row index (0-based)
            t: Column index (0-based); for survival, column t is the interval
                between occasions t + 1 and t + 2
            params: Current parameter set
        """

    def matrix(self, params: ParameterSet, n_individuals: int, n_columns: int) -> jnp.ndarray:
        """Evaluate rate() on the full grid, shape (n_individuals, n_columns)."""
        rows = jnp.arange(n_individuals)
        cols = jnp.arange(n_columns)
        by_column = jax.vmap(lambda i, t: self.rate(i, t, params), in_axes=(None, 0))
        return jax.vmap(by_column, in_axes=(0, None))(rows, cols)


class ConstantRate(RateFunction):
    """Broadcast one scalar parameter to every cell."""

    def __init__(self, parameter: str):
        if parameter not in ("mean_survival", "mean_capture"):
            raise ValidationError(
                f"ConstantRate needs 'mean_survival' or 'mean_capture', got '{parameter}'",
                suggestions=["Use MatrixRate or a RateFunction subclass for other rates"],
            )
        self.parameter = parameter

    def rate(self, i, t, params):
        return getattr(params, self.parameter)

    def matrix(self, params, n_individuals, n_columns):
        value = getattr(params, self.parameter)
        return jnp.full((n_individuals, n_columns), value, dtype=jnp.result_type(value))

    def __repr__(self):
        return f"ConstantRate({self.parameter!r})"


class MatrixRate(RateFunction):
    """Fixed per-cell probabilities that do not depend on the parameter set."""

    def __init__(self, values):
        self.values = jnp.asarray(values)
        if self.values.ndim != 2:
            raise ShapeMismatchError(
                specific_issue=f"rate matrix must be 2-d, got shape {self.values.shape}"
            )
        if not is_traced(self.values):
            validate_probability(self.values, name="rate matrix")

    def rate(self, i, t, params):
        return self.values[i, t]

    def matrix(self, params, n_individuals, n_columns):
        if self.values.shape != (n_individuals, n_columns):
            raise ShapeMismatchError(
                name="rate matrix", expected=(n_individuals, n_columns), actual=self.values.shape
            )
        return self.values
