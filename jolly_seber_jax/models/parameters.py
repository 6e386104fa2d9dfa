"""
Parameter sets and link functions for the Jolly-Seber superpopulation model.

The model has three probabilities (mean survival, mean capture, inclusion)
and one positive entry weight per occasion. Probabilities use the logit link
and weights the log link when mapped to an unconstrained vector.
"""

import jax
import jax.numpy as jnp
import numpy as np
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional, Sequence, Tuple

from ..core.exceptions import ShapeMismatchError
from ..utils.validation import is_traced, validate_positive, validate_probability


@jax.jit
def logit(x: jnp.ndarray) -> jnp.ndarray:
    """Logit link function."""
    return jnp.log(x / (1 - x))


@jax.jit
def inv_logit(x: jnp.ndarray) -> jnp.ndarray:
    """Inverse logit (sigmoid) function."""
    return jax.nn.sigmoid(x)


@jax.jit
def log_link(x: jnp.ndarray) -> jnp.ndarray:
    """Log link function."""
    return jnp.log(x)


@jax.jit
def exp_link(x: jnp.ndarray) -> jnp.ndarray:
    """Exponential (inverse log) function."""
    return jnp.exp(x)


PROBABILITY_NAMES = ("mean_survival", "mean_capture", "inclusion")


@jax.tree_util.register_pytree_node_class
@dataclass(frozen=True)
class ParameterSet:
    """
    Free parameters of the model, read-only.

    Attributes:
        mean_survival: Survival probability between consecutive occasions
        mean_capture: Capture probability at each occasion
        inclusion: Probability psi that an augmented row belongs to the
            superpopulation
        entry_weights: Positive raw weights, one per occasion, normalized
            into entry probabilities

    Registered as a pytree so it can be traced, differentiated, and stacked
    along a leading axis of posterior draws.
    """
    mean_survival: Any
    mean_capture: Any
    inclusion: Any
    entry_weights: Any

    def tree_flatten(self):
        return (self.mean_survival, self.mean_capture, self.inclusion, self.entry_weights), None

    @classmethod
    def tree_unflatten(cls, aux_data, children):
        return cls(*children)

    @classmethod
    def create(
        cls,
        mean_survival: float,
        mean_capture: float,
        inclusion: float,
        entry_weights: Sequence[float],
    ) -> "ParameterSet":
        """Create a parameter set of JAX arrays from plain numbers."""
        return cls(
            mean_survival=jnp.asarray(np.asarray(mean_survival, dtype=float)),
            mean_capture=jnp.asarray(np.asarray(mean_capture, dtype=float)),
            inclusion=jnp.asarray(np.asarray(inclusion, dtype=float)),
            entry_weights=jnp.asarray(np.asarray(entry_weights, dtype=float)),
        )

    @classmethod
    def from_dict(cls, values: Mapping[str, Any]) -> "ParameterSet":
        """
        Build from a mapping such as an MCMC sample dictionary.

        Arrays may carry a leading draw axis; entry_weights then has shape
        (n_draws, T).
        """
        missing = [k for k in PROBABILITY_NAMES + ("entry_weights",) if k not in values]
        if missing:
            raise KeyError(f"Missing parameters: {missing}")
        return cls(
            mean_survival=jnp.asarray(values["mean_survival"]),
            mean_capture=jnp.asarray(values["mean_capture"]),
            inclusion=jnp.asarray(values["inclusion"]),
            entry_weights=jnp.asarray(values["entry_weights"]),
        )

    def to_dict(self) -> Dict[str, np.ndarray]:
        return {
            "mean_survival": np.asarray(self.mean_survival),
            "mean_capture": np.asarray(self.mean_capture),
            "inclusion": np.asarray(self.inclusion),
            "entry_weights": np.asarray(self.entry_weights),
        }

    @property
    def n_occasions(self) -> int:
        return jnp.shape(self.entry_weights)[-1]

    @property
    def n_draws(self) -> int:
        """Size of the leading draw axis, or 0 for a single parameter set."""
        shape = jnp.shape(self.entry_weights)
        return shape[0] if len(shape) == 2 else 0

    def validate(self, n_occasions: Optional[int] = None) -> None:
        """
        Check every value against its domain.

        Shapes are always checked. Values are skipped while JAX is tracing,
        since abstract values cannot be inspected.

        Raises:
            ShapeMismatchError: entry_weights length differs from n_occasions
            InvalidParameterError: A probability outside (0, 1) or a
                non-positive entry weight
        """
        if n_occasions is not None and self.n_occasions != n_occasions:
            raise ShapeMismatchError(
                name="entry_weights",
                expected=(n_occasions,),
                actual=jnp.shape(self.entry_weights),
            )

        if is_traced(self):
            return

        for name in PROBABILITY_NAMES:
            validate_probability(getattr(self, name), name=name)
        validate_positive(self.entry_weights, name="entry_weights", strict=True)

    def to_unconstrained(self) -> jnp.ndarray:
        """Map to a real vector: logit of the probabilities, log of the weights."""
        probabilities = jnp.stack([self.mean_survival, self.mean_capture, self.inclusion])
        return jnp.concatenate([logit(probabilities), log_link(self.entry_weights)])

    @classmethod
    def from_unconstrained(cls, theta: jnp.ndarray) -> Tuple["ParameterSet", jnp.ndarray]:
        """
        Inverse of to_unconstrained.

        Returns:
            The parameter set and the log absolute Jacobian determinant of
            the transform, to be added to a log density defined on the
            constrained scale.
        """
        theta = jnp.asarray(theta)
        if theta.ndim != 1 or theta.shape[0] < 4:
            raise ShapeMismatchError(
                specific_issue=f"unconstrained vector must be 1-d with at least 4 entries, got shape {theta.shape}"
            )

        eta = theta[:3]
        log_weights = theta[3:]
        probabilities = inv_logit(eta)

        # d sigmoid(x)/dx = sigmoid(x) * sigmoid(-x); d exp(y)/dy = exp(y)
        log_jacobian = jnp.sum(jax.nn.log_sigmoid(eta) + jax.nn.log_sigmoid(-eta))
        log_jacobian = log_jacobian + jnp.sum(log_weights)

        params = cls(
            mean_survival=probabilities[0],
            mean_capture=probabilities[1],
            inclusion=probabilities[2],
            entry_weights=exp_link(log_weights),
        )
        return params, log_jacobian

    def parameter_names(self):
        names = list(PROBABILITY_NAMES)
        names.extend(f"entry_weights[{t}]" for t in range(1, self.n_occasions + 1))
        return names


def stack_parameter_sets(parameter_sets: Sequence[ParameterSet]) -> ParameterSet:
    """Stack single parameter sets into one with a leading draw axis."""
    if not parameter_sets:
        raise ValueError("No parameter sets to stack")
    return jax.tree_util.tree_map(lambda *leaves: jnp.stack(leaves), *parameter_sets)
