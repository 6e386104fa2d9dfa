"""
Jolly-Seber superpopulation model for jolly-seber-jax.

Implements the data-augmented Jolly-Seber likelihood with the unknown entry
occasion and the unknown inclusion of all-zero rows summed out exactly by
log-sum-exp, so the log density stays deterministic and differentiable.
"""

from typing import Callable, NamedTuple, Optional, Tuple

import jax
import jax.numpy as jnp
from jax.scipy.special import logsumexp
from jax.scipy import stats

from .base import CaptureRecaptureModel, ModelType
from .entry import EntryProbabilities, entry_probabilities
from .parameters import ParameterSet
from .rates import ConstantRate, RateFunction
from .recursion import prob_uncaptured
from ..config.settings import DegeneratePolicy, ModelConfig, get_default_config
from ..core.exceptions import DegenerateNormalizationError, ShapeMismatchError
from ..data.histories import DataContext
from ..simulation.latent import LatentStates, simulate_latent_states
from ..utils.logging import get_logger
from ..utils.validation import is_traced, validate_probability


logger = get_logger(__name__)


class DerivedRates(NamedTuple):
    """Per-cell rates and entry quantities for one parameter set."""
    phi: jnp.ndarray        # (M, T - 1)
    p: jnp.ndarray          # (M, T)
    b: jnp.ndarray          # (T,)
    nu: jnp.ndarray         # (T,)
    chi: jnp.ndarray        # (M, T)
    remaining: jnp.ndarray  # (T,)
    degenerate: jnp.ndarray


def log_entry_probabilities(
    nu: jnp.ndarray, remaining: jnp.ndarray, mass_floor: float = 1e-12
) -> jnp.ndarray:
    """
    Log probability of entering exactly at each occasion.

    log(prod_{s<t} (1 - nu[s]) * nu[t]); nu[T] = 1 never enters the product.
    Where the remaining mass is above mass_floor, 1 - nu[s] equals
    remaining[s + 1] / remaining[s] and is taken in that form, since nu[1]
    rounds to 1 when the first weight dominates. Clamped occasions use nu.
    """
    above = remaining[:-1] > mass_floor
    log_ratio = jnp.log(remaining[1:]) - jnp.log(jnp.where(above, remaining[:-1], 1.0))
    log_clamped = jnp.log1p(-jnp.where(above, 0.0, nu[:-1]))
    log1m_nu = jnp.where(above, log_ratio, log_clamped)

    log_not_yet = jnp.concatenate([jnp.zeros(1, dtype=nu.dtype), jnp.cumsum(log1m_nu)])
    return log_not_yet + jnp.log(nu)


def _individual_log_likelihood(
    y: jnp.ndarray,
    first: jnp.ndarray,
    last: jnp.ndarray,
    p: jnp.ndarray,
    phi: jnp.ndarray,
    chi: jnp.ndarray,
    log_entry: jnp.ndarray,
    inclusion: jnp.ndarray,
) -> jnp.ndarray:
    """
    Log-likelihood of one capture history.

    Both branches are evaluated and the data-derived first capture selects
    one, so there is no branching on parameter values.

    Args:
        y: Capture history, shape (T,)
        first, last: 1-based first/last capture occasion, 0 if never captured
        p: Capture probabilities, shape (T,)
        phi: Survival probabilities, shape (T - 1,)
        chi: Uncaptured probabilities, shape (T,)
        log_entry: Log probability of entering at each occasion, shape (T,)
        inclusion: Inclusion probability psi
    """
    n_occasions = y.shape[0]
    occasions = jnp.arange(n_occasions)

    log_p = jnp.log(p)
    log1m_p = jnp.log1p(-p)
    log_phi = jnp.log(phi)
    log_chi = jnp.log(chi)
    log_psi = jnp.log(inclusion)

    # Observed branch. Indices are clamped so the unused branch stays finite
    # for never-captured rows.
    f = jnp.maximum(first - 1, 0)
    l = jnp.maximum(last - 1, 0)

    # entered at e, then undetected and surviving through occasions e .. f-1
    undetected = log1m_p[:-1] + log_phi
    intervals = jnp.arange(n_occasions - 1)
    span = (intervals[None, :] >= occasions[:, None]) & (intervals[None, :] < f)
    lp_entry = log_entry + jnp.sum(jnp.where(span, undetected[None, :], 0.0), axis=1) + log_p[f]
    lp_entry = jnp.where(occasions <= f, lp_entry, -jnp.inf)

    # known alive from first to last capture
    log_phi_into = jnp.concatenate([jnp.zeros(1, dtype=log_phi.dtype), log_phi])
    log_detection = jnp.where(y > 0, log_p, log1m_p)
    known_alive = (occasions > f) & (occasions <= l)
    lp_known = jnp.sum(jnp.where(known_alive, log_phi_into + log_detection, 0.0))

    observed = log_psi + logsumexp(lp_entry) + lp_known + log_chi[l]

    # Unobserved branch: included and entered at t but never seen, or never included
    lp_unseen = log_psi + log_entry + log1m_p + log_chi
    unobserved = logsumexp(jnp.append(lp_unseen, jnp.log1p(-inclusion)))

    return jnp.where(first > 0, observed, unobserved)


_vectorized_log_likelihood = jax.vmap(
    _individual_log_likelihood, in_axes=(0, 0, 0, 0, 0, 0, None, None)
)


class JollySeberModel(CaptureRecaptureModel):
    """
    Jolly-Seber superpopulation model with data augmentation.

    Parameters:
    - mean_survival (phi): apparent survival between occasions
    - mean_capture (p): capture probability
    - inclusion (psi): probability an augmented row is a real member
    - entry_weights: positive weights normalized to entry probabilities

    Survival and capture enter through RateFunction objects, so per-cell
    rates can replace the constant broadcast without touching the
    likelihood.
    """

    def __init__(
        self,
        model_type: ModelType = ModelType.JOLLY_SEBER,
        survival: Optional[RateFunction] = None,
        capture: Optional[RateFunction] = None,
        config: Optional[ModelConfig] = None,
    ):
        super().__init__(model_type)
        self.survival = survival or ConstantRate("mean_survival")
        self.capture = capture or ConstantRate("mean_capture")
        self._config = config

    @property
    def config(self) -> ModelConfig:
        return self._config or get_default_config().model

    def derive_rates(self, params: ParameterSet, n_individuals: int) -> DerivedRates:
        """
        Compute phi, p, b, nu and chi for n_individuals rows.

        Raises:
            DegenerateNormalizationError: Remaining entry mass collapsed and
                the configured policy is 'raise'
            InvalidParameterError: A concrete survival or capture rate lies
                outside (0, 1)
        """
        n_occasions = params.n_occasions
        phi = self.survival.matrix(params, n_individuals, n_occasions - 1)
        p = self.capture.matrix(params, n_individuals, n_occasions)
        if self.config.validate_parameters and not is_traced(phi, p):
            validate_probability(phi, name="survival rate")
            validate_probability(p, name="capture rate")

        entry = entry_probabilities(params.entry_weights, mass_floor=self.config.mass_floor)
        self._check_degenerate(entry)

        chi = prob_uncaptured(p, phi)
        return DerivedRates(
            phi=phi,
            p=p,
            b=entry.b,
            nu=entry.nu,
            chi=chi,
            remaining=entry.remaining,
            degenerate=entry.degenerate,
        )

    def _check_degenerate(self, entry: EntryProbabilities) -> None:
        if is_traced(entry.degenerate) or not bool(entry.degenerate):
            return

        interior = jnp.asarray(entry.remaining)[1:-1]
        occasion = int(jnp.argmax(interior <= self.config.mass_floor)) + 2
        remaining = float(interior[occasion - 2])

        if self.config.degenerate_policy == DegeneratePolicy.RAISE:
            raise DegenerateNormalizationError(occasion=occasion, remaining_mass=remaining)

        logger.warning(
            "Remaining entry mass below floor, conditional entry probabilities clamped",
            occasion=occasion,
            remaining_mass=remaining,
            mass_floor=self.config.mass_floor,
        )

    def _check_inputs(self, params: ParameterSet, data_context: DataContext) -> None:
        if params.n_occasions != data_context.n_occasions:
            raise ShapeMismatchError(
                name="entry_weights",
                expected=(data_context.n_occasions,),
                actual=jnp.shape(params.entry_weights),
            )
        if self.config.validate_parameters:
            params.validate(data_context.n_occasions)

    def individual_log_likelihood(
        self, params: ParameterSet, data_context: DataContext
    ) -> jnp.ndarray:
        """
        Log-likelihood contribution of every row of the augmented sample.

        Args:
            params: Parameter set with one entry weight per occasion
            data_context: Capture histories with precomputed indices

        Returns:
            Array of shape (M,)

        Raises:
            InvalidParameterError: Concrete parameter outside its domain
            ShapeMismatchError: Entry weights do not match the occasions
        """
        self._check_inputs(params, data_context)
        rates = self.derive_rates(params, data_context.n_individuals)

        return _vectorized_log_likelihood(
            data_context.capture_matrix,
            data_context.first_capture,
            data_context.last_capture,
            rates.p,
            rates.phi,
            rates.chi,
            log_entry_probabilities(rates.nu, rates.remaining, self.config.mass_floor),
            params.inclusion,
        )

    def log_likelihood(self, params: ParameterSet, data_context: DataContext) -> jnp.ndarray:
        """Marginal log-likelihood summed over all rows."""
        return jnp.sum(self.individual_log_likelihood(params, data_context))

    def log_prior(self, params: ParameterSet) -> jnp.ndarray:
        """
        Independent priors: Beta on the three probabilities and Gamma on
        each entry weight. The defaults are Beta(1, 1) and Gamma(1, 1).
        """
        config = self.config
        lp = stats.beta.logpdf(params.mean_survival, config.survival_prior.a, config.survival_prior.b)
        lp = lp + stats.beta.logpdf(params.mean_capture, config.capture_prior.a, config.capture_prior.b)
        lp = lp + stats.beta.logpdf(params.inclusion, config.inclusion_prior.a, config.inclusion_prior.b)

        weight_prior = config.entry_weight_prior
        lp = lp + jnp.sum(
            stats.gamma.logpdf(params.entry_weights, weight_prior.shape, scale=1.0 / weight_prior.rate)
        )
        return lp

    def log_density_unconstrained(self, theta: jnp.ndarray, data_context: DataContext) -> jnp.ndarray:
        """
        Log density on the unconstrained scale used by gradient-based engines.

        theta holds logit(mean_survival), logit(mean_capture),
        logit(inclusion) and log(entry_weights); the log-Jacobian of the
        transform is included.
        """
        params, log_jacobian = ParameterSet.from_unconstrained(theta)
        return self.log_density(params, data_context) + log_jacobian

    def value_and_grad(self, data_context: DataContext) -> Callable[[jnp.ndarray], Tuple[jnp.ndarray, jnp.ndarray]]:
        """
        Build theta -> (log density, gradient) on the unconstrained scale.

        The returned function is jit-compiled unless disabled in the
        performance configuration.
        """
        fn = jax.value_and_grad(lambda theta: self.log_density_unconstrained(theta, data_context))
        if get_default_config().performance.enable_jit_compilation:
            fn = jax.jit(fn)

        self.logger.debug(
            "Built log density gradient",
            n_individuals=data_context.n_individuals,
            n_occasions=data_context.n_occasions,
        )
        return fn

    def simulate(self, key: jax.Array, params: ParameterSet, n_individuals: int) -> LatentStates:
        """
        Draw one latent population realization for n_individuals rows.

        Args:
            key: JAX random key
            params: One parameter draw
            n_individuals: Augmented sample size M
        """
        if self.config.validate_parameters:
            params.validate()
        rates = self.derive_rates(params, n_individuals)
        return simulate_latent_states(key, params.inclusion, rates.nu, rates.phi)
