"""
Jolly-Seber-JAX: superpopulation Jolly-Seber likelihood and latent-state
simulation using JAX

Evaluates the marginal log density of data-augmented capture histories for
an external inference engine and simulates posterior-predictive population
trajectories from retained parameter draws.
"""

__version__ = "0.1.0"

import jax

# Configuration
from .config.settings import JollySeberConfig, get_default_config

# Probabilities near 0 and 1 need double precision
jax.config.update("jax_enable_x64", get_default_config().performance.enable_x64)

# Capture histories
from .data.histories import DataContext, IndividualIndex, capture_indices, history_index
from .data.synthetic import SimulatedData, augment, simulate_capture_histories

# Models
from .models import (
    CaptureRecaptureModel,
    ConstantRate,
    DerivedRates,
    EntryProbabilities,
    JollySeberModel,
    MatrixRate,
    ParameterSet,
    RateFunction,
    entry_probabilities,
    prob_uncaptured,
    stack_parameter_sets,
)
from .models.base import ModelType, register_model, get_model, list_available_models

# Simulation
from .simulation import (
    LatentStates,
    simulate_latent_states,
    simulate_posterior_predictive,
    summarize_population,
)

# Import key exception classes
from .core.exceptions import (
    JollySeberError,
    InvalidParameterError,
    ShapeMismatchError,
    DataFormatError,
    DegenerateNormalizationError,
    ConfigurationError,
)

# Register built-in models
register_model(ModelType.JOLLY_SEBER, JollySeberModel)

__all__ = [
    "__version__",

    # Configuration
    "JollySeberConfig",
    "get_config",
    "configure",

    # Capture histories
    "DataContext",
    "IndividualIndex",
    "capture_indices",
    "history_index",
    "SimulatedData",
    "augment",
    "simulate_capture_histories",

    # Models
    "CaptureRecaptureModel",
    "JollySeberModel",
    "ParameterSet",
    "stack_parameter_sets",
    "DerivedRates",
    "EntryProbabilities",
    "entry_probabilities",
    "prob_uncaptured",
    "RateFunction",
    "ConstantRate",
    "MatrixRate",
    "ModelType",
    "register_model",
    "get_model",
    "list_available_models",

    # Simulation
    "LatentStates",
    "simulate_latent_states",
    "simulate_posterior_predictive",
    "summarize_population",

    # Exceptions
    "JollySeberError",
    "InvalidParameterError",
    "ShapeMismatchError",
    "DataFormatError",
    "DegenerateNormalizationError",
    "ConfigurationError",
]


def get_config() -> JollySeberConfig:
    """Get the global configuration instance."""
    return get_default_config()


def configure(**kwargs) -> None:
    """
    Update global configuration.

    Nested values use dotted keys, e.g. configure(**{"model.mass_floor": 1e-10}).
    """
    config = get_config()
    config.update(**kwargs)
    jax.config.update("jax_enable_x64", config.performance.enable_x64)
