"""
Model implementations for jolly-seber-jax.
"""

from .base import CaptureRecaptureModel, ModelRegistry, ModelType
from .entry import EntryProbabilities, entry_probabilities
from .jolly_seber import DerivedRates, JollySeberModel, log_entry_probabilities
from .parameters import ParameterSet, stack_parameter_sets, logit, inv_logit, log_link, exp_link
from .rates import RateFunction, ConstantRate, MatrixRate
from .recursion import prob_uncaptured

__all__ = [
    "CaptureRecaptureModel",
    "ModelRegistry",
    "ModelType",
    "EntryProbabilities",
    "entry_probabilities",
    "DerivedRates",
    "JollySeberModel",
    "log_entry_probabilities",
    "ParameterSet",
    "stack_parameter_sets",
    "logit",
    "inv_logit",
    "log_link",
    "exp_link",
    "RateFunction",
    "ConstantRate",
    "MatrixRate",
    "prob_uncaptured",
]
