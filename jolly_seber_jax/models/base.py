"""
Model interface and registry for jolly-seber-jax.

A model turns a ParameterSet and a DataContext into a log density, and a
ParameterSet and a random key into latent states. Implementations are looked
up by ModelType so that callers can select them from configuration.
"""

from abc import ABC, abstractmethod
from enum import Enum
from typing import Dict, List, Type, Union

import jax
import jax.numpy as jnp

from ..data.histories import DataContext
from ..utils.logging import get_logger
from .parameters import ParameterSet


logger = get_logger(__name__)


class ModelType(str, Enum):
    """Registered model families."""

    JOLLY_SEBER = "jolly_seber"


class CaptureRecaptureModel(ABC):
    """
    Interface shared by capture-recapture models.

    Models hold configuration and rate functions but no parameter state;
    an inference engine passes a new ParameterSet on every call.
    """

    def __init__(self, model_type: ModelType):
        self.model_type = model_type
        self.logger = get_logger(f"{__name__}.{type(self).__name__}")

    @abstractmethod
    def log_likelihood(self, params: ParameterSet, data_context: DataContext) -> jnp.ndarray:
        """Scalar marginal log-likelihood of every row in data_context."""

    @abstractmethod
    def log_prior(self, params: ParameterSet) -> jnp.ndarray:
        """Scalar log prior density."""

    @abstractmethod
    def simulate(self, key: jax.Array, params: ParameterSet, n_individuals: int):
        """One draw of the latent states for n_individuals rows."""

    def log_density(self, params: ParameterSet, data_context: DataContext) -> jnp.ndarray:
        """Unnormalized log posterior, the target an MCMC engine samples."""
        return self.log_likelihood(params, data_context) + self.log_prior(params)


ModelClass = Type[CaptureRecaptureModel]


class ModelRegistry:
    """Maps a ModelType to the class that implements it."""

    def __init__(self):
        self._classes: Dict[ModelType, ModelClass] = {}

    @staticmethod
    def _resolve(model_type: Union[ModelType, str]) -> ModelType:
        try:
            return ModelType(model_type)
        except ValueError:
            known = [m.value for m in ModelType]
            raise ValueError(f"Unknown model type '{model_type}', expected one of {known}") from None

    def register(self, model_type: Union[ModelType, str], model_class: ModelClass) -> None:
        """
        Associate model_class with model_type, replacing any earlier entry.

        Raises:
            TypeError: If model_class does not implement CaptureRecaptureModel
        """
        if not (isinstance(model_class, type) and issubclass(model_class, CaptureRecaptureModel)):
            raise TypeError(f"{model_class!r} is not a CaptureRecaptureModel subclass")

        model_type = self._resolve(model_type)
        self._classes[model_type] = model_class
        logger.debug("Registered model", model_type=model_type.value, model_class=model_class.__name__)

    def __contains__(self, model_type) -> bool:
        try:
            return self._resolve(model_type) in self._classes
        except ValueError:
            return False

    def get_model(self, model_type: Union[ModelType, str], **kwargs) -> CaptureRecaptureModel:
        """
        Instantiate the model registered for model_type.

        Keyword arguments go to the model constructor.

        Raises:
            ValueError: Unknown or unregistered model type
        """
        model_type = self._resolve(model_type)
        if model_type not in self._classes:
            raise ValueError(
                f"No model registered for '{model_type.value}'; "
                f"registered: {[m.value for m in self._classes]}"
            )
        return self._classes[model_type](model_type=model_type, **kwargs)

    def list_models(self) -> List[ModelType]:
        return list(self._classes)


_registry = ModelRegistry()


def register_model(model_type: Union[ModelType, str], model_class: ModelClass) -> None:
    """Add a model class to the package-wide registry."""
    _registry.register(model_type, model_class)


def get_model(model_type: Union[ModelType, str], **kwargs) -> CaptureRecaptureModel:
    """Instantiate a model from the package-wide registry."""
    return _registry.get_model(model_type, **kwargs)


def list_available_models() -> List[ModelType]:
    return _registry.list_models()
