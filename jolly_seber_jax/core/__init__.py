"""Core functionality for jolly-seber-jax."""

from .exceptions import (
    JollySeberError,
    InvalidParameterError,
    ShapeMismatchError,
    DataFormatError,
    DegenerateNormalizationError,
    ValidationError,
    ConfigurationError,
)

__all__ = [
    "JollySeberError",
    "InvalidParameterError",
    "ShapeMismatchError",
    "DataFormatError",
    "DegenerateNormalizationError",
    "ValidationError",
    "ConfigurationError",
]
