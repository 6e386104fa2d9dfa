"""Utility functions and classes for jolly-seber-jax."""

from .logging import get_logger, setup_logging
from .validation import (
    is_traced,
    validate_array_dimensions,
    validate_positive,
    validate_probability,
    validate_capture_matrix,
)

__all__ = [
    "get_logger",
    "setup_logging",
    "is_traced",
    "validate_array_dimensions",
    "validate_positive",
    "validate_probability",
    "validate_capture_matrix",
]
