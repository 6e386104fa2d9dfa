"""
Validation utilities for jolly-seber-jax.

Provides common validation functions for arrays, parameters, and capture
matrices. All checks operate on concrete (non-traced) values.
"""

import numpy as np
import jax
from typing import Union, Tuple, Optional, Any

from ..core.exceptions import (
    DataFormatError,
    InvalidParameterError,
    ShapeMismatchError,
    ValidationError,
)


def is_traced(*values: Any) -> bool:
    """True if any leaf of the given values is an abstract JAX tracer."""
    leaves = jax.tree_util.tree_leaves(values)
    return any(isinstance(leaf, jax.core.Tracer) for leaf in leaves)


def validate_array_dimensions(
    array: Any,
    expected_shape: Optional[Tuple[Optional[int], ...]] = None,
    min_dims: Optional[int] = None,
    max_dims: Optional[int] = None,
    name: str = "array"
) -> None:
    """
    Validate array dimensions.

    Args:
        array: Array to validate
        expected_shape: Expected exact shape (None entries are ignored)
        min_dims: Minimum number of dimensions
        max_dims: Maximum number of dimensions
        name: Name for error messages

    Raises:
        ValidationError: If the object has no shape or the wrong rank
        ShapeMismatchError: If a dimension has the wrong size
    """
    if not hasattr(array, 'shape'):
        raise ValidationError(
            f"{name} must be an array-like object with shape attribute",
            suggestions=[
                "Ensure input is numpy or JAX array",
                "Convert lists to arrays using np.asarray()",
            ]
        )

    shape = array.shape
    ndims = len(shape)

    if min_dims is not None and ndims < min_dims:
        raise ValidationError(
            f"{name} has {ndims} dimensions, expected at least {min_dims}",
            suggestions=[f"Check that {name} has correct structure"]
        )

    if max_dims is not None and ndims > max_dims:
        raise ValidationError(
            f"{name} has {ndims} dimensions, expected at most {max_dims}",
            suggestions=[f"Check that {name} has correct structure"]
        )

    if expected_shape is not None:
        mismatch = len(expected_shape) != ndims or any(
            expected is not None and actual != expected
            for actual, expected in zip(shape, expected_shape)
        )
        if mismatch:
            raise ShapeMismatchError(name=name, expected=expected_shape, actual=shape)


def validate_positive(
    value: Union[float, np.ndarray, jax.Array],
    name: str = "value",
    strict: bool = True
) -> None:
    """
    Validate that value(s) are positive and finite.

    Args:
        value: Value or array to validate
        name: Name for error messages
        strict: If True, require strictly positive (> 0), else non-negative (>= 0)

    Raises:
        InvalidParameterError: If validation fails
    """
    array = np.asarray(value, dtype=float)
    ok = array > 0 if strict else array >= 0

    if not np.all(np.isfinite(array)) or not np.all(ok):
        raise InvalidParameterError(
            parameter=name,
            value=array.tolist(),
            domain="(0, inf)" if strict else "[0, inf)",
        )


def validate_probability(
    value: Union[float, np.ndarray, jax.Array],
    name: str = "probability",
    open_interval: bool = True
) -> None:
    """
    Validate that value(s) are valid probabilities.

    Args:
        value: Value or array to validate
        name: Name for error messages
        open_interval: If True, require 0 < p < 1, else 0 <= p <= 1

    Raises:
        InvalidParameterError: If validation fails
    """
    array = np.asarray(value, dtype=float)
    if open_interval:
        ok = (array > 0) & (array < 1)
    else:
        ok = (array >= 0) & (array <= 1)

    if not np.all(ok):
        raise InvalidParameterError(
            parameter=name,
            value=array.tolist(),
            domain="(0, 1)" if open_interval else "[0, 1]",
        )


def validate_capture_matrix(capture_matrix: Any, min_occasions: int = 1) -> None:
    """
    Validate capture history matrix.

    Args:
        capture_matrix: Matrix of capture histories (individuals x occasions)
        min_occasions: Minimum number of occasions

    Raises:
        ValidationError: If the matrix is not two-dimensional or empty
        DataFormatError: If the matrix contains values other than 0 and 1
    """
    validate_array_dimensions(capture_matrix, min_dims=2, max_dims=2, name="capture_matrix")

    n_individuals, n_occasions = capture_matrix.shape

    if n_individuals < 1:
        raise ValidationError(
            "Capture matrix has no individuals",
            suggestions=["Provide at least one capture history"]
        )

    if n_occasions < min_occasions:
        raise ValidationError(
            f"Capture matrix has {n_occasions} occasions, need at least {min_occasions}",
            suggestions=["Check capture history length"]
        )

    values = set(np.unique(np.asarray(capture_matrix)).tolist())
    invalid = values - {0, 1}
    if invalid:
        raise DataFormatError(specific_issue=f"capture matrix contains values {sorted(invalid)}")
