"""
Capture histories and their derived indices.

A capture matrix holds one row per individual of the augmented sample and one
column per sampling occasion. The first and last capture occasion of each row
decide which likelihood branch applies and where per-individual sums stop.
"""

import numpy as np
import jax.numpy as jnp
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

from ..core.exceptions import DataFormatError, ShapeMismatchError, ValidationError
from ..utils.logging import get_logger
from ..utils.validation import validate_array_dimensions, validate_capture_matrix


logger = get_logger(__name__)

NEVER_CAPTURED = 0
"""Sentinel used by the vectorized index arrays for an all-zero history."""


@dataclass(frozen=True)
class IndividualIndex:
    """
    First and last capture occasion of one individual.

    Occasions are 1-based. Both are None when the individual was never
    captured, which places it in the unobserved likelihood branch.
    """
    first: Optional[int]
    last: Optional[int]

    def __post_init__(self):
        if (self.first is None) != (self.last is None):
            raise ValidationError("first and last capture must both be set or both be None")
        if self.first is not None and not 1 <= self.first <= self.last:
            raise ValidationError(f"Invalid capture occasions: first={self.first}, last={self.last}")

    @property
    def observed(self) -> bool:
        return self.first is not None

    def encode(self) -> Tuple[int, int]:
        """Encode as integers with 0 standing for 'never captured'."""
        if not self.observed:
            return NEVER_CAPTURED, NEVER_CAPTURED
        return self.first, self.last


def history_index(history: Union[str, Sequence[int]]) -> IndividualIndex:
    """
    Find the first and last capture occasion of a single history.

    Args:
        history: Binary sequence of length T, or a string such as "0101"

    Returns:
        IndividualIndex with 1-based occasions, or None for both if the
        history contains no captures

    Raises:
        DataFormatError: If the history contains values other than 0 and 1
    """
    if isinstance(history, str):
        row = parse_histories([history])[0]
    else:
        row = np.asarray(history)
        validate_array_dimensions(row, min_dims=1, max_dims=1, name="history")
        invalid = set(np.unique(row).tolist()) - {0, 1}
        if invalid:
            raise DataFormatError(specific_issue=f"capture history contains values {sorted(invalid)}")

    captured = np.flatnonzero(row)
    if captured.size == 0:
        return IndividualIndex(first=None, last=None)
    return IndividualIndex(first=int(captured[0]) + 1, last=int(captured[-1]) + 1)


def capture_indices(capture_matrix: Any) -> Tuple[jnp.ndarray, jnp.ndarray]:
    """
    Vectorized first/last capture occasions for every row.

    Returns:
        Two int arrays of length M holding 1-based occasions, with
        NEVER_CAPTURED (0) for rows without captures
    """
    y = jnp.asarray(capture_matrix)
    n_occasions = y.shape[1]
    occasions = jnp.arange(1, n_occasions + 1)
    captured = y > 0

    first = jnp.min(jnp.where(captured, occasions, n_occasions + 1), axis=1)
    last = jnp.max(jnp.where(captured, occasions, NEVER_CAPTURED), axis=1)
    first = jnp.where(jnp.any(captured, axis=1), first, NEVER_CAPTURED)
    return first.astype(jnp.int32), last.astype(jnp.int32)


def parse_histories(histories: Union[Sequence[str], Sequence[Sequence[int]], np.ndarray]) -> np.ndarray:
    """
    Convert capture histories to a binary matrix.

    Accepts strings such as "0101", nested sequences, or an array.

    Raises:
        ShapeMismatchError: If histories have different lengths
        DataFormatError: If a history contains characters other than 0 and 1
    """
    if isinstance(histories, np.ndarray) or hasattr(histories, 'shape'):
        return np.asarray(histories, dtype=np.int32)

    rows: List[List[int]] = []
    for history in histories:
        if isinstance(history, str):
            history = history.strip()
            if set(history) - {"0", "1"}:
                raise DataFormatError(specific_issue=f"invalid capture history string '{history}'")
            rows.append([int(c) for c in history])
        else:
            rows.append([int(v) for v in history])

    lengths = {len(row) for row in rows}
    if len(lengths) > 1:
        raise ShapeMismatchError(specific_issue=f"capture histories have lengths {sorted(lengths)}")

    return np.asarray(rows, dtype=np.int32)


@dataclass
class DataContext:
    """Capture matrix of the augmented sample together with its indices."""
    capture_matrix: jnp.ndarray
    first_capture: jnp.ndarray
    last_capture: jnp.ndarray
    n_individuals: int
    n_occasions: int
    individual_ids: Optional[List[str]] = None
    metadata: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_histories(
        cls,
        histories: Union[Sequence[str], Sequence[Sequence[int]], np.ndarray],
        individual_ids: Optional[List[str]] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> "DataContext":
        """
        Build a context from capture histories.

        Args:
            histories: Capture histories as strings, nested sequences, or an
                M x T array; all-zero rows are augmented pseudo-individuals
            individual_ids: Optional identifiers, one per row
            metadata: Optional free-form metadata

        Returns:
            DataContext with first/last capture arrays computed once
        """
        matrix = parse_histories(histories)
        validate_capture_matrix(matrix)

        n_individuals, n_occasions = matrix.shape
        if individual_ids is not None and len(individual_ids) != n_individuals:
            raise ShapeMismatchError(
                name="individual_ids", expected=(n_individuals,), actual=(len(individual_ids),)
            )

        capture_matrix = jnp.asarray(matrix, dtype=jnp.int32)
        first, last = capture_indices(capture_matrix)

        n_observed = int(jnp.sum(first > 0))
        if n_observed == 0:
            logger.warning("Capture matrix contains no captures", n_individuals=n_individuals)

        logger.debug(
            "Built data context",
            n_individuals=n_individuals,
            n_occasions=n_occasions,
            n_observed=n_observed,
        )

        return cls(
            capture_matrix=capture_matrix,
            first_capture=first,
            last_capture=last,
            n_individuals=n_individuals,
            n_occasions=n_occasions,
            individual_ids=individual_ids,
            metadata=dict(metadata or {}),
        )

    @property
    def n_observed(self) -> int:
        """Number of individuals captured at least once."""
        return int(jnp.sum(self.first_capture > 0))

    @property
    def n_augmented(self) -> int:
        """Number of all-zero (pseudo-individual) rows."""
        return self.n_individuals - self.n_observed

    def individual_index(self, i: int) -> IndividualIndex:
        """Tagged first/last occasions for row i."""
        first = int(self.first_capture[i])
        if first == NEVER_CAPTURED:
            return IndividualIndex(first=None, last=None)
        return IndividualIndex(first=first, last=int(self.last_capture[i]))

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to a pickle-safe dictionary of numpy arrays."""
        return {
            'capture_matrix': np.asarray(self.capture_matrix),
            'individual_ids': self.individual_ids,
            'metadata': self.metadata,
        }

    @classmethod
    def from_dict(cls, data_dict: Dict[str, Any]) -> "DataContext":
        """Rebuild a context from to_dict() output."""
        return cls.from_histories(
            data_dict['capture_matrix'],
            individual_ids=data_dict.get('individual_ids'),
            metadata=data_dict.get('metadata'),
        )
