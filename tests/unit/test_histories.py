"""
Tests for capture history parsing and first/last capture indices.
"""

import numpy as np
import pytest

from jolly_seber_jax.core.exceptions import DataFormatError, ShapeMismatchError, ValidationError
from jolly_seber_jax.data.histories import (
    NEVER_CAPTURED,
    DataContext,
    IndividualIndex,
    capture_indices,
    history_index,
    parse_histories,
)


class TestHistoryIndex:
    """First and last capture occasion of a single history."""

    def test_all_zero_history_is_unobserved(self):
        index = history_index([0, 0, 0, 0])
        assert index == IndividualIndex(first=None, last=None)
        assert not index.observed
        assert index.encode() == (NEVER_CAPTURED, NEVER_CAPTURED)

    @pytest.mark.parametrize("k", [1, 2, 3, 4])
    def test_single_capture_sets_first_and_last(self, k):
        history = [0, 0, 0, 0]
        history[k - 1] = 1
        index = history_index(history)
        assert index.first == k
        assert index.last == k

    def test_gaps_between_captures(self):
        index = history_index([0, 1, 0, 0, 1, 0])
        assert (index.first, index.last) == (2, 5)
        assert index.observed

    @pytest.mark.parametrize("history, expected", [
        ("0000", (None, None)),
        ("0101", (2, 4)),
        ("1000", (1, 1)),
    ])
    def test_string_history(self, history, expected):
        index = history_index(history)
        assert (index.first, index.last) == expected
        assert index.observed == (expected[0] is not None)

    @pytest.mark.parametrize("history", [[0, 2, 0], "01a1", np.array([0.5, 1.0])])
    def test_non_binary_history_rejected(self, history):
        with pytest.raises(DataFormatError):
            history_index(history)

    def test_nested_history_rejected(self):
        with pytest.raises(ValidationError):
            history_index([[0, 1], [1, 0]])

    def test_inconsistent_index_rejected(self):
        with pytest.raises(ValidationError):
            IndividualIndex(first=1, last=None)
        with pytest.raises(ValidationError):
            IndividualIndex(first=3, last=2)


class TestCaptureIndices:
    """Vectorized indices agree with the per-row version."""

    def test_matches_history_index(self):
        matrix = np.array([
            [1, 0, 0, 0],
            [0, 1, 1, 0],
            [0, 0, 0, 0],
            [1, 0, 0, 1],
            [0, 0, 0, 1],
        ])
        first, last = capture_indices(matrix)

        for row, f, l in zip(matrix, np.asarray(first), np.asarray(last)):
            assert (int(f), int(l)) == history_index(row).encode()

    def test_never_captured_sentinel(self):
        first, last = capture_indices(np.zeros((3, 5), dtype=int))
        np.testing.assert_array_equal(np.asarray(first), 0)
        np.testing.assert_array_equal(np.asarray(last), 0)


class TestParseHistories:

    def test_strings(self):
        matrix = parse_histories(["0101", "1000", "0000"])
        np.testing.assert_array_equal(matrix, [[0, 1, 0, 1], [1, 0, 0, 0], [0, 0, 0, 0]])
        assert matrix.dtype == np.int32

    def test_ragged_histories_rejected(self):
        with pytest.raises(ShapeMismatchError):
            parse_histories(["0101", "100"])

    def test_invalid_characters_rejected(self):
        with pytest.raises(DataFormatError):
            parse_histories(["01a1"])


class TestDataContext:

    def test_from_histories(self):
        context = DataContext.from_histories(["110", "011", "000", "000"])
        assert context.n_individuals == 4
        assert context.n_occasions == 3
        assert context.n_observed == 2
        assert context.n_augmented == 2
        np.testing.assert_array_equal(np.asarray(context.first_capture), [1, 2, 0, 0])
        np.testing.assert_array_equal(np.asarray(context.last_capture), [2, 3, 0, 0])

    def test_individual_index(self):
        context = DataContext.from_histories(["010", "000"])
        assert context.individual_index(0) == IndividualIndex(first=2, last=2)
        assert not context.individual_index(1).observed

    def test_non_binary_matrix_rejected(self):
        with pytest.raises(DataFormatError):
            DataContext.from_histories(np.array([[0, 2], [1, 0]]))

    def test_one_dimensional_matrix_rejected(self):
        with pytest.raises(ValidationError):
            DataContext.from_histories(np.array([0, 1, 1]))

    def test_individual_ids_length_checked(self):
        with pytest.raises(ShapeMismatchError):
            DataContext.from_histories(["01", "10"], individual_ids=["a"])

    def test_dict_round_trip(self):
        context = DataContext.from_histories(
            ["101", "000"], individual_ids=["a", "b"], metadata={"site": "north"}
        )
        data_dict = context.to_dict()
        assert isinstance(data_dict["capture_matrix"], np.ndarray)

        restored = DataContext.from_dict(data_dict)
        np.testing.assert_array_equal(
            np.asarray(restored.capture_matrix), np.asarray(context.capture_matrix)
        )
        np.testing.assert_array_equal(
            np.asarray(restored.last_capture), np.asarray(context.last_capture)
        )
        assert restored.individual_ids == ["a", "b"]
        assert restored.metadata == {"site": "north"}
