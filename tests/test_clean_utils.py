import pytest

from clean_utils import (
    CleaningError,
    InfeasibleFloorError,
    InsufficientCandidatesError,
    InvariantViolationError,
    sort_pairs_by_first,
    sort_pairs_by_second,
)


def test_sort_by_second_is_stable():
    pairs = [(0, 3), (1, 1), (2, 3), (3, 1)]
    assert sort_pairs_by_second(pairs) == [(1, 1), (3, 1), (0, 3), (2, 3)]
    assert sort_pairs_by_second(pairs, decreasing=True) == [(0, 3), (2, 3), (1, 1), (3, 1)]


def test_sort_by_first():
    assert sort_pairs_by_first([(2, "a"), (1, "b"), (2, "c")]) == [(1, "b"), (2, "a"), (2, "c")]
    assert sort_pairs_by_first([(1, 0), (3, 0)], decreasing=True) == [(3, 0), (1, 0)]


@pytest.mark.parametrize("exc", [InfeasibleFloorError, InvariantViolationError])
def test_errors_share_a_base(exc):
    assert issubclass(exc, CleaningError)


def test_insufficient_candidates_message():
    err = InsufficientCandidatesError(3, 2)
    assert isinstance(err, CleaningError)
    assert (err.needed, err.available) == (3, 2)
    assert "3 vs. 2" in str(err)
