"""Small helpers shared by the cleaning solvers.

* pair ordering – stable sorts of ``(index, count)`` pairs
* the ``CleaningError`` family raised when a solve cannot finish
"""

from __future__ import annotations

from typing import Iterable, List, Tuple

__all__ = [
    "sort_pairs_by_first",
    "sort_pairs_by_second",
    "CleaningError",
    "InfeasibleFloorError",
    "InvariantViolationError",
    "InsufficientCandidatesError",
]

Pair = Tuple[int, int]


# ---------------------------------------------------------------------------
#  Pair ordering
# ---------------------------------------------------------------------------

def _sort_pairs(pairs: Iterable[Pair], item: int, decreasing: bool) -> List[Pair]:
    # sorted() is stable, so equal keys keep their input order
    return sorted(pairs, key=lambda p: p[item], reverse=decreasing)


def sort_pairs_by_first(pairs: Iterable[Pair], *, decreasing: bool = False) -> List[Pair]:
    """Order ``(count, index)`` pairs by their leading item."""
    return _sort_pairs(pairs, 0, decreasing)


def sort_pairs_by_second(pairs: Iterable[Pair], *, decreasing: bool = False) -> List[Pair]:
    """Order ``(index, count)`` pairs by count.

    >>> sort_pairs_by_second([(0, 3), (1, 1), (2, 3)])
    [(1, 1), (0, 3), (2, 3)]
    >>> sort_pairs_by_second([(0, 3), (1, 1), (2, 3)], decreasing=True)
    [(0, 3), (2, 3), (1, 1)]
    """
    return _sort_pairs(pairs, 1, decreasing)


# ---------------------------------------------------------------------------
#  Errors
# ---------------------------------------------------------------------------

class CleaningError(RuntimeError):
    """A solve stopped before reaching a matrix within budget."""


class InfeasibleFloorError(CleaningError):
    """A minimum row/column count blocks every remaining reduction."""


class InvariantViolationError(CleaningError):
    """Solver bookkeeping disagrees with what the loop guarantees."""


class InsufficientCandidatesError(CleaningError):
    """More rows/columns must go than there are candidates to remove."""

    def __init__(self, needed: int, available: int):
        super().__init__(
            f"need to remove more missing data than is present ({needed} vs. {available})"
        )
        self.needed = needed
        self.available = available
