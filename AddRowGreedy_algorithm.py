"""Add-row greedy – zero-missing inclusion heuristic
=================================================
Starts with no rows and every column.  Rows are added one at a time; each
added row knocks out the columns in which it is missing.  After every
inclusion the objective ``rows × columns`` (all cells valid by construction)
is recorded, and the best prefix of the inclusion order is returned.

Row choice: most valid cells among the remaining columns (``alpha``).  Ties
are broken by how much missing data the candidate would clear from *similar*
rows, i.e. excluded rows whose alpha is within ``ALPHA_WINDOW`` of the best.
"""

from __future__ import annotations

from collections import namedtuple
from dataclasses import dataclass, field
from typing import List, Tuple

import numpy as np

from clean_utils import InvariantViolationError
from presence_matrix import missing_mask

__all__ = [
    "ALPHA_WINDOW",
    "InclusionState",
    "Inclusion",
    "AddRowGreedy",
    "run_add_row_greedy",
]

# rows whose alpha trails the best by less than this count as "similar"
ALPHA_WINDOW = 3

Inclusion = namedtuple("Inclusion", ["row", "pruned_cols", "objective", "improved"])


@dataclass
class InclusionState:
    included_cols: np.ndarray
    num_included_cols: int
    alphas: np.ndarray  # excluded rows: valid cells in included columns
    excluded_rows: List[int]
    included_rows: List[int] = field(default_factory=list)
    best_obj_value: int = 0
    best_num_rows: int = 0

    @classmethod
    def initial(cls, missing: np.ndarray) -> "InclusionState":
        n, m = missing.shape
        return cls(
            included_cols=np.ones(m, dtype=bool),
            num_included_cols=m,
            alphas=(~missing).sum(axis=1).astype(np.int64),
            excluded_rows=list(range(n)),
        )

    def objective(self) -> int:
        return len(self.included_rows) * self.num_included_cols


# ---------------------------------------------------------------------------
#  Row selection
# ---------------------------------------------------------------------------

def tie_break_score(
    state: InclusionState, missing: np.ndarray, row: int, best_alpha: int
) -> Tuple[int, int]:
    """Largest ``(num_missing, alpha_sum)`` over the columns *row* would prune.

    For each included column missing in *row*, count the excluded rows that
    are also missing there and have an alpha within ``ALPHA_WINDOW`` of
    *best_alpha*, along with the sum of their alphas.
    """
    excluded = np.asarray(state.excluded_rows, dtype=np.intp)
    near = excluded[best_alpha - state.alphas[excluded] < ALPHA_WINDOW]

    worst = (0, 0)
    for j in np.flatnonzero(state.included_cols & missing[row, :]):
        hit = near[missing[near, j]]
        score = (int(hit.size), int(state.alphas[hit].sum()))
        if score > worst:
            worst = score
    return worst


def row_score(
    state: InclusionState, missing: np.ndarray, row: int, best_alpha: int
) -> Tuple[int, int, int]:
    return (int(state.alphas[row]),) + tie_break_score(state, missing, row, best_alpha)


def select_next_row(state: InclusionState, missing: np.ndarray) -> int:
    if not state.excluded_rows:
        raise InvariantViolationError("no excluded rows left to include")
    best_alpha = int(max(state.alphas[i] for i in state.excluded_rows))
    candidates = [i for i in state.excluded_rows if state.alphas[i] == best_alpha]
    if len(candidates) == 1:
        return candidates[0]
    # max() returns the first of equally scored candidates
    return max(candidates, key=lambda i: row_score(state, missing, i, best_alpha))


# ---------------------------------------------------------------------------
#  Inclusion
# ---------------------------------------------------------------------------

def include_row(state: InclusionState, row: int) -> None:
    try:
        state.excluded_rows.remove(row)
    except ValueError:
        raise InvariantViolationError(f"could not find row {row} in excluded set") from None
    state.included_rows.append(row)


def prune_columns(state: InclusionState, missing: np.ndarray, row: int) -> List[int]:
    """Drop included columns missing in *row*; fix up the excluded alphas."""
    excluded = np.asarray(state.excluded_rows, dtype=np.intp)
    pruned = [int(j) for j in np.flatnonzero(state.included_cols & missing[row, :])]
    for j in pruned:
        state.included_cols[j] = False
        state.num_included_cols -= 1
        state.alphas[excluded[~missing[excluded, j]]] -= 1
    return pruned


def step(state: InclusionState, missing: np.ndarray) -> Inclusion:
    row = select_next_row(state, missing)
    include_row(state, row)
    pruned = prune_columns(state, missing, row)

    obj = state.objective()
    improved = obj > state.best_obj_value
    if improved:
        state.best_obj_value = obj
        state.best_num_rows = len(state.included_rows)
    return Inclusion(row, pruned, obj, improved)


# ---------------------------------------------------------------------------
#  Solver
# ---------------------------------------------------------------------------

class AddRowGreedy:
    """Greedy row inclusion; the kept sub-matrix has no missing cells.

    ``min_rows`` / ``min_cols`` are not enforced while solving; they only let
    callers check the result with :meth:`meets_floors`.
    """

    def __init__(self, matrix, min_rows: int = 0, min_cols: int = 0):
        self.missing = missing_mask(matrix)
        self.min_rows = int(min_rows)
        self.min_cols = int(min_cols)
        self.state = InclusionState.initial(self.missing)
        self.history: List[Inclusion] = []

    def solve(self) -> Tuple[np.ndarray, np.ndarray]:
        while self.state.excluded_rows:
            self.history.append(step(self.state, self.missing))
        return self.rows_to_keep, self.cols_to_keep

    @property
    def inclusion_order(self) -> List[int]:
        return list(self.state.included_rows)

    @property
    def best_obj_value(self) -> int:
        return self.state.best_obj_value

    @property
    def best_num_rows(self) -> int:
        return self.state.best_num_rows

    @property
    def rows_to_keep(self) -> np.ndarray:
        keep = np.zeros(self.missing.shape[0], dtype=bool)
        keep[self.state.included_rows[: self.state.best_num_rows]] = True
        return keep

    @property
    def cols_to_keep(self) -> np.ndarray:
        # rebuilt from the data: the incremental column set has moved past the best snapshot
        return ~self.missing[self.rows_to_keep].any(axis=0)

    @property
    def num_rows_to_keep(self) -> int:
        return self.state.best_num_rows

    @property
    def num_cols_to_keep(self) -> int:
        return int(self.cols_to_keep.sum())

    def meets_floors(self) -> bool:
        return self.num_rows_to_keep >= self.min_rows and self.num_cols_to_keep >= self.min_cols


def run_add_row_greedy(matrix, min_rows: int = 0, min_cols: int = 0):
    """Solve and return ``(rows_to_keep, cols_to_keep)`` boolean arrays."""
    return AddRowGreedy(matrix, min_rows, min_cols).solve()
