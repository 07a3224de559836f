"""Threshold-driven greedy cleaning
=================================
Starts with every row and column kept and removes the worst offenders until
each remaining row and column has at most ``max_perc_miss`` missing cells.

The per-row / per-column valid counts (``alphas`` / ``betas``) are kept up to
date incrementally: every keep-flag change adjusts the counters it touches,
so a step never rescans the whole matrix.

```
from presence_matrix import PresenceMatrix
rows, cols = run_greedy(PresenceMatrix(mask), 0.1, min_rows=5)
```
"""

from __future__ import annotations

from collections import namedtuple
from dataclasses import dataclass
from typing import List, Optional, Tuple

import numpy as np

from clean_utils import (
    InfeasibleFloorError,
    InsufficientCandidatesError,
    InvariantViolationError,
    sort_pairs_by_second,
)
from presence_matrix import missing_mask

__all__ = [
    "EliminationState",
    "Removal",
    "GreedySolver",
    "run_greedy",
]

ROW = "row"
COL = "col"

# axis is ROW or COL; indices in the order they were (or will be) removed
Removal = namedtuple("Removal", ["axis", "indices"])


# ---------------------------------------------------------------------------
#  Solver state
# ---------------------------------------------------------------------------

@dataclass
class EliminationState:
    keep_row: np.ndarray
    keep_col: np.ndarray
    alphas: np.ndarray  # valid cells per row, kept columns only
    betas: np.ndarray   # valid cells per column, kept rows only
    num_rows_kept: int
    num_cols_kept: int

    @classmethod
    def initial(cls, missing: np.ndarray) -> "EliminationState":
        n, m = missing.shape
        keep_row = np.ones(n, dtype=bool)
        keep_col = np.ones(m, dtype=bool)
        return cls(
            keep_row=keep_row,
            keep_col=keep_col,
            alphas=calc_alphas(missing, keep_col),
            betas=calc_betas(missing, keep_row),
            num_rows_kept=n,
            num_cols_kept=m,
        )


def calc_alphas(missing: np.ndarray, keep_col: np.ndarray) -> np.ndarray:
    return (~missing & keep_col[None, :]).sum(axis=1).astype(np.int64)


def calc_betas(missing: np.ndarray, keep_row: np.ndarray) -> np.ndarray:
    return (~missing & keep_row[:, None]).sum(axis=0).astype(np.int64)


# ---------------------------------------------------------------------------
#  Counter maintenance
# ---------------------------------------------------------------------------

def remove_row(state: EliminationState, missing: np.ndarray, idx: int) -> bool:
    """Drop row *idx*; False (and nothing touched) if it is already gone."""
    if not state.keep_row[idx]:
        return False
    state.keep_row[idx] = False
    state.num_rows_kept -= 1
    state.betas[~missing[idx, :]] -= 1
    return True


def remove_col(state: EliminationState, missing: np.ndarray, idx: int) -> bool:
    """Drop column *idx*; False (and nothing touched) if it is already gone."""
    if not state.keep_col[idx]:
        return False
    state.keep_col[idx] = False
    state.num_cols_kept -= 1
    state.alphas[~missing[:, idx]] -= 1
    return True


# ---------------------------------------------------------------------------
#  Missing-fraction queries
# ---------------------------------------------------------------------------

def _fraction(num_missing: np.ndarray, total: int) -> np.ndarray:
    if total == 0:
        return np.zeros(num_missing.shape, dtype=float)
    return num_missing / float(total)


def row_missing_fractions(state: EliminationState) -> np.ndarray:
    return _fraction(state.num_cols_kept - state.alphas, state.num_cols_kept)


def col_missing_fractions(state: EliminationState) -> np.ndarray:
    return _fraction(state.num_rows_kept - state.betas, state.num_rows_kept)


def is_clean(state: EliminationState, max_perc_miss: float) -> bool:
    if np.any(state.keep_row & (row_missing_fractions(state) > max_perc_miss)):
        return False
    return not np.any(state.keep_col & (col_missing_fractions(state) > max_perc_miss))


def worst_over_threshold(
    fractions: np.ndarray, keep: np.ndarray, max_perc_miss: float
) -> Optional[Tuple[int, float]]:
    """(index, fraction) of the kept entry with the highest fraction above budget.

    Ties go to the lowest index.  ``None`` when nothing is over budget.
    """
    over = keep & (fractions > max_perc_miss)
    if not over.any():
        return None
    idx = int(np.argmax(np.where(over, fractions, -1.0)))
    return idx, float(fractions[idx])


def num_to_remove(num_missing: int, total: int, max_perc_miss: float) -> int:
    """How many missing cells must go before ``missing / total <= max_perc_miss``.

    Each removal takes one unit off both the missing count and the total.
    """
    tmp_missing, tmp_total = num_missing, total
    while tmp_total > 0 and tmp_missing / tmp_total > max_perc_miss:
        tmp_missing -= 1
        tmp_total -= 1
    return total - tmp_total


def cheapest(candidates: np.ndarray, counts: np.ndarray, k: int) -> List[Tuple[int, int]]:
    """The *k* candidates with the fewest valid cells, as (index, count) pairs."""
    if k > len(candidates):
        raise InsufficientCandidatesError(k, len(candidates))
    pairs = [(int(c), int(counts[c])) for c in candidates]
    return sort_pairs_by_second(pairs)[:k]


def cols_to_fix_row(
    state: EliminationState, missing: np.ndarray, row: int, max_perc_miss: float
) -> List[Tuple[int, int]]:
    k = num_to_remove(
        state.num_cols_kept - int(state.alphas[row]), state.num_cols_kept, max_perc_miss
    )
    candidates = np.flatnonzero(state.keep_col & missing[row, :])
    return cheapest(candidates, state.betas, k)


def rows_to_fix_col(
    state: EliminationState, missing: np.ndarray, col: int, max_perc_miss: float
) -> List[Tuple[int, int]]:
    k = num_to_remove(
        state.num_rows_kept - int(state.betas[col]), state.num_rows_kept, max_perc_miss
    )
    candidates = np.flatnonzero(state.keep_row & missing[:, col])
    return cheapest(candidates, state.alphas, k)


# ---------------------------------------------------------------------------
#  One greedy step
# ---------------------------------------------------------------------------

def choose_removal(
    state: EliminationState,
    missing: np.ndarray,
    max_perc_miss: float,
    min_rows: int = 0,
    min_cols: int = 0,
) -> Removal:
    """Decide what the next step removes, without touching *state*."""
    at_row_floor = state.num_rows_kept == min_rows
    at_col_floor = state.num_cols_kept == min_cols

    if at_row_floor and at_col_floor:
        raise InfeasibleFloorError(
            f"matrix is at dimension limit ({min_rows} x {min_cols}) "
            f"but fails the missing-data requirement"
        )

    if at_row_floor:
        worst = worst_over_threshold(row_missing_fractions(state), state.keep_row, max_perc_miss)
        if worst is None:
            raise InfeasibleFloorError(
                f"row limit ({min_rows}) reached and no row is over threshold"
            )
        picked = cols_to_fix_row(state, missing, worst[0], max_perc_miss)
        return Removal(COL, [j for j, _ in picked])

    if at_col_floor:
        worst = worst_over_threshold(col_missing_fractions(state), state.keep_col, max_perc_miss)
        if worst is None:
            raise InfeasibleFloorError(
                f"column limit ({min_cols}) reached and no column is over threshold"
            )
        picked = rows_to_fix_col(state, missing, worst[0], max_perc_miss)
        return Removal(ROW, [i for i, _ in picked])

    worst_row = worst_over_threshold(row_missing_fractions(state), state.keep_row, max_perc_miss)
    worst_col = worst_over_threshold(col_missing_fractions(state), state.keep_col, max_perc_miss)
    if worst_row is None and worst_col is None:
        raise InvariantViolationError("could not find row or column over the missing limit")

    # a column only displaces the worst row on a strictly higher fraction
    if worst_col is None or (worst_row is not None and worst_row[1] >= worst_col[1]):
        row = worst_row[0]
        picked = cols_to_fix_row(state, missing, row, max_perc_miss)
        if sum(cnt for _, cnt in picked) < state.alphas[row]:
            return Removal(COL, [j for j, _ in picked])
        return Removal(ROW, [row])

    col = worst_col[0]
    picked = rows_to_fix_col(state, missing, col, max_perc_miss)
    if sum(cnt for _, cnt in picked) < state.betas[col]:
        return Removal(ROW, [i for i, _ in picked])
    return Removal(COL, [col])


def apply_removal(
    state: EliminationState,
    missing: np.ndarray,
    removal: Removal,
    min_rows: int = 0,
    min_cols: int = 0,
) -> Removal:
    """Remove what *removal* names, stopping at the floor. Returns what went."""
    removed: List[int] = []
    for idx in removal.indices:
        if removal.axis == ROW:
            if state.num_rows_kept > min_rows and remove_row(state, missing, idx):
                removed.append(idx)
        else:
            if state.num_cols_kept > min_cols and remove_col(state, missing, idx):
                removed.append(idx)
    return Removal(removal.axis, removed)


def step(
    state: EliminationState,
    missing: np.ndarray,
    max_perc_miss: float,
    min_rows: int = 0,
    min_cols: int = 0,
) -> Removal:
    removal = choose_removal(state, missing, max_perc_miss, min_rows, min_cols)
    if not removal.indices:
        raise InvariantViolationError("no rows or columns were selected for removal")
    return apply_removal(state, missing, removal, min_rows, min_cols)


# ---------------------------------------------------------------------------
#  Solver
# ---------------------------------------------------------------------------

class GreedySolver:
    """Remove rows/columns until every kept one is within the missing budget."""

    def __init__(self, matrix, max_perc_miss: float, min_rows: int = 0, min_cols: int = 0):
        if not 0.0 <= max_perc_miss <= 1.0:
            raise ValueError(f"max_perc_miss must be in [0, 1], got {max_perc_miss}")
        self.missing = missing_mask(matrix)
        n, m = self.missing.shape
        if not 0 <= min_rows <= n:
            raise ValueError(f"min_rows must be in [0, {n}], got {min_rows}")
        if not 0 <= min_cols <= m:
            raise ValueError(f"min_cols must be in [0, {m}], got {min_cols}")
        self.max_perc_miss = float(max_perc_miss)
        self.min_rows = int(min_rows)
        self.min_cols = int(min_cols)
        self.state = EliminationState.initial(self.missing)
        self.history: List[Removal] = []

    def is_clean(self) -> bool:
        return is_clean(self.state, self.max_perc_miss)

    def step(self) -> Removal:
        removal = step(self.state, self.missing, self.max_perc_miss, self.min_rows, self.min_cols)
        self.history.append(removal)
        return removal

    def solve(self) -> Tuple[np.ndarray, np.ndarray]:
        while not self.is_clean():
            self.step()
        return self.rows_to_keep, self.cols_to_keep

    @property
    def rows_to_keep(self) -> np.ndarray:
        return self.state.keep_row.copy()

    @property
    def cols_to_keep(self) -> np.ndarray:
        return self.state.keep_col.copy()

    @property
    def num_rows_kept(self) -> int:
        return self.state.num_rows_kept

    @property
    def num_cols_kept(self) -> int:
        return self.state.num_cols_kept


def run_greedy(matrix, max_perc_miss: float, min_rows: int = 0, min_cols: int = 0):
    """Solve and return ``(rows_to_keep, cols_to_keep)`` boolean arrays."""
    return GreedySolver(matrix, max_perc_miss, min_rows, min_cols).solve()


if __name__ == "__main__":
    from presence_matrix import PresenceMatrix

    demo = PresenceMatrix.from_array([
        [1, 1, 1, 1, 0],
        [1, 0, 1, 1, 1],
        [1, 1, 1, 1, 1],
        [0, 0, 1, 0, 1],
    ])
    rows, cols = run_greedy(demo, 0.2)
    print(f"rows kept {np.flatnonzero(rows)} cols kept {np.flatnonzero(cols)}")
    print(f"valid cells kept: {demo.num_valid_kept(rows, cols)}")
