from __future__ import annotations
"""Unified wrappers that make every cleaning solver
return a `Solution` with the same signature ⇢ easier downstream code.

Usage
-----
>>> import pandas as pd
>>> from presence_matrix import PresenceMatrix
>>> from adapter import clean_matrix
>>> M = PresenceMatrix.from_dataframe(pd.read_csv("matrix.tsv", sep="\\t", index_col=0))
>>> best = clean_matrix(M, max_perc_miss=0.0)
>>> best.valid_kept
"""

from collections import namedtuple
from typing import Callable, Dict, Optional

import numpy as np

from AddRowGreedy_algorithm import AddRowGreedy
from Greedy_algorithm import GreedySolver
from presence_matrix import PresenceMatrix, missing_mask

# ---------------------------------------------------------------------------
# Common return type  ➜  rows, cols, valid cells kept
# ---------------------------------------------------------------------------
Solution = namedtuple("Solution", ["rows", "cols", "valid_kept"])

# ---------------------------------------------------------------------------
# Helper to count valid cells under a mask pair
# ---------------------------------------------------------------------------

def _as_presence(matrix) -> PresenceMatrix:
    """Wrap any matrix-like object (no copy if already a PresenceMatrix)."""
    if isinstance(matrix, PresenceMatrix):
        return matrix
    return PresenceMatrix(missing_mask(matrix))


def _solution(M: PresenceMatrix, rows: np.ndarray, cols: np.ndarray) -> Solution:
    return Solution(rows, cols, M.num_valid_kept(rows, cols))

# ---------------------------------------------------------------------------
# Threshold greedy adapter
# ---------------------------------------------------------------------------

def wrap_greedy(matrix, *, max_perc_miss: float = 0.0, min_rows: int = 0, min_cols: int = 0) -> Solution:
    M = _as_presence(matrix)
    rows, cols = GreedySolver(M, max_perc_miss, int(min_rows), int(min_cols)).solve()
    return _solution(M, rows, cols)

# ---------------------------------------------------------------------------
# Add-row greedy adapter (zero missing only)
# ---------------------------------------------------------------------------

def wrap_add_row(matrix, *, min_rows: int = 0, min_cols: int = 0) -> Solution:
    M = _as_presence(matrix)
    rows, cols = AddRowGreedy(M, int(min_rows), int(min_cols)).solve()
    return _solution(M, rows, cols)

# ---------------------------------------------------------------------------
# Aggregator
# ---------------------------------------------------------------------------

def pick_best(
    greedy: Solution,
    add_row: Optional[Solution],
    max_perc_miss: float,
    min_rows: int = 0,
    min_cols: int = 0,
) -> Solution:
    """Choose between the two solver results.

    The add-row result only counts for a zero budget, and only when it keeps
    strictly more valid cells while meeting the row/column floors.
    """
    if add_row is None or max_perc_miss != 0.0:
        return greedy
    fits = add_row.rows.sum() >= min_rows and add_row.cols.sum() >= min_cols
    if fits and add_row.valid_kept > greedy.valid_kept:
        return add_row
    return greedy


def clean_matrix(matrix, max_perc_miss: float, min_rows: int = 0, min_cols: int = 0) -> Solution:
    """Best keep-masks for *matrix* under the missing budget.

    The threshold greedy always runs.  With a zero budget the add-row greedy
    runs as well and the two are compared with :func:`pick_best`.
    """
    M = _as_presence(matrix)
    if not 0.0 <= max_perc_miss <= 1.0:
        raise ValueError("max_perc_miss must be between [0,1].")
    if min_rows > M.num_rows() or min_cols > M.num_cols():
        raise ValueError(
            f"minimum size ({min_rows} x {min_cols}) exceeds the matrix ({M.num_rows()} x {M.num_cols()})"
        )

    greedy = wrap_greedy(M, max_perc_miss=max_perc_miss, min_rows=min_rows, min_cols=min_cols)
    alt = None
    if max_perc_miss == 0.0:
        alt = wrap_add_row(M, min_rows=min_rows, min_cols=min_cols)
    return pick_best(greedy, alt, max_perc_miss, min_rows, min_cols)

# ---------------------------------------------------------------------------
# Registry users can import in one line
# ---------------------------------------------------------------------------
ALL_SOLVERS: Dict[str, Callable[..., Solution]] = {
    "Greedy": wrap_greedy,
    "Add-row greedy": wrap_add_row,
}
