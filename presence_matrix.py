from __future__ import annotations
"""Read-only presence/absence matrix consumed by the cleaning solvers.

A cell is either *valid* (present) or *missing*.  The solvers only need
``num_rows()``, ``num_cols()`` and ``is_missing(i, j)``; anything exposing
those three methods can be cleaned.  ``PresenceMatrix`` additionally keeps
the boolean mask as a numpy array so counters can be updated column- or
row-wise in one shot.
"""

from typing import Dict, Optional, Sequence

import numpy as np
import pandas as pd

__all__ = ["PresenceMatrix", "missing_mask"]


class PresenceMatrix:
    """Immutable R × C grid of missing flags."""

    def __init__(self, missing):
        mask = np.array(missing, dtype=bool, copy=True)
        if mask.ndim != 2:
            raise ValueError(f"presence matrix must be 2-D, got shape {mask.shape}")
        mask.setflags(write=False)
        self._missing = mask

    # ------------------------------------------------------------------
    #  constructors
    # ------------------------------------------------------------------
    @classmethod
    def from_array(cls, present) -> "PresenceMatrix":
        """Build from a truthy-means-present grid (1 = valid, 0 = missing)."""
        return cls(~np.asarray(present, dtype=bool))

    @classmethod
    def from_dataframe(cls, df: pd.DataFrame, na_symbol: Optional[str] = None) -> "PresenceMatrix":
        """NaN cells are missing; so are cells equal to *na_symbol* if given."""
        missing = df.isna().to_numpy()
        if na_symbol is not None:
            missing |= (df.astype(str).apply(lambda col: col.str.strip()) == na_symbol).to_numpy()
        return cls(missing)

    # ------------------------------------------------------------------
    #  solver contract
    # ------------------------------------------------------------------
    def num_rows(self) -> int:
        return self._missing.shape[0]

    def num_cols(self) -> int:
        return self._missing.shape[1]

    def is_missing(self, i: int, j: int) -> bool:
        return bool(self._missing[i, j])

    @property
    def missing(self) -> np.ndarray:
        return self._missing

    @property
    def shape(self):
        return self._missing.shape

    # ------------------------------------------------------------------
    #  counting
    # ------------------------------------------------------------------
    def num_valid(self) -> int:
        return int((~self._missing).sum())

    def num_valid_kept(self, rows_to_keep: Sequence[bool], cols_to_keep: Sequence[bool]) -> int:
        """Valid cells inside the sub-matrix picked by the two keep-masks."""
        rows = np.asarray(rows_to_keep, dtype=bool)
        cols = np.asarray(cols_to_keep, dtype=bool)
        if rows.shape != (self.num_rows(),):
            raise ValueError(
                f"rows_to_keep has {rows.size} entries, expected {self.num_rows()}"
            )
        if cols.shape != (self.num_cols(),):
            raise ValueError(
                f"cols_to_keep has {cols.size} entries, expected {self.num_cols()}"
            )
        return int((~self._missing[np.ix_(rows, cols)]).sum())

    def missing_stats(self) -> Dict[str, float]:
        """Percent of missing cells overall and per row / column (min and max)."""
        r, c = self.shape
        if r == 0 or c == 0:
            return {k: 0.0 for k in ("total", "min_row", "max_row", "min_col", "max_col")}
        per_row = self._missing.mean(axis=1) * 100
        per_col = self._missing.mean(axis=0) * 100
        return {
            "total": float(self._missing.mean() * 100),
            "min_row": float(per_row.min()),
            "max_row": float(per_row.max()),
            "min_col": float(per_col.min()),
            "max_col": float(per_col.max()),
        }

    def __repr__(self) -> str:
        r, c = self.shape
        return f"PresenceMatrix({r}×{c}, {self.num_valid()} valid)"


def missing_mask(matrix) -> np.ndarray:
    """Boolean missing-mask for any object honouring the matrix contract."""
    if isinstance(matrix, PresenceMatrix):
        return matrix.missing
    n, m = matrix.num_rows(), matrix.num_cols()
    mask = np.zeros((n, m), dtype=bool)
    for i in range(n):
        for j in range(m):
            mask[i, j] = matrix.is_missing(i, j)
    return mask
