"""Keep-mask pair (rows, columns) with a tab-separated file format.

File layout – two lines, one ``1``/``0`` per row then one per column::

    1	0	1	1
    1	1	0
"""

from __future__ import annotations

from typing import List, Sequence, TextIO

import numpy as np

__all__ = ["CleanSolution"]


class CleanSolution:
    """Rows and columns to keep after cleaning."""

    def __init__(self, num_rows: int, num_cols: int):
        self.rows_to_keep = np.zeros(num_rows, dtype=bool)
        self.cols_to_keep = np.zeros(num_cols, dtype=bool)

    @classmethod
    def from_masks(cls, rows_to_keep: Sequence[bool], cols_to_keep: Sequence[bool]) -> "CleanSolution":
        sol = cls(len(rows_to_keep), len(cols_to_keep))
        sol.update(rows_to_keep, cols_to_keep)
        return sol

    def update(self, rows_to_keep: Sequence[bool], cols_to_keep: Sequence[bool]) -> None:
        rows = np.asarray(rows_to_keep, dtype=bool)
        cols = np.asarray(cols_to_keep, dtype=bool)
        if rows.size != self.rows_to_keep.size:
            raise ValueError(
                f"old solution has {self.rows_to_keep.size} rows, new one has {rows.size}"
            )
        if cols.size != self.cols_to_keep.size:
            raise ValueError(
                f"old solution has {self.cols_to_keep.size} cols, new one has {cols.size}"
            )
        self.rows_to_keep = rows.copy()
        self.cols_to_keep = cols.copy()

    @property
    def num_rows_kept(self) -> int:
        return int(self.rows_to_keep.sum())

    @property
    def num_cols_kept(self) -> int:
        return int(self.cols_to_keep.sum())

    # ------------------------------------------------------------------
    #  file I/O
    # ------------------------------------------------------------------
    def write(self, f: TextIO) -> None:
        """Write the two mask lines to an open text stream."""
        f.write("\t".join("1" if r else "0" for r in self.rows_to_keep) + "\n")
        f.write("\t".join("1" if c else "0" for c in self.cols_to_keep) + "\n")

    def write_to_file(self, file_name: str) -> None:
        with open(file_name, "w") as f:
            self.write(f)

    def read_from_file(self, file_name: str) -> None:
        with open(file_name, "r") as f:
            lines = f.read().splitlines()
        if len(lines) < 2:
            raise ValueError(f"solution file {file_name} needs a row line and a column line")
        rows = _parse_mask(lines[0], file_name)
        cols = _parse_mask(lines[1], file_name)
        if len(rows) != self.rows_to_keep.size:
            raise ValueError(
                f"read {len(rows)} rows from {file_name}, expected {self.rows_to_keep.size}"
            )
        if len(cols) != self.cols_to_keep.size:
            raise ValueError(
                f"read {len(cols)} cols from {file_name}, expected {self.cols_to_keep.size}"
            )
        self.update(rows, cols)

    def __repr__(self) -> str:
        return f"CleanSolution({self.num_rows_kept} rows × {self.num_cols_kept} cols kept)"


def _parse_mask(line: str, file_name: str) -> List[bool]:
    out: List[bool] = []
    if not line:
        # nothing kept on this axis
        return out
    for token in line.split("\t"):
        if token == "1":
            out.append(True)
        elif token == "0":
            out.append(False)
        else:
            raise ValueError(f"unknown value in solution file {token!r} in {file_name}")
    return out
