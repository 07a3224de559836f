import csv
import io
from typing import Any, Dict, Iterable, Sequence

import numpy as np
import pandas as pd

from presence_matrix import PresenceMatrix

EXCEL_SUFFIXES = (".xlsx", ".xls")


def read_table(data: bytes, name: str, sep: str = "\t") -> pd.DataFrame:
    """Uploaded bytes → string DataFrame, first column as row labels.

    Empty cells come back as NaN for Excel and delimited text alike; no other
    token is converted, so the NA symbol is left to the caller.
    """
    buf = io.BytesIO(data)
    if name.lower().endswith(EXCEL_SUFFIXES):
        df = pd.read_excel(buf, index_col=0, dtype=str, keep_default_na=False, na_values=[""])
    else:
        df = pd.read_csv(buf, sep=sep, index_col=0, dtype=str, keep_default_na=False, na_values=[""])
    df.columns = df.columns.astype(str)
    df.index = df.index.astype(str)
    return df


def _write_lines(file_path: str, frames: Iterable[pd.DataFrame]) -> None:
    with open(file_path, "w") as f:
        for frame in frames:
            for values in frame.itertuples(index=False, name=None):
                f.write("\t".join(values) + "\n")


class MatrixParser:
    """Tab-delimited data file with header rows/columns and an NA symbol."""

    def __init__(self, na_symbol: str, num_header_rows: int = 1, num_header_cols: int = 1):
        self.na_symbol = na_symbol
        self.num_header_rows = int(num_header_rows)
        self.num_header_cols = int(num_header_cols)
        self.header_rows = pd.DataFrame()
        self.header_cols = pd.DataFrame()
        self.data = pd.DataFrame()

    def parse_file(self, file_path: str) -> pd.DataFrame:
        """Read *file_path*; returns the data block (strings, headers stripped)."""
        raw = pd.read_csv(
            file_path,
            sep="\t",
            header=None,
            dtype=str,
            na_filter=False,
            quoting=csv.QUOTE_NONE,
            skip_blank_lines=True,
        )
        raw = raw.apply(lambda col: col.str.strip(" "))

        n_rows, n_cols = raw.shape
        if n_rows < self.num_header_rows or n_cols < self.num_header_cols:
            raise ValueError(
                f"{file_path} has {n_rows}×{n_cols} cells, fewer than the "
                f"{self.num_header_rows} header rows / {self.num_header_cols} header cols"
            )

        hr, hc = self.num_header_rows, self.num_header_cols
        self.header_rows = raw.iloc[:hr, :].reset_index(drop=True)
        self.header_cols = raw.iloc[hr:, :hc].reset_index(drop=True)
        self.data = raw.iloc[hr:, hc:].reset_index(drop=True)
        self.data.columns = range(self.data.shape[1])
        return self.data

    def to_presence_matrix(self) -> PresenceMatrix:
        """Cells equal to the NA symbol are missing."""
        return PresenceMatrix(self.data.to_numpy(dtype=str) == self.na_symbol)

    def _labelled(self, data: pd.DataFrame) -> pd.DataFrame:
        # header columns + data block, columns numbered like the header rows
        return pd.concat([self.header_cols, data], axis=1, ignore_index=True)

    def write(self, file_path: str, rows_to_keep: Sequence[bool], cols_to_keep: Sequence[bool]) -> None:
        """Write header rows and kept data rows, restricted to kept data columns."""
        rows = np.asarray(rows_to_keep, dtype=bool)
        cols = np.asarray(cols_to_keep, dtype=bool)
        if rows.size != self.data.shape[0]:
            raise ValueError(
                f"size of rows_to_keep ({rows.size}) does not match the data rows ({self.data.shape[0]})"
            )
        if cols.size != self.data.shape[1]:
            raise ValueError(
                f"size of cols_to_keep ({cols.size}) does not match the data cols ({self.data.shape[1]})"
            )

        hc = self.num_header_cols
        col_keep = np.concatenate([np.ones(hc, dtype=bool), cols])
        top = self.header_rows.loc[:, col_keep]
        body = self._labelled(self.data).loc[rows, col_keep]
        _write_lines(file_path, (top, body))

    def write_binary(self, file_path: str) -> None:
        """Same layout as the input, data cells replaced by 1 (present) / 0 (missing)."""
        present = ~self.to_presence_matrix().missing
        bits = pd.DataFrame(np.where(present, "1", "0"))
        _write_lines(file_path, (self.header_rows, self._labelled(bits)))

    def write_transpose(self, file_path: str) -> None:
        """Whole table, headers included, with rows and columns swapped."""
        full = pd.concat([self.header_rows, self._labelled(self.data)], ignore_index=True)
        _write_lines(file_path, (full.T,))

    def get_metadata(self) -> Dict[str, Any]:
        return {
            "na_symbol": self.na_symbol,
            "num_header_rows": self.num_header_rows,
            "num_header_cols": self.num_header_cols,
            "num_data_rows": int(self.data.shape[0]),
            "num_data_cols": int(self.data.shape[1]),
        }
