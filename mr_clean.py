"""MrClean command-line driver
===========================
Clean a tab-delimited data file so every kept row and column has at most
``max_missing`` missing cells:
```
python mr_clean.py data.tsv 0.1 NA out/ --min-rows 20
```
Writes ``out/<name>_gamma_0.10_cleaned.tsv`` (the kept sub-table),
``out/<name>_gamma_0.10_cleaned.sol`` (row / column keep-masks) and appends a
line of run statistics to the summary CSV.  ``--binary`` and ``--transpose``
add a 0/1 presence table and a transposed copy of the input.
"""

from __future__ import annotations

import argparse
import os
import pathlib
import sys
import time
from typing import List

from adapter import clean_matrix
from clean_solution import CleanSolution
from clean_utils import CleaningError
from matrix_parser import MatrixParser


def output_prefix(data_file: str, out_path: str, max_perc_miss: float) -> str:
    stem = pathlib.Path(data_file).stem
    return f"{out_path}{stem}_gamma_{max_perc_miss:.2f}"


def write_stats_to_file(
    file_name: str,
    data_file: str,
    max_perc_miss: float,
    elapsed: float,
    num_valid_kept: int,
    num_rows_kept: int,
    num_cols_kept: int,
) -> None:
    with open(file_name, "a") as f:
        f.write(
            f"{data_file},{max_perc_miss:f},{elapsed:f},"
            f"{num_valid_kept},{num_rows_kept},{num_cols_kept}\n"
        )


def _parse_args(argv: List[str] | None) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Remove sparse rows/columns from a tab-delimited data file")
    p.add_argument("data_file", help="tab-delimited input file")
    p.add_argument("max_missing", type=float, help="maximum fraction of missing cells per row/column [0,1]")
    p.add_argument("na_symbol", help="token marking a missing cell, e.g. NA")
    p.add_argument("output_path", help="prefix (usually a directory ending in '/') for output files")
    p.add_argument("--header-rows", type=int, default=1, help="number of header rows")
    p.add_argument("--header-cols", type=int, default=1, help="number of header columns")
    p.add_argument("--min-rows", type=int, default=0, help="never keep fewer rows than this")
    p.add_argument("--min-cols", type=int, default=0, help="never keep fewer columns than this")
    p.add_argument("--summary", default="Greedy_summary.csv", help="CSV file run statistics are appended to")
    p.add_argument("--binary", action="store_true", help="also write the input as a 0/1 presence table")
    p.add_argument("--transpose", action="store_true", help="also write the input with rows and columns swapped")
    return p.parse_args(argv)


def main(argv: List[str] | None = None) -> None:
    args = _parse_args(argv)

    if not 0.0 <= args.max_missing <= 1.0:
        raise SystemExit("Error: max_missing must be between [0,1].")

    start = time.process_time()

    parser = MatrixParser(args.na_symbol, args.header_rows, args.header_cols)
    parser.parse_file(args.data_file)
    M = parser.to_presence_matrix()
    print(f"Loaded {args.data_file} with shape {M.shape}", file=sys.stderr)

    stats = M.missing_stats()
    print(
        f"missing: total {stats['total']:.2f}%  "
        f"row {stats['min_row']:.2f}–{stats['max_row']:.2f}%  "
        f"col {stats['min_col']:.2f}–{stats['max_col']:.2f}%",
        file=sys.stderr,
    )

    if args.min_rows > M.num_rows() or args.min_cols > M.num_cols():
        raise SystemExit(
            f"Error: --min-rows/--min-cols ({args.min_rows} x {args.min_cols}) "
            f"exceed the data ({M.num_rows()} x {M.num_cols()})"
        )

    try:
        best = clean_matrix(M, args.max_missing, args.min_rows, args.min_cols)
    except CleaningError as e:
        raise SystemExit(f"Error: {e}")

    sol = CleanSolution.from_masks(best.rows, best.cols)
    elapsed = time.process_time() - start
    print(
        f"kept {sol.num_rows_kept}×{sol.num_cols_kept}  valid cells={best.valid_kept}  "
        f"({elapsed:.3f}s)",
        file=sys.stderr,
    )

    prefix = output_prefix(args.data_file, args.output_path, args.max_missing)
    out_dir = os.path.dirname(prefix)
    if out_dir:
        os.makedirs(out_dir, exist_ok=True)
    parser.write(prefix + "_cleaned.tsv", sol.rows_to_keep, sol.cols_to_keep)
    sol.write_to_file(prefix + "_cleaned.sol")
    if args.binary:
        parser.write_binary(prefix + "_binary.tsv")
    if args.transpose:
        parser.write_transpose(prefix + "_transposed.tsv")
    write_stats_to_file(
        args.summary,
        args.data_file,
        args.max_missing,
        elapsed,
        best.valid_kept,
        sol.num_rows_kept,
        sol.num_cols_kept,
    )


if __name__ == "__main__":
    main()
