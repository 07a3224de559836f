"""MrClean Streamlit GUI
=======================
Dashboard that lets you
• upload a CSV/TSV *or* Excel table,
• pick the missing-value token, the missing budget and minimum sizes,
• compare the threshold greedy and the add-row greedy side by side,
• inspect missingness heatmaps before / after and download the result.

Run with:
    streamlit run MrClean_app.py
"""
from __future__ import annotations

import io
from typing import Dict

import matplotlib.pyplot as plt
import numpy as np
import pandas as pd
import seaborn as sns
import streamlit as st

from adapter import ALL_SOLVERS, Solution, pick_best
from clean_solution import CleanSolution
from clean_utils import CleaningError
from matrix_parser import read_table
from presence_matrix import PresenceMatrix

# ────────────────────────────────────────────────────────────────────────────────
#  Utilities
# ────────────────────────────────────────────────────────────────────────────────


@st.cache_data
def _load_table(data: bytes, name: str, sep: str) -> pd.DataFrame:
    return read_table(data, name, sep)


def _heat(M: PresenceMatrix, rows: np.ndarray, cols: np.ndarray, title: str):
    fig, ax = plt.subplots(figsize=(5, 4))
    sns.heatmap(
        (~M.missing[np.ix_(rows, cols)]).astype(int),
        cmap="Greys",
        vmin=0,
        vmax=1,
        cbar=False,
        ax=ax,
        xticklabels=False,
        yticklabels=False,
    )
    ax.set_title(title)
    st.pyplot(fig)


def _solution_text(sol: CleanSolution) -> bytes:
    buf = io.StringIO()
    sol.write(buf)
    return buf.getvalue().encode()


# ────────────────────────────────────────────────────────────────────────────────
#  Main application
# ────────────────────────────────────────────────────────────────────────────────

def main():
    st.set_page_config(
        page_title="MrClean", page_icon="🧹", layout="wide", initial_sidebar_state="auto"
    )
    st.title("🧹 MrClean – missing-data row/column selection")

    # 1️⃣ Dataset ----------------------------------------------------------------
    st.sidebar.header("1️⃣ Dataset")
    up = st.sidebar.file_uploader("CSV/TSV or Excel", type=["csv", "tsv", "txt", "xlsx"])
    sep = st.sidebar.radio("Delimiter (CSV/TSV)", [",", "\t"], horizontal=True)
    na_symbol = st.sidebar.text_input("Missing-value token", value="NA")
    if up is None:
        st.info("⬅️ Upload a dataset")
        st.stop()

    df = _load_table(up.getvalue(), up.name, sep)
    M = PresenceMatrix.from_dataframe(df, na_symbol=na_symbol)
    st.write("### Preview", df.head())
    stats = M.missing_stats()
    st.markdown(
        f"Shape **{M.num_rows()}×{M.num_cols()}** · missing **{stats['total']:.1f}%** "
        f"(rows {stats['min_row']:.1f}–{stats['max_row']:.1f}%, "
        f"cols {stats['min_col']:.1f}–{stats['max_col']:.1f}%)"
    )

    # 2️⃣ Budget -----------------------------------------------------------------
    st.sidebar.header("2️⃣ Budget")
    theta = st.sidebar.slider("Max missing fraction", 0.0, 1.0, 0.0, 0.01)
    min_rows = st.sidebar.number_input("Min rows", 0, M.num_rows(), 0)
    min_cols = st.sidebar.number_input("Min cols", 0, M.num_cols(), 0)

    if not st.sidebar.button("🚀 Run"):
        st.stop()

    # Run solvers ---------------------------------------------------------------
    results: Dict[str, Solution] = {}
    for n, fn in ALL_SOLVERS.items():
        if n != "Greedy" and theta > 0.0:
            continue
        kw = {"min_rows": int(min_rows), "min_cols": int(min_cols)}
        if n == "Greedy":
            kw["max_perc_miss"] = theta
        with st.spinner(f"Running {n} …"):
            try:
                results[n] = fn(M, **kw)
            except CleaningError as e:
                st.error(f"{n} failed: {e}")

    if "Greedy" not in results:
        st.stop()
    best = pick_best(
        results["Greedy"], results.get("Add-row greedy"), theta, int(min_rows), int(min_cols)
    )

    #  📊  Tabs ------------------------------------------------------------------
    tab1, tab2 = st.tabs(["Comparison", "Result"])

    with tab1:
        st.dataframe(
            pd.DataFrame(
                {
                    n: {
                        "rows": int(s.rows.sum()),
                        "cols": int(s.cols.sum()),
                        "valid cells": s.valid_kept,
                    }
                    for n, s in results.items()
                }
            )
        )

    with tab2:
        sol = CleanSolution.from_masks(best.rows, best.cols)
        st.markdown(
            f"Kept **{sol.num_rows_kept}×{sol.num_cols_kept}**, "
            f"**{best.valid_kept}** valid cells of {M.num_valid()}"
        )
        left, right = st.columns(2)
        with left:
            _heat(M, np.ones(M.num_rows(), bool), np.ones(M.num_cols(), bool), "before")
        with right:
            _heat(M, sol.rows_to_keep, sol.cols_to_keep, "after")
        cleaned = df.loc[sol.rows_to_keep, sol.cols_to_keep]
        st.write(cleaned)
        st.download_button(
            "Download cleaned table",
            data=cleaned.to_csv(sep="\t").encode(),
            file_name="cleaned.tsv",
            mime="text/tab-separated-values",
        )
        st.download_button(
            "Download solution masks",
            data=_solution_text(sol),
            file_name="cleaned.sol",
            mime="text/plain",
        )

    st.sidebar.markdown("---")
    st.sidebar.caption("MrClean (Streamlit edition)")


if __name__ == "__main__":
    main()
