# Docstring for payroll_merge/visualization/split_visualization module
"""
split_visualization.py

Helpers for summarizing and visualizing the split tree: how many rows and how
much money goes into each bank file.
"""

from __future__ import annotations

from typing import Any, Tuple

import matplotlib.pyplot as plt
import pandas as pd

from ..core.normalizers import blank_column, to_amount
from ..core.validators import validate_required_columns
from ..engines.split import iter_buckets


SUMMARY_COLUMNS = ["bucket", "bank", "count", "total"]


def format_currency(amount: Any) -> str:
    """MXN style: 1234.5 -> "$1,234.50"; negatives as "-$1,234.50"."""
    value = to_amount(amount)
    sign = "-" if value < 0 else ""
    return f"{sign}${abs(value):,.2f}"


def build_split_summary(tree: dict, amount_column: str) -> pd.DataFrame:
    """
    One row per bank bucket, in split order.

    Columns:
      - bucket: group labels joined with " / " (bank included)
      - bank: last label
      - count: rows in the bucket
      - total: sum of amount_column (blanks and non-numeric cells count as 0)
    """
    rows = []
    for labels, bucket in iter_buckets(tree or {}):
        amounts = blank_column(bucket, amount_column).map(to_amount)
        rows.append(
            {
                "bucket": " / ".join(labels),
                "bank": labels[-1],
                "count": int(len(bucket)),
                "total": round(float(amounts.sum()), 2),
            }
        )
    return pd.DataFrame(rows, columns=SUMMARY_COLUMNS)


def plot_split_summary(summary_df: pd.DataFrame) -> Tuple[plt.Figure, plt.Axes]:
    """
    Plot the total amount per bucket as horizontal bars, labelled with the
    formatted total and the row count.
    """

    validate_required_columns(summary_df, SUMMARY_COLUMNS, "Split summary")

    fig, ax = plt.subplots(figsize=(9, max(3, 0.5 * len(summary_df) + 1)))
    if summary_df.empty:
        ax.text(0.5, 0.5, "No data available", ha="center", va="center")
        ax.set_axis_off()
        return fig, ax

    buckets = summary_df["bucket"].tolist()
    totals = summary_df["total"].astype(float)
    counts = summary_df["count"].astype(int)

    positions = range(len(buckets))
    ax.barh(positions, totals, color="#4C78A8")
    ax.set_yticks(list(positions))
    ax.set_yticklabels(buckets)
    ax.invert_yaxis()
    ax.set_xlabel("Importe total")
    ax.set_title("Totales por archivo bancario")

    max_total = float(totals.max() if len(totals) else 0)
    ax.set_xlim(0, max(1.0, max_total * 1.3))

    for idx, (total, count) in enumerate(zip(totals, counts)):
        ax.text(total, idx, f" {format_currency(total)} ({count})", va="center")

    return fig, ax
