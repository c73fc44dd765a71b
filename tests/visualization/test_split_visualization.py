import matplotlib

matplotlib.use("Agg")

import pandas as pd
import pytest

from payroll_merge.visualization.split_visualization import (
    build_split_summary,
    format_currency,
    plot_split_summary,
)


def _tree() -> dict:
    return {
        "ORDINARIA": {
            "DEPOSITO": {
                "BANAMEX": pd.DataFrame({"LIQUIDO": [100.5, "1,000", ""]}),
                "BBVA": pd.DataFrame({"LIQUIDO": [20]}),
            }
        }
    }


def test_build_split_summary_counts_and_totals() -> None:
    summary = build_split_summary(_tree(), "LIQUIDO")

    assert summary["bucket"].tolist() == ["ORDINARIA / DEPOSITO / BANAMEX", "ORDINARIA / DEPOSITO / BBVA"]
    assert summary["bank"].tolist() == ["BANAMEX", "BBVA"]
    assert summary["count"].tolist() == [3, 1]
    assert summary["total"].tolist() == pytest.approx([1100.5, 20.0])


def test_build_split_summary_empty() -> None:
    summary = build_split_summary({}, "LIQUIDO")

    assert summary.empty is True
    assert list(summary.columns) == ["bucket", "bank", "count", "total"]


def test_format_currency() -> None:
    assert format_currency(1234.5) == "$1,234.50"
    assert format_currency("") == "$0.00"
    assert format_currency(-20) == "-$20.00"


def test_plot_split_summary_placeholder_and_bars() -> None:
    fig, ax = plot_split_summary(build_split_summary({}, "LIQUIDO"))
    assert ax.texts[0].get_text() == "No data available"

    fig, ax = plot_split_summary(build_split_summary(_tree(), "LIQUIDO"))
    assert len(ax.patches) == 2


def test_plot_split_summary_missing_columns() -> None:
    with pytest.raises(ValueError, match="Missing required columns"):
        plot_split_summary(pd.DataFrame({"bucket": ["x"]}))
