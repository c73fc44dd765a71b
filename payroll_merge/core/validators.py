# Docstring for payroll_merge/core/validators module
"""
validators.py

Schema checks for normalized input datasets.

Missing expected columns are not fatal: the engines read every field with a
blank default. The checks below only surface a warning so the user knows some
outputs may come out empty.

Public API
----------
- missing_columns(df, expected_cols) -> list[str] | None
- warn_missing_columns(df, dataset) -> list[str] | None
- validate_required_columns(df, required_cols, source_name) -> None
"""

from __future__ import annotations

import warnings
from typing import Iterable

import pandas as pd

from ..config import DatasetSpec
from ..errors import MissingColumnsWarning


def missing_columns(df: pd.DataFrame, expected_cols: Iterable[str]) -> list[str] | None:
    """
    Return the expected columns absent from df, or None when nothing is missing.

    An empty dataset is not checked (returns None); emptiness is handled by the
    callers that need data.
    """
    if df is None or df.empty:
        return None
    available = set(df.columns)
    missing = [col for col in expected_cols if col not in available]
    return missing or None


def warn_missing_columns(df: pd.DataFrame, dataset: DatasetSpec) -> list[str] | None:
    """Emit a MissingColumnsWarning for `dataset` if expected columns are absent."""
    missing = missing_columns(df, dataset.expected_columns)
    if missing:
        warnings.warn(
            f"El archivo {dataset.label} no contiene todos los campos requeridos. "
            f"Campos faltantes: {', '.join(missing)}",
            MissingColumnsWarning,
            stacklevel=2,
        )
    return missing


def validate_required_columns(
    df: pd.DataFrame,
    required_cols: Iterable[str],
    source_name: str,
) -> None:
    """
    Ensure that df has at least the required columns.

    Raises:
        ValueError: if any required column is missing.
    """
    missing = [col for col in required_cols if col not in df.columns]
    if missing:
        missing_list = ", ".join(missing)
        raise ValueError(f"{source_name}: Missing required columns: {missing_list}")
