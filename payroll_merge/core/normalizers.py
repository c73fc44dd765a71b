# Docstring for payroll_merge/core/normalizers module
"""
normalizers.py

Shared normalization helpers for the reconciliation engines.

Design goals
------------
- Single source of truth for column-name canonicalization, value trimming,
  identity keys (RFC / accent-free names) and blank handling.
- Idempotent: normalizing already-normalized data returns the same data.
- Blank, never missing: every field the engines read is either a value or the
  empty string "".

Public API
----------
- normalize_records(data) -> pd.DataFrame
- normalize_column_name(name) -> str
- normalize_value(value) -> Any
- normalize_key(value) -> str
- normalize_name(value) -> str
- is_blank(value) -> bool
- blank_mask(series) -> pd.Series
- blank_column(df, column) -> pd.Series
- ensure_columns(df, columns) -> pd.DataFrame
- first_present(df, columns) -> pd.Series
- account_digits(value) -> str
- to_amount(value) -> float
"""

from __future__ import annotations

import re
import unicodedata
from collections.abc import Iterable, Mapping
from typing import Any

import pandas as pd


# Combining diacritical marks block (U+0300 - U+036F)
_COMBINING_MARKS = re.compile(r"[\u0300-\u036f]")


def is_blank(value: Any) -> bool:
    """True for None, NaN/NA and strings that are empty after trimming."""
    if value is None:
        return True
    if isinstance(value, str):
        return value.strip() == ""
    try:
        return bool(pd.isna(value))
    except (TypeError, ValueError):
        # list-like values are never blank
        return False


def normalize_column_name(name: Any) -> str:
    return str(name).strip().upper()


def normalize_value(value: Any) -> Any:
    """Trim strings, turn missing values into "", pass everything else through."""
    if isinstance(value, str):
        return value.strip()
    if is_blank(value):
        return ""
    return value


def _to_frame(data: pd.DataFrame | Iterable[Mapping[str, Any]] | None) -> pd.DataFrame:
    if data is None:
        return pd.DataFrame()
    if isinstance(data, pd.DataFrame):
        return data.copy()
    return pd.DataFrame.from_records(list(data))


def normalize_records(data: pd.DataFrame | Iterable[Mapping[str, Any]] | None) -> pd.DataFrame:
    """
    Canonicalize raw parsed rows.

    - Column names: trimmed + uppercased. When two raw columns collapse to the
      same name (e.g. "RFC" and " rfc "), the right-most one wins.
    - String values: trimmed.
    - Missing values (None/NaN, or a key absent from some rows): "".
    - Other values (numbers, dates): unchanged.

    Row count and order are preserved.
    """
    df = _to_frame(data)
    df.columns = [normalize_column_name(col) for col in df.columns]
    if df.columns.has_duplicates:
        df = df.loc[:, ~df.columns.duplicated(keep="last")].copy()

    for col in df.columns:
        df[col] = df[col].astype(object).map(normalize_value).astype(object)
    return df.reset_index(drop=True)


def normalize_key(value: Any) -> str:
    """Identity key for RFC-keyed flows: trimmed + uppercased string."""
    if is_blank(value):
        return ""
    return str(value).strip().upper()


def normalize_name(value: Any) -> str:
    """
    Identity key for name-keyed flows.

    Strips accents (NFD + drop combining marks), uppercases and trims.
    Only used for comparisons, never for display.

    Examples:
        "José Pérez " -> "JOSE PEREZ"
        "Ñuñez"       -> "NUNEZ"
    """
    if is_blank(value):
        return ""
    decomposed = unicodedata.normalize("NFD", str(value))
    return _COMBINING_MARKS.sub("", decomposed).upper().strip()


def blank_mask(series: pd.Series) -> pd.Series:
    """Boolean mask of blank entries (always bool dtype, even when empty)."""
    return series.map(is_blank).astype(bool)


def blank_column(df: pd.DataFrame, column: str) -> pd.Series:
    """Return df[column] with blanks as "", or an all-blank Series if absent."""
    if column not in df.columns:
        return pd.Series([""] * len(df), index=df.index, dtype=object)
    return df[column].astype(object).map(normalize_value).astype(object)


def ensure_columns(df: pd.DataFrame, columns: Iterable[str]) -> pd.DataFrame:
    """Copy of df with every column in `columns` present (missing ones blank)."""
    df = df.copy()
    for col in columns:
        if col not in df.columns:
            df[col] = ""
    return df


def first_present(df: pd.DataFrame, columns: Iterable[str]) -> pd.Series:
    """
    Row-wise first non-blank value among `columns` (in the given order).

    Absent columns are skipped; rows where every source is blank get "".
    """
    result = pd.Series([""] * len(df), index=df.index, dtype=object)
    for col in columns:
        if col not in df.columns:
            continue
        values = blank_column(df, col)
        fill = blank_mask(result) & ~blank_mask(values)
        result = result.where(~fill, values).astype(object)
    return result


def account_digits(value: Any) -> str:
    """Keep only the digits of an account number: '1234-5678' -> '12345678'."""
    if is_blank(value):
        return ""
    return re.sub(r"\D", "", str(value))


def to_amount(value: Any) -> float:
    """Parse an amount cell; blanks and non-numeric text count as 0."""
    if is_blank(value):
        return 0.0
    if isinstance(value, str):
        value = value.replace(",", "").replace("$", "").strip()
    amount = pd.to_numeric(value, errors="coerce")
    return 0.0 if pd.isna(amount) else float(amount)
