# Docstring for payroll_merge/load_data module
"""
load_data.py

Input loader utilities for the payroll / pension Excel exports.

Thin, predictable I/O around pandas `read_excel()`, kept apart from the
reconciliation logic. The exports often carry title rows above the real
header, so the header row is located automatically: the first row (within the
first MAX_HEADER_SEARCH_ROWS + 1 rows) that contains every required column
name is used.

Design goals
------------
- Separation of concerns: file I/O and header detection only; the engines
  receive normalized DataFrames.
- Fail loudly on unusable input: a file without a recognizable header raises
  HeaderNotFoundError instead of guessing.
- Non-blocking schema checks: missing expected columns only warn.

Public API
----------
- read_raw_sheet(path, sheet_name=0) -> pd.DataFrame
- find_header_row(raw, required_cols, max_rows=MAX_HEADER_SEARCH_ROWS) -> int
- frame_from_header(raw, header_row) -> pd.DataFrame
- load_dataset(path, kind, sheet_name=0) -> pd.DataFrame
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable

import pandas as pd

from .config import DATASETS, MAX_HEADER_SEARCH_ROWS
from .core.normalizers import is_blank, normalize_records
from .core.validators import warn_missing_columns
from .errors import HeaderNotFoundError


logger = logging.getLogger(__name__)


def read_raw_sheet(path: Path | str, sheet_name: int | str = 0) -> pd.DataFrame:
    """
    Read a sheet without assuming where the header is.

    dtype=object keeps each cell as Excel stored it (account numbers stored as
    text keep their leading zeros, amounts stay numeric).
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Excel file not found at: {path}")
    return pd.read_excel(path, sheet_name=sheet_name, header=None, dtype=object, engine="openpyxl")


def find_header_row(
    raw: pd.DataFrame,
    required_cols: Iterable[str],
    max_rows: int = MAX_HEADER_SEARCH_ROWS,
) -> int:
    """
    Return the 0-based index of the header row, or -1 if not found.

    A row qualifies when every required column name is contained in some
    non-empty cell of that row (comparison on trimmed, uppercased text).
    Rows 0..max_rows are searched.
    """
    required = [str(col).upper() for col in required_cols]
    last_row = min(len(raw) - 1, max_rows)
    for row in range(last_row + 1):
        values = [str(v).strip().upper() for v in raw.iloc[row].tolist() if not is_blank(v)]
        if all(any(req in value for value in values) for req in required):
            logger.debug("Headers found at row %d (0-indexed: %d)", row + 1, row)
            return row
    return -1


def frame_from_header(raw: pd.DataFrame, header_row: int) -> pd.DataFrame:
    """
    Rebuild a DataFrame using `header_row` as column names.

    Columns with an empty header cell and rows with no values are dropped.
    """
    header = raw.iloc[header_row].tolist()
    body = raw.iloc[header_row + 1 :].copy()
    body.columns = ["" if is_blank(name) else str(name) for name in header]
    body = body.loc[:, [name != "" for name in body.columns]]
    body = body.dropna(how="all")
    return body.reset_index(drop=True)


def load_dataset(path: Path | str, kind: str, sheet_name: int | str = 0) -> pd.DataFrame:
    """
    Load and normalize one input file.

    Args:
        path:
            Excel file to read (first sheet by default).
        kind:
            Key of config.DATASETS ("nuevo", "base", "efectivo", "quincenal",
            "base_pensiones", "modalidad").

    Returns:
        Normalized DataFrame (uppercased column names, trimmed values, blanks
        as "").

    Raises:
        FileNotFoundError: if the file does not exist.
        HeaderNotFoundError: if no header row is found within the search window.
    """
    try:
        dataset = DATASETS[kind]
    except KeyError as exc:
        raise ValueError(f"Unknown dataset kind: {kind!r}") from exc

    raw = read_raw_sheet(path, sheet_name=sheet_name)
    header_row = find_header_row(raw, dataset.required_columns)
    if header_row == -1:
        raise HeaderNotFoundError(dataset.label, dataset.required_columns, MAX_HEADER_SEARCH_ROWS)

    df = normalize_records(frame_from_header(raw, header_row))
    warn_missing_columns(df, dataset)
    return df
