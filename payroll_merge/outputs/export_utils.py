# Docstring for payroll_merge/outputs/export_utils module
"""
export_utils.py

Excel writers for the reconciliation outputs.

Design goals
------------
- Low friction: one entrypoint per output (roster, summary workbook, bank
  files) on top of a single-sheet and a multi-sheet writer.
- Safe output: parent directories are created before writing.
- Consistent engine: always openpyxl for .xlsx output.
- Readable files: columns are widened to fit their header (at least 15
  characters, 20 for registered bank layouts).
- Nothing to write is an error: an empty table raises EmptyResultError and no
  file is produced.

Public API
----------
- dated_filename(prefix, today) -> str
- write_df_excel(df, output_path=None, *, columns=None, out_dir=REPORTS_OUTPUTS_DIR,
  filename_prefix="export", sheet_name="Datos", today=None, min_width=15) -> Path
- write_multi_sheet_excel(sheets, output_path, *, index=False) -> Path
- write_summary_workbook(result, out_dir, today) -> Path
- write_merged_roster(result, out_dir, today) -> Path
- write_no_bank_roster(result, out_dir, today) -> Path
- write_bank_export(export, out_dir) -> Path
- write_split_exports(exports, out_dir) -> list[Path]
"""

from __future__ import annotations

from datetime import date
from pathlib import Path
from typing import Iterable, Optional, Sequence

import pandas as pd
from openpyxl.utils import get_column_letter

from ..config import DEFAULT_SHEET_NAME, EXCEL_EXTENSION, REPORTS_OUTPUTS_DIR
from ..engines.bank_export import BankExport, get_bank_layout
from ..engines.reconcile import ReconcileResult
from ..errors import EmptyResultError


EXCEL_SHEETNAME_LIMIT = 31
MIN_COLUMN_WIDTH = 15
BANK_COLUMN_WIDTH = 20

SUMMARY_SHEETS = ("Altas", "Bajas", "Final")


def _ensure_parent_dir(path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)


def dated_filename(prefix: str, today: date) -> str:
    """Example: dated_filename("Nomina_Fusionada", date(2025, 1, 10)) -> "Nomina_Fusionada_20250110.xlsx"."""
    return f"{prefix}_{today.strftime('%Y%m%d')}.{EXCEL_EXTENSION}"


def _truncate_sheet_name(name: str) -> str:
    return name[:EXCEL_SHEETNAME_LIMIT] if len(name) > EXCEL_SHEETNAME_LIMIT else name


def _dedupe_sheet_names(names: list[str]) -> list[str]:
    """Ensure sheet names are unique after truncation by appending numeric suffixes."""
    seen: dict[str, int] = {}
    deduped: list[str] = []
    for raw_name in names:
        base = _truncate_sheet_name(raw_name)
        if base not in seen:
            seen[base] = 0
            deduped.append(base)
            continue
        seen[base] += 1
        suffix = f"_{seen[base]}"
        deduped.append(f"{base[: EXCEL_SHEETNAME_LIMIT - len(suffix)]}{suffix}")
    return deduped


def _fit_column_widths(worksheet, columns: Sequence[str], min_width: int) -> None:
    for position, column in enumerate(columns, start=1):
        letter = get_column_letter(position)
        worksheet.column_dimensions[letter].width = max(len(str(column)), min_width)


def _select_columns(df: pd.DataFrame, columns: Optional[Sequence[str]]) -> pd.DataFrame:
    if columns is None:
        return df
    out = df.copy()
    for col in columns:
        if col not in out.columns:
            out[col] = ""
    return out[list(columns)]


def write_df_excel(
    df: pd.DataFrame,
    output_path: Path | str | None = None,
    *,
    columns: Optional[Sequence[str]] = None,
    out_dir: Path | str = REPORTS_OUTPUTS_DIR,
    filename_prefix: str = "export",
    sheet_name: str = DEFAULT_SHEET_NAME,
    today: Optional[date] = None,
    min_width: int = MIN_COLUMN_WIDTH,
) -> Path:
    """
    Write a DataFrame to a single-sheet Excel file and return the output path.

    If output_path is None, a dated file `<prefix>_<YYYYMMDD>.xlsx` is created
    under out_dir. `columns` fixes the header order (missing columns are written
    blank).

    Raises:
        EmptyResultError: if df has no rows.
    """
    if df is None or df.empty:
        raise EmptyResultError(f"No hay datos para exportar ({filename_prefix}).")

    if output_path is None:
        output_path = Path(out_dir) / dated_filename(filename_prefix, today or date.today())
    path = Path(output_path)
    _ensure_parent_dir(path)

    data = _select_columns(df, columns)
    sheet_name = _truncate_sheet_name(sheet_name)
    with pd.ExcelWriter(path, engine="openpyxl") as writer:
        data.to_excel(writer, sheet_name=sheet_name, index=False)
        _fit_column_widths(writer.sheets[sheet_name], list(data.columns), min_width)
    return path


def write_multi_sheet_excel(
    sheets: dict[str, pd.DataFrame],
    output_path: Path | str,
    *,
    index: bool = False,
) -> Path:
    """
    Write multiple DataFrames to a single Excel workbook and return the path.

    Each dict key becomes a sheet name (truncated to Excel's 31-character limit).
    Empty frames are written with their header only.
    """
    path = Path(output_path)
    _ensure_parent_dir(path)
    sheet_names = _dedupe_sheet_names(list(sheets.keys()))
    with pd.ExcelWriter(path, engine="openpyxl") as writer:
        for name, sheet_name in zip(sheets.keys(), sheet_names):
            df = sheets[name]
            df.to_excel(writer, sheet_name=sheet_name, index=index)
            _fit_column_widths(writer.sheets[sheet_name], list(df.columns), MIN_COLUMN_WIDTH)
    return path


# --- Reconciliation outputs ----------------------------------------------------

def write_summary_workbook(result: ReconcileResult, out_dir: Path | str, today: date) -> Path:
    """Altas / Bajas / Final sheets in one workbook."""
    policy = result.policy
    path = Path(out_dir) / dated_filename(f"Resumen_{policy.name}", today)
    sheets = dict(zip(SUMMARY_SHEETS, (result.additions, result.removals, result.merged)))
    return write_multi_sheet_excel(sheets, path)


def write_merged_roster(result: ReconcileResult, out_dir: Path | str, today: date) -> Path:
    policy = result.policy
    return write_df_excel(
        result.merged,
        columns=policy.merged_columns,
        out_dir=out_dir,
        filename_prefix=policy.merged_file_prefix,
        sheet_name=policy.merged_sheet_name,
        today=today,
    )


def write_no_bank_roster(result: ReconcileResult, out_dir: Path | str, today: date) -> Path:
    """Merged rows without an account (cash payments); raises EmptyResultError if none."""
    policy = result.policy
    return write_df_excel(
        result.no_bank,
        columns=policy.merged_columns,
        out_dir=out_dir,
        filename_prefix=policy.no_bank_file_prefix,
        sheet_name=policy.no_bank_sheet_name,
        today=today,
    )


def write_bank_export(export: BankExport, out_dir: Path | str) -> Path:
    """Bank wire layouts get wider columns than the generic merged layout."""
    width = BANK_COLUMN_WIDTH if get_bank_layout(export.bank) is not None else MIN_COLUMN_WIDTH
    return write_df_excel(
        export.rows,
        Path(out_dir) / export.filename,
        columns=export.columns,
        min_width=width,
    )


def write_split_exports(exports: Iterable[BankExport], out_dir: Path | str) -> list[Path]:
    """Write one file per bucket, in split order."""
    return [write_bank_export(export, out_dir) for export in exports]
