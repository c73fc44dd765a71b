# Docstring for payroll_merge/engines/bank_export module
"""
bank_export.py

Turn split buckets into bank payment tables.

Each bucket holds rows for a single bank. The bank name selects the output
layout through a registry:

- BANAMEX: wire layout with account type (Tarjeta/Cheque), amount, payee name,
  a 1-based reference number and the payroll period label.
- BANORTE: wire layout with employee number, fixed receiving bank "072" and
  fixed account type "01".
- any other bank: the merged columns, unchanged.

New banks are added with the `register_bank_layout` decorator; the dispatch in
`export_bucket` never changes.

Public API
----------
- PayrollPeriod, payroll_period(today) -> PayrollPeriod
- banamex_account_type(account) -> str
- BankLayout, BANK_LAYOUTS, register_bank_layout(bank, columns)
- get_bank_layout(bank) -> BankLayout | None
- ExportContext, BankExport
- build_filename(labels, today, layout=None) -> str
- export_bucket(bucket, labels, context) -> BankExport | None
- export_tree(tree, context) -> list[BankExport]
"""

from __future__ import annotations

import re
import warnings
from dataclasses import dataclass
from datetime import date
from typing import Any, Callable, Optional, Sequence

import pandas as pd

from ..config import (
    BANK_LAYOUT_CONFIG,
    EXCEL_EXTENSION,
    FIRST_HALF_LAST_DAY,
    MONTH_ABBREVIATIONS,
)
from ..core.normalizers import account_digits, blank_column, ensure_columns, first_present, is_blank
from .split import iter_buckets


BANAMEX_COLUMNS = (
    "Tipo de Cuenta",
    "Cuenta",
    "Importe",
    "Nombre/Razón Social",
    "Ref. Num.",
    "Ref. AlfN.",
)

BANORTE_COLUMNS = (
    "NO. EMPLEADO",
    "NOMBRE",
    "IMPORTE",
    "NO. BANCO RECEPTOR",
    "TIPO DE CUENTA",
    "CUENTA",
)

PAYEE_NAME_COLUMNS = ("NOMBRE", "BENEFICIARIO")

# Characters Windows and POSIX do not accept inside a file name
_UNSAFE_FILENAME_CHARS = re.compile(r"[\\/:*?\"<>|]+")


# --- Payroll period ------------------------------------------------------------

@dataclass(frozen=True)
class PayrollPeriod:
    quincena: str
    mes: str

    @property
    def display(self) -> str:
        return f"{self.quincena} Nomina de {self.mes}"


def payroll_period(today: date) -> PayrollPeriod:
    """
    Payroll period for a date: days 1-15 are the first half ("1a"), the rest
    the second half ("2a").

    Example: date(2025, 1, 10) -> "1a Nomina de Ene"
    """
    quincena = "1a" if today.day <= FIRST_HALF_LAST_DAY else "2a"
    return PayrollPeriod(quincena=quincena, mes=MONTH_ABBREVIATIONS[today.month - 1])


def banamex_account_type(account: Any) -> str:
    """Exactly 16 digits (separators ignored) is a card; anything else a check account."""
    digits = account_digits(account)
    if len(digits) == BANK_LAYOUT_CONFIG.banamex_card_digits:
        return BANK_LAYOUT_CONFIG.banamex_card_label
    return BANK_LAYOUT_CONFIG.banamex_check_label


# --- Registry ------------------------------------------------------------------

@dataclass(frozen=True)
class ExportContext:
    """Values shared by every bucket of one export run."""

    period_label: str
    amount_column: str
    merged_columns: tuple[str, ...]
    today: date

    @classmethod
    def for_policy(cls, policy, today: date) -> "ExportContext":
        return cls(
            period_label=payroll_period(today).display,
            amount_column=policy.amount_column,
            merged_columns=tuple(policy.merged_columns),
            today=today,
        )


@dataclass(frozen=True)
class BankLayout:
    bank: str
    columns: tuple[str, ...]
    build: Callable[[pd.DataFrame, ExportContext], pd.DataFrame]


BANK_LAYOUTS: dict[str, BankLayout] = {}


def _bank_key(bank: Any) -> str:
    return "" if is_blank(bank) else str(bank).strip().upper()


def register_bank_layout(bank: str, columns: Sequence[str]):
    """Decorator registering `func(bucket, context) -> DataFrame` for a bank."""

    def decorator(func):
        key = _bank_key(bank)
        BANK_LAYOUTS[key] = BankLayout(bank=key, columns=tuple(columns), build=func)
        return func

    return decorator


def get_bank_layout(bank: Any) -> Optional[BankLayout]:
    return BANK_LAYOUTS.get(_bank_key(bank))


def _amounts(bucket: pd.DataFrame, column: str) -> pd.Series:
    return blank_column(bucket, column).map(lambda value: 0 if is_blank(value) else value)


@register_bank_layout("BANAMEX", BANAMEX_COLUMNS)
def build_banamex_rows(bucket: pd.DataFrame, context: ExportContext) -> pd.DataFrame:
    accounts = blank_column(bucket, "CUENTA")
    data = {
        "Tipo de Cuenta": accounts.map(banamex_account_type),
        "Cuenta": accounts,
        "Importe": _amounts(bucket, context.amount_column),
        "Nombre/Razón Social": first_present(bucket, PAYEE_NAME_COLUMNS),
        "Ref. Num.": list(range(1, len(bucket) + 1)),
        "Ref. AlfN.": context.period_label,
    }
    return pd.DataFrame(data, index=bucket.index, columns=list(BANAMEX_COLUMNS))


@register_bank_layout("BANORTE", BANORTE_COLUMNS)
def build_banorte_rows(bucket: pd.DataFrame, context: ExportContext) -> pd.DataFrame:
    data = {
        "NO. EMPLEADO": blank_column(bucket, "NE"),
        "NOMBRE": first_present(bucket, PAYEE_NAME_COLUMNS),
        "IMPORTE": _amounts(bucket, context.amount_column),
        "NO. BANCO RECEPTOR": BANK_LAYOUT_CONFIG.banorte_receiving_bank,
        "TIPO DE CUENTA": BANK_LAYOUT_CONFIG.banorte_account_type,
        "CUENTA": blank_column(bucket, "CUENTA"),
    }
    return pd.DataFrame(data, index=bucket.index, columns=list(BANORTE_COLUMNS))


def build_generic_rows(bucket: pd.DataFrame, context: ExportContext) -> pd.DataFrame:
    columns = list(context.merged_columns)
    return ensure_columns(bucket, columns)[columns]


# --- Export --------------------------------------------------------------------

@dataclass(frozen=True, eq=False)
class BankExport:
    """One payment file: rows in header order plus the file name."""

    bank: str
    labels: tuple[str, ...]
    rows: pd.DataFrame
    columns: tuple[str, ...]
    filename: str


def _safe_filename_part(text: str) -> str:
    """Replace path separators and reserved characters: NOMINA 1/2 -> NOMINA 1-2."""
    return _UNSAFE_FILENAME_CHARS.sub("-", str(text)).strip()


def build_filename(
    labels: Sequence[str],
    today: date,
    layout: Optional[BankLayout] = None,
) -> str:
    """
    File name for a bucket.

    labels are the bucket coordinates ending with the bank:
      - registered bank: BANAMEX_<groups>_<YYYYMMDD>.xlsx
      - other banks:     <groups>_<BANK>_<YYYYMMDD>.xlsx
    """
    *groups, bank = labels
    stamp = today.strftime("%Y%m%d")
    if layout is not None:
        parts = [layout.bank, *groups, stamp]
    else:
        parts = [*groups, bank, stamp]
    return f"{'_'.join(_safe_filename_part(part) for part in parts)}.{EXCEL_EXTENSION}"


def export_bucket(
    bucket: Optional[pd.DataFrame],
    labels: Sequence[str],
    context: ExportContext,
) -> Optional[BankExport]:
    """
    Transform one bank bucket into its payment table.

    Returns None (with a warning) when the bucket is missing or empty.
    """
    labels = tuple(labels)
    if bucket is None or bucket.empty:
        warnings.warn(f"No hay datos para este archivo: {'/'.join(labels)}", stacklevel=2)
        return None

    bank = labels[-1]
    layout = get_bank_layout(bank)
    bucket = bucket.reset_index(drop=True)
    if layout is not None:
        rows = layout.build(bucket, context)
        columns = layout.columns
    else:
        rows = build_generic_rows(bucket, context)
        columns = context.merged_columns

    return BankExport(
        bank=bank,
        labels=labels,
        rows=rows.reset_index(drop=True),
        columns=tuple(columns),
        filename=build_filename(labels, context.today, layout),
    )


def export_tree(tree: dict, context: ExportContext) -> list[BankExport]:
    """Export every bucket of a split tree, in tree order."""
    exports = []
    for labels, bucket in iter_buckets(tree):
        export = export_bucket(bucket, labels, context)
        if export is not None:
            exports.append(export)
    return exports
