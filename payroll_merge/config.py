# Docstring for payroll_merge/config module
"""
config.py

Central configuration for the payroll and pension roster reconciliation.

This module is the single source of truth for:
- Expected columns per input file (nuevo, base, efectivo, quincenal, ...)
- Required columns used to detect the header row of each spreadsheet
- Merged / removal output schemas
- Business constants (Jardin project code, modality dictionary, bank codes)
- Split labels and default removal reasons

Column names are kept in Spanish so they match the Excel exports verbatim
(after normalization: trimmed + uppercased).

Contents
--------
1) Paths and project defaults
2) Input column sets (expected + required for header detection)
3) Output schemas (merged, removals)
4) Business rules (project split, modalities, bank layouts)

Usage
-----
    from payroll_merge.config import COL_NEW, JARDIN_PROJECT, SPLIT_CONFIG
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


# --- Base paths ----------------------------------------------------------------

# payroll_merge/ -> project root
BASE_DIR = Path(__file__).resolve().parents[1]

DATA_DIR = BASE_DIR / "data"
SAMPLE_DIR = DATA_DIR / "sample"
RAW_DATA_DIR = DATA_DIR / "raw"

REPORTS_DIR = BASE_DIR / "reports"
REPORTS_OUTPUTS_DIR = REPORTS_DIR / "outputs"
REPORTS_FIGURES_DIR = REPORTS_DIR / "figures"


# --- Input files ---------------------------------------------------------------

# Header row is searched in rows 0..MAX_HEADER_SEARCH_ROWS of the first sheet.
MAX_HEADER_SEARCH_ROWS = 20

# Nominas: new (quincenal) payroll extract
COL_NEW = [
    "TIPOPAGO",
    "NUE",
    "NUP",
    "RFC",
    "CURP",
    "NOMBRE",
    "CATEGORIA",
    "PUESTO",
    "PROYECTO",
    "NOMINA",
    "DESDE",
    "HASTA",
    "LIQUIDO",
]

# Nominas: base roster (accounts, banks, contact data)
COL_BASE = [
    "NUM",
    "NE",
    "NOMBRE",
    "RFC",
    "CUENTA",
    "BANCO",
    "TELEFONO",
    "CORREO ELECTRONICO",
    "SE ENVIA SOBRE A",
    "TIPOPAGO",
    "OBSERVACIONES",
]

# Nominas: cash payments (efectivo) side file
COL_CASH = ["RFC", "NOMBRE", "MODALIDAD", "MONTO", "MOTIVO"]

# Pensiones: quincenal extract
COL_QUINCENAL = [
    "PROYECTO",
    "RFC",
    "NOMBRE",
    "BENEFICIARIO",
    "FOLIO",
    "IMPORTE",
    "CVE",
    "NOMINA",
    "TOTAL DE DESCUENTOS",
    "MODALIDAD",
]

# Pensiones: base roster
COL_BASE_PENSIONES = ["NO.", "NOMBRE", "CUENTA", "NE", "BANCO"]

# Pensiones: optional modality table (RFC -> modality)
COL_MODALITY = ["RFC", "MODALIDAD"]

# Minimal column sets used only to locate the header row
REQUIRED_NEW_COLS = ["RFC", "NOMBRE"]
REQUIRED_BASE_COLS = ["NOMBRE", "RFC"]
REQUIRED_CASH_COLS = ["RFC", "NOMBRE"]
REQUIRED_QUINCENAL_COLS = ["RFC", "NOMBRE"]
REQUIRED_BASE_PENSIONES_COLS = ["NOMBRE"]
REQUIRED_MODALITY_COLS = ["RFC", "MODALIDAD"]


@dataclass(frozen=True)
class DatasetSpec:
    """
    Describes one kind of input file.

    label:
        Human-readable name used in warnings and error messages.
    required_columns:
        Columns that must all appear in a row for it to be taken as the header.
    expected_columns:
        Full column set; missing ones only trigger a warning.
    """

    label: str
    required_columns: tuple[str, ...]
    expected_columns: tuple[str, ...]


DATASETS = {
    "nuevo": DatasetSpec("Nuevo", tuple(REQUIRED_NEW_COLS), tuple(COL_NEW)),
    "base": DatasetSpec("Base", tuple(REQUIRED_BASE_COLS), tuple(COL_BASE)),
    "efectivo": DatasetSpec("Efectivo", tuple(REQUIRED_CASH_COLS), tuple(COL_CASH)),
    "quincenal": DatasetSpec(
        "Quincenal", tuple(REQUIRED_QUINCENAL_COLS), tuple(COL_QUINCENAL)
    ),
    "base_pensiones": DatasetSpec(
        "Base Pensiones",
        tuple(REQUIRED_BASE_PENSIONES_COLS),
        tuple(COL_BASE_PENSIONES),
    ),
    "modalidad": DatasetSpec(
        "Modalidad", tuple(REQUIRED_MODALITY_COLS), tuple(COL_MODALITY)
    ),
}


# --- Output schemas ------------------------------------------------------------

COL_MERGED = [
    "NUM",
    "NE",
    "NOMBRE",
    "RFC",
    "CURP",
    "CUENTA",
    "BANCO",
    "TELEFONO",
    "CORREO ELECTRONICO",
    "SE ENVIA SOBRE A",
    "OBSERVACIONES",
    "TIPOPAGO",
    "CATEGORIA",
    "PUESTO",
    "PROYECTO",
    "NOMINA",
    "DESDE",
    "HASTA",
    "LIQUIDO",
]

COL_REMOVALS = [
    "NUM",
    "NOMBRE",
    "RFC",
    "CUENTA",
    "BANCO",
    "TELEFONO",
    "CORREO ELECTRONICO",
    "SE ENVIA SOBRE A",
    "TIPOPAGO",
    "MOTIVO",
]

COL_MERGED_PENSIONES = [
    "NO.",
    "NOMBRE",
    "RFC",
    "BENEFICIARIO",
    "CUENTA",
    "NE",
    "BANCO",
    "PROYECTO",
    "FOLIO",
    "IMPORTE",
    "CVE",
    "NOMINA",
    "TOTAL DE DESCUENTOS",
    "MODALIDAD",
]

COL_REMOVALS_PENSIONES = ["NO.", "NOMBRE", "CUENTA", "NE", "BANCO", "MOTIVO"]

REASON_COLUMN = "MOTIVO"
REASON_NOT_IN_NEW = "No aparece en nómina nueva"
REASON_NOT_IN_QUINCENAL = "No aparece en nómina quincenal"

# Side-file reasons containing this marker (case-insensitive) become removals
CASH_REMOVAL_MARKER = "BAJA"


# --- Business rules ------------------------------------------------------------

# Project code that identifies the "Jardin" payroll
JARDIN_PROJECT = "1170141530100000200"


@dataclass(frozen=True)
class SplitConfig:
    """
    Labels and switches for the payroll split tree.

    by_project:
        When True, the tree gets a first JARDIN/OTROS tier based on PROYECTO.
    """

    by_project: bool = False
    jardin_label: str = "JARDIN"
    others_label: str = "OTROS"
    no_payroll_label: str = "SIN_NOMINA"
    no_payment_type_label: str = "SIN_TIPOPAGO"
    default_modality: str = "Base"


SPLIT_CONFIG = SplitConfig()

# Keyword -> canonical modality label (checked in this order)
MODALIDADES = {
    "BASE": "Base",
    "CONTRATO CONFIANZA": "Contrato confianza",
    "MANDOS MEDIOS": "Mandos medios",
    "NOMBRAMIENTO CONFIANZA": "Nombramiento confianza",
}

MONTH_ABBREVIATIONS = (
    "Ene",
    "Feb",
    "Mar",
    "Abr",
    "May",
    "Jun",
    "Jul",
    "Ago",
    "Sep",
    "Oct",
    "Nov",
    "Dic",
)

# Day of month up to which the first quincena is paid
FIRST_HALF_LAST_DAY = 15


@dataclass(frozen=True)
class BankLayoutConfig:
    """Fixed values of the bank-specific wire layouts."""

    banorte_receiving_bank: str = "072"
    banorte_account_type: str = "01"
    banamex_card_digits: int = 16
    banamex_card_label: str = "Tarjeta"
    banamex_check_label: str = "Cheque"


BANK_LAYOUT_CONFIG = BankLayoutConfig()

EXCEL_EXTENSION = "xlsx"
DEFAULT_SHEET_NAME = "Datos"
