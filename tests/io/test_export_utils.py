from __future__ import annotations

from datetime import date
from pathlib import Path

import pandas as pd
import pytest
from openpyxl import load_workbook

from payroll_merge.config import COL_MERGED
from payroll_merge.engines.bank_export import BANAMEX_COLUMNS, ExportContext, export_tree
from payroll_merge.engines.reconcile import reconcile
from payroll_merge.engines.split import payroll_split_levels, split_records
from payroll_merge.errors import EmptyResultError, MissingColumnsWarning
from payroll_merge.load_data import load_dataset
from payroll_merge.outputs.export_utils import (
    dated_filename,
    write_df_excel,
    write_merged_roster,
    write_multi_sheet_excel,
    write_no_bank_roster,
    write_split_exports,
    write_summary_workbook,
)


TODAY = date(2025, 1, 10)


def test_dated_filename() -> None:
    assert dated_filename("Nomina_Fusionada", TODAY) == "Nomina_Fusionada_20250110.xlsx"


def test_write_df_excel_empty_raises_and_writes_nothing(tmp_path: Path) -> None:
    with pytest.raises(EmptyResultError):
        write_df_excel(pd.DataFrame(columns=["A"]), out_dir=tmp_path, filename_prefix="vacio", today=TODAY)

    assert list(tmp_path.iterdir()) == []


def test_write_df_excel_orders_columns_and_sets_widths(tmp_path: Path) -> None:
    df = pd.DataFrame({"NOMBRE": ["Ana"], "RFC": ["AAA"]})

    path = write_df_excel(
        df,
        columns=["RFC", "NOMBRE", "CORREO ELECTRONICO"],
        out_dir=tmp_path / "nested",
        filename_prefix="Prueba",
        today=TODAY,
    )

    assert path == tmp_path / "nested" / "Prueba_20250110.xlsx"
    back = pd.read_excel(path, sheet_name="Datos")
    assert list(back.columns) == ["RFC", "NOMBRE", "CORREO ELECTRONICO"]

    sheet = load_workbook(path)["Datos"]
    assert sheet.column_dimensions["A"].width == 15
    assert sheet.column_dimensions["C"].width == len("CORREO ELECTRONICO")


def test_write_multi_sheet_excel_dedupes_truncated_names(tmp_path: Path) -> None:
    long_name = "A" * 40
    sheets = {
        long_name: pd.DataFrame({"x": [1]}),
        long_name + "B": pd.DataFrame({"x": [2]}),
    }

    path = write_multi_sheet_excel(sheets, tmp_path / "multi.xlsx")

    assert load_workbook(path).sheetnames == ["A" * 31, "A" * 29 + "_1"]


def test_reconciliation_outputs(tmp_path: Path, ana_base, ana_beto_period) -> None:
    result = reconcile(ana_beto_period, ana_base)

    summary_path = write_summary_workbook(result, tmp_path, TODAY)
    merged_path = write_merged_roster(result, tmp_path, TODAY)
    no_bank_path = write_no_bank_roster(result, tmp_path, TODAY)

    assert summary_path.name == "Resumen_nominas_20250110.xlsx"
    assert load_workbook(summary_path).sheetnames == ["Altas", "Bajas", "Final"]
    assert pd.read_excel(summary_path, sheet_name="Bajas").empty is True

    assert merged_path.name == "Nomina_Fusionada_20250110.xlsx"
    merged = pd.read_excel(merged_path, sheet_name="Nomina Fusionada")
    assert list(merged.columns) == COL_MERGED
    assert merged["RFC"].tolist() == ["AAA", "BBB"]

    assert no_bank_path.name == "Nomina_Sin_Cuenta_20250110.xlsx"
    assert pd.read_excel(no_bank_path, sheet_name="Sin Cuenta")["RFC"].tolist() == ["BBB"]


def test_no_bank_roster_empty_raises(tmp_path: Path, ana_base) -> None:
    period = pd.DataFrame([{"RFC": "AAA", "NOMBRE": "Ana", "LIQUIDO": 100}])
    result = reconcile(period, ana_base)

    with pytest.raises(EmptyResultError):
        write_no_bank_roster(result, tmp_path, TODAY)


def test_write_split_exports(tmp_path: Path, ana_base, ana_beto_period) -> None:
    result = reconcile(ana_beto_period, ana_base)
    tree = split_records(result.merged, payroll_split_levels(by_project=False))
    exports = export_tree(tree, ExportContext.for_policy(result.policy, TODAY))

    paths = write_split_exports(exports, tmp_path)

    assert [path.name for path in paths] == ["BANAMEX_SIN_NOMINA_SIN_TIPOPAGO_20250110.xlsx"]
    back = pd.read_excel(paths[0], dtype=str)
    assert list(back.columns) == list(BANAMEX_COLUMNS)
    assert back.loc[0, "Cuenta"] == "1234567890123456"
    assert back.loc[0, "Tipo de Cuenta"] == "Tarjeta"
    assert load_workbook(paths[0])["Datos"].column_dimensions["A"].width == 20


def test_generic_bank_file_uses_default_width(tmp_path: Path) -> None:
    result = reconcile(
        pd.DataFrame([{"RFC": "AAA", "NOMBRE": "Ana", "LIQUIDO": 10}]),
        pd.DataFrame([{"RFC": "AAA", "NOMBRE": "Ana", "CUENTA": "123", "BANCO": "BBVA"}]),
    )
    tree = split_records(result.merged, payroll_split_levels(by_project=False))
    exports = export_tree(tree, ExportContext.for_policy(result.policy, TODAY))

    paths = write_split_exports(exports, tmp_path)

    assert [path.name for path in paths] == ["SIN_NOMINA_SIN_TIPOPAGO_BBVA_20250110.xlsx"]
    assert load_workbook(paths[0])["Datos"].column_dimensions["A"].width == 15


def test_numeric_card_from_excel_roster_stays_a_card(tmp_path: Path) -> None:
    base_path = tmp_path / "base.xlsx"
    pd.DataFrame(
        [{"NE": 1234, "NOMBRE": "Ana", "RFC": "AAA", "CUENTA": 1234567890123456, "BANCO": "BANAMEX"}]
    ).to_excel(base_path, index=False)
    period = pd.DataFrame(
        [
            {"RFC": "AAA", "NOMBRE": "Ana", "LIQUIDO": 100},
            {"RFC": "BBB", "NOMBRE": "Beto", "LIQUIDO": 50},
        ]
    )

    with pytest.warns(MissingColumnsWarning):
        base = load_dataset(base_path, "base")
    result = reconcile(period, base)
    tree = split_records(result.merged, payroll_split_levels(by_project=False))
    exports = export_tree(tree, ExportContext.for_policy(result.policy, TODAY))

    assert len(exports) == 1
    row = exports[0].rows.iloc[0]
    assert row["Tipo de Cuenta"] == "Tarjeta"
    assert str(row["Cuenta"]) == "1234567890123456"
