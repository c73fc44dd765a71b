import logging

import pandas as pd
import pytest

from payroll_merge.config import JARDIN_PROJECT
from payroll_merge.engines.split import (
    PENSION_SPLIT_LEVELS,
    classify_project,
    get_bucket,
    iter_buckets,
    payroll_split_levels,
    split_records,
)


def _merged() -> pd.DataFrame:
    return pd.DataFrame(
        [
            {"NOMBRE": "Ana", "NOMINA": "ordinaria", "TIPOPAGO": "deposito", "BANCO": "banamex", "PROYECTO": JARDIN_PROJECT},
            {"NOMBRE": "Beto", "NOMINA": "", "TIPOPAGO": "", "BANCO": "BBVA", "PROYECTO": "X"},
            {"NOMBRE": "Caro", "NOMINA": "ORDINARIA", "TIPOPAGO": "DEPOSITO", "BANCO": "", "PROYECTO": "X"},
            {"NOMBRE": "Dani", "NOMINA": "ORDINARIA", "TIPOPAGO": "DEPOSITO", "BANCO": "BANORTE", "PROYECTO": JARDIN_PROJECT},
            {"NOMBRE": "Eli", "NOMINA": "ORDINARIA ", "TIPOPAGO": "DEPOSITO", "BANCO": "BANAMEX", "PROYECTO": "X"},
        ]
    )


def _names(bucket: pd.DataFrame) -> list[str]:
    return bucket["NOMBRE"].tolist()


def test_payroll_split_groups_in_first_seen_order() -> None:
    tree = split_records(_merged(), payroll_split_levels(by_project=False))

    assert list(tree) == ["ORDINARIA", "SIN_NOMINA"]
    assert list(tree["ORDINARIA"]["DEPOSITO"]) == ["BANAMEX", "BANORTE"]
    assert _names(tree["ORDINARIA"]["DEPOSITO"]["BANAMEX"]) == ["Ana", "Eli"]
    assert _names(tree["SIN_NOMINA"]["SIN_TIPOPAGO"]["BBVA"]) == ["Beto"]


def test_split_drops_rows_without_bank(caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.INFO, logger="payroll_merge.engines.split"):
        tree = split_records(_merged(), payroll_split_levels(by_project=False))

    names = [name for _, bucket in iter_buckets(tree) for name in _names(bucket)]
    assert "Caro" not in names
    assert sorted(names) == ["Ana", "Beto", "Dani", "Eli"]
    assert "Caro" in caplog.text
    assert "1 rows without bank" in caplog.text


def test_split_never_creates_empty_buckets() -> None:
    tree = split_records(_merged(), payroll_split_levels(by_project=True))

    buckets = list(iter_buckets(tree))
    assert all(len(bucket) > 0 for _, bucket in buckets)
    assert [labels for labels, _ in buckets] == [
        ("JARDIN", "ORDINARIA", "DEPOSITO", "BANAMEX"),
        ("JARDIN", "ORDINARIA", "DEPOSITO", "BANORTE"),
        ("OTROS", "SIN_NOMINA", "SIN_TIPOPAGO", "BBVA"),
        ("OTROS", "ORDINARIA", "DEPOSITO", "BANAMEX"),
    ]


def test_split_buckets_have_fresh_index() -> None:
    tree = split_records(_merged(), payroll_split_levels(by_project=False))

    bucket = get_bucket(tree, ("ORDINARIA", "DEPOSITO", "BANAMEX"))
    assert bucket.index.tolist() == [0, 1]
    assert get_bucket(tree, ("ORDINARIA", "DEPOSITO")) is None
    assert get_bucket(tree, ("NOPE",)) is None


def test_pension_split_defaults_modality_to_base() -> None:
    merged = pd.DataFrame(
        [
            {"NOMBRE": "Ana", "MODALIDAD": "", "BANCO": "BANORTE"},
            {"NOMBRE": "Beto", "MODALIDAD": "Mandos medios", "BANCO": "BANAMEX"},
            {"NOMBRE": "Caro", "MODALIDAD": "Base", "BANCO": "BANORTE"},
        ]
    )

    tree = split_records(merged, PENSION_SPLIT_LEVELS)

    assert list(tree) == ["BASE", "MANDOS MEDIOS"]
    assert _names(tree["BASE"]["BANORTE"]) == ["Ana", "Caro"]


def test_split_empty_and_invalid_inputs() -> None:
    assert split_records(pd.DataFrame(), PENSION_SPLIT_LEVELS) == {}
    with pytest.raises(ValueError, match="split level"):
        split_records(_merged(), ())


def test_classify_project_exact_match() -> None:
    assert classify_project(f" {JARDIN_PROJECT} ") == "JARDIN"
    assert classify_project(JARDIN_PROJECT + "0") == "OTROS"
    assert classify_project("") == "OTROS"
