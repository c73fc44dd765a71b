from datetime import date

import pandas as pd
import pytest

from payroll_merge.errors import MissingColumnsWarning
from payroll_merge.session import ReconcileSession


def test_merge_without_datasets_is_a_no_op(caplog: pytest.LogCaptureFixture) -> None:
    session = ReconcileSession.for_payroll()

    assert session.merge() is session
    assert session.split() is session
    assert session.bank_exports(date(2025, 1, 10)) == []
    assert "Merge skipped" in caplog.text


def test_session_actions_return_new_sessions(ana_base, ana_beto_period) -> None:
    empty = ReconcileSession.for_payroll()
    with pytest.warns(MissingColumnsWarning):
        loaded = empty.with_dataset("period", ana_beto_period).with_dataset("base", ana_base)

    merged = loaded.merge()
    split = merged.split()

    assert empty.period is None
    assert loaded.result is None
    assert merged.split_tree is None
    assert merged.result.summary()["additions"] == 1
    assert list(split.split_tree) == ["SIN_NOMINA"]


def test_session_end_to_end_payroll(ana_base, ana_beto_period) -> None:
    with pytest.warns(MissingColumnsWarning):
        session = (
            ReconcileSession.for_payroll()
            .with_dataset("period", ana_beto_period)
            .with_dataset("base", ana_base)
            .merge()
            .split()
        )

    exports = session.bank_exports(date(2025, 1, 20))

    assert [export.filename for export in exports] == ["BANAMEX_SIN_NOMINA_SIN_TIPOPAGO_20250120.xlsx"]
    assert exports[0].rows["Ref. AlfN."].tolist() == ["2a Nomina de Ene"]


def test_remerge_recomputes_and_clears_split(ana_base, ana_beto_period) -> None:
    side = pd.DataFrame([{"RFC": "BBB", "NOMBRE": "Beto", "MOTIVO": "EFECTIVO"}])
    with pytest.warns(MissingColumnsWarning):
        session = (
            ReconcileSession.for_payroll()
            .with_dataset("period", ana_beto_period)
            .with_dataset("base", ana_base)
            .with_dataset("side", side)
            .merge()
            .split()
        )

    assert session.result.additions.empty is True

    rerun = session.clear_side().merge()

    assert rerun.side is None
    assert rerun.split_tree is None
    assert rerun.result.additions["RFC"].tolist() == ["BBB"]


def test_pension_session_rejects_payroll_roles() -> None:
    session = ReconcileSession.for_pensions()

    with pytest.raises(ValueError, match="side"):
        session.with_dataset("side", [{"RFC": "AAA"}])
    assert session.policy.roles == ("period", "base", "modality")
