import pandas as pd

from payroll_merge.core.normalizers import (
    account_digits,
    blank_column,
    ensure_columns,
    first_present,
    is_blank,
    normalize_key,
    normalize_name,
    normalize_records,
    to_amount,
)


def test_normalize_records_trims_and_uppercases_columns() -> None:
    raw = pd.DataFrame({" rfc ": [" aaa "], "Nombre": ["Ana  "], "liquido": [100]})

    out = normalize_records(raw)

    assert list(out.columns) == ["RFC", "NOMBRE", "LIQUIDO"]
    assert out.loc[0, "RFC"] == "aaa"
    assert out.loc[0, "NOMBRE"] == "Ana"
    assert out.loc[0, "LIQUIDO"] == 100


def test_normalize_records_missing_values_become_blank() -> None:
    rows = [{"RFC": "AAA", "CUENTA": None}, {"RFC": "BBB", "CUENTA": float("nan")}, {"RFC": "CCC"}]

    out = normalize_records(rows)

    assert out["CUENTA"].tolist() == ["", "", ""]
    assert len(out) == 3


def test_normalize_records_later_duplicate_column_wins() -> None:
    raw = pd.DataFrame([["first", "second"]], columns=["RFC", " rfc"])

    out = normalize_records(raw)

    assert list(out.columns) == ["RFC"]
    assert out.loc[0, "RFC"] == "second"


def test_normalize_records_is_idempotent() -> None:
    raw = pd.DataFrame(
        {
            " rfc": [" AAA", None, "ccc "],
            "Nombre ": ["José ", "", float("nan")],
            "LIQUIDO": [1.5, 2, None],
        }
    )

    once = normalize_records(raw)
    twice = normalize_records(once)

    pd.testing.assert_frame_equal(once, twice)


def test_normalize_records_empty_input() -> None:
    assert normalize_records(None).empty is True
    assert normalize_records([]).empty is True


def test_normalize_name_strips_accents() -> None:
    assert normalize_name("José Pérez ") == "JOSE PEREZ"
    assert normalize_name("Ñuñez") == "NUNEZ"
    assert normalize_name(None) == ""
    assert normalize_name(normalize_name("Müller")) == "MULLER"


def test_normalize_key_blank_and_case() -> None:
    assert normalize_key(" abc123 ") == "ABC123"
    assert normalize_key(float("nan")) == ""
    assert normalize_key("   ") == ""


def test_is_blank() -> None:
    assert is_blank(None) is True
    assert is_blank(" ") is True
    assert is_blank(pd.NA) is True
    assert is_blank(0) is False
    assert is_blank("0") is False


def test_blank_column_and_ensure_columns() -> None:
    df = pd.DataFrame({"A": ["x", None]})

    assert blank_column(df, "A").tolist() == ["x", ""]
    assert blank_column(df, "MISSING").tolist() == ["", ""]

    ensured = ensure_columns(df, ["A", "B"])
    assert ensured["B"].tolist() == ["", ""]
    assert "B" not in df.columns


def test_first_present_falls_back_in_order() -> None:
    df = pd.DataFrame({"NOMBRE": ["Ana", "", None], "BENEFICIARIO": ["X", "Beto", ""]})

    assert first_present(df, ["NOMBRE", "BENEFICIARIO", "ABSENT"]).tolist() == ["Ana", "Beto", ""]


def test_account_digits_and_to_amount() -> None:
    assert account_digits("1234-5678 9012") == "123456789012"
    assert account_digits(None) == ""
    assert to_amount("$1,234.50") == 1234.5
    assert to_amount("") == 0.0
    assert to_amount("n/a") == 0.0
    assert to_amount(7) == 7.0


def test_normalize_records_keeps_object_columns() -> None:
    out = normalize_records(pd.DataFrame({"NE": [1234, 5678], "CUENTA": [1234567890123456, 1]}))

    assert out["NE"].dtype == object
    assert out["CUENTA"].dtype == object
    assert blank_column(out, "NE").dtype == object
