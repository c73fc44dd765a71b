"""
generate_sample_data.py

Seeded generator for synthetic payroll (nuevo / base / efectivo) and pension
(quincenal / base pensiones) sample inputs.

The files use the raw headers the loader expects, and some of them carry title
rows above the header the way the real exports do, so header detection is
exercised too. Outputs are deterministic given a seed and include edge cases:

- a duplicated RFC in the base roster (last row wins)
- a retroactive second period row for the same RFC
- a roster member without account (counted as an addition)
- a cash-paid newcomer listed in the efectivo file (not an addition)
- an efectivo row whose reason contains "BAJA"
- rows without bank (left out of the split)
- accented names in the pension roster matched against plain names
"""

from __future__ import annotations

import argparse
import random
from pathlib import Path

import pandas as pd
from faker import Faker

from ..config import (
    COL_BASE,
    COL_BASE_PENSIONES,
    COL_CASH,
    COL_NEW,
    COL_QUINCENAL,
    JARDIN_PROJECT,
    SAMPLE_DIR,
)


DEFAULT_SEED = 20250110
EMPLOYEE_COUNT = 40
PENSIONER_COUNT = 20

BANKS = ["BANAMEX", "BANORTE", "BBVA", "SANTANDER"]
PAYROLLS = ["ORDINARIA", "EVENTUAL"]
PAYMENT_TYPES = ["DEPOSITO", "CHEQUE"]
OTHER_PROJECT = "1170141530100000300"
PENSION_PAYROLLS = ["PENSION BASE", "PENSION CONTRATO CONFIANZA", "PENSION MANDOS MEDIOS"]


def _amount(rng: random.Random, low: float, high: float) -> float:
    return round(rng.uniform(low, high), 2)


def _account(rng: random.Random) -> str:
    # 16 digits is a card, 10 digits a check account
    digits = 16 if rng.random() < 0.6 else 10
    return "".join(str(rng.randint(0, 9)) for _ in range(digits))


def _unique_rfc(faker: Faker, used: set[str]) -> str:
    rfc = faker.rfc()
    while rfc in used:
        rfc = faker.rfc()
    used.add(rfc)
    return rfc


def _employee(rng: random.Random, faker: Faker, used_rfcs: set[str]) -> dict[str, object]:
    return {
        "RFC": _unique_rfc(faker, used_rfcs),
        "CURP": faker.curp(),
        "NOMBRE": faker.name().upper(),
        "NE": str(rng.randint(10000, 99999)),
        "CUENTA": _account(rng),
        "BANCO": rng.choice(BANKS),
        "TELEFONO": faker.msisdn()[:10],
        "CORREO ELECTRONICO": faker.email(),
        "TIPOPAGO": rng.choice(PAYMENT_TYPES),
        "CATEGORIA": rng.choice(["A01", "A02", "B01"]),
        "PUESTO": faker.job().upper(),
        "PROYECTO": JARDIN_PROJECT if rng.random() < 0.3 else OTHER_PROJECT,
        "NOMINA": rng.choice(PAYROLLS),
        "LIQUIDO": _amount(rng, 3500, 18000),
    }


def _base_row(num: int, emp: dict[str, object]) -> dict[str, object]:
    return {
        "NUM": num,
        "NE": emp["NE"],
        "NOMBRE": emp["NOMBRE"],
        "RFC": emp["RFC"],
        "CUENTA": emp["CUENTA"],
        "BANCO": emp["BANCO"],
        "TELEFONO": emp["TELEFONO"],
        "CORREO ELECTRONICO": emp["CORREO ELECTRONICO"],
        "SE ENVIA SOBRE A": "",
        "TIPOPAGO": emp["TIPOPAGO"],
        "OBSERVACIONES": "",
    }


def _new_row(emp: dict[str, object], desde: str, hasta: str) -> dict[str, object]:
    return {
        "TIPOPAGO": emp["TIPOPAGO"],
        "NUE": emp["NE"],
        "NUP": "",
        "RFC": emp["RFC"],
        "CURP": emp["CURP"],
        "NOMBRE": emp["NOMBRE"],
        "CATEGORIA": emp["CATEGORIA"],
        "PUESTO": emp["PUESTO"],
        "PROYECTO": emp["PROYECTO"],
        "NOMINA": emp["NOMINA"],
        "DESDE": desde,
        "HASTA": hasta,
        "LIQUIDO": emp["LIQUIDO"],
    }


def build_payroll_samples(
    rng: random.Random,
    faker: Faker,
) -> tuple[pd.DataFrame, pd.DataFrame, pd.DataFrame]:
    """Return (nuevo, base, efectivo) frames."""
    used_rfcs: set[str] = set()
    employees = [_employee(rng, faker, used_rfcs) for _ in range(EMPLOYEE_COUNT)]

    # First 34 are on the roster; 30..33 left; 34..39 are newcomers
    roster = employees[:34]
    paid = employees[:30] + employees[34:]

    base_rows = [_base_row(i, emp) for i, emp in enumerate(roster, start=1)]
    # Roster member without account: shows up as an addition
    base_rows[2]["CUENTA"] = ""
    base_rows[2]["BANCO"] = ""
    # Duplicated RFC, the later row (new account) wins
    updated = dict(base_rows[5], NUM=len(base_rows) + 1, CUENTA=_account(rng), OBSERVACIONES="CAMBIO DE CUENTA")
    base_rows.append(updated)

    new_rows = [_new_row(emp, "2025-01-01", "2025-01-15") for emp in paid]
    # Retroactive payment for the same person
    new_rows.append(_new_row(dict(paid[7], LIQUIDO=_amount(rng, 500, 1500)), "2024-12-16", "2024-12-31"))

    cash_newcomer = employees[35]
    baja = employees[31]
    cash_rows = [
        {
            "RFC": cash_newcomer["RFC"],
            "NOMBRE": cash_newcomer["NOMBRE"],
            "MODALIDAD": "EFECTIVO",
            "MONTO": cash_newcomer["LIQUIDO"],
            "MOTIVO": "SIN CUENTA BANCARIA",
        },
        {
            "RFC": baja["RFC"],
            "NOMBRE": baja["NOMBRE"],
            "MODALIDAD": "EFECTIVO",
            "MONTO": 0,
            "MOTIVO": "BAJA POR RENUNCIA",
        },
    ]

    nuevo = pd.DataFrame(new_rows, columns=COL_NEW)
    base = pd.DataFrame(base_rows, columns=COL_BASE)
    efectivo = pd.DataFrame(cash_rows, columns=COL_CASH)
    return nuevo, base, efectivo


def build_pension_samples(rng: random.Random, faker: Faker) -> tuple[pd.DataFrame, pd.DataFrame]:
    """Return (quincenal, base_pensiones) frames."""
    used_rfcs: set[str] = set()
    names = [faker.name().upper() for _ in range(PENSIONER_COUNT)]
    names[0] = "JOSÉ PÉREZ NÚÑEZ"

    base_rows = []
    for i, name in enumerate(names[:17], start=1):
        base_rows.append(
            {
                "NO.": i,
                "NOMBRE": name,
                "CUENTA": _account(rng),
                "NE": str(rng.randint(10000, 99999)),
                "BANCO": rng.choice(BANKS),
            }
        )
    # Cash-paid pensioner
    base_rows[4]["CUENTA"] = ""
    base_rows[4]["BANCO"] = ""

    quincenal_rows = []
    for name in names[:15] + names[17:]:
        beneficiary = "JOSE PEREZ NUNEZ" if name == names[0] else name
        payroll = rng.choice(PENSION_PAYROLLS)
        quincenal_rows.append(
            {
                "PROYECTO": OTHER_PROJECT,
                "RFC": _unique_rfc(faker, used_rfcs),
                "NOMBRE": faker.name().upper(),
                "BENEFICIARIO": beneficiary,
                "FOLIO": str(rng.randint(100000, 999999)),
                "IMPORTE": _amount(rng, 1500, 9000),
                "CVE": rng.choice(["62", "63"]),
                "NOMINA": payroll,
                "TOTAL DE DESCUENTOS": _amount(rng, 0, 300),
                "MODALIDAD": "",
            }
        )
    quincenal_rows[1]["MODALIDAD"] = "NOMBRAMIENTO CONFIANZA"

    quincenal = pd.DataFrame(quincenal_rows, columns=COL_QUINCENAL)
    base_pensiones = pd.DataFrame(base_rows, columns=COL_BASE_PENSIONES)
    return quincenal, base_pensiones


def _write_with_title(df: pd.DataFrame, path: Path, title: str) -> None:
    """Write df below a title row, leaving a blank row before the header."""
    with pd.ExcelWriter(path, engine="openpyxl") as writer:
        df.to_excel(writer, sheet_name="Hoja1", index=False, startrow=2)
        writer.sheets["Hoja1"].cell(row=1, column=1, value=title)


def generate_sample_data(output_dir: Path = SAMPLE_DIR, seed: int = DEFAULT_SEED) -> dict[str, Path]:
    rng = random.Random(seed)
    faker = Faker("es_MX")
    faker.seed_instance(seed)

    nuevo, base, efectivo = build_payroll_samples(rng, faker)
    quincenal, base_pensiones = build_pension_samples(rng, faker)

    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    outputs = {
        "nuevo": output_dir / "nuevo_sample.xlsx",
        "base": output_dir / "base_sample.xlsx",
        "efectivo": output_dir / "efectivo_sample.xlsx",
        "quincenal": output_dir / "quincenal_sample.xlsx",
        "base_pensiones": output_dir / "base_pensiones_sample.xlsx",
    }

    _write_with_title(nuevo, outputs["nuevo"], "NOMINA QUINCENAL 1a ENERO 2025")
    base.to_excel(outputs["base"], index=False)
    efectivo.to_excel(outputs["efectivo"], index=False)
    _write_with_title(quincenal, outputs["quincenal"], "PENSIONES ALIMENTICIAS")
    base_pensiones.to_excel(outputs["base_pensiones"], index=False)
    return outputs


def _parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Generate seeded synthetic sample data for payroll and pension inputs."
    )
    parser.add_argument("--seed", type=int, default=DEFAULT_SEED, help="Deterministic RNG seed")
    parser.add_argument(
        "--output-dir",
        type=Path,
        default=SAMPLE_DIR,
        help="Destination directory for sample Excel files",
    )
    return parser.parse_args()


def main() -> None:
    args = _parse_args()
    outputs = generate_sample_data(output_dir=args.output_dir, seed=args.seed)
    for label, path in outputs.items():
        print(f"Wrote {label} sample to: {path}")


if __name__ == "__main__":
    main()
