# Docstring for payroll_merge/engines/reconcile module
"""
reconcile.py

Reconciliation engine for a period extract (nuevo / quincenal) against a base
roster, with an optional side file (efectivo) or modality table.

The goal is to identify:
- Additions (altas): people paid in the period who are not on the roster
- Removals (bajas): people on the roster who are not paid in the period, plus
  people the side file explicitly marks as "BAJA"
- The merged roster: one row per period row, enriched with roster data
- The no-bank roster: merged rows without an account (cash payments)

Design goals
------------
- One engine, several policies: the payroll and pension flows differ only in
  the identity key, the side-channel handling and the output schema, all of
  which live in a frozen `ReconcilePolicy`.
- Deterministic ordering: additions follow period order, removals follow the
  base roster order, merged rows follow period order (multiplicity kept).
- Blank defaults: no field is assumed present.

Core logic
----------
1) Key index
   - base rows are keyed by identity; on duplicates the last row wins but the
     entry keeps the position where the identity first appeared.
   - period identities are collected into a set (blank identities ignored).
2) Side channel (payroll only)
   - every identity in the side file suppresses an addition
   - a side row whose MOTIVO contains "BAJA" injects a removal reason
3) Classification
   - addition: identity not in base, or (payroll) in base with a blank CUENTA;
     never when the identity is in the side file
   - removal: base identity absent from the period, reason = side reason or
     the policy default; then side "BAJA" identities not yet removed
4) Merge
   - every period row is matched with its base row (if any) and projected onto
     the policy's merged column schema, numbered 1..n.

Public API
----------
- ReconcilePolicy, PAYROLL_POLICY, PENSION_POLICY
- ReconcileResult
- build_base_index(base, policy) -> pd.DataFrame
- build_identity_set(period, policy) -> set[str]
- build_side_index(side, policy) -> SideIndex
- build_modality_index(modality) -> dict[str, str]
- resolve_modality(modality, nomina, rfc="", modality_index=None) -> str
- reconcile(period, base, policy=PAYROLL_POLICY, side=None, modality=None) -> ReconcileResult
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Mapping, Optional

import pandas as pd

from ..config import (
    CASH_REMOVAL_MARKER,
    COL_BASE,
    COL_BASE_PENSIONES,
    COL_MERGED,
    COL_MERGED_PENSIONES,
    COL_REMOVALS,
    COL_REMOVALS_PENSIONES,
    MODALIDADES,
    REASON_COLUMN,
    REASON_NOT_IN_NEW,
    REASON_NOT_IN_QUINCENAL,
    SPLIT_CONFIG,
)
from ..core.normalizers import (
    blank_column,
    blank_mask,
    ensure_columns,
    first_present,
    is_blank,
    normalize_key,
    normalize_name,
    normalize_records,
)
from ..errors import PreconditionError


logger = logging.getLogger(__name__)

KEY_COLUMN = "_key"

# Origins a merged column can be read from
PERIOD = "period"
BASE = "base"
KEY = "key"
MODALITY = "modality"


@dataclass(frozen=True)
class ReconcilePolicy:
    """
    Everything that differs between the payroll and pension flows.

    key_func:
        Turns a raw key cell into an identity (RFC or accent-free name).
    period_key_column / base_key_column:
        Column holding the identity in each dataset.
    merged_fields:
        (column, origins) pairs in output order. Origins are read left to right
        and the first non-blank value wins.
    add_missing_account:
        Also treat roster members with a blank account as additions.
    use_side_channel:
        Honor the efectivo side file (addition suppression, BAJA removals).
    dataset_kinds:
        (role, config.DATASETS key) pairs for the roles this policy accepts.
    """

    name: str
    key_func: Callable[[Any], str]
    period_key_column: str
    base_key_column: str
    merged_fields: tuple[tuple[str, tuple[str, ...]], ...]
    number_column: str
    removal_columns: tuple[str, ...]
    base_columns: tuple[str, ...]
    removal_reason: str
    amount_column: str
    account_column: str = "CUENTA"
    name_column: str = "NOMBRE"
    side_key_column: str = "RFC"
    add_missing_account: bool = False
    use_side_channel: bool = False
    modality_column: Optional[str] = None
    dataset_kinds: tuple[tuple[str, str], ...] = ()
    merged_file_prefix: str = "Fusionado"
    merged_sheet_name: str = "Fusionado"
    no_bank_file_prefix: str = "Sin_Cuenta"
    no_bank_sheet_name: str = "Sin Cuenta"

    @property
    def merged_columns(self) -> tuple[str, ...]:
        return (self.number_column, *(col for col, _ in self.merged_fields))

    def dataset_kind(self, role: str) -> str:
        for known_role, kind in self.dataset_kinds:
            if known_role == role:
                return kind
        raise ValueError(f"Policy {self.name!r} does not accept a {role!r} dataset.")

    @property
    def roles(self) -> tuple[str, ...]:
        return tuple(role for role, _ in self.dataset_kinds)


PAYROLL_POLICY = ReconcilePolicy(
    name="nominas",
    key_func=normalize_key,
    period_key_column="RFC",
    base_key_column="RFC",
    merged_fields=(
        ("NE", (BASE,)),
        ("NOMBRE", (PERIOD, BASE)),
        ("RFC", (KEY,)),
        ("CURP", (PERIOD,)),
        ("CUENTA", (BASE,)),
        ("BANCO", (BASE,)),
        ("TELEFONO", (BASE,)),
        ("CORREO ELECTRONICO", (BASE,)),
        ("SE ENVIA SOBRE A", (BASE,)),
        ("OBSERVACIONES", (BASE,)),
        ("TIPOPAGO", (PERIOD,)),
        ("CATEGORIA", (PERIOD,)),
        ("PUESTO", (PERIOD,)),
        ("PROYECTO", (PERIOD,)),
        ("NOMINA", (PERIOD,)),
        ("DESDE", (PERIOD,)),
        ("HASTA", (PERIOD,)),
        ("LIQUIDO", (PERIOD,)),
    ),
    number_column=COL_MERGED[0],
    removal_columns=tuple(COL_REMOVALS),
    base_columns=tuple(COL_BASE),
    removal_reason=REASON_NOT_IN_NEW,
    amount_column="LIQUIDO",
    add_missing_account=True,
    use_side_channel=True,
    dataset_kinds=(("period", "nuevo"), ("base", "base"), ("side", "efectivo")),
    merged_file_prefix="Nomina_Fusionada",
    merged_sheet_name="Nomina Fusionada",
    no_bank_file_prefix="Nomina_Sin_Cuenta",
    no_bank_sheet_name="Sin Cuenta",
)

PENSION_POLICY = ReconcilePolicy(
    name="pensiones",
    key_func=normalize_name,
    period_key_column="BENEFICIARIO",
    base_key_column="NOMBRE",
    merged_fields=(
        ("NOMBRE", (BASE, PERIOD)),
        ("RFC", (PERIOD,)),
        ("BENEFICIARIO", (PERIOD,)),
        ("CUENTA", (BASE,)),
        ("NE", (BASE,)),
        ("BANCO", (BASE,)),
        ("PROYECTO", (PERIOD,)),
        ("FOLIO", (PERIOD,)),
        ("IMPORTE", (PERIOD,)),
        ("CVE", (PERIOD,)),
        ("NOMINA", (PERIOD,)),
        ("TOTAL DE DESCUENTOS", (PERIOD,)),
        ("MODALIDAD", (MODALITY,)),
    ),
    number_column=COL_MERGED_PENSIONES[0],
    removal_columns=tuple(COL_REMOVALS_PENSIONES),
    base_columns=tuple(COL_BASE_PENSIONES),
    removal_reason=REASON_NOT_IN_QUINCENAL,
    amount_column="IMPORTE",
    modality_column="MODALIDAD",
    dataset_kinds=(
        ("period", "quincenal"),
        ("base", "base_pensiones"),
        ("modality", "modalidad"),
    ),
    merged_file_prefix="Pensiones_Fusionadas",
    merged_sheet_name="Pensiones Fusionadas",
    no_bank_file_prefix="Pensiones_Efectivos",
    no_bank_sheet_name="Efectivos",
)


@dataclass(frozen=True)
class SideIndex:
    """Identities present in the side file and the rows flagged as removals."""

    keys: frozenset[str] = frozenset()
    removals: Mapping[str, dict[str, Any]] = field(default_factory=dict)

    def reason(self, key: str) -> Optional[str]:
        row = self.removals.get(key)
        if row is None:
            return None
        return str(row.get(REASON_COLUMN, ""))


@dataclass(frozen=True, eq=False)
class ReconcileResult:
    """Output of one merge run. Recomputed in full on every run."""

    additions: pd.DataFrame
    removals: pd.DataFrame
    merged: pd.DataFrame
    no_bank: pd.DataFrame
    policy: ReconcilePolicy

    def summary(self) -> dict[str, int]:
        return {
            "additions": int(len(self.additions)),
            "removals": int(len(self.removals)),
            "total": int(len(self.merged)),
            "no_bank": int(len(self.no_bank)),
        }


# --- Key index builders --------------------------------------------------------

def _keys(df: pd.DataFrame, column: str, key_func: Callable[[Any], str]) -> pd.Series:
    return blank_column(df, column).map(key_func).astype(object)


def build_base_index(base: pd.DataFrame, policy: ReconcilePolicy) -> pd.DataFrame:
    """
    Index base rows by identity.

    Duplicate identities collapse to the LAST row in file order; the entry
    keeps the position of the first occurrence. Rows with a blank identity are
    left out. Every column in policy.base_columns is guaranteed to exist.
    """
    keyed = ensure_columns(base, policy.base_columns)
    keyed[KEY_COLUMN] = _keys(keyed, policy.base_key_column, policy.key_func)
    keyed = keyed[keyed[KEY_COLUMN] != ""]

    first_seen = keyed[KEY_COLUMN].drop_duplicates(keep="first").tolist()
    last_rows = keyed.drop_duplicates(subset=KEY_COLUMN, keep="last").set_index(KEY_COLUMN)
    return last_rows.reindex(first_seen)


def build_identity_set(period: pd.DataFrame, policy: ReconcilePolicy) -> set[str]:
    keys = _keys(period, policy.period_key_column, policy.key_func)
    return {key for key in keys if key}


def build_side_index(side: Optional[pd.DataFrame], policy: ReconcilePolicy) -> SideIndex:
    """
    Collect side-file identities and the rows whose MOTIVO contains "BAJA".

    When an identity is flagged more than once the last row wins.
    """
    if side is None or side.empty:
        return SideIndex()

    keys = _keys(side, policy.side_key_column, policy.key_func)
    reasons = blank_column(side, REASON_COLUMN).astype(str)
    names = blank_column(side, policy.name_column)

    removals: dict[str, dict[str, Any]] = {}
    for key, reason, name in zip(keys, reasons, names):
        if not key:
            continue
        if CASH_REMOVAL_MARKER in reason.upper():
            removals[key] = {policy.name_column: name, REASON_COLUMN: reason}
            logger.debug("Removal flagged by side file (%s): %s - %s", CASH_REMOVAL_MARKER, name or key, reason)

    side_keys = frozenset(key for key in keys if key)
    logger.info("Side file: %d identities excluded, %d flagged as removals", len(side_keys), len(removals))
    return SideIndex(keys=side_keys, removals=removals)


def build_modality_index(modality: Optional[pd.DataFrame]) -> dict[str, str]:
    """RFC -> MODALIDAD lookup from the optional modality table (last row wins)."""
    if modality is None or modality.empty:
        return {}
    keys = _keys(modality, "RFC", normalize_key)
    values = blank_column(modality, "MODALIDAD")
    return {key: str(value) for key, value in zip(keys, values) if key and not is_blank(value)}


# --- Modality ------------------------------------------------------------------

def _match_modality(text: str) -> Optional[str]:
    upper = text.upper().strip()
    for keyword, label in MODALIDADES.items():
        if keyword in upper:
            return label
    return None


def resolve_modality(
    modality: Any,
    nomina: Any,
    rfc: Any = "",
    modality_index: Optional[Mapping[str, str]] = None,
) -> str:
    """
    Resolve the modality (category) of a pension row.

    Order:
    1) the modality table entry for the row's RFC, if any
    2) the row's own MODALIDAD value
       -> mapped to its canonical label by keyword, or returned as-is
    3) a keyword match on the NOMINA (payroll group) name
    4) the baseline category ("Base")
    """
    value = None
    if modality_index:
        value = modality_index.get(normalize_key(rfc))
    if is_blank(value) and not is_blank(modality):
        value = modality
    if not is_blank(value):
        return _match_modality(str(value)) or str(value)

    if not is_blank(nomina):
        matched = _match_modality(str(nomina))
        if matched:
            return matched

    return SPLIT_CONFIG.default_modality


# --- Engine --------------------------------------------------------------------

def _require(df: Optional[pd.DataFrame], label: str) -> pd.DataFrame:
    if df is None or len(df) == 0:
        raise PreconditionError(f"{label} dataset is not loaded or has no rows.")
    return df


def _fill_blanks(df: pd.DataFrame) -> pd.DataFrame:
    df = df.copy()
    for col in df.columns:
        df[col] = blank_column(df, col)
    return df


def _detect_additions(
    period: pd.DataFrame,
    base_index: pd.DataFrame,
    side_index: SideIndex,
    policy: ReconcilePolicy,
) -> pd.DataFrame:
    first_rows = period[period[KEY_COLUMN] != ""].drop_duplicates(subset=KEY_COLUMN, keep="first")
    keys = first_rows[KEY_COLUMN]

    in_base = keys.isin(base_index.index)
    is_addition = ~in_base

    if policy.add_missing_account:
        accounts = keys.map(base_index[policy.account_column])
        is_addition = is_addition | (in_base & blank_mask(accounts))

    if policy.use_side_channel:
        in_side = keys.isin(side_index.keys)
        for key in keys[~in_base & in_side]:
            logger.debug("Excluded from additions (cash payment): %s", key)
        is_addition = is_addition & ~in_side

    additions = first_rows[is_addition].drop(columns=KEY_COLUMN)
    return additions.reset_index(drop=True)


def _detect_removals(
    base_index: pd.DataFrame,
    period_keys: set[str],
    side_index: SideIndex,
    policy: ReconcilePolicy,
) -> pd.DataFrame:
    absent = base_index[~base_index.index.isin(period_keys)]
    reasons = [side_index.reason(key) or policy.removal_reason for key in absent.index]
    removed = absent.assign(**{REASON_COLUMN: reasons})

    removals = removed.reset_index(drop=True)
    emitted = set(absent.index)
    extra_rows: list[dict[str, Any]] = []
    for key, side_row in side_index.removals.items():
        if key in emitted:
            continue
        reason = side_row.get(REASON_COLUMN, "")
        if key in base_index.index:
            row = base_index.loc[key].to_dict()
        else:
            row = {col: "" for col in policy.removal_columns}
            row[policy.name_column] = side_row.get(policy.name_column, "")
            row[policy.side_key_column] = key
        row[REASON_COLUMN] = reason
        extra_rows.append(row)
        emitted.add(key)
    if extra_rows:
        extra = pd.DataFrame(extra_rows)
        removals = extra if removals.empty else pd.concat([removals, extra], ignore_index=True)

    removals = ensure_columns(_fill_blanks(removals), policy.removal_columns)
    ordered = [*policy.removal_columns, *(col for col in removals.columns if col not in policy.removal_columns)]
    return removals[ordered]


def _merge_rows(
    period: pd.DataFrame,
    base_index: pd.DataFrame,
    policy: ReconcilePolicy,
    modality_index: Mapping[str, str],
) -> pd.DataFrame:
    matched = base_index.astype(object).reindex(period[KEY_COLUMN].tolist())
    matched.index = period.index
    sources = {PERIOD: period, BASE: matched}

    columns: dict[str, Any] = {policy.number_column: list(range(1, len(period) + 1))}
    for column, origins in policy.merged_fields:
        candidates = pd.DataFrame(index=period.index)
        for position, origin in enumerate(origins):
            name = f"{position}:{origin}"
            if origin == KEY:
                candidates[name] = period[KEY_COLUMN]
            elif origin == MODALITY:
                candidates[name] = [
                    resolve_modality(mod, nomina, rfc, modality_index)
                    for mod, nomina, rfc in zip(
                        blank_column(period, policy.modality_column or column),
                        blank_column(period, "NOMINA"),
                        blank_column(period, "RFC"),
                    )
                ]
            else:
                candidates[name] = blank_column(sources[origin], column)
        columns[column] = first_present(candidates, list(candidates.columns))

    merged = pd.DataFrame(columns, index=period.index)
    return merged[list(policy.merged_columns)].reset_index(drop=True)


def reconcile(
    period: pd.DataFrame,
    base: pd.DataFrame,
    policy: ReconcilePolicy = PAYROLL_POLICY,
    side: Optional[pd.DataFrame] = None,
    modality: Optional[pd.DataFrame] = None,
) -> ReconcileResult:
    """
    Reconcile a period extract against the base roster.

    Args:
        period:
            Nuevo (payroll) or quincenal (pension) rows. Normalized here
            (normalization is idempotent).
        base:
            Base roster rows.
        policy:
            PAYROLL_POLICY (RFC-keyed) or PENSION_POLICY (name-keyed).
        side:
            Optional efectivo file; ignored unless policy.use_side_channel.
        modality:
            Optional RFC -> MODALIDAD table; used when the policy resolves
            modalities.

    Returns:
        ReconcileResult with additions, removals, merged and no_bank tables.

    Raises:
        PreconditionError: if period or base is missing or empty.
    """
    period = normalize_records(_require(period, "Period"))
    base = normalize_records(_require(base, "Base"))

    period[KEY_COLUMN] = _keys(period, policy.period_key_column, policy.key_func)
    base_index = build_base_index(base, policy)
    period_keys = {key for key in period[KEY_COLUMN] if key}

    side_index = SideIndex()
    if policy.use_side_channel and side is not None:
        side_index = build_side_index(normalize_records(side), policy)

    modality_index = {}
    if policy.modality_column and modality is not None:
        modality_index = build_modality_index(normalize_records(modality))

    additions = _detect_additions(period, base_index, side_index, policy)
    removals = _detect_removals(base_index, period_keys, side_index, policy)
    merged = _merge_rows(period, base_index, policy, modality_index)
    no_bank = merged[blank_mask(merged[policy.account_column])].reset_index(drop=True)

    result = ReconcileResult(
        additions=additions,
        removals=removals,
        merged=merged,
        no_bank=no_bank,
        policy=policy,
    )
    logger.info(
        "Reconciled %s: %d additions, %d removals, %d merged rows (%d without account)",
        policy.name,
        len(additions),
        len(removals),
        len(merged),
        len(no_bank),
    )
    return result
