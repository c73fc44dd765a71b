# Docstring for payroll_merge/engines/split module
"""
split.py

Partition the merged roster into disbursement buckets.

The split is a pure re-partition of the merged rows into a nested, ordered
dict whose leaves are DataFrames:

    nominas:    [JARDIN|OTROS] -> NOMINA -> TIPOPAGO -> BANCO -> rows
    pensiones:  MODALIDAD -> BANCO -> rows

Rules
-----
- Labels are the trimmed, uppercased cell value; levels with a default label
  use it when the cell is blank.
- The bank level has no default: a row with a blank BANCO cannot be routed to
  a payment file and is dropped (logged, not an error).
- Buckets keep the merged row order; groups appear in first-seen order.
- Only non-empty buckets are created.

Public API
----------
- SplitLevel
- classify_project(value, project_code=JARDIN_PROJECT) -> str
- payroll_split_levels(by_project=None, config=SPLIT_CONFIG) -> tuple[SplitLevel, ...]
- PENSION_SPLIT_LEVELS
- split_records(merged, levels) -> dict
- iter_buckets(tree) -> Iterator[tuple[tuple[str, ...], pd.DataFrame]]
- get_bucket(tree, labels) -> pd.DataFrame | None
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from functools import partial
from typing import Any, Callable, Iterator, Optional, Sequence

import pandas as pd

from ..config import JARDIN_PROJECT, SPLIT_CONFIG, SplitConfig
from ..core.normalizers import blank_column, first_present, is_blank


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SplitLevel:
    """
    One tier of the split tree.

    column:
        Merged column the label is read from.
    default:
        Label for blank cells. None means blank rows are dropped.
    classify:
        Optional function mapping the raw cell to a label (e.g. JARDIN/OTROS).
    """

    column: str
    default: Optional[str] = None
    classify: Optional[Callable[[Any], str]] = None

    def label(self, value: Any) -> str:
        if self.classify is not None:
            return self.classify(value)
        text = "" if is_blank(value) else str(value).strip()
        if not text:
            if self.default is None:
                return ""
            text = self.default
        return text.upper().strip()


def classify_project(
    value: Any,
    project_code: str = JARDIN_PROJECT,
    config: SplitConfig = SPLIT_CONFIG,
) -> str:
    """JARDIN when PROYECTO equals the configured project code exactly, else OTROS."""
    text = "" if is_blank(value) else str(value).strip()
    return config.jardin_label if text == project_code else config.others_label


def payroll_split_levels(
    by_project: Optional[bool] = None,
    config: SplitConfig = SPLIT_CONFIG,
) -> tuple[SplitLevel, ...]:
    if by_project is None:
        by_project = config.by_project

    levels = []
    if by_project:
        levels.append(SplitLevel("PROYECTO", classify=partial(classify_project, config=config)))
    levels.extend(
        [
            SplitLevel("NOMINA", default=config.no_payroll_label),
            SplitLevel("TIPOPAGO", default=config.no_payment_type_label),
            SplitLevel("BANCO"),
        ]
    )
    return tuple(levels)


PENSION_SPLIT_LEVELS = (
    SplitLevel("MODALIDAD", default=SPLIT_CONFIG.default_modality),
    SplitLevel("BANCO"),
)


def _materialize(node: dict, merged: pd.DataFrame) -> dict:
    out = {}
    for label, child in node.items():
        if isinstance(child, dict):
            out[label] = _materialize(child, merged)
        else:
            out[label] = merged.loc[child].reset_index(drop=True)
    return out


def split_records(merged: pd.DataFrame, levels: Sequence[SplitLevel]) -> dict:
    """
    Build the nested split tree from merged rows.

    Args:
        merged:
            Merged roster (ReconcileResult.merged).
        levels:
            Tiers from outermost to the bank tier.

    Returns:
        Nested dict; every leaf is a non-empty DataFrame with the merged
        columns, in merged order.
    """
    if not levels:
        raise ValueError("At least one split level is required.")
    if merged is None or merged.empty:
        return {}

    labels = pd.DataFrame(
        {
            position: blank_column(merged, level.column).map(level.label)
            for position, level in enumerate(levels)
        },
        index=merged.index,
    )
    routable = (labels != "").all(axis=1)

    dropped = merged[~routable]
    if not dropped.empty:
        names = first_present(dropped, ["NOMBRE", "BENEFICIARIO", "RFC"])
        for name in names:
            logger.info("Split skipped (no bank): %s", name)
        logger.warning("%d rows without bank were left out of the split", len(dropped))

    tree: dict = {}
    for idx, path in zip(labels.index[routable], labels[routable].itertuples(index=False, name=None)):
        node = tree
        for label in path[:-1]:
            node = node.setdefault(label, {})
        node.setdefault(path[-1], []).append(idx)

    return _materialize(tree, merged)


def iter_buckets(tree: dict, prefix: tuple[str, ...] = ()) -> Iterator[tuple[tuple[str, ...], pd.DataFrame]]:
    """Yield (labels, bucket) pairs depth-first, in tree order."""
    for label, child in tree.items():
        path = (*prefix, label)
        if isinstance(child, dict):
            yield from iter_buckets(child, path)
        else:
            yield path, child


def get_bucket(tree: dict, labels: Sequence[str]) -> Optional[pd.DataFrame]:
    node: Any = tree
    for label in labels:
        if not isinstance(node, dict) or label not in node:
            return None
        node = node[label]
    return node if isinstance(node, pd.DataFrame) else None
