# Docstring for payroll_merge/session module
"""
session.py

Explicit state for one reconciliation workflow.

A `ReconcileSession` holds the loaded datasets and the derived results. It is
immutable: loading a file, merging or splitting returns a NEW session, so the
previous state is untouched when an action fails.

Typical usage
-------------
    from datetime import date
    from payroll_merge.session import ReconcileSession

    session = (
        ReconcileSession.for_payroll()
        .load("period", "data/raw/nuevo.xlsx")
        .load("base", "data/raw/base.xlsx")
        .merge()
        .split()
    )
    exports = session.bank_exports(date.today())
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from datetime import date
from pathlib import Path
from typing import Any, Iterable, Mapping, Optional

import pandas as pd

from .config import DATASETS
from .core.normalizers import normalize_records
from .core.validators import warn_missing_columns
from .engines.bank_export import BankExport, ExportContext, export_tree
from .engines.reconcile import (
    PAYROLL_POLICY,
    PENSION_POLICY,
    ReconcilePolicy,
    ReconcileResult,
    reconcile,
)
from .engines.split import PENSION_SPLIT_LEVELS, SplitLevel, payroll_split_levels, split_records
from .load_data import load_dataset


logger = logging.getLogger(__name__)


@dataclass(frozen=True, eq=False)
class ReconcileSession:
    policy: ReconcilePolicy = PAYROLL_POLICY
    split_levels: tuple[SplitLevel, ...] = ()
    period: Optional[pd.DataFrame] = None
    base: Optional[pd.DataFrame] = None
    side: Optional[pd.DataFrame] = None
    modality: Optional[pd.DataFrame] = None
    result: Optional[ReconcileResult] = None
    split_tree: Optional[dict] = None

    @classmethod
    def for_payroll(cls, by_project: Optional[bool] = None) -> "ReconcileSession":
        return cls(policy=PAYROLL_POLICY, split_levels=payroll_split_levels(by_project))

    @classmethod
    def for_pensions(cls) -> "ReconcileSession":
        return cls(policy=PENSION_POLICY, split_levels=PENSION_SPLIT_LEVELS)

    # --- Datasets --------------------------------------------------------------

    def with_dataset(
        self,
        role: str,
        data: pd.DataFrame | Iterable[Mapping[str, Any]],
    ) -> "ReconcileSession":
        """
        Replace one dataset wholesale with already-parsed rows.

        Rows are normalized and checked against the expected columns for the
        role (missing columns only warn).
        """
        kind = self.policy.dataset_kind(role)
        df = normalize_records(data)
        warn_missing_columns(df, DATASETS[kind])
        logger.info("%s loaded: %d rows", DATASETS[kind].label, len(df))
        return replace(self, **{role: df})

    def load(self, role: str, path: Path | str, sheet_name: int | str = 0) -> "ReconcileSession":
        """Read an Excel file for `role`; raises HeaderNotFoundError if no header is found."""
        kind = self.policy.dataset_kind(role)
        df = load_dataset(path, kind, sheet_name=sheet_name)
        logger.info("%s loaded from %s: %d rows", DATASETS[kind].label, path, len(df))
        return replace(self, **{role: df})

    def clear_side(self) -> "ReconcileSession":
        return replace(self, side=None)

    # --- Actions ---------------------------------------------------------------

    @property
    def can_merge(self) -> bool:
        return (
            self.period is not None
            and not self.period.empty
            and self.base is not None
            and not self.base.empty
        )

    @property
    def can_split(self) -> bool:
        return self.result is not None and not self.result.merged.empty

    def merge(self) -> "ReconcileSession":
        """Recompute additions, removals and the merged roster (no-op if not ready)."""
        if not self.can_merge:
            logger.warning("Merge skipped: period and base datasets are required.")
            return self
        result = reconcile(
            self.period,
            self.base,
            policy=self.policy,
            side=self.side,
            modality=self.modality,
        )
        return replace(self, result=result, split_tree=None)

    def split(self) -> "ReconcileSession":
        """Rebuild the split tree from the current merged roster (no-op if not merged)."""
        if not self.can_split:
            logger.warning("Split skipped: run the merge first.")
            return self
        tree = split_records(self.result.merged, self.split_levels)
        return replace(self, split_tree=tree)

    def bank_exports(self, today: date) -> list[BankExport]:
        """Payment tables for every bucket of the current split (empty if none)."""
        if not self.split_tree:
            return []
        context = ExportContext.for_policy(self.policy, today)
        return export_tree(self.split_tree, context)
