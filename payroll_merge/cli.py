# Docstring for payroll_merge/cli module
"""
cli.py

Command-line entry point: run one reconciliation end to end.

    payroll-merge nominas --nuevo nuevo.xlsx --base base.xlsx [--efectivo efectivo.xlsx]
                          [--split-by-project] [--date 2025-01-10] [--output-dir reports/outputs]

    payroll-merge pensiones --quincenal quincenal.xlsx --base base.xlsx [--modalidad modalidad.xlsx]
                            [--date 2025-01-10] [--output-dir reports/outputs]

Steps: load -> merge -> split -> write. Written files:
- Resumen_<flow>_<date>.xlsx with Altas / Bajas / Final sheets
- the merged roster and the no-bank roster
- one payment file per bank bucket

Errors (header not found, missing file, nothing to merge) are printed to
stderr and the exit code is 1.
"""

from __future__ import annotations

import argparse
import logging
import sys
from datetime import date
from pathlib import Path
from typing import Optional, Sequence

from .config import REPORTS_FIGURES_DIR, REPORTS_OUTPUTS_DIR
from .errors import EmptyResultError, PayrollMergeError
from .outputs.export_utils import (
    write_merged_roster,
    write_no_bank_roster,
    write_split_exports,
    write_summary_workbook,
)
from .session import ReconcileSession
from .visualization.split_visualization import (
    build_split_summary,
    format_currency,
    plot_split_summary,
)


logger = logging.getLogger(__name__)


def _parse_date(value: str) -> date:
    try:
        return date.fromisoformat(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"Invalid date (expected YYYY-MM-DD): {value}") from exc


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="payroll-merge",
        description="Reconcile a payroll or pension period extract against its base roster.",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Show debug logging")

    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--base", type=Path, required=True, help="Base roster Excel file")
    common.add_argument(
        "--date",
        type=_parse_date,
        default=None,
        help="Processing date (YYYY-MM-DD); defaults to today",
    )
    common.add_argument(
        "--output-dir",
        type=Path,
        default=REPORTS_OUTPUTS_DIR,
        help="Destination directory for the Excel outputs",
    )
    common.add_argument(
        "--plot",
        action="store_true",
        help=f"Also save a bucket totals chart under {REPORTS_FIGURES_DIR}",
    )

    sub = parser.add_subparsers(dest="flow", required=True)

    nominas = sub.add_parser("nominas", parents=[common], help="Payroll (RFC-keyed)")
    nominas.add_argument("--nuevo", type=Path, required=True, help="New payroll extract")
    nominas.add_argument("--efectivo", type=Path, default=None, help="Cash payments file")
    nominas.add_argument(
        "--split-by-project",
        action="store_true",
        help="Split first into JARDIN / OTROS by project code",
    )

    pensiones = sub.add_parser("pensiones", parents=[common], help="Pensions (name-keyed)")
    pensiones.add_argument("--quincenal", type=Path, required=True, help="Quincenal pension extract")
    pensiones.add_argument("--modalidad", type=Path, default=None, help="RFC -> modality table")

    return parser


def _load_session(args: argparse.Namespace) -> ReconcileSession:
    if args.flow == "nominas":
        session = ReconcileSession.for_payroll(by_project=args.split_by_project)
        session = session.load("period", args.nuevo).load("base", args.base)
        if args.efectivo is not None:
            session = session.load("side", args.efectivo)
    else:
        session = ReconcileSession.for_pensions()
        session = session.load("period", args.quincenal).load("base", args.base)
        if args.modalidad is not None:
            session = session.load("modality", args.modalidad)
    return session


def run(args: argparse.Namespace) -> ReconcileSession:
    """Load, merge, split and write every output; returns the final session."""
    today = args.date or date.today()
    out_dir = Path(args.output_dir)

    session = _load_session(args).merge()
    if session.result is None:
        raise PayrollMergeError("Nothing to merge: the period or base file has no rows.")
    session = session.split()
    result = session.result

    counts = result.summary()
    print(f"Altas: {counts['additions']}")
    print(f"Bajas: {counts['removals']}")
    print(f"Total registros: {counts['total']}")
    print(f"Sin cuenta: {counts['no_bank']}")

    print(f"Resumen escrito en: {write_summary_workbook(result, out_dir, today)}")
    print(f"Archivo fusionado escrito en: {write_merged_roster(result, out_dir, today)}")
    try:
        print(f"Archivo sin cuenta escrito en: {write_no_bank_roster(result, out_dir, today)}")
    except EmptyResultError:
        logger.info("No rows without account; file not written.")

    summary = build_split_summary(session.split_tree, result.policy.amount_column)
    for row in summary.itertuples(index=False):
        print(f"  {row.bucket}: {row.count} registros, {format_currency(row.total)}")

    for path in write_split_exports(session.bank_exports(today), out_dir):
        print(f"Archivo bancario escrito en: {path}")

    if args.plot:
        fig, _ = plot_split_summary(summary)
        figure_path = REPORTS_FIGURES_DIR / f"Totales_{result.policy.name}_{today:%Y%m%d}.png"
        figure_path.parent.mkdir(parents=True, exist_ok=True)
        fig.savefig(figure_path, bbox_inches="tight")
        print(f"Grafica escrita en: {figure_path}")

    return session


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = _build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    try:
        run(args)
    except (PayrollMergeError, FileNotFoundError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
