#!/usr/bin/env python3
"""
View account reports from persisted database data.

Connects to the database (assumes tables and data already exist --
run seed_data.py first) and prints the Profit & Loss statement, the
Balance Sheet, or both, as plain-text tables.

Usage:
    python3 scripts/view_reports.py
    python3 scripts/view_reports.py --report profit-and-loss \\
        --to-date 2024-12-31 --periodicity Quarterly --count 4
    python3 scripts/view_reports.py --config reporting.yaml --json
"""

import argparse
import json
import logging
import sys
from pathlib import Path

# ---------------------------------------------------------------------------
# Project root on sys.path
# ---------------------------------------------------------------------------
ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(ROOT))

# ---------------------------------------------------------------------------
# Constants (must match seed_data.py)
# ---------------------------------------------------------------------------
DB_URL = "sqlite:///finance_reports.db"
REPORT_CHOICES = ("profit-and-loss", "balance-sheet", "all")
NAME_WIDTH = 36
AMOUNT_WIDTH = 16


def format_report(title: str, columns, rows) -> str:
    """Render one report as a fixed-width text table."""
    lines = []
    width = NAME_WIDTH + AMOUNT_WIDTH * (len(columns) - 1)
    lines.append("=" * width)
    lines.append(title.center(width))
    lines.append("=" * width)

    header = columns[0].label.ljust(NAME_WIDTH)
    header += "".join(c.label.rjust(AMOUNT_WIDTH) for c in columns[1:])
    lines.append(header)
    lines.append("-" * width)

    for row in rows:
        if row.is_empty:
            lines.append("")
            continue
        name_cell, *value_cells = row.cells
        name = "  " * name_cell.indent + name_cell.display_value
        text = name[:NAME_WIDTH].ljust(NAME_WIDTH)
        for cell in value_cells:
            value = cell.display_value
            if cell.color is not None:
                value = f"{value} ({cell.color.value})"
            text += value.rjust(AMOUNT_WIDTH)
        lines.append(text.rstrip())

    if not rows:
        lines.append("  (no postings in the selected periods)")
    lines.append("")
    return "\n".join(lines)


def main() -> int:
    parser = argparse.ArgumentParser(
        description="Print account reports aggregated from ledger postings.",
    )
    parser.add_argument(
        "--db-url", type=str, default=DB_URL,
        help=f"Database URL (default: {DB_URL})",
    )
    parser.add_argument(
        "--report", choices=REPORT_CHOICES, default="all",
        help="Which report to print (default: all)",
    )
    parser.add_argument(
        "--config", type=str, default=None,
        help="YAML file with reporting settings",
    )
    parser.add_argument("--to-date", type=str, default=None, help="Last day (YYYY-MM-DD)")
    parser.add_argument(
        "--periodicity", type=str, default=None,
        help="Monthly, Quarterly, Half Yearly or Yearly",
    )
    parser.add_argument("--count", type=int, default=None, help="Number of periods")
    parser.add_argument(
        "--consolidate", action="store_true",
        help="Fold all periods into a single Total column",
    )
    parser.add_argument(
        "--hide-group-amounts", action="store_true",
        help="Blank the amounts of group accounts",
    )
    parser.add_argument(
        "--include-reverted", action="store_true",
        help="Include postings that were later reverted",
    )
    parser.add_argument(
        "--json", action="store_true",
        help="Output the report rows as JSON",
    )
    args = parser.parse_args()

    logging.disable(logging.CRITICAL)

    from finance_kernel.db.engine import get_session, init_engine_from_url
    from finance_kernel.exceptions import FinanceKernelError
    from finance_kernel.models import Account
    from finance_modules.reporting import (
        AccountReport,
        BalanceSheet,
        ProfitAndLoss,
        ReportingConfig,
        SqlLedgerAdapter,
        render_to_dict,
    )

    config = (
        ReportingConfig.from_yaml(args.config) if args.config
        else ReportingConfig.with_defaults()
    )
    overrides = {
        "to_date": args.to_date,
        "periodicity": args.periodicity,
        "period_count": args.count,
    }
    updates = {k: v for k, v in overrides.items() if v is not None}
    if args.consolidate:
        updates["consolidate_columns"] = True
    if args.hide_group_amounts:
        updates["hide_group_amounts"] = True
    if args.include_reverted:
        updates["include_reverted"] = True
    try:
        config = ReportingConfig.from_dict({**vars(config), **updates})
    except ValueError as exc:
        print(f"  ERROR: {exc}", file=sys.stderr)
        return 2

    # -----------------------------------------------------------------
    # Connect
    # -----------------------------------------------------------------
    try:
        init_engine_from_url(args.db_url, echo=False)
    except Exception as exc:
        print(f"  ERROR: Could not connect: {exc}", file=sys.stderr)
        return 1

    session = get_session()

    try:
        if session.query(Account).count() == 0:
            print("  No accounts found. Run seed_data.py first.", file=sys.stderr)
            return 1

        assemblers = {
            "profit-and-loss": ProfitAndLoss(),
            "balance-sheet": BalanceSheet(),
        }
        wanted = assemblers if args.report == "all" else {args.report: assemblers[args.report]}

        adapter = SqlLedgerAdapter(session)
        output = {}
        for name, assembler in wanted.items():
            report = AccountReport(assembler, adapter, config=config)
            try:
                report.set_report_data(force=True)
            except FinanceKernelError as exc:
                print(f"  ERROR [{exc.code}]: {exc}", file=sys.stderr)
                return 1

            if args.json:
                output[name] = {
                    "columns": render_to_dict(report.columns),
                    "rows": render_to_dict(report.report_data),
                }
            else:
                print(format_report(
                    f"{assembler.title} -- {config.entity_name} ({config.default_currency})",
                    report.columns,
                    report.report_data,
                ))

        if args.json:
            print(json.dumps(output, indent=2))
        return 0

    finally:
        session.close()


if __name__ == "__main__":
    sys.exit(main())
