#!/usr/bin/env python3
"""
Seed the database with a small chart of accounts and a year of postings.

Drops all tables, recreates them, creates a grouped chart of accounts for
every root type, posts a set of balanced business transactions across
2024 (one of them later reverted), and commits.

Usage:
    python3 scripts/seed_data.py
    python3 scripts/seed_data.py --db-url sqlite:///books.db
"""

import argparse
import logging
import sys
from datetime import date
from decimal import Decimal
from pathlib import Path

# ---------------------------------------------------------------------------
# Project root on sys.path
# ---------------------------------------------------------------------------
ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(ROOT))

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------
DB_URL = "sqlite:///finance_reports.db"

# (name, root_type, parent name, is_group)
CHART = [
    ("Assets", "Asset", None, True),
    ("Current Assets", "Asset", "Assets", True),
    ("Cash", "Asset", "Current Assets", False),
    ("Accounts Receivable", "Asset", "Current Assets", False),
    ("Liabilities", "Liability", None, True),
    ("Accounts Payable", "Liability", "Liabilities", False),
    ("Equity", "Equity", None, True),
    ("Owner Capital", "Equity", "Equity", False),
    ("Income", "Income", None, True),
    ("Sales", "Income", "Income", False),
    ("Service Revenue", "Income", "Income", False),
    ("Expenses", "Expense", None, True),
    ("Operating Expenses", "Expense", "Expenses", True),
    ("Rent", "Expense", "Operating Expenses", False),
    ("Utilities", "Expense", "Operating Expenses", False),
    ("Cost of Goods Sold", "Expense", "Expenses", False),
]

# (date, debit account, credit account, amount, reverted)
TRANSACTIONS = [
    (date(2024, 1, 2), "Cash", "Owner Capital", Decimal("50000.00"), False),
    (date(2024, 1, 15), "Rent", "Cash", Decimal("2000.00"), False),
    (date(2024, 2, 10), "Accounts Receivable", "Sales", Decimal("12500.00"), False),
    (date(2024, 2, 28), "Utilities", "Accounts Payable", Decimal("430.25"), False),
    (date(2024, 4, 3), "Cash", "Service Revenue", Decimal("3200.00"), False),
    (date(2024, 4, 20), "Cost of Goods Sold", "Cash", Decimal("6100.00"), False),
    (date(2024, 7, 1), "Cash", "Accounts Receivable", Decimal("12500.00"), False),
    (date(2024, 9, 12), "Rent", "Cash", Decimal("2000.00"), False),
    (date(2024, 10, 5), "Cash", "Sales", Decimal("9000.00"), True),
    (date(2024, 11, 30), "Accounts Payable", "Cash", Decimal("430.25"), False),
    (date(2024, 12, 18), "Cash", "Sales", Decimal("7400.00"), False),
]


def main() -> int:
    parser = argparse.ArgumentParser(
        description="Seed a demo chart of accounts and ledger postings.",
    )
    parser.add_argument(
        "--db-url", type=str, default=DB_URL,
        help=f"Database URL (default: {DB_URL})",
    )
    args = parser.parse_args()

    logging.disable(logging.CRITICAL)

    from finance_kernel.db.engine import (
        create_tables,
        drop_tables,
        init_engine_from_url,
        session_scope,
    )
    from finance_kernel.models import Account, LedgerPosting

    print()
    print("  [1/4] Connecting...")
    try:
        init_engine_from_url(args.db_url, echo=False)
    except Exception as exc:
        print(f"  ERROR: {exc}", file=sys.stderr)
        return 1

    print("  [2/4] Dropping old tables and recreating schema...")
    drop_tables()
    create_tables()

    print(f"  [3/4] Creating chart of accounts ({len(CHART)} accounts)...")
    with session_scope() as session:
        by_name: dict[str, Account] = {}
        for order, (name, root_type, parent, is_group) in enumerate(CHART):
            account = Account(
                name=name,
                root_type=root_type,
                parent_id=by_name[parent].id if parent else None,
                is_group=is_group,
                sort_order=order,
            )
            session.add(account)
            session.flush()
            by_name[name] = account

        print(f"  [4/4] Posting {len(TRANSACTIONS)} business transactions...")
        for posting_date, debit_name, credit_name, amount, reverted in TRANSACTIONS:
            session.add(LedgerPosting(
                account_id=by_name[debit_name].id,
                posting_date=posting_date,
                debit=amount,
                credit=Decimal("0"),
                reverted=reverted,
            ))
            session.add(LedgerPosting(
                account_id=by_name[credit_name].id,
                posting_date=posting_date,
                debit=Decimal("0"),
                credit=amount,
                reverted=reverted,
            ))

    print()
    print(f"  Done. Database: {args.db_url}")
    print()
    return 0


if __name__ == "__main__":
    sys.exit(main())
