"""
Reporting-specific test fixtures.

Provides:
- Factories for account metas, postings and date ranges (no DB required)
- A standard chart of accounts covering every root type
- InMemoryLedgerAdapter and AccountReport instances wired to that chart
"""

from datetime import date
from decimal import Decimal

import pytest

from finance_modules.reporting.adapters import InMemoryLedgerAdapter
from finance_modules.reporting.config import ReportingConfig
from finance_modules.reporting.models import (
    AccountMeta,
    DateRange,
    Posting,
    RootType,
)
from finance_modules.reporting.rows import RowContext
from finance_modules.reporting.service import AccountReport
from finance_modules.reporting.statements import BalanceSheet, ProfitAndLoss

# =========================================================================
# Synthetic data factories (pure, no DB)
# =========================================================================


def make_meta(
    account_id: str,
    root_type: RootType,
    parent_id: str | None = None,
    is_group: bool = False,
    name: str | None = None,
) -> AccountMeta:
    """Factory for AccountMeta; the name defaults to a title-cased id."""
    return AccountMeta(
        account_id=account_id,
        name=name or account_id.replace("_", " ").title(),
        root_type=root_type,
        parent_id=parent_id,
        is_group=is_group,
    )


def make_posting(
    account_id: str,
    posting_date: date,
    debit: str | int = "0",
    credit: str | int = "0",
) -> Posting:
    return Posting(
        account_id=account_id,
        posting_date=posting_date,
        debit=Decimal(str(debit)),
        credit=Decimal(str(credit)),
    )


def year_range(year: int, cumulative: bool = False) -> DateRange:
    """Calendar-year range keyed by the year, e.g. ``"2024"``."""
    return DateRange(
        key=str(year),
        label=str(year),
        start=None if cumulative else date(year, 1, 1),
        end=date(year + 1, 1, 1),
    )


def month_range(year: int, month: int) -> DateRange:
    start = date(year, month, 1)
    end = date(year + 1, 1, 1) if month == 12 else date(year, month + 1, 1)
    label = start.strftime("%b %Y")
    return DateRange(key=label, label=label, start=start, end=end)


def row_names(rows) -> list[str]:
    """Name-cell display values, one per row ("" for separators)."""
    return [row.cells[0].display_value for row in rows]


def row_amounts(row) -> list[Decimal | str]:
    """Raw values of a row's amount cells."""
    return [cell.raw_value for cell in row.cells[1:]]


# =========================================================================
# Standard chart of accounts
# =========================================================================

#   Income (group)              Expenses (group)
#   +-- Sales                   +-- Operating (group)
#   +-- Services                |   +-- Rent
#                               |   +-- Utilities
#                               +-- Cost Of Goods
#   Assets (group)              Liabilities (group)     Equity (group)
#   +-- Cash                    +-- Payables            +-- Capital
#   +-- Receivables
STANDARD_CHART: tuple[AccountMeta, ...] = (
    make_meta("assets", RootType.ASSET, is_group=True),
    make_meta("cash", RootType.ASSET, "assets"),
    make_meta("receivables", RootType.ASSET, "assets"),
    make_meta("liabilities", RootType.LIABILITY, is_group=True),
    make_meta("payables", RootType.LIABILITY, "liabilities"),
    make_meta("equity", RootType.EQUITY, is_group=True),
    make_meta("capital", RootType.EQUITY, "equity"),
    make_meta("income", RootType.INCOME, is_group=True),
    make_meta("sales", RootType.INCOME, "income"),
    make_meta("services", RootType.INCOME, "income"),
    make_meta("expenses", RootType.EXPENSE, is_group=True),
    make_meta("operating", RootType.EXPENSE, "expenses", is_group=True),
    make_meta("rent", RootType.EXPENSE, "operating"),
    make_meta("utilities", RootType.EXPENSE, "operating"),
    make_meta("cost_of_goods", RootType.EXPENSE, "expenses"),
)


@pytest.fixture
def standard_chart() -> tuple[AccountMeta, ...]:
    return STANDARD_CHART


@pytest.fixture
def sample_postings() -> tuple[Posting, ...]:
    """A balanced year of activity across every root type (2024)."""
    return (
        make_posting("cash", date(2024, 1, 2), debit=5000),
        make_posting("capital", date(2024, 1, 2), credit=5000),
        make_posting("rent", date(2024, 1, 15), debit=400),
        make_posting("cash", date(2024, 1, 15), credit=400),
        make_posting("receivables", date(2024, 3, 10), debit=1000),
        make_posting("sales", date(2024, 3, 10), credit=1000),
        make_posting("utilities", date(2024, 6, 30), debit=50),
        make_posting("payables", date(2024, 6, 30), credit=50),
        make_posting("cash", date(2024, 9, 1), debit=250),
        make_posting("services", date(2024, 9, 1), credit=250),
        make_posting("cost_of_goods", date(2024, 11, 20), debit=300),
        make_posting("cash", date(2024, 11, 20), credit=300),
    )


@pytest.fixture
def ctx_2024() -> RowContext:
    return RowContext(period_keys=("2024",))


@pytest.fixture
def yearly_config() -> ReportingConfig:
    """One calendar-year column ending 2024-12-31."""
    return ReportingConfig(
        entity_name="Test Company",
        periodicity="Yearly",
        period_count=1,
        to_date=date(2024, 12, 31),
    )


@pytest.fixture
def ledger_adapter(standard_chart, sample_postings) -> InMemoryLedgerAdapter:
    return InMemoryLedgerAdapter(standard_chart, sample_postings)


@pytest.fixture
def pl_report(ledger_adapter, yearly_config, deterministic_clock) -> AccountReport:
    """Profit & Loss runner over the standard chart."""
    return AccountReport(
        ProfitAndLoss(),
        ledger_adapter,
        config=yearly_config,
        clock=deterministic_clock,
    )


@pytest.fixture
def bs_report(ledger_adapter, yearly_config, deterministic_clock) -> AccountReport:
    """Balance Sheet runner over the standard chart."""
    return AccountReport(
        BalanceSheet(),
        ledger_adapter,
        config=yearly_config,
        clock=deterministic_clock,
    )
