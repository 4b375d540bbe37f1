"""
Pytest fixtures for the account report test suite.

Provides:
- Structured logging configured once per session, with per-test capture
- In-memory SQLite engine and session per test (fresh schema each time)
- Deterministic clock
- Account and posting factory fixtures for the ledger tables
"""

import json
import logging
from datetime import date
from decimal import Decimal
from io import StringIO
from typing import Generator

import pytest
from sqlalchemy.orm import Session

from finance_kernel.db.engine import (
    create_tables,
    get_session,
    init_engine_from_url,
    reset_engine,
)
from finance_kernel.domain.clock import DeterministicClock
from finance_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    reset_logging,
)
from finance_kernel.models import Account, LedgerPosting


# =============================================================================
# Logging fixtures
# =============================================================================


@pytest.fixture(autouse=True, scope="session")
def _configure_test_logging():
    """Configure structured logging for the test suite."""
    reset_logging()
    configure_logging(level=logging.DEBUG)
    yield
    reset_logging()


@pytest.fixture(autouse=True)
def _clear_log_context():
    """Clear LogContext between tests to prevent cross-test contamination."""
    LogContext.clear()
    yield
    LogContext.clear()


@pytest.fixture
def captured_logs():
    """
    Capture finance_kernel logs as parsed JSON dicts.

    Usage::

        def test_something(captured_logs, report):
            report.set_report_data(force=True)
            logs = captured_logs()
            assert any(r["message"] == "report_run_completed" for r in logs)
    """
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    root = logging.getLogger("finance_kernel")
    previous_level = root.level
    root.setLevel(logging.DEBUG)
    root.addHandler(handler)

    def _get_records() -> list[dict]:
        lines = stream.getvalue().strip().split("\n")
        return [json.loads(line) for line in lines if line]

    yield _get_records

    root.removeHandler(handler)
    root.setLevel(previous_level)


# =============================================================================
# Database fixtures
# =============================================================================


@pytest.fixture(scope="function")
def db_engine():
    """Fresh in-memory SQLite engine with the ledger schema."""
    eng = init_engine_from_url("sqlite://", echo=False)
    create_tables()
    yield eng
    reset_engine()


@pytest.fixture(scope="function")
def session(db_engine) -> Generator[Session, None, None]:
    """Provide a database session for testing; the engine dies with the test."""
    sess = get_session()
    yield sess
    sess.close()


# Clock fixtures


@pytest.fixture
def deterministic_clock():
    """Provide a deterministic clock for testing."""
    return DeterministicClock()


# Test data generators


@pytest.fixture
def create_account(session: Session):
    """Factory fixture to create chart-of-accounts rows."""

    def _create_account(
        name: str,
        root_type: str,
        parent: Account | None = None,
        is_group: bool = False,
        sort_order: int = 0,
    ) -> Account:
        account = Account(
            name=name,
            root_type=root_type,
            parent_id=parent.id if parent is not None else None,
            is_group=is_group,
            sort_order=sort_order,
        )
        session.add(account)
        session.flush()
        return account

    return _create_account


@pytest.fixture
def create_posting(session: Session):
    """Factory fixture to create ledger postings."""

    def _create_posting(
        account: Account,
        posting_date: date,
        debit: Decimal | str = "0",
        credit: Decimal | str = "0",
        reverted: bool = False,
    ) -> LedgerPosting:
        posting = LedgerPosting(
            account_id=account.id,
            posting_date=posting_date,
            debit=Decimal(debit),
            credit=Decimal(credit),
            reverted=reverted,
        )
        session.add(posting)
        session.flush()
        return posting

    return _create_posting
