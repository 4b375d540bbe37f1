"""Selectors for the finance kernel (read side)."""

from finance_kernel.selectors.ledger_selector import (
    AccountRow,
    LedgerSelector,
    PostingRow,
)

__all__ = [
    "LedgerSelector",
    "AccountRow",
    "PostingRow",
]
