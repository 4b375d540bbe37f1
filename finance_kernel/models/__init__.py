"""ORM models for the finance kernel."""

from finance_kernel.models.account import Account
from finance_kernel.models.ledger import LedgerPosting

__all__ = [
    "Account",
    "LedgerPosting",
]
