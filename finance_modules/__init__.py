"""
Finance Modules.

Thin orchestration layers over the Finance Kernel.

Modules:
- Reporting: account-hierarchy reports (Profit & Loss, Balance Sheet)
  aggregated from raw ledger postings
"""

from finance_modules import reporting

__all__ = [
    "reporting",
]
