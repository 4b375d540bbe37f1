"""
Financial Reporting Module (``finance_modules.reporting``).

Responsibility
--------------
Read-only engine that turns flat ledger postings into hierarchical,
date-bucketed, totaled statements: build the account tree from parent
references, bucket balances into periods, sum them bottom-up, and flatten
the tree into indented rows with total and derived rows (Profit & Loss,
Balance Sheet).

Architecture position
---------------------
**Modules layer** -- pure pipeline (``periods``, ``hierarchy``,
``aggregation``, ``rows``, ``statements``) plus one stateful runner
(``service.AccountReport``).  Storage is reached only through a
``LedgerQueryAdapter``.

Invariants enforced
-------------------
* Every group node's balance equals the sum of its children, per period.
* Period keys keep the caller's range order; siblings keep chart order.
* Same inputs always produce the same rows.

Failure modes
-------------
* Malformed chart of accounts -> ``HierarchyIntegrityError``.
* Adapter failure -> ``DataFetchError``.
* No postings -> empty ``ReportData`` (not an error).
"""

from finance_modules.reporting.adapters import (
    InMemoryLedgerAdapter,
    LedgerQueryAdapter,
    SqlLedgerAdapter,
)
from finance_modules.reporting.config import ReportingConfig
from finance_modules.reporting.models import (
    AccountListNode,
    AccountMeta,
    AccountTreeNode,
    Cell,
    CellColor,
    DateRange,
    PeriodBalance,
    Periodicity,
    Posting,
    ReportColumn,
    ReportData,
    ReportRow,
    RootType,
    ValueMap,
)
from finance_modules.reporting.service import (
    HIDE_GROUP_AMOUNTS,
    AccountReport,
    ReportState,
)
from finance_modules.reporting.statements import (
    BalanceSheet,
    ProfitAndLoss,
    ReportAssembler,
    render_to_dict,
)

__all__ = [
    # Service
    "AccountReport",
    "ReportState",
    "HIDE_GROUP_AMOUNTS",
    # Statements
    "ReportAssembler",
    "ProfitAndLoss",
    "BalanceSheet",
    "render_to_dict",
    # Adapters
    "LedgerQueryAdapter",
    "InMemoryLedgerAdapter",
    "SqlLedgerAdapter",
    # Config
    "ReportingConfig",
    # Models
    "RootType",
    "Periodicity",
    "CellColor",
    "Posting",
    "AccountMeta",
    "DateRange",
    "PeriodBalance",
    "ValueMap",
    "AccountTreeNode",
    "AccountListNode",
    "Cell",
    "ReportRow",
    "ReportData",
    "ReportColumn",
]
