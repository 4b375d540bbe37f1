"""
Typed Exception Hierarchy for the Reporting Kernel.

===============================================================================
WHY TYPED EXCEPTIONS
===============================================================================

Report runs fail for a small number of well-understood reasons: the chart
of accounts handed to the engine is malformed, or the ledger could not be
read. Callers (UI layers, scripts, API handlers) need to tell these apart
without parsing message strings:

  1. Every error has a TYPED exception class (catch by type, not message)
  2. Every exception has a CODE attribute (machine-readable, API-safe)
  3. Exceptions carry structured DATA (not just a message string)

Example - WRONG way to handle errors:
    try:
        report.set_report_data(force=True)
    except Exception as e:
        if "cycle" in str(e):  # FRAGILE - message might change
            show_chart_error()

Example - RIGHT way (what this module enables):
    try:
        report.set_report_data(force=True)
    except AccountCycleError as e:
        show_chart_error(accounts=e.account_ids)
    except DataFetchError as e:
        show_retry_banner(source=e.source)

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

All exceptions inherit from FinanceKernelError:

    FinanceKernelError (base)
    |
    +-- AccountError
    |   +-- HierarchyIntegrityError
    |       +-- DanglingParentError
    |       +-- AccountCycleError
    |       +-- OrphanPostingError
    |       +-- GroupPostingError
    |
    +-- ReportError
        +-- DataFetchError
        +-- InvalidDateRangeError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category        | Code                        | When Raised
----------------|-----------------------------|-----------------------------------------
Hierarchy       | HIERARCHY_INTEGRITY         | Any malformed account hierarchy
                | DANGLING_PARENT             | parent_id names an unknown account
                | ACCOUNT_CYCLE               | Parent chain loops back on itself
                | ORPHAN_POSTING              | Posting references an unknown account
                | GROUP_POSTING               | Posting made to an account with children
----------------|-----------------------------|-----------------------------------------
Report          | DATA_FETCH_FAILED           | Ledger/account query adapter failed
                | INVALID_DATE_RANGE          | Duplicate period key or empty range

===============================================================================
HANDLING PATTERNS
===============================================================================

1. HIERARCHY ERRORS ARE FATAL TO THE RUN:

    A malformed chart means any totals would be wrong.  The report runner
    aborts, keeps the previously published rows, and re-raises.

2. FETCH ERRORS ARE NOT RETRIED HERE:

    Retry policy belongs to the adapter.  DataFetchError is raised with
    ``raise ... from exc`` so the original driver error stays attached.
"""


class FinanceKernelError(Exception):
    """
    Base exception for all reporting kernel errors.

    All subclasses must have a `code` class attribute for machine-readable
    error identification.
    """

    code: str = "FINANCE_KERNEL_ERROR"


# Account hierarchy exceptions


class AccountError(FinanceKernelError):
    """Base exception for account-related errors."""

    code: str = "ACCOUNT_ERROR"


class HierarchyIntegrityError(AccountError):
    """The account hierarchy handed to the engine is malformed."""

    code: str = "HIERARCHY_INTEGRITY"


class DanglingParentError(HierarchyIntegrityError):
    """Account references a parent that is not part of the snapshot."""

    code: str = "DANGLING_PARENT"

    def __init__(self, account_id: str, parent_id: str):
        self.account_id = account_id
        self.parent_id = parent_id
        super().__init__(
            f"Account {account_id} references unknown parent {parent_id}"
        )


class AccountCycleError(HierarchyIntegrityError):
    """Following parent references from an account loops back on itself."""

    code: str = "ACCOUNT_CYCLE"

    def __init__(self, account_ids: tuple[str, ...]):
        self.account_ids = account_ids
        super().__init__(
            f"Cycle in account hierarchy: {' -> '.join(account_ids)}"
        )


class OrphanPostingError(HierarchyIntegrityError):
    """A ledger posting references an account missing from the snapshot."""

    code: str = "ORPHAN_POSTING"

    def __init__(self, account_id: str):
        self.account_id = account_id
        super().__init__(f"Posting references unknown account {account_id}")


class GroupPostingError(HierarchyIntegrityError):
    """A ledger posting was made against an account that has children."""

    code: str = "GROUP_POSTING"

    def __init__(self, account_id: str):
        self.account_id = account_id
        super().__init__(
            f"Posting made against parent account {account_id}"
        )


# Report run exceptions


class ReportError(FinanceKernelError):
    """Base exception for report run errors."""

    code: str = "REPORT_ERROR"


class DataFetchError(ReportError):
    """
    The ledger or account query adapter failed.

    Raised by adapters with the original driver error chained as
    ``__cause__``.  The report runner propagates it unchanged.
    """

    code: str = "DATA_FETCH_FAILED"

    def __init__(self, source: str, reason: str):
        self.source = source
        self.reason = reason
        super().__init__(f"Failed to fetch {source}: {reason}")


class InvalidDateRangeError(ReportError):
    """A reporting period is empty or its key collides with another."""

    code: str = "INVALID_DATE_RANGE"

    def __init__(self, key: str, reason: str):
        self.key = key
        self.reason = reason
        super().__init__(f"Invalid date range {key!r}: {reason}")
