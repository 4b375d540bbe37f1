"""
Financial Reporting Domain Models (``finance_modules.reporting.models``).

Responsibility
--------------
Value objects flowing through one report run: the read-only inputs
(``Posting``, ``AccountMeta``, ``DateRange``), the per-run aggregation tree
(``AccountTreeNode`` with its ``ValueMap``), the linearized view
(``AccountListNode``) and the rendering output (``Cell``, ``ReportRow``,
``ReportColumn``).

Architecture position
---------------------
**Modules layer** -- pure data definitions with ZERO I/O.  No dependency on
the database, selectors, or services.

Invariants enforced
-------------------
* Inputs and outputs are ``frozen=True`` (immutable after construction).
* ``AccountTreeNode`` is the only mutable type; it lives for exactly one
  report run and each child is owned by exactly one parent.
* All monetary fields use ``Decimal`` -- NEVER ``float``.

Failure modes
-------------
* Construction with invalid enum values raises ``ValueError``.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from enum import Enum

ZERO = Decimal("0")


# =========================================================================
# Enums
# =========================================================================


class RootType(str, Enum):
    """Top-level account classification."""

    ASSET = "Asset"
    LIABILITY = "Liability"
    EQUITY = "Equity"
    INCOME = "Income"
    EXPENSE = "Expense"

    @property
    def is_credit_normal(self) -> bool:
        """Income, Equity and Liability balances grow with credits."""
        return self in (RootType.LIABILITY, RootType.EQUITY, RootType.INCOME)


class Periodicity(str, Enum):
    """Width of one generated reporting period."""

    MONTHLY = "Monthly"
    QUARTERLY = "Quarterly"
    HALF_YEARLY = "Half Yearly"
    YEARLY = "Yearly"

    @property
    def months(self) -> int:
        return _PERIODICITY_MONTHS[self]


_PERIODICITY_MONTHS = {
    Periodicity.MONTHLY: 1,
    Periodicity.QUARTERLY: 3,
    Periodicity.HALF_YEARLY: 6,
    Periodicity.YEARLY: 12,
}


class CellColor(str, Enum):
    """Sign indicator the engine attaches to derived cells."""

    POSITIVE = "green"
    NEGATIVE = "red"


# =========================================================================
# Inputs (read-only snapshots from the ledger query adapter)
# =========================================================================


@dataclass(frozen=True)
class Posting:
    """A single ledger posting against a leaf account."""

    account_id: str
    posting_date: date
    debit: Decimal = ZERO
    credit: Decimal = ZERO


@dataclass(frozen=True)
class AccountMeta:
    """Chart-of-accounts entry: identity, parent edge and classification."""

    account_id: str
    name: str
    root_type: RootType
    parent_id: str | None = None
    is_group: bool = False


@dataclass(frozen=True)
class DateRange:
    """
    One reporting period, half-open: ``[start, end)``.

    ``start=None`` makes the range cumulative (everything before ``end``),
    which point-in-time statements such as the balance sheet use.
    """

    key: str
    label: str
    start: date | None
    end: date

    def contains(self, day: date) -> bool:
        if self.start is not None and day < self.start:
            return False
        return day < self.end


# =========================================================================
# Aggregation
# =========================================================================


@dataclass(frozen=True)
class PeriodBalance:
    """Aggregated value for one period key."""

    balance: Decimal = ZERO


# Ordered period key -> balance. Insertion order is column order.
ValueMap = dict[str, PeriodBalance]


def balance_at(value_map: Mapping[str, PeriodBalance], key: str) -> Decimal:
    """Balance stored under ``key``; an absent key means zero."""
    entry = value_map.get(key)
    return entry.balance if entry is not None else ZERO


@dataclass
class AccountTreeNode:
    """
    One account (leaf or group) of the hierarchy for a single report run.

    ``level`` is the depth below the report-local root (root = 0).
    ``has_postings`` is true when at least one posting inside the
    requested ranges landed in this node's subtree.
    """

    account_id: str
    name: str
    root_type: RootType
    level: int = 0
    is_group: bool = False
    value_map: ValueMap = field(default_factory=dict)
    children: list[AccountTreeNode] = field(default_factory=list)
    has_postings: bool = False

    @property
    def is_leaf(self) -> bool:
        return not self.children

    def walk(self) -> Iterator[AccountTreeNode]:
        """Pre-order traversal of this subtree."""
        stack = [self]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.children))

    def __repr__(self) -> str:
        return f"<AccountTreeNode {self.account_id} L{self.level} children={len(self.children)}>"


@dataclass(frozen=True)
class AccountListNode:
    """Flattened view of a tree node: no children, only visit order matters."""

    name: str
    level: int
    value_map: Mapping[str, PeriodBalance]
    is_group: bool = False


# =========================================================================
# Rendering output
# =========================================================================


@dataclass(frozen=True)
class Cell:
    """A single rendered cell. The renderer displays, never recomputes."""

    raw_value: Decimal | str
    display_value: str
    bold: bool = False
    color: CellColor | None = None
    indent: int = 0
    align: str = "left"


@dataclass(frozen=True)
class ReportRow:
    """An ordered sequence of cells plus the structural flags of its node."""

    cells: tuple[Cell, ...]
    level: int = 0
    is_group: bool = False
    is_empty: bool = False


# Ordered rows handed to the rendering layer.
ReportData = tuple[ReportRow, ...]


@dataclass(frozen=True)
class ReportColumn:
    """Column heading for the rendering layer."""

    label: str
    fieldname: str
    align: str = "right"
    currency: str | None = None
