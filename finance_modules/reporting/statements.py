"""
Statement assemblers: aggregated trees in, ordered report rows out.

These functions transform per-root-type account trees into the row layout
of a concrete financial statement. ZERO I/O. ZERO side effects.

Every statement implements the narrow ``ReportAssembler`` capability:

- ``root_types``: which root account types participate, in order
- ``cumulative``: whether columns are "as of" balances (no period start)
- ``assemble_rows(trees, ctx)``: the final ``ReportData``

The shared pipeline (grouping, tree building, aggregation, flattening)
lives in the sibling modules; a statement only decides which roots to show,
in what order, and which synthetic rows surround them.
"""

from __future__ import annotations

import dataclasses
import operator
from collections.abc import Mapping
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import ClassVar, Protocol, runtime_checkable

from finance_modules.reporting.models import (
    AccountTreeNode,
    ReportData,
    RootType,
)
from finance_modules.reporting.rows import (
    RowContext,
    derive_value_map,
    flatten_tree,
    get_derived_row,
    get_empty_row,
    get_total_row,
)


@runtime_checkable
class ReportAssembler(Protocol):
    """Capability every concrete statement provides."""

    report_name: str
    title: str
    cumulative: bool

    @property
    def root_types(self) -> tuple[RootType, ...]: ...

    def assemble_rows(
        self,
        trees: Mapping[RootType, AccountTreeNode],
        ctx: RowContext,
    ) -> ReportData: ...


def select_roots(
    trees: Mapping[RootType, AccountTreeNode],
    root_types: tuple[RootType, ...],
) -> dict[RootType, AccountTreeNode]:
    """
    Keep the requested root types that actually received postings.

    Result follows ``root_types`` order.  A root whose subtree saw no
    posting inside the requested ranges is treated as absent.
    """
    return {
        rt: trees[rt]
        for rt in root_types
        if rt in trees and trees[rt].has_postings
    }


# =========================================================================
# 1. PROFIT AND LOSS
# =========================================================================


class ProfitAndLoss:
    """
    Profit & Loss statement.

    Both sides are positive under normal activity; profit is
    ``income - expense`` per period, colored by sign.
    """

    report_name: ClassVar[str] = "profit-and-loss"
    title: ClassVar[str] = "Profit And Loss"
    cumulative: ClassVar[bool] = False

    TOTAL_INCOME_LABEL: ClassVar[str] = "Total Income (Credit)"
    TOTAL_EXPENSE_LABEL: ClassVar[str] = "Total Expense (Debit)"
    TOTAL_PROFIT_LABEL: ClassVar[str] = "Total Profit"

    @property
    def root_types(self) -> tuple[RootType, ...]:
        return (RootType.INCOME, RootType.EXPENSE)

    def assemble_rows(
        self,
        trees: Mapping[RootType, AccountTreeNode],
        ctx: RowContext,
    ) -> ReportData:
        roots = select_roots(trees, self.root_types)
        income_root = roots.get(RootType.INCOME)
        expense_root = roots.get(RootType.EXPENSE)

        if income_root is not None and expense_root is None:
            return self._single_side_rows(income_root, self.TOTAL_INCOME_LABEL, ctx)
        if expense_root is not None and income_root is None:
            return self._single_side_rows(expense_root, self.TOTAL_EXPENSE_LABEL, ctx)
        if income_root is None or expense_root is None:
            return ()

        profit = derive_value_map(
            income_root.value_map, expense_root.value_map, operator.sub,
        )
        empty = get_empty_row(ctx)
        return (
            flatten_tree(income_root, ctx)
            + (get_total_row(income_root, self.TOTAL_INCOME_LABEL, ctx), empty)
            + flatten_tree(expense_root, ctx)
            + (get_total_row(expense_root, self.TOTAL_EXPENSE_LABEL, ctx), empty)
            + (get_derived_row(self.TOTAL_PROFIT_LABEL, profit, ctx),)
        )

    @staticmethod
    def _single_side_rows(
        root: AccountTreeNode,
        label: str,
        ctx: RowContext,
    ) -> ReportData:
        return flatten_tree(root, ctx) + (get_total_row(root, label, ctx),)


# =========================================================================
# 2. BALANCE SHEET
# =========================================================================


class BalanceSheet:
    """
    Balance sheet: cumulative balances of Asset, Liability and Equity.

    Each present root contributes its rows, a total row and a separator;
    a closing row sums liability and equity.
    """

    report_name: ClassVar[str] = "balance-sheet"
    title: ClassVar[str] = "Balance Sheet"
    cumulative: ClassVar[bool] = True

    TOTAL_LABELS: ClassVar[dict[RootType, str]] = {
        RootType.ASSET: "Total Asset (Debit)",
        RootType.LIABILITY: "Total Liability (Credit)",
        RootType.EQUITY: "Total Equity (Credit)",
    }
    TOTAL_LIABILITY_AND_EQUITY_LABEL: ClassVar[str] = "Total Liability and Equity"

    @property
    def root_types(self) -> tuple[RootType, ...]:
        return (RootType.ASSET, RootType.LIABILITY, RootType.EQUITY)

    def assemble_rows(
        self,
        trees: Mapping[RootType, AccountTreeNode],
        ctx: RowContext,
    ) -> ReportData:
        roots = select_roots(trees, self.root_types)
        if not roots:
            return ()

        empty = get_empty_row(ctx)
        rows: ReportData = ()
        for root_type, root in roots.items():
            rows += flatten_tree(root, ctx)
            rows += (get_total_row(root, self.TOTAL_LABELS[root_type], ctx), empty)

        liability = roots.get(RootType.LIABILITY)
        equity = roots.get(RootType.EQUITY)
        if liability is None and equity is None:
            return rows[:-1]

        combined = derive_value_map(
            liability.value_map if liability is not None else {},
            equity.value_map if equity is not None else {},
            operator.add,
        )
        return rows + (
            get_derived_row(
                self.TOTAL_LIABILITY_AND_EQUITY_LABEL,
                combined,
                ctx,
                color_by_sign=False,
            ),
        )


# =========================================================================
# 3. RENDERER (dict/JSON output)
# =========================================================================


def render_to_dict(obj: object) -> dict | list | str | int | float | bool | None:
    """
    Convert any report value object to plain data for JSON serialization.

    Handles:
    - Decimal -> str (preserving precision)
    - date -> ISO format string
    - Enum -> .value
    - Nested frozen dataclasses -> nested dicts
    - Tuples -> lists
    - None preserved
    """
    if obj is None:
        return None
    if isinstance(obj, Decimal):
        return str(obj)
    if isinstance(obj, date):
        return obj.isoformat()
    if isinstance(obj, Enum):
        return obj.value
    if isinstance(obj, (list, tuple)):
        return [render_to_dict(item) for item in obj]
    if isinstance(obj, Mapping):
        return {str(k): render_to_dict(v) for k, v in obj.items()}
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        return {
            f.name: render_to_dict(getattr(obj, f.name))
            for f in dataclasses.fields(obj)
        }
    if isinstance(obj, (str, int, float, bool)):
        return obj
    return str(obj)
