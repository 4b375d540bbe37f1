"""
Row flattening and synthetic row construction.

Pure functions that linearize an aggregated ``AccountTreeNode`` into
``ReportRow``s (pre-order, one row per node, indented by level) and build
the synthetic rows a statement adds around them: totals, derived metrics
such as profit, and blank separators.

All formatting decisions the renderer must honour (display text, bold,
sign color) are made here and emitted as data.
"""

from __future__ import annotations

import operator
from collections.abc import Callable, Iterable, Mapping, Sequence
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, localcontext

from finance_modules.reporting.aggregation import combine_value_maps
from finance_modules.reporting.models import (
    AccountListNode,
    AccountTreeNode,
    Cell,
    CellColor,
    DateRange,
    PeriodBalance,
    ReportColumn,
    ReportData,
    ReportRow,
    balance_at,
)

ACCOUNT_FIELDNAME = "name"


@dataclass(frozen=True)
class RowContext:
    """What every row of one run needs: active period keys and formatting."""

    period_keys: tuple[str, ...]
    display_precision: int = 2
    hide_group_amounts: bool = False


# =========================================================================
# Formatting
# =========================================================================


def format_amount(value: Decimal, precision: int = 2) -> str:
    """Round half-up to ``precision`` places with thousands separators."""
    quantum = Decimal(1).scaleb(-precision)
    with localcontext() as ctx:
        # Numeric(38, 9) balances exceed the default 28-digit context.
        ctx.prec = max(ctx.prec, value.adjusted() + precision + 2)
        rounded = value.quantize(quantum, rounding=ROUND_HALF_UP)
        if rounded.is_zero():
            rounded = abs(rounded)
        return f"{rounded:,.{precision}f}"


def _amount_cell(value: Decimal, ctx: RowContext, bold: bool = False) -> Cell:
    return Cell(
        raw_value=value,
        display_value=format_amount(value, ctx.display_precision),
        bold=bold,
        align="right",
    )


def _blank_cell() -> Cell:
    return Cell(raw_value="", display_value="", align="right")


def get_columns(
    ranges: Sequence[DateRange],
    currency: str | None = None,
) -> tuple[ReportColumn, ...]:
    """Account column followed by one amount column per period, in range order."""
    return (ReportColumn(label="Account", fieldname=ACCOUNT_FIELDNAME, align="left"),) + tuple(
        ReportColumn(label=r.label, fieldname=r.key, currency=currency) for r in ranges
    )


# =========================================================================
# Flattening
# =========================================================================


def convert_tree_to_account_list(root: AccountTreeNode) -> list[AccountListNode]:
    """Pre-order linearization; every node appears exactly once."""
    return [
        AccountListNode(
            name=node.name,
            level=node.level,
            value_map=dict(node.value_map),
            is_group=node.is_group or not node.is_leaf,
        )
        for node in root.walk()
    ]


def get_row_from_account_list_node(
    node: AccountListNode,
    ctx: RowContext,
    bold: bool = False,
) -> ReportRow:
    name_cell = Cell(
        raw_value=node.name,
        display_value=node.name,
        bold=bold or node.level == 0,
        indent=node.level,
    )
    if ctx.hide_group_amounts and node.is_group:
        value_cells = tuple(_blank_cell() for _ in ctx.period_keys)
    else:
        value_cells = tuple(
            _amount_cell(balance_at(node.value_map, key), ctx, bold=bold)
            for key in ctx.period_keys
        )
    return ReportRow(
        cells=(name_cell,) + value_cells,
        level=node.level,
        is_group=node.is_group,
    )


def get_rows_from_account_list(
    nodes: Iterable[AccountListNode],
    ctx: RowContext,
) -> ReportData:
    return tuple(get_row_from_account_list_node(node, ctx) for node in nodes)


def flatten_tree(root: AccountTreeNode, ctx: RowContext) -> ReportData:
    """
    One row per node in pre-order.  With ``hide_group_amounts`` group rows
    keep their name and indentation but carry blank value cells.
    """
    return get_rows_from_account_list(convert_tree_to_account_list(root), ctx)


# =========================================================================
# Synthetic rows
# =========================================================================


def get_total_node(root: AccountTreeNode, label: str) -> AccountListNode:
    """A level-0 copy of ``root``'s aggregate under ``label``."""
    return AccountListNode(name=label, level=0, value_map=dict(root.value_map))


def get_total_row(root: AccountTreeNode, label: str, ctx: RowContext) -> ReportRow:
    """Bold total row. Never blanked: it is not a group row."""
    return get_row_from_account_list_node(get_total_node(root, label), ctx, bold=True)


def derive_value_map(
    left: Mapping[str, PeriodBalance],
    right: Mapping[str, PeriodBalance],
    op: Callable[[Decimal, Decimal], Decimal] = operator.sub,
) -> dict[str, PeriodBalance]:
    """Cross-tree arithmetic, e.g. income - expense."""
    return combine_value_maps(left, right, op)


def _signed_color(value: Decimal) -> CellColor | None:
    if value > 0:
        return CellColor.POSITIVE
    if value < 0:
        return CellColor.NEGATIVE
    return None


def get_derived_row(
    label: str,
    value_map: Mapping[str, PeriodBalance],
    ctx: RowContext,
    color_by_sign: bool = True,
) -> ReportRow:
    """
    Bold row from a derived ``ValueMap``.  With ``color_by_sign`` strictly
    positive cells are marked POSITIVE, strictly negative NEGATIVE, and
    zero gets no color.
    """
    row = get_row_from_account_list_node(
        AccountListNode(name=label, level=0, value_map=dict(value_map)),
        ctx,
        bold=True,
    )
    if not color_by_sign:
        return row

    name_cell, *value_cells = row.cells
    colored = tuple(
        Cell(
            raw_value=cell.raw_value,
            display_value=cell.display_value,
            bold=True,
            color=_signed_color(cell.raw_value),
            indent=cell.indent,
            align=cell.align,
        )
        for cell in value_cells
    )
    return ReportRow(cells=(name_cell,) + colored, level=row.level)


def get_empty_row(ctx: RowContext) -> ReportRow:
    """Blank separator row spanning the name column and every period."""
    cells = (Cell(raw_value="", display_value=""),) + tuple(
        _blank_cell() for _ in ctx.period_keys
    )
    return ReportRow(cells=cells, is_empty=True)
