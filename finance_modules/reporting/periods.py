"""
Date-range grouping for account reports.

Pure functions that generate reporting periods and bucket raw postings into
per-account ``ValueMap``s, one key per period.  ZERO I/O.

Sign convention
---------------
Balances are expressed so that normal activity is positive:

* DEBIT-normal roots (Asset, Expense): balance = debit - credit
* CREDIT-normal roots (Liability, Equity, Income): balance = credit - debit

A profit & loss report therefore sees both income and expense as positive
numbers and derives profit by subtraction.
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterable, Mapping, Sequence
from datetime import date, timedelta
from decimal import Decimal

from dateutil.relativedelta import relativedelta

from finance_kernel.exceptions import (
    GroupPostingError,
    InvalidDateRangeError,
    OrphanPostingError,
)
from finance_kernel.logging_config import get_logger
from finance_modules.reporting.models import (
    ZERO,
    AccountMeta,
    DateRange,
    PeriodBalance,
    Periodicity,
    Posting,
    RootType,
    ValueMap,
)

logger = get_logger("modules.reporting.periods")

SINGLE_PERIOD_KEY = "total"
SINGLE_PERIOD_LABEL = "Total"


# =========================================================================
# Period generation
# =========================================================================


def _label_for(start: date, end: date, periodicity: Periodicity) -> str:
    """Monthly periods are named after the month holding their last day."""
    last_day = end - timedelta(days=1)
    if periodicity == Periodicity.MONTHLY:
        return last_day.strftime("%b %Y")
    if periodicity == Periodicity.YEARLY and start.month == 1 and start.day == 1:
        return str(start.year)
    return f"{start.strftime('%b %Y')} - {last_day.strftime('%b %Y')}"


def build_date_ranges(
    to_date: date,
    periodicity: Periodicity,
    count: int,
    cumulative: bool = False,
) -> tuple[DateRange, ...]:
    """
    Generate ``count`` consecutive periods ending on ``to_date`` (inclusive).

    Periods are walked backwards from the day after ``to_date`` and returned
    in chronological order.  With ``cumulative`` every range keeps its end
    but drops its start, so each column is a balance "as of" its end.
    """
    if count < 1:
        return ()

    step = relativedelta(months=periodicity.months)
    end = to_date + timedelta(days=1)
    ranges: list[DateRange] = []
    for _ in range(count):
        start = end - step
        label = _label_for(start, end, periodicity)
        ranges.append(
            DateRange(
                key=label,
                label=label,
                start=None if cumulative else start,
                end=end,
            )
        )
        end = start

    ranges.reverse()
    return tuple(ranges)


def consolidate_ranges(ranges: Sequence[DateRange]) -> tuple[DateRange, ...]:
    """Fold a run of consecutive ranges into one ``"total"`` range."""
    if not ranges:
        return ()
    starts = [r.start for r in ranges]
    start = None if any(s is None for s in starts) else min(starts)
    return (
        DateRange(
            key=SINGLE_PERIOD_KEY,
            label=SINGLE_PERIOD_LABEL,
            start=start,
            end=max(r.end for r in ranges),
        ),
    )


def validate_date_ranges(ranges: Sequence[DateRange]) -> None:
    """Reject duplicate keys and empty ranges."""
    seen: set[str] = set()
    for r in ranges:
        if r.key in seen:
            raise InvalidDateRangeError(r.key, "duplicate period key")
        seen.add(r.key)
        if r.start is not None and r.start >= r.end:
            raise InvalidDateRangeError(r.key, "start must be before end")


def date_span(ranges: Sequence[DateRange]) -> tuple[date | None, date | None]:
    """
    Overall ``[start, end)`` covered by ``ranges``.

    Start is None if any range is cumulative; both are None for no ranges.
    """
    if not ranges:
        return None, None
    starts = [r.start for r in ranges]
    start = None if any(s is None for s in starts) else min(starts)
    return start, max(r.end for r in ranges)


# =========================================================================
# Balance bucketing
# =========================================================================


def compute_posting_balance(posting: Posting, root_type: RootType) -> Decimal:
    """Signed balance contribution of one posting to an account of ``root_type``."""
    if root_type.is_credit_normal:
        return posting.credit - posting.debit
    return posting.debit - posting.credit


def group_postings_by_account(
    postings: Iterable[Posting],
) -> dict[str, list[Posting]]:
    """Group postings by account id, preserving their relative order."""
    grouped: dict[str, list[Posting]] = defaultdict(list)
    for posting in postings:
        grouped[posting.account_id].append(posting)
    return dict(grouped)


def group_by_date_ranges(
    postings_by_account: Mapping[str, Sequence[Posting]],
    accounts: Mapping[str, AccountMeta],
    ranges: Sequence[DateRange],
) -> dict[str, ValueMap]:
    """
    Bucket each account's postings into one ``ValueMap`` key per range.

    Only accounts with at least one posting inside some range appear in the
    result; each of their maps carries every range key, in range order.
    A posting outside all ranges contributes to none; a posting inside
    several (cumulative) ranges contributes to each.

    Raises:
        OrphanPostingError: posting for an account not in ``accounts``.
        GroupPostingError: posting made against an account that has children.
    """
    validate_date_ranges(ranges)
    parent_ids = {m.parent_id for m in accounts.values() if m.parent_id is not None}

    result: dict[str, ValueMap] = {}
    for account_id, postings in postings_by_account.items():
        meta = accounts.get(account_id)
        if meta is None:
            raise OrphanPostingError(account_id)
        if account_id in parent_ids:
            raise GroupPostingError(account_id)

        totals = {r.key: ZERO for r in ranges}
        hit = False
        for posting in postings:
            amount = compute_posting_balance(posting, meta.root_type)
            for r in ranges:
                if r.contains(posting.posting_date):
                    totals[r.key] += amount
                    hit = True

        if hit:
            result[account_id] = {
                key: PeriodBalance(balance) for key, balance in totals.items()
            }

    logger.debug(
        "postings_grouped_by_date_ranges",
        extra={
            "range_count": len(ranges),
            "account_count": len(postings_by_account),
            "populated_account_count": len(result),
        },
    )
    return result
