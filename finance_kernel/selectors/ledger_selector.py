"""
Module: finance_kernel.selectors.ledger_selector
Responsibility: Read-only queries over the chart of accounts and the raw
    ledger postings that account reports aggregate.  There are no stored
    balances: every report derives its numbers from posting rows at query
    time.
Architecture position: Kernel > Selectors.  May import from models/ and
    selectors/base.py.  MUST NOT import from outer layers.

Failure modes:
    - Returns empty lists when no accounts or postings match.
    - Driver errors (SQLAlchemyError) propagate; the reporting adapter
      translates them into DataFetchError.
"""

from collections.abc import Sequence
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from uuid import UUID

from sqlalchemy import select

from finance_kernel.logging_config import get_logger
from finance_kernel.models.account import Account
from finance_kernel.models.ledger import LedgerPosting
from finance_kernel.selectors.base import BaseSelector

logger = get_logger("selectors.ledger")


@dataclass(frozen=True)
class AccountRow:
    """A chart-of-accounts row."""

    account_id: UUID
    name: str
    root_type: str
    parent_id: UUID | None
    is_group: bool


@dataclass(frozen=True)
class PostingRow:
    """A single ledger posting."""

    account_id: UUID
    posting_date: date
    debit: Decimal
    credit: Decimal


class LedgerSelector(BaseSelector):
    """
    Selector for the rows account reports are built from.

    Guarantees:
        - accounts() is ordered by (sort_order, name) so siblings display
          in a stable order.
        - postings() is ordered by (posting_date, id).
        - All amounts are Decimal (never float).
    """

    def accounts(self) -> list[AccountRow]:
        stmt = select(Account).order_by(Account.sort_order, Account.name)
        rows = [
            AccountRow(
                account_id=acct.id,
                name=acct.name,
                root_type=acct.root_type,
                parent_id=acct.parent_id,
                is_group=acct.is_group,
            )
            for acct in self.session.scalars(stmt)
        ]
        logger.debug("accounts_selected", extra={"account_count": len(rows)})
        return rows

    def postings(
        self,
        root_types: Sequence[str],
        start: date | None = None,
        end: date | None = None,
        include_reverted: bool = False,
    ) -> list[PostingRow]:
        """
        Postings of accounts with the given root types in ``[start, end)``.

        Args:
            root_types: Root type values to include.
            start: Inclusive lower bound (None = from the beginning).
            end: Exclusive upper bound (None = no bound).
            include_reverted: Include postings cancelled by a reversal.
        """
        stmt = (
            select(LedgerPosting)
            .join(Account, LedgerPosting.account_id == Account.id)
            .where(Account.root_type.in_(list(root_types)))
            .order_by(LedgerPosting.posting_date, LedgerPosting.id)
        )
        if start is not None:
            stmt = stmt.where(LedgerPosting.posting_date >= start)
        if end is not None:
            stmt = stmt.where(LedgerPosting.posting_date < end)
        if not include_reverted:
            stmt = stmt.where(LedgerPosting.reverted.is_(False))

        rows = [
            PostingRow(
                account_id=p.account_id,
                posting_date=p.posting_date,
                debit=p.debit,
                credit=p.credit,
            )
            for p in self.session.scalars(stmt)
        ]
        logger.debug(
            "postings_selected",
            extra={
                "root_types": list(root_types),
                "start": start,
                "end": end,
                "posting_count": len(rows),
            },
        )
        return rows
