"""
Ledger query adapter interface.

The report engine never talks to storage directly.  It consumes any object
implementing ``LedgerQueryAdapter``: ``SqlLedgerAdapter`` reads the ledger
tables through ``finance_kernel.selectors.LedgerSelector``;
``InMemoryLedgerAdapter`` serves tests and callers that already hold the
data.

Contract
--------
* ``fetch_account_metas()`` returns every account needed to rebuild the
  full ancestor chain of each posted account, in sibling display order.
* ``fetch_postings(root_types, date_ranges, other_filters)`` returns the
  postings of accounts with those root types inside the overall span of
  ``date_ranges``.  Returning more is allowed; the grouper re-filters.
* Failures surface as ``DataFetchError``; adapters own any retry policy.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from typing import Any, Protocol, runtime_checkable

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from finance_kernel.exceptions import DataFetchError, HierarchyIntegrityError
from finance_kernel.logging_config import get_logger
from finance_kernel.selectors.ledger_selector import LedgerSelector
from finance_modules.reporting.models import (
    AccountMeta,
    DateRange,
    Posting,
    RootType,
)
from finance_modules.reporting.periods import date_span

logger = get_logger("modules.reporting.adapters")


@runtime_checkable
class LedgerQueryAdapter(Protocol):
    """Read-only source of postings and account metadata."""

    def fetch_postings(
        self,
        root_types: Sequence[RootType],
        date_ranges: Sequence[DateRange],
        other_filters: Mapping[str, Any] | None = None,
    ) -> Sequence[Posting]: ...

    def fetch_account_metas(self) -> Sequence[AccountMeta]: ...


class InMemoryLedgerAdapter:
    """
    Adapter over already-loaded accounts and postings.

    Counts calls so callers can verify when a report re-queried the
    ledger.  ``other_filters`` is accepted and ignored.
    """

    def __init__(
        self,
        accounts: Iterable[AccountMeta],
        postings: Iterable[Posting] = (),
    ):
        self._accounts = tuple(accounts)
        self._postings = tuple(postings)
        self.fetch_postings_calls = 0
        self.fetch_account_metas_calls = 0

    def replace_postings(self, postings: Iterable[Posting]) -> None:
        self._postings = tuple(postings)

    def fetch_postings(
        self,
        root_types: Sequence[RootType],
        date_ranges: Sequence[DateRange],
        other_filters: Mapping[str, Any] | None = None,
    ) -> tuple[Posting, ...]:
        self.fetch_postings_calls += 1
        if not date_ranges:
            return ()

        wanted = set(root_types)
        account_ids = {
            meta.account_id for meta in self._accounts if meta.root_type in wanted
        }
        start, end = date_span(date_ranges)
        postings = tuple(
            p
            for p in self._postings
            if p.account_id in account_ids
            and (start is None or p.posting_date >= start)
            and p.posting_date < end
        )
        logger.debug(
            "in_memory_postings_fetched",
            extra={"posting_count": len(postings)},
        )
        return postings

    def fetch_account_metas(self) -> tuple[AccountMeta, ...]:
        self.fetch_account_metas_calls += 1
        return self._accounts


class SqlLedgerAdapter:
    """
    Adapter over the SQL ledger tables via ``LedgerSelector``.

    Converts kernel row DTOs into the engine's ``AccountMeta``/``Posting``
    snapshots and translates driver failures into ``DataFetchError``.
    Recognized ``other_filters``: ``include_reverted`` (bool).
    """

    def __init__(self, session: Session):
        self._selector = LedgerSelector(session)

    def fetch_account_metas(self) -> tuple[AccountMeta, ...]:
        try:
            rows = self._selector.accounts()
        except SQLAlchemyError as exc:
            logger.error("account_fetch_failed", exc_info=True)
            raise DataFetchError("accounts", str(exc)) from exc

        metas = []
        for row in rows:
            try:
                root_type = RootType(row.root_type)
            except ValueError:
                raise HierarchyIntegrityError(
                    f"Account {row.account_id} has unknown root type {row.root_type!r}"
                ) from None
            metas.append(
                AccountMeta(
                    account_id=str(row.account_id),
                    name=row.name,
                    root_type=root_type,
                    parent_id=str(row.parent_id) if row.parent_id is not None else None,
                    is_group=row.is_group,
                )
            )
        return tuple(metas)

    def fetch_postings(
        self,
        root_types: Sequence[RootType],
        date_ranges: Sequence[DateRange],
        other_filters: Mapping[str, Any] | None = None,
    ) -> tuple[Posting, ...]:
        if not date_ranges:
            return ()
        filters = other_filters or {}
        start, end = date_span(date_ranges)
        try:
            rows = self._selector.postings(
                [rt.value for rt in root_types],
                start=start,
                end=end,
                include_reverted=bool(filters.get("include_reverted", False)),
            )
        except SQLAlchemyError as exc:
            logger.error("posting_fetch_failed", exc_info=True)
            raise DataFetchError("postings", str(exc)) from exc

        return tuple(
            Posting(
                account_id=str(row.account_id),
                posting_date=row.posting_date,
                debit=row.debit,
                credit=row.credit,
            )
            for row in rows
        )
