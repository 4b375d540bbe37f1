"""
Reporting Module Service (``finance_modules.reporting.service``).

Responsibility
--------------
Runs one account report (Profit & Loss, Balance Sheet, ...) on behalf of a
caller such as a UI tab: fetches raw ledger data through a
``LedgerQueryAdapter``, hands it to the pure pipeline (grouping, tree
building, aggregation) and to the statement's assembler, and publishes the
resulting ``ReportData``.

Architecture position
---------------------
**Modules layer** -- thin glue.  ``AccountReport`` owns the only state of a
report: the ``loading`` flag, the published rows, and the cached raw
fetch.  No financial logic lives in this class.

Invariants enforced
-------------------
* The raw fetch is cached per instance, never process-wide.  It is reused
  only for the display-only ``hideGroupAmounts`` filter; ``force=True`` or
  any other filter re-queries the ledger.
* Every run builds its own trees from the immutable raw snapshot, so two
  instances (two open tabs) never share mutable aggregation state.
* Last request wins: a run publishes rows and clears ``loading`` only if
  no newer run has started since.

Failure modes
-------------
* ``DataFetchError`` from the adapter and ``HierarchyIntegrityError`` from
  the pipeline propagate unchanged.  The previous ``report_data`` is kept
  and ``loading`` is reset.  Nothing is retried here.

Audit relevance
---------------
Structured log events for every run (started, fetch skipped, completed,
superseded, failed) carry the report name and a per-run id.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, replace
from enum import Enum
from typing import Any

from finance_kernel.domain.clock import Clock, SystemClock
from finance_kernel.logging_config import LogContext, get_logger
from finance_modules.reporting.adapters import LedgerQueryAdapter
from finance_modules.reporting.config import ReportingConfig
from finance_modules.reporting.hierarchy import build_account_trees
from finance_modules.reporting.models import (
    AccountMeta,
    DateRange,
    Posting,
    ReportColumn,
    ReportData,
)
from finance_modules.reporting.periods import build_date_ranges, consolidate_ranges
from finance_modules.reporting.rows import RowContext, get_columns
from finance_modules.reporting.statements import ReportAssembler

logger = get_logger("modules.reporting.service")

HIDE_GROUP_AMOUNTS = "hideGroupAmounts"

# Filter names as the UI sends them -> ReportingConfig fields
FILTER_FIELDS: dict[str, str] = {
    HIDE_GROUP_AMOUNTS: "hide_group_amounts",
    "toDate": "to_date",
    "periodicity": "periodicity",
    "count": "period_count",
    "consolidateColumns": "consolidate_columns",
    "includeReverted": "include_reverted",
}


class ReportState(str, Enum):
    """Observable lifecycle of a report instance."""

    IDLE = "idle"
    LOADING = "loading"
    READY = "ready"


@dataclass(frozen=True)
class RawReportData:
    """Snapshot returned by the adapter for one set of ranges."""

    accounts: tuple[AccountMeta, ...]
    postings: tuple[Posting, ...]
    date_ranges: tuple[DateRange, ...]


class AccountReport:
    """
    Stateful runner for one statement.

    Contract
    --------
    * ``set_report_data(filter=None, force=False)`` recomputes the report.
    * ``loading`` is True while a run is in flight.
    * ``report_data`` holds the last successfully published rows.

    Non-goals
    ---------
    * Does NOT serialize concurrent calls; callers that fire overlapping
      requests get last-request-wins publication, not queuing.
    * Does NOT cancel an in-flight ledger query.
    """

    def __init__(
        self,
        assembler: ReportAssembler,
        adapter: LedgerQueryAdapter,
        config: ReportingConfig | None = None,
        clock: Clock | None = None,
    ):
        self._assembler = assembler
        self._adapter = adapter
        self._config = config or ReportingConfig.with_defaults()
        self._clock = clock or SystemClock()

        self._lock = threading.Lock()
        self._latest_run = 0
        self._loading = False
        self._published = False
        self._report_data: ReportData = ()
        self._date_ranges: tuple[DateRange, ...] = ()
        self._raw: RawReportData | None = None

    # =========================================================================
    # Observable state
    # =========================================================================

    @property
    def assembler(self) -> ReportAssembler:
        return self._assembler

    @property
    def config(self) -> ReportingConfig:
        return self._config

    @property
    def loading(self) -> bool:
        return self._loading

    @property
    def state(self) -> ReportState:
        if self._loading:
            return ReportState.LOADING
        return ReportState.READY if self._published else ReportState.IDLE

    @property
    def report_data(self) -> ReportData:
        return self._report_data

    @property
    def date_ranges(self) -> tuple[DateRange, ...]:
        return self._date_ranges

    @property
    def columns(self) -> tuple[ReportColumn, ...]:
        return get_columns(self._date_ranges, self._config.default_currency)

    # =========================================================================
    # Internal helpers
    # =========================================================================

    def _build_date_ranges(self) -> tuple[DateRange, ...]:
        cfg = self._config
        ranges = build_date_ranges(
            cfg.to_date or self._clock.today(),
            cfg.periodicity,
            cfg.period_count,
            cumulative=self._assembler.cumulative,
        )
        if cfg.consolidate_columns:
            ranges = consolidate_ranges(ranges)
        return ranges

    def _fetch_raw_data(self) -> RawReportData:
        """The expensive step: one round trip per source."""
        ranges = self._build_date_ranges()
        accounts = tuple(self._adapter.fetch_account_metas())
        postings = tuple(
            self._adapter.fetch_postings(
                self._assembler.root_types,
                ranges,
                {"include_reverted": self._config.include_reverted},
            )
        )
        logger.info(
            "ledger_data_fetched",
            extra={
                "account_count": len(accounts),
                "posting_count": len(postings),
                "period_keys": [r.key for r in ranges],
            },
        )
        return RawReportData(accounts=accounts, postings=postings, date_ranges=ranges)

    def _compute_rows(self, raw: RawReportData) -> ReportData:
        trees = build_account_trees(raw.postings, raw.accounts, raw.date_ranges)
        ctx = RowContext(
            period_keys=tuple(r.key for r in raw.date_ranges),
            display_precision=self._config.display_precision,
            hide_group_amounts=self._config.hide_group_amounts,
        )
        return self._assembler.assemble_rows(trees, ctx)

    # =========================================================================
    # Public API
    # =========================================================================

    def set_report_data(self, filter: str | None = None, force: bool = False) -> None:
        """
        Recompute and publish ``report_data``.

        Args:
            filter: Name of the filter that changed.  ``"hideGroupAmounts"``
                redraws from the cached raw data when there is one.
            force: Always re-query the ledger.
        """
        with self._lock:
            self._latest_run += 1
            run = self._latest_run
            self._loading = True

        run_id = f"{self._assembler.report_name}-{run}"
        with LogContext.bind(report_name=self._assembler.report_name, run_id=run_id):
            logger.info("report_run_started", extra={"filter": filter, "force": force})
            try:
                raw = self._raw
                if force or filter != HIDE_GROUP_AMOUNTS or raw is None:
                    raw = self._fetch_raw_data()
                else:
                    logger.info("ledger_fetch_skipped")

                rows = self._compute_rows(raw)

                with self._lock:
                    if run != self._latest_run:
                        logger.info(
                            "report_run_superseded",
                            extra={"latest_run": self._latest_run},
                        )
                        return
                    self._raw = raw
                    self._date_ranges = raw.date_ranges
                    self._report_data = rows
                    self._published = True
            except Exception:
                logger.error("report_run_failed", exc_info=True)
                raise
            finally:
                with self._lock:
                    if run == self._latest_run:
                        self._loading = False

            logger.info("report_run_completed", extra={"row_count": len(rows)})

    def set_filter(self, name: str, value: Any) -> None:
        """
        Update one filter and redraw.

        ``name`` is either the UI filter name (``"hideGroupAmounts"``) or
        the ``ReportingConfig`` field name (``"hide_group_amounts"``).
        """
        field_name = FILTER_FIELDS.get(name, name)
        if field_name not in FILTER_FIELDS.values():
            raise ValueError(f"Unknown report filter: {name}")
        self._config = replace(self._config, **{field_name: value})

        ui_name = next(k for k, v in FILTER_FIELDS.items() if v == field_name)
        self.set_report_data(filter=ui_name)
