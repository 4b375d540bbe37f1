"""
Reporting Configuration Schema.

Defines the filters and formatting options of one report instance:
which periods to bucket postings into, how to display amounts, and which
display-only toggles are active.  Instances are mutable so a UI can flip a
filter and ask the report to redraw.
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from datetime import date
from pathlib import Path
from typing import Any, Self

import yaml

from finance_kernel.logging_config import get_logger
from finance_modules.reporting.models import Periodicity

logger = get_logger("modules.reporting.config")


@dataclass
class ReportingConfig:
    """
    Configuration schema for account reports.

    Controls period generation, amount formatting, and display filters.
    """

    # Entity name shown on reports
    entity_name: str = "Company"

    # Currency of the amounts shown
    default_currency: str = "USD"

    # Rounding precision for display
    display_precision: int = 2

    # Period generation: ``period_count`` periods of ``periodicity``
    # ending on ``to_date`` (inclusive).  None means "today" per the clock.
    periodicity: Periodicity = Periodicity.MONTHLY
    period_count: int = 12
    to_date: date | None = None

    # Fold all periods into a single "total" column
    consolidate_columns: bool = False

    # Blank the numeric cells of group accounts (display-only)
    hide_group_amounts: bool = False

    # Include postings that were later reverted
    include_reverted: bool = False

    def __post_init__(self):
        if isinstance(self.periodicity, str):
            self.periodicity = Periodicity(self.periodicity)
        if isinstance(self.to_date, str):
            self.to_date = date.fromisoformat(self.to_date)
        if self.display_precision < 0:
            raise ValueError("display_precision cannot be negative")
        if len(self.default_currency) != 3:
            raise ValueError("default_currency must be a 3-letter ISO 4217 code")
        if self.period_count < 1:
            raise ValueError("period_count must be at least 1")

    @classmethod
    def with_defaults(cls) -> Self:
        """Create config with standard defaults."""
        logger.info("reporting_config_created_with_defaults")
        return cls()

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Self:
        """Create config from dictionary, rejecting unknown keys."""
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ValueError(f"Unknown reporting config keys: {', '.join(unknown)}")
        logger.info(
            "reporting_config_loading_from_dict",
            extra={"keys": sorted(data.keys())},
        )
        return cls(**data)

    @classmethod
    def from_yaml(cls, path: Path | str) -> Self:
        """
        Load config from a YAML file.

        The file may hold the keys at top level or under a ``reporting``
        mapping.  An empty file yields the defaults.

        Raises:
            FileNotFoundError: if the file does not exist.
            yaml.YAMLError: if the file contains invalid YAML.
        """
        path = Path(path)
        with path.open(encoding="utf-8") as fh:
            data = yaml.safe_load(fh) or {}
        if not isinstance(data, dict):
            raise ValueError(f"Expected a mapping in {path}, got {type(data).__name__}")
        if isinstance(data.get("reporting"), dict):
            data = data["reporting"]
        logger.info("reporting_config_loading_from_yaml", extra={"path": str(path)})
        return cls.from_dict(data)
