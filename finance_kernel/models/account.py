"""
Module: finance_kernel.models.account
Responsibility: ORM persistence for the chart of accounts -- the hierarchy
    every report is built from.
Architecture position: Kernel > Models.  May import from db/base.py only.

Invariants enforced (by the report engine at read time, not here):
    - parent_id, when set, references another account.
    - Parent chains are acyclic and only group accounts have children.
    - Postings are made against non-group accounts only.

Failure modes:
    - A corrupt hierarchy surfaces as HierarchyIntegrityError when a
      report is built, never as a partial report.
"""

from typing import TYPE_CHECKING
from uuid import UUID

from sqlalchemy import Boolean, Index, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from finance_kernel.db.base import Base, UUIDString

if TYPE_CHECKING:
    from finance_kernel.models.ledger import LedgerPosting


class Account(Base):
    """
    Chart of Accounts entry -- a single node in the account hierarchy.

    Contract:
        ``name`` is unique.  ``root_type`` holds one of the
        ``RootType`` values ("Asset", "Liability", "Equity", "Income",
        "Expense").  Siblings are displayed by ``sort_order`` then name.
    """

    __tablename__ = "accounts"

    __table_args__ = (
        UniqueConstraint("name", name="uq_account_name"),
        Index("idx_account_root_type", "root_type"),
        Index("idx_account_parent", "parent_id"),
    )

    name: Mapped[str] = mapped_column(String(255), nullable=False)

    root_type: Mapped[str] = mapped_column(String(20), nullable=False)

    is_group: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    # Parent account (None for top-level accounts)
    parent_id: Mapped[UUID | None] = mapped_column(UUIDString(), nullable=True)

    # Display order among siblings
    sort_order: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    postings: Mapped[list["LedgerPosting"]] = relationship(
        back_populates="account",
    )

    def __repr__(self) -> str:
        return f"<Account {self.name} ({self.root_type})>"
