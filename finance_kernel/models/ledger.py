"""
Module: finance_kernel.models.ledger
Responsibility: ORM persistence for ledger postings -- the raw debit/credit
    rows every account report aggregates.
Architecture position: Kernel > Models.  May import from db/base.py only.

Invariants enforced:
    - debit and credit are non-negative Decimals; a posting normally has
      exactly one of them non-zero.
    - Reports read postings, they never write them.

Failure modes:
    - IntegrityError if account_id references no account (FK).
"""

from datetime import date
from decimal import Decimal
from typing import TYPE_CHECKING
from uuid import UUID

from sqlalchemy import Boolean, CheckConstraint, Date, ForeignKey, Index, Numeric
from sqlalchemy.orm import Mapped, mapped_column, relationship

from finance_kernel.db.base import Base, UUIDString

if TYPE_CHECKING:
    from finance_kernel.models.account import Account


class LedgerPosting(Base):
    """
    One debit or credit against one account on one date.

    Contract:
        ``reverted`` marks postings cancelled by a later reversal; reports
        exclude them unless asked to include reverted postings.
    """

    __tablename__ = "ledger_postings"

    __table_args__ = (
        Index("idx_posting_account", "account_id"),
        Index("idx_posting_date", "posting_date"),
        CheckConstraint("debit >= 0", name="ck_posting_debit_non_negative"),
        CheckConstraint("credit >= 0", name="ck_posting_credit_non_negative"),
    )

    account_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("accounts.id"),
        nullable=False,
    )

    posting_date: Mapped[date] = mapped_column(Date, nullable=False)

    debit: Mapped[Decimal] = mapped_column(
        Numeric(38, 9),
        default=Decimal("0"),
        nullable=False,
    )

    credit: Mapped[Decimal] = mapped_column(
        Numeric(38, 9),
        default=Decimal("0"),
        nullable=False,
    )

    reverted: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    account: Mapped["Account"] = relationship(back_populates="postings")

    def __repr__(self) -> str:
        return (
            f"<LedgerPosting {self.posting_date} account={self.account_id} "
            f"Dr {self.debit} Cr {self.credit}>"
        )
