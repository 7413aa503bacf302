"""
Journal entry and journal entry line models.

A journal entry is one balanced financial transaction. Its lines
debit and credit accounts of the same tenant, and the sum of debits
always equals the sum of credits. That invariant is enforced by the
JournalService, not by the model; the model is just the data
structure. Entries are immutable once committed.
"""

import uuid
from datetime import datetime
from decimal import Decimal

from sqlalchemy import (
    String, Integer, DateTime, Text, JSON, ForeignKey,
    CheckConstraint, Uuid,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from tenant_ledger.models.base import Base, Money, TenantScopedMixin, utcnow


class JournalEntry(TenantScopedMixin, Base):
    __tablename__ = "journal_entries"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid, primary_key=True, default=uuid.uuid4
    )
    # Free-form, not required to be unique
    reference_number: Mapped[str] = mapped_column(
        String(100), nullable=False, default=""
    )
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    entry_date: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, index=True
    )
    # "metadata" is reserved on declarative classes
    entry_metadata: Mapped[dict | None] = mapped_column(
        "metadata", JSON, nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=utcnow
    )

    lines: Mapped[list["JournalEntryLine"]] = relationship(
        back_populates="journal_entry",
        order_by=lambda: [
            JournalEntryLine.created_at, JournalEntryLine.line_number
        ],
    )

    def __repr__(self) -> str:
        return f"<JournalEntry {self.id} {self.reference_number!r}>"


class JournalEntryLine(TenantScopedMixin, Base):
    """
    One debit or credit against an account.

    By convention only one of debit/credit is nonzero, but only the
    aggregate over the entry is enforced.
    """

    __tablename__ = "journal_entry_lines"
    __table_args__ = (
        CheckConstraint("debit >= 0", name="ck_line_debit_nonneg"),
        CheckConstraint("credit >= 0", name="ck_line_credit_nonneg"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid, primary_key=True, default=uuid.uuid4
    )
    journal_entry_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("journal_entries.id"), nullable=False, index=True
    )
    account_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("accounts.id"), nullable=False, index=True
    )
    # Position within the entry, breaks created_at ties
    line_number: Mapped[int] = mapped_column(Integer, nullable=False)
    debit: Mapped[Decimal] = mapped_column(
        Money, nullable=False, default=Decimal("0")
    )
    credit: Mapped[Decimal] = mapped_column(
        Money, nullable=False, default=Decimal("0")
    )
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=utcnow
    )

    journal_entry: Mapped["JournalEntry"] = relationship(
        back_populates="lines"
    )

    def __repr__(self) -> str:
        return (
            f"<JournalEntryLine {self.account_id} "
            f"Dr {self.debit} Cr {self.credit}>"
        )
