"""
Account balance model.

A denormalized running total per account. It is written in the same
transaction as every journal entry that touches the account, so it
never has to be recomputed by summing lines. Only the balance ledger
service writes to this table.
"""

import uuid
from datetime import datetime
from decimal import Decimal

from sqlalchemy import DateTime, ForeignKey, CheckConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from tenant_ledger.models.base import Base, Money, TenantScopedMixin, utcnow


class AccountBalance(TenantScopedMixin, Base):
    __tablename__ = "account_balances"
    __table_args__ = (
        CheckConstraint("debit_balance >= 0", name="ck_balance_debit_nonneg"),
        CheckConstraint("credit_balance >= 0", name="ck_balance_credit_nonneg"),
    )

    account_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("accounts.id"), primary_key=True
    )
    debit_balance: Mapped[Decimal] = mapped_column(
        Money, nullable=False, default=Decimal("0")
    )
    credit_balance: Mapped[Decimal] = mapped_column(
        Money, nullable=False, default=Decimal("0")
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=utcnow
    )

    account: Mapped["Account"] = relationship(back_populates="balance")

    @property
    def net_balance(self) -> Decimal:
        return self.debit_balance - self.credit_balance

    def __repr__(self) -> str:
        return (
            f"<AccountBalance {self.account_id} "
            f"Dr {self.debit_balance} Cr {self.credit_balance}>"
        )
