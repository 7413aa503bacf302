"""
Account model (chart of accounts).

Every account belongs to one tenant. Its account_number is unique
within that tenant only, so two tenants can both have a "1000 Cash".
An account may point at a parent account of the same tenant to form
a hierarchy.
"""

import uuid
from datetime import datetime

from sqlalchemy import (
    String, Boolean, DateTime, Text, ForeignKey, UniqueConstraint, Uuid,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from tenant_ledger.models.base import Base, TenantScopedMixin, utcnow


class Account(TenantScopedMixin, Base):
    """
    A single account in a tenant's chart of accounts.

    There is no delete: an account can only be deactivated via
    is_active=False, and inactive accounts reject new journal lines.
    """

    __tablename__ = "accounts"
    __table_args__ = (
        UniqueConstraint(
            "tenant_id", "account_number", name="uq_accounts_tenant_number"
        ),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid, primary_key=True, default=uuid.uuid4
    )
    account_number: Mapped[str] = mapped_column(String(50), nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    account_type_id: Mapped[int] = mapped_column(
        ForeignKey("account_types.id"), nullable=False, index=True
    )
    currency_code: Mapped[str] = mapped_column(
        ForeignKey("currencies.code"), nullable=False, index=True
    )
    parent_account_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("accounts.id"), nullable=True
    )
    is_active: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=utcnow, index=True
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=utcnow, onupdate=utcnow
    )

    # Created together with the account, one row per account
    balance: Mapped["AccountBalance"] = relationship(
        back_populates="account", uselist=False
    )

    def __repr__(self) -> str:
        return f"<Account {self.account_number} {self.name!r}>"
