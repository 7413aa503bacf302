"""
Reference data models: account types and currencies.

These catalogs are global (not tenant-scoped) and read-only at
runtime. They are seeded by the initial migration, or by
services.reference_service.seed_reference_data in tests.
"""

from datetime import datetime

from sqlalchemy import String, Integer, DateTime, Enum as SAEnum
from sqlalchemy.orm import Mapped, mapped_column

from tenant_ledger.models.base import Base, utcnow
from tenant_ledger.models.enums import NormalBalance


class AccountType(Base):
    """
    One of the accounting categories (ASSET, LIABILITY, ...).

    normal_balance is descriptive metadata for callers; the journal
    engine does not enforce it.
    """

    __tablename__ = "account_types"

    id: Mapped[int] = mapped_column(primary_key=True)
    code: Mapped[str] = mapped_column(String(20), unique=True, nullable=False)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    normal_balance: Mapped[NormalBalance] = mapped_column(
        SAEnum(NormalBalance, name="normal_balance_enum"),
        nullable=False,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=utcnow, onupdate=utcnow
    )

    def __repr__(self) -> str:
        return f"<AccountType {self.code} ({self.normal_balance.value})>"


class Currency(Base):
    __tablename__ = "currencies"

    id: Mapped[int] = mapped_column(primary_key=True)
    code: Mapped[str] = mapped_column(String(3), unique=True, nullable=False)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    symbol: Mapped[str] = mapped_column(String(10), nullable=False)
    precision: Mapped[int] = mapped_column(Integer, nullable=False, default=2)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=utcnow, onupdate=utcnow
    )

    def __repr__(self) -> str:
        return f"<Currency {self.code}>"
