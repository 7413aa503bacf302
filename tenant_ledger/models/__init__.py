"""
Database models package.

All models must be imported here so that Alembic can discover
them through Base.metadata when generating migrations.
"""

from tenant_ledger.models.base import Base, TenantScopedMixin
from tenant_ledger.models.enums import NormalBalance
from tenant_ledger.models.tenant import Tenant
from tenant_ledger.models.reference import AccountType, Currency
from tenant_ledger.models.account import Account
from tenant_ledger.models.account_balance import AccountBalance
from tenant_ledger.models.journal_entry import JournalEntry, JournalEntryLine

__all__ = [
    "Base",
    "TenantScopedMixin",
    "NormalBalance",
    "Tenant",
    "AccountType",
    "Currency",
    "Account",
    "AccountBalance",
    "JournalEntry",
    "JournalEntryLine",
]
