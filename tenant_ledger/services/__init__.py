"""Business logic services."""

from tenant_ledger.services.tenant_service import TenantService
from tenant_ledger.services.account_service import AccountService
from tenant_ledger.services.balance_ledger import BalanceLedger
from tenant_ledger.services.journal_service import JournalService
from tenant_ledger.services.reference_service import (
    ReferenceService,
    seed_reference_data,
)

__all__ = [
    "TenantService",
    "AccountService",
    "BalanceLedger",
    "JournalService",
    "ReferenceService",
    "seed_reference_data",
]
