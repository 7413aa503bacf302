"""
Journal entry API endpoints.

The API layer is thin: it handles HTTP concerns and delegates all
validation and posting to the JournalService.
"""

from datetime import datetime

from fastapi import APIRouter, Depends

from tenant_ledger.access_gate import AccessGate
from tenant_ledger.api.dependencies import get_gate, get_deadline
from tenant_ledger.api.errors import to_http_error
from tenant_ledger.deadline import Deadline
from tenant_ledger.errors import LedgerError
from tenant_ledger.schemas.journal import (
    JournalEntryCreate,
    JournalEntryResponse,
    JournalEntryPage,
)
from tenant_ledger.services.journal_service import JournalService

router = APIRouter(
    prefix="/tenants/{tenant_id}/journal-entries", tags=["Journal"]
)


@router.post("", response_model=JournalEntryResponse, status_code=201)
def create_journal_entry(
    tenant_id: str,
    request: JournalEntryCreate,
    gate: AccessGate = Depends(get_gate),
    deadline: Deadline = Depends(get_deadline),
):
    """
    Post a journal entry.

    The entry needs at least two lines and total debits must equal
    total credits. Account balances are updated in the same
    transaction.
    """
    try:
        return JournalService(gate).create_journal_entry(
            tenant_id, request, deadline
        )
    except LedgerError as e:
        raise to_http_error(e)


@router.get("", response_model=JournalEntryPage)
def list_journal_entries(
    tenant_id: str,
    account_id: str | None = None,
    from_date: datetime | None = None,
    to_date: datetime | None = None,
    page: int = 1,
    page_size: int = 50,
    gate: AccessGate = Depends(get_gate),
    deadline: Deadline = Depends(get_deadline),
):
    try:
        return JournalService(gate).list_journal_entries(
            tenant_id,
            account_id=account_id,
            from_date=from_date,
            to_date=to_date,
            page=page,
            page_size=page_size,
            deadline=deadline,
        )
    except LedgerError as e:
        raise to_http_error(e)


@router.get("/{entry_id}", response_model=JournalEntryResponse)
def get_journal_entry(
    tenant_id: str,
    entry_id: str,
    gate: AccessGate = Depends(get_gate),
    deadline: Deadline = Depends(get_deadline),
):
    try:
        return JournalService(gate).get_journal_entry(tenant_id, entry_id, deadline)
    except LedgerError as e:
        raise to_http_error(e)
