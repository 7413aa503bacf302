"""
Reference data endpoints (global, not tenant-scoped).
"""

from fastapi import APIRouter, Depends

from tenant_ledger.access_gate import AccessGate
from tenant_ledger.api.dependencies import get_gate, get_deadline
from tenant_ledger.api.errors import to_http_error
from tenant_ledger.deadline import Deadline
from tenant_ledger.errors import LedgerError
from tenant_ledger.schemas.reference import AccountTypeResponse, CurrencyResponse
from tenant_ledger.services.reference_service import ReferenceService

router = APIRouter(tags=["Reference"])


@router.get("/account-types", response_model=list[AccountTypeResponse])
def list_account_types(
    gate: AccessGate = Depends(get_gate),
    deadline: Deadline = Depends(get_deadline),
):
    try:
        return ReferenceService(gate).list_account_types(deadline)
    except LedgerError as e:
        raise to_http_error(e)


@router.get("/currencies", response_model=list[CurrencyResponse])
def list_currencies(
    gate: AccessGate = Depends(get_gate),
    deadline: Deadline = Depends(get_deadline),
):
    try:
        return ReferenceService(gate).list_currencies(deadline)
    except LedgerError as e:
        raise to_http_error(e)
