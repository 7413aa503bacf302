"""
Chart of accounts API endpoints.

Every route is nested under a tenant; the tenant id in the path is
what the service scopes the whole request to.
"""

from fastapi import APIRouter, Depends

from tenant_ledger.access_gate import AccessGate
from tenant_ledger.api.dependencies import get_gate, get_deadline
from tenant_ledger.api.errors import to_http_error
from tenant_ledger.deadline import Deadline
from tenant_ledger.errors import LedgerError
from tenant_ledger.schemas.account import (
    AccountCreate,
    AccountResponse,
    AccountPage,
    AccountBalanceResponse,
)
from tenant_ledger.services.account_service import AccountService

router = APIRouter(prefix="/tenants/{tenant_id}/accounts", tags=["Accounts"])


@router.post("", response_model=AccountResponse, status_code=201)
def create_account(
    tenant_id: str,
    request: AccountCreate,
    gate: AccessGate = Depends(get_gate),
    deadline: Deadline = Depends(get_deadline),
):
    """
    Create an account in the tenant's chart of accounts.

    Its balance starts at zero on both sides.
    """
    try:
        return AccountService(gate).create_account(tenant_id, request, deadline)
    except LedgerError as e:
        raise to_http_error(e)


@router.get("", response_model=AccountPage)
def list_accounts(
    tenant_id: str,
    account_type_id: int | None = None,
    currency_code: str | None = None,
    page: int = 1,
    page_size: int = 50,
    gate: AccessGate = Depends(get_gate),
    deadline: Deadline = Depends(get_deadline),
):
    try:
        return AccountService(gate).list_accounts(
            tenant_id,
            account_type_id=account_type_id,
            currency_code=currency_code,
            page=page,
            page_size=page_size,
            deadline=deadline,
        )
    except LedgerError as e:
        raise to_http_error(e)


@router.get("/{account_id}", response_model=AccountResponse)
def get_account(
    tenant_id: str,
    account_id: str,
    gate: AccessGate = Depends(get_gate),
    deadline: Deadline = Depends(get_deadline),
):
    try:
        return AccountService(gate).get_account(tenant_id, account_id, deadline)
    except LedgerError as e:
        raise to_http_error(e)


@router.get("/{account_id}/balance", response_model=AccountBalanceResponse)
def get_account_balance(
    tenant_id: str,
    account_id: str,
    gate: AccessGate = Depends(get_gate),
    deadline: Deadline = Depends(get_deadline),
):
    """Get the running debit and credit totals for an account."""
    try:
        return AccountService(gate).get_balance(tenant_id, account_id, deadline)
    except LedgerError as e:
        raise to_http_error(e)
