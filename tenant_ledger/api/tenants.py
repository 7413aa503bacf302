"""
Tenant directory API endpoints.
"""

from fastapi import APIRouter, Depends

from tenant_ledger.access_gate import AccessGate
from tenant_ledger.api.dependencies import get_gate, get_deadline
from tenant_ledger.api.errors import to_http_error
from tenant_ledger.deadline import Deadline
from tenant_ledger.errors import LedgerError
from tenant_ledger.schemas.tenant import TenantCreate, TenantResponse
from tenant_ledger.services.tenant_service import TenantService

router = APIRouter(prefix="/tenants", tags=["Tenants"])


@router.post("", response_model=TenantResponse, status_code=201)
def create_tenant(
    request: TenantCreate,
    gate: AccessGate = Depends(get_gate),
    deadline: Deadline = Depends(get_deadline),
):
    """Create a new tenant. Names need not be unique."""
    try:
        return TenantService(gate).create_tenant(request.name, deadline)
    except LedgerError as e:
        raise to_http_error(e)


@router.get("", response_model=TenantResponse)
def get_tenant_by_name(
    name: str,
    gate: AccessGate = Depends(get_gate),
    deadline: Deadline = Depends(get_deadline),
):
    """Look a tenant up by name (earliest created wins on duplicates)."""
    try:
        return TenantService(gate).get_tenant_by_name(name, deadline)
    except LedgerError as e:
        raise to_http_error(e)


@router.get("/{tenant_id}", response_model=TenantResponse)
def get_tenant(
    tenant_id: str,
    gate: AccessGate = Depends(get_gate),
    deadline: Deadline = Depends(get_deadline),
):
    try:
        return TenantService(gate).get_tenant(tenant_id, deadline)
    except LedgerError as e:
        raise to_http_error(e)
