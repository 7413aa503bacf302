"""
Tenant directory: creates and resolves tenants.

Tenants are the root of isolation, so these operations run on a
directory session rather than a tenant scope.
"""

import logging

from sqlalchemy import select

from tenant_ledger.access_gate import AccessGate
from tenant_ledger.deadline import Deadline
from tenant_ledger.errors import InvalidInputError, NotFoundError
from tenant_ledger.identifiers import parse_uuid
from tenant_ledger.models.tenant import Tenant
from tenant_ledger.schemas.tenant import TenantResponse

logger = logging.getLogger(__name__)


class TenantService:

    def __init__(self, gate: AccessGate):
        self.gate = gate

    def create_tenant(
        self, name: str, deadline: Deadline | None = None
    ) -> TenantResponse:
        """
        Create a new tenant.

        Names are not unique; creating two tenants with the same name
        is allowed.
        """
        if not name or not name.strip():
            raise InvalidInputError("tenant name is required")

        with self.gate.directory(deadline) as db:
            tenant = Tenant(name=name)
            db.add(tenant)
            db.flush()
            response = TenantResponse.model_validate(tenant)

        logger.info("Created tenant %s (%s)", response.id, response.name)
        return response

    def get_tenant(
        self, tenant_id, deadline: Deadline | None = None
    ) -> TenantResponse:
        tenant_id = parse_uuid(tenant_id, "tenant ID")

        with self.gate.directory(deadline) as db:
            tenant = db.execute(
                select(Tenant).where(Tenant.id == tenant_id)
            ).scalar_one_or_none()
            if tenant is None:
                raise NotFoundError(f"tenant {tenant_id} not found")
            return TenantResponse.model_validate(tenant)

    def get_tenant_by_name(
        self, name: str, deadline: Deadline | None = None
    ) -> TenantResponse:
        """
        Look a tenant up by name.

        When several tenants share the name, the one created first is
        returned (ties broken by id), so the answer is stable.
        """
        with self.gate.directory(deadline) as db:
            tenant = db.execute(
                select(Tenant)
                .where(Tenant.name == name)
                .order_by(Tenant.created_at, Tenant.id)
                .limit(1)
            ).scalar_one_or_none()
            if tenant is None:
                raise NotFoundError(f"tenant {name!r} not found")
            return TenantResponse.model_validate(tenant)
