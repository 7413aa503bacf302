"""
Tests for the TenantService (tenant directory).
"""

import uuid

import pytest

from tenant_ledger.errors import InvalidInputError, NotFoundError


class TestCreateTenant:

    def test_create_tenant_succeeds(self, tenant_service):
        tenant = tenant_service.create_tenant("Acme")

        assert tenant.id is not None
        assert tenant.name == "Acme"
        assert tenant.created_at is not None

    def test_blank_name_rejected(self, tenant_service):
        with pytest.raises(InvalidInputError, match="name is required"):
            tenant_service.create_tenant("   ")

    def test_empty_name_rejected(self, tenant_service):
        with pytest.raises(InvalidInputError):
            tenant_service.create_tenant("")

    def test_duplicate_names_allowed(self, tenant_service):
        first = tenant_service.create_tenant("Acme")
        second = tenant_service.create_tenant("Acme")

        assert first.id != second.id


class TestGetTenant:

    def test_get_existing_tenant(self, tenant_service):
        created = tenant_service.create_tenant("Acme")

        found = tenant_service.get_tenant(created.id)
        assert found.id == created.id
        assert found.name == "Acme"

    def test_get_by_string_id(self, tenant_service):
        created = tenant_service.create_tenant("Acme")

        found = tenant_service.get_tenant(str(created.id))
        assert found.id == created.id

    def test_unknown_tenant_not_found(self, tenant_service):
        with pytest.raises(NotFoundError):
            tenant_service.get_tenant(uuid.uuid4())

    def test_malformed_id_rejected(self, tenant_service):
        with pytest.raises(InvalidInputError, match="invalid tenant ID"):
            tenant_service.get_tenant("not-a-uuid")


class TestGetTenantByName:

    def test_lookup_by_name(self, tenant_service):
        created = tenant_service.create_tenant("Globex")

        found = tenant_service.get_tenant_by_name("Globex")
        assert found.id == created.id

    def test_unknown_name_not_found(self, tenant_service):
        with pytest.raises(NotFoundError):
            tenant_service.get_tenant_by_name("Nobody")

    def test_duplicate_name_returns_earliest(self, tenant_service):
        first = tenant_service.create_tenant("Acme")
        tenant_service.create_tenant("Acme")
        tenant_service.create_tenant("Acme")

        found = tenant_service.get_tenant_by_name("Acme")
        assert found.id == first.id
