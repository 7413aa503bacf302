"""
Tests for the AccessGate.

These check isolation at the session level, independent of the
services: rows of another tenant are invisible even when their id is
known, writes for another tenant are refused, and failures inside a
unit of work roll back and come out as ledger errors.
"""

import time
import uuid

import pytest
from sqlalchemy import select, func
from sqlalchemy.exc import OperationalError

from tenant_ledger.access_gate import AccessGate, ScopedSession
from tenant_ledger.deadline import Deadline
from tenant_ledger.errors import (
    DeadlineExceededError,
    FailedPreconditionError,
    InvalidInputError,
    NotFoundError,
    TenantScopeViolation,
    UnavailableError,
)
from tenant_ledger.models.account import Account
from tenant_ledger.models.base import create_db_engine
from tenant_ledger.models.tenant import Tenant
from tenant_ledger.schemas.account import AccountCreate

TEST_DATABASE_URL = "sqlite:///./test.db"


def make_account(account_service, tenant_id, number="1000", name="Cash"):
    return account_service.create_account(tenant_id, AccountCreate(
        account_number=number, name=name, account_type_id=1,
    ))


@pytest.fixture
def two_tenants(tenant_service, account_service):
    acme = tenant_service.create_tenant("Acme")
    globex = tenant_service.create_tenant("Globex")
    acme_cash = make_account(account_service, acme.id)
    globex_cash = make_account(account_service, globex.id)
    return acme, globex, acme_cash, globex_cash


class TestReadIsolation:

    def test_known_id_of_other_tenant_is_invisible(self, gate, two_tenants):
        acme, _, _, globex_cash = two_tenants

        with gate.scope(acme.id) as db:
            found = db.execute(
                select(Account).where(Account.id == globex_cash.id)
            ).scalar_one_or_none()
            assert found is None

    def test_session_get_is_filtered(self, gate, two_tenants):
        acme, _, _, globex_cash = two_tenants

        with gate.scope(acme.id) as db:
            assert db.get(Account, globex_cash.id) is None

    def test_unfiltered_select_sees_only_own_rows(self, gate, two_tenants):
        acme, _, acme_cash, _ = two_tenants

        with gate.scope(acme.id) as db:
            accounts = db.execute(select(Account)).scalars().all()
            assert [a.id for a in accounts] == [acme_cash.id]

    def test_relationship_load_stays_in_scope(self, gate, two_tenants):
        acme, _, acme_cash, _ = two_tenants

        with gate.scope(acme.id) as db:
            account = db.get(Account, acme_cash.id)
            assert account.balance.tenant_id == acme.id

    def test_tenants_table_is_global(self, gate, two_tenants):
        acme, _, _, _ = two_tenants

        with gate.scope(acme.id) as db:
            count = db.execute(select(func.count(Tenant.id))).scalar_one()
            assert count == 2


class TestWriteGuard:

    def test_new_rows_are_stamped_with_bound_tenant(self, gate, two_tenants):
        acme, _, _, _ = two_tenants

        with gate.scope(acme.id) as db:
            account = Account(
                account_number="1100", name="Petty Cash",
                account_type_id=1, currency_code="USD",
            )
            db.add(account)
            db.flush()
            assert account.tenant_id == acme.id

    def test_insert_for_other_tenant_refused(self, gate, two_tenants):
        acme, globex, _, _ = two_tenants

        with pytest.raises(TenantScopeViolation):
            with gate.scope(acme.id) as db:
                db.add(Account(
                    tenant_id=globex.id, account_number="1100", name="Sneaky",
                    account_type_id=1, currency_code="USD",
                ))
                db.flush()

    def test_reassigning_tenant_refused(self, gate, account_service, two_tenants):
        acme, globex, acme_cash, _ = two_tenants

        with pytest.raises(TenantScopeViolation):
            with gate.scope(acme.id) as db:
                account = db.get(Account, acme_cash.id)
                account.tenant_id = globex.id
                db.flush()

        # Rolled back: still Acme's
        assert account_service.get_account(acme.id, acme_cash.id).tenant_id == acme.id


class TestDirectorySession:

    def test_tenant_scoped_model_refused(self, gate, two_tenants):
        with pytest.raises(TenantScopeViolation):
            with gate.directory() as db:
                db.execute(select(Account))

    def test_global_tables_readable(self, gate, two_tenants):
        with gate.directory() as db:
            count = db.execute(select(func.count(Tenant.id))).scalar_one()
            assert count == 2


class TestUnitOfWork:

    def test_unknown_tenant_not_found(self, gate):
        with pytest.raises(NotFoundError):
            with gate.scope(uuid.uuid4()):
                pass

    def test_malformed_tenant_id_rejected(self, gate):
        with pytest.raises(InvalidInputError, match="invalid tenant ID"):
            with gate.scope("acme"):
                pass

    def test_error_inside_rolls_back(self, gate, account_service, two_tenants):
        acme, _, _, _ = two_tenants

        with pytest.raises(RuntimeError):
            with gate.scope(acme.id) as db:
                db.add(Account(
                    account_number="1100", name="Petty Cash",
                    account_type_id=1, currency_code="USD",
                ))
                db.flush()
                raise RuntimeError("boom")

        assert account_service.list_accounts(acme.id).total_count == 1

    def test_integrity_error_becomes_failed_precondition(self, gate, two_tenants):
        acme, _, _, _ = two_tenants

        with pytest.raises(FailedPreconditionError):
            with gate.scope(acme.id) as db:
                # Same number as the fixture's account, bypassing the
                # service-level duplicate check.
                db.add(Account(
                    account_number="1000", name="Duplicate",
                    account_type_id=1, currency_code="USD",
                ))
                db.flush()

    def test_pool_exhaustion_is_unavailable(self, two_tenants):
        acme, _, _, _ = two_tenants
        small_engine = create_db_engine(
            TEST_DATABASE_URL, pool_size=1, max_overflow=0, pool_timeout=0.2
        )
        small_gate = AccessGate(small_engine, set_tenant_context=False)
        try:
            with small_gate.scope(acme.id):
                with pytest.raises(UnavailableError):
                    with small_gate.scope(acme.id):
                        pass
        finally:
            small_engine.dispose()

    def test_checkout_wait_bounded_by_deadline(self, two_tenants):
        acme, _, _, _ = two_tenants
        small_engine = create_db_engine(
            TEST_DATABASE_URL, pool_size=1, max_overflow=0, pool_timeout=5
        )
        small_gate = AccessGate(small_engine, set_tenant_context=False)
        try:
            with small_gate.scope(acme.id):
                started = time.monotonic()
                with pytest.raises(UnavailableError):
                    with small_gate.scope(acme.id, Deadline.after(0.2)):
                        pass
                assert time.monotonic() - started < 2
        finally:
            small_engine.dispose()

    def test_pool_timeout_applies_without_deadline(self, two_tenants):
        acme, _, _, _ = two_tenants
        small_engine = create_db_engine(
            TEST_DATABASE_URL, pool_size=1, max_overflow=0, pool_timeout=0.3
        )
        small_gate = AccessGate(small_engine, set_tenant_context=False)
        try:
            with small_gate.scope(acme.id):
                started = time.monotonic()
                with pytest.raises(UnavailableError) as info:
                    with small_gate.scope(acme.id, Deadline.after(30)):
                        pass
                assert time.monotonic() - started >= 0.25
                assert not isinstance(info.value, DeadlineExceededError)
        finally:
            small_engine.dispose()

    def test_failed_rollback_keeps_original_error(
        self, gate, monkeypatch, two_tenants
    ):
        acme, _, _, _ = two_tenants

        def broken_rollback(session):
            raise OperationalError("ROLLBACK", {}, Exception("connection lost"))

        monkeypatch.setattr(ScopedSession, "rollback", broken_rollback)

        with pytest.raises(FailedPreconditionError):
            with gate.scope(acme.id) as db:
                db.add(Account(
                    account_number="1000", name="Duplicate",
                    account_type_id=1, currency_code="USD",
                ))
                db.flush()

        with pytest.raises(NotFoundError, match="no such thing"):
            with gate.scope(acme.id):
                raise NotFoundError("no such thing")
