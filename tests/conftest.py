"""
Shared test fixtures.

Sets up an isolated SQLite database so tests never touch the real
database. Tables are created and the reference catalog seeded before
each test, and everything is dropped afterwards, so no test data
persists between tests.
"""

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

from tenant_ledger.main import app
from tenant_ledger.access_gate import AccessGate
from tenant_ledger.api.dependencies import get_gate
from tenant_ledger.models.base import Base, create_db_engine, get_db
from tenant_ledger.services.account_service import AccountService
from tenant_ledger.services.journal_service import JournalService
from tenant_ledger.services.reference_service import (
    ReferenceService,
    seed_reference_data,
)
from tenant_ledger.services.tenant_service import TenantService


# Use a SQLite file rather than :memory: so that several pooled
# connections (and threads) see the same database.
TEST_DATABASE_URL = "sqlite:///./test.db"

engine = create_db_engine(TEST_DATABASE_URL)

TestSessionLocal = sessionmaker(
    bind=engine,
    autocommit=False,
    autoflush=False,
)

test_gate = AccessGate(engine, set_tenant_context=False)


@pytest.fixture(autouse=True)
def setup_database():
    """
    Create all tables and seed reference data before each test,
    drop them after.
    """
    Base.metadata.create_all(bind=engine)
    with test_gate.directory() as db:
        seed_reference_data(db)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def gate():
    return test_gate


@pytest.fixture
def db_session():
    """Provide a plain database session for infrastructure checks."""
    session = TestSessionLocal()
    try:
        yield session
    finally:
        session.rollback()
        session.close()


@pytest.fixture
def tenant_service(gate):
    return TenantService(gate)


@pytest.fixture
def account_service(gate):
    return AccountService(gate)


@pytest.fixture
def journal_service(gate):
    return JournalService(gate)


@pytest.fixture
def reference_service(gate):
    return ReferenceService(gate)


@pytest.fixture
def client(db_session):
    """
    Provide a test client with the test database.

    We override get_gate and get_db so the FastAPI app uses the
    test engine instead of the configured database.
    """
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_gate] = lambda: test_gate
    yield TestClient(app)
    app.dependency_overrides.clear()
