"""
Shared FastAPI dependencies.

Tests override get_gate with a gate bound to the test database,
the same way they override get_db.
"""

from functools import lru_cache

from tenant_ledger.access_gate import AccessGate
from tenant_ledger.config import get_settings
from tenant_ledger.deadline import Deadline
from tenant_ledger.models.base import get_engine


@lru_cache()
def _application_gate() -> AccessGate:
    return AccessGate(get_engine())


def get_gate() -> AccessGate:
    return _application_gate()


def get_deadline() -> Deadline:
    """A fresh deadline for each request, from REQUEST_TIMEOUT_SECONDS."""
    timeout = get_settings().REQUEST_TIMEOUT_SECONDS
    return Deadline.after(timeout) if timeout > 0 else Deadline.none()
