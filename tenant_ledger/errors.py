"""
Typed failures raised by the ledger services.

Every operation either succeeds completely or raises one of these.
Callers map the `code` to their own transport (the HTTP layer does
this in api/errors.py). Raw storage exceptions never escape the
access gate; they are translated into one of these kinds first.
"""


class LedgerError(Exception):
    """Base class for all ledger failures."""

    code = "UNKNOWN"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidInputError(LedgerError, ValueError):
    """Malformed or missing required field. Never retried."""

    code = "INVALID_INPUT"


class NotFoundError(LedgerError):
    """Entity does not exist within the caller's tenant scope."""

    code = "NOT_FOUND"


class FailedPreconditionError(LedgerError):
    """A business invariant would be violated (e.g. unbalanced entry)."""

    code = "FAILED_PRECONDITION"


class UnavailableError(LedgerError):
    """Session pool exhausted or store unreachable. Safe to retry."""

    code = "UNAVAILABLE"


class DeadlineExceededError(UnavailableError):
    """The caller's deadline passed before the work was committed."""

    code = "DEADLINE_EXCEEDED"


class OperationCancelledError(LedgerError):
    """The caller cancelled the operation before commit."""

    code = "CANCELLED"


class InternalError(LedgerError):
    """Unexpected storage fault."""

    code = "INTERNAL"


class TenantScopeViolation(InternalError):
    """A session tried to touch a row outside its bound tenant."""

    code = "TENANT_SCOPE_VIOLATION"
