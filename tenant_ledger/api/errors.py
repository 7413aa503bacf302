"""
Mapping from ledger error kinds to HTTP status codes.
"""

from fastapi import HTTPException

from tenant_ledger.errors import (
    LedgerError,
    InvalidInputError,
    NotFoundError,
    FailedPreconditionError,
    UnavailableError,
    OperationCancelledError,
)

# Most specific first: DeadlineExceededError is an UnavailableError
STATUS_BY_ERROR = [
    (InvalidInputError, 400),
    (NotFoundError, 404),
    (FailedPreconditionError, 422),
    (UnavailableError, 503),
    (OperationCancelledError, 499),
]


def to_http_error(error: LedgerError) -> HTTPException:
    """Build the HTTPException for a ledger error (500 if unmapped)."""
    status_code = 500
    for error_type, code in STATUS_BY_ERROR:
        if isinstance(error, error_type):
            status_code = code
            break
    return HTTPException(
        status_code=status_code,
        detail={"code": error.code, "message": error.message},
    )
