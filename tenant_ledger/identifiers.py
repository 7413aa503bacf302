"""Parsing of caller-supplied identifiers."""

import uuid

from tenant_ledger.errors import InvalidInputError


def parse_uuid(value, what: str = "ID") -> uuid.UUID:
    """
    Accept a UUID or its string form, raise InvalidInputError otherwise.

    `what` names the field in the error message ("invalid tenant ID").
    """
    if isinstance(value, uuid.UUID):
        return value
    if not isinstance(value, str):
        raise InvalidInputError(f"invalid {what}")
    try:
        return uuid.UUID(value)
    except ValueError:
        raise InvalidInputError(f"invalid {what}") from None
