"""
Shared enumerations for database models.

Using Python enums mapped to database enums ensures that
only valid values can be stored.
"""

import enum


class NormalBalance(str, enum.Enum):
    """Side on which an account type's balance conventionally grows."""
    DEBIT = "DEBIT"
    CREDIT = "CREDIT"
