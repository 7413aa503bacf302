"""
Pydantic schemas for chart of accounts operations.

Required-field checks (non-empty account number and name, parseable
parent reference) are done by AccountService, not here, so that they
surface as InvalidInputError like every other validation failure.
"""

import uuid
from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field


# --- Request Schemas ---

class AccountCreate(BaseModel):
    """Request to create a new account in a tenant's chart."""
    account_number: str = Field(max_length=50)
    name: str = Field(max_length=255)
    description: str | None = None
    account_type_id: int
    currency_code: str = Field(default="USD", max_length=3)
    # Kept as a string: a malformed reference is reported by the service
    parent_account_id: str | None = None


# --- Response Schemas ---

class AccountResponse(BaseModel):
    """Account in API responses."""
    id: uuid.UUID
    tenant_id: uuid.UUID
    account_number: str
    name: str
    description: str | None
    account_type_id: int
    currency_code: str
    parent_account_id: uuid.UUID | None
    is_active: bool
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class AccountPage(BaseModel):
    """One page of accounts plus the total matching the filters."""
    items: list[AccountResponse]
    total_count: int
    page: int
    page_size: int


class AccountBalanceResponse(BaseModel):
    """Running debit/credit totals for an account."""
    account_id: uuid.UUID
    debit_balance: Decimal
    credit_balance: Decimal
    net_balance: Decimal
    updated_at: datetime

    model_config = {"from_attributes": True}
