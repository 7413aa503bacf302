"""
Pydantic schemas for journal entry operations.

Amounts are carried as strings on the way in. The journal engine
parses them as exact decimals and reports a bad amount with the
index of the line it came from.
"""

import uuid
from datetime import datetime
from decimal import Decimal
from typing import Any

from pydantic import BaseModel, Field, field_validator


# --- Request Schemas ---

class JournalLineCreate(BaseModel):
    """A single line of a journal entry."""
    account_id: str
    debit: str = "0"
    credit: str = "0"
    description: str = ""

    @field_validator("account_id", mode="before")
    @classmethod
    def account_id_as_string(cls, v: Any) -> Any:
        if isinstance(v, uuid.UUID):
            return str(v)
        return v

    @field_validator("debit", "credit", mode="before")
    @classmethod
    def amount_as_string(cls, v: Any) -> Any:
        # Accept Decimal/int for convenience; float is refused because
        # it cannot represent most amounts exactly.
        if isinstance(v, (Decimal, int)) and not isinstance(v, bool):
            return str(v)
        if v is None:
            return "0"
        return v


class JournalEntryCreate(BaseModel):
    """
    A complete journal entry: header plus lines that must balance.

    metadata may be a dict or a JSON object string.
    """
    reference_number: str = Field(default="", max_length=100)
    description: str = ""
    entry_date: datetime | None = None
    metadata: dict[str, Any] | str | None = None
    lines: list[JournalLineCreate] = Field(default_factory=list)


# --- Response Schemas ---

class JournalEntryLineResponse(BaseModel):
    id: uuid.UUID
    account_id: uuid.UUID
    line_number: int
    debit: Decimal
    credit: Decimal
    description: str
    created_at: datetime

    model_config = {"from_attributes": True}


class JournalEntryResponse(BaseModel):
    id: uuid.UUID
    tenant_id: uuid.UUID
    reference_number: str
    description: str
    entry_date: datetime
    metadata: dict[str, Any] | None = Field(
        default=None, validation_alias="entry_metadata"
    )
    lines: list[JournalEntryLineResponse]
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class JournalEntryPage(BaseModel):
    items: list[JournalEntryResponse]
    total_count: int
    page: int
    page_size: int
