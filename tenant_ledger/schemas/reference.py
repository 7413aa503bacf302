"""
Pydantic schemas for reference data (account types, currencies).
"""

from pydantic import BaseModel

from tenant_ledger.models.enums import NormalBalance


class AccountTypeResponse(BaseModel):
    id: int
    code: str
    name: str
    normal_balance: NormalBalance

    model_config = {"from_attributes": True}


class CurrencyResponse(BaseModel):
    id: int
    code: str
    name: str
    symbol: str
    precision: int

    model_config = {"from_attributes": True}
