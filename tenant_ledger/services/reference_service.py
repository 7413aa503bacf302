"""
Reference data service: account types and currencies.

Both catalogs are global and read-only at runtime. The seed data
below is also what the initial migration inserts.
"""

from sqlalchemy import select
from sqlalchemy.orm import Session

from tenant_ledger.access_gate import AccessGate
from tenant_ledger.deadline import Deadline
from tenant_ledger.models.enums import NormalBalance
from tenant_ledger.models.reference import AccountType, Currency
from tenant_ledger.schemas.reference import AccountTypeResponse, CurrencyResponse


ACCOUNT_TYPES = [
    (1, "ASSET", "Asset", NormalBalance.DEBIT),
    (2, "LIABILITY", "Liability", NormalBalance.CREDIT),
    (3, "EQUITY", "Equity", NormalBalance.CREDIT),
    (4, "REVENUE", "Revenue", NormalBalance.CREDIT),
    (5, "EXPENSE", "Expense", NormalBalance.DEBIT),
]

CURRENCIES = [
    (1, "USD", "US Dollar", "$", 2),
    (2, "EUR", "Euro", "€", 2),
    (3, "GBP", "British Pound", "£", 2),
    (4, "JPY", "Japanese Yen", "¥", 0),
    (5, "IRR", "Iranian Rial", "﷼", 0),
]


def seed_reference_data(db: Session) -> None:
    """Insert any missing account types and currencies. Idempotent."""
    existing_types = set(db.execute(select(AccountType.code)).scalars())
    for type_id, code, name, normal_balance in ACCOUNT_TYPES:
        if code not in existing_types:
            db.add(AccountType(
                id=type_id, code=code, name=name, normal_balance=normal_balance,
            ))

    existing_currencies = set(db.execute(select(Currency.code)).scalars())
    for currency_id, code, name, symbol, precision in CURRENCIES:
        if code not in existing_currencies:
            db.add(Currency(
                id=currency_id, code=code, name=name,
                symbol=symbol, precision=precision,
            ))

    db.flush()


class ReferenceService:

    def __init__(self, gate: AccessGate):
        self.gate = gate

    def list_account_types(
        self, deadline: Deadline | None = None
    ) -> list[AccountTypeResponse]:
        """All account types, ordered by id."""
        with self.gate.directory(deadline) as db:
            rows = db.execute(
                select(AccountType).order_by(AccountType.id)
            ).scalars().all()
            return [AccountTypeResponse.model_validate(r) for r in rows]

    def list_currencies(
        self, deadline: Deadline | None = None
    ) -> list[CurrencyResponse]:
        """All currencies, ordered by code."""
        with self.gate.directory(deadline) as db:
            rows = db.execute(
                select(Currency).order_by(Currency.code)
            ).scalars().all()
            return [CurrencyResponse.model_validate(r) for r in rows]
