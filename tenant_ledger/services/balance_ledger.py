"""
Balance ledger: the running debit/credit totals per account.

A balance row is opened together with its account and afterwards
changes only through apply_deltas(), which the journal service calls
inside the same transaction that writes the journal lines. Nothing
else writes to account_balances.
"""

import uuid
from collections import defaultdict
from decimal import Decimal

from sqlalchemy import select, update

from tenant_ledger.access_gate import ScopedSession
from tenant_ledger.errors import (
    FailedPreconditionError,
    InternalError,
    NotFoundError,
)
from tenant_ledger.models.account import Account
from tenant_ledger.models.account_balance import AccountBalance
from tenant_ledger.models.base import MAX_MONEY, utcnow

ZERO = Decimal("0")


class BalanceLedger:
    """
    Balance operations for one scoped session.

    Like the other services this never commits; the access gate owns
    the transaction boundary.
    """

    def __init__(self, db: ScopedSession):
        self.db = db

    def open_balance(self, account: Account) -> AccountBalance:
        """Create the zeroed balance row for a freshly added account."""
        balance = AccountBalance(
            account_id=account.id,
            tenant_id=account.tenant_id,
            debit_balance=ZERO,
            credit_balance=ZERO,
            updated_at=utcnow(),
        )
        self.db.add(balance)
        return balance

    def get(self, account_id: uuid.UUID) -> AccountBalance:
        balance = self.db.execute(
            select(AccountBalance).where(AccountBalance.account_id == account_id)
        ).scalar_one_or_none()

        if balance is None:
            raise NotFoundError(f"balance not found for account {account_id}")
        return balance

    def apply_deltas(
        self, deltas: list[tuple[uuid.UUID, Decimal, Decimal]]
    ) -> None:
        """
        Add (account_id, debit, credit) amounts to the running totals.

        Amounts are first summed per account. Each balance row is then
        read under a row lock (SELECT ... FOR UPDATE), added to in
        exact decimal arithmetic, and written back, so a concurrent
        entry waits for the lock instead of reading a stale total.
        Accounts are locked in ascending id order so two entries over
        the same accounts always lock them in the same order. On
        SQLite the FOR UPDATE is a no-op; BEGIN IMMEDIATE already
        serializes writers.
        """
        totals: dict[uuid.UUID, list[Decimal]] = defaultdict(lambda: [ZERO, ZERO])
        for account_id, debit, credit in deltas:
            totals[account_id][0] += debit
            totals[account_id][1] += credit

        now = utcnow()
        for account_id in sorted(totals, key=str):
            debit, credit = totals[account_id]
            current = self.db.execute(
                select(AccountBalance.debit_balance, AccountBalance.credit_balance)
                .where(
                    AccountBalance.account_id == account_id,
                    self.db.owned(AccountBalance),
                )
                .with_for_update()
            ).one_or_none()
            if current is None:
                raise InternalError(
                    f"balance row missing for account {account_id}"
                )

            new_debit = current.debit_balance + debit
            new_credit = current.credit_balance + credit
            if new_debit > MAX_MONEY or new_credit > MAX_MONEY:
                raise FailedPreconditionError(
                    f"balance of account {account_id} would exceed {MAX_MONEY}"
                )

            result = self.db.execute(
                update(AccountBalance)
                .where(
                    AccountBalance.account_id == account_id,
                    self.db.owned(AccountBalance),
                )
                .values(
                    debit_balance=new_debit,
                    credit_balance=new_credit,
                    updated_at=now,
                )
                .execution_options(synchronize_session=False)
            )
            if result.rowcount != 1:
                raise InternalError(
                    f"balance row missing for account {account_id}"
                )
