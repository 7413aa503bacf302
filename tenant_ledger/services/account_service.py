"""
Account service: manages a tenant's chart of accounts.

Opening an account also opens its balance row in the balance ledger,
in the same transaction, so an account never exists without a
balance. Every method runs inside a tenant scope from the access
gate; accounts of other tenants are invisible to it.
"""

import logging

from sqlalchemy import select, func

from tenant_ledger.access_gate import AccessGate, ScopedSession
from tenant_ledger.deadline import Deadline
from tenant_ledger.errors import (
    FailedPreconditionError,
    InvalidInputError,
    NotFoundError,
)
from tenant_ledger.identifiers import parse_uuid
from tenant_ledger.models.account import Account
from tenant_ledger.models.reference import AccountType, Currency
from tenant_ledger.schemas.account import (
    AccountCreate,
    AccountResponse,
    AccountPage,
    AccountBalanceResponse,
)
from tenant_ledger.services.balance_ledger import BalanceLedger
from tenant_ledger.services.pagination import clamp_page

logger = logging.getLogger(__name__)


def load_account(db: ScopedSession, account_id) -> Account:
    """Fetch an account visible in this scope or raise NotFoundError."""
    account_id = parse_uuid(account_id, "account ID")
    account = db.execute(
        select(Account).where(Account.id == account_id)
    ).scalar_one_or_none()

    if account is None:
        raise NotFoundError(f"account {account_id} not found")
    return account


class AccountService:

    def __init__(self, gate: AccessGate):
        self.gate = gate

    def create_account(
        self, tenant_id, request: AccountCreate, deadline: Deadline | None = None
    ) -> AccountResponse:
        """
        Create an account and its zero balance.

        Validates required fields, the account type and currency, and
        the optional parent. The parent must be an account of the same
        tenant; since parents always exist before their children and
        accounts are never re-parented, the hierarchy cannot contain
        cycles.
        """
        account_number = (request.account_number or "").strip()
        name = (request.name or "").strip()
        if not account_number:
            raise InvalidInputError("account number is required")
        if not name:
            raise InvalidInputError("account name is required")

        parent_id = None
        if request.parent_account_id is not None:
            parent_id = parse_uuid(request.parent_account_id, "parent account ID")

        with self.gate.scope(tenant_id, deadline) as db:
            self._validate_reference_data(db, request)

            if parent_id is not None:
                try:
                    load_account(db, parent_id)
                except NotFoundError:
                    raise InvalidInputError(
                        f"parent account {parent_id} not found"
                    ) from None

            duplicate = db.execute(
                select(Account.id).where(
                    Account.account_number == account_number
                )
            ).first()
            if duplicate:
                raise FailedPreconditionError(
                    f"account number '{account_number}' already exists"
                )

            account = Account(
                tenant_id=db.tenant_id,
                account_number=account_number,
                name=name,
                description=request.description,
                account_type_id=request.account_type_id,
                currency_code=request.currency_code,
                parent_account_id=parent_id,
            )
            db.add(account)
            db.flush()

            BalanceLedger(db).open_balance(account)
            db.flush()

            response = AccountResponse.model_validate(account)

        logger.info(
            "Created account %s (%s) for tenant %s",
            response.id, response.account_number, response.tenant_id,
        )
        return response

    def get_account(
        self, tenant_id, account_id, deadline: Deadline | None = None
    ) -> AccountResponse:
        with self.gate.scope(tenant_id, deadline) as db:
            return AccountResponse.model_validate(load_account(db, account_id))

    def list_accounts(
        self,
        tenant_id,
        account_type_id: int | None = None,
        currency_code: str | None = None,
        page: int = 1,
        page_size: int = 50,
        deadline: Deadline | None = None,
    ) -> AccountPage:
        """
        List accounts, newest first (ties broken by id, descending).

        Both filters are optional and combine with AND.
        """
        window = clamp_page(page, page_size)

        with self.gate.scope(tenant_id, deadline) as db:
            conditions = [db.owned(Account)]
            if account_type_id is not None:
                conditions.append(Account.account_type_id == account_type_id)
            if currency_code is not None:
                conditions.append(Account.currency_code == currency_code)

            total_count = db.execute(
                select(func.count(Account.id)).where(*conditions)
            ).scalar_one()

            accounts = db.execute(
                select(Account)
                .where(*conditions)
                .order_by(Account.created_at.desc(), Account.id.desc())
                .limit(window.page_size)
                .offset(window.offset)
            ).scalars().all()

            return AccountPage(
                items=[AccountResponse.model_validate(a) for a in accounts],
                total_count=total_count,
                page=window.page,
                page_size=window.page_size,
            )

    def get_balance(
        self, tenant_id, account_id, deadline: Deadline | None = None
    ) -> AccountBalanceResponse:
        """
        Return the running totals for an account.

        The balance is read from the denormalized row, never computed
        by summing lines.
        """
        account_id = parse_uuid(account_id, "account ID")

        with self.gate.scope(tenant_id, deadline) as db:
            balance = BalanceLedger(db).get(account_id)
            return AccountBalanceResponse.model_validate(balance)

    def _validate_reference_data(self, db: ScopedSession, request: AccountCreate):
        account_type = db.execute(
            select(AccountType.id).where(AccountType.id == request.account_type_id)
        ).first()
        if account_type is None:
            raise InvalidInputError(
                f"unknown account type {request.account_type_id}"
            )

        currency = db.execute(
            select(Currency.id).where(Currency.code == request.currency_code)
        ).first()
        if currency is None:
            raise InvalidInputError(
                f"unknown currency '{request.currency_code}'"
            )
